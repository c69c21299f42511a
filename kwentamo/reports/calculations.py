"""
Aggregations behind the financial reports.

Revenue and COGS come from recorded sales (COGS is the ingredient cost booked
on each sale). Expenses in a date range are the amounts recorded in that
range; recurring-cost views use monthly equivalents instead.
"""
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Sum, Count, F

from kwentamo.catalog.models import Ingredient
from kwentamo.core import formulas
from kwentamo.expenses.models import Expense
from kwentamo.sales.models import Sale

ZERO = Decimal('0.00')
OPERATING_TYPES = ('FIXED', 'VARIABLE')


def filter_dates(queryset, field, date_from=None, date_to=None):
    if date_from:
        queryset = queryset.filter(**{f'{field}__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{field}__lte': date_to})
    return queryset


def sales_in_range(user, date_from=None, date_to=None):
    queryset = Sale.objects.all() if user is None else Sale.objects.filter(user=user)
    return filter_dates(queryset, 'sale_date', date_from, date_to)


def expenses_in_range(user, date_from=None, date_to=None):
    queryset = Expense.objects.all() if user is None else Expense.objects.filter(user=user)
    return filter_dates(queryset, 'expense_date', date_from, date_to)


def sales_figures(sales):
    totals = sales.aggregate(
        revenue=Sum('total_price'), cogs=Sum('cost_of_goods'), profit=Sum('profit'), count=Count('id')
    )
    return {
        'revenue': totals['revenue'] or ZERO,
        'cogs': totals['cogs'] or ZERO,
        'profit': totals['profit'] or ZERO,
        'count': totals['count'],
    }


def expense_total(expenses):
    return expenses.aggregate(total=Sum('amount'))['total'] or ZERO


def income_statement(user, date_from=None, date_to=None):
    sales = sales_figures(sales_in_range(user, date_from, date_to))
    expenses = expenses_in_range(user, date_from, date_to)
    operating = expenses.filter(expense_type__in=OPERATING_TYPES)
    other = expenses.filter(expense_type='OTHER')

    statement = formulas.generate_income_statement(
        sales_revenue=sales['revenue'],
        cogs=sales['cogs'],
        operating_expenses=expense_total(operating),
        other_expenses=expense_total(other),
    )
    labels = dict(Expense.CATEGORY_CHOICES)
    breakdown = [
        {'category': row['category'], 'label': labels.get(row['category'], row['category']),
         'amount': float(row['total'] or 0)}
        for row in operating.values('category').annotate(total=Sum('amount')).order_by('-total')
    ]
    return statement, breakdown


def recipe_profit_rows(sales):
    rows = []
    queryset = sales.values('recipe_id', 'recipe__name', 'recipe__selling_price').annotate(
        quantity=Sum('quantity'),
        revenue=Sum('total_price'),
        cogs=Sum('cost_of_goods'),
        profit=Sum('profit'),
        sales_count=Count('id'),
    ).order_by('-revenue')
    for row in queryset:
        revenue = row['revenue'] or ZERO
        profit = row['profit'] or ZERO
        rows.append({
            'recipe_id': row['recipe_id'],
            'recipe_name': row['recipe__name'],
            'selling_price': float(row['recipe__selling_price'] or 0),
            'quantity': row['quantity'] or 0,
            'revenue': float(revenue),
            'cogs': float(row['cogs'] or 0),
            'profit': float(profit),
            'profit_margin': float(formulas.calculate_net_profit_margin(profit, revenue)),
            'sales_count': row['sales_count'],
        })
    return rows


def recurring_costs(user):
    """Monthly-equivalent totals of every recorded expense, by type"""
    expenses = list(Expense.objects.filter(user=user).only('amount', 'frequency', 'expense_type'))
    by_type = {
        expense_type: formulas.total_monthly_expenses(e for e in expenses if e.expense_type == expense_type)
        for expense_type in ('FIXED', 'VARIABLE', 'OTHER')
    }
    by_type['TOTAL'] = formulas.total_monthly_expenses(expenses)
    return by_type


def low_stock_count(user=None):
    queryset = Ingredient.objects.filter(current_stock__lte=F('reorder_level'))
    if user is not None:
        queryset = queryset.filter(user=user)
    return queryset.count()


def month_start(day):
    return day.replace(day=1)


def previous_month_range(today):
    last_day = month_start(today) - timedelta(days=1)
    return month_start(last_day), last_day


def shift_month(first_of_month, months_back):
    """First of the month `months_back` months earlier; negative goes forward"""
    year, month = divmod(first_of_month.year * 12 + first_of_month.month - 1 - months_back, 12)
    return date(year, month + 1, 1)


def dashboard_summary(user, today):
    current_from = month_start(today)
    previous_from, previous_to = previous_month_range(today)

    current_sales = sales_figures(sales_in_range(user, current_from, today))
    current_expenses = expense_total(expenses_in_range(user, current_from, today))
    previous_sales = sales_figures(sales_in_range(user, previous_from, previous_to))
    previous_expenses = expense_total(expenses_in_range(user, previous_from, previous_to))

    gross_profit = formulas.calculate_gross_profit(current_sales['revenue'], current_sales['cogs'])
    net_profit = formulas.calculate_net_profit(gross_profit, current_expenses)

    return {
        'period': {'from': current_from.isoformat(), 'to': today.isoformat()},
        'revenue': float(current_sales['revenue']),
        'cogs': float(current_sales['cogs']),
        'expenses': float(current_expenses),
        'gross_profit': float(gross_profit),
        'gross_profit_margin': float(
            formulas.calculate_gross_profit_margin(current_sales['revenue'], current_sales['cogs'])
        ),
        'net_profit': float(net_profit),
        'net_profit_margin': float(formulas.calculate_net_profit_margin(net_profit, current_sales['revenue'])),
        'sales_count': current_sales['count'],
        'revenue_change': float(formulas.percent_change(current_sales['revenue'], previous_sales['revenue'])),
        'expenses_change': float(formulas.percent_change(current_expenses, previous_expenses)),
        'previous_period': {
            'from': previous_from.isoformat(),
            'to': previous_to.isoformat(),
            'revenue': float(previous_sales['revenue']),
            'expenses': float(previous_expenses),
        },
        'low_stock_count': low_stock_count(user),
    }


def chart_buckets(period, today):
    """(label, start, end) ranges: 7 days, 4 weeks or 6 months ending today"""
    if period == 'daily':
        return [
            (day.strftime('%b %d'), day, day)
            for day in (today - timedelta(days=offset) for offset in range(6, -1, -1))
        ]
    if period == 'weekly':
        buckets = []
        for index in range(3, -1, -1):
            end = today - timedelta(days=7 * index)
            start = end - timedelta(days=6)
            buckets.append((f"{start.strftime('%b %d')} - {end.strftime('%b %d')}", start, end))
        return buckets
    if period == 'monthly':
        current = month_start(today)
        buckets = []
        for index in range(5, -1, -1):
            start = shift_month(current, index)
            end = shift_month(start, -1) - timedelta(days=1)
            buckets.append((start.strftime('%b %Y'), start, min(end, today)))
        return buckets
    raise ValueError(f"Unknown chart period '{period}'")


def chart_series(user, period, today):
    series = []
    for label, start, end in chart_buckets(period, today):
        revenue = sales_figures(sales_in_range(user, start, end))['revenue']
        expenses = expense_total(expenses_in_range(user, start, end))
        series.append({
            'label': label,
            'start': start.isoformat(),
            'end': end.isoformat(),
            'revenue': float(revenue),
            'expenses': float(expenses),
            'profit': float(formulas.money(revenue - expenses)),
        })
    return series
