"""
Financial formulas for food business costing.

All functions are pure and work on Decimal. Inputs may be Decimal, int, float
or numeric strings; money results are rounded to centavos (2 places).
"""
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0')
HUNDRED = Decimal('100')

DEFAULT_OVERHEAD_RATE = Decimal('0.15')

# (multiplier, divisor) to convert an amount to its per-month equivalent
FREQUENCY_FACTORS = {
    'DAILY': (Decimal('30'), Decimal('1')),
    'WEEKLY': (Decimal('4'), Decimal('1')),
    'MONTHLY': (Decimal('1'), Decimal('1')),
    'QUARTERLY': (Decimal('1'), Decimal('3')),
    'YEARLY': (Decimal('1'), Decimal('12')),
}


def to_decimal(value):
    """Coerce a number (or None) to Decimal without float artifacts"""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value):
    """Round to 2 decimal places, half up"""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _ratio_percent(numerator, denominator):
    denominator = to_decimal(denominator)
    if denominator == ZERO:
        return ZERO
    return money(to_decimal(numerator) / denominator * HUNDRED)


# ---------------------------------------------------------------------------
# Recurring expenses
# ---------------------------------------------------------------------------

def _raw_monthly_equivalent(amount, frequency):
    multiplier, divisor = FREQUENCY_FACTORS.get(
        (frequency or 'MONTHLY').upper(), FREQUENCY_FACTORS['MONTHLY']
    )
    return to_decimal(amount) * multiplier / divisor


def monthly_equivalent(amount, frequency):
    """
    Normalise a recurring amount to a per-month figure.

    DAILY x30, WEEKLY x4, MONTHLY x1, QUARTERLY /3, YEARLY /12.
    Unknown or missing frequencies are treated as monthly.
    """
    return money(_raw_monthly_equivalent(amount, frequency))


def total_monthly_expenses(expenses):
    """
    Sum the monthly equivalents of a collection of expenses.

    Items may be model instances or dicts with `amount` and `frequency`.
    Rounding happens once, on the total.
    """
    total = ZERO
    for expense in expenses:
        if isinstance(expense, dict):
            amount, frequency = expense.get('amount'), expense.get('frequency')
        else:
            amount, frequency = expense.amount, expense.frequency
        total += _raw_monthly_equivalent(amount, frequency)
    return money(total)


# ---------------------------------------------------------------------------
# Cost of goods sold
# ---------------------------------------------------------------------------

def calculate_cogs(beginning_raw=0, beginning_packaging=0, raw_purchases=0,
                   packaging_purchases=0, ending_raw=0, ending_packaging=0):
    """COGS = Beginning Inventory + Purchases - Ending Inventory"""
    beginning = to_decimal(beginning_raw) + to_decimal(beginning_packaging)
    purchases = to_decimal(raw_purchases) + to_decimal(packaging_purchases)
    ending = to_decimal(ending_raw) + to_decimal(ending_packaging)
    return money(beginning + purchases - ending)


# ---------------------------------------------------------------------------
# Profitability
# ---------------------------------------------------------------------------

def calculate_gross_profit(sales_revenue, cogs):
    return money(to_decimal(sales_revenue) - to_decimal(cogs))


def calculate_gross_profit_margin(sales_revenue, cogs):
    """Gross profit as a percentage of revenue (0 when there is no revenue)"""
    gross_profit = to_decimal(sales_revenue) - to_decimal(cogs)
    return _ratio_percent(gross_profit, sales_revenue)


def calculate_operating_income(gross_profit, operating_expenses):
    return money(to_decimal(gross_profit) - to_decimal(operating_expenses))


def calculate_operating_margin(operating_income, sales_revenue):
    return _ratio_percent(operating_income, sales_revenue)


def calculate_net_profit(operating_income, other_expenses):
    return money(to_decimal(operating_income) - to_decimal(other_expenses))


def calculate_net_profit_margin(net_profit, sales_revenue):
    return _ratio_percent(net_profit, sales_revenue)


def generate_income_statement(sales_revenue, cogs, operating_expenses, other_expenses):
    """Build the full income statement from the four period totals"""
    gross_profit = calculate_gross_profit(sales_revenue, cogs)
    operating_income = calculate_operating_income(gross_profit, operating_expenses)
    net_profit = calculate_net_profit(operating_income, other_expenses)
    return {
        'sales_revenue': money(sales_revenue),
        'cogs': money(cogs),
        'gross_profit': gross_profit,
        'gross_profit_margin': calculate_gross_profit_margin(sales_revenue, cogs),
        'operating_expenses': money(operating_expenses),
        'operating_income': operating_income,
        'operating_margin': calculate_operating_margin(operating_income, sales_revenue),
        'other_expenses': money(other_expenses),
        'net_profit': net_profit,
        'net_profit_margin': calculate_net_profit_margin(net_profit, sales_revenue),
    }


# ---------------------------------------------------------------------------
# Recipe costing
# ---------------------------------------------------------------------------

def calculate_ingredient_cost(quantity_used, cost_per_unit):
    return to_decimal(quantity_used) * to_decimal(cost_per_unit)


def calculate_total_recipe_cost(lines):
    """Sum of quantity x unit cost over (quantity, cost_per_unit) pairs"""
    return money(sum(
        (calculate_ingredient_cost(quantity, cost) for quantity, cost in lines),
        ZERO,
    ))


def calculate_cost_per_serving(total_recipe_cost, servings):
    servings = to_decimal(servings)
    if servings == ZERO:
        return ZERO
    return money(to_decimal(total_recipe_cost) / servings)


def calculate_labor_cost(preparation_minutes, labor_rate_per_hour):
    return money(to_decimal(preparation_minutes) / Decimal('60') * to_decimal(labor_rate_per_hour))


def calculate_overhead(material_cost, overhead_rate=DEFAULT_OVERHEAD_RATE):
    return money(to_decimal(material_cost) * to_decimal(overhead_rate))


def calculate_selling_price(cost_per_unit, markup_percentage):
    """Selling price = cost x (1 + markup%)"""
    return money(to_decimal(cost_per_unit) * (1 + to_decimal(markup_percentage) / HUNDRED))


def calculate_recipe_profitability(cost_per_unit, selling_price):
    profit_per_unit = money(to_decimal(selling_price) - to_decimal(cost_per_unit))
    return {
        'profit_per_unit': profit_per_unit,
        'profit_margin': _ratio_percent(profit_per_unit, selling_price)
        if to_decimal(selling_price) > ZERO else ZERO,
    }


# ---------------------------------------------------------------------------
# Break-even
# ---------------------------------------------------------------------------

def calculate_break_even_units(fixed_costs, selling_price_per_unit, variable_cost_per_unit):
    contribution_margin = to_decimal(selling_price_per_unit) - to_decimal(variable_cost_per_unit)
    if contribution_margin == ZERO:
        return ZERO
    return money(to_decimal(fixed_costs) / contribution_margin)


def calculate_break_even_revenue(fixed_costs, selling_price_per_unit, variable_cost_per_unit):
    contribution_margin = to_decimal(selling_price_per_unit) - to_decimal(variable_cost_per_unit)
    if contribution_margin == ZERO:
        return ZERO
    return money(to_decimal(fixed_costs) / contribution_margin * to_decimal(selling_price_per_unit))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def percent_change(current, previous):
    """Period-over-period change; 100% when starting from zero"""
    current, previous = to_decimal(current), to_decimal(previous)
    if previous == ZERO:
        return HUNDRED if current > ZERO else ZERO
    return money((current - previous) / previous * HUNDRED)


def format_currency(amount, symbol='₱'):
    """Format as Philippine peso, e.g. -1234.5 -> -₱1,234.50"""
    value = money(amount)
    sign = '-' if value < ZERO else ''
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_percentage(value, decimals=2):
    rounded = to_decimal(value).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"{rounded:.{decimals}f}%"
