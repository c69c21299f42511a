"""
Tabular exports of a user's records as CSV or Excel.

Excel workbooks are built with openpyxl in write-only mode: a small "Export"
sheet with metadata, followed by one data sheet.
"""
import csv
import io
from datetime import datetime

import openpyxl
from django.conf import settings
from django.http import HttpResponse

from kwentamo.catalog.models import Ingredient
from kwentamo.expenses.models import Expense
from kwentamo.sales.models import Sale
from .calculations import filter_dates

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

SALES_COLUMNS = ['Date', 'Recipe', 'Quantity', 'Unit Price', 'Total Price', 'Cost of Goods', 'Profit', 'Notes']
EXPENSE_COLUMNS = ['Date', 'Category', 'Type', 'Description', 'Amount', 'Frequency', 'Monthly Amount', 'Notes']
INGREDIENT_COLUMNS = ['Name', 'Category', 'Unit', 'Cost per Unit', 'Current Stock', 'Reorder Level',
                      'Stock Value', 'Supplier']


def sales_rows(user, date_from=None, date_to=None):
    queryset = filter_dates(
        Sale.objects.filter(user=user).select_related('recipe'), 'sale_date', date_from, date_to
    ).order_by('sale_date', 'id')
    for sale in queryset:
        yield [
            sale.sale_date.isoformat(), sale.recipe.name, sale.quantity,
            float(sale.unit_price), float(sale.total_price), float(sale.cost_of_goods),
            float(sale.profit), sale.notes,
        ]


def expense_rows(user, date_from=None, date_to=None):
    queryset = filter_dates(
        Expense.objects.filter(user=user), 'expense_date', date_from, date_to
    ).order_by('expense_date', 'id')
    for expense in queryset:
        yield [
            expense.expense_date.isoformat(), expense.get_category_display(),
            expense.get_expense_type_display(), expense.description, float(expense.amount),
            expense.get_frequency_display(), float(expense.monthly_amount), expense.notes,
        ]


def ingredient_rows(user, date_from=None, date_to=None):
    for ingredient in Ingredient.objects.filter(user=user).order_by('name'):
        yield [
            ingredient.name, ingredient.category, ingredient.unit, float(ingredient.cost_per_unit),
            float(ingredient.current_stock), float(ingredient.reorder_level),
            float(ingredient.stock_value), ingredient.supplier,
        ]


# type -> (sheet title, header, row generator)
CSV_EXPORTS = {
    'sales': ('Sales', SALES_COLUMNS, sales_rows),
    'expenses': ('Expenses', EXPENSE_COLUMNS, expense_rows),
    'ingredients': ('Ingredients', INGREDIENT_COLUMNS, ingredient_rows),
}
EXCEL_EXPORTS = {
    'sales': CSV_EXPORTS['sales'],
    'expenses': CSV_EXPORTS['expenses'],
}


def export_filename(export_type, extension):
    return f"kwentamo_{export_type}_{datetime.now().strftime('%Y%m%d')}.{extension}"


def render_csv(export_type, user, date_from=None, date_to=None):
    _title, header, rows = CSV_EXPORTS[export_type]
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{export_filename(export_type, "csv")}"'
    writer = csv.writer(response)
    writer.writerow(header)
    for row in rows(user, date_from, date_to):
        writer.writerow(row)
    return response


def build_workbook(title, header, rows, meta):
    """Workbook bytes with a metadata sheet and one data sheet"""
    wb = openpyxl.Workbook(write_only=True)
    meta_ws = wb.create_sheet('Export')
    for key, value in meta:
        meta_ws.append([key, value])

    ws = wb.create_sheet(title)
    ws.append(header)
    for row in rows:
        ws.append(row)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def render_excel(export_type, user, date_from=None, date_to=None):
    title, header, rows = EXCEL_EXPORTS[export_type]
    meta = [
        ('Source', settings.KWENTAMO['APP_NAME']),
        ('Export Date', datetime.now().strftime('%Y-%m-%d %H:%M')),
        ('Report', title),
        ('From', date_from.isoformat() if date_from else 'All time'),
        ('To', date_to.isoformat() if date_to else 'All time'),
    ]
    content = build_workbook(title, header, rows(user, date_from, date_to), meta)
    response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{export_filename(export_type, "xlsx")}"'
    return response
