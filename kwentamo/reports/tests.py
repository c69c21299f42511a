"""
Test suite for the reports module
Tests: COGS, income statement, profit summary, expense breakdown, break-even,
dashboard caching, chart data, CSV and Excel exports
"""
import csv
import io
from datetime import date, timedelta
from unittest import mock

import openpyxl
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from kwentamo.core.cache_utils import get_cached_dashboard
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.reports.calculations import chart_buckets, previous_month_range, shift_month
from kwentamo.reports.exports import XLSX_CONTENT_TYPE
from kwentamo.sales.models import Sale

MARCH = 'date_from=2026-03-01&date_to=2026-03-31'


class ReportTestCase(TestCase):
    """Two recipes sold in March 2026 plus March and April expenses"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

        flour = TestDataFactory.create_ingredient(self.user, name='Flour', cost_per_unit='20')
        self.pandesal = TestDataFactory.create_recipe(self.user, name='Pandesal', selling_price='5',
                                                      servings=10, lines=[(flour, '1')])
        self.ensaymada = TestDataFactory.create_recipe(self.user, name='Ensaymada', selling_price='25',
                                                       lines=[(flour, '0.5')])
        TestDataFactory.create_sale(self.user, self.pandesal, quantity=20, sale_date=date(2026, 3, 5))
        TestDataFactory.create_sale(self.user, self.ensaymada, quantity=6, sale_date=date(2026, 3, 10))
        TestDataFactory.create_sale(self.user, self.pandesal, quantity=10, sale_date=date(2026, 4, 2))

        TestDataFactory.create_expense(self.user, amount='5000', category='RENT', expense_date=date(2026, 3, 1))
        TestDataFactory.create_expense(self.user, amount='1000', category='UTILITIES', expense_type='VARIABLE',
                                       expense_date=date(2026, 3, 15))
        TestDataFactory.create_expense(self.user, amount='200', category='OTHER', expense_type='OTHER',
                                       expense_date=date(2026, 3, 20))
        TestDataFactory.create_expense(self.user, amount='5000', category='RENT', expense_date=date(2026, 4, 1))


class CogsReportTests(ReportTestCase):
    def test_cogs_report(self):
        response = self.client.get(f'/api/v1/reports/cogs/?{MARCH}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['period'], {'from': '2026-03-01', 'to': '2026-03-31'})
        self.assertEqual(response.data['summary'], {
            'total_revenue': 250.0, 'total_cogs': 100.0, 'gross_profit': 150.0,
            'gross_profit_margin': 60.0, 'sales_count': 2,
        })
        first = response.data['by_recipe'][0]
        self.assertEqual(first['recipe_name'], 'Ensaymada')
        self.assertEqual(first['revenue'], 150.0)
        self.assertEqual(first['quantity'], 6)

    def test_all_time_without_range(self):
        response = self.client.get('/api/v1/reports/cogs/')
        self.assertEqual(response.data['summary']['total_revenue'], 300.0)
        self.assertEqual(response.data['period'], {'from': None, 'to': None})

    def test_invalid_dates(self):
        response = self.client.get('/api/v1/reports/cogs/?date_from=03/01/2026')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/cogs/?date_from=2026-04-01&date_to=2026-03-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/reports/cogs/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class IncomeStatementTests(ReportTestCase):
    def test_income_statement(self):
        response = self.client.get(f'/api/v1/reports/income-statement/?{MARCH}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['revenue'], 250.0)
        self.assertEqual(data['cost_of_goods_sold'], 100.0)
        self.assertEqual(data['gross_profit'], 150.0)
        self.assertEqual(data['operating_expenses']['total'], 6000.0)
        self.assertEqual(data['operating_income'], -5850.0)
        self.assertEqual(data['other_expenses'], 200.0)
        self.assertEqual(data['net_profit'], -6050.0)
        self.assertEqual(data['net_profit_margin'], -2420.0)
        self.assertEqual([row['category'] for row in data['operating_expenses']['breakdown']],
                         ['RENT', 'UTILITIES'])

    def test_scoped_to_user(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get(f'/api/v1/reports/income-statement/?{MARCH}')
        self.assertEqual(response.data['revenue'], 0.0)
        self.assertEqual(response.data['net_profit_margin'], 0.0)


class ProfitSummaryTests(ReportTestCase):
    def test_profit_summary(self):
        response = self.client.get(f'/api/v1/reports/profit-summary/?{MARCH}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totals'], {
            'revenue': 250.0, 'cogs': 100.0, 'profit': 150.0, 'profit_margin': 60.0,
            'quantity': 26, 'sales_count': 2,
        })
        self.assertEqual(len(response.data['recipes']), 2)


class ExpenseBreakdownTests(ReportTestCase):
    def test_monthly_equivalents(self):
        TestDataFactory.create_expense(self.user, amount='1200', category='EQUIPMENT', frequency='YEARLY')
        response = self.client.get('/api/v1/reports/expense-breakdown/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['fixed_costs'], 10100.0)
        self.assertEqual(response.data['variable_costs'], 1000.0)
        self.assertEqual(response.data['other_costs'], 200.0)
        self.assertEqual(response.data['total_monthly'], 11300.0)
        self.assertEqual(response.data['count'], 5)
        self.assertEqual(response.data['by_category'][0]['category'], 'RENT')


class BreakEvenTests(ReportTestCase):
    def test_break_even(self):
        response = self.client.get(f'/api/v1/reports/break-even/?recipe={self.pandesal.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['fixed_costs'], 10000.0)
        self.assertEqual(response.data['variable_cost_per_unit'], 2.0)
        self.assertEqual(response.data['contribution_margin'], 3.0)
        self.assertEqual(response.data['break_even_units'], 3333.33)
        self.assertEqual(response.data['break_even_revenue'], 16666.67)
        self.assertTrue(response.data['achievable'])

    def test_not_achievable_without_margin(self):
        flour = self.pandesal.recipe_ingredients.get().ingredient
        recipe = TestDataFactory.create_recipe(self.user, selling_price='20', lines=[(flour, '1')])
        response = self.client.get(f'/api/v1/reports/break-even/?recipe={recipe.id}')
        self.assertEqual(response.data['break_even_units'], 0.0)
        self.assertFalse(response.data['achievable'])

    def test_recipe_required(self):
        response = self.client.get('/api/v1/reports/break-even/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/break-even/?recipe=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_users_recipe(self):
        other = TestDataFactory.create_recipe(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/reports/break-even/?recipe={other.id}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DashboardTests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.today = timezone.localdate()
        ingredient = TestDataFactory.create_ingredient(self.user, cost_per_unit='10', current_stock='1',
                                                       reorder_level='5')
        self.recipe = TestDataFactory.create_recipe(self.user, selling_price='40', lines=[(ingredient, '1')])
        TestDataFactory.create_sale(self.user, self.recipe, quantity=5, sale_date=self.today)
        TestDataFactory.create_expense(self.user, amount='50', expense_date=self.today)
        previous_from, _previous_to = previous_month_range(self.today)
        TestDataFactory.create_expense(self.user, amount='100', expense_date=previous_from)

    def test_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['revenue'], 200.0)
        self.assertEqual(data['cogs'], 50.0)
        self.assertEqual(data['gross_profit'], 150.0)
        self.assertEqual(data['expenses'], 50.0)
        self.assertEqual(data['net_profit'], 100.0)
        self.assertEqual(data['net_profit_margin'], 50.0)
        self.assertEqual(data['revenue_change'], 100.0)
        self.assertEqual(data['expenses_change'], -50.0)
        self.assertEqual(data['previous_period']['expenses'], 100.0)
        self.assertEqual(data['low_stock_count'], 1)
        self.assertEqual(data['period']['to'], self.today.isoformat())

    def test_dashboard_is_cached(self):
        self.client.get('/api/v1/reports/dashboard/')
        cached, _key = get_cached_dashboard(self.user.id)
        self.assertIsNotNone(cached)

        # Queryset updates bypass signals, so the cached figures are served
        Sale.objects.filter(user=self.user).update(total_price=0)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['revenue'], 200.0)

    def test_new_sale_invalidates_cache(self):
        self.client.get('/api/v1/reports/dashboard/')
        TestDataFactory.create_sale(self.user, self.recipe, quantity=1, sale_date=self.today)
        self.assertIsNone(get_cached_dashboard(self.user.id)[0])
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['revenue'], 240.0)
        self.assertEqual(response.data['sales_count'], 2)

    def test_cache_is_per_user(self):
        self.client.get('/api/v1/reports/dashboard/')
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['revenue'], 0.0)


class ChartDataTests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.today = timezone.localdate()
        recipe = TestDataFactory.create_recipe(self.user, selling_price='100')
        TestDataFactory.create_sale(self.user, recipe, quantity=3, sale_date=self.today)
        TestDataFactory.create_expense(self.user, amount='120', expense_date=self.today)

    def test_default_is_monthly(self):
        response = self.client.get('/api/v1/reports/chart-data/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['period'], 'monthly')
        self.assertEqual(len(response.data['data']), 6)
        current = response.data['data'][-1]
        self.assertEqual(current['start'], self.today.replace(day=1).isoformat())
        self.assertEqual(current['end'], self.today.isoformat())
        self.assertEqual(current['revenue'], 300.0)
        self.assertEqual(current['profit'], 180.0)

    def test_daily_and_weekly(self):
        response = self.client.get('/api/v1/reports/chart-data/?period=daily')
        self.assertEqual(len(response.data['data']), 7)
        self.assertEqual(response.data['data'][-1]['expenses'], 120.0)
        self.assertEqual(response.data['data'][0]['revenue'], 0.0)

        response = self.client.get('/api/v1/reports/chart-data/?period=WEEKLY')
        self.assertEqual(len(response.data['data']), 4)
        self.assertEqual(response.data['data'][-1]['revenue'], 300.0)

    def test_invalid_period(self):
        response = self.client.get('/api/v1/reports/chart-data/?period=hourly')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ChartBucketTests(TestCase):
    def test_monthly_buckets_cross_year(self):
        buckets = chart_buckets('monthly', date(2026, 2, 14))
        self.assertEqual([start for _label, start, _end in buckets][0], date(2025, 9, 1))
        self.assertEqual(buckets[-1], ('Feb 2026', date(2026, 2, 1), date(2026, 2, 14)))
        self.assertEqual(buckets[-2][2], date(2026, 1, 31))

    def test_monthly_buckets_in_december(self):
        buckets = chart_buckets('monthly', date(2026, 12, 5))
        self.assertEqual(buckets[0][1], date(2026, 7, 1))
        self.assertEqual(buckets[-2][1:], (date(2026, 11, 1), date(2026, 11, 30)))
        self.assertEqual(buckets[-1], ('Dec 2026', date(2026, 12, 1), date(2026, 12, 5)))

    def test_weekly_buckets_are_contiguous(self):
        buckets = chart_buckets('weekly', date(2026, 3, 28))
        for (_l1, _s1, end), (_l2, start, _e2) in zip(buckets, buckets[1:]):
            self.assertEqual(start - end, timedelta(days=1))

    def test_shift_month(self):
        self.assertEqual(shift_month(date(2026, 1, 1), 1), date(2025, 12, 1))
        self.assertEqual(shift_month(date(2026, 1, 1), 13), date(2024, 12, 1))
        self.assertEqual(shift_month(date(2025, 12, 1), -1), date(2026, 1, 1))
        self.assertEqual(shift_month(date(2026, 11, 1), -14), date(2028, 1, 1))

    def test_unknown_period(self):
        with self.assertRaises(ValueError):
            chart_buckets('yearly', date(2026, 1, 1))


class YearBoundaryChartTests(TestCase):
    """Monthly chart windows that straddle a new year"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        recipe = TestDataFactory.create_recipe(self.user, selling_price='100')
        TestDataFactory.create_sale(self.user, recipe, quantity=2, sale_date=date(2025, 12, 20))
        TestDataFactory.create_expense(self.user, amount='50', expense_date=date(2026, 1, 10))

    @mock.patch('django.utils.timezone.localdate', return_value=date(2026, 2, 14))
    def test_monthly_chart_after_new_year(self, _localdate):
        response = self.client.get('/api/v1/reports/chart-data/?period=monthly')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual([row['label'] for row in data],
                         ['Sep 2025', 'Oct 2025', 'Nov 2025', 'Dec 2025', 'Jan 2026', 'Feb 2026'])
        december, january = data[3], data[4]
        self.assertEqual((december['start'], december['end']), ('2025-12-01', '2025-12-31'))
        self.assertEqual(december['revenue'], 200.0)
        self.assertEqual(january['expenses'], 50.0)
        self.assertEqual(january['profit'], -50.0)

    @mock.patch('django.utils.timezone.localdate', return_value=date(2025, 12, 28))
    def test_monthly_chart_in_december(self, _localdate):
        response = self.client.get('/api/v1/reports/chart-data/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        current = response.data['data'][-1]
        self.assertEqual(current['label'], 'Dec 2025')
        self.assertEqual((current['start'], current['end']), ('2025-12-01', '2025-12-28'))
        self.assertEqual(current['revenue'], 200.0)


class ExportTests(ReportTestCase):
    def test_csv_sales(self):
        response = self.client.get(f'/api/v1/reports/export/csv/?type=sales&{MARCH}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="kwentamo_sales_', response['Content-Disposition'])
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0][:2], ['Date', 'Recipe'])
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1][:3], ['2026-03-05', 'Pandesal', '20'])

    def test_csv_ingredients(self):
        response = self.client.get('/api/v1/reports/export/csv/?type=ingredients')
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[1][0], 'Flour')

    def test_excel_expenses(self):
        response = self.client.get(f'/api/v1/reports/export/excel/?type=expenses&{MARCH}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        wb = openpyxl.load_workbook(io.BytesIO(response.content))
        self.assertEqual(wb.sheetnames, ['Export', 'Expenses'])
        rows = list(wb['Expenses'].values)
        self.assertEqual(rows[0][0], 'Date')
        self.assertEqual(len(rows), 4)
        meta = dict(wb['Export'].values)
        self.assertEqual(meta['From'], '2026-03-01')

    def test_unknown_type(self):
        response = self.client.get('/api/v1/reports/export/csv/?type=recipes')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        # Ingredients export is CSV only
        response = self.client.get('/api/v1/reports/export/excel/?type=ingredients')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
