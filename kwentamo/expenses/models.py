from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
from kwentamo.core.models import User
from kwentamo.core.formulas import monthly_equivalent


class Expense(models.Model):
    """Business expense, recurring or one-off"""
    CATEGORY_CHOICES = [
        ('INGREDIENTS', 'Ingredients'),
        ('LABOR', 'Labor'),
        ('UTILITIES', 'Utilities'),
        ('RENT', 'Rent'),
        ('EQUIPMENT', 'Equipment'),
        ('MARKETING', 'Marketing'),
        ('TRANSPORTATION', 'Transportation'),
        ('PACKAGING', 'Packaging'),
        ('OTHER', 'Other'),
    ]

    # OTHER covers non-operating costs: taxes, interest, bank charges
    TYPE_CHOICES = [
        ('FIXED', 'Fixed'),
        ('VARIABLE', 'Variable'),
        ('OTHER', 'Other (non-operating)'),
    ]

    FREQUENCY_CHOICES = [
        ('DAILY', 'Daily'),
        ('WEEKLY', 'Weekly'),
        ('MONTHLY', 'Monthly'),
        ('QUARTERLY', 'Quarterly'),
        ('YEARLY', 'Yearly'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='expenses')
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES, default='OTHER')
    expense_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='FIXED')
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    frequency = models.CharField(max_length=20, choices=FREQUENCY_CHOICES, default='MONTHLY')
    expense_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.description} - {self.amount}"

    @property
    def monthly_amount(self):
        return monthly_equivalent(self.amount, self.frequency)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['user', '-expense_date'], name='idx_expense_user_date'),
            models.Index(fields=['user', 'category'], name='idx_expense_user_category'),
            models.Index(fields=['user', 'expense_type'], name='idx_expense_user_type'),
        ]
