from django.db import models
from decimal import Decimal
from kwentamo.core.models import User


class Business(models.Model):
    """The food business a user keeps books for (one per user)"""
    BUSINESS_TYPE_CHOICES = [
        ('carinderia', 'Carinderia'),
        ('food_stall', 'Food Stall'),
        ('restaurant', 'Restaurant'),
        ('catering', 'Catering'),
        ('bakery', 'Bakery'),
        ('other', 'Other'),
    ]

    RAW_MATERIAL_SOURCE_CHOICES = [
        ('palengke', 'Public Market (Palengke)'),
        ('supermarket', 'Supermarket'),
        ('wholesaler', 'Wholesaler'),
        ('supplier', 'Direct Supplier'),
        ('mixed', 'Mixed'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='business')
    business_name = models.CharField(max_length=200)
    business_type = models.CharField(max_length=50, choices=BUSINESS_TYPE_CHOICES, default='other')
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    tax_id = models.CharField(max_length=50, blank=True, help_text="BIR TIN")
    currency = models.CharField(max_length=3, default='PHP')
    employee_count = models.PositiveIntegerField(default=0)
    avg_monthly_sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    raw_material_source = models.CharField(max_length=50, choices=RAW_MATERIAL_SOURCE_CHOICES, blank=True)
    overhead_rate = models.DecimalField(
        max_digits=5, decimal_places=4, default=Decimal('0.15'),
        help_text="Overhead as a fraction of ingredient cost"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.business_name

    class Meta:
        db_table = 'businesses'
        verbose_name_plural = 'businesses'
