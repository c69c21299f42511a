from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
from kwentamo.core.models import User
from kwentamo.catalog.models import Ingredient
from kwentamo.inventory.models import InventoryPeriod, ITEM_TYPE_CHOICES


class Purchase(models.Model):
    """Stock bought from a supplier (raw material or packaging)"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='purchases')
    item_name = models.CharField(max_length=200)
    item_type = models.CharField(max_length=20, choices=ITEM_TYPE_CHOICES, default='RAW_MATERIAL')
    unit = models.CharField(max_length=20, default='pcs')
    quantity = models.DecimalField(max_digits=12, decimal_places=3, validators=[MinValueValidator(Decimal('0.001'))])
    remaining_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, validators=[MinValueValidator(Decimal('0'))])
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    supplier = models.CharField(max_length=200, blank=True)
    purchase_date = models.DateField(default=timezone.localdate)
    reorder_level = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases',
        help_text="Ingredient whose stock this purchase replenishes"
    )
    period = models.ForeignKey(
        InventoryPeriod, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases'
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_name} x {self.quantity} {self.unit}"

    @property
    def is_low_stock(self):
        return self.remaining_quantity <= self.reorder_level

    class Meta:
        db_table = 'purchases'
        ordering = ['-purchase_date', '-created_at']
        indexes = [
            models.Index(fields=['user', '-purchase_date'], name='idx_purchase_user_date'),
            models.Index(fields=['user', 'item_type'], name='idx_purchase_user_type'),
            models.Index(fields=['period'], name='idx_purchase_period'),
        ]


class InventoryTransaction(models.Model):
    """Movement of stock in or out of a purchased item"""
    TRANSACTION_TYPE_CHOICES = [
        ('PURCHASE', 'Purchase'),
        ('RESTOCK', 'Restock'),
        ('ADJUSTMENT', 'Adjustment'),
        ('USAGE', 'Usage'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='inventory_transactions')
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    quantity = models.DecimalField(max_digits=12, decimal_places=3, help_text="Signed change in quantity")
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal('0.0000'))
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    balance_after = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.transaction_type} {self.quantity} of {self.purchase.item_name}"

    class Meta:
        db_table = 'inventory_transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='idx_invtxn_user_created'),
            models.Index(fields=['purchase', '-created_at'], name='idx_invtxn_purchase_created'),
            models.Index(fields=['transaction_type'], name='idx_invtxn_type'),
        ]
