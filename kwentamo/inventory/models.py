from django.db import models
from decimal import Decimal
from kwentamo.core.models import User


ITEM_TYPE_CHOICES = [
    ('RAW_MATERIAL', 'Raw Material'),
    ('PACKAGING', 'Packaging'),
]


class InventoryPeriod(models.Model):
    """Accounting period bounded by a beginning and an ending stock count"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='inventory_periods')
    period_name = models.CharField(max_length=100)
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.period_name} ({self.start_date} - {self.end_date})"

    class Meta:
        db_table = 'inventory_periods'
        ordering = ['-start_date', '-created_at']
        indexes = [
            models.Index(fields=['user', '-start_date'], name='idx_period_user_start'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['user'], condition=models.Q(is_active=True), name='uniq_active_period_per_user'
            ),
        ]


class InventorySnapshot(models.Model):
    """Counted stock of one item at the start or end of a period"""
    SNAPSHOT_TYPE_CHOICES = [
        ('BEGINNING', 'Beginning Inventory'),
        ('ENDING', 'Ending Inventory'),
    ]

    period = models.ForeignKey(InventoryPeriod, on_delete=models.CASCADE, related_name='snapshots')
    snapshot_type = models.CharField(max_length=20, choices=SNAPSHOT_TYPE_CHOICES)
    item_name = models.CharField(max_length=200)
    item_type = models.CharField(max_length=20, choices=ITEM_TYPE_CHOICES, default='RAW_MATERIAL')
    unit = models.CharField(max_length=20, blank=True)
    quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal('0.0000'))
    source_purchase = models.ForeignKey(
        'purchasing.Purchase', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='snapshots', help_text="Purchase this line was copied from"
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_snapshot_type_display()}: {self.item_name}"

    @property
    def total_value(self):
        return self.quantity * self.unit_cost

    class Meta:
        db_table = 'inventory_snapshots'
        ordering = ['snapshot_type', 'item_type', 'item_name']
        indexes = [
            models.Index(fields=['period', 'snapshot_type'], name='idx_snapshot_period_type'),
        ]
