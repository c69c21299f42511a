from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()

CATEGORY_CHOICES = [
    ('INVENTORY', 'Inventory'),
    ('EXPENSE', 'Expense'),
    ('UNKNOWN', 'Needs review'),
]


class CategoryMemory(models.Model):
    """Category a user gave a receipt line, reused the next time it shows up"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='category_memory')
    item_pattern = models.CharField(max_length=200, help_text="Normalised item name")
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    sub_category = models.CharField(max_length=30, blank=True,
                                    help_text="Purchase item type or expense category")
    vendor = models.CharField(max_length=200, blank=True)
    use_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_pattern} -> {self.category}"

    class Meta:
        db_table = 'category_memory'
        ordering = ['-use_count', 'item_pattern']
        verbose_name_plural = 'category memory'
        constraints = [
            models.UniqueConstraint(fields=['user', 'item_pattern'], name='uniq_category_memory_pattern'),
        ]
