# Generated manually for the Expense model

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('INGREDIENTS', 'Ingredients'), ('LABOR', 'Labor'), ('UTILITIES', 'Utilities'), ('RENT', 'Rent'), ('EQUIPMENT', 'Equipment'), ('MARKETING', 'Marketing'), ('TRANSPORTATION', 'Transportation'), ('PACKAGING', 'Packaging'), ('OTHER', 'Other')], default='OTHER', max_length=30)),
                ('expense_type', models.CharField(choices=[('FIXED', 'Fixed'), ('VARIABLE', 'Variable'), ('OTHER', 'Other (non-operating)')], default='FIXED', max_length=20)),
                ('description', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('frequency', models.CharField(choices=[('DAILY', 'Daily'), ('WEEKLY', 'Weekly'), ('MONTHLY', 'Monthly'), ('QUARTERLY', 'Quarterly'), ('YEARLY', 'Yearly')], default='MONTHLY', max_length=20)),
                ('expense_date', models.DateField(default=django.utils.timezone.localdate)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'expenses',
                'ordering': ['-expense_date', '-created_at'],
                'indexes': [models.Index(fields=['user', '-expense_date'], name='idx_expense_user_date'), models.Index(fields=['user', 'category'], name='idx_expense_user_category'), models.Index(fields=['user', 'expense_type'], name='idx_expense_user_type')],
            },
        ),
    ]
