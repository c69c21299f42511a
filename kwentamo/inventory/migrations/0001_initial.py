# Generated manually for inventory periods and snapshots

import django.db.models.deletion
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
            name='InventoryPeriod',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('period_name', models.CharField(max_length=100)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('is_active', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_periods', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'inventory_periods',
                'ordering': ['-start_date', '-created_at'],
                'indexes': [models.Index(fields=['user', '-start_date'], name='idx_period_user_start')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('user',), name='uniq_active_period_per_user')],
            },
        ),
        migrations.CreateModel(
            name='InventorySnapshot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('snapshot_type', models.CharField(choices=[('BEGINNING', 'Beginning Inventory'), ('ENDING', 'Ending Inventory')], max_length=20)),
                ('item_name', models.CharField(max_length=200)),
                ('item_type', models.CharField(choices=[('RAW_MATERIAL', 'Raw Material'), ('PACKAGING', 'Packaging')], default='RAW_MATERIAL', max_length=20)),
                ('unit', models.CharField(blank=True, max_length=20)),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=12)),
                ('unit_cost', models.DecimalField(decimal_places=4, default=Decimal('0.0000'), max_digits=12)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('period', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='snapshots', to='inventory.inventoryperiod')),
            ],
            options={
                'db_table': 'inventory_snapshots',
                'ordering': ['snapshot_type', 'item_type', 'item_name'],
                'indexes': [models.Index(fields=['period', 'snapshot_type'], name='idx_snapshot_period_type')],
            },
        ),
    ]
