# Generated manually for the Business model

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
            name='Business',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('business_name', models.CharField(max_length=200)),
                ('business_type', models.CharField(choices=[('carinderia', 'Carinderia'), ('food_stall', 'Food Stall'), ('restaurant', 'Restaurant'), ('catering', 'Catering'), ('bakery', 'Bakery'), ('other', 'Other')], default='other', max_length=50)),
                ('address', models.TextField(blank=True)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('tax_id', models.CharField(blank=True, help_text='BIR TIN', max_length=50)),
                ('currency', models.CharField(default='PHP', max_length=3)),
                ('employee_count', models.PositiveIntegerField(default=0)),
                ('avg_monthly_sales', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('raw_material_source', models.CharField(blank=True, choices=[('palengke', 'Public Market (Palengke)'), ('supermarket', 'Supermarket'), ('wholesaler', 'Wholesaler'), ('supplier', 'Direct Supplier'), ('mixed', 'Mixed')], max_length=50)),
                ('overhead_rate', models.DecimalField(decimal_places=4, default=Decimal('0.15'), help_text='Overhead as a fraction of ingredient cost', max_digits=5)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='business', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'businesses',
                'verbose_name_plural': 'businesses',
            },
        ),
    ]
