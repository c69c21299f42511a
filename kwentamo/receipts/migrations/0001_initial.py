# Generated manually for the CategoryMemory model

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CategoryMemory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_pattern', models.CharField(help_text='Normalised item name', max_length=200)),
                ('category', models.CharField(choices=[('INVENTORY', 'Inventory'), ('EXPENSE', 'Expense'), ('UNKNOWN', 'Needs review')], max_length=20)),
                ('sub_category', models.CharField(blank=True, help_text='Purchase item type or expense category', max_length=30)),
                ('vendor', models.CharField(blank=True, max_length=200)),
                ('use_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='category_memory', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'category memory',
                'db_table': 'category_memory',
                'ordering': ['-use_count', 'item_pattern'],
                'constraints': [models.UniqueConstraint(fields=('user', 'item_pattern'), name='uniq_category_memory_pattern')],
            },
        ),
    ]
