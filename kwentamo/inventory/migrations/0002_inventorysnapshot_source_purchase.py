# Generated manually: snapshots copied from purchases keep a link to their source

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('inventory', '0001_initial'),
        ('purchasing', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='inventorysnapshot',
            name='source_purchase',
            field=models.ForeignKey(blank=True, help_text='Purchase this line was copied from', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='snapshots', to='purchasing.purchase'),
        ),
    ]
