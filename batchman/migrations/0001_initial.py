"""
Initial migration for Batchman models.
"""

import datetime

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Batchman models: Batch, BatchTransaction."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.CharField(db_index=True, max_length=64, verbose_name='Product ID')),
                ('batch_number', models.CharField(help_text='Free-text label, unique per product by convention.', max_length=100, verbose_name='Batch number')),
                ('quantity_received', models.PositiveIntegerField(default=0, help_text='Opening balance of the batch.', verbose_name='Quantity received')),
                ('quantity', models.PositiveIntegerField(default=0, help_text='Remaining quantity. Changed only through transactions.', verbose_name='Quantity')),
                ('received_date', models.DateField(default=datetime.date.today, verbose_name='Received date')),
                ('has_expiry', models.BooleanField(default=False, verbose_name='Has expiry')),
                ('expiry_date', models.DateField(blank=True, help_text='Last day the batch can be sold.', null=True, verbose_name='Expiry date')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['received_date', 'created_at', 'pk'],
                'indexes': [
                    models.Index(fields=['product_id', 'received_date'], name='batchman_batch_prod_recv_idx'),
                    models.Index(fields=['expiry_date'], name='batchman_batch_expiry_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='batchman_batch_quantity_non_negative'),
                    models.CheckConstraint(condition=models.Q(('has_expiry', False), ('expiry_date__isnull', False), _connector='OR'), name='batchman_batch_expiry_date_required'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BatchTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_id', models.CharField(blank=True, db_index=True, default='', max_length=64, verbose_name='Order ID')),
                ('quantity', models.PositiveIntegerField(help_text='Magnitude of the movement. Direction gives the sign.', verbose_name='Quantity')),
                ('transaction_type', models.CharField(choices=[('sale', 'Sale'), ('adjustment', 'Adjustment'), ('return', 'Return'), ('waste', 'Waste')], max_length=20, verbose_name='Type')),
                ('direction', models.CharField(choices=[('in', 'In'), ('out', 'Out')], max_length=3, verbose_name='Direction')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='batchman.batch', verbose_name='Batch')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Batch transaction',
                'verbose_name_plural': 'Batch transactions',
                'ordering': ['created_at', 'pk'],
                'indexes': [
                    models.Index(fields=['batch', 'created_at'], name='batchman_tx_batch_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='batchman_transaction_quantity_positive'),
                ],
            },
        ),
    ]
