# Generated manually for the credit ledger

import uuid
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='PurchaseRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_id', models.CharField(max_length=200)),
                ('transaction_id', models.CharField(max_length=100, unique=True)),
                ('purchase_date', models.DateTimeField()),
                ('price_usd', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('localized_price', models.CharField(max_length=50)),
                ('currency_code', models.CharField(default='USD', max_length=3)),
                ('credit_amount', models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])),
                ('restored_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'purchase_records',
                'ordering': ['-purchase_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['product_id', 'purchase_date'], name='record_product_date_idx'),
                    models.Index(fields=['purchase_date'], name='record_purchase_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PurchaseCredit',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('report_area', models.CharField(choices=[('general', 'General'), ('career', 'Career'), ('relationships', 'Relationships'), ('finances', 'Finances'), ('health', 'Health'), ('universal', 'Any area')], default='universal', max_length=20)),
                ('purchase_date', models.DateTimeField()),
                ('consumed', models.BooleanField(default=False)),
                ('consumed_date', models.DateTimeField(blank=True, null=True)),
                ('user_profile_id', models.UUIDField(blank=True, null=True)),
                ('transaction_id', models.CharField(max_length=100)),
                ('sequence', models.PositiveIntegerField(default=1)),
                ('purchase_record', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='credits', to='purchases.purchaserecord')),
            ],
            options={
                'db_table': 'purchase_credits',
                'ordering': ['purchase_date', 'id'],
                'indexes': [
                    models.Index(fields=['consumed', 'purchase_date'], name='credit_consumed_date_idx'),
                    models.Index(fields=['consumed', 'report_area'], name='credit_consumed_area_idx'),
                    models.Index(fields=['user_profile_id', 'consumed_date'], name='credit_profile_history_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('consumed', False), ('consumed_date__isnull', True), ('user_profile_id__isnull', True)),
                            models.Q(('consumed', True), ('consumed_date__isnull', False), ('user_profile_id__isnull', False)),
                            _connector='OR',
                        ),
                        name='credit_consumption_state_consistent',
                    ),
                    models.UniqueConstraint(
                        fields=('transaction_id', 'sequence'),
                        name='credit_transaction_sequence_unique',
                    ),
                ],
            },
        ),
    ]
