import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('provider', models.CharField(choices=[('MIDTRANS', 'Midtrans'), ('OFFLINE', 'Offline')], max_length=20)),
                ('payment_type', models.CharField(help_text='Provider payment type, e.g. bank_transfer, qris, cod', max_length=50)),
                ('channel', models.CharField(blank=True, max_length=50)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('PENDING', '⏳ Pending'), ('PAID', '✅ Paid'), ('FAILED', '❌ Failed'), ('REFUNDED', '↩️ Refunded')], default='PENDING', max_length=20)),
                ('transaction_id', models.CharField(blank=True, db_index=True, max_length=255)),
                ('va_number', models.CharField(blank=True, max_length=100)),
                ('va_bank', models.CharField(blank=True, max_length=50)),
                ('qr_string', models.TextField(blank=True)),
                ('qr_image_url', models.URLField(blank=True, max_length=1000)),
                ('payment_url', models.URLField(blank=True, max_length=1000)),
                ('instructions', models.TextField(blank=True)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('raw_response', models.JSONField(blank=True, default=dict, help_text='Last provider payload, kept for audit')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payment_transactions', to='orders.order')),
            ],
            options={
                'verbose_name': 'Payment Transaction',
                'verbose_name_plural': 'Payment Transactions',
                'db_table': 'payment_transactions',
                'ordering': ('-created_at',),
                'indexes': [models.Index(fields=['order', '-created_at'], name='payment_tx_order_idx')],
            },
        ),
    ]
