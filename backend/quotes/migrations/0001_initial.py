import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('carriers', '0001_initial'),
        ('rate_tables', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='QuoteRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('origin_zip', models.CharField(max_length=8)),
                ('dest_zip', models.CharField(max_length=8)),
                ('taxable_weight', models.DecimalField(decimal_places=3, max_digits=12)),
                ('invoice_value', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('offers_count', models.PositiveIntegerField(default=0)),
                ('best_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('used_fallback', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['origin_zip', 'dest_zip'], name='quote_req_zip_idx')],
            },
        ),
        migrations.CreateModel(
            name='Freight',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('origin_zip', models.CharField(max_length=8)),
                ('dest_zip', models.CharField(max_length=8)),
                ('taxable_weight', models.DecimalField(decimal_places=3, max_digits=12)),
                ('invoice_value', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('price', models.DecimalField(decimal_places=2, max_digits=12)),
                ('cost_total', models.DecimalField(decimal_places=2, max_digits=12)),
                ('margin_percent', models.DecimalField(decimal_places=2, max_digits=6)),
                ('payment_status', models.CharField(choices=[('pending', 'Aguardando pagamento'), ('paid', 'Pago'), ('failed', 'Falhou'), ('canceled', 'Cancelado')], db_index=True, default='pending', max_length=16)),
                ('checkout_session_id', models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('carrier_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('rotaclick_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('payment_term_days', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('repasse_due_date', models.DateField(blank=True, null=True)),
                ('repasse_status', models.CharField(choices=[('pending', 'Pendente'), ('paid', 'Pago')], db_index=True, default='pending', max_length=16)),
                ('repasse_paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('carrier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='freights', to='carriers.carrier')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='freights', to=settings.AUTH_USER_MODEL)),
                ('repasse_paid_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('route', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='freights', to='rate_tables.freightroute')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['carrier', 'repasse_status'], name='freight_repasse_idx'),
                    models.Index(fields=['repasse_due_date'], name='freight_due_idx'),
                ],
            },
        ),
    ]
