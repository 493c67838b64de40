import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('carriers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FreightRoute',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('origin_zip', models.CharField(max_length=8)),
                ('origin_zip_end', models.CharField(blank=True, max_length=8, null=True)),
                ('dest_zip', models.CharField(max_length=8)),
                ('dest_zip_end', models.CharField(blank=True, max_length=8, null=True)),
                ('cost_price_per_kg', models.DecimalField(decimal_places=4, max_digits=12)),
                ('cost_min_price', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('margin_percent', models.DecimalField(decimal_places=2, max_digits=6)),
                ('price_per_kg', models.DecimalField(decimal_places=4, max_digits=12)),
                ('min_price', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('deadline_days', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('active', 'Ativa'), ('inactive', 'Inativa')], db_index=True, default='active', max_length=16)),
                ('rate_card', models.JSONField(blank=True, null=True)),
                ('source_file', models.CharField(blank=True, default='', max_length=255)),
                ('imported_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('carrier', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='routes', to='carriers.carrier')),
            ],
            options={
                'ordering': ['origin_zip', 'dest_zip', 'id'],
                'indexes': [models.Index(fields=['origin_zip', 'dest_zip'], name='route_zip_pair_idx')],
                'constraints': [models.UniqueConstraint(fields=('carrier', 'origin_zip', 'dest_zip'), name='uniq_route_carrier_zips')],
            },
        ),
    ]
