from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('carriers', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='carrier',
            name='rntrc_status',
            field=models.CharField(choices=[('UNKNOWN', 'Não verificado'), ('ACTIVE', 'Ativo'), ('INACTIVE', 'Inativo'), ('SUSPENDED', 'Suspenso'), ('EXPIRED', 'Expirado')], default='UNKNOWN', max_length=16),
        ),
        migrations.AddField(
            model_name='carrier',
            name='rntrc_expires_at',
            field=models.DateField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='carrier',
            name='antt_registration_status',
            field=models.CharField(choices=[('PENDING', 'Pendente'), ('ACTIVE', 'Ativo'), ('INACTIVE', 'Inativo'), ('SUSPENDED', 'Suspenso')], default='PENDING', max_length=16),
        ),
        migrations.AddField(
            model_name='carrier',
            name='insurance_valid_until',
            field=models.DateField(blank=True, null=True),
        ),
    ]
