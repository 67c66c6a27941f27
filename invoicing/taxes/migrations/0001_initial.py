# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TaxConfiguration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('code', models.CharField(max_length=20)),
                ('tax_type', models.CharField(choices=[('vat', 'VAT'), ('excise', 'Excise Duty'), ('withholding', 'Withholding Tax'), ('service', 'Service Charge'), ('other', 'Other')], default='vat', max_length=20)),
                ('rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('calculation_method', models.CharField(choices=[('exclusive', 'Exclusive'), ('inclusive', 'Inclusive')], default='exclusive', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('is_default', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('applicable_from', models.DateField(blank=True, null=True)),
                ('applicable_until', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tax_configurations', to='core.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='tax_configurations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'tax_configurations',
                'ordering': ['-is_default', 'name'],
                'constraints': [
                    models.UniqueConstraint(fields=('company', 'code'), name='uniq_tax_config_company_code'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TaxExemptionReason',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(max_length=20)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tax_exemption_reasons', to='core.company')),
            ],
            options={
                'db_table': 'tax_exemption_reasons',
                'ordering': ['name'],
            },
        ),
    ]
