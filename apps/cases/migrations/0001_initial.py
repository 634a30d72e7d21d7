import decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

NON_NEGATIVE = [django.core.validators.MinValueValidator(decimal.Decimal("0"))]
CURRENCIES = [("USD", "Dólares"), ("PEN", "Soles")]


def money(**kwargs):
    return models.DecimalField(decimal_places=2, max_digits=16, **kwargs)


def rate(**kwargs):
    return models.DecimalField(decimal_places=6, max_digits=9, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ExpenseClassification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
            ],
            options={"db_table": "clasificacion_gastos"},
        ),
        migrations.CreateModel(
            name="StudyCase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("activo", "Activo"), ("cerrado", "Cerrado")], default="activo", max_length=10
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="study_cases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"db_table": "casos_de_estudio", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="ImportOperation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hs10", models.CharField(max_length=10)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("currency", models.CharField(choices=CURRENCIES, default="USD", max_length=3)),
                ("fob", money(blank=True, null=True, validators=NON_NEGATIVE)),
                ("freight", money(blank=True, null=True, validators=NON_NEGATIVE)),
                ("insurance", money(blank=True, null=True, validators=NON_NEGATIVE)),
                ("origin_country", models.CharField(blank=True, default="", max_length=2)),
                ("fx_rate", rate(blank=True, null=True)),
                ("use_fta", models.BooleanField(default=False)),
                ("quantity", models.DecimalField(blank=True, decimal_places=4, max_digits=16, null=True)),
                ("quantity_unit", models.CharField(blank=True, default="", max_length=10)),
                ("alcohol_strength", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                (
                    "importer_profile",
                    models.CharField(
                        choices=[
                            ("normal", "Normal"),
                            ("first_import", "Primera importación"),
                            ("no_habido", "No habido"),
                            ("public", "Sector público"),
                            ("amazon", "Amazonía"),
                        ],
                        default="normal",
                        max_length=20,
                    ),
                ),
                ("is_used", models.BooleanField(default=False)),
                ("vat_enabled", models.BooleanField(blank=True, null=True)),
                ("excise_enabled", models.BooleanField(blank=True, null=True)),
                ("perception_enabled", models.BooleanField(blank=True, null=True)),
                ("duty_rate_override", rate(blank=True, null=True)),
                ("excise_rate_override", rate(blank=True, null=True)),
                ("perception_rate_override", rate(blank=True, null=True)),
                ("antidumping_usd", money(blank=True, null=True)),
                ("countervailing_usd", money(blank=True, null=True)),
                ("sda_usd", money(blank=True, null=True)),
                ("cif", money()),
                ("duty_amount", money(default=decimal.Decimal("0"))),
                ("excise_amount", money(default=decimal.Decimal("0"))),
                ("igv_amount", money(default=decimal.Decimal("0"))),
                ("ipm_amount", money(default=decimal.Decimal("0"))),
                ("trade_remedies_amount", money(default=decimal.Decimal("0"))),
                ("sda_amount", money(default=decimal.Decimal("0"))),
                ("perception_amount", money(default=decimal.Decimal("0"))),
                ("customs_debt", money(default=decimal.Decimal("0"))),
                ("payable_at_border", money(default=decimal.Decimal("0"))),
                ("notes", models.JSONField(blank=True, default=list)),
                ("accounting_entry", models.JSONField(blank=True, null=True)),
                ("operation_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "study_case",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="imports",
                        to="cases.studycase",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="imports",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"db_table": "importaciones", "ordering": ["-operation_date", "-id"]},
        ),
        migrations.CreateModel(
            name="ImportTaxLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("concept", models.CharField(max_length=40)),
                ("taxable_base", models.DecimalField(decimal_places=4, max_digits=18)),
                ("rate", rate(blank=True, null=True)),
                ("amount", money()),
                (
                    "import_operation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tax_lines",
                        to="cases.importoperation",
                    ),
                ),
            ],
            options={"db_table": "importacion_tributos", "ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="ExportOperation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_domestic_sale", models.BooleanField(default=False)),
                ("incoterm", models.CharField(blank=True, default="", max_length=3)),
                ("description", models.CharField(max_length=255)),
                ("sale_value", money(validators=NON_NEGATIVE)),
                ("currency", models.CharField(choices=CURRENCIES, default="USD", max_length=3)),
                ("operation_date", models.DateField(default=django.utils.timezone.localdate)),
                ("origin_country", models.CharField(blank=True, default="", max_length=2)),
                ("destination_country", models.CharField(blank=True, default="", max_length=2)),
                (
                    "study_case",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="exports",
                        to="cases.studycase",
                    ),
                ),
            ],
            options={"db_table": "exportaciones", "ordering": ["-operation_date", "-id"]},
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(max_length=255)),
                ("account_code", models.CharField(blank=True, default="", max_length=10)),
                ("amount", money(validators=NON_NEGATIVE)),
                ("currency", models.CharField(choices=CURRENCIES, default="USD", max_length=3)),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "classification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="expenses",
                        to="cases.expenseclassification",
                    ),
                ),
                (
                    "study_case",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="expenses",
                        to="cases.studycase",
                    ),
                ),
            ],
            options={"db_table": "gastos", "ordering": ["-expense_date", "-id"]},
        ),
    ]
