import decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

RATE_VALIDATORS = [
    django.core.validators.MinValueValidator(decimal.Decimal("0")),
    django.core.validators.MaxValueValidator(decimal.Decimal("1")),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AdminFee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("year", models.PositiveSmallIntegerField(unique=True)),
                ("uit_value", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "sda_rate_import",
                    models.DecimalField(
                        decimal_places=4,
                        help_text="SDA as a fraction of one UIT (0.0235)",
                        max_digits=7,
                        validators=RATE_VALIDATORS,
                    ),
                ),
                (
                    "threshold_cif_in_uit",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="CIF threshold, in UITs, above which SDA applies",
                        max_digits=7,
                    ),
                ),
            ],
            options={"db_table": "admin_fees", "ordering": ["-year"]},
        ),
        migrations.CreateModel(
            name="ConsumptionTaxRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        choices=[
                            ("IGV", "Impuesto General a las Ventas"),
                            ("IPM", "Impuesto de Promoción Municipal"),
                        ],
                        max_length=3,
                        unique=True,
                    ),
                ),
                ("rate", models.DecimalField(decimal_places=4, max_digits=5, validators=RATE_VALIDATORS)),
            ],
            options={"db_table": "impuesto"},
        ),
        migrations.CreateModel(
            name="Tariff",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hs10", models.CharField(help_text="10-digit code, digits only", max_length=10, unique=True)),
                ("description", models.TextField()),
                (
                    "mfn_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=decimal.Decimal("0"),
                        help_text="Ad-valorem MFN rate as a fraction (0.06 for 6%)",
                        max_digits=7,
                        validators=RATE_VALIDATORS,
                    ),
                ),
            ],
            options={"db_table": "tariffs", "ordering": ["hs10"]},
        ),
        migrations.CreateModel(
            name="FtaRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("valid_from", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "valid_to",
                    models.DateField(
                        blank=True, help_text="Last day in force; empty means open-ended", null=True
                    ),
                ),
                ("country", models.CharField(help_text="ISO 3166-1 alpha-2 origin", max_length=2)),
                ("agreement", models.CharField(blank=True, default="", max_length=100)),
                ("rate", models.DecimalField(decimal_places=4, max_digits=7, validators=RATE_VALIDATORS)),
                (
                    "tariff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fta_rates",
                        to="tariffs.tariff",
                    ),
                ),
            ],
            options={"db_table": "fta_rates"},
        ),
        migrations.AddIndex(
            model_name="ftarate",
            index=models.Index(fields=["tariff", "country", "valid_from"], name="fta_rates_lookup_idx"),
        ),
        migrations.CreateModel(
            name="IscRuleRow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("valid_from", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "valid_to",
                    models.DateField(
                        blank=True, help_text="Last day in force; empty means open-ended", null=True
                    ),
                ),
                (
                    "system",
                    models.CharField(
                        choices=[
                            ("none", "none"),
                            ("ad_valorem", "ad_valorem"),
                            ("specific", "specific"),
                            ("public", "public"),
                            ("mixed", "mixed"),
                        ],
                        default="none",
                        max_length=20,
                    ),
                ),
                (
                    "ad_valorem_rate",
                    models.DecimalField(
                        blank=True, decimal_places=4, max_digits=7, null=True, validators=RATE_VALIDATORS
                    ),
                ),
                (
                    "specific_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=4,
                        help_text="Amount per unit in soles",
                        max_digits=12,
                        null=True,
                    ),
                ),
                ("unit", models.CharField(blank=True, default="", max_length=10)),
                ("params", models.JSONField(blank=True, default=dict)),
                (
                    "tariff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="isc_rules",
                        to="tariffs.tariff",
                    ),
                ),
            ],
            options={"db_table": "isc_rules", "verbose_name": "ISC rule"},
        ),
        migrations.CreateModel(
            name="PermitRequirement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("authority", models.CharField(max_length=100)),
                ("note", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "tariff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="permits",
                        to="tariffs.tariff",
                    ),
                ),
            ],
            options={"db_table": "permits_map", "ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="TradeRemedy",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("valid_from", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "valid_to",
                    models.DateField(
                        blank=True, help_text="Last day in force; empty means open-ended", null=True
                    ),
                ),
                ("country", models.CharField(max_length=2)),
                ("type", models.CharField(choices=[("AD", "AD"), ("CVD", "CVD")], max_length=3)),
                (
                    "mode",
                    models.CharField(
                        choices=[("ad_valorem", "ad_valorem"), ("specific", "specific")], max_length=20
                    ),
                ),
                (
                    "rate_or_amount",
                    models.DecimalField(
                        decimal_places=4,
                        help_text="Rate for ad_valorem, soles per unit for specific",
                        max_digits=14,
                    ),
                ),
                ("unit", models.CharField(blank=True, default="", max_length=10)),
                (
                    "tariff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="trade_remedies",
                        to="tariffs.tariff",
                    ),
                ),
            ],
            options={"db_table": "trade_remedies", "verbose_name_plural": "Trade remedies"},
        ),
        migrations.CreateModel(
            name="VatExemption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("valid_from", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "valid_to",
                    models.DateField(
                        blank=True, help_text="Last day in force; empty means open-ended", null=True
                    ),
                ),
                ("legal_basis", models.CharField(blank=True, default="", max_length=200)),
                (
                    "tariff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vat_exemptions",
                        to="tariffs.tariff",
                    ),
                ),
            ],
            options={"db_table": "vat_exempt"},
        ),
    ]
