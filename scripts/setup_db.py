#!/usr/bin/env python
"""
Database setup script.

Creates the 'miaff' schema in PostgreSQL, runs migrations and seeds the
constants the simulator refuses to run without: the current year's UIT/SDA
admin fees and the IGV/IPM rates.

Usage:
    cd /path/to/customs_simulator
    python scripts/setup_db.py [--force-recreate] [--uit 5500]
"""

import argparse
import os
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

DEFAULT_UIT = Decimal("5500")
DEFAULT_SDA_RATE = Decimal("0.0235")
DEFAULT_THRESHOLD_UIT = Decimal("3")


def create_schema_raw(force_recreate: bool = False) -> None:
    """
    Create the rule store schema using a raw psycopg connection.

    This runs BEFORE Django is initialized to avoid search_path issues.
    """
    import psycopg

    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    schema_name = os.environ.get("DB_SCHEMA", "miaff")

    print(f"Setting up schema '{schema_name}'...")

    with psycopg.connect(database_url) as conn:
        conn.autocommit = True
        with conn.cursor() as cursor:
            cursor.execute(
                "SELECT schema_name FROM information_schema.schemata WHERE schema_name = %s",
                (schema_name,),
            )
            exists = cursor.fetchone() is not None

            if exists and force_recreate:
                print(f"Dropping existing schema '{schema_name}'...")
                cursor.execute(f'DROP SCHEMA "{schema_name}" CASCADE')
                exists = False

            if not exists:
                cursor.execute(f'CREATE SCHEMA "{schema_name}"')
                print(f"Schema '{schema_name}' created successfully.")
            else:
                print(f"Schema '{schema_name}' already exists.")


def setup_django() -> None:
    """Setup Django."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings.development")

    import django

    django.setup()


def run_migrations() -> None:
    """Run Django migrations."""
    from django.core.management import call_command

    print("\nRunning migrations...")
    call_command("migrate", verbosity=1)
    print("Migrations completed.")


def seed_admin_fees(uit: Decimal, sda_rate: Decimal, threshold_uit: Decimal) -> None:
    """Create the admin fee row for the current year if it is missing."""
    from django.utils import timezone

    from apps.tariffs.models import AdminFee

    year = timezone.localdate().year
    fee, created = AdminFee.objects.get_or_create(
        year=year,
        defaults={
            "uit_value": uit,
            "sda_rate_import": sda_rate,
            "threshold_cif_in_uit": threshold_uit,
        },
    )
    state = "created" if created else "already configured"
    print(f"\nAdmin fees {year} {state}: UIT {fee.uit_value}, SDA {fee.sda_rate_import}")


def seed_consumption_taxes() -> None:
    """Create the IGV/IPM rate rows from the TAX_ settings."""
    from apps.tariffs.models import ConsumptionTaxRate
    from core.config import get_settings

    tax = get_settings().tax
    for code, rate in (
        (ConsumptionTaxRate.Code.IGV, tax.igv_rate),
        (ConsumptionTaxRate.Code.IPM, tax.ipm_rate),
    ):
        _, created = ConsumptionTaxRate.objects.get_or_create(code=code, defaults={"rate": rate})
        if created:
            print(f"{code} rate set to {rate}")


def seed_expense_classifications() -> None:
    """Create the four expense classifications of the income statement."""
    from apps.cases.models import ExpenseClassification
    from services.profitability.types import ExpenseCategory

    for category in ExpenseCategory:
        ExpenseClassification.objects.get_or_create(name=category.value)


def create_user(email: str, password: str) -> None:
    """Create a user with the given credentials."""
    from apps.accounts.models import User

    if User.objects.filter(email=email).exists():
        print(f"\nUser '{email}' already exists.")
        return

    print(f"\nCreating user '{email}'...")
    username = email.split("@")[0]
    user = User.objects.create_user(username=username, email=email, password=password)
    print(f"User '{user.email}' created successfully.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Setup database")
    parser.add_argument(
        "--force-recreate",
        action="store_true",
        help="Drop and recreate schema (WARNING: destroys all data)",
    )
    parser.add_argument("--uit", type=Decimal, default=DEFAULT_UIT, help="UIT of the current year")
    parser.add_argument("--sda-rate", type=Decimal, default=DEFAULT_SDA_RATE)
    parser.add_argument("--threshold-uit", type=Decimal, default=DEFAULT_THRESHOLD_UIT)
    parser.add_argument("--email", help="Create a user with this email")
    parser.add_argument("--password", help="Password for --email")
    args = parser.parse_args()

    load_dotenv(project_root / ".env")

    # Create schema BEFORE Django initialization (to avoid search_path issues)
    create_schema_raw(force_recreate=args.force_recreate)

    setup_django()

    run_migrations()
    seed_admin_fees(args.uit, args.sda_rate, args.threshold_uit)
    seed_consumption_taxes()
    seed_expense_classifications()

    if args.email and args.password:
        create_user(email=args.email, password=args.password)

    print("\nDatabase setup complete!")
