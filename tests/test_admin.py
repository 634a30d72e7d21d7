"""Tests for Django admin configurations."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from django.contrib import admin as django_admin
from django.contrib.admin.sites import AdminSite

from apps.cases.admin import ImportOperationAdmin, StudyCaseAdmin
from apps.cases.models import ExpenseClassification, ImportOperation, StudyCase
from apps.tariffs.models import AdminFee, Tariff, TradeRemedy

if TYPE_CHECKING:
    from apps.accounts.models import User


@pytest.fixture()
def import_operation(study_case: StudyCase) -> ImportOperation:
    """Stored USD import."""
    return ImportOperation.objects.create(
        study_case=study_case,
        user=study_case.user,
        hs10="4819100000",
        cif=Decimal("1200.00"),
        customs_debt=Decimal("300.96"),
        payable_at_border=Decimal("353.49"),
    )


@pytest.mark.django_db
class TestStudyCaseAdmin:
    """Tests for StudyCaseAdmin."""

    def test_import_count(self, study_case: StudyCase, user: User) -> None:
        """import_count follows the imports registered in the case."""
        admin = StudyCaseAdmin(StudyCase, AdminSite())
        assert admin.import_count(study_case) == 0

        ImportOperation.objects.create(
            study_case=study_case, user=user, hs10="4819100000", cif=Decimal("1")
        )
        assert admin.import_count(study_case) == 1


@pytest.mark.django_db
class TestImportOperationAdmin:
    """Tests for ImportOperationAdmin."""

    def test_payable(self, import_operation: ImportOperation) -> None:
        """payable shows the amount with its currency."""
        admin = ImportOperationAdmin(ImportOperation, AdminSite())

        assert admin.payable(import_operation) == "353.49 USD"


class TestRegistrations:
    """Tests for admin site registrations."""

    @pytest.mark.parametrize(
        "model",
        [StudyCase, ImportOperation, ExpenseClassification, Tariff, TradeRemedy, AdminFee],
    )
    def test_registered(self, model: type) -> None:
        """Rule store and study case models are editable in the admin."""
        assert django_admin.site.is_registered(model)
