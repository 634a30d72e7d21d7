"""Customs simulation service: previews and registered imports."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone

from apps.cases.models import ImportOperation, ImportTaxLine, StudyCase
from core.errors import NotFoundOrUnauthorizedError
from core.logging import bound_context, get_logger
from services.customs.engine import simulate
from services.customs.entries import (
    accounting_entry_to_json,
    build_accounting_entry,
    build_tax_lines,
)
from services.customs.resolver import RuleProfileResolver
from services.customs.rounding import normalize_hs10
from services.customs.types import ImporterProfile, OperationInput, Overrides, SimulationPreview

if TYPE_CHECKING:
    import datetime

    from apps.accounts.models import User

logger = get_logger(__name__)

CASE_NOT_FOUND = "Caso de estudio no encontrado o no autorizado"


class CustomsSimulationService:
    """
    Runs the tax cascade against the rule store.

    ``preview`` is side-effect free; ``register_import`` stores the
    operation, its tax lines and its accounting projection under a study
    case of the user.
    """

    def __init__(self, resolver: RuleProfileResolver | None = None) -> None:
        """
        Initialize the service.

        Args:
            resolver: Rule profile resolver; a default one is built if omitted.
        """
        self._resolver = resolver or RuleProfileResolver()

    def preview(
        self,
        operation: OperationInput,
        overrides: Overrides | None = None,
        *,
        as_of: datetime.date | None = None,
        with_accounting: bool = False,
    ) -> SimulationPreview:
        """
        Simulate an operation without persisting anything.

        Raises:
            NotFoundError: Unknown tariff line.
            MissingConfigError: No admin fees for the year of ``as_of``.
            InvalidInputError: Missing customs value or exchange rate.
        """
        profile = self._resolver.resolve(operation.hs10, operation.origin_country, as_of)
        result = simulate(operation, profile, overrides)
        logger.debug(
            "Simulated operation",
            hs10=profile.hs10,
            variant=result.variant.value,
            customs_debt=str(result.customs_debt),
        )
        return SimulationPreview(
            profile=profile,
            result=result,
            tax_lines=build_tax_lines(result),
            accounting=build_accounting_entry(result) if with_accounting else None,
        )

    def register_import(
        self,
        user: User,
        study_case_id: int,
        operation: OperationInput,
        overrides: Overrides | None = None,
        *,
        description: str = "",
        operation_date: datetime.date | None = None,
    ) -> ImportOperation:
        """
        Simulate and store an import under one of the user's study cases.

        The user's default importer profile applies when the operation
        carries none. Rules are resolved as of ``operation_date``.

        Raises:
            NotFoundOrUnauthorizedError: The study case is missing or foreign.
        """
        with bound_context(study_case_id=study_case_id, hs10=normalize_hs10(operation.hs10)):
            return self._register(
                user,
                study_case_id,
                operation,
                overrides,
                description=description,
                operation_date=operation_date,
            )

    def _register(
        self,
        user: User,
        study_case_id: int,
        operation: OperationInput,
        overrides: Overrides | None,
        *,
        description: str,
        operation_date: datetime.date | None,
    ) -> ImportOperation:
        case = StudyCase.objects.filter(pk=study_case_id, user=user).first()
        if case is None:
            raise NotFoundOrUnauthorizedError(CASE_NOT_FOUND, details=f"id={study_case_id}")

        if operation.importer_profile is None:
            operation = dataclasses.replace(
                operation,
                importer_profile=ImporterProfile(user.importer_profile),
            )

        overrides = overrides or Overrides()
        operation_date = operation_date or timezone.localdate()
        preview = self.preview(
            operation, overrides, as_of=operation_date, with_accounting=True
        )
        result = preview.result

        with transaction.atomic():
            record = ImportOperation.objects.create(
                study_case=case,
                user=user,
                hs10=preview.profile.hs10,
                description=description or preview.profile.description[:255],
                currency=result.currency,
                fob=operation.fob,
                freight=operation.freight,
                insurance=operation.insurance,
                origin_country=operation.origin_country or "",
                fx_rate=operation.fx_rate,
                use_fta=operation.use_fta,
                quantity=operation.quantity,
                quantity_unit=operation.quantity_unit or "",
                alcohol_strength=operation.alcohol_strength,
                importer_profile=operation.importer_profile.value,
                is_used=operation.is_used,
                vat_enabled=overrides.vat.enabled,
                excise_enabled=overrides.excise.enabled,
                perception_enabled=overrides.perception.enabled,
                duty_rate_override=overrides.duty.rate,
                excise_rate_override=overrides.excise.rate,
                perception_rate_override=overrides.perception.rate,
                antidumping_usd=overrides.remedies.antidumping_usd,
                countervailing_usd=overrides.remedies.countervailing_usd,
                sda_usd=overrides.sda.amount_usd,
                cif=result.cif,
                duty_amount=result.duty.amount,
                excise_amount=result.excise.total,
                igv_amount=result.vat.igv,
                ipm_amount=result.vat.ipm,
                trade_remedies_amount=result.trade_remedies.total,
                sda_amount=result.sda.amount,
                perception_amount=result.perception.amount,
                customs_debt=result.customs_debt,
                payable_at_border=result.payable_at_border,
                notes=list(result.notes),
                accounting_entry=accounting_entry_to_json(preview.accounting)
                if preview.accounting
                else None,
                operation_date=operation_date,
            )
            ImportTaxLine.objects.bulk_create(
                ImportTaxLine(
                    import_operation=record,
                    concept=line.concept,
                    taxable_base=line.taxable_base,
                    rate=line.rate,
                    amount=line.amount,
                )
                for line in preview.tax_lines
            )

        logger.info(
            "Registered import",
            import_id=record.pk,
            currency=record.currency,
            customs_debt=str(record.customs_debt),
        )
        return record
