"""API serializers for customs simulations."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from rest_framework import serializers

from services.customs.rounding import normalize_hs10, parse_percent
from services.customs.types import (
    DutyOverride,
    ExciseOverride,
    ImporterProfile,
    OperationInput,
    Overrides,
    PerceptionOverride,
    SdaOverride,
    TradeRemedyOverride,
    VatOverride,
)

PROFILE_CHOICES = {
    "normal": ImporterProfile.NORMAL,
    "primera_importacion": ImporterProfile.FIRST_IMPORT,
    "no_habido": ImporterProfile.NO_HABIDO,
    "publico": ImporterProfile.PUBLIC,
    "amazonia": ImporterProfile.AMAZON,
}

MONEY = {"max_digits": 16, "decimal_places": 2}
RATE = {"max_digits": 12, "decimal_places": 6}


class FlexibleBooleanField(serializers.BooleanField):
    """BooleanField that also accepts Spanish form values (``si``, ``sí``)."""

    TRUE_VALUES = serializers.BooleanField.TRUE_VALUES | {"si", "sí", "Si", "Sí", "SI", "SÍ"}


class PercentField(serializers.Field):
    """
    Percentage entered as ``50``, ``0.5``, ``"50%"`` or ``"3,5"``.

    Deserializes to a fraction between 0 and 1; blank input becomes None.
    """

    default_error_messages = {
        "invalid": "Debe ser un porcentaje válido (ej. 50, 0.5 o \"50%\").",
    }

    def __init__(self, **kwargs: Any) -> None:
        """Default to optional and nullable."""
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data: object) -> Decimal | None:
        """Parse the percentage into a fraction."""
        if data is None or str(data).strip() == "":
            return None
        rate = parse_percent(data)
        if rate is None or rate > 1:
            self.fail("invalid")
        return rate

    def to_representation(self, value: Decimal | None) -> str | None:
        """Render the fraction as a string."""
        return None if value is None else str(value)


class SimulationFormSerializer(serializers.Serializer):
    """
    Simulation form input.

    Without ``origen`` and ``tipo_cambio`` the simulation runs in USD. With
    either of them it runs in soles and ``tipo_cambio`` becomes mandatory.
    Percentages whose toggle is off are ignored.
    """

    subpartida = serializers.CharField(min_length=8, max_length=20)
    fob = serializers.DecimalField(**MONEY, min_value=Decimal("0"))
    flete = serializers.DecimalField(**MONEY, min_value=Decimal("0"))
    seguro = serializers.DecimalField(**MONEY, min_value=Decimal("0"))

    origen = serializers.CharField(max_length=2, min_length=2, required=False, allow_blank=True)
    tipo_cambio = serializers.DecimalField(
        **RATE, min_value=Decimal("0"), required=False, allow_null=True
    )
    usar_tlc = FlexibleBooleanField(required=False, default=False)

    cantidad = serializers.DecimalField(
        max_digits=16, decimal_places=4, min_value=Decimal("0"), required=False, allow_null=True
    )
    unidad = serializers.CharField(max_length=10, required=False, allow_blank=True)
    grado_alcoholico = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )

    perfil_importador = serializers.ChoiceField(choices=list(PROFILE_CHOICES), required=False)
    es_usado = FlexibleBooleanField(required=False, default=False)

    habilitar_igv = FlexibleBooleanField(required=False, allow_null=True, default=None)
    habilitar_isc = FlexibleBooleanField(required=False, allow_null=True, default=None)
    habilitar_percepcion = FlexibleBooleanField(required=False, allow_null=True, default=None)

    ad_valorem_porcentaje = PercentField()
    isc_porcentaje = PercentField()
    percepcion_tasa = PercentField()

    antidumping_usd = serializers.DecimalField(
        **MONEY, min_value=Decimal("0"), required=False, allow_null=True
    )
    compensatorio_usd = serializers.DecimalField(
        **MONEY, min_value=Decimal("0"), required=False, allow_null=True
    )
    sda_usd = serializers.DecimalField(
        **MONEY, min_value=Decimal("0"), required=False, allow_null=True
    )

    generar_asiento = FlexibleBooleanField(required=False, default=False)

    def validate_subpartida(self, value: str) -> str:
        """Require a 10-digit code once separators are stripped."""
        code = normalize_hs10(value)
        if len(code) != 10:
            raise serializers.ValidationError("La subpartida debe tener 10 dígitos.")
        return code

    def validate_origen(self, value: str) -> str:
        """Uppercase the ISO country code."""
        return value.strip().upper()

    def validate_tipo_cambio(self, value: Decimal | None) -> Decimal | None:
        """Require a positive exchange rate."""
        if value is not None and value <= 0:
            raise serializers.ValidationError("El tipo de cambio debe ser mayor que cero.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """Require an exchange rate when an origin country is given."""
        if attrs.get("origen") and not attrs.get("tipo_cambio"):
            raise serializers.ValidationError(
                {"tipo_cambio": "El tipo de cambio es obligatorio cuando se indica el origen."}
            )
        return attrs

    @property
    def with_accounting(self) -> bool:
        """Whether the caller asked for the accounting entry."""
        return bool(self.validated_data.get("generar_asiento", False))

    def to_request(self) -> tuple[OperationInput, Overrides]:
        """
        Build the engine input and the overrides from validated data.

        Returns:
            Tuple of (operation, overrides).
        """
        data = self.validated_data
        profile = data.get("perfil_importador")

        operation = OperationInput(
            hs10=data["subpartida"],
            fob=data["fob"],
            freight=data["flete"],
            insurance=data["seguro"],
            origin_country=data.get("origen") or None,
            fx_rate=data.get("tipo_cambio"),
            use_fta=data.get("usar_tlc", False),
            quantity=data.get("cantidad"),
            quantity_unit=data.get("unidad") or None,
            alcohol_strength=data.get("grado_alcoholico"),
            importer_profile=PROFILE_CHOICES[profile] if profile else None,
            is_used=data.get("es_usado", False),
        )

        excise_enabled = data.get("habilitar_isc")
        excise_rate = data.get("isc_porcentaje") if excise_enabled is not False else None
        perception_enabled = data.get("habilitar_percepcion")
        overrides = Overrides(
            duty=DutyOverride(rate=data.get("ad_valorem_porcentaje")),
            excise=ExciseOverride(enabled=excise_enabled, rate=excise_rate),
            vat=VatOverride(enabled=data.get("habilitar_igv")),
            remedies=TradeRemedyOverride(
                antidumping_usd=data.get("antidumping_usd"),
                countervailing_usd=data.get("compensatorio_usd"),
            ),
            perception=PerceptionOverride(
                enabled=perception_enabled,
                rate=data.get("percepcion_tasa") if perception_enabled is not False else None,
            ),
            sda=SdaOverride(amount_usd=data.get("sda_usd")),
        )
        return operation, overrides


class EnumValueField(serializers.Field):
    """Read-only field rendering an Enum member as its value."""

    def __init__(self, **kwargs: Any) -> None:
        """Force read-only."""
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value: Any) -> str:
        """Return the enum value."""
        return value.value


class DutyLineSerializer(serializers.Serializer):
    """Serializer for the ad-valorem duty."""

    rate = serializers.DecimalField(**RATE)
    base = serializers.DecimalField(**MONEY)
    amount = serializers.DecimalField(**MONEY)
    preference_applied = serializers.BooleanField()


class ExciseComponentSerializer(serializers.Serializer):
    """Serializer for one ISC component."""

    mode = EnumValueField()
    amount = serializers.DecimalField(**MONEY)
    base = serializers.DecimalField(**MONEY, allow_null=True)
    rate = serializers.DecimalField(**RATE, allow_null=True)
    quantity = serializers.DecimalField(max_digits=16, decimal_places=4, allow_null=True)
    unit = serializers.CharField(allow_null=True)
    per_unit = serializers.DecimalField(max_digits=16, decimal_places=4, allow_null=True)


class ExciseLineSerializer(serializers.Serializer):
    """Serializer for the ISC result."""

    mode = EnumValueField()
    total = serializers.DecimalField(**MONEY)
    components = ExciseComponentSerializer(many=True)


class RemedyItemSerializer(serializers.Serializer):
    """Serializer for one AD/CVD item."""

    type = EnumValueField()
    mode = EnumValueField()
    base = serializers.DecimalField(max_digits=18, decimal_places=4)
    rate = serializers.DecimalField(max_digits=18, decimal_places=6)
    amount = serializers.DecimalField(**MONEY)
    source = EnumValueField()


class TradeRemedyLineSerializer(serializers.Serializer):
    """Serializer for the AD/CVD result."""

    applied = serializers.BooleanField()
    total = serializers.DecimalField(**MONEY)
    items = RemedyItemSerializer(many=True)


class VatLineSerializer(serializers.Serializer):
    """Serializer for the IGV + IPM result."""

    base = serializers.DecimalField(**MONEY)
    igv = serializers.DecimalField(**MONEY)
    ipm = serializers.DecimalField(**MONEY)
    total = serializers.DecimalField(**MONEY)
    igv_rate = serializers.DecimalField(**RATE)
    ipm_rate = serializers.DecimalField(**RATE)
    exempt = serializers.BooleanField()
    enabled = serializers.BooleanField()


class PerceptionLineSerializer(serializers.Serializer):
    """Serializer for the perception result."""

    rate = serializers.DecimalField(**RATE)
    base = serializers.DecimalField(**MONEY)
    amount = serializers.DecimalField(**MONEY)
    rule = serializers.CharField()


class SdaLineSerializer(serializers.Serializer):
    """Serializer for the SDA result."""

    applies = serializers.BooleanField()
    amount = serializers.DecimalField(**MONEY)
    base = serializers.DecimalField(max_digits=18, decimal_places=4)
    rate = serializers.DecimalField(**RATE)
    source = EnumValueField()


class SimulationResultSerializer(serializers.Serializer):
    """Serializer for a full simulation result."""

    variant = EnumValueField()
    currency = serializers.CharField()
    cif = serializers.DecimalField(**MONEY)
    duty = DutyLineSerializer()
    excise = ExciseLineSerializer()
    trade_remedies = TradeRemedyLineSerializer()
    vat = VatLineSerializer()
    perception = PerceptionLineSerializer()
    sda = SdaLineSerializer()
    customs_debt = serializers.DecimalField(**MONEY)
    payable_at_border = serializers.DecimalField(**MONEY)
    notes = serializers.ListField(child=serializers.CharField())


class TaxLineSerializer(serializers.Serializer):
    """Serializer for a derived tax line."""

    concept = serializers.CharField()
    taxable_base = serializers.DecimalField(max_digits=18, decimal_places=4)
    rate = serializers.DecimalField(max_digits=18, decimal_places=6, allow_null=True)
    amount = serializers.DecimalField(**MONEY)


class AccountingLineSerializer(serializers.Serializer):
    """Serializer for an accounting line."""

    account = serializers.CharField()
    name = serializers.CharField()
    debit = serializers.DecimalField(**MONEY)
    credit = serializers.DecimalField(**MONEY)


class AccountingEntrySerializer(serializers.Serializer):
    """Serializer for the accounting preview."""

    currency = serializers.CharField()
    lines = AccountingLineSerializer(many=True)
    debit_total = serializers.DecimalField(**MONEY)
    credit_total = serializers.DecimalField(**MONEY)


class SimulationPreviewSerializer(serializers.Serializer):
    """Serializer for a simulation preview."""

    result = SimulationResultSerializer()
    tax_lines = TaxLineSerializer(many=True)
    accounting = AccountingEntrySerializer(allow_null=True)
