"""Customs tax simulation package."""

from services.customs.engine import simulate
from services.customs.types import (
    OperationInput,
    Overrides,
    RuleProfile,
    SimulationResult,
    Variant,
)

__all__ = ["OperationInput", "Overrides", "RuleProfile", "SimulationResult", "Variant", "simulate"]
