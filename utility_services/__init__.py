"""
utility_services -- Package init and public API.

Responsibility:
    Orchestration over the pure engines and the policy configuration:
    meter validation, meter definitions and per-meter billing runs.

Architecture position:
    Services -- the top layer.

    Dependency direction (enforced by tests/architecture/test_import_boundaries.py):
        utility_services/ -> utility_config/   (allowed)
        utility_services/ -> utility_engines/  (allowed)
        utility_services/ -> utility_kernel/   (allowed)
        utility_engines/  -> utility_services/ (FORBIDDEN)
        utility_config/   -> utility_services/ (FORBIDDEN)
"""

from utility_services.billing_service import MeterBillingService
from utility_services.meter_validation import (
    CalculationInputs,
    ReconciledDistribution,
    ValidationResult,
    distribute,
    validate_calculation_inputs,
    validate_kind_distribution,
    validate_meter_distribution,
    validate_meter_preconditions,
)
from utility_services.meters import (
    MeterDefinition,
    ValidationIssue,
    method_label,
    validate_meter_definition,
    validate_meter_definitions,
)
from utility_services.ports import CalculationSnapshotSource

__all__ = [
    "CalculationInputs",
    "CalculationSnapshotSource",
    "MeterBillingService",
    "MeterDefinition",
    "ReconciledDistribution",
    "ValidationIssue",
    "ValidationResult",
    "distribute",
    "method_label",
    "validate_calculation_inputs",
    "validate_kind_distribution",
    "validate_meter_definition",
    "validate_meter_definitions",
    "validate_meter_distribution",
    "validate_meter_preconditions",
]
