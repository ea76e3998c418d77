"""
Module: utility_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for higher layers (utility_config, utility_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import utility_kernel (and sibling engine modules).
    MUST NOT import utility_config or utility_services.

Invariants enforced:
    - Purity: engines never read the clock, the environment or files.
    - Decimal-only arithmetic: all monetary amounts are ``Money``.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - Typed ``UtilityKernelError`` subclasses propagated from individual
      engines on invalid input.

Audit relevance:
    Engine entry points are traced via ``@traced_engine`` (see
    ``utility_engines.tracer``), emitting UTILITY_ENGINE_TRACE records.

Usage:
    from utility_engines import (
        DistributionMethod,
        DistributionRequest,
        MeterKind,
        calculate_distribution,
        check_precondition,
        reconcile,
    )
"""

from utility_engines.distribution import (
    DistributionCalculator,
    DistributionRequest,
    DistributionResult,
    MeterReading,
    calculate_distribution,
)
from utility_engines.legacy import (
    CollectionMode,
    MeterScope,
    convert_legacy_distribution,
    infer_meter_scope,
)
from utility_engines.meter_kind import MeterKind, MeterType, classify_meter_kind
from utility_engines.policy import (
    AllocationPolicy,
    AllocationPolicyRegistry,
    DistributionMethod,
)
from utility_engines.preconditions import (
    PRECONDITION_RULES,
    PreconditionContext,
    PreconditionResult,
    PreconditionRule,
    check_precondition,
)
from utility_engines.reconciliation import (
    DEFAULT_RECONCILER,
    LargestRemainderReconciler,
    LastUnitReconciler,
    RoundingReconciler,
    reconcile,
)
from utility_engines.tracer import traced_engine

__all__ = [
    # Classification
    "MeterKind",
    "MeterType",
    "classify_meter_kind",
    # Policy
    "AllocationPolicy",
    "AllocationPolicyRegistry",
    "DistributionMethod",
    # Preconditions
    "PRECONDITION_RULES",
    "PreconditionContext",
    "PreconditionResult",
    "PreconditionRule",
    "check_precondition",
    # Distribution
    "DistributionCalculator",
    "DistributionRequest",
    "DistributionResult",
    "MeterReading",
    "calculate_distribution",
    # Reconciliation
    "DEFAULT_RECONCILER",
    "LargestRemainderReconciler",
    "LastUnitReconciler",
    "RoundingReconciler",
    "reconcile",
    # Legacy data
    "CollectionMode",
    "MeterScope",
    "convert_legacy_distribution",
    "infer_meter_scope",
    # Tracing
    "traced_engine",
]
