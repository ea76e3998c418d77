"""
utility_services.meter_validation -- Validation facade for meter configuration
and billing calculations.

Responsibility:
    The entry point forms and billing jobs call. Composes the classifier,
    policy registry and precondition evaluator to validate a meter's
    configuration, and checks calculation inputs before the calculator is
    invoked.

Architecture position:
    Services -- orchestration over engines + config. No I/O of its own;
    building snapshots are supplied by the caller.

Invariants enforced:
    - Configuration errors (method not allowed for the kind) RAISE; they
      are rejected at the write boundary before anything is persisted.
    - Precondition and input problems are RETURNED as ``ValidationResult``
      so a caller can warn instead of aborting a billing run.
    - ``distribute`` never returns shares for a method the kind does not
      allow or the building does not support.

Failure modes:
    - DistributionNotAllowedError from ``validate_meter_distribution`` /
      ``validate_kind_distribution`` / ``distribute``.
    - PreconditionFailedError from ``distribute``.
    - MissingDistributionInputError, CurrencyMismatchError propagated from
      the calculator and reconciliation engines.
    - EmptyReconciliationError when the calculator yields no shares for a
      non-zero total; a cost is never left unallocated.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from utility_config import get_policy_registry
from utility_engines.distribution import (
    DistributionRequest,
    DistributionResult,
    MeterReading,
    calculate_distribution,
)
from utility_engines.meter_kind import MeterKind, MeterType, classify_meter_kind
from utility_engines.policy import AllocationPolicyRegistry, DistributionMethod
from utility_engines.preconditions import PreconditionContext, check_precondition
from utility_engines.reconciliation import RoundingReconciler, reconcile
from utility_kernel.domain.values import Money
from utility_kernel.exceptions import PreconditionFailedError
from utility_kernel.logging_config import get_logger

logger = get_logger("services.meter_validation")


@dataclass(frozen=True)
class ValidationResult:
    """Recoverable validation outcome; ``reason`` is set when not valid."""

    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str) -> ValidationResult:
        return cls(valid=False, reason=reason)


@dataclass(frozen=True)
class CalculationInputs:
    """What a billing job has on hand before calling the calculator."""

    total_amount: Money | None = None
    unit_count: int = 0
    total_area: Decimal = Decimal("0")
    areas: tuple[Decimal, ...] = ()
    readings: tuple[MeterReading, ...] = ()
    fixed_amount: Money | None = None
    occupants: tuple[int, ...] | None = None

    @classmethod
    def from_request(cls, request: DistributionRequest) -> CalculationInputs:
        total_area = request.total_area
        if total_area is None:
            total_area = sum(
                (a for a in (request.areas or ()) if a > 0), Decimal("0"),
            )
        return cls(
            total_amount=request.total_amount,
            unit_count=request.unit_count,
            total_area=total_area,
            areas=request.areas or (),
            readings=request.readings,
            fixed_amount=request.fixed_amount,
            occupants=request.occupants,
        )


@dataclass(frozen=True)
class ReconciledDistribution:
    """Final per-unit charges, rounded and summing exactly to ``total``."""

    method: DistributionMethod
    shares: tuple[Money, ...]
    total: Money
    calculation: DistributionResult


_NEEDS_TOTAL = frozenset({
    DistributionMethod.PER_APARTMENT,
    DistributionMethod.PER_AREA,
    DistributionMethod.PER_PERSON,
})


def _registry(registry: AllocationPolicyRegistry | None) -> AllocationPolicyRegistry:
    return registry if registry is not None else get_policy_registry()


# ---------------------------------------------------------------------------
# Configuration-time validation
# ---------------------------------------------------------------------------


def validate_kind_distribution(
    kind: MeterKind,
    method: DistributionMethod,
    registry: AllocationPolicyRegistry | None = None,
) -> None:
    """Reject a method that is not legal for an explicit meter kind.

    Raises:
        DistributionNotAllowedError
    """
    _registry(registry).assert_allowed(kind, method)


def validate_meter_distribution(
    name: str,
    meter_type: MeterType | str,
    method: DistributionMethod | str,
    registry: AllocationPolicyRegistry | None = None,
) -> MeterKind:
    """Classify a named meter and reject a method its kind does not allow.

    Returns the classified kind so the caller can store it with the meter.

    Raises:
        DistributionNotAllowedError
    """
    kind = classify_meter_kind(name, meter_type)
    validate_kind_distribution(kind, DistributionMethod(method), registry)
    return kind


def validate_meter_preconditions(
    name: str,
    meter_type: MeterType | str,
    method: DistributionMethod | str,
    ctx: PreconditionContext,
) -> ValidationResult:
    """Check whether a named meter's method can be applied to the building."""
    kind = classify_meter_kind(name, meter_type)
    result = check_precondition(kind, DistributionMethod(method), ctx)
    return ValidationResult(valid=result.allowed, reason=result.reason)


# ---------------------------------------------------------------------------
# Calculation-time validation
# ---------------------------------------------------------------------------


def validate_calculation_inputs(
    method: DistributionMethod | str,
    inputs: CalculationInputs,
) -> ValidationResult:
    """Check the calculator will have what ``method`` needs.

    Never raises for missing or invalid data.
    """
    method = DistributionMethod(method)

    match method:
        case DistributionMethod.PER_APARTMENT:
            if inputs.unit_count <= 0:
                return ValidationResult.fail("no units")
        case DistributionMethod.PER_PERSON:
            if not inputs.occupants:
                return ValidationResult.fail("no occupant data")
            if any(count < 0 for count in inputs.occupants):
                return ValidationResult.fail("occupant counts cannot be negative")
            if sum(inputs.occupants) <= 0:
                return ValidationResult.fail("occupant count must be greater than 0")
        case DistributionMethod.PER_AREA:
            if not inputs.areas or inputs.total_area <= 0:
                return ValidationResult.fail("missing unit areas")
        case DistributionMethod.PER_CONSUMPTION:
            if not inputs.readings:
                return ValidationResult.fail("no meter readings")
        case DistributionMethod.FIXED_SPLIT:
            if inputs.fixed_amount is None or not inputs.fixed_amount.is_positive:
                return ValidationResult.fail("no fixed amount")

    if method in _NEEDS_TOTAL and inputs.total_amount is None:
        return ValidationResult.fail("total amount is required")
    if inputs.total_amount is not None and inputs.total_amount.is_negative:
        return ValidationResult.fail("total amount cannot be negative")

    return ValidationResult.ok()


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def distribute(
    kind: MeterKind,
    method: DistributionMethod,
    ctx: PreconditionContext,
    request: DistributionRequest,
    *,
    registry: AllocationPolicyRegistry | None = None,
    strategy: RoundingReconciler | None = None,
) -> ReconciledDistribution:
    """Policy check, precondition check, calculation and reconciliation.

    Raises:
        DistributionNotAllowedError: method not legal for ``kind``.
        PreconditionFailedError: building state forbids the method.
        MissingDistributionInputError: calculator input absent.
        EmptyReconciliationError: no shares to carry a non-zero total.
    """
    kind = MeterKind(kind)
    method = DistributionMethod(method)

    validate_kind_distribution(kind, method, registry)

    precondition = check_precondition(kind, method, ctx)
    if not precondition.allowed:
        raise PreconditionFailedError(
            kind.value, method.value, precondition.rule, precondition.reason,
        )

    calculation = calculate_distribution(method, request)
    total = calculation.total.round()
    if calculation.amounts or not total.is_zero:
        shares = reconcile(calculation.amounts, total, strategy)
    else:
        shares = ()

    logger.info("distribution_reconciled", extra={
        "meter_kind": kind.value,
        "method": method.value,
        "total": str(total.amount),
        "currency": total.currency.code,
        "share_count": len(shares),
    })
    return ReconciledDistribution(
        method=method,
        shares=shares,
        total=total,
        calculation=calculation,
    )
