"""
Module: utility_engines.preconditions
Responsibility:
    Decide whether a distribution method that is legal for a meter kind
    can actually be applied to a building as it stands right now.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The building snapshot (``PreconditionContext``) is assembled by the
    caller from persistence; this module never queries storage.

Invariants enforced:
    - Rules are evaluated in a fixed order and the first failure wins;
      reasons are never aggregated.
    - ``check_precondition`` never mutates its context.
    - Failures are returned as ``PreconditionResult`` values, never raised.

Failure modes:
    - None for business conditions. ValueError only for invalid enum tags.

Usage:
    from utility_engines.preconditions import PreconditionContext, check_precondition

    result = check_precondition(
        MeterKind.HEATING,
        DistributionMethod.PER_APARTMENT,
        PreconditionContext(unit_count=5, total_area=Decimal("320"),
                            has_individual_meters=True),
    )
    result.allowed  # False -- "no heating allocators"
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from utility_engines.meter_kind import MeterKind
from utility_engines.policy import DistributionMethod
from utility_kernel.logging_config import get_logger

logger = get_logger("engines.preconditions")


@dataclass(frozen=True)
class PreconditionContext:
    """
    Snapshot of building state at calculation time.

    Contract:
        Constructed fresh per request from persisted data; never stored.
    """

    unit_count: int
    total_area: Decimal = Decimal("0")
    has_individual_meters: bool = False
    has_fixed_amount: bool = False
    has_heating_allocators: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.total_area, Decimal):
            object.__setattr__(self, "total_area", Decimal(str(self.total_area)))


@dataclass(frozen=True)
class PreconditionResult:
    """Outcome of a precondition check; ``rule`` names the rule that failed."""

    allowed: bool
    reason: str | None = None
    rule: str | None = None

    @classmethod
    def ok(cls) -> PreconditionResult:
        return cls(allowed=True)


@dataclass(frozen=True)
class PreconditionRule:
    """One named, ordered precondition."""

    name: str
    applies: Callable[[MeterKind, DistributionMethod], bool]
    holds: Callable[[PreconditionContext], bool]
    reason: str


def _method_is(method: DistributionMethod) -> Callable[[MeterKind, DistributionMethod], bool]:
    return lambda _kind, m: m == method


PRECONDITION_RULES: tuple[PreconditionRule, ...] = (
    PreconditionRule(
        name="area_split_requires_unit_areas",
        applies=_method_is(DistributionMethod.PER_AREA),
        holds=lambda ctx: ctx.total_area > 0,
        reason="missing unit areas",
    ),
    PreconditionRule(
        name="equal_split_requires_units",
        applies=_method_is(DistributionMethod.PER_APARTMENT),
        holds=lambda ctx: ctx.unit_count > 0,
        reason="no units",
    ),
    # Legacy billing rule tying equal split to per-unit metering; under review.
    PreconditionRule(
        name="equal_split_requires_individual_meters",
        applies=_method_is(DistributionMethod.PER_APARTMENT),
        holds=lambda ctx: ctx.has_individual_meters,
        reason="no individual meters",
    ),
    PreconditionRule(
        name="fixed_split_requires_fixed_amount",
        applies=_method_is(DistributionMethod.FIXED_SPLIT),
        holds=lambda ctx: ctx.has_fixed_amount,
        reason="no fixed amount",
    ),
    PreconditionRule(
        name="heating_equal_split_requires_allocators",
        applies=lambda kind, m: (
            kind == MeterKind.HEATING and m == DistributionMethod.PER_APARTMENT
        ),
        holds=lambda ctx: ctx.has_heating_allocators,
        reason="no heating allocators",
    ),
)


def check_precondition(
    kind: MeterKind,
    method: DistributionMethod,
    ctx: PreconditionContext,
    rules: tuple[PreconditionRule, ...] = PRECONDITION_RULES,
) -> PreconditionResult:
    """Evaluate ``rules`` in order and return the first failure.

    Returns ``PreconditionResult(allowed=True)`` when no rule fires.
    """
    kind = MeterKind(kind)
    method = DistributionMethod(method)

    for rule in rules:
        if rule.applies(kind, method) and not rule.holds(ctx):
            logger.info("precondition_failed", extra={
                "meter_kind": kind.value,
                "method": method.value,
                "rule": rule.name,
                "reason": rule.reason,
            })
            return PreconditionResult(allowed=False, reason=rule.reason, rule=rule.name)

    return PreconditionResult.ok()
