"""
Module: utility_engines.policy
Responsibility:
    Distribution methods and the per-kind allocation policy registry:
    which methods are legal for a meter kind, and which one is the default.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The concrete policy table is data owned by ``utility_config``; this
    module only defines the types and the read-only lookup structure.

Invariants enforced:
    - ``AllocationPolicy.default`` is always a member of ``allowed``
      (checked at construction).
    - A registry covers every ``MeterKind``; lookups never miss.
    - The registry is immutable after construction and safe to share
      across concurrent billing requests without locking.

Failure modes:
    - ValueError on a policy whose default is not allowed, or whose
      allowed set is empty.
    - ValueError on a registry missing a meter kind.
    - DistributionNotAllowedError from ``assert_allowed``.

Usage:
    from utility_config import get_policy_registry

    registry = get_policy_registry()
    registry.is_allowed(MeterKind.INTERNET, DistributionMethod.PER_AREA)  # False
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from utility_engines.meter_kind import MeterKind
from utility_kernel.exceptions import DistributionNotAllowedError
from utility_kernel.logging_config import get_logger

logger = get_logger("engines.policy")


class DistributionMethod(str, Enum):
    """Rule used to split a utility cost across units."""

    PER_CONSUMPTION = "per_consumption"  # By each unit's own meter reading
    PER_APARTMENT = "per_apartment"  # Equal split across units
    PER_AREA = "per_area"  # Proportional to unit floor area
    PER_PERSON = "per_person"  # Proportional to occupant count
    FIXED_SPLIT = "fixed_split"  # Same fixed fee for every unit


@dataclass(frozen=True)
class AllocationPolicy:
    """
    Legal distribution methods for one meter kind.

    Contract:
        Frozen dataclass; one instance per ``MeterKind``.
    Guarantees:
        - ``default in allowed``.
        - ``allowed`` is non-empty.
    """

    allowed: frozenset[DistributionMethod]
    default: DistributionMethod
    supports_individual_metering: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed", frozenset(self.allowed))
        if not self.allowed:
            raise ValueError("Allocation policy must allow at least one method")
        if self.default not in self.allowed:
            raise ValueError(
                f"Default method {self.default.value} is not in allowed set "
                f"{sorted(m.value for m in self.allowed)}"
            )


class AllocationPolicyRegistry:
    """
    Read-only lookup of allocation policies by meter kind.

    Contract:
        Pure table lookups, no side effects.
    Guarantees:
        - ``is_allowed(kind, m)`` is true iff ``m in allowed_methods(kind)``.
        - ``default_method(kind) in allowed_methods(kind)``.
    Non-goals:
        - Does not decide whether a method is applicable to a building
          right now; see ``utility_engines.preconditions``.
    """

    def __init__(
        self,
        policies: Mapping[MeterKind, AllocationPolicy],
        labels: Mapping[DistributionMethod, str] | None = None,
    ) -> None:
        missing = [kind.value for kind in MeterKind if kind not in policies]
        if missing:
            raise ValueError(f"Allocation policy missing for meter kinds: {missing}")
        self._policies = MappingProxyType(dict(policies))
        self._labels = MappingProxyType(dict(labels or {}))

    def policy(self, kind: MeterKind) -> AllocationPolicy:
        return self._policies[MeterKind(kind)]

    def allowed_methods(self, kind: MeterKind) -> frozenset[DistributionMethod]:
        return self.policy(kind).allowed

    def default_method(self, kind: MeterKind) -> DistributionMethod:
        return self.policy(kind).default

    def is_allowed(self, kind: MeterKind, method: DistributionMethod) -> bool:
        return DistributionMethod(method) in self.policy(kind).allowed

    def supports_individual_metering(self, kind: MeterKind) -> bool:
        return self.policy(kind).supports_individual_metering

    def assert_allowed(self, kind: MeterKind, method: DistributionMethod) -> None:
        """Raise if ``method`` is not legal for ``kind``.

        Raises:
            DistributionNotAllowedError: with the allowed set attached.
        """
        kind = MeterKind(kind)
        method = DistributionMethod(method)
        allowed = self.allowed_methods(kind)
        if method not in allowed:
            logger.warning("distribution_not_allowed", extra={
                "meter_kind": kind.value,
                "method": method.value,
                "allowed": sorted(m.value for m in allowed),
            })
            raise DistributionNotAllowedError(
                kind.value, method.value, (m.value for m in allowed),
            )

    def label(self, method: DistributionMethod) -> str:
        """Human-readable label for a method, falling back to its tag."""
        method = DistributionMethod(method)
        return self._labels.get(method, method.value)

    def kinds(self) -> tuple[MeterKind, ...]:
        return tuple(self._policies.keys())
