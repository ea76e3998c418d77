"""
Configuration Validator (``utility_config.validator``).

Responsibility
--------------
Validates a parsed ``AllocationPolicyTable`` before it is turned into a
runtime registry.

Invariants enforced
-------------------
* Every ``MeterKind`` has exactly one policy.
* Every referenced method is a known ``DistributionMethod``.
* Each policy's default is one of its allowed methods.
* Every ``DistributionMethod`` has a display label.

Failure modes
-------------
* Validation errors (``PolicyValidationResult.errors``) -> the table MUST
  NOT be used.
* Warnings do not block use but should be reviewed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from utility_config.schema import AllocationPolicyTable
from utility_engines.meter_kind import MeterKind
from utility_engines.policy import DistributionMethod

_KNOWN_KINDS = frozenset(k.value for k in MeterKind)
_KNOWN_METHODS = frozenset(m.value for m in DistributionMethod)


@dataclass
class PolicyValidationResult:
    """``is_valid`` is ``True`` only when ``errors`` is empty."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_policy_table(table: AllocationPolicyTable) -> PolicyValidationResult:
    """Validate structure and internal consistency of a policy table."""
    result = PolicyValidationResult()

    counts = Counter(p.kind for p in table.policies)
    for kind, count in sorted(counts.items()):
        if kind not in _KNOWN_KINDS:
            result.add_error(f"Unknown meter kind: {kind}")
        if count > 1:
            result.add_error(f"Duplicate policy for meter kind: {kind}")
    for kind in sorted(_KNOWN_KINDS - counts.keys()):
        result.add_error(f"No policy for meter kind: {kind}")

    for policy in table.policies:
        if not policy.allowed:
            result.add_error(f"{policy.kind}: allowed methods are empty")
        unknown = sorted(set(policy.allowed) - _KNOWN_METHODS)
        if unknown:
            result.add_error(f"{policy.kind}: unknown methods {unknown}")
        if policy.default not in policy.allowed:
            result.add_error(
                f"{policy.kind}: default {policy.default} is not in allowed "
                f"{list(policy.allowed)}"
            )
        if len(set(policy.allowed)) != len(policy.allowed):
            result.add_warning(f"{policy.kind}: allowed methods listed twice")

    labelled = {m.method for m in table.methods}
    for method in sorted(labelled - _KNOWN_METHODS):
        result.add_error(f"Label for unknown method: {method}")
    for method in sorted(_KNOWN_METHODS - labelled):
        result.add_error(f"No label for method: {method}")

    return result
