"""
utility_services.meters -- Meter definitions as a building administrator
configures them.

Responsibility:
    Holds the configured meter record (explicit kind, method, prices and
    collection mode) and the form-level checks run before the record is
    saved.

Architecture position:
    Services -- uses engines for scope inference and the config registry
    for the allowed-method table and method labels.

Invariants enforced:
    - ``MeterDefinition.kind`` is explicit. ``from_legacy`` is the only
      path that derives it from the meter name.
    - ``validate_meter_definition`` returns every issue found and never
      raises for a bad form.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from utility_config import get_policy_registry
from utility_engines.legacy import (
    CollectionMode,
    MeterScope,
    convert_legacy_distribution,
    infer_meter_scope,
)
from utility_engines.meter_kind import MeterKind, MeterType, classify_meter_kind
from utility_engines.policy import AllocationPolicyRegistry, DistributionMethod
from utility_kernel.domain.values import Money
from utility_kernel.logging_config import get_logger

logger = get_logger("services.meters")

MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class MeterDefinition:
    """
    A configured utility meter.

    Guarantees:
        - ``meter_type``, ``kind``, ``method`` and ``collection_mode`` are
          enum members.
        - ``scope`` is derived, never stored.
    """

    name: str
    meter_type: MeterType
    kind: MeterKind
    method: DistributionMethod
    unit: str = ""
    price_per_unit: Money | None = None
    fixed_amount_per_unit: Money | None = None
    collection_mode: CollectionMode = CollectionMode.LANDLORD_ONLY

    def __post_init__(self) -> None:
        object.__setattr__(self, "meter_type", MeterType(self.meter_type))
        object.__setattr__(self, "kind", MeterKind(self.kind))
        object.__setattr__(self, "method", DistributionMethod(self.method))
        object.__setattr__(self, "collection_mode", CollectionMode(self.collection_mode))

    @property
    def scope(self) -> MeterScope:
        return infer_meter_scope(self.meter_type, self.method)

    @property
    def is_visible_to_tenant(self) -> bool:
        """Tenants see meters they submit photo readings for."""
        return (
            self.collection_mode == CollectionMode.TENANT_PHOTO
            and self.scope != MeterScope.NONE
        )

    @classmethod
    def from_legacy(
        cls,
        name: str,
        meter_type: MeterType | str,
        distribution: str,
        **fields,
    ) -> MeterDefinition:
        """Build a definition from a stored record that predates explicit kinds."""
        kind = classify_meter_kind(name, meter_type)
        return cls(
            name=name,
            meter_type=MeterType(meter_type),
            kind=kind,
            method=convert_legacy_distribution(distribution),
            **fields,
        )


@dataclass(frozen=True)
class ValidationIssue:
    """One problem with a meter form; ``field`` names the offending input."""

    field: str
    message: str


def method_label(
    method: DistributionMethod | str,
    registry: AllocationPolicyRegistry | None = None,
) -> str:
    """Display label for a distribution method."""
    registry = registry if registry is not None else get_policy_registry()
    return registry.label(DistributionMethod(method))


def validate_meter_definition(
    meter: MeterDefinition,
    existing_names: Iterable[str] = (),
    registry: AllocationPolicyRegistry | None = None,
) -> list[ValidationIssue]:
    """Check a meter form before saving it.

    ``existing_names`` are the names of the other meters in the building;
    comparison ignores case and surrounding whitespace.
    """
    registry = registry if registry is not None else get_policy_registry()
    issues: list[ValidationIssue] = []

    name = meter.name.strip()
    if not name:
        issues.append(ValidationIssue("name", "Meter name is required"))
    else:
        taken = {n.strip().lower() for n in existing_names}
        if name.lower() in taken:
            issues.append(ValidationIssue("name", "A meter with this name already exists"))
        if len(name) > MAX_NAME_LENGTH:
            issues.append(ValidationIssue(
                "name", f"Meter name cannot exceed {MAX_NAME_LENGTH} characters",
            ))

    if meter.price_per_unit is not None and meter.price_per_unit.is_negative:
        issues.append(ValidationIssue("price_per_unit", "Price cannot be negative"))

    if meter.method == DistributionMethod.FIXED_SPLIT:
        fixed = meter.fixed_amount_per_unit
        if fixed is None or not fixed.is_positive:
            issues.append(ValidationIssue(
                "fixed_amount_per_unit",
                "A fixed split needs a fixed amount greater than 0",
            ))

    if not registry.is_allowed(meter.kind, meter.method):
        allowed = ", ".join(
            registry.label(m) for m in sorted(
                registry.allowed_methods(meter.kind), key=lambda m: m.value,
            )
        )
        issues.append(ValidationIssue(
            "method",
            f'"{registry.label(meter.method)}" is not allowed for this meter. '
            f"Allowed: {allowed}",
        ))

    if issues:
        logger.info("meter_definition_invalid", extra={
            "meter_name": meter.name,
            "meter_kind": meter.kind.value,
            "fields": [issue.field for issue in issues],
        })
    return issues


def validate_meter_definitions(
    meters: Sequence[MeterDefinition],
    registry: AllocationPolicyRegistry | None = None,
) -> list[ValidationIssue]:
    """Validate a whole building's meter list.

    Each meter is checked against the names of the meters before it, so a
    duplicate is reported on its second occurrence. Issue fields are
    prefixed with the meter's position, e.g. ``meter_2.name``.
    """
    issues: list[ValidationIssue] = []
    for index, meter in enumerate(meters):
        earlier = [m.name for m in meters[:index]]
        for issue in validate_meter_definition(meter, earlier, registry):
            issues.append(ValidationIssue(f"meter_{index}.{issue.field}", issue.message))
    return issues
