"""
Config -> Engine Bridges.

Convert a validated ``AllocationPolicyTable`` into engine-layer inputs.
These live in utility_config (the producer) because engines must NEVER
import utility_config.

Usage:
    from utility_config.bridges import build_policy_registry

    registry = build_policy_registry(load_policy_table(path))
"""

from __future__ import annotations

from utility_config.schema import AllocationPolicyTable
from utility_engines.meter_kind import MeterKind
from utility_engines.policy import (
    AllocationPolicy,
    AllocationPolicyRegistry,
    DistributionMethod,
)


def build_policy_registry(table: AllocationPolicyTable) -> AllocationPolicyRegistry:
    """Build the runtime registry from a table that passed validation."""
    policies = {
        MeterKind(p.kind): AllocationPolicy(
            allowed=frozenset(DistributionMethod(m) for m in p.allowed),
            default=DistributionMethod(p.default),
            supports_individual_metering=p.supports_individual_metering,
        )
        for p in table.policies
    }
    labels = {DistributionMethod(m.method): m.label for m in table.methods}
    return AllocationPolicyRegistry(policies, labels)
