"""
Allocation policy table schema.

Declarative, human-authored data parsed from YAML by the loader. Values are
kept as plain tags here; ``utility_config.bridges`` turns a validated table
into the engine-layer ``AllocationPolicyRegistry``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MethodDef:
    """Display metadata for one distribution method."""

    method: str
    label: str
    description: str = ""


@dataclass(frozen=True)
class PolicyDef:
    """Allowed methods and default for one meter kind."""

    kind: str
    allowed: tuple[str, ...]
    default: str
    supports_individual_metering: bool = False


@dataclass(frozen=True)
class AllocationPolicyTable:
    """A complete, versioned allocation policy table."""

    table_id: str
    version: int
    policies: tuple[PolicyDef, ...]
    methods: tuple[MethodDef, ...] = ()
    description: str = ""
    checksum: str = ""
