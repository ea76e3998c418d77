"""
Configuration Loader (``utility_config.loader``).

Responsibility
--------------
Loads the allocation policy YAML file and parses it into the frozen
dataclasses of ``utility_config.schema``.  Callers outside this package
use ``utility_config.get_policy_registry()`` instead.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* No silent defaults for required keys.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed document for configuration identity.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from utility_config.schema import AllocationPolicyTable, MethodDef, PolicyDef


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 checksum of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_method(data: dict[str, Any]) -> MethodDef:
    """Parse a MethodDef from a dict."""
    return MethodDef(
        method=data["method"],
        label=data["label"],
        description=data.get("description", ""),
    )


def parse_policy(data: dict[str, Any]) -> PolicyDef:
    """
    Parse a PolicyDef from a dict.

    Raises:
        KeyError: if ``kind``, ``allowed`` or ``default`` is missing.
    """
    return PolicyDef(
        kind=data["kind"],
        allowed=tuple(data["allowed"]),
        default=data["default"],
        supports_individual_metering=bool(
            data.get("supports_individual_metering", False)
        ),
    )


def parse_policy_table(data: dict[str, Any]) -> AllocationPolicyTable:
    """Parse a complete AllocationPolicyTable from a loaded YAML document."""
    return AllocationPolicyTable(
        table_id=data["table_id"],
        version=int(data["version"]),
        description=data.get("description", ""),
        methods=tuple(parse_method(m) for m in data.get("methods", [])),
        policies=tuple(parse_policy(p) for p in data["policies"]),
        checksum=compute_checksum(data),
    )


def load_policy_table(path: Path) -> AllocationPolicyTable:
    """Load and parse the policy table at ``path``."""
    return parse_policy_table(load_yaml_file(path))
