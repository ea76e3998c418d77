"""
utility_config -- single public entrypoint for allocation configuration.

Responsibility:
    Provides the ONLY way to obtain the allocation policy registry at
    runtime through ``get_policy_registry()``.  YAML loading is internal
    tooling and never exposed to callers.

Architecture position:
    Configuration -- YAML-driven policy table, validated on load.
    Sits above ``utility_engines`` and below ``utility_services``.
    Engines MUST NEVER import from ``utility_config``.

Invariants enforced:
    - Single entrypoint: runtime policy lookups flow through
      ``get_policy_registry()``.
    - The table passes ``validate_policy_table`` before a registry is built.
    - The packaged default table is loaded once per process and is
      read-only afterwards.

Failure modes:
    - ``FileNotFoundError`` -- policy file missing.
    - ``PolicyTableError`` -- structural validation failed.

Audit relevance:
    Every load emits a ``UTILITY_CONFIG_TRACE`` log entry with the table id,
    version and checksum, tying each billing run to the exact policy table
    that governed it.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from utility_config.bridges import build_policy_registry
from utility_config.loader import load_policy_table
from utility_config.validator import validate_policy_table
from utility_engines.policy import AllocationPolicyRegistry
from utility_kernel.exceptions import PolicyTableError

_logger = logging.getLogger("utility_kernel.config")

DEFAULT_POLICY_PATH = Path(__file__).parent / "policies" / "allocation_policy.yaml"

_default_registry: AllocationPolicyRegistry | None = None
_lock = threading.Lock()


def get_policy_registry(config_path: Path | None = None) -> AllocationPolicyRegistry:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a policy YAML file. Overrides are
            loaded on every call; the packaged default is cached.

    Raises:
        FileNotFoundError: If the policy file does not exist.
        PolicyTableError: If the table fails validation.
    """
    global _default_registry
    if config_path is not None:
        return _load_registry(Path(config_path))

    with _lock:
        if _default_registry is None:
            _default_registry = _load_registry(DEFAULT_POLICY_PATH)
        return _default_registry


def reset_policy_registry() -> None:
    """Drop the cached default registry. FOR TESTING ONLY."""
    global _default_registry
    with _lock:
        _default_registry = None


def _load_registry(path: Path) -> AllocationPolicyRegistry:
    table = load_policy_table(path)

    validation = validate_policy_table(table)
    for warning in validation.warnings:
        _logger.warning("policy_table_warning", extra={
            "table_id": table.table_id,
            "warning": warning,
        })
    if not validation.is_valid:
        raise PolicyTableError(validation.errors)

    registry = build_policy_registry(table)

    _logger.info(
        "UTILITY_CONFIG_TRACE",
        extra={
            "trace_type": "UTILITY_CONFIG_TRACE",
            "table_id": table.table_id,
            "table_version": table.version,
            "checksum": table.checksum,
            "policy_count": len(table.policies),
            "source": str(path),
        },
    )
    return registry


__all__ = [
    "DEFAULT_POLICY_PATH",
    "get_policy_registry",
    "reset_policy_registry",
]
