"""
Typed Exception Hierarchy for the Utility Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A billing run has to tell a misconfigured meter apart from a reading that has
not been entered yet. Matching on message text is fragile, so:
  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        validate_meter_distribution(name, meter_type, method)
    except DistributionNotAllowedError as e:
        form.add_error("method", e.code, allowed=e.allowed)

Precondition and input-validation outcomes are NOT exceptions; they are
returned as result objects so callers can warn instead of abort.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    UtilityKernelError (base)
    |
    +-- ConfigurationError
    |   +-- DistributionNotAllowedError
    |   +-- UnknownDistributionMethodError
    |   +-- PolicyTableError
    |
    +-- DistributionError
    |   +-- MissingDistributionInputError
    |   +-- PreconditionFailedError
    |
    +-- RoundingError
    |   +-- EmptyReconciliationError
    |
    +-- CurrencyError
        +-- CurrencyMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|-------------------------------------
Configuration   | DISTRIBUTION_NOT_ALLOWED      | Method not in the kind's policy
                | UNKNOWN_DISTRIBUTION_METHOD   | Tag does not name a method
                | POLICY_TABLE_INVALID          | Policy YAML failed validation
----------------|-------------------------------|-------------------------------------
Distribution    | MISSING_DISTRIBUTION_INPUT    | Calculator lacks a required input
                | PRECONDITION_FAILED           | Building state forbids the method
----------------|-------------------------------|-------------------------------------
Rounding        | EMPTY_RECONCILIATION          | No shares to reconcile
----------------|-------------------------------|-------------------------------------
Currency        | CURRENCY_MISMATCH             | Mixed currencies in one computation
===============================================================================
"""

from __future__ import annotations

from collections.abc import Iterable


class UtilityKernelError(Exception):
    """
    Base exception for all utility kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "UTILITY_KERNEL_ERROR"


# Configuration-related exceptions


class ConfigurationError(UtilityKernelError):
    """Base exception for meter configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class DistributionNotAllowedError(ConfigurationError):
    """
    A distribution method is not legal for the meter kind.

    Raised at the write boundary (meter creation/edit); the meter must not
    be persisted with this configuration.
    """

    code: str = "DISTRIBUTION_NOT_ALLOWED"

    def __init__(self, kind: str, method: str, allowed: Iterable[str] = ()):
        self.kind = kind
        self.method = method
        self.allowed = tuple(sorted(allowed))
        super().__init__(f'Distribution "{method}" not allowed for "{kind}"')


class UnknownDistributionMethodError(ConfigurationError):
    """A tag could not be mapped to any distribution method."""

    code: str = "UNKNOWN_DISTRIBUTION_METHOD"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown distribution method: {value!r}")


class PolicyTableError(ConfigurationError):
    """The allocation policy table failed structural validation."""

    code: str = "POLICY_TABLE_INVALID"

    def __init__(self, errors: Iterable[str]):
        self.errors = tuple(errors)
        super().__init__(
            "Allocation policy table validation failed:\n"
            + "\n".join(f"  - {e}" for e in self.errors)
        )


# Distribution-related exceptions


class DistributionError(UtilityKernelError):
    """Base exception for distribution calculation errors."""

    code: str = "DISTRIBUTION_ERROR"


class MissingDistributionInputError(DistributionError):
    """
    The calculator was asked to distribute without a required input.

    The engine refuses to fabricate a number from incomplete data.
    """

    code: str = "MISSING_DISTRIBUTION_INPUT"

    def __init__(self, method: str, field: str, detail: str):
        self.method = method
        self.field = field
        super().__init__(f"{method}: {detail}")


class PreconditionFailedError(DistributionError):
    """Building state does not permit the requested method."""

    code: str = "PRECONDITION_FAILED"

    def __init__(self, kind: str, method: str, rule: str | None, reason: str | None):
        self.kind = kind
        self.method = method
        self.rule = rule
        self.reason = reason
        super().__init__(
            f'Distribution "{method}" cannot be applied to "{kind}": {reason}'
        )


# Rounding-related exceptions


class RoundingError(UtilityKernelError):
    """Base exception for rounding-related errors."""

    code: str = "ROUNDING_ERROR"


class EmptyReconciliationError(RoundingError):
    """Reconciliation needs at least one share to absorb the drift."""

    code: str = "EMPTY_RECONCILIATION"

    def __init__(self, target_total: str):
        self.target_total = target_total
        super().__init__(
            f"Cannot reconcile an empty share list to target {target_total}"
        )


# Currency-related exceptions


class CurrencyError(UtilityKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyMismatchError(CurrencyError):
    """Shares and target of one computation use different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")
