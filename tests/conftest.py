"""
Pytest fixtures for the utility allocation test suite.

Provides:
- Structured logging configured once per session
- ``captured_logs`` for asserting on emitted JSON records
- Common builders for money, readings and precondition snapshots
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from utility_engines.distribution import MeterReading
from utility_engines.preconditions import PreconditionContext
from utility_kernel.domain.values import Money
from utility_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture utility_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            calculate_distribution(...)
            logs = captured_logs()
            assert any(r["message"] == "distribution_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("utility_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def eur():
    """Shorthand for EUR amounts: ``eur("12.50")``."""

    def _make(amount) -> Money:
        return Money.of(amount, "EUR")

    return _make


@pytest.fixture
def reading():
    """Build a MeterReading priced in EUR."""

    def _make(current, previous, price="1.00", unit_id=None) -> MeterReading:
        return MeterReading(
            current=Decimal(str(current)),
            previous=Decimal(str(previous)),
            price_per_unit=Money.of(price, "EUR"),
            unit_id=unit_id,
        )

    return _make


@pytest.fixture
def full_building():
    """A building where every precondition holds."""
    return PreconditionContext(
        unit_count=5,
        total_area=Decimal("320.5"),
        has_individual_meters=True,
        has_fixed_amount=True,
        has_heating_allocators=True,
    )
