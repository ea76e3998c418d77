"""
Module: utility_engines.reconciliation
Responsibility:
    Round per-unit shares to currency precision so that they sum exactly
    to a target total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``sum(reconcile(shares, target)) == target`` to the minor unit, for
      every non-empty share list. A target carrying more decimals than its
      currency allows is first rounded to currency precision.
    - Every returned share is rounded to the currency's decimal places
      (ROUND_HALF_UP).
    - Deterministic: identical inputs produce identical penny assignments.

Failure modes:
    - EmptyReconciliationError when there are no shares to absorb drift.
    - CurrencyMismatchError when a share and the target differ in currency.

Strategies:
    ``LastUnitReconciler`` (default) puts the whole drift on the last share
    in list order. ``LargestRemainderReconciler`` (Hamilton method) hands
    out minor units one at a time to the shares whose rounding lost the
    most. Callers choose a strategy per call; both satisfy the same
    contract.

Usage:
    from utility_engines.reconciliation import reconcile

    reconcile([Money.of("33.33", "EUR")] * 3, Money.of("100.00", "EUR"))
    # (33.33, 33.33, 33.34)
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Protocol, runtime_checkable

from utility_engines.tracer import traced_engine
from utility_kernel.domain.values import Money, sum_money
from utility_kernel.exceptions import CurrencyMismatchError, EmptyReconciliationError
from utility_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")


@runtime_checkable
class RoundingReconciler(Protocol):
    """Rounds shares so they sum exactly to ``target_total``."""

    name: str

    def reconcile(
        self,
        amounts: Sequence[Money],
        target_total: Money,
    ) -> tuple[Money, ...]:
        ...


def _check_inputs(amounts: Sequence[Money], target_total: Money) -> None:
    if not amounts:
        raise EmptyReconciliationError(str(target_total))
    currency = target_total.currency
    for amount in amounts:
        if amount.currency != currency:
            raise CurrencyMismatchError(currency.code, amount.currency.code)


class LastUnitReconciler:
    """
    Round every share, then add the full drift to the last share.

    Simple and order-dependent: one unit absorbs all rounding error.
    """

    name = "last_unit"

    def reconcile(
        self,
        amounts: Sequence[Money],
        target_total: Money,
    ) -> tuple[Money, ...]:
        _check_inputs(amounts, target_total)
        currency = target_total.currency

        rounded = [amount.round() for amount in amounts]
        drift = target_total.round() - sum_money(rounded, currency)

        if not drift.is_zero:
            rounded[-1] = (rounded[-1] + drift).round()
            logger.info("reconciliation_drift_applied", extra={
                "strategy": self.name,
                "drift": str(drift.amount),
                "currency": currency.code,
                "adjusted_index": len(rounded) - 1,
            })

        return tuple(rounded)


class LargestRemainderReconciler:
    """
    Hamilton apportionment over minor currency units.

    Each share is truncated to currency precision; the minor units still
    missing (or in excess) are handed out one at a time, largest fractional
    remainder first. Ties go to the earlier share.
    """

    name = "largest_remainder"

    def reconcile(
        self,
        amounts: Sequence[Money],
        target_total: Money,
    ) -> tuple[Money, ...]:
        _check_inputs(amounts, target_total)
        currency = target_total.currency
        step = Decimal(1).scaleb(-currency.decimal_places)

        target = target_total.amount.quantize(step, rounding=ROUND_HALF_UP)
        floors = [a.amount.quantize(step, rounding=ROUND_DOWN) for a in amounts]
        remainders = [a.amount - f for a, f in zip(amounts, floors)]

        units = int((target - sum(floors, Decimal("0"))) / step)
        if units >= 0:
            order = sorted(range(len(floors)), key=lambda i: (-remainders[i], i))
            delta = step
        else:
            order = sorted(range(len(floors)), key=lambda i: (remainders[i], i))
            delta = -step
            units = -units

        # More units than shares means the shares did not add up to the
        # target in the first place; cycle until the drift is gone.
        for n in range(units):
            floors[order[n % len(order)]] += delta

        if units:
            logger.info("reconciliation_drift_applied", extra={
                "strategy": self.name,
                "drift": str(step * units),
                "currency": currency.code,
                "adjusted_count": min(units, len(order)),
            })

        return tuple(Money(amount=f, currency=currency) for f in floors)


DEFAULT_RECONCILER: RoundingReconciler = LastUnitReconciler()


@traced_engine("reconciliation", "1.0", fingerprint_fields=("amounts", "target_total"))
def reconcile(
    amounts: Sequence[Money],
    target_total: Money,
    strategy: RoundingReconciler | None = None,
) -> tuple[Money, ...]:
    """Round ``amounts`` so they sum exactly to ``target_total``.

    Args:
        amounts: Ordered, unrounded shares.
        target_total: The total the rounded shares must add up to.
        strategy: Defaults to ``LastUnitReconciler``.

    Raises:
        EmptyReconciliationError: ``amounts`` is empty.
        CurrencyMismatchError: a share's currency differs from the target's.
    """
    strategy = strategy or DEFAULT_RECONCILER
    return strategy.reconcile(amounts, target_total)
