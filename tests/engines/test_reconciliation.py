"""
Tests for rounding reconciliation.

Both strategies must produce currency-precision shares that sum exactly
to the target; they differ only in which shares absorb the drift.
"""

from decimal import Decimal

import pytest

from utility_engines.reconciliation import (
    DEFAULT_RECONCILER,
    LargestRemainderReconciler,
    LastUnitReconciler,
    RoundingReconciler,
    reconcile,
)
from utility_kernel.domain.values import Money, sum_money
from utility_kernel.exceptions import CurrencyMismatchError, EmptyReconciliationError


def _eur(*amounts: str) -> list[Money]:
    return [Money.of(a, "EUR") for a in amounts]


def _values(shares) -> list[Decimal]:
    return [s.amount for s in shares]


class TestLastUnitReconciler:

    def setup_method(self):
        self.reconciler = LastUnitReconciler()

    def test_thirds_of_one_hundred(self):
        """33.33 x 3 reconciled to 100.00 puts the extra cent last."""
        shares = self.reconciler.reconcile(_eur("33.33", "33.33", "33.33"), Money.of("100.00", "EUR"))
        assert _values(shares) == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]

    def test_unrounded_shares(self):
        third = Money.of("100", "EUR") / 3
        shares = self.reconciler.reconcile([third] * 3, Money.of("100", "EUR"))
        assert _values(shares) == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]

    def test_negative_drift(self):
        shares = self.reconciler.reconcile(_eur("0.335", "0.335"), Money.of("0.67", "EUR"))
        # 0.34 + 0.34 = 0.68, one cent too many
        assert _values(shares) == [Decimal("0.34"), Decimal("0.33")]

    def test_no_drift_leaves_shares_alone(self, captured_logs):
        shares = self.reconciler.reconcile(_eur("10.00", "20.00"), Money.of("30.00", "EUR"))
        assert _values(shares) == [Decimal("10.00"), Decimal("20.00")]
        assert not any(
            r["message"] == "reconciliation_drift_applied" for r in captured_logs()
        )

    def test_drift_logged(self, captured_logs):
        self.reconciler.reconcile(_eur("33.33", "33.33", "33.33"), Money.of("100.00", "EUR"))
        records = [r for r in captured_logs() if r["message"] == "reconciliation_drift_applied"]
        assert len(records) == 1
        assert records[0]["strategy"] == "last_unit"
        assert records[0]["drift"] == "0.01"
        assert records[0]["adjusted_index"] == 2

    def test_single_share_takes_target(self):
        shares = self.reconciler.reconcile(_eur("12.344"), Money.of("12.35", "EUR"))
        assert _values(shares) == [Decimal("12.35")]

    def test_target_rounded_to_currency_precision(self):
        shares = self.reconciler.reconcile(_eur("5", "5"), Money.of("10.004", "EUR"))
        assert sum_money(shares, "EUR") == Money.of("10.00", "EUR")

    def test_zero_decimal_currency(self):
        shares = self.reconciler.reconcile(
            [Money.of("333.4", "JPY")] * 3, Money.of("1000", "JPY"),
        )
        assert _values(shares) == [Decimal("333"), Decimal("333"), Decimal("334")]


class TestLargestRemainderReconciler:

    def setup_method(self):
        self.reconciler = LargestRemainderReconciler()

    def test_cent_goes_to_largest_remainder(self):
        shares = self.reconciler.reconcile(
            _eur("33.331", "33.336", "33.333"), Money.of("100.00", "EUR"),
        )
        assert _values(shares) == [Decimal("33.33"), Decimal("33.34"), Decimal("33.33")]

    def test_ties_go_to_earlier_share(self):
        third = Money.of("100", "EUR") / 3
        shares = self.reconciler.reconcile([third] * 3, Money.of("100", "EUR"))
        assert _values(shares) == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]

    def test_excess_removed_from_smallest_remainder(self):
        shares = self.reconciler.reconcile(_eur("0.50", "0.50"), Money.of("0.99", "EUR"))
        assert sum_money(shares, "EUR") == Money.of("0.99", "EUR")
        assert _values(shares) == [Decimal("0.49"), Decimal("0.50")]

    def test_drift_larger_than_share_count_cycles(self):
        shares = self.reconciler.reconcile(_eur("1.00", "1.00"), Money.of("2.05", "EUR"))
        assert sum_money(shares, "EUR") == Money.of("2.05", "EUR")
        assert _values(shares) == [Decimal("1.03"), Decimal("1.02")]

    def test_all_shares_at_currency_precision(self):
        shares = self.reconciler.reconcile(
            _eur("1.111", "2.222", "3.333"), Money.of("6.67", "EUR"),
        )
        for share in shares:
            assert share.amount == share.round().amount


class TestReconcileEntryPoint:

    def test_default_strategy_is_last_unit(self):
        assert isinstance(DEFAULT_RECONCILER, LastUnitReconciler)
        shares = reconcile(_eur("33.33", "33.33", "33.33"), Money.of("100.00", "EUR"))
        assert _values(shares)[-1] == Decimal("33.34")

    def test_strategy_selectable_per_call(self):
        third = Money.of("100", "EUR") / 3
        shares = reconcile([third] * 3, Money.of("100", "EUR"), LargestRemainderReconciler())
        assert _values(shares)[0] == Decimal("33.34")

    @pytest.mark.parametrize("strategy", [LastUnitReconciler(), LargestRemainderReconciler()])
    def test_strategies_satisfy_protocol(self, strategy):
        assert isinstance(strategy, RoundingReconciler)

    @pytest.mark.parametrize("strategy", [LastUnitReconciler(), LargestRemainderReconciler()])
    def test_empty_list_raises(self, strategy):
        with pytest.raises(EmptyReconciliationError) as exc_info:
            reconcile([], Money.of("10.00", "EUR"), strategy)
        assert exc_info.value.code == "EMPTY_RECONCILIATION"

    @pytest.mark.parametrize("strategy", [LastUnitReconciler(), LargestRemainderReconciler()])
    def test_currency_mismatch_raises(self, strategy):
        with pytest.raises(CurrencyMismatchError):
            reconcile(
                [Money.of("5", "EUR"), Money.of("5", "PLN")],
                Money.of("10", "EUR"),
                strategy,
            )

    def test_emits_trace(self, captured_logs):
        reconcile(_eur("1.00"), Money.of("1.00", "EUR"))
        traces = [r for r in captured_logs() if r["message"] == "UTILITY_ENGINE_TRACE"]
        assert [t["engine_name"] for t in traces] == ["reconciliation"]
