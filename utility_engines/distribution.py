"""
Module: utility_engines.distribution
Responsibility:
    Turn raw utility inputs (meter readings, unit areas, occupant counts,
    fixed fees) into per-unit monetary shares for a chosen distribution
    method.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import utility_kernel domain values, exceptions and logging.

Invariants enforced:
    - Consumption never produces a negative charge: a reading that went
      backwards (meter rollback or replacement) costs zero.
    - Shares are full-precision Decimal and NOT rounded here; rounding is
      the job of ``utility_engines.reconciliation``.
    - Missing inputs raise; the calculator never substitutes zero for a
      value it was not given.
    - Currency consistency across every input of one request.

Failure modes:
    - MissingDistributionInputError when a method's required input is
      absent or not positive.
    - CurrencyMismatchError when readings or amounts mix currencies.
    - ValueError on an unknown distribution method tag.

Usage:
    from utility_engines.distribution import DistributionRequest, calculate_distribution

    result = calculate_distribution(
        DistributionMethod.PER_AREA,
        DistributionRequest(
            total_amount=Money.of("100.00", "EUR"),
            areas=(Decimal("30"), Decimal("20"), Decimal("50")),
        ),
    )
    [a.amount for a in result.amounts]  # [30, 20, 50]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from utility_engines.policy import DistributionMethod
from utility_engines.tracer import traced_engine
from utility_kernel.domain.values import Money, sum_money
from utility_kernel.exceptions import (
    CurrencyMismatchError,
    MissingDistributionInputError,
)
from utility_kernel.logging_config import get_logger

logger = get_logger("engines.distribution")


def _to_decimal(value: Decimal | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class MeterReading:
    """
    One unit's reading for a billing period.

    Guarantees:
        - ``current`` and ``previous`` are Decimal.
    """

    current: Decimal
    previous: Decimal
    price_per_unit: Money
    unit_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "current", _to_decimal(self.current))
        object.__setattr__(self, "previous", _to_decimal(self.previous))

    @property
    def consumption(self) -> Decimal:
        """Metered quantity, clamped at zero."""
        return max(Decimal("0"), self.current - self.previous)


@dataclass(frozen=True)
class DistributionRequest:
    """
    Inputs for one distribution calculation.

    Only the fields the chosen method needs have to be set:

    ============== =============================================
    Method         Required fields
    ============== =============================================
    per_consumption readings
    per_apartment  total_amount, unit_count
    per_area       total_amount, areas (total_area optional)
    per_person     total_amount, occupants
    fixed_split    fixed_amount, unit_count
    ============== =============================================
    """

    total_amount: Money | None = None
    unit_count: int = 0
    total_area: Decimal | None = None
    readings: tuple[MeterReading, ...] = ()
    areas: tuple[Decimal, ...] | None = None
    fixed_amount: Money | None = None
    occupants: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "readings", tuple(self.readings))
        if self.areas is not None:
            object.__setattr__(
                self, "areas", tuple(_to_decimal(a) for a in self.areas)
            )
        if self.total_area is not None:
            object.__setattr__(self, "total_area", _to_decimal(self.total_area))
        if self.occupants is not None:
            object.__setattr__(self, "occupants", tuple(self.occupants))


@dataclass(frozen=True)
class DistributionResult:
    """
    Per-unit shares produced by one calculation.

    Contract:
        ``amounts`` is ordered the same way as the request's per-unit
        inputs. ``total`` is the amount the shares are meant to sum to and
        is the natural target for reconciliation.
    Non-goals:
        - Not persisted; consumed by the caller within one billing run.
    """

    method: DistributionMethod
    amounts: tuple[Money, ...]
    total: Money

    @property
    def unit_count(self) -> int:
        return len(self.amounts)


class DistributionCalculator:
    """
    Split a utility cost into per-unit shares.

    Contract:
        Pure functions, no I/O, no clock.
    Guarantees:
        - per_area and per_person shares sum to ``total_amount`` up to
          Decimal context precision.
        - fixed_split shares are all equal to ``fixed_amount``.
    Non-goals:
        - Does not check whether the method is allowed for a meter kind or
          applicable to the building; see ``policy`` and ``preconditions``.
        - Does not round.
    """

    @traced_engine("distribution", "1.0", fingerprint_fields=("method", "request"))
    def calculate(
        self,
        method: DistributionMethod,
        request: DistributionRequest,
    ) -> DistributionResult:
        """
        Distribute according to ``method``.

        Raises:
            MissingDistributionInputError: required input absent.
            CurrencyMismatchError: inputs in different currencies.
        """
        method = DistributionMethod(method)
        logger.info("distribution_started", extra={
            "method": method.value,
            "unit_count": request.unit_count,
            "reading_count": len(request.readings),
        })

        match method:
            case DistributionMethod.PER_CONSUMPTION:
                result = self._per_consumption(request)
            case DistributionMethod.PER_APARTMENT:
                result = self._per_apartment(request)
            case DistributionMethod.PER_AREA:
                result = self._per_area(request)
            case DistributionMethod.PER_PERSON:
                result = self._per_person(request)
            case DistributionMethod.FIXED_SPLIT:
                result = self._fixed_split(request)
            case _:
                logger.error("distribution_unknown_method", extra={
                    "method": str(method),
                })
                raise ValueError(f"Unknown distribution method: {method}")

        logger.info("distribution_completed", extra={
            "method": method.value,
            "total": str(result.total.amount),
            "currency": result.total.currency.code,
            "share_count": len(result.amounts),
        })
        return result

    def _per_consumption(self, request: DistributionRequest) -> DistributionResult:
        """Charge each unit for what its own meter recorded."""
        method = DistributionMethod.PER_CONSUMPTION
        if not request.readings:
            raise MissingDistributionInputError(
                method.value, "readings", "at least one meter reading is required",
            )

        currency = request.readings[0].price_per_unit.currency
        amounts: list[Money] = []
        for reading in request.readings:
            if reading.price_per_unit.currency != currency:
                raise CurrencyMismatchError(
                    currency.code, reading.price_per_unit.currency.code,
                )
            if reading.current < reading.previous:
                logger.warning("consumption_negative_delta_clamped", extra={
                    "unit_id": reading.unit_id,
                    "current": str(reading.current),
                    "previous": str(reading.previous),
                })
            amounts.append(reading.price_per_unit * reading.consumption)

        return DistributionResult(
            method=method,
            amounts=tuple(amounts),
            total=sum_money(amounts, currency),
        )

    def _per_apartment(self, request: DistributionRequest) -> DistributionResult:
        """Equal split across units."""
        method = DistributionMethod.PER_APARTMENT
        total = self._require_total(method, request)
        if request.unit_count <= 0:
            raise MissingDistributionInputError(
                method.value, "unit_count", "unit count must be greater than 0",
            )

        share = total / request.unit_count
        return DistributionResult(
            method=method,
            amounts=(share,) * request.unit_count,
            total=total,
        )

    def _per_area(self, request: DistributionRequest) -> DistributionResult:
        """Split proportionally to each unit's floor area."""
        method = DistributionMethod.PER_AREA
        total = self._require_total(method, request)
        if not request.areas:
            raise MissingDistributionInputError(
                method.value, "areas", "unit areas are required",
            )

        total_area = request.total_area
        if total_area is None:
            total_area = sum(
                (a for a in request.areas if a > 0), Decimal("0"),
            )
        if total_area <= 0:
            raise MissingDistributionInputError(
                method.value, "total_area", "total area must be greater than 0",
            )

        return DistributionResult(
            method=method,
            amounts=self._split_by_weights(total, request.areas, total_area),
            total=total,
        )

    def _per_person(self, request: DistributionRequest) -> DistributionResult:
        """Split proportionally to the number of occupants in each unit."""
        method = DistributionMethod.PER_PERSON
        total = self._require_total(method, request)
        if not request.occupants:
            raise MissingDistributionInputError(
                method.value, "occupants", "occupant counts are required",
            )
        if any(count < 0 for count in request.occupants):
            raise MissingDistributionInputError(
                method.value, "occupants", "occupant counts cannot be negative",
            )

        total_persons = sum(request.occupants)
        if total_persons <= 0:
            raise MissingDistributionInputError(
                method.value, "occupants", "total occupant count must be greater than 0",
            )

        weights = tuple(Decimal(count) for count in request.occupants)
        return DistributionResult(
            method=method,
            amounts=self._split_by_weights(total, weights, Decimal(total_persons)),
            total=total,
        )

    def _fixed_split(self, request: DistributionRequest) -> DistributionResult:
        """Every unit pays the configured fee; the fee is not divided."""
        method = DistributionMethod.FIXED_SPLIT
        fixed = request.fixed_amount
        if fixed is None or not fixed.is_positive:
            raise MissingDistributionInputError(
                method.value, "fixed_amount", "fixed amount must be greater than 0",
            )
        if request.unit_count < 0:
            raise MissingDistributionInputError(
                method.value, "unit_count", "unit count cannot be negative",
            )

        return DistributionResult(
            method=method,
            amounts=(fixed,) * request.unit_count,
            total=fixed * request.unit_count,
        )

    @staticmethod
    def _require_total(
        method: DistributionMethod, request: DistributionRequest,
    ) -> Money:
        if request.total_amount is None:
            raise MissingDistributionInputError(
                method.value, "total_amount", "total amount is required",
            )
        return request.total_amount

    @staticmethod
    def _split_by_weights(
        total: Money,
        weights: Sequence[Decimal],
        weight_sum: Decimal,
    ) -> tuple[Money, ...]:
        """Share of ``total`` per weight; non-positive weights get zero."""
        zero = Money.zero(total.currency)
        return tuple(
            (total * weight) / weight_sum if weight > 0 else zero
            for weight in weights
        )


_DEFAULT_CALCULATOR = DistributionCalculator()


def calculate_distribution(
    method: DistributionMethod,
    request: DistributionRequest,
) -> DistributionResult:
    """Module-level convenience wrapper around ``DistributionCalculator``."""
    return _DEFAULT_CALCULATOR.calculate(method, request)
