"""
utility_services.billing_service -- Per-meter cost distribution for a
billing period.

Responsibility:
    Pulls a building snapshot for one meter from a
    ``CalculationSnapshotSource`` and runs it through the validation
    facade's ``distribute`` pipeline.

Architecture position:
    Services -- orchestration over engines + config. Storage access goes
    through the injected snapshot source only.

Invariants enforced:
    - Snapshots are read once per call; the engines only ever see the
      immutable ``PreconditionContext`` / ``DistributionRequest`` values.
    - Log records emitted during a run carry ``meter_id`` and
      ``billing_period`` via ``LogContext``, plus ``building_id`` when the
      service was created for a specific building.

Failure modes:
    - Everything ``distribute`` raises, unchanged.

Usage:
    service = MeterBillingService(source, building_id="b-4")
    charges = service.distribute_meter(
        meter_id="m-17",
        kind=MeterKind.ELEVATOR,
        method=DistributionMethod.PER_APARTMENT,
        period="2026-09",
    )
"""

from __future__ import annotations

from utility_engines.meter_kind import MeterKind
from utility_engines.policy import AllocationPolicyRegistry, DistributionMethod
from utility_engines.reconciliation import RoundingReconciler
from utility_kernel.logging_config import LogContext, get_logger
from utility_services.meter_validation import ReconciledDistribution, distribute
from utility_services.ports import CalculationSnapshotSource

logger = get_logger("services.billing")


class MeterBillingService:
    """
    Distributes a meter's period cost across the building's units.

    Contract:
        One call, one meter, one period. The snapshot source is asked for
        the precondition context first, then for the distribution inputs.
    Non-goals:
        - Does not persist the resulting charges.
        - Does not look up the meter's kind or method; the caller passes
          the values stored on the meter record.
    """

    def __init__(
        self,
        source: CalculationSnapshotSource,
        registry: AllocationPolicyRegistry | None = None,
        strategy: RoundingReconciler | None = None,
        building_id: str | None = None,
    ):
        self.source = source
        self.building_id = building_id
        self.registry = registry
        self.strategy = strategy

    def distribute_meter(
        self,
        meter_id: str,
        kind: MeterKind,
        method: DistributionMethod,
        period: str,
    ) -> ReconciledDistribution:
        with LogContext.bind(
            building_id=self.building_id,
            meter_id=meter_id,
            billing_period=period,
        ):
            logger.info("meter_billing_started", extra={
                "meter_kind": MeterKind(kind).value,
                "method": DistributionMethod(method).value,
            })
            ctx = self.source.precondition_context(meter_id)
            request = self.source.distribution_request(meter_id, period)

            result = distribute(
                kind,
                method,
                ctx,
                request,
                registry=self.registry,
                strategy=self.strategy,
            )

            logger.info("meter_billing_completed", extra={
                "total": str(result.total.amount),
                "currency": result.total.currency.code,
                "share_count": len(result.shares),
            })
            return result
