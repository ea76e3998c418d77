"""
utility_services.ports -- What the services layer needs from persistence.

No implementation ships with this package. A storage adapter provides an
object satisfying ``CalculationSnapshotSource``; services depend only on
the protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from utility_engines.distribution import DistributionRequest
from utility_engines.preconditions import PreconditionContext


@runtime_checkable
class CalculationSnapshotSource(Protocol):
    """Builds immutable calculation inputs from stored building data."""

    def precondition_context(self, meter_id: str) -> PreconditionContext:
        """Building state relevant to the meter, as of now."""
        ...

    def distribution_request(self, meter_id: str, period: str) -> DistributionRequest:
        """Inputs for distributing the meter's cost over ``period``."""
        ...
