"""
Module: utility_engines.legacy
Responsibility:
    Translate meter data written by earlier versions of the property
    manager: free-form distribution tags and the implicit reading scope.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Unknown distribution tags raise instead of defaulting to a method.
    - Scope inference depends only on meter type and method.
"""

from __future__ import annotations

from enum import Enum

from utility_engines.meter_kind import MeterType
from utility_engines.policy import DistributionMethod
from utility_kernel.exceptions import UnknownDistributionMethodError

_LEGACY_TAGS: dict[str, DistributionMethod] = {
    "per_consumption": DistributionMethod.PER_CONSUMPTION,
    "pagal_suvartojima": DistributionMethod.PER_CONSUMPTION,
    "consumption": DistributionMethod.PER_CONSUMPTION,
    "per_apartment": DistributionMethod.PER_APARTMENT,
    "pagal_butus": DistributionMethod.PER_APARTMENT,
    "per_area": DistributionMethod.PER_AREA,
    "pagal_plotą": DistributionMethod.PER_AREA,
    "pagal_plota": DistributionMethod.PER_AREA,
    "per_person": DistributionMethod.PER_PERSON,
    "pagal_asmenis": DistributionMethod.PER_PERSON,
    "fixed_split": DistributionMethod.FIXED_SPLIT,
    "fiksuota": DistributionMethod.FIXED_SPLIT,
    "fixed": DistributionMethod.FIXED_SPLIT,
}


def convert_legacy_distribution(value: str) -> DistributionMethod:
    """Map a stored legacy distribution tag to a ``DistributionMethod``.

    Raises:
        UnknownDistributionMethodError: the tag is not recognised.
    """
    key = (value or "").strip().lower()
    try:
        return _LEGACY_TAGS[key]
    except KeyError:
        raise UnknownDistributionMethodError(value) from None


class MeterScope(str, Enum):
    """Where readings for a meter are collected."""

    APARTMENT = "apartment"
    BUILDING = "building"
    NONE = "none"  # Fixed fee, nothing to read


class CollectionMode(str, Enum):
    """Who submits readings."""

    LANDLORD_ONLY = "landlord_only"
    TENANT_PHOTO = "tenant_photo"


def infer_meter_scope(
    meter_type: MeterType | str,
    method: DistributionMethod | str,
) -> MeterScope:
    """Derive the reading scope for meters stored without one."""
    meter_type = MeterType(meter_type)
    method = DistributionMethod(method)

    if method == DistributionMethod.FIXED_SPLIT:
        return MeterScope.NONE
    if meter_type == MeterType.INDIVIDUAL and method == DistributionMethod.PER_CONSUMPTION:
        return MeterScope.APARTMENT
    if meter_type == MeterType.COMMUNAL:
        return MeterScope.BUILDING
    return MeterScope.APARTMENT
