"""Tests for legacy distribution tags and reading-scope inference."""

import pytest

from utility_engines.legacy import (
    MeterScope,
    convert_legacy_distribution,
    infer_meter_scope,
)
from utility_engines.meter_kind import MeterType
from utility_engines.policy import DistributionMethod
from utility_kernel.exceptions import ConfigurationError, UnknownDistributionMethodError

M = DistributionMethod


class TestConvertLegacyDistribution:

    @pytest.mark.parametrize("tag,expected", [
        ("per_consumption", M.PER_CONSUMPTION),
        ("pagal_suvartojima", M.PER_CONSUMPTION),
        ("consumption", M.PER_CONSUMPTION),
        ("per_apartment", M.PER_APARTMENT),
        ("pagal_butus", M.PER_APARTMENT),
        ("per_area", M.PER_AREA),
        ("pagal_plotą", M.PER_AREA),
        ("pagal_plota", M.PER_AREA),
        ("per_person", M.PER_PERSON),
        ("pagal_asmenis", M.PER_PERSON),
        ("fixed_split", M.FIXED_SPLIT),
        ("fiksuota", M.FIXED_SPLIT),
        ("fixed", M.FIXED_SPLIT),
    ])
    def test_known_tags(self, tag, expected):
        assert convert_legacy_distribution(tag) == expected

    def test_case_and_whitespace_ignored(self):
        assert convert_legacy_distribution("  Pagal_Butus ") == M.PER_APARTMENT

    @pytest.mark.parametrize("tag", ["by_mood", "", None])
    def test_unknown_tag_raises(self, tag):
        with pytest.raises(UnknownDistributionMethodError) as exc_info:
            convert_legacy_distribution(tag)
        assert exc_info.value.code == "UNKNOWN_DISTRIBUTION_METHOD"
        assert exc_info.value.value == tag
        assert isinstance(exc_info.value, ConfigurationError)


class TestInferMeterScope:

    @pytest.mark.parametrize("meter_type", list(MeterType))
    def test_fixed_split_has_no_scope(self, meter_type):
        assert infer_meter_scope(meter_type, M.FIXED_SPLIT) == MeterScope.NONE

    def test_individual_consumption_read_per_apartment(self):
        assert infer_meter_scope(MeterType.INDIVIDUAL, M.PER_CONSUMPTION) == MeterScope.APARTMENT

    @pytest.mark.parametrize("method", [M.PER_CONSUMPTION, M.PER_AREA, M.PER_APARTMENT])
    def test_communal_read_per_building(self, method):
        assert infer_meter_scope(MeterType.COMMUNAL, method) == MeterScope.BUILDING

    @pytest.mark.parametrize("method", [M.PER_AREA, M.PER_APARTMENT, M.PER_PERSON])
    def test_individual_other_methods_default_to_apartment(self, method):
        assert infer_meter_scope(MeterType.INDIVIDUAL, method) == MeterScope.APARTMENT

    def test_accepts_string_tags(self):
        assert infer_meter_scope("shared", "per_area") == MeterScope.BUILDING
