"""Tests for the structured logging system (utility_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from utility_engines.meter_kind import MeterKind
from utility_kernel.domain.values import Money
from utility_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite's setup."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "utility_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("distributed", extra={"share_count": 3, "method": "per_area"})

        record = _parse_log(stream)
        assert record["share_count"] == 3
        assert record["method"] == "per_area"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", meter_id="m-7")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["meter_id"] == "m-7"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        """Utility kernel exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from utility_kernel.exceptions import DistributionNotAllowedError

        try:
            raise DistributionNotAllowedError(
                "trash", "per_area", ["fixed_split", "per_apartment"],
            )
        except DistributionNotAllowedError:
            logger.error("config_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "DISTRIBUTION_NOT_ALLOWED"
        assert record["exc_type"] == "DistributionNotAllowedError"
        assert record["exc_kind"] == "trash"
        assert record["exc_method"] == "per_area"
        assert record["exc_allowed"] == ["fixed_split", "per_apartment"]

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "meter_id" not in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"building_uuid": uid})

        record = _parse_log(stream)
        assert record["building_uuid"] == str(uid)

    def test_decimal_and_enum_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("typed", extra={
            "area": Decimal("30.25"),
            "meter_kind": MeterKind.WATER_HOT,
        })

        record = _parse_log(stream)
        assert record["area"] == "30.25"
        assert record["meter_kind"] == "water_hot"

    def test_money_serialized_with_currency(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("charged", extra={"share": Money.of("33.34", "EUR")})

        record = _parse_log(stream)
        assert record["share"] == {"amount": "33.34", "currency": "EUR"}

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO, so the debug record is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", building_id="b-1")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "x", "building_id": "b-1"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(meter_id="outer")
        with LogContext.bind(meter_id="inner"):
            assert LogContext.get_all()["meter_id"] == "inner"
        assert LogContext.get_all()["meter_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "billing_period" not in LogContext.get_all()
        with LogContext.bind(billing_period="2026-09"):
            assert LogContext.get_all()["billing_period"] == "2026-09"
        assert "billing_period" not in LogContext.get_all()

    def test_bind_rejects_unknown_field(self):
        with pytest.raises(TypeError, match="apartment_id"):
            LogContext.bind(apartment_id="12")

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(building_id="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["building_id"] == "b"

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            building_id="b",
            meter_id="m",
            billing_period="p",
            actor_id="a",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 5
        assert ctx["correlation_id"] == "c"
        assert ctx["actor_id"] == "a"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        reset_logging()
        root = logging.getLogger("utility_kernel")
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        handlers = list(root.handlers)

        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op

        assert root.handlers == handlers
        assert h1 in root.handlers
        assert h2 not in root.handlers

    def test_get_logger_returns_child(self):
        logger = get_logger("engines.distribution")
        assert logger.name == "utility_kernel.engines.distribution"

    def test_logger_hierarchy(self):
        """Child loggers inherit the utility_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "utility_kernel.deep.nested.module"
