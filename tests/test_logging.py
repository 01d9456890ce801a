"""Tests for the structured logging system (asset_kernel/logging_config.py)."""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest

from asset_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


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
        assert record["logger"] == "asset_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("asset_assigned", extra={"seq": 42, "status": "assigned"})

        record = _parse_log(stream)
        assert record["seq"] == 42
        assert record["status"] == "assigned"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", asset_id="asset-456")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["asset_id"] == "asset-456"

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
        """Asset kernel exceptions carry .code attribute."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from asset_kernel.exceptions import DuplicateAssetTagError

        try:
            raise DuplicateAssetTagError("LAP-001")
        except DuplicateAssetTagError:
            logger.error("asset_create_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "DUPLICATE_ASSET_TAG"
        assert record["exc_type"] == "DuplicateAssetTagError"
        assert record["exc_asset_tag"] == "LAP-001"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "actor_id" not in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"assignment_id": uid})

        record = _parse_log(stream)
        assert record["assignment_id"] == str(uid)

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO; the debug line is dropped.
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
        LogContext.set(correlation_id="x", actor_id="y")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "x", "actor_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner"):
            assert LogContext.get_all()["correlation_id"] == "inner"
        assert LogContext.get_all()["correlation_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "correlation_id" not in LogContext.get_all()
        with LogContext.bind(correlation_id="temp"):
            assert LogContext.get_all()["correlation_id"] == "temp"
        assert "correlation_id" not in LogContext.get_all()

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(request_id="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["request_id"] == "b"

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            actor_id="a",
            asset_id="s",
            assignment_id="n",
            request_id="r",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 5
        assert ctx["correlation_id"] == "c"
        assert ctx["request_id"] == "r"

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(tenant_id="t")

    def test_bind_stringifies_ids(self):
        uid = uuid4()
        with LogContext.bind(asset_id=uid):
            assert LogContext.get_all()["asset_id"] == str(uid)


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("asset_kernel")
        ours = [h for h in root.handlers if getattr(h, "_asset_kernel", False)]
        assert ours == [h1]

    def test_get_logger_returns_child(self):
        logger = get_logger("services.ledger")
        assert logger.name == "asset_kernel.services.ledger"

    def test_logger_hierarchy(self):
        """Child loggers inherit the asset_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "asset_kernel.deep.nested.module"


# ---------------------------------------------------------------------------
# Service log events
# ---------------------------------------------------------------------------


class TestServiceLogEvents:
    """Services emit snake_case events carrying the bound context."""

    def test_assign_binds_actor_and_asset(self, captured_logs, ledger, make_asset, admin_scope, people):
        asset = make_asset("LAP-LOG")
        ledger.assign(admin_scope, asset.id, [people.alice])

        (event,) = [r for r in captured_logs() if r["message"] == "asset_assigned"]
        assert event["actor_id"] == str(people.admin)
        assert event["asset_id"] == str(asset.id)
        assert event["employee_count"] == 1
        # Context does not leak past the call.
        assert LogContext.get_all() == {}

    def test_fulfil_binds_request(
        self,
        captured_logs,
        requests_service,
        manager_scope,
        office_scope,
        alice_scope,
        laptop_category,
        make_asset,
        people,
    ):
        asset = make_asset("LAP-REQ")
        request = requests_service.create_request(
            alice_scope, people.alice, laptop_category.id, "Laptop please"
        )
        requests_service.approve(manager_scope, request.id)
        requests_service.fulfill(office_scope, request.id, asset.id)

        records = captured_logs()
        assigned = next(r for r in records if r["message"] == "asset_assigned")
        assert assigned["request_id"] == str(request.id)
        fulfilled = next(r for r in records if r["message"] == "request_fulfilled")
        assert fulfilled["request_id"] == str(request.id)
        assert fulfilled["asset_id"] == str(asset.id)
