"""Structured log records: bound operation context and scrubbed values."""

from __future__ import annotations

import asyncio
import io
import json
import logging

import pytest

from models.errors import TransportError
from tools.observability import instrument_call
from weatherwear_app.logging_config import (
    JsonFormatter,
    current_log_context,
    log_event,
    operation_context,
    scrub,
)


@pytest.fixture()
def captured():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    loggers = [logging.getLogger("weatherwear.test"), logging.getLogger("tools.observability")]
    for logger in loggers:
        logger.addHandler(handler)
    yield lambda: [json.loads(line) for line in stream.getvalue().splitlines()]
    for logger in loggers:
        logger.removeHandler(handler)


def test_records_carry_the_bound_operation_and_scrubbed_fields(captured) -> None:
    logger = logging.getLogger("weatherwear.test")

    with operation_context("session:analyze", session_id="s1", city="Oslo") as correlation_id:
        log_event(
            logger,
            logging.WARNING,
            "analysis_failed",
            password="hunter22",
            email="ada@example.com",
            user_id="u-1",
            lat=59.9123,
            name="x",
        )

    (record,) = captured()
    assert record["event"] == "analysis_failed"
    assert record["operation"] == "session:analyze"
    assert record["session_id"] == "s1"
    assert record["city"] == "Oslo"
    assert record["correlation_id"] == correlation_id
    assert record["password"] == "[redacted]"
    assert record["email"].startswith("acct-")
    assert record["user_id"].startswith("acct-")
    assert record["lat"] == 59.9
    assert record["field_name"] == "x"
    assert current_log_context() == {}


def test_nested_operations_share_a_correlation_id() -> None:
    with operation_context("session:search_location", session_id="s1") as outer:
        with operation_context("agent:safety_analyzer.analyze", city=None) as inner:
            context = current_log_context()

    assert inner == outer
    assert context["operation"] == "agent:safety_analyzer.analyze"
    assert context["session_id"] == "s1"
    assert "city" not in context


def test_scrub_masks_emails_and_key_parameters_inside_text() -> None:
    text = scrub("detail", "GET /current.json?key=abc123&q=Oslo failed for ada@example.com")

    assert "abc123" not in text
    assert "ada@example.com" not in text
    assert "key=[redacted]" in text
    assert scrub("email", "Ada@Example.com") == scrub("email", "ada@example.com")


class _SlowClient:
    timeout_seconds = 0.01

    @instrument_call("weather.fetch")
    async def fetch(self, fail: bool) -> str:
        await asyncio.sleep(0.01)
        if fail:
            raise TransportError("offline")
        return "ok"


def test_remote_calls_log_outcome_and_budget_use(captured) -> None:
    client = _SlowClient()

    assert asyncio.run(client.fetch(False)) == "ok"
    with pytest.raises(TransportError):
        asyncio.run(client.fetch(True))

    completed, failed = [record for record in captured() if record["event"] != "remote_call_started"]
    assert completed["event"] == "remote_call_completed"
    assert completed["outcome"] == "ok"
    assert completed["near_timeout"] is True
    assert failed["event"] == "remote_call_failed"
    assert failed["outcome"] == "TransportError"
