"""Tests for logging configuration."""

import io
import json
import logging
from datetime import date
from decimal import Decimal

from tallybook.logging_config import configure_logging, get_logger


def test_get_logger_uses_namespace():
    assert get_logger("ledger").name == "tallybook.ledger"


def test_text_format():
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)

    get_logger("ledger").info("Posted %s", "TXN-2024-000001")
    get_logger("ledger").debug("hidden")

    output = stream.getvalue()
    assert "INFO tallybook.ledger: Posted TXN-2024-000001" in output
    assert "hidden" not in output


def test_json_format_with_extra_fields():
    stream = io.StringIO()
    configure_logging(level=logging.DEBUG, fmt="json", stream=stream)

    get_logger("reports").debug(
        "Built report", extra={"total": Decimal("12.50"), "as_of": date(2024, 1, 31)}
    )

    record = json.loads(stream.getvalue().strip())
    assert record["level"] == "DEBUG"
    assert record["logger"] == "tallybook.reports"
    assert record["message"] == "Built report"
    assert record["total"] == "12.50"
    assert record["as_of"] == "2024-01-31"


def test_json_format_includes_exception():
    stream = io.StringIO()
    configure_logging(fmt="json", stream=stream)

    try:
        raise ValueError("boom")
    except ValueError:
        get_logger("cli").exception("Command failed")

    record = json.loads(stream.getvalue().strip())
    assert record["exc_type"] == "ValueError"
    assert record["exc_message"] == "boom"
    assert "Traceback" in record["traceback"]


def test_configure_is_idempotent():
    first = io.StringIO()
    second = io.StringIO()
    configure_logging(level="WARNING", stream=first)
    configure_logging(level="DEBUG", stream=second)

    get_logger("ledger").warning("once")

    assert first.getvalue().count("once") == 1
    assert second.getvalue() == ""
    assert len(logging.getLogger("tallybook").handlers) == 1


def test_unknown_level_falls_back_to_warning():
    stream = io.StringIO()
    configure_logging(level="chatty", stream=stream)

    get_logger("ledger").info("quiet")
    get_logger("ledger").warning("loud")

    assert "quiet" not in stream.getvalue()
    assert "loud" in stream.getvalue()


def test_domain_warnings_are_logged(caplog, account_service):
    account_service.create_account(code="1020", name="Checking", account_type="asset")

    with caplog.at_level(logging.WARNING, logger="tallybook"):
        try:
            account_service.create_account(code="1020", name="Again", account_type="asset")
        except ValueError:
            pass

    assert "Rejected duplicate account code 1020" in caplog.text
