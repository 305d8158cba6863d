"""Tests for log formatting and context fields."""

import json
import logging
import uuid

import pytest

from teambuilder.logging_config import ConsoleFormatter, JSONFormatter, log_context, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="teambuilder.services.team_assignment",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Created team %s",
        args=("ACME-T3",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_log_context_skips_empty_and_stringifies_ids():
    company_id = uuid.uuid4()
    context = log_context(company_id=company_id, user_id=None, team_number=3)
    assert context == {"company_id": str(company_id), "team_number": 3}


def test_log_context_rejects_unknown_fields():
    with pytest.raises(ValueError):
        log_context(org_id="x")


def test_json_formatter_includes_context():
    record = _record(**log_context(company_id="c-1", team_number=3))
    entry = json.loads(JSONFormatter("production").format(record))

    assert entry["message"] == "Created team ACME-T3"
    assert entry["env"] == "production"
    assert entry["company_id"] == "c-1"
    assert entry["team_number"] == 3
    assert "user_id" not in entry


def test_console_formatter_appends_context():
    line = ConsoleFormatter().format(_record(company_id="c-1", team_number=3))
    assert line.endswith("Created team ACME-T3 [company_id=c-1 team_number=3]")

    assert ConsoleFormatter().format(_record()).endswith("Created team ACME-T3")


def test_setup_logging_quiets_third_party_loggers():
    setup_logging(app_env="production", log_level="INFO")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("asyncpg").level == logging.WARNING
    assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    setup_logging(app_env="development", log_level="DEBUG")
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

    setup_logging(app_env="test", log_level="DEBUG")
