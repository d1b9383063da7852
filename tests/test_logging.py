"""Tests for JSON logging setup."""

import json
import logging

import pytest

from memogarden.core.logging import ServiceJsonFormatter, component_of, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    root.handlers[:] = [
        h for h in root.handlers if not isinstance(h.formatter, ServiceJsonFormatter)
    ]
    root.setLevel(level)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("memogarden.learning_engine.health.service", "health"),
        ("memogarden.learning_engine.stats.service", "stats"),
        ("memogarden.learning_engine", "learning_engine"),
        ("memogarden.api.v1.endpoints.cards", "api"),
        ("memogarden.main", "main"),
        ("memogarden", "memogarden"),
        ("sqlalchemy.engine.Engine", "sqlalchemy"),
    ],
)
def test_component_of(name, expected):
    assert component_of(name) == expected


def test_records_are_json_lines(capsys, restore_root_logger):
    setup_logging("DEBUG")

    logging.getLogger("memogarden.learning_engine.health.service").info(
        "Lazy health sync done", extra={"account_id": "abc"}
    )

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["message"] == "Lazy health sync done"
    assert record["level"] == "INFO"
    assert record["component"] == "health"
    assert record["account_id"] == "abc"
    assert record["timestamp"].endswith("+00:00")


def test_level_filters_records(capsys, restore_root_logger):
    setup_logging("WARNING")

    logging.getLogger("memogarden.main").info("hidden")

    assert capsys.readouterr().out == ""


def test_setup_is_idempotent(restore_root_logger):
    setup_logging()
    setup_logging()

    assert len(logging.getLogger().handlers) == 1
