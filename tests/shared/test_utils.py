import json
import logging
from datetime import timedelta

import pytest

from plantscan.shared.utils.formatters import (
    format_countdown,
    format_file_size,
    format_relative_hours,
)
from plantscan.shared.utils.helpers import generate_id
from plantscan.shared.utils.logging import JSONFormatter, get_logger, log_context


@pytest.mark.parametrize("size, expected", [
    (0, "0 B"),
    (512, "512 B"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (1048576, "1 MB"),
    (5 * 1024 ** 3, "5 GB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_format_countdown():
    assert format_countdown(timedelta(hours=5, minutes=12, seconds=59)) == "5h 12m"
    assert format_countdown(timedelta(seconds=-5)) == "0h 0m"


def test_format_relative_hours():
    assert format_relative_hours(0.001) == "just now"
    assert format_relative_hours(1) == "1 hour ago"
    assert format_relative_hours(50) == "2 days ago"


def test_generate_id():
    scan_id = generate_id("scan")

    assert scan_id.startswith("scan_")
    assert len(scan_id) == len("scan_") + 12
    assert generate_id("scan") != scan_id


def test_get_logger_is_cached():
    assert get_logger("plantscan.test") is get_logger("plantscan.test")


def test_json_formatter_nests_extra_fields_and_user():
    record = logging.LogRecord(
        "plantscan.cache", logging.INFO, __file__, 10, "Cache load - cached_plants", None, None
    )
    record.extra_fields = {"cache_key": "cached_plants", "cache_hit": True}

    with log_context(user_id="u1", session_id="session_1"):
        output = json.loads(JSONFormatter().format(record))

    assert output["message"] == "Cache load - cached_plants"
    assert output["level"] == "INFO"
    assert output["service"] == "plantscan"
    assert output["user_id"] == "u1"
    assert output["session_id"] == "session_1"
    assert output["extra"] == {"cache_key": "cached_plants", "cache_hit": True}
