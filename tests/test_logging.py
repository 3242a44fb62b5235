"""Tests for structured log records."""
import json
import logging

import pytest

from core.logging import (
    CustomJsonFormatter,
    RequestContextFilter,
    build_formatter,
    request_log_context,
)
from core.settings import settings


def make_record(message="Checking slot"):
    return logging.LogRecord(
        name="services.availability_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestRequestContext:
    """Test request fields attached to records."""

    def test_fields_attached_inside_block(self):
        record = make_record()

        with request_log_context(request_date="2030-01-07", party_size=4):
            RequestContextFilter().filter(record)

        assert record.request_date == "2030-01-07"
        assert record.party_size == 4

    def test_fields_gone_after_block(self):
        with request_log_context(party_size=4):
            pass
        record = make_record()

        RequestContextFilter().filter(record)

        assert not hasattr(record, "party_size")

    def test_nested_blocks_merge(self):
        with request_log_context(request_date="2030-01-07"):
            with request_log_context(time="19:00") as fields:
                assert fields == {"request_date": "2030-01-07", "time": "19:00"}

    def test_explicit_extra_wins(self):
        record = make_record()
        record.party_size = 2

        with request_log_context(party_size=6):
            RequestContextFilter().filter(record)

        assert record.party_size == 2


@pytest.mark.unit
class TestJsonFormatter:
    """Test the JSON record layout."""

    def test_restaurant_fields_present(self):
        formatter = CustomJsonFormatter(fmt="%(timestamp)s %(level)s %(name)s %(message)s")

        payload = json.loads(formatter.format(make_record()))

        assert payload["message"] == "Checking slot"
        assert payload["level"] == "INFO"
        assert payload["restaurant_timezone"] == settings.restaurant_timezone
        assert payload["app_name"] == settings.app_name

    def test_request_fields_serialized(self):
        formatter = CustomJsonFormatter(fmt="%(message)s")
        record = make_record()

        with request_log_context(request_date="2030-01-07", party_size=4):
            RequestContextFilter().filter(record)

        payload = json.loads(formatter.format(record))

        assert payload["request_date"] == "2030-01-07"
        assert payload["party_size"] == 4

    def test_plain_formatter_in_development(self):
        assert not isinstance(build_formatter(False), CustomJsonFormatter)
        assert isinstance(build_formatter(True), CustomJsonFormatter)
