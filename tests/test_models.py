"""Tests for the LogRecord model."""

import pytest

from datadog_logs_sink.models import LogRecord, create_record, record_value


class TestCreateRecord:
    def test_fields(self):
        record = create_record("someValue1", topic="someTopic", partition=0, key="someKey", offset=7)
        assert record.value == "someValue1"
        assert record.topic == "someTopic"
        assert record.key == "someKey"
        assert record.offset == 7

    def test_defaults(self):
        record = create_record("v")
        assert record.topic == ""
        assert record.partition == 0
        assert record.key is None
        assert record.offset == 0

    def test_frozen(self):
        record = create_record("v")
        with pytest.raises(AttributeError):
            record.value = "other"


class TestRecordValue:
    def test_unwraps_log_record(self):
        assert record_value(LogRecord(value="inner")) == "inner"

    def test_bare_value_passthrough(self):
        assert record_value("bare") == "bare"
        assert record_value(b"raw") == b"raw"
