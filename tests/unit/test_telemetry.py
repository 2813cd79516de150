"""Unit tests for telemetry utilities."""

import ast
import logging
from unittest.mock import patch

import pytest

from change_plan_manager.logging_context import correlation_scope, get_correlation_id
from change_plan_manager.telemetry import _should_sample, incr, timer


def _logged_data(record):
    return ast.literal_eval(record.getMessage().split(": ", 1)[1])


class TestTelemetrySampling:
    """Test telemetry sampling logic."""

    def test_should_sample_disabled(self):
        with patch("change_plan_manager.telemetry.TELEMETRY_ENABLED", False):
            assert _should_sample() is False

    def test_should_sample_enabled_rate_1(self):
        with patch("change_plan_manager.telemetry.TELEMETRY_ENABLED", True), patch(
            "change_plan_manager.telemetry.TELEMETRY_SAMPLE_RATE", 1.0
        ), patch("random.random", return_value=0.5):
            assert _should_sample() is True

    def test_should_sample_random_sampling(self):
        with patch("change_plan_manager.telemetry.TELEMETRY_ENABLED", True), patch(
            "change_plan_manager.telemetry.TELEMETRY_SAMPLE_RATE", 0.5
        ):
            with patch("random.random", return_value=0.3):
                assert _should_sample() is True
            with patch("random.random", return_value=0.7):
                assert _should_sample() is False

    def test_should_sample_invalid_rate_graceful(self):
        with patch("change_plan_manager.telemetry.TELEMETRY_ENABLED", True), patch(
            "change_plan_manager.telemetry.TELEMETRY_SAMPLE_RATE", "invalid"
        ):
            assert _should_sample() is False


class TestTelemetryIncr:
    """Test telemetry counter functionality."""

    def test_incr_not_sampled(self, caplog):
        with patch("change_plan_manager.telemetry._should_sample", return_value=False):
            with caplog.at_level(logging.DEBUG, logger="change_plan_manager.telemetry"):
                incr("step.completed")
        assert caplog.records == []

    def test_incr_sampled(self, caplog):
        with patch("change_plan_manager.telemetry._should_sample", return_value=True):
            with caplog.at_level(logging.DEBUG, logger="change_plan_manager.telemetry"):
                incr("tool.error", tool="add_step", code="NOT_FOUND")

        assert len(caplog.records) == 1
        data = _logged_data(caplog.records[0])
        assert data == {
            "metric": "tool.error",
            "type": "counter",
            "value": 1,
            "tool": "add_step",
            "code": "NOT_FOUND",
        }


class TestTelemetryTimer:
    """Test telemetry timer functionality."""

    def test_timer_sampled(self, caplog):
        with patch("change_plan_manager.telemetry._should_sample", return_value=True), patch(
            "time.perf_counter", side_effect=[100.0, 100.5]
        ):
            with caplog.at_level(logging.DEBUG, logger="change_plan_manager.telemetry"):
                with timer("tool.call", tool="get_next_step"):
                    pass

        data = _logged_data(caplog.records[0])
        assert data["ms"] == 500.0
        assert data["tool"] == "get_next_step"
        assert data["outcome"] == "ok"

    def test_timer_logs_when_block_raises(self, caplog):
        with patch("change_plan_manager.telemetry._should_sample", return_value=True), patch(
            "time.perf_counter", side_effect=[100.0, 100.2]
        ):
            with caplog.at_level(logging.DEBUG, logger="change_plan_manager.telemetry"):
                with pytest.raises(ValueError):
                    with timer("tool.call"):
                        raise ValueError("boom")

        data = _logged_data(caplog.records[0])
        assert data["ms"] == 200.0
        assert data["outcome"] == "error"

    def test_records_carry_correlation_id(self, caplog):
        with patch("change_plan_manager.telemetry._should_sample", return_value=True):
            with caplog.at_level(logging.DEBUG, logger="change_plan_manager.telemetry"):
                with correlation_scope("req-7"):
                    incr("step.completed")

        assert _logged_data(caplog.records[0])["corr_id"] == "req-7"


class TestCorrelationScope:
    def test_generates_id_and_restores_previous(self):
        assert get_correlation_id() is None
        with correlation_scope() as outer:
            assert outer
            assert get_correlation_id() == outer
            with correlation_scope("inner") as inner:
                assert inner == "inner"
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == outer
        assert get_correlation_id() is None
