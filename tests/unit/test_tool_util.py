"""Unit tests for the tool error boundary."""

import ast
import logging
from unittest.mock import patch

from change_plan_manager.domain.errors import ErrorKind, NotFoundError
from change_plan_manager.schemas.outputs import ErrorOut
from change_plan_manager.tools.util import run_operation


def _timer_records(caplog):
    return [
        ast.literal_eval(r.getMessage().split(": ", 1)[1])
        for r in caplog.records
        if r.getMessage().startswith("Telemetry timer:")
    ]


class TestRunOperation:
    def test_returns_payload(self):
        assert run_operation("get_change_plans", lambda: ["plan"]) == ["plan"]

    def test_domain_error_keeps_kind(self):
        def missing():
            raise NotFoundError("Change plan with ID x not found")

        result = run_operation("get_change_plan", missing)
        assert isinstance(result, ErrorOut)
        assert result.code == ErrorKind.NOT_FOUND

    def test_unexpected_error_is_internal(self):
        def broken():
            raise KeyError("boom")

        result = run_operation("get_change_plan", broken)
        assert result.code == ErrorKind.INTERNAL_ERROR
        assert result.details

    def test_timer_outcome_reflects_failures(self, caplog):
        def missing():
            raise NotFoundError("Change plan with ID x not found")

        with patch("change_plan_manager.telemetry._should_sample", return_value=True):
            with caplog.at_level(logging.DEBUG, logger="change_plan_manager.telemetry"):
                run_operation("get_change_plan", missing)
                run_operation("get_change_plans", lambda: [])

        outcomes = {r["tool"]: r["outcome"] for r in _timer_records(caplog)}
        assert outcomes == {"get_change_plan": "error", "get_change_plans": "ok"}
