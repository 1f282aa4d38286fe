"""Unit tests for logging configuration."""

import json
import logging

import pytest

from access_review.kernel.models.action import ApplicationAction
from access_review.kernel.models.application import ApplicationState
from access_review.logging_config import (
    JsonFormatter,
    LogContextFilter,
    get_workflow_context,
    request_id_var,
    workflow_context,
)
from access_review.services.application_service import ApplicationService


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("access_review.test", logging.INFO, __file__, 1, "Action recorded", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_includes_extra_fields_and_request_id(self):
        token = request_id_var.set("req-123")
        try:
            record = make_record(revision_id="rev-1")
            LogContextFilter().filter(record)
            data = json.loads(JsonFormatter().format(record))
        finally:
            request_id_var.reset(token)

        assert data["message"] == "Action recorded"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-123"
        assert data["revision_id"] == "rev-1"

    def test_no_context_fields_outside_requests(self):
        record = make_record()
        LogContextFilter().filter(record)
        data = json.loads(JsonFormatter().format(record))

        assert record.request_id == "-"
        assert record.application_id == "-"
        for key in ("request_id", "application_id", "state", "action"):
            assert key not in data

    def test_non_serializable_extra_is_stringified(self):
        record = make_record(when=object())
        data = json.loads(JsonFormatter().format(record))
        assert isinstance(data["when"], str)


class TestWorkflowContext:
    """Tests for workflow_context and LogContextFilter."""

    def test_fields_reach_records(self):
        with workflow_context(application_id="app-1", state=ApplicationState.DRAFT, action=ApplicationAction.SUBMIT_DRAFT):
            record = make_record()
            LogContextFilter().filter(record)

        data = json.loads(JsonFormatter().format(record))
        assert data["application_id"] == "app-1"
        assert data["state"] == "DRAFT"
        assert data["action"] == "SUBMIT_DRAFT"

    def test_nested_blocks_merge_and_reset(self):
        with workflow_context(application_id="app-1", action="SIGN"):
            with workflow_context(state="DRAFT"):
                assert get_workflow_context() == {"application_id": "app-1", "state": "DRAFT", "action": "SIGN"}
            assert get_workflow_context() == {"application_id": "app-1", "action": "SIGN"}
        assert get_workflow_context() == {}

    def test_explicit_extra_wins(self):
        with workflow_context(application_id="app-1"):
            record = make_record(application_id="app-2")
            LogContextFilter().filter(record)
        assert record.application_id == "app-2"

    @pytest.mark.asyncio
    async def test_service_writes_log_with_context(self, workflow, applicant, signature_image, caplog):
        service = ApplicationService(workflow)
        caplog.handler.addFilter(LogContextFilter())
        app = await service.create(applicant)
        await service.sign(app.id, applicant, signature_image, is_edit_mode=True)

        with caplog.at_level(logging.INFO):
            await service.perform(app.id, applicant, ApplicationAction.SUBMIT_DRAFT)

        (record,) = [r for r in caplog.records if r.getMessage() == "Action accepted"]
        assert record.application_id == str(app.id)
        assert record.action == "SUBMIT_DRAFT"
        assert record.state == "INSTITUTIONAL_REP_REVIEW"
        assert record.state_before == "DRAFT"
