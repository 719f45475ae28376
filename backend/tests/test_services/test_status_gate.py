"""Tests for the report status gate."""

import pytest

import repositories.db_models as db_models
from models.exceptions import InvalidStatusException, ReportClosedException
from services import status_gate


def make_report(status: db_models.ReportStatus) -> db_models.Report:
    return db_models.Report(
        id=1, case_code="WH-123-ABC", secret_hash="x", status=status
    )


class TestAdvanceOnHandlerActivity:
    def test_new_moves_to_in_progress(self):
        report = make_report(db_models.ReportStatus.NEW)
        assert status_gate.advance_on_handler_activity(report) is True
        assert report.status == db_models.ReportStatus.IN_PROGRESS

    @pytest.mark.parametrize(
        "status", [db_models.ReportStatus.IN_PROGRESS, db_models.ReportStatus.CLOSED]
    )
    def test_other_statuses_untouched(self, status):
        report = make_report(status)
        assert status_gate.advance_on_handler_activity(report) is False
        assert report.status == status


class TestEnsureAcceptsMessages:
    @pytest.mark.parametrize(
        "status", [db_models.ReportStatus.NEW, db_models.ReportStatus.IN_PROGRESS]
    )
    def test_open_reports_accept(self, status):
        status_gate.ensure_accepts_messages(make_report(status))

    def test_closed_report_rejects(self):
        with pytest.raises(ReportClosedException):
            status_gate.ensure_accepts_messages(
                make_report(db_models.ReportStatus.CLOSED)
            )


class TestSetStatus:
    @pytest.mark.parametrize("start", list(db_models.ReportStatus))
    @pytest.mark.parametrize("target", list(db_models.ReportStatus))
    def test_any_to_any(self, start, target):
        report = make_report(start)
        assert status_gate.set_status(report, target.value) == target
        assert report.status == target

    def test_invalid_value(self):
        report = make_report(db_models.ReportStatus.NEW)
        with pytest.raises(InvalidStatusException):
            status_gate.set_status(report, "ARCHIVED")
        assert report.status == db_models.ReportStatus.NEW

    def test_lowercase_is_rejected(self):
        with pytest.raises(InvalidStatusException):
            status_gate.parse_status("closed")
