"""Tests for MessageService and upload screening."""

import pytest
from sqlalchemy.exc import OperationalError

import repositories.db_models as db_models
from models.exceptions import (
    EmptyMessageException,
    ReportClosedException,
    ReportNotFoundException,
    ValidationException,
)
from services.attachment_service import AttachmentService
from services.message_service import MessageService
from services.report_service import ReportService

WB = db_models.SenderType.WHISTLEBLOWER
ADMIN = db_models.SenderType.ADMIN


class TestPostMessage:
    """Appending messages to a case."""

    def test_whistleblower_message_keeps_status(self, db_session, storage, test_report):
        message = MessageService.post_message(
            db_session, storage, test_report.id, WB, "More details."
        )

        assert message.sender_type == WB
        assert test_report.status == db_models.ReportStatus.NEW

    def test_admin_message_moves_new_to_in_progress(
        self, db_session, storage, test_report
    ):
        MessageService.post_message(
            db_session, storage, test_report.id, ADMIN, "We are looking into it."
        )

        db_session.refresh(test_report)
        assert test_report.status == db_models.ReportStatus.IN_PROGRESS

    @pytest.mark.parametrize("sender", [WB, ADMIN])
    def test_closed_report_rejects_messages(
        self, db_session, storage, test_report, sender
    ):
        ReportService.update_status(db_session, test_report.id, "CLOSED")

        with pytest.raises(ReportClosedException):
            MessageService.post_message(
                db_session, storage, test_report.id, sender, "Anything else?"
            )

        assert len(MessageService.list_messages(db_session, test_report.id)) == 1
        assert test_report.status == db_models.ReportStatus.CLOSED

    def test_unknown_report(self, db_session, storage):
        with pytest.raises(ReportNotFoundException):
            MessageService.post_message(db_session, storage, 9999, WB, "Hello")

    def test_content_is_trimmed(self, db_session, storage, test_report):
        message = MessageService.post_message(
            db_session, storage, test_report.id, WB, "\n  padded text \t"
        )
        assert message.content == "padded text"

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_message_rejected(self, db_session, storage, test_report, content):
        with pytest.raises(EmptyMessageException):
            MessageService.post_message(db_session, storage, test_report.id, WB, content)

    def test_attachment_only_message(
        self, db_session, storage, test_report, upload_factory
    ):
        message = MessageService.post_message(
            db_session,
            storage,
            test_report.id,
            WB,
            "   ",
            [upload_factory("photo.png", "image/png", b"\x89PNG data")],
        )

        assert message.content == ""
        assert len(message.attachments) == 1
        attachment = message.attachments[0]
        assert attachment.original_name == "photo.png"
        assert attachment.content_type == "image/png"
        assert attachment.size_bytes == len(b"\x89PNG data")
        assert attachment.storage_name.endswith(".png")
        assert storage.open(attachment.storage_name) is not None

    def test_only_disallowed_files_counts_as_empty(
        self, db_session, storage, test_report, upload_factory
    ):
        with pytest.raises(EmptyMessageException):
            MessageService.post_message(
                db_session,
                storage,
                test_report.id,
                WB,
                "",
                [upload_factory("run.exe", "application/x-msdownload", b"MZ")],
            )

    def test_messages_listed_oldest_first(self, db_session, storage, test_report):
        MessageService.post_message(db_session, storage, test_report.id, ADMIN, "One")
        MessageService.post_message(db_session, storage, test_report.id, WB, "Two")

        contents = [
            m.content for m in MessageService.list_messages(db_session, test_report.id)
        ]
        assert contents == ["Invoices are being approved without review.", "One", "Two"]

    def test_files_and_status_rolled_back_on_commit_failure(
        self, db_session, storage, test_report, upload_factory, monkeypatch
    ):
        report_id = test_report.id
        real_commit = db_session.commit

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", failing_commit)
        with pytest.raises(OperationalError):
            MessageService.post_message(
                db_session, storage, report_id, ADMIN, "Reply", [upload_factory()]
            )
        monkeypatch.setattr(db_session, "commit", real_commit)

        assert not any(storage.root.iterdir())
        report = db_session.get(db_models.Report, report_id)
        assert report.status == db_models.ReportStatus.NEW
        assert len(MessageService.list_messages(db_session, report_id)) == 1


class TestScreenUploads:
    """Upload filtering and limits."""

    def test_disallowed_types_dropped(self, upload_factory):
        accepted = AttachmentService.screen_uploads(
            [
                upload_factory("notes.txt", "text/plain", b"hello"),
                upload_factory("script.sh", "application/x-sh", b"#!/bin/sh"),
                upload_factory("page.html", "text/html", b"<html>"),
            ]
        )

        assert [u.original_name for u in accepted] == ["notes.txt"]

    def test_content_type_parameters_ignored(self, upload_factory):
        accepted = AttachmentService.screen_uploads(
            [upload_factory("notes.txt", "text/plain; charset=utf-8", b"hi")]
        )
        assert accepted[0].content_type == "text/plain"

    def test_parts_without_filename_ignored(self, upload_factory):
        assert AttachmentService.screen_uploads([upload_factory(filename="")]) == []
        assert AttachmentService.screen_uploads(None) == []

    def test_too_many_files(self, upload_factory):
        files = [upload_factory(f"doc{i}.pdf") for i in range(6)]
        with pytest.raises(ValidationException):
            AttachmentService.screen_uploads(files)

    def test_limit_counts_disallowed_files_too(self, upload_factory):
        files = [upload_factory("a.exe", "application/x-msdownload")] * 3
        with pytest.raises(ValidationException):
            AttachmentService.screen_uploads(files, max_files=2)

    def test_file_too_large(self, upload_factory):
        with pytest.raises(ValidationException):
            AttachmentService.screen_uploads(
                [upload_factory(data=b"x" * 101)], max_bytes=100
            )

    def test_file_at_limit_accepted(self, upload_factory):
        accepted = AttachmentService.screen_uploads(
            [upload_factory(data=b"x" * 100)], max_bytes=100
        )
        assert accepted[0].size_bytes == 100

    def test_filename_sanitized(self, upload_factory):
        accepted = AttachmentService.screen_uploads(
            [upload_factory("../../etc/pass wd.txt", "text/plain", b"x")]
        )
        assert accepted[0].original_name == "pass_wd.txt"
