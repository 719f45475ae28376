"""Tests for attachment access control and downloads."""

import pytest

import repositories.db_models as db_models
from models.exceptions import AttachmentNotFoundException
from models.principal import Principal, PrincipalKind
from services.attachment_service import AttachmentService
from services.message_service import MessageService


@pytest.fixture
def attachment(db_session, storage, test_report, upload_factory) -> db_models.Attachment:
    message = MessageService.post_message(
        db_session,
        storage,
        test_report.id,
        db_models.SenderType.WHISTLEBLOWER,
        "See attached.",
        [upload_factory("invoice.pdf", "application/pdf", b"%PDF-1.4 invoice")],
    )
    return message.attachments[0]


class TestCanAccess:
    def test_admin_reads_everything(self, db_session, attachment):
        principal = Principal(PrincipalKind.ADMIN, 1)
        assert AttachmentService.can_access(db_session, principal, attachment.id)

    def test_owner_report_reads_own(self, db_session, test_report, attachment):
        principal = Principal(PrincipalKind.REPORT, test_report.id)
        assert AttachmentService.can_access(db_session, principal, attachment.id)

    def test_other_report_denied(self, db_session, other_report, attachment):
        principal = Principal(PrincipalKind.REPORT, other_report.id)
        assert not AttachmentService.can_access(db_session, principal, attachment.id)

    def test_deleted_report_principal_denied(self, db_session, test_report, attachment):
        principal = Principal(PrincipalKind.REPORT, test_report.id + 1000)
        assert not AttachmentService.can_access(db_session, principal, attachment.id)

    def test_unknown_attachment(self, db_session):
        principal = Principal(PrincipalKind.ADMIN, 1)
        assert not AttachmentService.can_access(db_session, principal, 9999)


class TestResolveDownload:
    def test_returns_file_and_metadata(self, db_session, storage, test_report, attachment):
        stored = AttachmentService.resolve_download(
            db_session, storage, Principal(PrincipalKind.REPORT, test_report.id),
            attachment.id,
        )

        assert stored.original_name == "invoice.pdf"
        assert stored.content_type == "application/pdf"
        assert stored.path.read_bytes() == b"%PDF-1.4 invoice"

    def test_denied_looks_like_missing(self, db_session, storage, other_report, attachment):
        with pytest.raises(AttachmentNotFoundException):
            AttachmentService.resolve_download(
                db_session, storage, Principal(PrincipalKind.REPORT, other_report.id),
                attachment.id,
            )

    def test_missing_file_on_disk(self, db_session, storage, attachment):
        storage.delete(attachment.storage_name)

        with pytest.raises(AttachmentNotFoundException):
            AttachmentService.resolve_download(
                db_session, storage, Principal(PrincipalKind.ADMIN, 1), attachment.id
            )


class TestLocalFileStorage:
    def test_generated_names_keep_allowed_extension(self, storage):
        assert storage.save(b"a", "Report.PDF").endswith(".pdf")
        assert storage.save(b"b", "tool.exe").endswith(".bin")
        assert storage.save(b"c", None).endswith(".bin")

    def test_names_are_unique(self, storage):
        keys = {storage.save(b"x", "a.txt") for _ in range(20)}
        assert len(keys) == 20

    @pytest.mark.parametrize(
        "key", ["../secret.txt", "abc.pdf", "", "0" * 32 + ".pdf/../x"]
    )
    def test_malformed_keys_never_resolve(self, storage, key):
        storage.save(b"x", "a.pdf")
        assert storage.open(key) is None

    def test_delete_missing_is_ignored(self, storage):
        storage.delete("0" * 32 + ".pdf")
