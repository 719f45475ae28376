"""Tests for whistleblower endpoints."""

from authentication.auth import create_access_token
from models.principal import PrincipalKind


class TestLogin:
    """POST /api/whistleblower/login"""

    def test_success(self, client, submitted_report):
        report, secret = submitted_report

        response = client.post(
            "/api/whistleblower/login",
            json={"case_code": report.case_code, "secret": secret},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["case_code"] == report.case_code
        assert data["status"] == "NEW"
        assert data["access_token"]

    def test_wrong_and_unknown_look_identical(self, client, submitted_report):
        report, secret = submitted_report

        wrong_secret = client.post(
            "/api/whistleblower/login",
            json={"case_code": report.case_code, "secret": "wrong"},
        )
        unknown_code = client.post(
            "/api/whistleblower/login",
            json={"case_code": "WH-000-AAA", "secret": secret},
        )

        assert wrong_secret.status_code == unknown_code.status_code == 401
        assert wrong_secret.json()["detail"] == unknown_code.json()["detail"]

    def test_throttled_after_repeated_failures(self, client, submitted_report):
        report, secret = submitted_report
        for _ in range(10):
            client.post(
                "/api/whistleblower/login",
                json={"case_code": report.case_code, "secret": "wrong"},
            )

        response = client.post(
            "/api/whistleblower/login",
            json={"case_code": report.case_code, "secret": secret},
        )

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0

    def test_forwarded_header_does_not_reset_throttle(self, client, submitted_report):
        report, _ = submitted_report
        statuses = [
            client.post(
                "/api/whistleblower/login",
                json={"case_code": report.case_code, "secret": "wrong"},
                headers={"X-Forwarded-For": f"10.0.0.{i}"},
            ).status_code
            for i in range(11)
        ]

        assert statuses[:10] == [401] * 10
        assert statuses[10] == 429


class TestMessages:
    """GET/POST /api/whistleblower/messages"""

    def test_requires_token(self, client):
        response = client.get("/api/whistleblower/messages")
        assert response.status_code == 401

    def test_admin_token_rejected(self, client, admin_headers, test_report):
        response = client.get("/api/whistleblower/messages", headers=admin_headers)
        assert response.status_code == 401

    def test_reads_own_case(self, client, report_headers, test_report):
        response = client.get("/api/whistleblower/messages", headers=report_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["case_code"] == test_report.case_code
        assert data["status"] == "NEW"
        assert [m["sender_type"] for m in data["messages"]] == ["WHISTLEBLOWER"]
        assert "category" not in data

    def test_post_message(self, client, report_headers):
        response = client.post(
            "/api/whistleblower/messages",
            headers=report_headers,
            data={"content": "One more detail."},
        )

        assert response.status_code == 201
        assert response.json()["sender_type"] == "WHISTLEBLOWER"
        assert response.json()["content"] == "One more detail."

    def test_post_does_not_change_status(self, client, report_headers):
        client.post(
            "/api/whistleblower/messages",
            headers=report_headers,
            data={"content": "One more detail."},
        )

        response = client.get("/api/whistleblower/messages", headers=report_headers)
        assert response.json()["status"] == "NEW"

    def test_post_to_closed_case_rejected(
        self, client, report_headers, admin_headers, test_report
    ):
        client.patch(
            f"/api/admin/reports/{test_report.id}/status",
            headers=admin_headers,
            json={"status": "CLOSED"},
        )

        response = client.post(
            "/api/whistleblower/messages",
            headers=report_headers,
            data={"content": "Are you still there?"},
        )

        assert response.status_code == 400

    def test_token_of_deleted_report_rejected(self, client):
        token = create_access_token(PrincipalKind.REPORT, 9999)
        response = client.get(
            "/api/whistleblower/messages",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401
