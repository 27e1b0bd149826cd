"""Tests for the HTTP interface."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from bankimport.api import create_app

TENANT_ID = "tenant-1"
HEADERS = {"X-Tenant-Id": TENANT_ID, "X-User-Id": "user-1"}


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


def _upload(client, file_name, content, account_id, headers=HEADERS, **form):
    data = {"accountId": account_id, **form}
    return client.post(
        "/api/files/upload",
        files={"file": (file_name, content, "application/octet-stream")},
        data=data,
        headers=headers,
    )


class TestUpload:
    """POST /api/files/upload"""

    def test_csv_upload(self, client, temp_db, sample_account, fixtures_dir):
        """A CSV upload returns the import summary."""
        response = _upload(
            client, "sample.csv", (fixtures_dir / "sample.csv").read_bytes(), sample_account.id
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["imported"] == 4
        assert body["data"]["newBalance"] == "2241.30"
        assert body["data"]["status"] == "success"
        assert temp_db.get_account(TENANT_ID, sample_account.id).balance == Decimal("2241.30")

        log = temp_db.get_import_log(body["data"]["logId"], TENANT_ID)
        assert log.user_id == "user-1"

    def test_pdf_upload_is_queued(self, client, temp_db, sample_account, make_pdf):
        """PDF uploads are accepted for background processing."""
        content = make_pdf(["01/02/2024 Coffee Shop -5.50 995.00"])

        response = _upload(client, "statement.pdf", content, sample_account.id, templateId="uk-generic")

        assert response.status_code == 202
        data = response.json()["data"]
        assert data["queued"] is True
        assert data["status"] == "processing"

        job = temp_db.claim_job()
        assert job.payload["logId"] == data["logId"]
        assert job.payload["templateId"] == "uk-generic"

    def test_missing_tenant(self, client, sample_account, fixtures_dir):
        """Requests without a tenant are unauthorized."""
        response = _upload(
            client, "sample.csv", (fixtures_dir / "sample.csv").read_bytes(), sample_account.id,
            headers={},
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {"code": "UNAUTHORIZED", "message": "Missing tenant identity"},
        }

    def test_missing_file(self, client, sample_account):
        """A request without a file is a validation error."""
        response = client.post(
            "/api/files/upload", data={"accountId": sample_account.id}, headers=HEADERS
        )

        assert response.status_code == 400
        assert response.json()["error"] == {"code": "VALIDATION_ERROR", "message": "No file uploaded"}

    def test_missing_account_id(self, client):
        """accountId is required."""
        response = client.post(
            "/api/files/upload",
            files={"file": ("s.csv", b"Date,Description,Amount\n", "text/csv")},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Account ID is required"

    def test_unsupported_format(self, client, sample_account):
        """Unknown extensions are rejected."""
        response = _upload(client, "statement.docx", b"data", sample_account.id)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNSUPPORTED_FORMAT"

    def test_empty_statement(self, client, sample_account, fixtures_dir):
        """A statement without transactions is reported as EMPTY_FILE."""
        response = _upload(
            client, "header_only.csv", (fixtures_dir / "header_only.csv").read_bytes(), sample_account.id
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EMPTY_FILE"

    def test_parse_error(self, client, sample_account):
        """Structurally broken files are reported as PARSE_ERROR."""
        response = _upload(client, "bad.json", b"{not json", sample_account.id)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PARSE_ERROR"

    def test_unknown_account(self, client):
        """Unknown accounts are 404."""
        response = _upload(client, "s.csv", b"Date,Description,Amount\n", "missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_other_tenant_account(self, client, sample_account, fixtures_dir):
        """Another tenant cannot import into the account."""
        response = _upload(
            client,
            "sample.csv",
            (fixtures_dir / "sample.csv").read_bytes(),
            sample_account.id,
            headers={"X-Tenant-Id": "tenant-2"},
        )

        assert response.status_code == 404


class TestUploadsList:
    """GET /api/files/uploads"""

    def test_archived_uploads_are_listed(self, client, sample_account, fixtures_dir):
        """Archived originals of the tenant are listed."""
        _upload(client, "sample.csv", (fixtures_dir / "sample.csv").read_bytes(), sample_account.id)

        response = client.get("/api/files/uploads", headers=HEADERS)

        assert response.status_code == 200
        [upload] = response.json()["data"]
        assert upload["fileName"] == "sample.csv"
        assert upload["key"].startswith(f"{TENANT_ID}/{sample_account.id}/")

        other = client.get("/api/files/uploads", headers={"X-Tenant-Id": "tenant-2"})
        assert other.json()["data"] == []


class TestImportLogs:
    """GET /api/logs/import and /api/logs/import/{id}"""

    def test_list_and_show(self, client, sample_account, fixtures_dir):
        """Logs are listed for the tenant and can be fetched by id."""
        upload = _upload(
            client, "sample.csv", (fixtures_dir / "sample.csv").read_bytes(), sample_account.id
        )
        log_id = upload.json()["data"]["logId"]

        listing = client.get("/api/logs/import", headers=HEADERS)
        assert listing.status_code == 200
        [entry] = listing.json()["data"]
        assert entry["id"] == log_id
        assert entry["status"] == "success"
        assert entry["transactionsImported"] == 4

        detail = client.get(f"/api/logs/import/{log_id}", headers=HEADERS)
        assert detail.status_code == 200
        assert detail.json()["data"]["fileName"] == "sample.csv"

    def test_other_tenant_log_not_found(self, client, sample_account, fixtures_dir):
        """Logs of another tenant are hidden."""
        upload = _upload(
            client, "sample.csv", (fixtures_dir / "sample.csv").read_bytes(), sample_account.id
        )
        log_id = upload.json()["data"]["logId"]

        response = client.get(f"/api/logs/import/{log_id}", headers={"X-Tenant-Id": "tenant-2"})

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_negative_limit(self, client):
        """Negative paging values are rejected."""
        response = client.get("/api/logs/import?limit=-1", headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_logs_require_tenant(self, client):
        """Log listing needs a tenant."""
        assert client.get("/api/logs/import").status_code == 401


def test_pdf_templates(client):
    """Bank templates and the generic fallback are listed without regexes."""
    response = client.get("/api/pdf/templates")

    assert response.status_code == 200
    templates = response.json()["data"]
    assert [t["id"] for t in templates] == ["uk-generic", "us-generic", "generic"]
    assert all("row_pattern" not in t for t in templates)


def test_unexpected_error_uses_envelope(settings, sample_account, fixtures_dir):
    """Unhandled failures are reported as INTERNAL_ERROR in the JSON envelope."""
    client = TestClient(create_app(settings), raise_server_exceptions=False)

    with patch(
        "bankimport.api.app.StatementImportService.import_statement",
        side_effect=RuntimeError("kaboom"),
    ):
        response = _upload(
            client, "sample.csv", (fixtures_dir / "sample.csv").read_bytes(), sample_account.id
        )

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": {"code": "INTERNAL_ERROR", "message": "Internal server error"},
    }


def test_non_finite_json_amounts_are_skipped(client, sample_account):
    """A JSON upload with NaN amounts imports only the finite rows."""
    content = (
        b'[{"date": "2024-01-01", "description": "x", "amount": NaN},'
        b' {"date": "2024-01-02", "description": "y", "amount": -2.5}]'
    )

    response = _upload(client, "statement.json", content, sample_account.id)

    assert response.status_code == 200
    assert response.json()["data"]["imported"] == 1
    assert response.json()["data"]["newBalance"] == "997.50"
