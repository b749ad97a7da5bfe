from urllib.parse import quote, unquote

import httpx
import pytest
from fastapi.testclient import TestClient
from google.auth.exceptions import RefreshError

from src.api.endpoints import documents
from src.api.main import create_app
from src.database.postgres import PostgresDB
from src.documents.indemnity_pdf import PdfRenderingUnavailable
from src.integrations.sheets.guide_registry import SETUP_MESSAGE, GuideRegistryConfigurationError
from tests.factories import FakeGuideRegistry, FakeInsuranceClient, make_payload


class BrokenDB(PostgresDB):
    def create_submission_bundle(self, bundle):
        raise RuntimeError("database unavailable")


class TableRecordingDB(PostgresDB):
    def __init__(self):
        super().__init__()
        self.table_creations = 0

    def create_tables(self):
        self.table_creations += 1


@pytest.fixture
def insurance():
    return FakeInsuranceClient()


@pytest.fixture
def registry():
    return FakeGuideRegistry(records={"900101101234": {"RegNo": "R-01", "name": "Ali"}})


@pytest.fixture
def client(db, insurance, registry):
    return TestClient(create_app(db=db, insurance_client=insurance, guide_registry=registry))


@pytest.fixture
def staff_client(client):
    client.cookies.set("session", "authenticated")
    return client


def _ingest(client, answers, submission_id="sub-001"):
    return client.post("/api/tally-to-supabase", json=make_payload(answers, submission_id=submission_id))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_startup_creates_tables(insurance, registry):
    db = TableRecordingDB()
    app = create_app(db=db, insurance_client=insurance, guide_registry=registry)
    assert db.table_creations == 0

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert db.table_creations == 1


def test_webhook_stores_submission_and_requests_policy(client, db, insurance, minor_answers):
    res = _ingest(client, minor_answers)

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["duplicate"] is False
    assert body["insurance"] == {"status": "created"}
    assert body["submission_id"] in db.submissions
    assert db.submissions[body["submission_id"]].yas_insurance == {"policyNo": "POL-1"}
    assert insurance.requests[0].email == "guardian@example.com"


def test_webhook_redelivery_reports_duplicate(client, db, minor_answers):
    first = _ingest(client, minor_answers).json()
    second = _ingest(client, minor_answers).json()

    assert second["duplicate"] is True
    assert second["submission_id"] == first["submission_id"]
    assert len(db.submissions) == 1


def test_webhook_insurance_failure_still_succeeds(db, registry, minor_answers):
    failing = FakeInsuranceClient(error=RuntimeError("YAS API error 500: boom"))
    client = TestClient(create_app(db=db, insurance_client=failing, guide_registry=registry))

    res = _ingest(client, minor_answers)

    assert res.status_code == 200
    assert res.json()["insurance"] == {"status": "failed", "error": "YAS API error 500: boom"}
    assert len(db.submissions) == 1


@pytest.mark.parametrize("body", [{"data": {}}, {"nothing": True}, {"data": {"fields": None}}])
def test_webhook_rejects_payload_without_fields(client, db, body):
    res = client.post("/api/tally-to-supabase", json=body)
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid payload, no fields"}
    assert db.submissions == {}


def test_webhook_rejects_non_json(client):
    res = client.post("/api/tally-to-supabase", content=b"not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400


def test_webhook_storage_failure_is_500(insurance, registry, minor_answers):
    client = TestClient(create_app(db=BrokenDB(), insurance_client=insurance, guide_registry=registry))
    res = _ingest(client, minor_answers)
    assert res.status_code == 500
    assert res.json() == {"error": "database unavailable"}
    assert insurance.requests == []


def test_login_sets_session_cookie(client, monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "letmein")

    res = client.post("/api/auth/login", json={"password": "letmein"})

    assert res.status_code == 200
    assert res.json() == {"success": True}
    cookie = res.headers["set-cookie"]
    assert "session=authenticated" in cookie
    assert "HttpOnly" in cookie
    assert "Secure" in cookie
    assert "SameSite=strict" in cookie
    assert "Max-Age=3600" in cookie


@pytest.mark.parametrize("password", ["wrong", "", None])
def test_login_rejects_bad_password(client, monkeypatch, password):
    monkeypatch.setenv("ADMIN_PASSWORD", "letmein")
    res = client.post("/api/auth/login", json={"password": password})
    assert res.status_code == 401
    assert res.json() == {"success": False}


def test_login_rejected_when_password_unset(client, monkeypatch):
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    res = client.post("/api/auth/login", json={"password": ""})
    assert res.status_code == 401


def test_generate_pdf_requires_session(client):
    res = client.post("/api/generate-pdf", json={"submissionId": "x"})
    assert res.status_code == 401


def test_generate_pdf_for_submission(staff_client, minor_answers, monkeypatch):
    rendered = []

    def fake_pdf(html):
        rendered.append(html)
        return b"%PDF-1.7 fake"

    monkeypatch.setattr(documents, "generate_pdf_from_html", fake_pdf)
    submission_id = _ingest(staff_client, minor_answers).json()["submission_id"]

    res = staff_client.post("/api/generate-pdf", json={"submissionId": submission_id})

    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.headers["content-disposition"] == (
        "attachment; filename=\"indemnity_140302-08-1234.pdf\"; filename*=UTF-8''indemnity_140302-08-1234.pdf"
    )
    assert res.content == b"%PDF-1.7 fake"
    assert "Jane Tan" in rendered[0]


def test_generate_pdf_for_group(staff_client, minor_answers, monkeypatch):
    monkeypatch.setattr(documents, "generate_pdf_from_html", lambda html: b"%PDF")
    _ingest(staff_client, minor_answers)

    res = staff_client.post("/api/generate-pdf", json={"group": "Sekolah Seri Gopeng"})

    assert res.status_code == 200
    assert res.headers["content-disposition"] == (
        "attachment; filename=\"indemnity_group_Sekolah Seri Gopeng.pdf\"; "
        "filename*=UTF-8''indemnity_group_Sekolah%20Seri%20Gopeng.pdf"
    )


def test_generate_pdf_for_non_ascii_group(staff_client, minor_answers, monkeypatch):
    monkeypatch.setattr(documents, "generate_pdf_from_html", lambda html: b"%PDF")
    _ingest(staff_client, dict(minor_answers, groupname="团体 A"))

    res = staff_client.post("/api/generate-pdf", json={"group": "团体 A"})

    assert res.status_code == 200
    disposition = res.headers["content-disposition"]
    assert 'filename="indemnity_group___ A.pdf"' in disposition
    assert "filename*=UTF-8''" + quote("indemnity_group_团体 A.pdf", safe="") in disposition
    assert unquote(disposition.split("filename*=UTF-8''")[1]) == "indemnity_group_团体 A.pdf"


def test_generate_pdf_errors(staff_client, minor_answers, monkeypatch):
    assert staff_client.post("/api/generate-pdf", json={}).status_code == 400
    assert staff_client.post("/api/generate-pdf", json={"submissionId": "missing"}).status_code == 404
    assert staff_client.post("/api/generate-pdf", json={"group": "nobody"}).status_code == 404

    def unavailable(html):
        raise PdfRenderingUnavailable("PDF rendering is not available.")

    monkeypatch.setattr(documents, "generate_pdf_from_html", unavailable)
    submission_id = _ingest(staff_client, minor_answers).json()["submission_id"]
    res = staff_client.post("/api/generate-pdf", json={"submissionId": submission_id})
    assert res.status_code == 500
    assert res.json() == {"error": "PDF rendering is not available."}


def test_check_ic_found_and_normalized(client, registry):
    res = client.post("/api/check-ic", json={"icNumber": "900101-10-1234"})
    assert res.status_code == 200
    assert res.json() == {"RegNo": "R-01", "name": "Ali"}
    assert registry.lookups == ["900101101234"]


def test_check_ic_not_found(client):
    res = client.post("/api/check-ic", json={"icNumber": "000000000000"})
    assert res.status_code == 200
    assert res.json() == {"message": "Record not found. Please contact admin."}


def test_check_ic_requires_number(client):
    res = client.post("/api/check-ic", json={})
    assert res.status_code == 400
    assert res.json() == {"message": "IC number is required"}


def test_check_ic_configuration_error(db, insurance):
    registry = FakeGuideRegistry(error=GuideRegistryConfigurationError(SETUP_MESSAGE))
    client = TestClient(create_app(db=db, insurance_client=insurance, guide_registry=registry))
    res = client.post("/api/check-ic", json={"icNumber": "900101101234"})
    assert res.status_code == 500
    assert res.json() == {"message": SETUP_MESSAGE}


def test_kanban_boards(client, minor_answers):
    _ingest(client, minor_answers, submission_id="sub-1")
    _ingest(client, dict(minor_answers, fullname="Ali", healthdeclaration=None, groupname="Other"), submission_id="sub-2")
    params = {"branch": "GOPENG GLAMPING PARK", "date": "2024-06-01"}

    board = client.get("/api/kanban/activities", params=params).json()
    assert board["total"] == 4
    assert [s["label"] for s in board["sessions"]] == ["10:00 AM", "2:30 PM"]

    detail = client.get("/api/kanban/activities/ATV", params=params).json()
    assert [p["fullname"] for p in detail["participants"]] == ["Jane Tan", "Ali"]
    assert detail["participants"][0]["medical_flag"] is True

    groups = client.get("/api/kanban/groups", params=params).json()
    assert groups == {"groups": ["Other", "Sekolah Seri Gopeng"]}

    group = client.get("/api/kanban/groups/Other", params=params).json()
    assert group["pax"] == 1


def test_client_info_requires_session_and_hides_signatures(client, minor_answers):
    submission_id = _ingest(client, minor_answers).json()["submission_id"]

    assert client.get(f"/api/kanban/clinfo/{submission_id}").status_code == 401

    client.cookies.set("session", "authenticated")
    info = client.get(f"/api/kanban/clinfo/{submission_id}").json()
    assert info["participant"]["fullname"] == "Jane Tan"
    assert "guardian_signature" not in info["guardian"]
    assert client.get("/api/kanban/clinfo/missing").status_code == 404


@pytest.mark.parametrize(
    "error",
    [
        ValueError("Could not deserialize key data"),
        RefreshError("invalid_grant: Invalid JWT Signature."),
        httpx.ConnectError("connection refused"),
    ],
)
def test_check_ic_lookup_failures_return_server_error(db, insurance, error):
    registry = FakeGuideRegistry(error=error)
    client = TestClient(create_app(db=db, insurance_client=insurance, guide_registry=registry))

    res = client.post("/api/check-ic", json={"icNumber": "900101101234"})

    assert res.status_code == 500
    assert res.json() == {"message": "Server error"}
