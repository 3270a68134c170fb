"""Integration tests for the /api endpoints."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from errors import CaptchaServiceError
from schemas.models.registration import INTEREST_EMAILS_COLLECTION, REGISTRATIONS_COLLECTION

ADA = {
    "fullName": "Ada Lovelace",
    "email": "ada@stanford.edu",
    "school": "Stanford University",
    "graduationYear": "2027",
    "travelingFrom": "London, UK",
    "experience": "advanced",
    "token": "tok-123",
}


# ---------------------------------------------------------------------------
# POST /api/verify-captcha
# ---------------------------------------------------------------------------


class TestVerifyCaptcha:
    def test_relays_service_json(self, app_factory, store, verifier_factory):
        verifier = verifier_factory(True, score=0.9)
        with TestClient(app_factory(verifier, store)) as client:
            resp = client.post("/api/verify-captcha", json={"token": "tok-123"})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "score": 0.9}
        verifier.verify.assert_awaited_once_with("tok-123")

    def test_relays_rejection(self, app_factory, store, verifier_factory):
        verifier = verifier_factory(False, error="expired")
        with TestClient(app_factory(verifier, store)) as client:
            resp = client.post("/api/verify-captcha", json={"token": "old"})
        assert resp.status_code == 200
        assert resp.json() == {"success": False, "error": "expired"}

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("unreachable"),
            CaptchaServiceError("Captcha service returned an unreadable response"),
        ],
        ids=["network", "unreadable"],
    )
    def test_internal_failure_is_500_false(self, app_factory, store, exc):
        verifier = AsyncMock()
        verifier.verify.side_effect = exc
        with TestClient(app_factory(verifier, store)) as client:
            resp = client.post("/api/verify-captcha", json={"token": "tok"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False}

    def test_missing_token_is_400(self, app_factory, store, verifier_factory):
        verifier = verifier_factory()
        with TestClient(app_factory(verifier, store)) as client:
            resp = client.post("/api/verify-captcha", json={})
        assert resp.status_code == 400
        assert resp.json()["field"] == "token"
        verifier.verify.assert_not_awaited()


# ---------------------------------------------------------------------------
# POST /api/registrations
# ---------------------------------------------------------------------------


class TestCreateRegistration:
    def test_saves_document_keyed_by_email(self, app_factory, store, verifier_factory):
        with TestClient(app_factory(verifier_factory(), store)) as client:
            resp = client.post("/api/registrations", json=ADA)
        assert resp.status_code == 201
        assert resp.json() == {
            "success": True,
            "status": "success",
            "email": "ada@stanford.edu",
            "message": "You're registered!",
        }
        doc = store.collection(REGISTRATIONS_COLLECTION)["ada@stanford.edu"]
        assert doc["fullName"] == "Ada Lovelace"
        assert doc["graduationYear"] == "2027"
        assert doc["experience"] == "advanced"
        assert "createdAt" in doc
        assert "token" not in doc

    def test_captcha_rejected(self, app_factory, store, verifier_factory):
        with TestClient(app_factory(verifier_factory(False), store)) as client:
            resp = client.post("/api/registrations", json=ADA)
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Captcha verification failed. Please try again.",
            "code": "captcha_failed",
        }
        assert store.documents == {}

    def test_missing_token(self, app_factory, store, verifier_factory):
        verifier = verifier_factory()
        body = {k: v for k, v in ADA.items() if k != "token"}
        with TestClient(app_factory(verifier, store)) as client:
            resp = client.post("/api/registrations", json=body)
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"
        assert resp.json()["field"] == "token"
        verifier.verify.assert_not_awaited()

    @pytest.mark.parametrize(
        "override",
        [{"fullName": ""}, {"email": "not-an-email"}, {"experience": "expert"}],
        ids=["blank_name", "bad_email", "bad_experience"],
    )
    def test_invalid_body(self, app_factory, store, verifier_factory, override):
        verifier = verifier_factory()
        with TestClient(app_factory(verifier, store)) as client:
            resp = client.post("/api/registrations", json={**ADA, **override})
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"
        verifier.verify.assert_not_awaited()

    def test_store_failure_is_503(self, app_factory, store, verifier_factory):
        store.merge = AsyncMock(side_effect=Exception("permission denied"))
        with TestClient(app_factory(verifier_factory(), store)) as client:
            resp = client.post("/api/registrations", json=ADA)
        assert resp.status_code == 503
        assert resp.json() == {
            "error": "Something went wrong. Please try again.",
            "code": "service_unavailable",
        }

    def test_resubmission_updates_single_document(
        self, app_factory, store, verifier_factory
    ):
        with TestClient(app_factory(verifier_factory(), store)) as client:
            client.post("/api/registrations", json=ADA)
            resp = client.post(
                "/api/registrations",
                json={**ADA, "email": "ADA@stanford.edu", "school": "Oxford"},
            )
        assert resp.status_code == 201
        docs = store.collection(REGISTRATIONS_COLLECTION)
        assert list(docs) == ["ada@stanford.edu"]
        assert docs["ada@stanford.edu"]["school"] == "Oxford"


# ---------------------------------------------------------------------------
# POST /api/interest
# ---------------------------------------------------------------------------


class TestCreateInterest:
    def test_saves_email(self, app_factory, store, verifier_factory):
        with TestClient(app_factory(verifier_factory(), store)) as client:
            resp = client.post(
                "/api/interest", json={"email": "bob@example.com", "token": "t"}
            )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["email"] == "bob@example.com"
        doc = store.collection(INTEREST_EMAILS_COLLECTION)["bob@example.com"]
        assert doc["email"] == "bob@example.com"
        assert "createdAt" in doc

    def test_same_email_twice_keeps_one_document(
        self, app_factory, store, verifier_factory
    ):
        with TestClient(app_factory(verifier_factory(), store)) as client:
            for _ in range(2):
                resp = client.post(
                    "/api/interest", json={"email": "bob@example.com", "token": "t"}
                )
                assert resp.status_code == 201
        assert len(store.collection(INTEREST_EMAILS_COLLECTION)) == 1
        assert len(store.writes) == 2

    def test_captcha_rejected(self, app_factory, store, verifier_factory):
        with TestClient(app_factory(verifier_factory(False), store)) as client:
            resp = client.post(
                "/api/interest", json={"email": "bob@example.com", "token": "t"}
            )
        assert resp.status_code == 400
        assert resp.json()["code"] == "captcha_failed"
        assert store.documents == {}

    def test_invalid_email(self, app_factory, store, verifier_factory):
        with TestClient(app_factory(verifier_factory(), store)) as client:
            resp = client.post("/api/interest", json={"email": "bob@", "token": "t"})
        assert resp.status_code == 400
        assert resp.json()["field"] == "email"
