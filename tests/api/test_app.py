"""
Tests for the FastAPI application.

Services run against the in-memory database through dependency overrides;
the approval email is replaced by an AsyncMock.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from proofdesk.api.app import (
    app,
    get_ad_proof_service,
    get_approval_service,
    get_campaign_service,
    get_client_service,
    get_share_service,
    limiter,
)
from proofdesk.services.ad_proof_service import AdProofService
from proofdesk.services.approval_service import ApprovalService
from proofdesk.services.campaign_service import CampaignService
from proofdesk.services.client_service import ClientService
from proofdesk.services.email_service import EmailResult
from proofdesk.services.share_service import ShareService


@pytest.fixture
def email_service():
    mock = MagicMock()
    mock.send_approval_notification = AsyncMock(return_value=EmailResult(success=True))
    return mock


@pytest.fixture
def api(db, email_service, monkeypatch):
    monkeypatch.delenv("PROOFDESK_API_KEY", raising=False)
    limiter.reset()
    app.dependency_overrides[get_client_service] = lambda: ClientService(db)
    app.dependency_overrides[get_campaign_service] = lambda: CampaignService(db)
    app.dependency_overrides[get_ad_proof_service] = lambda: AdProofService(db)
    app.dependency_overrides[get_share_service] = lambda: ShareService(db)
    app.dependency_overrides[get_approval_service] = lambda: ApprovalService(db, email_service=email_service)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def proof(api, campaign_row):
    response = api.post(
        f"/campaigns/{campaign_row['id']}/ad-proofs",
        json={
            "platform": "facebook",
            "ad_format": "single_image",
            "ad_data": {"headline": "Spring", "primaryText": "Sale"},
        },
    )
    assert response.status_code == 201
    return response.json()["ad_proof"]


# ============================================================================
# System & auth
# ============================================================================

class TestSystem:
    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["services"]["database"] in ("configured", "error")

    def test_api_key_required_when_configured(self, api, monkeypatch):
        monkeypatch.setenv("PROOFDESK_API_KEY", "secret")
        assert api.get("/clients").status_code == 401
        assert api.get("/clients", headers={"X-API-Key": "wrong"}).status_code == 403
        assert api.get("/clients", headers={"X-API-Key": "secret"}).status_code == 200

    def test_share_links_need_no_key(self, api, monkeypatch, proof):
        monkeypatch.setenv("PROOFDESK_API_KEY", "secret")
        assert api.get(f"/proof/{proof['share_token']}").status_code == 200


# ============================================================================
# Operator endpoints
# ============================================================================

class TestOperatorEndpoints:
    def test_create_client_guesses_logo(self, api):
        response = api.post("/clients", json={"name": "Acme", "website": "www.acme.com"})
        assert response.status_code == 201
        assert response.json()["logo_url"] == "https://logo.clearbit.com/acme.com"

    def test_create_campaign(self, api, client_row):
        response = api.post("/campaigns", json={"client_id": client_row["id"], "name": "Q3"})
        assert response.status_code == 201
        assert response.json()["share_token"] is None

    def test_create_ad_proof(self, api, campaign_row):
        response = api.post(
            f"/campaigns/{campaign_row['id']}/ad-proofs",
            json={
                "platform": "facebook",
                "ad_format": "single_image",
                "ad_data": {"headline": "x" * 45, "primaryText": "Sale"},
            },
        )
        body = response.json()
        assert response.status_code == 201
        assert body["ad_proof"]["current_version"] == 1
        assert body["share_url"].endswith(f"/proof/{body['ad_proof']['share_token']}")
        assert body["warnings"] == ["headline is 45/40 characters"]

    def test_missing_content_is_400(self, api, campaign_row):
        response = api.post(
            f"/campaigns/{campaign_row['id']}/ad-proofs",
            json={"platform": "facebook", "ad_format": "carousel", "ad_data": {"primaryText": "P", "cards": []}},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert body["errors"] == ["At least 1 card with an image or URL is required"]

    def test_append_and_list_versions(self, api, proof):
        response = api.post(
            f"/ad-proofs/{proof['id']}/versions",
            json={"ad_data": {"headline": "Spring!", "primaryText": "Sale"}},
        )
        assert response.status_code == 201
        assert response.json()["version_number"] == 2

        versions = api.get(f"/ad-proofs/{proof['id']}/versions").json()
        assert [v["version_number"] for v in versions] == [2, 1]

        v1 = api.get(f"/ad-proofs/{proof['id']}/versions/1").json()
        assert v1["ad_data"] == {"headline": "Spring", "primaryText": "Sale"}

    def test_unknown_ad_proof_is_404(self, api):
        response = api.get("/ad-proofs/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "Ad Proof Not Found"

    def test_share_campaign(self, api, campaign_row):
        first = api.post(f"/campaigns/{campaign_row['id']}/share").json()
        second = api.post(f"/campaigns/{campaign_row['id']}/share").json()
        assert first["share_token"] == second["share_token"]
        assert first["share_url"].endswith(f"/c/{first['share_token']}")

    def test_database_failure_is_503(self, api, db):
        db.fail_next("clients")
        response = api.get("/clients")
        assert response.status_code == 503
        assert response.json()["error"] == "Service temporarily unavailable"

    def test_delete_ad_proof(self, api, proof):
        assert api.delete(f"/ad-proofs/{proof['id']}").status_code == 204
        assert api.get(f"/ad-proofs/{proof['id']}").status_code == 404

    def test_platform_specific_warnings(self, api, campaign_row):
        response = api.post(
            f"/campaigns/{campaign_row['id']}/ad-proofs",
            json={
                "platform": "linkedin",
                "ad_format": "single_image",
                "ad_data": {"headline": "x" * 60, "primaryText": "Sale"},
            },
        )
        assert response.status_code == 201
        assert response.json()["warnings"] == []


class TestEditEndpoints:
    def test_update_client(self, api, client_row):
        response = api.patch(f"/clients/{client_row['id']}", json={"name": "Acme Corp", "logo_url": ""})
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Acme Corp"
        assert body["logo_url"] is None

    def test_update_client_blank_name_is_400(self, api, client_row):
        response = api.patch(f"/clients/{client_row['id']}", json={"name": " "})
        assert response.status_code == 400
        assert response.json()["errors"] == ["Client name is required"]

    def test_update_campaign(self, api, campaign_row):
        response = api.patch(
            f"/campaigns/{campaign_row['id']}", json={"name": "Summer Launch", "platform": "instagram"}
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Summer Launch"
        assert response.json()["platform"] == "instagram"

    def test_update_unknown_campaign_is_404(self, api):
        response = api.patch("/campaigns/missing", json={"name": "X"})
        assert response.status_code == 404

    def test_update_ad_proof_keeps_content(self, api, proof):
        response = api.patch(f"/ad-proofs/{proof['id']}", json={"name": "Spring hero", "status": "approved"})
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Spring hero"
        assert body["status"] == "approved"
        assert body["current_version"] == 1

        versions = api.get(f"/ad-proofs/{proof['id']}/versions").json()
        assert len(versions) == 1

    def test_update_ad_proof_blank_status_is_400(self, api, proof):
        response = api.patch(f"/ad-proofs/{proof['id']}", json={"status": " "})
        assert response.status_code == 400


# ============================================================================
# Share links
# ============================================================================

class TestShareLinks:
    def test_view_current_version(self, api, proof):
        api.post(f"/ad-proofs/{proof['id']}/versions",
                 json={"ad_data": {"headline": "Spring!", "primaryText": "Sale"}})

        body = api.get(f"/proof/{proof['share_token']}").json()
        assert body["current_version"] == 2
        assert body["version"]["version_number"] == 2
        assert body["is_current"] is True
        assert body["client_name"] == "Acme Inc"

    def test_view_historical_version(self, api, proof):
        api.post(f"/ad-proofs/{proof['id']}/versions",
                 json={"ad_data": {"headline": "Spring!", "primaryText": "Sale"}})

        body = api.get(f"/proof/{proof['share_token']}", params={"version": 1}).json()
        assert body["version"]["ad_data"]["headline"] == "Spring"
        assert body["is_current"] is False

    def test_unknown_token(self, api):
        response = api.get("/proof/doesnotexist")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Ad Proof Not Found"
        assert body["detail"] == "This share link may be invalid or expired."

    def test_version_selector(self, api, proof):
        versions = api.get(f"/proof/{proof['share_token']}/versions").json()
        assert [v["version_number"] for v in versions] == [1]

    def test_submit_approval(self, api, proof, email_service):
        response = api.post(
            f"/proof/{proof['share_token']}/approvals",
            json={
                "version_number": 1,
                "decision": "approved",
                "comment": "Ship it",
                "approver_name": "Jane",
            },
        )
        assert response.status_code == 201
        assert response.json()["decision"] == "approved"

        history = api.get(f"/proof/{proof['share_token']}/approvals").json()
        assert [a["comment"] for a in history["approvals"]] == ["Ship it"]

    def test_blank_name_is_400(self, api, proof):
        response = api.post(
            f"/proof/{proof['share_token']}/approvals",
            json={"version_number": 1, "decision": "approved", "comment": "ok", "approver_name": " "},
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["Approver name is required"]

    def test_future_version_is_400(self, api, proof):
        response = api.post(
            f"/proof/{proof['share_token']}/approvals",
            json={"version_number": 4, "decision": "approved", "comment": "ok", "approver_name": "Jane"},
        )
        assert response.status_code == 400

    def test_approval_on_unknown_token(self, api):
        response = api.post(
            "/proof/doesnotexist/approvals",
            json={"version_number": 1, "decision": "approved", "comment": "ok", "approver_name": "Jane"},
        )
        assert response.status_code == 404

    def test_comments(self, api, proof):
        response = api.post(
            f"/proof/{proof['share_token']}/comments",
            json={
                "version_number": 1,
                "comment_text": "Shorter please",
                "commenter_name": "Jane",
                "field_name": "headline",
            },
        )
        assert response.status_code == 201
        assert response.json()["comment_type"] == "field"

        shared = api.get(f"/proof/{proof['share_token']}/comments").json()
        assert [c["comment_text"] for c in shared] == ["Shorter please"]

        operator = api.get(f"/ad-proofs/{proof['id']}/comments", params={"version": 1}).json()
        assert operator[0]["field_name"] == "headline"

    def test_blank_comment_is_400(self, api, proof):
        response = api.post(
            f"/proof/{proof['share_token']}/comments",
            json={"version_number": 1, "comment_text": "", "commenter_name": "Jane"},
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["Comment is required"]

    def test_view_campaign(self, api, campaign_row, proof):
        token = api.post(f"/campaigns/{campaign_row['id']}/share").json()["share_token"]

        body = api.get(f"/c/{token}").json()
        assert body["campaign_name"] == "Spring Launch"
        assert body["client"]["name"] == "Acme Inc"
        assert len(body["ad_proofs"]) == 1
        assert body["ad_proofs"][0]["version"]["version_number"] == 1

    def test_unknown_campaign_token(self, api):
        response = api.get("/c/doesnotexist")
        assert response.status_code == 404
        assert response.json()["error"] == "Campaign Not Found"
