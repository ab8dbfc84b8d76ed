"""Tests for the enrichment & scoring API router."""
import uuid
from datetime import timedelta

import jwt

from leadqual.config import settings
from leadqual.core.clock import utcnow
from leadqual.core.security import create_access_token
from leadqual.models.scoring import DEFAULT_WEIGHTS
from leadqual.models.user import User

from conftest import make_lead, make_perfect_lead

URL = "/api/leads/enrichment"


def _add_leads(repos, *leads):
    for lead in leads:
        repos["leads"].leads[lead.id] = lead
    return leads


class TestAuth:
    def test_missing_token(self, client, repos):
        resp = client.post(URL, json={"action": "score", "lead_ids": [str(uuid.uuid4())]})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}
        assert repos["users"].calls == 0

    def test_garbage_token(self, client):
        resp = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(uuid.uuid4())]},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert resp.status_code == 401

    def test_non_access_token(self, client, user):
        token = jwt.encode(
            {"user_id": str(user.id), "type": "refresh"},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        resp = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(uuid.uuid4())]},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Could not validate credentials"}

    def test_expired_token(self, client, user):
        token = create_access_token({"user_id": str(user.id)}, expires_delta=timedelta(minutes=-1))
        resp = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(uuid.uuid4())]},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401

    def test_user_without_profile(self, client, repos):
        stranger = User(email="ghost@acme.test")
        token = create_access_token({"user_id": str(stranger.id)})
        resp = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(uuid.uuid4())]},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "User profile not found"}
        assert repos["leads"].queries == 0

    def test_user_without_organization(self, client, repos):
        orphan = User(email="orphan@acme.test")
        repos["users"].users[orphan.id] = orphan
        token = create_access_token({"user_id": str(orphan.id)})
        resp = client.post(
            URL,
            json={"action": "enrich", "lead_ids": [str(uuid.uuid4())]},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 404


class TestValidation:
    def test_invalid_action_before_data_access(self, client, repos, auth_headers):
        resp = client.post(URL, json={"action": "purge", "lead_ids": []}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": 'Invalid action. Must be "enrich" or "score"'}
        assert repos["users"].calls == 0
        assert repos["leads"].queries == 0

    def test_field_errors_are_itemised(self, client, repos, auth_headers):
        resp = client.post(
            URL,
            json={"action": "enrich", "lead_ids": ["nope"], "enrichment_level": "GOLD"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Invalid request data"
        locs = [d["loc"] for d in body["details"]]
        assert ["lead_ids", 0] in locs
        assert ["enrichment_level"] in locs
        assert repos["leads"].queries == 0

    def test_malformed_json(self, client, auth_headers):
        resp = client.post(
            URL,
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["details"][0]["type"] == "json_invalid"


class TestTenantScope:
    def test_foreign_lead_rejects_whole_batch(self, client, repos, auth_headers, org_id):
        mine = make_lead(org_id)
        theirs = make_lead(uuid.uuid4())
        _add_leads(repos, mine, theirs)

        resp = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(mine.id), str(theirs.id)]},
            headers=auth_headers,
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "Some leads not found or access denied"}
        assert repos["leads"].saved == []
        assert mine.status == "NEW"

    def test_unknown_lead_rejects_batch(self, client, repos, auth_headers, org_id):
        mine = make_lead(org_id)
        _add_leads(repos, mine)
        resp = client.post(
            URL,
            json={"action": "enrich", "lead_ids": [str(mine.id), str(uuid.uuid4())]},
            headers=auth_headers,
        )
        assert resp.status_code == 404
        assert repos["leads"].saved == []


class TestEnrich:
    def test_basic_enrichment_scenario(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_lead(org_id))

        resp = client.post(
            URL,
            json={"action": "enrich", "lead_ids": [str(lead.id)], "enrichment_level": "BASIC"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert data["count"] == 1
        assert data["enrichment_level"] == "BASIC"
        enriched = data["enriched_leads"][0]
        assert enriched["industry"] == "Software"
        assert enriched["status"] == "ENRICHED"
        assert enriched["sources"] == ["ENRICHED_BASIC"]
        assert data["results"] == [{"lead_id": str(lead.id), "ok": True, "error": None}]

    def test_level_defaults_to_basic(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_lead(org_id))
        resp = client.post(URL, json={"action": "enrich", "lead_ids": [str(lead.id)]}, headers=auth_headers)
        assert resp.json()["data"]["enrichment_level"] == "BASIC"

    def test_results_follow_request_order(self, client, repos, auth_headers, org_id):
        first, second = _add_leads(repos, make_lead(org_id), make_lead(org_id))
        resp = client.post(
            URL,
            json={"action": "enrich", "lead_ids": [str(second.id), str(first.id)]},
            headers=auth_headers,
        )
        ids = [r["lead_id"] for r in resp.json()["data"]["results"]]
        assert ids == [str(second.id), str(first.id)]

    def test_failed_write_is_reported_and_siblings_continue(self, client, repos, auth_headers, org_id):
        ok_lead, bad_lead = _add_leads(repos, make_lead(org_id), make_lead(org_id))
        repos["leads"].fail_ids.add(bad_lead.id)

        resp = client.post(
            URL,
            json={
                "action": "enrich",
                "lead_ids": [str(bad_lead.id), str(ok_lead.id)],
                "enrichment_level": "ENHANCED",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["count"] == 1
        assert data["enriched_leads"][0]["id"] == str(ok_lead.id)
        assert data["results"][0] == {
            "lead_id": str(bad_lead.id),
            "ok": False,
            "error": f"Failed to persist lead '{bad_lead.id}'",
        }
        assert data["results"][1]["ok"] is True


class TestScore:
    def test_perfect_lead_scenario(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_perfect_lead(org_id))

        resp = client.post(URL, json={"action": "score", "lead_ids": [str(lead.id)]}, headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["count"] == 1
        assert data["weights"] == DEFAULT_WEIGHTS

        scored = data["scored_leads"][0]
        assert scored["lead"]["status"] == "QUALIFIED"
        assert scored["lead"]["score"] == 100
        assert scored["scores"]["composite"] == 100.0
        assert scored["scores"]["segment"] == "HOT"
        assert scored["scores"]["fit"] == 1.0
        assert scored["scores"]["engagement"] == 1.0
        assert scored["scores"]["weights"] == DEFAULT_WEIGHTS
        assert len(repos["scores"].records) == 1

    def test_custom_weights_are_echoed_and_persisted(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_lead(org_id, created_at=utcnow() - timedelta(days=200)))

        resp = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(lead.id)], "weights": {"fit": 1.0}},
            headers=auth_headers,
        )
        data = resp.json()["data"]
        expected = {**DEFAULT_WEIGHTS, "fit": 1.0}
        assert data["weights"] == expected
        assert repos["scores"].records[0].weights == expected

    def test_empty_weights_match_omitted(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_lead(org_id, industry="Retail"))

        omitted = client.post(URL, json={"action": "score", "lead_ids": [str(lead.id)]}, headers=auth_headers)
        empty = client.post(
            URL,
            json={"action": "score", "lead_ids": [str(lead.id)], "weights": {}},
            headers=auth_headers,
        )
        first = omitted.json()["data"]["scored_leads"][0]["scores"]["composite"]
        second = empty.json()["data"]["scored_leads"][0]["scores"]["composite"]
        assert first == second

    def test_rescoring_appends_history(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_lead(org_id))
        for weights in ({}, {"fit": 0.9}):
            client.post(
                URL,
                json={"action": "score", "lead_ids": [str(lead.id)], "weights": weights},
                headers=auth_headers,
            )
        assert len(repos["scores"].records) == 2
        assert repos["scores"].records[0].weights != repos["scores"].records[1].weights


class TestReadRoutes:
    def test_enrichment_status(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_lead(org_id))
        client.post(
            URL,
            json={"action": "enrich", "lead_ids": [str(lead.id)], "providers": ["ZOOMINFO"]},
            headers=auth_headers,
        )

        resp = client.get(f"{URL}/{lead.id}", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ENRICHED"
        assert body["sources"] == ["ENRICHED_BASIC"]
        assert body["last_enrichment"]["level"] == "BASIC"
        assert body["last_enrichment"]["providers"] == ["ZOOMINFO"]

    def test_status_of_foreign_lead(self, client, repos, auth_headers):
        theirs, = _add_leads(repos, make_lead(uuid.uuid4()))
        resp = client.get(f"{URL}/{theirs.id}", headers=auth_headers)
        assert resp.status_code == 404

    def test_score_history(self, client, repos, auth_headers, org_id):
        lead, = _add_leads(repos, make_perfect_lead(org_id))
        client.post(URL, json={"action": "score", "lead_ids": [str(lead.id)]}, headers=auth_headers)

        resp = client.get(f"{URL}/{lead.id}/scores", headers=auth_headers)
        assert resp.status_code == 200
        history = resp.json()
        assert len(history) == 1
        assert history[0]["segment"] == "HOT"
        assert history[0]["lead_id"] == str(lead.id)
