"""Shared test fixtures."""
import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from leadqual.api.deps import get_lead_repository, get_score_repository, get_user_repository
from leadqual.core.clock import utcnow
from leadqual.core.exceptions import PersistenceError
from leadqual.core.security import create_access_token
from leadqual.main import app
from leadqual.models.lead import Contact, Lead
from leadqual.models.user import User


class FakeUserRepository:
    """In-memory stand-in for UserRepository."""

    def __init__(self, users=()):
        self.users = {user.id: user for user in users}
        self.calls = 0

    async def get(self, id):
        self.calls += 1
        return self.users.get(id)


class FakeScoreRepository:
    """In-memory stand-in for LeadScoreRepository."""

    def __init__(self):
        self.records = []

    async def list_for_lead(self, org_id, lead_id):
        rows = [r for r in self.records if r.org_id == org_id and r.lead_id == lead_id]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)


class FakeLeadRepository:
    """In-memory stand-in for LeadRepository. Leads in fail_ids fail to save."""

    def __init__(self, leads=(), score_repo=None, fail_ids=()):
        self.leads = {lead.id: lead for lead in leads}
        self.score_repo = score_repo or FakeScoreRepository()
        self.fail_ids = set(fail_ids)
        self.queries = 0
        self.saved = []

    async def get_many_for_org(self, org_id, lead_ids):
        self.queries += 1
        return [
            lead for lead in self.leads.values()
            if lead.id in lead_ids and lead.org_id == org_id
        ]

    async def get_for_org(self, org_id, id):
        self.queries += 1
        lead = self.leads.get(id)
        if lead and lead.org_id == org_id:
            return lead
        return None

    async def save(self, lead, *related):
        if lead.id in self.fail_ids:
            raise PersistenceError(lead.id)
        self.saved.append(lead.id)
        self.score_repo.records.extend(related)
        return lead

    async def refresh(self, lead):
        return lead


def make_lead(org_id, **overrides) -> Lead:
    data = {"org_id": org_id, "name": "Acme Corp"}
    data.update(overrides)
    return Lead(**data)


def make_perfect_lead(org_id, **overrides) -> Lead:
    """A lead that satisfies every scoring bonus."""
    data = {
        "industry": "Fintech",
        "revenue_band": "$50–250M",
        "employee_band": "201–1k",
        "entity_type": "PUBLIC",
        "icp_profile_id": uuid.uuid4(),
        "intent_keywords": ["payments", "automation", "compliance", "scale"],
        "technographics": ["CRM", "ERP", "BI", "Analytics", "CDP", "Data Warehouse"],
        "risk_flags": [],
        "compliance": {"gdpr_compliant": True},
        "created_at": utcnow(),
    }
    data.update(overrides)
    lead = make_lead(org_id, **data)
    lead.contact = Contact(
        org_id=org_id,
        full_name="Dana Reyes",
        title="VP Finance",
        dept="Finance",
        linkedin_url="https://linkedin.com/in/danareyes",
        email_status="VERIFIED",
    )
    return lead


@pytest.fixture
def org_id():
    return uuid.uuid4()


@pytest.fixture
def user(org_id):
    return User(email="owner@acme.test", current_org_id=org_id)


@pytest.fixture
def auth_headers(user):
    token = create_access_token({"user_id": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def old_timestamp():
    return utcnow() - timedelta(days=120)


@pytest.fixture
def repos(user):
    """Fake repositories wired into the app through dependency overrides."""
    score_repo = FakeScoreRepository()
    lead_repo = FakeLeadRepository(score_repo=score_repo)
    user_repo = FakeUserRepository([user])

    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_lead_repository] = lambda: lead_repo
    app.dependency_overrides[get_score_repository] = lambda: score_repo
    yield {"users": user_repo, "leads": lead_repo, "scores": score_repo}
    app.dependency_overrides.clear()


@pytest.fixture
def client(repos):
    return TestClient(app)
