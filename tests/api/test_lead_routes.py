"""Lead routes: writes dispatch LEAD_* events through the event dispatcher."""

from datetime import datetime, timezone

import pytest

from app.api.v1.dependencies import get_agency, get_event_dispatcher, get_lead_repo_for_write
from app.application.use_cases.automation import EntityChange
from app.domain.enums import EntityType
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.lead import Lead
from app.main import app

STAMP = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeLeadRepo:
    def __init__(self) -> None:
        self.rows: dict[str, Lead] = {}
        self.refreshed: list[str] = []

    async def create(self, lead: Lead) -> Lead:
        lead.id = f"lead_{len(self.rows) + 1}"
        lead.created_at = lead.updated_at = STAMP
        self.rows[lead.id] = lead
        return lead

    async def get_by_id_and_agency(self, lead_id: str, agency_id: str) -> Lead | None:
        lead = self.rows.get(lead_id)
        return lead if lead is not None and lead.agency_id == agency_id else None

    async def update(self, lead: Lead) -> Lead:
        return lead

    async def refresh(self, lead: Lead) -> Lead:
        self.refreshed.append(lead.id)
        return lead


class RecordingDispatcher:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def dispatch_change(self, agency_id, entity_ref, change, **kwargs):
        self.calls.append((agency_id, entity_ref, change, kwargs))
        return []


@pytest.fixture
def repo(agency) -> FakeLeadRepo:
    repo = FakeLeadRepo()
    app.dependency_overrides[get_agency] = lambda: agency
    app.dependency_overrides[get_lead_repo_for_write] = lambda: repo
    return repo


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    dispatcher = RecordingDispatcher()
    app.dependency_overrides[get_event_dispatcher] = lambda: dispatcher
    return dispatcher


async def test_create_lead_dispatches_created(client, repo, dispatcher) -> None:
    response = await client.post(
        "/api/acme/leads",
        json={"first_name": "Ada", "last_name": "Lovelace", "source": "web", "metadata": {"utm": "fair"}},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == "lead_1"
    assert body["agency_id"] == "agency_1"
    assert body["status"] == "NEW"
    assert body["metadata"] == {"utm": "fair"}
    assert dispatcher.calls == [
        ("agency_1", EntityRef(EntityType.LEAD, "lead_1"), EntityChange.CREATED, {})
    ]
    assert repo.refreshed == ["lead_1"]


async def test_update_lead_passes_previous_status(client, repo, dispatcher) -> None:
    await repo.create(Lead(agency_id="agency_1", first_name="Ada", last_name="L", status="NEW"))

    response = await client.patch("/api/acme/leads/lead_1", json={"status": "CONTACTED"})

    assert response.status_code == 200
    assert response.json()["status"] == "CONTACTED"
    _, entity_ref, change, kwargs = dispatcher.calls[0]
    assert change is EntityChange.UPDATED
    assert kwargs["previous_status"] == "NEW"
    assert kwargs["status"] == "CONTACTED"
    assert kwargs["data"] == {"previous_status": "NEW"}
    assert repo.refreshed == ["lead_1"]


async def test_update_lead_rejects_null_required_field(client, repo, dispatcher) -> None:
    await repo.create(Lead(agency_id="agency_1", first_name="Ada", last_name="L", status="NEW"))

    response = await client.patch("/api/acme/leads/lead_1", json={"first_name": None})

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    assert dispatcher.calls == []


async def test_lead_of_other_agency_is_404(client, repo, dispatcher) -> None:
    await repo.create(Lead(agency_id="agency_2", first_name="Eve", last_name="X", status="NEW"))

    response = await client.patch("/api/acme/leads/lead_1", json={"notes": "hi"})

    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"
    assert dispatcher.calls == []
