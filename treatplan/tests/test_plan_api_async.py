import json
import pytest
import httpx
from treatplan.api.api_run import app
from treatplan.api.routes import plan as plan_routes
from treatplan.tests.reference_fixture import FakeRecordStore


@pytest.mark.asyncio
async def test_finding_entry_with_multiple_regions(monkeypatch):
    """Adding by two findings in different regions stores region "Multiple" and the joined interest."""

    store = FakeRecordStore()
    monkeypatch.setattr(plan_routes, "_store", store)
    monkeypatch.setattr(plan_routes, "_editors", {})

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.post("/api/plan/open", json={"patient_id": "rec9", "discussed": ""})
        assert resp.status_code == 200, resp.text

        await ac.post("/api/plan/rec9/entry/mode", json={"mode": "finding"})
        await ac.post("/api/plan/rec9/entry/finding", json={"label": "Forehead Wrinkles"})
        entry = (await ac.post("/api/plan/rec9/entry/finding", json={"label": "Mid Cheek Flattening"})).json()
        assert entry["region"] == "Multiple"
        assert "Filler" in entry["treatment_options"]

        await ac.post("/api/plan/rec9/entry/treatment", json={"label": "Filler"})
        resp = await ac.post("/api/plan/rec9/entry/submit")

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    stored = json.loads(store.calls[-1][2]["Treatments Discussed"])
    assert len(stored) == 1
    assert stored[0]["treatment"] == "Filler"
    assert stored[0]["region"] == "Multiple"
    assert stored[0]["interest"] == "Smoothen Fine Lines, Improve Cheek Definition"
    assert stored[0]["findings"] == ["Forehead Wrinkles", "Mid Cheek Flattening"]
    assert stored[0]["timeline"] == "Wishlist"
