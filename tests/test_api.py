"""Tests API / API tests."""

import sqlite3
from contextlib import closing

import pytest

from conftest import legacy_answers
from fleetcheck.api.deps import get_view_cache
from fleetcheck.main import app
from fleetcheck.services.view_cache import ViewCache

EXIT_DATE = "2024-05-10T07:30:00-04:00"
RETURN_DATE = "2024-05-10T18:00:00-04:00"


async def _create_vehicle(client, plate="ABC1D23", **extra):
    resp = await client.post("/api/vehicles/", json={"plate": plate, "brand": "Fiat", "model": "Strada", **extra})
    assert resp.status_code == 201
    return resp.json()


async def _exit(client, vehicle_id, km=1000, **extra):
    body = {
        "vehicleId": vehicle_id,
        "userId": 7,
        "kmInitial": km,
        "fuelLevelStart": "full",
        "startDate": EXIT_DATE,
        "inspectionStart": legacy_answers(),
        **extra,
    }
    return await client.post("/api/checklists/exit", json=body)


async def _return(client, checklist_id, km=1100, **extra):
    body = {
        "kmFinal": km,
        "fuelLevelEnd": "half",
        "endDate": RETURN_DATE,
        "inspectionEnd": legacy_answers(),
        **extra,
    }
    return await client.post(f"/api/checklists/return/{checklist_id}", json=body)


@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in resp.headers


# --- Cycle de vie / Lifecycle ---

@pytest.mark.asyncio
async def test_exit_and_return_flow(client):
    vehicle = await _create_vehicle(client)

    resp = await _exit(client, vehicle["id"])
    assert resp.status_code == 201
    assert resp.headers["Cache-Control"].startswith("no-cache")
    opened = resp.json()
    assert opened["status"] == "open"
    assert opened["kmInitial"] == 1000
    assert opened["startDate"] == EXIT_DATE

    resp = await client.get("/api/checklists/open")
    assert [c["id"] for c in resp.json()] == [opened["id"]]

    resp = await _return(client, opened["id"], inspectionEnd=legacy_answers(notes="Pneu traseiro gasto"))
    assert resp.status_code == 200
    closed = resp.json()
    assert closed["status"] == "closed"
    assert closed["kmFinal"] == 1100

    assert (await client.get("/api/checklists/open")).json() == []
    assert [c["id"] for c in (await client.get("/api/checklists/closed")).json()] == [opened["id"]]

    mileage = (await client.get(f"/api/vehicles/{vehicle['id']}/mileage")).json()
    assert mileage["vehicleId"] == vehicle["id"]
    assert mileage["mileage"] == 1100


@pytest.mark.asyncio
async def test_second_exit_is_conflict(client):
    vehicle = await _create_vehicle(client)
    assert (await _exit(client, vehicle["id"])).status_code == 201
    resp = await _exit(client, vehicle["id"])
    assert resp.status_code == 409
    assert "open checklist" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_exit_validation_errors(client):
    vehicle = await _create_vehicle(client)
    assert (await _exit(client, vehicle["id"], km=-5)).status_code == 422
    assert (await _exit(client, vehicle["id"], fuelLevelStart="brimming")).status_code == 422
    assert (await _exit(client, 999)).status_code == 404
    # Corps incomplet : validation pydantic / Incomplete body: pydantic validation
    resp = await client.post("/api/checklists/exit", json={"vehicleId": vehicle["id"]})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_return_errors(client):
    vehicle = await _create_vehicle(client)
    checklist = (await _exit(client, vehicle["id"], km=1000)).json()

    resp = await _return(client, checklist["id"], km=900)
    assert resp.status_code == 422
    assert "kmFinal" in resp.json()["detail"]

    answers = legacy_answers()
    del answers["pneus"]
    resp = await _return(client, checklist["id"], inspectionEnd=answers)
    assert resp.status_code == 422
    assert "pneus" in resp.json()["detail"]

    still_open = (await client.get(f"/api/checklists/{checklist['id']}")).json()
    assert still_open["status"] == "open"
    assert still_open["kmFinal"] is None

    assert (await _return(client, checklist["id"])).status_code == 200
    assert (await _return(client, checklist["id"])).status_code == 409
    assert (await _return(client, 4242)).status_code == 404


@pytest.mark.asyncio
async def test_checklist_items_legacy(client):
    vehicle = await _create_vehicle(client)
    checklist = (await _exit(client, vehicle["id"])).json()

    data = (await client.get(f"/api/checklists/{checklist['id']}/items")).json()
    assert data["source"] == "legacy"
    assert data["templateId"] is None
    assert len(data["items"]) == 16
    assert [g["key"] for g in data["groups"]][0] == "inspecao_veiculo"
    assert data["groups"][0]["label"] == "Inspeção do Veículo"


@pytest.mark.asyncio
async def test_checklist_not_found(client):
    assert (await client.get("/api/checklists/999")).status_code == 404
    assert (await client.get("/api/checklists/999/items")).status_code == 404


@pytest.mark.asyncio
async def test_delete_and_fallback(client):
    vehicle = await _create_vehicle(client)
    first = (await _exit(client, vehicle["id"])).json()

    resp = await client.delete(f"/api/checklists/{first['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Checklist deleted"}
    assert (await client.get("/api/checklists/open")).json() == []

    second = (await _exit(client, vehicle["id"])).json()
    resp = await client.post(f"/api/checklists/{second['id']}/delete")
    assert resp.status_code == 200
    assert (await client.get(f"/api/checklists/{second['id']}")).status_code == 404

    audit = (await client.get("/api/audit/", params={"entity_type": "vehicle_checklist", "action": "DELETE"})).json()
    assert audit["total"] == 2
    assert audit["items"][0]["entityType"] == "vehicle_checklist"
    assert audit["items"][0]["changes"] == {"vehicle_id": vehicle["id"], "status": "open"}


# --- Templates ---

@pytest.mark.asyncio
async def test_template_driven_checklist(client):
    template = (await client.post("/api/checklist-templates/", json={"name": "Caminhão"})).json()
    tid = template["id"]
    freios = (await client.post(f"/api/checklist-templates/{tid}/items", json={"label": "Freios", "group": "Motor"})).json()
    buzina = (await client.post(f"/api/checklist-templates/{tid}/items", json={"label": "Buzina", "group": "Cabine"})).json()
    assert (freios["order"], buzina["order"]) == (1, 2)

    vtype = (await client.post("/api/vehicle-types/", json={"name": "Truck", "checklistTemplateId": tid})).json()
    vehicle = await _create_vehicle(client, vehicleTypeId=vtype["id"])

    checklist = (await _exit(client, vehicle["id"], inspectionStart={})).json()
    assert checklist["checklistTemplateId"] == tid

    items = (await client.get(f"/api/checklists/{checklist['id']}/items")).json()
    assert items["source"] == "template"
    assert [i["label"] for i in items["items"]] == ["Freios", "Buzina"]
    assert [g["key"] for g in items["groups"]] == ["Motor", "Cabine"]

    resp = await _return(client, checklist["id"], inspectionEnd={str(freios["id"]): True})
    assert resp.status_code == 422
    resp = await _return(client, checklist["id"], inspectionEnd={str(freios["id"]): True, str(buzina["id"]): "n"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_template_items_frozen_once_checklist_exists(client):
    tid = (await client.post("/api/checklist-templates/", json={"name": "Caminhão"})).json()["id"]
    freios = (await client.post(f"/api/checklist-templates/{tid}/items", json={"label": "Freios", "group": "Motor"})).json()
    vtype = (await client.post("/api/vehicle-types/", json={"name": "Truck", "checklistTemplateId": tid})).json()
    vehicle = await _create_vehicle(client, vehicleTypeId=vtype["id"])
    checklist = (await _exit(client, vehicle["id"], inspectionStart={})).json()

    resp = await client.post(f"/api/checklist-templates/{tid}/items", json={"label": "Buzina", "group": "Cabine"})
    assert resp.status_code == 409
    resp = await client.patch(f"/api/checklist-templates/{tid}/items/{freios['id']}", json={"active": False})
    assert resp.status_code == 409
    resp = await client.delete(f"/api/checklist-templates/{tid}/items/{freios['id']}")
    assert resp.status_code == 409
    resp = await client.post(f"/api/checklist-templates/{tid}/reorder-items", json={"itemIds": [freios["id"]]})
    assert resp.status_code == 409

    items = (await client.get(f"/api/checklists/{checklist['id']}/items")).json()
    assert [i["label"] for i in items["items"]] == ["Freios"]
    resp = await _return(client, checklist["id"], inspectionEnd={str(freios["id"]): True})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_template_reorder(client):
    tid = (await client.post("/api/checklist-templates/", json={"name": "Moto"})).json()["id"]
    ids = []
    for label in ("Capacete", "Corrente", "Retrovisor"):
        resp = await client.post(f"/api/checklist-templates/{tid}/items", json={"label": label, "group": "Geral"})
        ids.append(resp.json()["id"])

    resp = await client.post(f"/api/checklist-templates/{tid}/reorder-items", json={"itemIds": ids[::-1]})
    assert resp.status_code == 200
    assert [i["label"] for i in resp.json()] == ["Retrovisor", "Corrente", "Capacete"]

    other = (await client.post("/api/checklist-templates/", json={"name": "Outro"})).json()["id"]
    resp = await client.post(f"/api/checklist-templates/{other}/reorder-items", json={"itemIds": ids})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_template_crud_and_delete_guard(client):
    tid = (await client.post("/api/checklist-templates/", json={"name": "Van"})).json()["id"]
    resp = await client.patch(f"/api/checklist-templates/{tid}", json={"description": "Vans de entrega"})
    assert resp.json()["description"] == "Vans de entrega"

    item = (await client.post(f"/api/checklist-templates/{tid}/items", json={"label": "Porta", "group": "Carroceria"})).json()
    resp = await client.patch(f"/api/checklist-templates/{tid}/items/{item['id']}", json={"label": "Porta lateral"})
    assert resp.json()["label"] == "Porta lateral"
    assert (await client.delete(f"/api/checklist-templates/{tid}/items/{item['id']}")).status_code == 204
    assert (await client.get(f"/api/checklist-templates/{tid}/items")).json() == []

    await client.post("/api/vehicle-types/", json={"name": "Van", "checklistTemplateId": tid})
    assert (await client.delete(f"/api/checklist-templates/{tid}")).status_code == 409

    spare = (await client.post("/api/checklist-templates/", json={"name": "Sobra"})).json()["id"]
    assert (await client.delete(f"/api/checklist-templates/{spare}")).status_code == 204
    assert (await client.get(f"/api/checklist-templates/{spare}")).status_code == 404


# --- Parametres / Settings ---

@pytest.mark.asyncio
async def test_obs_config_update_takes_effect(client):
    vehicle = await _create_vehicle(client)
    checklist = (await _exit(client, vehicle["id"])).json()
    assert len((await client.get(f"/api/checklists/{checklist['id']}/items")).json()["items"]) == 16

    config = [{"key": "lataria", "label": "Lataria", "group": "inspecao_veiculo"}]
    resp = await client.put("/api/settings/obs_config", json=config)
    assert resp.status_code == 200
    assert (await client.get("/api/settings/obs_config")).json() == config

    items = (await client.get(f"/api/checklists/{checklist['id']}/items")).json()["items"]
    assert [i["key"] for i in items] == ["lataria"]

    resp = await _return(client, checklist["id"], inspectionEnd={"lataria": True})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_unknown_setting(client):
    assert (await client.get("/api/settings/nope")).status_code == 404


# --- Vehicules / Vehicles ---

@pytest.mark.asyncio
async def test_vehicle_guards(client):
    vehicle = await _create_vehicle(client)
    assert (await client.post("/api/vehicles/", json={"plate": "ABC1D23", "brand": "VW", "model": "Gol"})).status_code == 409

    await _exit(client, vehicle["id"])
    assert (await client.delete(f"/api/vehicles/{vehicle['id']}")).status_code == 409

    vtype = (await client.post("/api/vehicle-types/", json={"name": "Pickup"})).json()
    await client.put(f"/api/vehicles/{vehicle['id']}", json={"vehicleTypeId": vtype["id"]})
    assert (await client.delete(f"/api/vehicle-types/{vtype['id']}")).status_code == 409


@pytest.mark.asyncio
async def test_vehicle_update_refreshes_mileage_view(client):
    vehicle = await _create_vehicle(client, mileage=10)
    assert (await client.get(f"/api/vehicles/{vehicle['id']}/mileage")).json()["mileage"] == 10
    await client.put(f"/api/vehicles/{vehicle['id']}", json={"mileage": 25})
    assert (await client.get(f"/api/vehicles/{vehicle['id']}/mileage")).json()["mileage"] == 25


class _CommittedMileageCache(ViewCache):
    """Lit le kilometrage engage a chaque invalidation / Reads committed mileage on each invalidation."""

    def __init__(self, path, vehicle_id):
        super().__init__(ttl_seconds=60)
        self.path = path
        self.vehicle_id = vehicle_id
        self.seen = []

    def invalidate(self, *keys):
        with closing(sqlite3.connect(self.path)) as conn:
            row = conn.execute("SELECT mileage FROM vehicles WHERE id = ?", (self.vehicle_id,)).fetchone()
        self.seen.append(row[0] if row else None)
        super().invalidate(*keys)


@pytest.mark.asyncio
async def test_vehicle_writes_are_committed_before_views_drop(client, engine):
    vehicle = await _create_vehicle(client, mileage=10)
    cache = _CommittedMileageCache(engine.url.database, vehicle["id"])
    app.dependency_overrides[get_view_cache] = lambda: cache

    resp = await client.put(f"/api/vehicles/{vehicle['id']}", json={"mileage": 25})
    assert resp.status_code == 200
    assert cache.seen == [25]

    resp = await client.delete(f"/api/vehicles/{vehicle['id']}")
    assert resp.status_code == 204
    assert cache.seen == [25, None]


# --- Statistiques / Statistics ---

async def _closed_trip(client, vehicle_id, km_start, km_end, notes=""):
    checklist = (await _exit(client, vehicle_id, km=km_start)).json()
    await _return(client, checklist["id"], km=km_end, inspectionEnd=legacy_answers(notes=notes))
    return checklist


@pytest.mark.asyncio
async def test_stats_endpoints(client):
    truck = await _create_vehicle(client, plate="ZZZ9Z99")
    car = await _create_vehicle(client, plate="AAA0A00")
    await _closed_trip(client, truck["id"], 1000, 1100)
    await _closed_trip(client, truck["id"], 1100, 1150, notes="Retrovisor quebrado")
    await _exit(client, car["id"], km=50)

    analytics = (await client.get("/api/checklists/stats/analytics")).json()
    assert analytics["openCount"] == 1
    assert analytics["closedCount"] == 2
    assert analytics["completenessRate"] == pytest.approx(2 / 3)
    assert analytics["avgKmPerTrip"] == 75
    assert analytics["activeVehiclesWithOpen"] == 1
    assert analytics["dailyTrend"] == [{"date": "2024-05-10", "count": 3}]

    stats = (await client.get("/api/checklists/stats/vehicles")).json()
    assert [s["plate"] for s in stats] == ["AAA0A00", "ZZZ9Z99"]
    assert stats[1]["totalKm"] == 150
    assert stats[1]["avgKmPerTrip"] == 75
    assert sorted(c["nonCompliant"] for c in stats[1]["checklists"]) == [False, True]

    outside = (await client.get("/api/checklists/stats/analytics", params={"date_from": "2024-06-01"})).json()
    assert outside["openCount"] == 0
    assert outside["completenessRate"] == 0


@pytest.mark.asyncio
async def test_stats_export(client):
    vehicle = await _create_vehicle(client)
    await _closed_trip(client, vehicle["id"], 10, 30)

    resp = await client.get("/api/checklists/stats/vehicles/export", params={"format": "csv"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "checklist_report.csv" in resp.headers["content-disposition"]
    assert "ABC1D23" in resp.content.decode("utf-8-sig")

    resp = await client.get("/api/checklists/stats/vehicles/export")
    assert resp.status_code == 200
    assert resp.content[:2] == b"PK"

    assert (await client.get("/api/checklists/stats/vehicles/export", params={"format": "pdf"})).status_code == 422
