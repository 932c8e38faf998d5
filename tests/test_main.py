"""Tests for the admin API."""
import pytest
from fastapi.testclient import TestClient

from amee_layer.main import create_app
from amee_layer.errors import ExternalApiError

from .carbon_models import STORES, Journey


@pytest.fixture
def client(session_factory, amee):
    return TestClient(create_app(STORES, session_factory))


def test_list_units(client):
    r = client.get("/units")

    assert r.status_code == 200
    assert {"key": "tonnes", "name": "tonnes", "amee_api_unit": "t"} in r.json()
    assert len(r.json()) == 7


def test_refresh_carbon_caches(client, db, project, amee):
    db.add(Journey(name="Trip", amount=12, units="km", journey_type="car", project=project))
    db.commit()
    amee.total = 99.0

    r = client.post("/admin/carbon-caches/Journey")

    assert r.status_code == 200
    assert r.json() == {"model": "Journey", "updated": 1}
    db.expire_all()
    assert db.query(Journey).one().carbon_output_cache == 99.0


def test_refresh_unknown_model(client):
    r = client.post("/admin/carbon-caches/Spaceship")

    assert r.status_code == 404


def test_refresh_amee_failure(client, db, project, amee, monkeypatch):
    db.add(Journey(name="Trip", amount=12, units="km", journey_type="car", project=project))
    db.commit()

    def fail(path):
        raise ExternalApiError("AMEE GET failed", 503, path)

    monkeypatch.setattr(amee, "get_profile_item", fail)
    r = client.post("/admin/carbon-caches/Journey")

    assert r.status_code == 502
