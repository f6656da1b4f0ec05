import json

import pytest
from httpx import ASGITransport, AsyncClient

from careline.main import app
from careline.models.people import Seed
from careline.services.directory import Directory
from careline.services.registry import Registry

SEED = {
    "patients": [
        {"id": 1, "login": "p1", "password": "secret1", "name": "Anna Petrova"},
        {"id": 2, "login": "p2", "password": "secret2", "name": "Boris Sokolov"},
    ],
    "doctors": [
        {
            "id": 10,
            "login": "d1",
            "password": "docpass",
            "first_name": "Maria",
            "last_name": "Orlova",
            "middle_name": "Ivanovna",
            "speciality": "therapist",
        },
        {
            "id": 11,
            "login": "d2",
            "password": "docpass2",
            "first_name": "Pavel",
            "last_name": "Kuznetsov",
            "speciality": "cardiologist",
        },
    ],
}


@pytest.fixture
def directory():
    return Directory.from_seed(Seed.model_validate(SEED))


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(SEED), encoding="utf-8")
    return path


@pytest.fixture
def selections_path(tmp_path):
    return tmp_path / "selections.json"


@pytest.fixture
async def registry(seed_file, selections_path):
    reg = Registry.from_files(seed_file, selections_path, heartbeat=0.05)
    reg.start()
    yield reg
    await reg.close()


@pytest.fixture
async def async_client(registry):
    app.state.registry = registry
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
