import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app

# smallest thing the upload checks accept as a PNG; ~10 KB
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 10240


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        SECRET_KEY="test-secret",
        ORPHAN_SWEEP_INTERVAL_SECONDS=0,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the client runs the lifespan, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(email, password="p1", name="A", role=None):
        body = {"name": name, "email": email, "password": password}
        if role is not None:
            body["role"] = role
        return client.post("/auth/register", json=body)

    return _register


@pytest.fixture
def auth_headers(client, register):
    """Register (once per email) and log in, returning Authorization headers."""

    def _headers(email, role="user", password="p1"):
        register(email, password=password, role=role)
        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _headers


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin@shop.com", role="admin")


@pytest.fixture
def user_headers(auth_headers):
    return auth_headers("user@shop.com", role="user")


@pytest.fixture
def create_product(client, admin_headers):
    def _create(filename="mug.png", content=PNG_BYTES, content_type="image/png", **fields):
        data = {
            "name": "Mug",
            "description": "d",
            "price": "9.99",
            "category": "mugs",
            "stock": "5",
        }
        data.update({k: str(v) for k, v in fields.items()})
        files = {"image": (filename, content, content_type)} if filename else None
        return client.post("/products", data=data, files=files, headers=admin_headers)

    return _create
