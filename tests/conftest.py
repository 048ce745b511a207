import os
from urllib.parse import urlsplit

import pytest
import requests

os.environ.setdefault("YKS_ENV", "testing")

from yks_dashboard.api import create_app  # noqa: E402
from yks_dashboard.remote import RemoteStore  # noqa: E402


class FlaskSession:
    """requests-style session that sends every request to a Flask test client."""

    def __init__(self, client):
        self.client = client
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        parts = urlsplit(url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        self.calls.append((method, path))
        result = self.client.open(path, method=method, json=json)
        response = requests.Response()
        response.status_code = result.status_code
        response._content = result.get_data()
        response.encoding = "utf-8"
        response.url = url
        return response


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_dashboard.db")
    return db_path


@pytest.fixture
def app(tmp_db):
    return create_app({
        "DATABASE": tmp_db,
        "TESTING": True,
        "SEED_SAMPLE_DATA": False,
        "LOG_LEVEL": "WARNING",
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(client):
    return FlaskSession(client)


@pytest.fixture
def store(session):
    return RemoteStore("http://testserver", session=session)
