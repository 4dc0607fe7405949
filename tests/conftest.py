"""
Shared test fixtures and configuration for docstore tests.
"""
import json
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from docstore import create_app
from docstore.config import TestConfig
from docstore.dispatcher import Dispatcher
from docstore.storage.documents import DocumentStore
from docstore.storage.formats import FormatRegistry


TEST_FORMATS = {
    "News": {"root_is_array": False, "array_key": "articles"},
    "Notes": {"root_is_array": True},
}


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Create a temporary storage root."""
    d = tmp_path / "uploaded_files"
    d.mkdir()
    return d


@pytest.fixture
def formats_dir(tmp_path: Path) -> Path:
    return tmp_path / "formats"


@pytest.fixture
def registry() -> FormatRegistry:
    return FormatRegistry.from_definitions(TEST_FORMATS)


@pytest.fixture
def document_store(storage_dir: Path) -> DocumentStore:
    return DocumentStore(storage_dir)


@pytest.fixture
def dispatcher(registry, document_store) -> Dispatcher:
    return Dispatcher(registry, document_store)


@pytest.fixture
def app(storage_dir: Path, formats_dir: Path) -> Flask:
    """Create a test Flask application writing under tmp_path."""
    app = create_app(TestConfig, STORAGE_DIR=storage_dir, FORMATS_DIR=formats_dir)
    yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a Flask test client."""
    return app.test_client()


# Helper functions for tests

def news_request(method: str, data_id, file="News/today.json", surface=None, main=None, **extra) -> dict:
    """Build a request object for the News Type."""
    req = {"Method": method, "Type": "News", "file": file, "Data_ID": data_id}
    if surface is not None:
        req["Surface_content"] = surface if isinstance(surface, str) else json.dumps(surface)
    if main is not None:
        req["Main_content"] = main if isinstance(main, str) else json.dumps(main)
    req.update(extra)
    return req


def write_json(path: Path, obj) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


@pytest.fixture(name="news_request")
def news_request_fixture():
    return news_request


@pytest.fixture(name="write_json")
def write_json_fixture():
    return write_json
