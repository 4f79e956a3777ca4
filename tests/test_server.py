import json
import os

import pytest
from fastapi.testclient import TestClient

from cvopt.app import create_app
from cvopt.utils.errors import GenerationError, StorageError

from conftest import FakeGenerator

PDF_UPLOAD = {"cv": ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")}


def make_client(config, generator, store=None, logger=None):
    app = create_app(config, generator=generator, store=store, logger=logger)
    return TestClient(app)


def test_optimize_and_download(config, local_store, jsonl_logger):
    generator = FakeGenerator("Jane Doe\nEngineer\n###EVALUATION###\nSkills: X")
    client = make_client(config, generator, local_store, jsonl_logger)

    response = client.post("/api/optimize", files=PDF_UPLOAD, data={"job": "Backend engineer"})
    assert response.status_code == 200
    body = response.json()
    assert body["frontendContent"] == "###EVALUATION###\nSkills: X"
    assert generator.calls[0]["job_description"] == "Backend engineer"
    assert generator.calls[0]["document"] == b"%PDF-1.4 resume"

    download = client.get(f"/api/download/{body['filename']}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert download.headers["content-disposition"] == f'attachment; filename="{body["filename"]}"'
    assert download.content.startswith(b"%PDF")


def test_missing_job_uses_default(config, memory_store, jsonl_logger):
    generator = FakeGenerator("CV")
    client = make_client(config, generator, memory_store, jsonl_logger)

    response = client.post("/api/optimize", files=PDF_UPLOAD)
    assert response.status_code == 200
    assert response.json()["frontendContent"] == ""
    assert generator.calls[0]["job_description"] == config.default_job_description


def test_missing_document_is_client_error(config, memory_store, jsonl_logger):
    generator = FakeGenerator("CV")
    client = make_client(config, generator, memory_store, jsonl_logger)

    response = client.post("/api/optimize", data={"job": "Backend engineer"})
    assert response.status_code == 400
    assert response.json()["detail"] == "No PDF file uploaded."
    assert generator.calls == []
    assert memory_store.documents == {}


def test_oversized_upload_rejected(config, memory_store, jsonl_logger):
    config.max_upload_bytes = 10
    generator = FakeGenerator("CV")
    client = make_client(config, generator, memory_store, jsonl_logger)

    response = client.post("/api/optimize", files=PDF_UPLOAD)
    assert response.status_code == 413
    assert generator.calls == []


@pytest.mark.parametrize("error", [
    GenerationError("upstream 503"),
    StorageError("disk full"),
    RuntimeError("boom"),
])
def test_failures_become_server_errors(error, config, memory_store, jsonl_logger):
    client = make_client(config, FakeGenerator(error=error), memory_store, jsonl_logger)

    response = client.post("/api/optimize", files=PDF_UPLOAD)
    assert response.status_code == 500
    assert response.json()["detail"] == "Server error during optimization."
    assert memory_store.documents == {}

    errors = [e for e in jsonl_logger.get_request_log() if e["event"] == "request_error"]
    assert len(errors) == 1


def test_download_unknown_handle(config, local_store, jsonl_logger):
    client = make_client(config, FakeGenerator(""), local_store, jsonl_logger)
    before = sorted(os.listdir(local_store.output_dir))

    response = client.get("/api/download/optimized_123.pdf")
    assert response.status_code == 404
    assert response.json()["detail"] == "File not found."
    assert sorted(os.listdir(local_store.output_dir)) == before


def test_download_rejects_path_tricks(config, local_store, jsonl_logger):
    client = make_client(config, FakeGenerator(""), local_store, jsonl_logger)
    assert client.get("/api/download/..%2Fsecret.pdf").status_code == 404


def test_logs_route(config, memory_store, jsonl_logger):
    client = make_client(config, FakeGenerator("CV"), memory_store, jsonl_logger)
    assert client.get("/logs").json()["logs"].startswith("Log file not found")

    client.post("/api/optimize", files=PDF_UPLOAD)
    lines = client.get("/logs").json()["logs"].strip().splitlines()
    events = [json.loads(line)["event"] for line in lines]
    assert events[0] == "request_received"
    assert "document_rendered" in events


def test_default_collaborators_created(config):
    app = create_app(config)
    assert app.state.store.exists("missing.pdf") is False
    assert TestClient(app).get("/").status_code == 200


def test_oversized_upload_rejected_before_reading(config, memory_store, jsonl_logger, monkeypatch):
    from starlette.datastructures import UploadFile as StarletteUploadFile

    async def fail_read(self, size=-1):
        raise AssertionError("upload body should not be read")

    monkeypatch.setattr(StarletteUploadFile, "read", fail_read)
    config.max_upload_bytes = 10
    generator = FakeGenerator("CV")
    client = make_client(config, generator, memory_store, jsonl_logger)

    response = client.post("/api/optimize", files=PDF_UPLOAD)
    assert response.status_code == 413
    assert generator.calls == []


def test_document_always_sent_as_pdf(config, memory_store, jsonl_logger):
    generator = FakeGenerator("CV")
    client = make_client(config, generator, memory_store, jsonl_logger)

    upload = {"cv": ("cv.pdf", b"%PDF-1.4 resume", "application/octet-stream")}
    response = client.post("/api/optimize", files=upload)
    assert response.status_code == 200
    assert generator.calls[0]["mime_type"] == "application/pdf"
