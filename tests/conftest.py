import pytest

from cvopt.spec.models import RendererConfig, ServerConfig
from cvopt.storage.store import InMemoryDocumentStore, LocalDocumentStore
from cvopt.utils.logger import JSONLLogger

MARKER = "###EVALUATION###"


class FakeGenerator:
    """Stands in for the chat model; records every call."""

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def agenerate(self, job_description, document, **kwargs):
        self.calls.append({"job_description": job_description, "document": document, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def config(tmp_path):
    return ServerConfig(
        output_dir=str(tmp_path / "generated"),
        log_dir=str(tmp_path / "logs"),
        marker=MARKER,
        renderer=RendererConfig(invariant=True),
    )


@pytest.fixture
def local_store(tmp_path):
    return LocalDocumentStore(output_dir=tmp_path / "generated")


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def jsonl_logger(tmp_path):
    return JSONLLogger(log_path=str(tmp_path / "logs" / "test_log.jsonl"))
