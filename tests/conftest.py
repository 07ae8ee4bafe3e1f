"""
Shared fixtures: in-memory store, temp-dir storage, kombu memory broker and
an API client wired to all three.
"""
import uuid
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from studyhub.domain.entities import File, Subject, User
from studyhub.main import create_app
from studyhub.messaging.broker import BrokerClient
from studyhub.messaging.queues import QueueName
from studyhub.services.ai_service import AIService
from studyhub.services.database import MemoryAdapter
from studyhub.services.downloader import Downloader
from studyhub.services.providers import MockProvider
from studyhub.services.storage import LocalFileStorage

PDF_MIME = "application/pdf"
SOURCE_TEXT = (
    "Photosynthesis converts light energy into chemical energy. "
    "Plants store that energy as glucose. Chlorophyll absorbs mostly red and blue light."
)


def unique_queue(prefix: str = "test") -> str:
    """Memory transport queues are process-global, so every test gets its own."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@pytest.fixture
def db():
    return MemoryAdapter()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(base_dir=tmp_path / "uploads", public_base_url="http://testserver")


@pytest.fixture
def broker():
    client = BrokerClient("memory://", connect_retries=0, publish_retries=0, max_retries=2)
    client.connect()
    yield client
    client.close()


@pytest.fixture
def job_broker(broker):
    """Broker with the job queues declared and emptied."""
    for queue in (QueueName.FILE_PROCESS, QueueName.QUIZ_GENERATE):
        broker.declare_queue(queue)
        broker.purge_queue(queue)
    return broker


@pytest.fixture
def ai_service():
    return AIService(provider=MockProvider(), timeout=5)


def text_source(body: bytes = SOURCE_TEXT.encode(), status_code: int = 200, content_type: str = PDF_MIME):
    """Downloader whose every request returns ``body``; ``requests`` lists the URLs asked for."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        return httpx.Response(status_code, content=body, headers={"content-type": content_type})

    downloader = Downloader(timeout=5, max_bytes=1024 * 1024, transport=httpx.MockTransport(handler))
    return downloader, requests


def read_as_text(path, mime_type) -> str:
    """Stand-in extractor: the downloaded bytes are already plain text."""
    return Path(path).read_text(encoding="utf-8")


async def seed_file(db, user_id: str = "user-1", mime_type: str = PDF_MIME, email: str = "ada@example.com") -> File:
    """A user, a subject and one ACTIVE file in the store."""
    if await db.get_user(user_id) is None:
        await db.create_user(User(id=user_id, username=user_id, email=email, name="Ada").to_dict())
    subject = Subject(id=str(uuid.uuid4()), user_id=user_id, name="Biology")
    await db.create_subject(subject.to_dict())
    file = File(
        id=str(uuid.uuid4()),
        name="notes.pdf",
        size_bytes=len(SOURCE_TEXT),
        mime_type=mime_type,
        storage_url="http://files.test/notes.pdf",
        storage_key=f"{user_id}/notes.pdf",
        subject_id=subject.id,
        user_id=user_id,
    )
    await db.create_file(file.to_dict())
    await db.add_subject_child(subject.id, file.id)
    return file


@pytest.fixture
def make_client(db, storage):
    """Factory for API clients; pass ``broker=None`` to run without a broker."""
    clients = []

    def _make(broker):
        app = create_app(services={"db": db, "storage": storage, "broker": broker}, rate_limit_enabled=False)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, job_broker):
    return make_client(job_broker)


@pytest.fixture
def user(client):
    response = client.post("/users", json={"username": "ada", "email": "ada@example.com", "name": "Ada"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth(user):
    return {"X-User-Id": user["id"]}


@pytest.fixture
def subject(client, auth):
    response = client.post("/subjects", json={"name": "Biology"}, headers=auth)
    assert response.status_code == 201
    return response.json()
