import asyncio
import time
from pathlib import Path

import httpx
import pytest

from studyhub.core.exceptions import (
    AIProviderError,
    BrokerUnavailableError,
    DownloadTooLargeError,
    ExtractionError,
    PermanentJobError,
    RetryableJobError,
    UnsupportedFileTypeError,
)
from studyhub.domain.entities import FileStatus
from studyhub.messaging.envelope import create_envelope
from studyhub.messaging.queues import MessageType
from studyhub.services.ai_service import AIService
from studyhub.services.downloader import Downloader
from studyhub.services.file_processing_consumer import FileProcessingConsumer
from studyhub.services.providers import AIProvider
from tests.conftest import read_as_text, seed_file, text_source, unique_queue


class FailingProvider(AIProvider):
    name = "failing"

    def __init__(self):
        self.calls = 0

    def generate_summary(self, text):
        self.calls += 1
        raise AIProviderError("model unavailable")

    def generate_quiz(self, text, num_questions, difficulty):
        raise AIProviderError("model unavailable")


class RecordingExtractor:
    """Reads the temp file as text and remembers where it was."""

    def __init__(self, error=None):
        self.paths = []
        self.error = error

    def __call__(self, path, mime_type):
        self.paths.append(Path(path))
        assert Path(path).exists()
        if self.error:
            raise self.error
        return read_as_text(path, mime_type)


def job_for(file, **overrides):
    payload = {"fileId": file.id, "sourceUrl": file.storage_url, "userId": file.user_id, "mimeType": file.mime_type}
    payload.update(overrides)
    return create_envelope(MessageType.FILE_PROCESS, {k: v for k, v in payload.items() if v is not None})


@pytest.mark.asyncio
async def test_summary_is_stored_once(db, ai_service):
    file = await seed_file(db)
    downloader, requests = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    await consumer.handle(job_for(file))

    record = await db.get_file(file.id)
    assert requests == [file.storage_url]
    assert record["summary_count"] == 1
    assert "Photosynthesis converts light energy" in record["summary_content"]
    assert 0 < record["ai_match_score"] <= 1


@pytest.mark.asyncio
async def test_missing_source_url_is_a_no_op(db, ai_service):
    file = await seed_file(db)
    downloader, requests = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    await consumer.handle(job_for(file, sourceUrl=None))

    assert requests == []
    assert (await db.get_file(file.id))["summary_count"] == 0


@pytest.mark.asyncio
async def test_deleted_file_is_skipped(db, ai_service):
    file = await seed_file(db)
    await db.update_file(file.id, updates={"status": FileStatus.DELETED})
    downloader, requests = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    await consumer.handle(job_for(file))

    assert requests == []


@pytest.mark.asyncio
async def test_unsupported_type_is_never_downloaded_or_summarized(db):
    file = await seed_file(db, mime_type="text/markdown")
    provider = FailingProvider()
    downloader, requests = text_source()
    consumer = FileProcessingConsumer(db, AIService(provider=provider), downloader)

    with pytest.raises(UnsupportedFileTypeError):
        await consumer.handle(job_for(file))

    assert requests == []
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_temp_file_removed_after_extraction_failure(db, ai_service):
    file = await seed_file(db)
    downloader, _ = text_source()
    extractor = RecordingExtractor(error=ExtractionError("corrupt PDF"))
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=extractor)

    with pytest.raises(ExtractionError):
        await consumer.handle(job_for(file))

    assert len(extractor.paths) == 1
    assert not extractor.paths[0].exists()


@pytest.mark.asyncio
async def test_summary_failure_leaves_record_untouched(db):
    file = await seed_file(db)
    downloader, _ = text_source()
    extractor = RecordingExtractor()
    consumer = FileProcessingConsumer(db, AIService(provider=FailingProvider()), downloader, extractor=extractor)

    with pytest.raises(AIProviderError):
        await consumer.handle(job_for(file))

    record = await db.get_file(file.id)
    assert record["summary_content"] is None
    assert record["ai_match_score"] is None
    assert record["summary_count"] == 0
    assert not extractor.paths[0].exists()


@pytest.mark.asyncio
async def test_replayed_job_increments_count_with_same_summary(db, ai_service):
    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)
    envelope = job_for(file)

    await consumer.handle(envelope)
    first = await db.get_file(file.id)
    await consumer.handle(envelope)
    second = await db.get_file(file.id)

    assert second["summary_count"] == 2
    assert second["summary_content"] == first["summary_content"]


PHOTOSYNTHESIS = "Chlorophyll absorbs light. Plants turn carbon dioxide into glucose."
MITOSIS = "Mitosis splits one nucleus into two. Chromosomes line up at the equator."


@pytest.mark.asyncio
@pytest.mark.parametrize("order", [(0, 1), (1, 0)])
async def test_files_are_processed_independently(db, ai_service, order):
    sources = {
        "http://files.test/photosynthesis.pdf": PHOTOSYNTHESIS,
        "http://files.test/mitosis.pdf": MITOSIS,
    }
    handler = lambda request: httpx.Response(200, content=sources[str(request.url)].encode())
    downloader = Downloader(timeout=5, max_bytes=1024, transport=httpx.MockTransport(handler))
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    files = [await seed_file(db), await seed_file(db)]
    jobs = [job_for(file, sourceUrl=url) for file, url in zip(files, sources)]
    for index in order:
        await consumer.handle(jobs[index])

    photosynthesis = await db.get_file(files[0].id)
    mitosis = await db.get_file(files[1].id)
    assert photosynthesis["summary_count"] == 1
    assert mitosis["summary_count"] == 1
    assert "Chlorophyll absorbs light." in photosynthesis["summary_content"]
    assert "Mitosis splits one nucleus into two." in mitosis["summary_content"]
    assert "Mitosis" not in photosynthesis["summary_content"]
    assert photosynthesis["summary_content"] != mitosis["summary_content"]


@pytest.mark.asyncio
async def test_server_errors_are_retryable(db, ai_service):
    file = await seed_file(db)
    downloader, _ = text_source(status_code=503)
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    with pytest.raises(RetryableJobError):
        await consumer.handle(job_for(file))


@pytest.mark.asyncio
async def test_missing_source_is_permanent(db, ai_service):
    file = await seed_file(db)
    downloader, _ = text_source(status_code=404)
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    with pytest.raises(PermanentJobError):
        await consumer.handle(job_for(file))


@pytest.mark.asyncio
async def test_oversized_download_is_rejected(db, ai_service):
    file = await seed_file(db)
    handler = lambda request: httpx.Response(200, content=b"x" * 2048)
    downloader = Downloader(timeout=5, max_bytes=1024, transport=httpx.MockTransport(handler))
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    with pytest.raises(DownloadTooLargeError):
        await consumer.handle(job_for(file))


@pytest.mark.asyncio
async def test_transport_errors_are_retryable(db, ai_service):
    file = await seed_file(db)

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    downloader = Downloader(timeout=5, transport=httpx.MockTransport(handler))
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)

    with pytest.raises(RetryableJobError):
        await consumer.handle(job_for(file))


@pytest.mark.asyncio
async def test_slow_summary_times_out_as_retryable(db):
    class SlowProvider(FailingProvider):
        def generate_summary(self, text):
            time.sleep(0.5)
            return "<p>late</p>"

    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = FileProcessingConsumer(
        db, AIService(provider=SlowProvider(), timeout=0.05), downloader, extractor=read_as_text
    )

    with pytest.raises(RetryableJobError):
        await consumer.handle(job_for(file))
    assert (await db.get_file(file.id))["summary_count"] == 0


@pytest.mark.asyncio
async def test_owner_is_notified_on_the_same_correlation(db, ai_service):
    published = []

    class RecordingBroker:
        def publish_event(self, exchange, routing_key, envelope):
            published.append((exchange, routing_key, envelope))

    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, broker=RecordingBroker(), extractor=read_as_text)
    job = job_for(file)

    await consumer.handle(job)

    assert len(published) == 1
    exchange, routing_key, event = published[0]
    assert (exchange, routing_key) == ("app_events", "notification.summary.ready")
    assert event.payload.template == "summary-ready"
    assert event.payload.recipients() == ["ada@example.com"]
    assert event.correlation_id == job.correlation_id
    assert event.causation_id == job.message_ref()


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_job(db, ai_service):
    class DownBroker:
        def publish_event(self, exchange, routing_key, envelope):
            raise BrokerUnavailableError("broker down")

    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, broker=DownBroker(), extractor=read_as_text)

    await consumer.handle(job_for(file))

    assert (await db.get_file(file.id))["summary_count"] == 1


def test_consumer_behind_broker_dead_letters_unsupported_files(broker, db, ai_service):
    """Over the memory transport a permanent failure is rejected once, not redelivered."""
    file = asyncio.run(seed_file(db, mime_type="text/markdown"))
    downloader, requests = text_source()
    consumer = FileProcessingConsumer(db, ai_service, downloader, extractor=read_as_text)
    queue = unique_queue("files")
    broker.register_consumer(queue, consumer.handle, legacy_type=MessageType.FILE_PROCESS)

    broker.publish(queue, job_for(file))

    assert broker.drain(timeout=0.1) == 1
    assert requests == []
