"""
Infrastructure and job-processing exceptions.

Business (HTTP-facing) exceptions live in api/exceptions.py. The classes here
describe what went wrong while talking to the broker or while running a job,
and the broker client decides ack/retry/dead-letter from the class alone.
"""


class BrokerConnectionError(Exception):
    """Raised when the broker cannot be reached after all connect retries."""
    pass


class BrokerUnavailableError(Exception):
    """Raised when a publish cannot be delivered to the broker."""
    pass


class EnvelopeError(Exception):
    """Raised when a message body cannot be decoded into a known envelope."""
    pass


class JobError(Exception):
    """Base class for failures raised while processing a queued job."""
    pass


class RetryableJobError(JobError):
    """Transient failure (timeouts, network errors). Redelivered a bounded number of times."""
    pass


class PermanentJobError(JobError):
    """Failure that will not go away on retry. Dead-lettered immediately."""
    pass


class UnsupportedFileTypeError(PermanentJobError):
    """Raised when no text extractor handles the MIME type."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type or 'unknown'}")


class ExtractionError(PermanentJobError):
    """Raised when a supported document cannot be parsed."""
    pass


class EmptyDocumentError(ExtractionError):
    """Raised when a document contains no extractable text."""
    pass


class DownloadTooLargeError(PermanentJobError):
    """Raised when a source document exceeds the download size cap."""
    pass


class AIProviderError(Exception):
    """Raised when the generative model call fails or returns nothing usable."""
    pass
