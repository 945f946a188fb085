"""Error types raised by vocabkit."""
from typing import Iterable, Optional


class VocabkitError(Exception):
    """Base class for all vocabkit errors."""

    default_message = "Unexpected vocabkit error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# CSV import

class CSVImportError(VocabkitError):
    """The CSV content cannot be imported at all."""

    default_message = "Invalid CSV format"


class EmptyFileError(CSVImportError):
    default_message = "The CSV file is empty"


class MissingColumnsError(CSVImportError):
    """One or more required header columns are absent."""

    def __init__(self, missing: Iterable[str]):
        self.missing = tuple(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


# Repository

class RepositoryError(VocabkitError):
    default_message = "Vocabulary storage error"


class NoValidRecordsError(RepositoryError):
    default_message = "No valid words found. Each word must have a non-empty definition."


class StorageFailureError(RepositoryError):
    default_message = "Failed to save changes"


# Generation

class GenerationError(VocabkitError):
    default_message = "Failed to generate exercises"


class NoCredentialError(GenerationError):
    default_message = "No API key configured. Set OPENAI_API_KEY or an override key."


class InvalidURLError(GenerationError):
    default_message = "The generation endpoint URL is invalid"


class NetworkError(GenerationError):
    default_message = "Network error while contacting the generation service"


class HTTPError(GenerationError):
    """The generation service answered with a non-2xx status."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.detail = message
        super().__init__(f"HTTP {status}: {message}")


class InvalidResponseError(GenerationError):
    default_message = "Invalid response from the generation service"


class DecodingError(InvalidResponseError):
    """The response text could not be decoded as JSON at all."""

    default_message = "Could not decode the generation response"
