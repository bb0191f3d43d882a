"""Abstract base class for invoice scanning providers.

Enables switching between extraction providers while keeping a consistent
interface. The ledger never calls a provider directly; providers hand back
draft records that the caller adds to the working collection.

Based on Strategy Pattern:
https://refactoring.guru/design-patterns/strategy/python
"""

import base64
from abc import ABC, abstractmethod

from pydantic import BaseModel

from services.extraction.schema import ExtractedInvoice
from services.shared.config import Settings


class ExtractionResult(BaseModel):
    """Result of extraction operation.

    Attributes:
        invoice: Extracted invoice fields or None if extraction failed
        success: Whether operation succeeded
        error: Error message if operation failed
        provider: Name of provider that performed extraction (e.g., 'openai')
    """

    invoice: ExtractedInvoice | None
    success: bool
    error: str | None = None
    provider: str


def to_data_uri(content: bytes, content_type: str) -> str:
    """Encode file bytes as a base64 data URI (``data:<mime>;base64,<data>``)."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class ExtractionProvider(ABC):
    """Abstract base class for invoice extraction providers.

    All extraction services must implement this interface to ensure
    consistent behavior and type safety.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize provider with settings.

        Args:
            settings: Application settings
        """
        self.settings = settings

    @abstractmethod
    def extract_invoice(self, file_data_uri: str) -> ExtractionResult:
        """Extract structured invoice data from an invoice image.

        Args:
            file_data_uri: Image as a base64 data URI including its MIME type

        Returns:
            ExtractionResult with the extracted fields or an error
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is available/configured.

        Returns:
            True if provider can be used, False otherwise
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/metrics.

        Returns:
            Provider identifier (e.g., 'openai')
        """
        pass
