"""OpenAI-based extraction provider for scanned invoices.

Sends the invoice image to a vision-capable chat model and reads the fields
back through function calling. Includes retry logic with exponential backoff
for transient API errors.
"""

import json
import logging
import os
from typing import Any

from openai import OpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from services.extraction.base import ExtractionProvider, ExtractionResult
from services.extraction.schema import ExtractedInvoice
from services.shared.config import Settings

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """You are an expert accountant specializing in precise data entry. \
Extract structured data from the provided invoice image for the business being billed:

- Invoice number (e.g., INV-2024-001). If not explicitly present, generate a plausible one.
- Business name: the company or person receiving the invoice.
- Tax ID (CIF/NIF/VAT ID): high priority. It may be labeled 'CIF', 'NIF', 'VAT ID' or 'Tax ID'.
- Address: the full mailing or physical address of the business.
- Concept: a short description of what was invoiced.
- Total amount: the final amount due.
- VAT rate (percent) and VAT amount, when printed.
- Issue date: the date the invoice was created, formatted as YYYY-MM-DD.

European decimals use a comma: "211,77" means 211.77.
Omit optional fields (tax ID, address, concept, VAT) that are not present."""


class OpenAIExtractionProvider(ExtractionProvider):
    """OpenAI-based extraction provider using a vision model.

    Uses OpenAI API with function calling for structured outputs.
    Requires OPENAI_API_KEY environment variable.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize OpenAI extraction provider.

        Args:
            settings: Application settings
        """
        super().__init__(settings)
        self._client: OpenAI | None = None

    @property
    def provider_name(self) -> str:
        """Get provider name for logging/metrics.

        Returns:
            Provider identifier 'openai'
        """
        return "openai"

    def is_available(self) -> bool:
        """Check if OpenAI API key is configured.

        Returns:
            True if OPENAI_API_KEY environment variable is set
        """
        return os.getenv("OPENAI_API_KEY") is not None

    def extract_invoice(self, file_data_uri: str) -> ExtractionResult:
        """Extract structured invoice data from an image using OpenAI.

        Args:
            file_data_uri: Invoice image as a base64 data URI

        Returns:
            ExtractionResult with extracted fields or error, provider='openai'
        """
        if not self.is_available():
            return ExtractionResult(
                invoice=None,
                success=False,
                error="OPENAI_API_KEY environment variable not set",
                provider=self.provider_name,
            )

        if not file_data_uri or not file_data_uri.startswith("data:"):
            return ExtractionResult(
                invoice=None,
                success=False,
                error="Invoice image must be provided as a data URI",
                provider=self.provider_name,
            )

        try:
            api_key = os.getenv("OPENAI_API_KEY")
            if self._client is None or self._client.api_key != api_key:
                self._client = OpenAI(api_key=api_key)

            response = self._call_openai_with_retry(file_data_uri)

            message = response.choices[0].message
            if message.function_call is None:
                return ExtractionResult(
                    invoice=None,
                    success=False,
                    error="No function call in API response",
                    provider=self.provider_name,
                )

            invoice = ExtractedInvoice(**json.loads(message.function_call.arguments))
            logger.info(f"Extracted invoice {invoice.invoice_number} via {self.provider_name}")

            return ExtractionResult(invoice=invoice, success=True, provider=self.provider_name)

        except Exception as e:
            logger.warning(f"Invoice extraction failed: {e}")
            return ExtractionResult(
                invoice=None,
                success=False,
                error=f"Extraction failed: {str(e)}",
                provider=self.provider_name,
            )

    @retry(
        retry=retry_if_exception_type((Exception,)),
        wait=wait_exponential_jitter(initial=1, max=60),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _call_openai_with_retry(self, file_data_uri: str) -> Any:
        """Call OpenAI API with retry logic for transient errors.

        Retries up to 3 times with exponential backoff and jitter.

        Args:
            file_data_uri: Invoice image as a base64 data URI

        Returns:
            OpenAI API response

        Raises:
            Exception: After all retry attempts are exhausted
        """
        if self._client is None:
            raise RuntimeError("OpenAI client not initialized")

        return self._client.chat.completions.create(  # type: ignore[call-overload]
            model=self.settings.openai_model,
            messages=[
                {
                    "role": "system",
                    "content": "You are an invoice data extraction assistant.",
                },
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_PROMPT},
                        {"type": "image_url", "image_url": {"url": file_data_uri}},
                    ],
                },
            ],
            functions=[self._get_invoice_schema()],
            function_call={"name": "extract_invoice_data"},
            temperature=0,
        )

    def _get_invoice_schema(self) -> dict[str, Any]:
        """Get OpenAI function calling schema for ExtractedInvoice.

        Returns:
            Function definition dict for OpenAI API
        """
        return {
            "name": "extract_invoice_data",
            "description": "Extract structured invoice data from an invoice image",
            "parameters": {
                "type": "object",
                "properties": {
                    "invoice_number": {"type": "string"},
                    "counterparty_name": {"type": "string"},
                    "tax_id": {"type": ["string", "null"]},
                    "address": {"type": ["string", "null"]},
                    "concept": {"type": ["string", "null"]},
                    "amount": {"type": "number", "minimum": 0},
                    "vat_rate": {"type": ["number", "null"], "minimum": 0, "maximum": 100},
                    "vat_amount": {"type": ["number", "null"]},
                    "issue_date": {"type": "string", "format": "date"},
                },
                "required": ["invoice_number", "counterparty_name", "amount", "issue_date"],
            },
        }
