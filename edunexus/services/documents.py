"""Attachment text extraction: PyMuPDF for PDFs, the model for everything else."""

import base64
import binascii
import logging
import re

import pymupdf  # PyMuPDF
from anthropic import APIError, AsyncAnthropic

from edunexus.config import get_settings
from edunexus.errors import ExternalServiceError

logger = logging.getLogger(__name__)
settings = get_settings()

# Control characters that have no business in extracted text (NUL, etc.)
_ILLEGAL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

_EXTRACTION_PROMPT = (
    "Extract all text and describe any visual elements in this document/image. "
    "Return purely the extracted information."
)

UNREADABLE_FILE = "Unable to read file. Please ensure it is a valid document or image."


class DocumentExtractor:
    """Turns a base64 attachment into plain text for tutor context."""

    def __init__(self, api_key: str | None = None):
        key = api_key if api_key is not None else settings.anthropic_api_key
        self.client = AsyncAnthropic(api_key=key) if key else None

    @staticmethod
    def extract_pdf_text(pdf_bytes: bytes) -> str:
        """
        Extract text from PDF bytes.

        Returns an empty string for PDFs without a text layer (scans).
        Raises on bytes that are not a PDF.
        """
        doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")
        try:
            pages = [page.get_text() for page in doc]
        finally:
            doc.close()
        return _ILLEGAL_CHARS.sub("", "\n\n".join(pages)).strip()

    async def extract_document(self, data: str, mime_type: str) -> str:
        """
        Extract the readable content of a base64 payload.

        Raises:
            ExternalServiceError: the payload cannot be decoded or read, or the
                model call failed. Never retried.
        """
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ExternalServiceError(UNREADABLE_FILE) from e

        if mime_type.startswith("text/"):
            return raw.decode("utf-8", errors="replace")

        if mime_type == "application/pdf":
            try:
                text = self.extract_pdf_text(raw)
            except Exception as e:
                logger.warning("PDF extraction failed: %s", e)
                raise ExternalServiceError(UNREADABLE_FILE) from e
            if text:
                return text
            # No text layer; let the model read the pages
            return await self._extract_with_model(
                {"type": "document", "source": {"type": "base64", "media_type": mime_type, "data": data}}
            )

        if mime_type in _IMAGE_TYPES:
            return await self._extract_with_model(
                {"type": "image", "source": {"type": "base64", "media_type": mime_type, "data": data}}
            )

        raise ExternalServiceError(UNREADABLE_FILE)

    async def _extract_with_model(self, content_block: dict) -> str:
        if self.client is None:
            raise ExternalServiceError("Missing API Key")
        try:
            response = await self.client.messages.create(
                model=settings.llm_document_model,
                max_tokens=settings.llm_max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [content_block, {"type": "text", "text": _EXTRACTION_PROMPT}],
                    }
                ],
            )
        except APIError as e:
            logger.exception("File analysis failed")
            raise ExternalServiceError(UNREADABLE_FILE) from e

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )


# Singleton instance
document_extractor = DocumentExtractor()
