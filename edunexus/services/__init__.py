"""Services for external integrations."""

from edunexus.services.documents import document_extractor
from edunexus.services.tutor import tutor_service

__all__ = ["document_extractor", "tutor_service"]
