"""Service layer used by the HTTP API."""

from access_review.services.application_service import ApplicationService

__all__ = ["ApplicationService"]
