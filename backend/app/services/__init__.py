"""Services package."""
from app.services.history_service import HistoryService
from app.services.extraction_service import ExtractionService

__all__ = ["HistoryService", "ExtractionService"]
