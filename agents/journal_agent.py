"""Journal service: entries with photos analysed by the vision model."""

from __future__ import annotations

import logging
import time
from typing import Dict, List

from barn_app.config import BarnConfig
from barn_app.logging_config import get_logger, log_event, operation_context
from logic.errors import PhotoAnalysisError, RecordNotFound
from models.journal import JournalEntry, JournalPhoto
from models.taxonomy import PhotoAnalysisType
from tools.journal_store import JournalStore
from tools.sqlite_store import new_id
from tools.vision import PhotoAnalyzer


LOGGER = get_logger(__name__)


class JournalAgent:
    def __init__(self, config: BarnConfig, journal_store: JournalStore, analyzer: PhotoAnalyzer | None) -> None:
        self.config = config
        self.journal_store = journal_store
        self.analyzer = analyzer

    def create_entry(self, user_id: str, fields: Dict[str, object]) -> JournalEntry:
        now = time.time()
        photos = [
            JournalPhoto(photo_id=new_id(), url=str(url), uploaded_at=now)
            for url in fields.get("photo_urls", []) or []
        ]
        entry = JournalEntry.model_validate(
            {
                **{key: value for key, value in fields.items() if key != "photo_urls"},
                "entry_id": new_id(),
                "user_id": user_id,
                "photos": photos,
                "entry_date": fields.get("entry_date") or now,
                "created_at": now,
                "updated_at": now,
            }
        )
        return self.journal_store.create_entry(entry)

    def list_entries(self, user_id: str, category: str | None = None) -> List[JournalEntry]:
        return self.journal_store.list_entries_for_user(user_id, category=category)

    def analyze_photo(
        self,
        user_id: str,
        entry_id: str,
        photo_id: str,
        image_bytes: bytes,
        analysis_type: PhotoAnalysisType | str = PhotoAnalysisType.GENERAL,
    ) -> JournalEntry:
        """Run the vision model on one photo and record the outcome on the entry.

        A failed analysis is stored on the photo (status ``failed``) rather than
        raised, so the entry stays usable.
        """

        if self.analyzer is None:
            raise PhotoAnalysisError("photo analysis is not configured")

        with operation_context("agent:journal.analyze_photo", entry_id=entry_id) as correlation_id:
            entry = self.journal_store.get_entry(user_id, entry_id)
            if entry is None:
                raise RecordNotFound("journal entry", entry_id)
            self.journal_store.set_photo_status(user_id, entry_id, photo_id, "analyzing")
            try:
                analysis = self.analyzer.analyze(image_bytes=image_bytes, analysis_type=analysis_type)
            # ValueError covers rejected inputs (empty image, unknown analysis type)
            except (PhotoAnalysisError, ValueError) as exc:
                log_event(
                    LOGGER,
                    level=logging.WARNING,
                    event="photo_analysis_failed",
                    agent="journal",
                    correlation_id=correlation_id,
                    entry_id=entry_id,
                    photo_id=photo_id,
                    error=str(exc),
                )
                return self.journal_store.set_photo_status(
                    user_id, entry_id, photo_id, "failed", error=str(exc)
                )

            updated = self.journal_store.set_photo_status(
                user_id, entry_id, photo_id, "completed", analysis=analysis
            )
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="journal",
                method="analyze_photo",
                correlation_id=correlation_id,
                entry_id=entry_id,
                photo_id=photo_id,
            )
            return updated


__all__ = ["JournalAgent"]
