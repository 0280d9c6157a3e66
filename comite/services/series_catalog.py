"""
Series and chapter lookup
"""
import logging
from typing import List, Optional

from ..models.series import Chapter, Series
from .base.document_store import DocumentStore

logger = logging.getLogger(__name__)


class SeriesCatalog:
    """Read-mostly view of series documents for the reading tracker"""

    PREFIX = "series"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _key(self, series_id: str) -> str:
        return f"{self.PREFIX}/{series_id}"

    def register_series(self, series: Series) -> Series:
        self.store.set(self._key(series.id), series.model_dump(mode="json"))
        logger.info(f"Registered series {series.id} with {len(series.chapters)} chapters")
        return series

    def get_series(self, series_id: str) -> Optional[Series]:
        data = self.store.get(self._key(series_id))
        return Series(**data) if data else None

    def get_chapter(self, series_id: str, chapter_id: str) -> Optional[Chapter]:
        series = self.get_series(series_id)
        return series.get_chapter(chapter_id) if series else None

    def total_images_for(self, series_id: str, chapter_id: str) -> Optional[int]:
        chapter = self.get_chapter(series_id, chapter_id)
        return chapter.total_images if chapter else None

    def genres_for(self, series_id: str) -> List[str]:
        series = self.get_series(series_id)
        return list(series.genre) if series else []
