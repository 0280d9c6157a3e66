"""
Series catalog models
"""
from pydantic import BaseModel
from typing import List, Optional


class Chapter(BaseModel):
    id: str
    series_id: str
    title: str = ""
    chapter_number: float = 0
    pages: List[str] = []  # page image URLs

    @property
    def total_images(self) -> int:
        return len(self.pages)


class Series(BaseModel):
    id: str
    title: str
    author: Optional[str] = None
    genre: List[str] = []
    chapters: List[Chapter] = []

    def get_chapter(self, chapter_id: str) -> Optional[Chapter]:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None
