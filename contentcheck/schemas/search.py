from typing import List, Optional

from pydantic import BaseModel, Field


class SearchEntry(BaseModel):
    """One record of the site's ``/index.json`` search index."""

    title: str
    permalink: str
    date: Optional[str] = None
    summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    content: str = ""
    readingTime: Optional[str] = None
