from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

RECOGNIZED_FIELDS = (
    "title",
    "date",
    "draft",
    "authors",
    "categories",
    "tags",
    "summary",
    "description",
    "readTime",
)


class KnownField(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["known"] = "known"
    name: str
    value: Any = None


class UnknownField(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"
    name: str
    raw_value: Any = None


FrontMatterField = Annotated[
    Union[KnownField, UnknownField], Field(discriminator="kind")
]


class Post(BaseModel):
    """One logical article: a single front-matter block plus its body."""

    model_config = ConfigDict(frozen=True)

    path: str
    source: str
    segment: int = 0
    slug: str
    title: str = ""
    date: Optional[datetime] = None
    draft: bool = False
    authors: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    readTime: Optional[str] = None
    content: str = ""
    front_matter: List[FrontMatterField] = Field(default_factory=list)

    def raw(self, name: str, default: Any = None) -> Any:
        """Return the front-matter value for ``name`` exactly as it was parsed."""
        for field in self.front_matter:
            if field.name == name:
                return field.value if isinstance(field, KnownField) else field.raw_value
        return default

    def has_field(self, name: str) -> bool:
        return any(field.name == name for field in self.front_matter)

    @property
    def unknown_fields(self) -> List[UnknownField]:
        return [f for f in self.front_matter if isinstance(f, UnknownField)]
