from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class ErrorKind(str, Enum):
    MISSING_FRONT_MATTER = "MissingFrontMatter"
    SCHEMA_ERROR = "SchemaError"
    DUPLICATE_TAXONOMY_ENTRY = "DuplicateTaxonomyEntry"
    UNKNOWN_FIELD = "UnknownField"
    DANGLING_LINK = "DanglingLink"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


HARD_KINDS = frozenset({ErrorKind.MISSING_FRONT_MATTER, ErrorKind.SCHEMA_ERROR})


class ValidationError(BaseModel):
    """A structural defect found in the corpus. Hard kinds fail a run, soft ones don't."""

    kind: ErrorKind
    source: str
    message: str
    path: Optional[str] = None
    segment: Optional[int] = None
    field: Optional[str] = None

    @computed_field
    @property
    def severity(self) -> Severity:
        return Severity.ERROR if self.kind in HARD_KINDS else Severity.WARNING

    @property
    def is_hard(self) -> bool:
        return self.severity is Severity.ERROR

    def location(self) -> str:
        loc = self.path or self.source
        if self.path is None and self.segment is not None:
            loc = f"{self.source}#{self.segment}"
        if self.field:
            loc = f"{loc} [{self.field}]"
        return loc


class FileReport(BaseModel):
    source: str
    post_count: int = 0
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)


class Report(BaseModel):
    root: str
    files: List[FileReport] = Field(default_factory=list)
    links: Dict[str, List[str]] = Field(default_factory=dict)

    @computed_field
    @property
    def post_count(self) -> int:
        return sum(f.post_count for f in self.files)

    @computed_field
    @property
    def error_count(self) -> int:
        return sum(len(f.errors) for f in self.files)

    @computed_field
    @property
    def warning_count(self) -> int:
        return sum(len(f.warnings) for f in self.files)

    @computed_field
    @property
    def ok(self) -> bool:
        return self.error_count == 0
