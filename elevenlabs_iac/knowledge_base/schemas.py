"""Pydantic models for knowledge-base documents."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

SOURCE_URL = "url"
SOURCE_TEXT = "text"
SOURCE_FILE = "file"


class KnowledgeBaseDocumentConfig(BaseModel):
    """Desired state of a document.

    Exactly one source must be set. Nothing can change after creation; any
    difference recreates the document.
    """

    name: str = Field(..., min_length=1)
    source_url: str | None = None
    source_text: str | None = None
    source_file_path: Path | None = None
    mime_type: str | None = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> KnowledgeBaseDocumentConfig:
        sources = [
            s for s in (self.source_url, self.source_text, self.source_file_path)
            if s is not None
        ]
        if len(sources) != 1:
            raise ValueError(
                "exactly one of source_url, source_text or source_file_path must be specified"
            )
        return self

    @property
    def source_type(self) -> str:
        if self.source_url is not None:
            return SOURCE_URL
        if self.source_text is not None:
            return SOURCE_TEXT
        return SOURCE_FILE


class KnowledgeBaseDocumentState(BaseModel):
    document_id: str
    config: KnowledgeBaseDocumentConfig
    source_type: str
    source_hash: str | None = None
    size_bytes: int | None = None
    status: str | None = None
    created_at_unix: int | None = None
