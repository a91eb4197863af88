"""Translate knowledge-base documents to and from the platform's payloads."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from elevenlabs_iac.exceptions import ConfigurationError, TransportError
from elevenlabs_iac.hashing import content_hash, file_hash
from elevenlabs_iac.knowledge_base.schemas import (
    SOURCE_FILE,
    SOURCE_TEXT,
    SOURCE_URL,
    KnowledgeBaseDocumentConfig,
    KnowledgeBaseDocumentState,
)


def encode(config: KnowledgeBaseDocumentConfig) -> dict[str, Any]:
    """Comparable form of a document config."""
    encoded: dict[str, Any] = {"name": config.name}
    if config.source_url is not None:
        encoded["source_url"] = config.source_url
    elif config.source_text is not None:
        encoded["source_text"] = config.source_text
    else:
        encoded["source_file_path"] = str(config.source_file_path)
    if config.mime_type:
        encoded["mime_type"] = config.mime_type
    return encoded


def create_body(config: KnowledgeBaseDocumentConfig) -> dict[str, Any]:
    """JSON body for the create-from-url / create-from-text endpoints."""
    if config.source_url is not None:
        body: dict[str, Any] = {"url": config.source_url, "name": config.name}
    elif config.source_text is not None:
        body = {"text": config.source_text, "name": config.name}
    else:
        raise ConfigurationError("file-sourced documents are uploaded as multipart")
    if config.mime_type:
        body["mime_type"] = config.mime_type
    return body


def form_fields(config: KnowledgeBaseDocumentConfig) -> dict[str, str]:
    fields = {"name": config.name}
    if config.mime_type:
        fields["mime_type"] = config.mime_type
    return fields


def source_hash(config: KnowledgeBaseDocumentConfig) -> str | None:
    """Fingerprint of local source content; URL sources have none."""
    if config.source_text is not None:
        return content_hash(config.source_text)
    if config.source_file_path is not None:
        return file_hash(config.source_file_path)
    return None


def content_changed(config: KnowledgeBaseDocumentConfig, stored_hash: str | None) -> bool:
    """Compare a fresh fingerprint of the local source with the stored one."""
    if config.source_type == SOURCE_URL:
        return False
    return source_hash(config) != stored_hash


def document_id(response: dict[str, Any]) -> str:
    doc_id = response.get("document_id") or response.get("id")
    if not doc_id:
        raise TransportError("Create document response is missing 'document_id'")
    return doc_id


def decode(
    details: dict[str, Any],
    previous: KnowledgeBaseDocumentConfig | None,
    stored_hash: str | None = None,
    doc_id: str | None = None,
) -> KnowledgeBaseDocumentState:
    """Rebuild observed state from document details.

    Only URL sources are echoed back. Text and file sources are carried over
    from ``previous``, since the platform keeps no canonical copy of them.
    """
    source_type = details.get("source_type") or details.get("type") or ""
    fields: dict[str, Any] = {"name": details.get("name", "")}

    if source_type == SOURCE_URL:
        fields["source_url"] = details.get("source_url") or details.get("url")
    elif previous is not None and source_type in (SOURCE_TEXT, SOURCE_FILE, ""):
        fields["source_text"] = previous.source_text
        fields["source_file_path"] = previous.source_file_path
        fields["source_url"] = previous.source_url
    else:
        raise ConfigurationError(
            f"document '{details.get('id')}' has a {source_type or 'unknown'} source "
            "that cannot be reconstructed remotely"
        )

    # An unset mime type is left to the platform and not tracked
    if previous is None or previous.mime_type is not None:
        fields["mime_type"] = details.get("mime_type")

    metadata = details.get("metadata") or {}
    try:
        config = KnowledgeBaseDocumentConfig(**fields)
    except ValidationError as exc:
        raise TransportError(f"Malformed knowledge-base document response: {exc}") from exc
    return KnowledgeBaseDocumentState(
        document_id=doc_id or details.get("id") or "",
        config=config,
        source_type=source_type or (previous.source_type if previous else ""),
        source_hash=stored_hash,
        size_bytes=details.get("size_bytes", metadata.get("size_bytes")),
        status=details.get("status"),
        created_at_unix=details.get("created_at_unix", metadata.get("created_at_unix_secs")),
    )
