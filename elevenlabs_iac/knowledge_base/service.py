"""Knowledge-base document create/read/delete.

Documents have no update: every field is fixed at creation, so a changed
config (or changed local content, detected through the stored source hash)
is handled by deleting and recreating the document.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from elevenlabs_iac.knowledge_base import mapper
from elevenlabs_iac.knowledge_base.schemas import (
    KnowledgeBaseDocumentConfig,
    KnowledgeBaseDocumentState,
)
from elevenlabs_iac.reconciler import ManagedResource
from elevenlabs_iac.transport import NOT_FOUND, Transport

logger = logging.getLogger(__name__)

DOCUMENTS_PATH = "/v1/knowledge-base/documents"


def create_document(
    transport: Transport,
    config: KnowledgeBaseDocumentConfig,
    cancel: threading.Event | None = None,
) -> KnowledgeBaseDocumentState:
    """Create a document from its URL, text or file source.

    The source hash is computed before anything is sent, so an unreadable
    file fails with ``LocalIOError`` without a request.
    """
    source_hash = mapper.source_hash(config)

    if config.source_file_path is not None:
        response = transport.send_multipart(
            "POST",
            f"{DOCUMENTS_PATH}/create-from-file",
            fields=mapper.form_fields(config),
            files=[("file", config.source_file_path)],
            cancel=cancel,
        )
    else:
        response = transport.send(
            "POST",
            f"{DOCUMENTS_PATH}/create-from-{config.source_type}",
            body=mapper.create_body(config),
            cancel=cancel,
        )

    doc_id = mapper.document_id(response or {})
    logger.info("Created %s knowledge-base document '%s'", config.source_type, doc_id)
    return KnowledgeBaseDocumentState(
        document_id=doc_id,
        config=config,
        source_type=config.source_type,
        source_hash=source_hash,
        status=(response or {}).get("status"),
    )


def get_document(
    transport: Transport,
    document_id: str,
    previous: KnowledgeBaseDocumentConfig | None = None,
    stored_hash: str | None = None,
    cancel: threading.Event | None = None,
) -> KnowledgeBaseDocumentState | None:
    response = transport.send(
        "GET", f"{DOCUMENTS_PATH}/{document_id}", not_found_ok=True, cancel=cancel
    )
    if response is NOT_FOUND:
        return None
    return mapper.decode(response, previous, stored_hash, doc_id=document_id)


def delete_document(
    transport: Transport, document_id: str, cancel: threading.Event | None = None
) -> None:
    response = transport.send(
        "DELETE", f"{DOCUMENTS_PATH}/{document_id}",
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        logger.info("Knowledge-base document '%s' already deleted", document_id)
    else:
        logger.info("Deleted knowledge-base document '%s'", document_id)


class KnowledgeBaseDocumentResource(ManagedResource):
    kind = "knowledge_base_document"
    config_model = KnowledgeBaseDocumentConfig
    immutable = True

    def encode(self, config: KnowledgeBaseDocumentConfig) -> dict[str, Any]:
        return mapper.encode(config)

    def needs_replacement(
        self,
        previous: KnowledgeBaseDocumentConfig,
        desired: KnowledgeBaseDocumentConfig,
        computed: dict[str, Any],
    ) -> bool:
        if mapper.encode(previous) != mapper.encode(desired):
            return True
        return mapper.content_changed(desired, computed.get("source_hash"))

    def computed_for(self, config: KnowledgeBaseDocumentConfig) -> dict[str, Any]:
        source_hash = mapper.source_hash(config)
        return {"source_hash": source_hash} if source_hash is not None else {}

    def create(
        self, config: KnowledgeBaseDocumentConfig, cancel: threading.Event | None = None
    ) -> tuple[str, dict[str, Any]]:
        state = create_document(self.transport, config, cancel)
        computed: dict[str, Any] = {}
        if state.source_hash is not None:
            computed["source_hash"] = state.source_hash
        return state.document_id, computed

    def read(
        self,
        resource_id: str,
        previous: KnowledgeBaseDocumentConfig | None,
        cancel: threading.Event | None = None,
    ) -> KnowledgeBaseDocumentConfig | None:
        state = get_document(self.transport, resource_id, previous, cancel=cancel)
        return state.config if state is not None else None

    def delete(
        self,
        resource_id: str,
        previous: KnowledgeBaseDocumentConfig,
        cancel: threading.Event | None = None,
    ) -> None:
        delete_document(self.transport, resource_id, cancel)
