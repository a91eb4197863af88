"""Provider entry point: settings, logging, transport and resource registry."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any

import httpx
from pydantic import BaseModel

from elevenlabs_iac.agents.service import AgentResource
from elevenlabs_iac.config import Settings, get_settings
from elevenlabs_iac.knowledge_base.service import KnowledgeBaseDocumentResource
from elevenlabs_iac.reconciler import ManagedResource, Plan, Reconciler
from elevenlabs_iac.state import StateStore
from elevenlabs_iac.tools.service import ToolResource
from elevenlabs_iac.transport import Transport
from elevenlabs_iac.voices import service as voices_service
from elevenlabs_iac.voices.schemas import VoiceSearch, VoiceSearchResult
from elevenlabs_iac.voices.service import VoiceResource, VoiceSettingsResource

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

RESOURCE_TYPES: tuple[type[ManagedResource], ...] = (
    AgentResource,
    ToolResource,
    VoiceResource,
    VoiceSettingsResource,
    KnowledgeBaseDocumentResource,
)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )


class Provider:
    """One configured connection to the platform plus the state it manages.

    Nothing is shared between instances; the transport is handed to every
    resource explicitly.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        store: StateStore | None = None,
    ):
        settings = settings or get_settings()
        configure_logging(settings.log_level)

        self.transport = Transport(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            client=client,
        )
        self.resources: dict[str, ManagedResource] = {
            resource_type.kind: resource_type(self.transport)
            for resource_type in RESOURCE_TYPES
        }
        self.store = store if store is not None else StateStore(settings.state_file)
        self.reconciler = Reconciler(self.resources, self.store)
        logger.info("Provider initialised for %s", settings.base_url)

    def __enter__(self) -> Provider:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()
        logger.info("Provider transport closed")

    def load(self, kind: str, data: dict[str, Any]) -> BaseModel:
        """Validate a raw config mapping against the kind's schema."""
        return self.reconciler.resource(kind).load(data)

    def plan(self, address: str, kind: str, desired: BaseModel | None) -> Plan:
        return self.reconciler.plan(address, kind, desired)

    def apply(
        self,
        address: str,
        kind: str,
        desired: BaseModel | dict[str, Any] | None,
        cancel: threading.Event | None = None,
    ) -> Plan:
        if isinstance(desired, dict):
            desired = self.load(kind, desired)
        return self.reconciler.apply(address, kind, desired, cancel)

    def import_(
        self,
        address: str,
        kind: str,
        resource_id: str,
        config: BaseModel | dict[str, Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> BaseModel:
        """Adopt an existing remote entity by id; see ``Reconciler.import_``."""
        if isinstance(config, dict):
            config = self.load(kind, config)
        return self.reconciler.import_(address, kind, resource_id, config, cancel)

    def refresh(self, address: str, cancel: threading.Event | None = None) -> BaseModel | None:
        return self.reconciler.refresh(address, cancel)

    def destroy(self, address: str, cancel: threading.Event | None = None) -> bool:
        return self.reconciler.destroy(address, cancel)

    def search_voices(
        self, params: VoiceSearch | None = None, cancel: threading.Event | None = None
    ) -> VoiceSearchResult:
        return voices_service.search_voices(self.transport, params or VoiceSearch(), cancel)
