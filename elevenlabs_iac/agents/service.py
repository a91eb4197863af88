"""Agent CRUD against the conversational AI endpoints."""

from __future__ import annotations

import logging
import threading
from typing import Any

from elevenlabs_iac.agents import mapper
from elevenlabs_iac.agents.schemas import AgentConfig, AgentState
from elevenlabs_iac.exceptions import TransportError
from elevenlabs_iac.reconciler import ManagedResource
from elevenlabs_iac.transport import NOT_FOUND, Transport

logger = logging.getLogger(__name__)

AGENTS_PATH = "/v1/convai/agents"


def create_agent(
    transport: Transport, config: AgentConfig, cancel: threading.Event | None = None
) -> AgentState:
    """Create an agent and return it with its server-assigned id."""
    response = transport.send(
        "POST", f"{AGENTS_PATH}/create", body=mapper.encode(config), cancel=cancel
    )
    agent_id = (response or {}).get("agent_id")
    if not agent_id:
        raise TransportError("Create agent response is missing 'agent_id'")
    logger.info("Created agent '%s'", agent_id)
    return AgentState(agent_id=agent_id, config=config)


def get_agent(
    transport: Transport, agent_id: str, cancel: threading.Event | None = None
) -> AgentState | None:
    """Get an agent by id. Returns ``None`` when it does not exist."""
    response = transport.send(
        "GET", f"{AGENTS_PATH}/{agent_id}", not_found_ok=True, cancel=cancel
    )
    if response is NOT_FOUND:
        return None
    return mapper.decode(response, agent_id=agent_id)


def update_agent(
    transport: Transport,
    agent_id: str,
    payload: dict[str, Any],
    cancel: threading.Event | None = None,
) -> None:
    transport.send(
        "PUT",
        f"{AGENTS_PATH}/{agent_id}/update",
        body=payload,
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    logger.info("Updated agent '%s'", agent_id)


def delete_agent(
    transport: Transport, agent_id: str, cancel: threading.Event | None = None
) -> None:
    response = transport.send(
        "DELETE", f"{AGENTS_PATH}/{agent_id}/delete",
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        logger.info("Agent '%s' already deleted", agent_id)
    else:
        logger.info("Deleted agent '%s'", agent_id)


class AgentResource(ManagedResource):
    kind = "agent"
    config_model = AgentConfig

    def encode(self, config: AgentConfig) -> dict[str, Any]:
        return mapper.encode(config)

    def diff(self, previous: AgentConfig | None, desired: AgentConfig) -> dict[str, Any] | None:
        return mapper.diff(previous, desired)

    def create(
        self, config: AgentConfig, cancel: threading.Event | None = None
    ) -> tuple[str, dict[str, Any]]:
        return create_agent(self.transport, config, cancel).agent_id, {}

    def read(
        self,
        resource_id: str,
        previous: AgentConfig | None,
        cancel: threading.Event | None = None,
    ) -> AgentConfig | None:
        state = get_agent(self.transport, resource_id, cancel)
        return state.config if state is not None else None

    def update(
        self,
        resource_id: str,
        payload: dict[str, Any],
        cancel: threading.Event | None = None,
    ) -> None:
        update_agent(self.transport, resource_id, payload, cancel)

    def delete(
        self,
        resource_id: str,
        previous: AgentConfig,
        cancel: threading.Event | None = None,
    ) -> None:
        delete_agent(self.transport, resource_id, cancel)
