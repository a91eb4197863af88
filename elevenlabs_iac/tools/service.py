"""Tool CRUD against the conversational AI endpoints."""

from __future__ import annotations

import logging
import threading
from typing import Any

from elevenlabs_iac.exceptions import TransportError
from elevenlabs_iac.reconciler import ManagedResource
from elevenlabs_iac.tools import mapper
from elevenlabs_iac.tools.schemas import ToolConfig, ToolState
from elevenlabs_iac.transport import NOT_FOUND, Transport

logger = logging.getLogger(__name__)

TOOLS_PATH = "/v1/convai/tools"


def create_tool(
    transport: Transport, config: ToolConfig, cancel: threading.Event | None = None
) -> ToolState:
    """Create a tool.

    When the response echoes the tool config, the returned state is decoded
    from it; otherwise the desired config is paired with the new id.
    """
    response = transport.send(
        "POST", f"{TOOLS_PATH}/create", body=mapper.encode(config), cancel=cancel
    )
    response = response or {}
    tool_id = response.get("id")
    if not tool_id:
        raise TransportError("Create tool response is missing 'id'")
    logger.info("Created tool '%s'", tool_id)

    if "tool_config" in response or "name" in response:
        return mapper.decode(response, tool_id=tool_id)
    return ToolState(tool_id=tool_id, config=config)


def get_tool(
    transport: Transport, tool_id: str, cancel: threading.Event | None = None
) -> ToolState | None:
    """Return full tool detail by id, or ``None`` if it does not exist."""
    response = transport.send(
        "GET", f"{TOOLS_PATH}/{tool_id}", not_found_ok=True, cancel=cancel
    )
    if response is NOT_FOUND:
        return None
    return mapper.decode(response, tool_id=tool_id)


def update_tool(
    transport: Transport,
    tool_id: str,
    payload: dict[str, Any],
    cancel: threading.Event | None = None,
) -> None:
    transport.send(
        "PUT", f"{TOOLS_PATH}/{tool_id}", body=payload,
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    logger.info("Updated tool '%s'", tool_id)


def delete_tool(
    transport: Transport, tool_id: str, cancel: threading.Event | None = None
) -> None:
    response = transport.send(
        "DELETE", f"{TOOLS_PATH}/{tool_id}",
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        logger.info("Tool '%s' already deleted", tool_id)
    else:
        logger.info("Deleted tool '%s'", tool_id)


class ToolResource(ManagedResource):
    kind = "tool"
    config_model = ToolConfig

    def encode(self, config: ToolConfig) -> dict[str, Any]:
        return mapper.encode(config)

    def diff(self, previous: ToolConfig | None, desired: ToolConfig) -> dict[str, Any] | None:
        return mapper.diff(previous, desired)

    def create(
        self, config: ToolConfig, cancel: threading.Event | None = None
    ) -> tuple[str, dict[str, Any]]:
        return create_tool(self.transport, config, cancel).tool_id, {}

    def read(
        self,
        resource_id: str,
        previous: ToolConfig | None,
        cancel: threading.Event | None = None,
    ) -> ToolConfig | None:
        state = get_tool(self.transport, resource_id, cancel)
        return state.config if state is not None else None

    def update(
        self,
        resource_id: str,
        payload: dict[str, Any],
        cancel: threading.Event | None = None,
    ) -> None:
        update_tool(self.transport, resource_id, payload, cancel)

    def delete(
        self,
        resource_id: str,
        previous: ToolConfig,
        cancel: threading.Event | None = None,
    ) -> None:
        delete_tool(self.transport, resource_id, cancel)
