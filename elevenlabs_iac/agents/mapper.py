"""Translate between agent configs and the platform's JSON representation."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from elevenlabs_iac.agents.schemas import (
    AgentConfig,
    AgentSettings,
    AgentState,
    ConversationConfig,
    KnowledgeBaseRef,
    PromptSettings,
    TTSSettings,
)
from elevenlabs_iac.exceptions import TransportError


def _put(target: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        target[key] = value


def encode(config: AgentConfig) -> dict[str, Any]:
    """Build the create/update payload. Unset optionals are omitted."""
    agent = config.conversation_config.agent
    prompt: dict[str, Any] = {"prompt": agent.prompt.prompt, "llm": agent.prompt.llm}
    _put(prompt, "temperature", agent.prompt.temperature)
    _put(prompt, "max_tokens", agent.prompt.max_tokens)
    _put(prompt, "tool_ids", agent.prompt.tool_ids)
    if agent.prompt.knowledge_base is not None:
        prompt["knowledge_base"] = [ref.model_dump() for ref in agent.prompt.knowledge_base]

    agent_block: dict[str, Any] = {"prompt": prompt}
    _put(agent_block, "first_message", agent.first_message)
    _put(agent_block, "language", agent.language)

    conversation: dict[str, Any] = {"agent": agent_block}
    if config.conversation_config.tts is not None:
        conversation["tts"] = config.conversation_config.tts.model_dump(exclude_none=True)

    payload: dict[str, Any] = {"conversation_config": conversation}
    _put(payload, "name", config.name)
    _put(payload, "tags", config.tags)
    return payload


def decode(payload: dict[str, Any], agent_id: str | None = None) -> AgentState:
    """Rebuild observed state from a GET response.

    A response that does not fit the agent schema raises ``TransportError``.
    """
    try:
        return _decode(payload, agent_id)
    except ValidationError as exc:
        raise TransportError(f"Malformed agent response: {exc}") from exc


def _decode(payload: dict[str, Any], agent_id: str | None) -> AgentState:
    # Optional blocks are decoded only when present, so a missing ``tts``
    # stays ``None`` rather than becoming an empty block
    agent_id = agent_id or payload.get("agent_id")
    if not agent_id:
        raise TransportError("Agent response is missing 'agent_id'")

    conversation = payload.get("conversation_config") or {}
    agent = conversation.get("agent") or {}
    prompt = agent.get("prompt") or {}

    knowledge_base = None
    if "knowledge_base" in prompt and prompt["knowledge_base"] is not None:
        knowledge_base = [KnowledgeBaseRef(**ref) for ref in prompt["knowledge_base"]]

    tts = None
    if conversation.get("tts") is not None:
        tts = TTSSettings(**conversation["tts"])

    config = AgentConfig(
        name=payload.get("name"),
        conversation_config=ConversationConfig(
            agent=AgentSettings(
                first_message=agent.get("first_message"),
                language=agent.get("language"),
                prompt=PromptSettings(
                    prompt=prompt.get("prompt", ""),
                    llm=prompt.get("llm") or "gpt-4o-mini",
                    temperature=prompt.get("temperature"),
                    max_tokens=prompt.get("max_tokens"),
                    tool_ids=prompt.get("tool_ids"),
                    knowledge_base=knowledge_base,
                ),
            ),
            tts=tts,
        ),
        tags=payload.get("tags"),
    )
    return AgentState(agent_id=agent_id, config=config)


def diff(previous: AgentConfig | None, desired: AgentConfig) -> dict[str, Any] | None:
    """Return the update payload, or ``None`` when nothing changed.

    The platform has no patch semantics, so any change re-sends every
    encodable field.
    """
    if previous is not None and encode(previous) == encode(desired):
        return None
    return encode(desired)
