"""Pydantic models for the conversational agent resource."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class KnowledgeBaseRef(BaseModel):
    """Reference from an agent prompt to a knowledge-base document."""

    type: str = "file"  # "file", "url" or "text"
    name: str
    id: str


class PromptSettings(BaseModel):
    prompt: str
    llm: str = "gpt-4o-mini"
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = None
    tool_ids: list[str] | None = None
    knowledge_base: list[KnowledgeBaseRef] | None = None


class AgentSettings(BaseModel):
    first_message: str | None = None
    language: str | None = None
    prompt: PromptSettings


class TTSSettings(BaseModel):
    """Text-to-speech overrides for the agent's voice."""

    voice_id: str | None = None
    stability: float | None = Field(None, ge=0.0, le=1.0)
    speed: float | None = Field(None, gt=0.0)
    similarity_boost: float | None = Field(None, ge=0.0, le=1.0)


class ConversationConfig(BaseModel):
    agent: AgentSettings
    tts: TTSSettings | None = None


class AgentConfig(BaseModel):
    """Desired state of an agent."""

    name: str | None = None
    conversation_config: ConversationConfig
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def _tags_as_set(cls, tags: list[str] | None) -> list[str] | None:
        if tags is None:
            return None
        return sorted(set(tags))


class AgentState(BaseModel):
    """Observed state of an agent as read back from the platform."""

    agent_id: str
    config: AgentConfig
