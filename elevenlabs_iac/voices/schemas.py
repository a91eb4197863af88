"""Pydantic models for voices, voice settings and voice search."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class VoiceConfig(BaseModel):
    """Desired state of a cloned voice. Every field is fixed at creation."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    labels: dict[str, str] | None = None
    files: list[Path] = Field(..., min_length=1)

    @field_validator("files")
    @classmethod
    def _files_as_set(cls, files: list[Path]) -> list[Path]:
        return sorted(set(files))


class VoiceState(BaseModel):
    voice_id: str
    config: VoiceConfig


class VoiceSummary(BaseModel):
    """A voice as listed by search; no audio sources attached."""

    voice_id: str
    name: str
    description: str | None = None
    labels: dict[str, str] = {}


class VoiceSettingsConfig(BaseModel):
    """Generation settings for one voice.

    Not an independent entity: it always exists for a voice, and removing it
    means resetting to ``DEFAULT_VOICE_SETTINGS``.
    """

    voice_id: str = Field(..., min_length=1)
    stability: float = Field(..., ge=0.0, le=1.0)
    similarity_boost: float = Field(..., ge=0.0, le=1.0)
    style: float = Field(0.0, ge=0.0, le=1.0)
    use_speaker_boost: bool = True
    speed: float = Field(1.0, gt=0.0)


DEFAULT_STABILITY = 0.5
DEFAULT_SIMILARITY_BOOST = 0.75


def default_voice_settings(voice_id: str) -> VoiceSettingsConfig:
    return VoiceSettingsConfig(
        voice_id=voice_id,
        stability=DEFAULT_STABILITY,
        similarity_boost=DEFAULT_SIMILARITY_BOOST,
    )


class VoiceSearch(BaseModel):
    """Filters for the voice search data source."""

    search: str | None = None
    sort: str | None = None
    sort_direction: str | None = None
    voice_type: str | None = None
    category: str | None = None


class VoiceSearchResult(BaseModel):
    id: str
    voices: list[VoiceSummary] = []
