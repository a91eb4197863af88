"""Translate voices and voice settings to and from the platform's payloads."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from elevenlabs_iac.exceptions import AmbiguousResultError, TransportError
from elevenlabs_iac.voices.schemas import (
    VoiceConfig,
    VoiceSettingsConfig,
    VoiceState,
    VoiceSummary,
)


def encode(config: VoiceConfig) -> dict[str, Any]:
    """Comparable form of a voice config, including its audio sources."""
    encoded: dict[str, Any] = {"name": config.name}
    if config.description:
        encoded["description"] = config.description
    if config.labels:
        encoded["labels"] = dict(config.labels)
    encoded["files"] = [str(path) for path in config.files]
    return encoded


def form_fields(config: VoiceConfig) -> dict[str, str]:
    """Text fields sent alongside the ``files`` parts on create."""
    fields = {"name": config.name}
    if config.description:
        fields["description"] = config.description
    if config.labels:
        fields["labels"] = json.dumps(config.labels, sort_keys=True)
    return fields


def decode_summary(voice: dict[str, Any]) -> VoiceSummary:
    try:
        return VoiceSummary(
            voice_id=voice.get("voice_id"),
            name=voice.get("name", ""),
            description=voice.get("description") or None,
            labels=voice.get("labels") or {},
        )
    except ValidationError as exc:
        raise TransportError(f"Malformed voice response: {exc}") from exc


def decode(voice: dict[str, Any], files: list[Path]) -> VoiceState:
    """Observed voice state. Audio sources are never echoed and come from ``files``."""
    summary = decode_summary(voice)
    try:
        config = VoiceConfig(
            name=summary.name,
            description=summary.description,
            labels=summary.labels or None,
            files=files,
        )
    except ValidationError as exc:
        raise TransportError(f"Malformed voice response: {exc}") from exc
    return VoiceState(voice_id=summary.voice_id, config=config)


def pick_voice(payload: dict[str, Any], voice_id: str) -> dict[str, Any] | None:
    """Select the single match from a search-by-id response.

    Zero matches means the voice is absent; more than one is an invariant
    violation on the platform side and is refused.
    """
    voices = payload.get("voices")
    if voices is None:
        raise TransportError("Voice search response is missing 'voices'")
    if not voices:
        return None
    if len(voices) > 1:
        raise AmbiguousResultError(
            f"expected 1 voice for id '{voice_id}', but got {len(voices)}"
        )
    return voices[0]


def encode_settings(settings: VoiceSettingsConfig) -> dict[str, Any]:
    # Every field is sent, defaults included
    return settings.model_dump(exclude={"voice_id"})


def decode_settings(payload: dict[str, Any], voice_id: str) -> VoiceSettingsConfig:
    try:
        return VoiceSettingsConfig.model_validate({**payload, "voice_id": voice_id})
    except ValidationError as exc:
        raise TransportError(f"Malformed voice settings response: {exc}") from exc


def diff_settings(
    previous: VoiceSettingsConfig | None, desired: VoiceSettingsConfig
) -> dict[str, Any] | None:
    if previous is not None and encode_settings(previous) == encode_settings(desired):
        return None
    return encode_settings(desired)
