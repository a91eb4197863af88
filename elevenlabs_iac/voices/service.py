"""Voice, voice settings and voice search operations."""

from __future__ import annotations

import logging
import threading
from typing import Any

import httpx

from elevenlabs_iac.exceptions import APIError, ConfigurationError, TransportError
from elevenlabs_iac.hashing import stable_id
from elevenlabs_iac.reconciler import ManagedResource
from elevenlabs_iac.transport import NOT_FOUND, Transport
from elevenlabs_iac.voices import mapper
from elevenlabs_iac.voices.schemas import (
    VoiceConfig,
    VoiceSearch,
    VoiceSearchResult,
    VoiceSettingsConfig,
    VoiceState,
    VoiceSummary,
    default_voice_settings,
)

logger = logging.getLogger(__name__)

VOICES_V1_PATH = "/v1/voices"
VOICES_V2_PATH = "/v2/voices"


# ===== Voices =====

def create_voice(
    transport: Transport, config: VoiceConfig, cancel: threading.Event | None = None
) -> VoiceState:
    """Clone a voice from local audio files.

    All files are opened before the upload starts; an unreadable file raises
    ``LocalIOError`` and nothing is sent.
    """
    response = transport.send_multipart(
        "POST",
        f"{VOICES_V1_PATH}/add",
        fields=mapper.form_fields(config),
        files=[("files", path) for path in config.files],
        cancel=cancel,
    )
    voice_id = (response or {}).get("voice_id")
    if not voice_id:
        raise TransportError("Create voice response is missing 'voice_id'")
    logger.info("Created voice '%s' from %d file(s)", voice_id, len(config.files))
    return VoiceState(voice_id=voice_id, config=config)


def get_voice(
    transport: Transport, voice_id: str, cancel: threading.Event | None = None
) -> VoiceSummary | None:
    """Look a voice up through the search endpoint filtered by id."""
    response = transport.send(
        "GET",
        VOICES_V2_PATH,
        params={"voice_ids": voice_id},
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        return None
    voice = mapper.pick_voice(response, voice_id)
    if voice is None:
        return None
    return mapper.decode_summary(voice)


def delete_voice(
    transport: Transport, voice_id: str, cancel: threading.Event | None = None
) -> None:
    response = transport.send(
        "DELETE", f"{VOICES_V1_PATH}/{voice_id}",
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        logger.info("Voice '%s' already deleted", voice_id)
    else:
        logger.info("Deleted voice '%s'", voice_id)


def search_voices(
    transport: Transport, params: VoiceSearch, cancel: threading.Event | None = None
) -> VoiceSearchResult:
    """List voices matching ``params``; the result id is stable per filter set."""
    query = params.model_dump(exclude_none=True)
    response = transport.send(
        "GET", VOICES_V2_PATH, params=query, not_found_ok=True, cancel=cancel
    )
    voices = [] if response is NOT_FOUND else (response or {}).get("voices") or []
    return VoiceSearchResult(
        id=stable_id(query),
        voices=[mapper.decode_summary(voice) for voice in voices],
    )


# ===== Voice settings =====

def get_voice_settings(
    transport: Transport, voice_id: str, cancel: threading.Event | None = None
) -> VoiceSettingsConfig | None:
    response = transport.send(
        "GET",
        f"{VOICES_V1_PATH}/{voice_id}/settings",
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        return None
    return mapper.decode_settings(response, voice_id)


def update_voice_settings(
    transport: Transport,
    voice_id: str,
    payload: dict[str, Any],
    cancel: threading.Event | None = None,
) -> bool:
    """Edit the settings of a voice. Returns False when the voice does not exist."""
    response = transport.send(
        "POST",
        f"{VOICES_V1_PATH}/{voice_id}/settings/edit",
        body=payload,
        expect_body=False,
        not_found_ok=True,
        cancel=cancel,
    )
    if response is NOT_FOUND:
        logger.info("Voice '%s' not found; settings not updated", voice_id)
        return False
    logger.info("Updated settings for voice '%s'", voice_id)
    return True


def reset_voice_settings(
    transport: Transport, voice_id: str, cancel: threading.Event | None = None
) -> None:
    """Settings cannot be deleted; put the platform defaults back instead."""
    defaults = default_voice_settings(voice_id)
    update_voice_settings(transport, voice_id, mapper.encode_settings(defaults), cancel)


# ===== Managed resources =====

class VoiceResource(ManagedResource):
    kind = "voice"
    config_model = VoiceConfig
    immutable = True

    def encode(self, config: VoiceConfig) -> dict[str, Any]:
        return mapper.encode(config)

    def create(
        self, config: VoiceConfig, cancel: threading.Event | None = None
    ) -> tuple[str, dict[str, Any]]:
        return create_voice(self.transport, config, cancel).voice_id, {}

    def read(
        self,
        resource_id: str,
        previous: VoiceConfig | None,
        cancel: threading.Event | None = None,
    ) -> VoiceConfig | None:
        # The platform never returns the audio samples a voice was cloned from
        if previous is None:
            raise ConfigurationError(
                f"voice '{resource_id}' can only be adopted with a config listing its files"
            )
        summary = get_voice(self.transport, resource_id, cancel)
        if summary is None:
            return None
        return mapper.decode(summary.model_dump(), previous.files).config

    def delete(
        self,
        resource_id: str,
        previous: VoiceConfig,
        cancel: threading.Event | None = None,
    ) -> None:
        delete_voice(self.transport, resource_id, cancel)


class VoiceSettingsResource(ManagedResource):
    """Settings keyed by voice id; create and update are the same call."""

    kind = "voice_settings"
    config_model = VoiceSettingsConfig

    def encode(self, config: VoiceSettingsConfig) -> dict[str, Any]:
        return mapper.encode_settings(config)

    def diff(
        self, previous: VoiceSettingsConfig | None, desired: VoiceSettingsConfig
    ) -> dict[str, Any] | None:
        return mapper.diff_settings(previous, desired)

    def needs_replacement(
        self,
        previous: VoiceSettingsConfig,
        desired: VoiceSettingsConfig,
        computed: dict[str, Any],
    ) -> bool:
        return previous.voice_id != desired.voice_id

    def create(
        self, config: VoiceSettingsConfig, cancel: threading.Event | None = None
    ) -> tuple[str, dict[str, Any]]:
        payload = mapper.encode_settings(config)
        if not update_voice_settings(self.transport, config.voice_id, payload, cancel):
            raise APIError(
                httpx.codes.NOT_FOUND,
                "",
                detail=f"cannot configure settings: voice '{config.voice_id}' does not exist",
            )
        return config.voice_id, {}

    def read(
        self,
        resource_id: str,
        previous: VoiceSettingsConfig | None,
        cancel: threading.Event | None = None,
    ) -> VoiceSettingsConfig | None:
        return get_voice_settings(self.transport, resource_id, cancel)

    def update(
        self,
        resource_id: str,
        payload: dict[str, Any],
        cancel: threading.Event | None = None,
    ) -> None:
        update_voice_settings(self.transport, resource_id, payload, cancel)

    def delete(
        self,
        resource_id: str,
        previous: VoiceSettingsConfig,
        cancel: threading.Event | None = None,
    ) -> None:
        reset_voice_settings(self.transport, resource_id, cancel)
