"""Tests for per-voice generation settings."""

import pytest
from pydantic import ValidationError

from elevenlabs_iac.exceptions import APIError, TransportError
from elevenlabs_iac.voices import mapper
from elevenlabs_iac.voices.schemas import VoiceSettingsConfig, default_voice_settings
from elevenlabs_iac.voices.service import (
    get_voice_settings,
    reset_voice_settings,
    update_voice_settings,
)
from mock_platform.main import DEFAULT_SETTINGS


class TestVoiceSettingsPayload:
    def test_omitted_fields_are_sent_with_defaults(self, mock_transport, recorder):
        handler = recorder(payload={"status": "ok"})
        transport = mock_transport(handler)
        settings = VoiceSettingsConfig(voice_id="voice_1", stability=0.3, similarity_boost=0.9)

        update_voice_settings(transport, "voice_1", mapper.encode_settings(settings))

        assert handler.requests[0].url.path == "/v1/voices/voice_1/settings/edit"
        assert handler.json_body() == {
            "stability": 0.3,
            "similarity_boost": 0.9,
            "style": 0.0,
            "use_speaker_boost": True,
            "speed": 1.0,
        }

    def test_reset_sends_platform_defaults(self, mock_transport, recorder):
        handler = recorder(payload={"status": "ok"})
        transport = mock_transport(handler)

        reset_voice_settings(transport, "voice_1")

        assert handler.json_body() == {
            "stability": 0.5,
            "similarity_boost": 0.75,
            "style": 0.0,
            "use_speaker_boost": True,
            "speed": 1.0,
        }

    @pytest.mark.parametrize("field,value", [
        ("stability", 1.5),
        ("similarity_boost", -0.1),
        ("style", 2.0),
        ("speed", 0.0),
    ])
    def test_out_of_range_values_rejected(self, field, value):
        fields = {"voice_id": "v", "stability": 0.5, "similarity_boost": 0.5, field: value}
        with pytest.raises(ValidationError):
            VoiceSettingsConfig(**fields)

    def test_diff(self):
        base = default_voice_settings("v")
        assert mapper.diff_settings(base, default_voice_settings("v")) is None
        changed = base.model_copy(update={"speed": 1.2})
        assert mapper.diff_settings(base, changed)["speed"] == 1.2


class TestVoiceSettingsService:
    def test_missing_voice_reads_as_absent(self, transport):
        assert get_voice_settings(transport, "voice_missing") is None

    def test_decodes_server_values(self, mock_transport, recorder):
        transport = mock_transport(recorder(payload=dict(DEFAULT_SETTINGS, stability=0.2)))

        settings = get_voice_settings(transport, "voice_1")

        assert settings.voice_id == "voice_1"
        assert settings.stability == 0.2
        assert settings.similarity_boost == 0.75

    def test_null_field_in_response_is_a_transport_error(self):
        with pytest.raises(TransportError, match="Malformed voice settings response"):
            mapper.decode_settings({"stability": 0.5, "similarity_boost": 0.5, "style": None}, "v")

    def test_update_of_missing_voice_reports_false(self, transport):
        assert update_voice_settings(transport, "voice_missing", {"stability": 0.5}) is False


class TestVoiceSettingsLifecycle:
    def test_apply_then_destroy_restores_defaults(self, provider, platform, tmp_path):
        sample = tmp_path / "sample.mp3"
        sample.write_bytes(b"audio")
        provider.apply("voice.narrator", "voice", {"name": "Narrator", "files": [str(sample)]})
        voice_id = provider.store.get("voice.narrator").id

        plan = provider.apply(
            "voice_settings.narrator",
            "voice_settings",
            {"voice_id": voice_id, "stability": 0.2, "similarity_boost": 0.9, "speed": 1.1},
        )

        assert plan.action == "create"
        assert platform.voice_settings[voice_id]["stability"] == 0.2
        assert platform.voice_settings[voice_id]["speed"] == 1.1

        assert provider.destroy("voice_settings.narrator") is True

        assert platform.voice_settings[voice_id] == DEFAULT_SETTINGS
        assert voice_id in platform.voices

    def test_changing_voice_id_replaces(self, provider):
        first = provider.load(
            "voice_settings", {"voice_id": "voice_a", "stability": 0.5, "similarity_boost": 0.5}
        )
        resource = provider.reconciler.resource("voice_settings")
        second = first.model_copy(update={"voice_id": "voice_b"})

        assert resource.needs_replacement(first, second, {}) is True
        assert resource.needs_replacement(first, first.model_copy(update={"speed": 1.3}), {}) is False

    def test_settings_for_missing_voice_fail_and_persist_nothing(self, provider):
        with pytest.raises(APIError) as exc_info:
            provider.apply(
                "voice_settings.ghost",
                "voice_settings",
                {"voice_id": "voice_missing", "stability": 0.5, "similarity_boost": 0.5},
            )

        assert exc_info.value.status_code == 404
        assert provider.store.get("voice_settings.ghost") is None
