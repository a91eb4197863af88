"""Tests for agent mapping and CRUD."""

import itertools

import pytest

from elevenlabs_iac.agents import mapper
from elevenlabs_iac.agents.schemas import (
    AgentConfig,
    AgentSettings,
    ConversationConfig,
    KnowledgeBaseRef,
    PromptSettings,
    TTSSettings,
)
from elevenlabs_iac.agents.service import create_agent, delete_agent, get_agent, update_agent
from elevenlabs_iac.exceptions import APIError, TransportError


def make_agent(
    with_tts=True,
    with_kb=True,
    with_tools=True,
    with_tags=True,
    with_scalars=True,
    prompt="You are a helpful support agent.",
):
    return AgentConfig(
        name="Support" if with_scalars else None,
        conversation_config=ConversationConfig(
            agent=AgentSettings(
                first_message="Hi, how can I help?" if with_scalars else None,
                language="en" if with_scalars else None,
                prompt=PromptSettings(
                    prompt=prompt,
                    llm="gpt-4o",
                    temperature=0.3 if with_scalars else None,
                    max_tokens=512 if with_scalars else None,
                    tool_ids=["tool_a", "tool_b"] if with_tools else None,
                    knowledge_base=(
                        [KnowledgeBaseRef(type="url", name="FAQ", id="doc_1")]
                        if with_kb else None
                    ),
                ),
            ),
            tts=(
                TTSSettings(voice_id="voice_1", stability=0.5, speed=1.1, similarity_boost=0.8)
                if with_tts else None
            ),
        ),
        tags=["support", "prod"] if with_tags else None,
    )


class TestAgentMapper:
    """encode / decode / diff for agents."""

    @pytest.mark.parametrize(
        "with_tts,with_kb,with_tools,with_tags,with_scalars",
        list(itertools.product([True, False], repeat=5)),
    )
    def test_decode_restores_encoded_fields(self, with_tts, with_kb, with_tools, with_tags, with_scalars):
        config = make_agent(with_tts, with_kb, with_tools, with_tags, with_scalars)

        state = mapper.decode({"agent_id": "agent_1", **mapper.encode(config)})

        assert state.agent_id == "agent_1"
        assert state.config == config

    def test_unset_optionals_are_omitted(self):
        config = make_agent(with_tts=False, with_kb=False, with_tools=False, with_tags=False, with_scalars=False)
        payload = mapper.encode(config)

        assert "tts" not in payload["conversation_config"]
        assert "tags" not in payload
        assert "name" not in payload
        prompt = payload["conversation_config"]["agent"]["prompt"]
        assert prompt == {"prompt": "You are a helpful support agent.", "llm": "gpt-4o"}

    def test_required_prompt_is_always_sent(self):
        payload = mapper.encode(make_agent())
        assert payload["conversation_config"]["agent"]["prompt"]["prompt"]

    def test_absent_tts_block_decodes_to_not_configured(self):
        payload = {
            "agent_id": "a",
            "conversation_config": {"agent": {"prompt": {"prompt": "p"}}},
        }
        assert mapper.decode(payload).config.conversation_config.tts is None

    def test_empty_tts_block_decodes_to_configured(self):
        payload = {
            "agent_id": "a",
            "conversation_config": {"agent": {"prompt": {"prompt": "p"}}, "tts": {}},
        }
        assert mapper.decode(payload).config.conversation_config.tts == TTSSettings()

    def test_absent_knowledge_base_is_distinct_from_empty(self):
        absent = mapper.decode(
            {"agent_id": "a", "conversation_config": {"agent": {"prompt": {"prompt": "p"}}}}
        )
        empty = mapper.decode(
            {"agent_id": "a", "conversation_config": {"agent": {"prompt": {"prompt": "p", "knowledge_base": []}}}}
        )
        assert absent.config.conversation_config.agent.prompt.knowledge_base is None
        assert empty.config.conversation_config.agent.prompt.knowledge_base == []

    def test_missing_agent_id_rejected(self):
        with pytest.raises(TransportError):
            mapper.decode({"conversation_config": {"agent": {"prompt": {"prompt": "p"}}}})

    def test_diff_unchanged_is_none(self):
        assert mapper.diff(make_agent(), make_agent()) is None

    def test_diff_changed_resends_everything(self):
        desired = make_agent(prompt="New prompt")
        payload = mapper.diff(make_agent(), desired)
        assert payload == mapper.encode(desired)
        assert payload["conversation_config"]["tts"]["voice_id"] == "voice_1"

    def test_diff_without_previous_is_full_payload(self):
        assert mapper.diff(None, make_agent()) == mapper.encode(make_agent())

    def test_tags_behave_as_a_set(self):
        config = make_agent()
        reordered = config.model_copy(update={"tags": ["prod", "support", "prod"]})
        reordered = AgentConfig.model_validate(reordered.model_dump())
        assert reordered.tags == ["prod", "support"]
        assert mapper.diff(config, reordered) is None


class TestAgentService:
    """Agent CRUD against the mock platform."""

    def test_create_assigns_identifier(self, transport, platform):
        state = create_agent(transport, make_agent())

        assert state.agent_id.startswith("agent_")
        assert state.agent_id in platform.agents

    def test_read_after_create_matches_desired(self, transport):
        config = make_agent()
        created = create_agent(transport, config)

        fetched = get_agent(transport, created.agent_id)

        assert fetched.agent_id == created.agent_id
        assert fetched.config == config

    def test_get_missing_agent_returns_none(self, transport):
        assert get_agent(transport, "missing") is None

    def test_update_replaces_config(self, transport):
        created = create_agent(transport, make_agent())
        desired = make_agent(with_tts=False, prompt="Be brief.")

        update_agent(transport, created.agent_id, mapper.encode(desired))

        fetched = get_agent(transport, created.agent_id)
        assert fetched.config == desired
        assert fetched.agent_id == created.agent_id

    def test_delete_then_read_is_absent(self, transport):
        created = create_agent(transport, make_agent())

        delete_agent(transport, created.agent_id)

        assert get_agent(transport, created.agent_id) is None

    def test_delete_already_gone_is_not_an_error(self, transport):
        delete_agent(transport, "agent_never_existed")

    def test_create_error_is_surfaced(self, mock_transport, recorder):
        transport = mock_transport(recorder(status_code=422, content=b'{"detail":"invalid llm"}'))

        with pytest.raises(APIError) as exc_info:
            create_agent(transport, make_agent())

        assert "invalid llm" in exc_info.value.body

    def test_create_response_without_id_rejected(self, mock_transport, recorder):
        transport = mock_transport(recorder(payload={}))
        with pytest.raises(TransportError):
            create_agent(transport, make_agent())

    def test_create_404_is_an_api_error(self, mock_transport, recorder):
        transport = mock_transport(recorder(status_code=404, content=b'{"detail":"not found"}'))

        with pytest.raises(APIError) as exc_info:
            create_agent(transport, make_agent())

        assert exc_info.value.status_code == 404

    def test_out_of_range_response_is_a_transport_error(self):
        payload = {"agent_id": "agent_1", **mapper.encode(make_agent())}
        payload["conversation_config"]["agent"]["prompt"]["temperature"] = 5.0

        with pytest.raises(TransportError, match="Malformed agent response"):
            mapper.decode(payload)
