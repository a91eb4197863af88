"""Tests for knowledge-base documents."""

import pytest
from pydantic import ValidationError

from elevenlabs_iac.exceptions import APIError, ConfigurationError, LocalIOError, TransportError
from elevenlabs_iac.hashing import content_hash
from elevenlabs_iac.knowledge_base import mapper
from elevenlabs_iac.knowledge_base.schemas import KnowledgeBaseDocumentConfig
from elevenlabs_iac.knowledge_base.service import (
    create_document,
    delete_document,
    get_document,
)


class TestDocumentConfig:
    @pytest.mark.parametrize("sources", [
        {},
        {"source_url": "https://example.com", "source_text": "hello"},
        {"source_text": "hello", "source_file_path": "faq.md"},
    ])
    def test_exactly_one_source(self, sources):
        with pytest.raises(ValidationError, match="exactly one"):
            KnowledgeBaseDocumentConfig(name="FAQ", **sources)

    def test_source_type(self):
        assert KnowledgeBaseDocumentConfig(name="a", source_url="https://x").source_type == "url"
        assert KnowledgeBaseDocumentConfig(name="a", source_text="t").source_type == "text"
        assert KnowledgeBaseDocumentConfig(name="a", source_file_path="f").source_type == "file"


class TestCreateDocument:
    def test_url_document(self, transport, platform):
        config = KnowledgeBaseDocumentConfig(name="Docs", source_url="https://example.com/docs")

        state = create_document(transport, config)

        assert state.source_type == "url"
        assert state.source_hash is None
        fetched = get_document(transport, state.document_id)
        assert fetched.config.source_url == "https://example.com/docs"
        assert fetched.config.name == "Docs"
        assert platform.requests[0] == ("POST", "/v1/knowledge-base/documents/create-from-url")

    def test_text_document_is_hashed_and_carried_forward(self, transport):
        config = KnowledgeBaseDocumentConfig(name="Policy", source_text="Refunds within 30 days.")

        state = create_document(transport, config)

        assert state.source_hash == content_hash("Refunds within 30 days.")
        fetched = get_document(transport, state.document_id, previous=config, stored_hash=state.source_hash)
        assert fetched.config == config
        assert fetched.source_hash == state.source_hash
        assert fetched.size_bytes == len("Refunds within 30 days.")
        assert fetched.status == "ready"

    def test_file_document(self, transport, platform, tmp_path):
        path = tmp_path / "faq.md"
        path.write_text("# FAQ\n\nQ: hours?\nA: 9-5\n")
        config = KnowledgeBaseDocumentConfig(name="FAQ", source_file_path=path, mime_type="text/markdown")

        state = create_document(transport, config)

        assert state.source_hash == content_hash(path.read_bytes())
        stored = platform.documents[state.document_id]
        assert stored["size_bytes"] == len(path.read_bytes())
        assert stored["mime_type"] == "text/markdown"
        fetched = get_document(transport, state.document_id, previous=config)
        assert fetched.config == config

    def test_missing_file_sends_nothing(self, transport, platform, tmp_path):
        config = KnowledgeBaseDocumentConfig(name="FAQ", source_file_path=tmp_path / "missing.md")

        with pytest.raises(LocalIOError):
            create_document(transport, config)

        assert platform.requests == []

    def test_create_404_is_an_api_error(self, mock_transport, recorder):
        transport = mock_transport(recorder(status_code=404, content=b'{"detail":"not found"}'))
        config = KnowledgeBaseDocumentConfig(name="Docs", source_url="https://example.com/docs")

        with pytest.raises(APIError) as exc_info:
            create_document(transport, config)

        assert exc_info.value.status_code == 404

    def test_delete_then_get_is_absent(self, transport):
        state = create_document(transport, KnowledgeBaseDocumentConfig(name="a", source_text="t"))

        delete_document(transport, state.document_id)

        assert get_document(transport, state.document_id) is None


class TestDocumentMapper:
    def test_content_changed_after_file_edit(self, tmp_path):
        path = tmp_path / "faq.md"
        path.write_text("v1")
        config = KnowledgeBaseDocumentConfig(name="FAQ", source_file_path=path)
        stored = mapper.source_hash(config)

        assert mapper.content_changed(config, stored) is False
        path.write_text("v2")
        assert mapper.content_changed(config, stored) is True

    def test_url_content_never_changes(self):
        config = KnowledgeBaseDocumentConfig(name="a", source_url="https://x")
        assert mapper.content_changed(config, None) is False

    def test_text_source_cannot_be_rebuilt_without_previous(self):
        with pytest.raises(ConfigurationError):
            mapper.decode({"id": "doc_1", "name": "a", "source_type": "text"}, None)

    def test_unset_mime_type_is_not_tracked(self):
        config = KnowledgeBaseDocumentConfig(name="a", source_text="t")
        state = mapper.decode(
            {"id": "doc_1", "name": "a", "source_type": "text", "mime_type": "text/plain"}, config
        )
        assert state.config.mime_type is None
        assert mapper.encode(state.config) == mapper.encode(config)

    def test_url_document_without_url_is_a_transport_error(self):
        with pytest.raises(TransportError, match="Malformed knowledge-base document response"):
            mapper.decode({"id": "doc_1", "name": "a", "source_type": "url"}, None)

    def test_document_id_falls_back_to_id(self):
        assert mapper.document_id({"id": "doc_9"}) == "doc_9"
