"""
Mock ElevenLabs platform API: FastAPI app with in-memory storage.

Serves the agent, tool, voice, voice-settings and knowledge-base endpoints the
provider talks to, so the provider can be exercised end to end without a real
account. Tests drive it through ``fastapi.testclient.TestClient``; it can
also be served with ``uvicorn mock_platform.main:app``.

Endpoints:
    POST   /v1/convai/agents/create            create agent
    GET    /v1/convai/agents/{id}              get agent
    PUT    /v1/convai/agents/{id}/update       replace agent config
    DELETE /v1/convai/agents/{id}/delete       delete agent
    POST   /v1/convai/tools/create             create tool
    GET|PUT|DELETE /v1/convai/tools/{id}       get / replace / delete tool
    POST   /v1/voices/add                      clone voice (multipart)
    GET    /v2/voices                          search voices
    GET    /v1/voices/{id}/settings            get voice settings
    POST   /v1/voices/{id}/settings/edit       edit voice settings
    DELETE /v1/voices/{id}                     delete voice
    POST   /v1/knowledge-base/documents/create-from-{url,text,file}
    GET|DELETE /v1/knowledge-base/documents/{id}
"""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from fastapi import (
    APIRouter,
    Body,
    Depends,
    FastAPI,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
)

DEFAULT_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
    "speed": 1.0,
}


@dataclass
class PlatformStore:
    """Everything the mock platform remembers, keyed by id."""

    agents: dict[str, dict[str, Any]] = field(default_factory=dict)
    tools: dict[str, dict[str, Any]] = field(default_factory=dict)
    voices: dict[str, dict[str, Any]] = field(default_factory=dict)
    voice_settings: dict[str, dict[str, Any]] = field(default_factory=dict)
    documents: dict[str, dict[str, Any]] = field(default_factory=dict)
    # (method, path) of every accepted request, in order
    requests: list[tuple[str, str]] = field(default_factory=list)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _store(request: Request) -> PlatformStore:
    store: PlatformStore = request.app.state.platform
    store.requests.append((request.method, request.url.path))
    return store


def _require_api_key(xi_api_key: str | None = Header(None)) -> None:
    if not xi_api_key:
        raise HTTPException(status_code=401, detail="Missing xi-api-key header")


def _get_or_404(items: dict[str, dict[str, Any]], item_id: str, kind: str) -> dict[str, Any]:
    if item_id not in items:
        raise HTTPException(status_code=404, detail=f"{kind} '{item_id}' not found")
    return items[item_id]


# ---------------------------------------------------------------------------
# Agents API
# ---------------------------------------------------------------------------

agents_router = APIRouter(prefix="/v1/convai/agents", tags=["agents"])


@agents_router.post("/create")
def create_agent(request: Request, body: dict[str, Any] = Body(...)):
    if "conversation_config" not in body:
        raise HTTPException(status_code=422, detail="conversation_config is required")
    agent_id = _new_id("agent")
    _store(request).agents[agent_id] = {"agent_id": agent_id, **body}
    return {"agent_id": agent_id}


@agents_router.get("/{agent_id}")
def get_agent(agent_id: str, request: Request):
    return _get_or_404(_store(request).agents, agent_id, "Agent")


@agents_router.put("/{agent_id}/update")
def update_agent(agent_id: str, request: Request, body: dict[str, Any] = Body(...)):
    store = _store(request)
    _get_or_404(store.agents, agent_id, "Agent")
    store.agents[agent_id] = {"agent_id": agent_id, **body}
    return store.agents[agent_id]


@agents_router.delete("/{agent_id}/delete", status_code=204)
def delete_agent(agent_id: str, request: Request):
    store = _store(request)
    _get_or_404(store.agents, agent_id, "Agent")
    del store.agents[agent_id]
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Tools API
# ---------------------------------------------------------------------------

tools_router = APIRouter(prefix="/v1/convai/tools", tags=["tools"])


def _tool_config(body: dict[str, Any]) -> dict[str, Any]:
    tool_config = body.get("tool_config")
    if not isinstance(tool_config, dict) or not tool_config.get("name"):
        raise HTTPException(status_code=422, detail="tool_config.name is required")
    return tool_config


@tools_router.post("/create")
def create_tool(request: Request, body: dict[str, Any] = Body(...)):
    tool_id = _new_id("tool")
    tool = {"id": tool_id, "tool_config": _tool_config(body)}
    _store(request).tools[tool_id] = tool
    return tool


@tools_router.get("/{tool_id}")
def get_tool(tool_id: str, request: Request):
    return _get_or_404(_store(request).tools, tool_id, "Tool")


@tools_router.put("/{tool_id}")
def update_tool(tool_id: str, request: Request, body: dict[str, Any] = Body(...)):
    store = _store(request)
    _get_or_404(store.tools, tool_id, "Tool")
    store.tools[tool_id] = {"id": tool_id, "tool_config": _tool_config(body)}
    return store.tools[tool_id]


@tools_router.delete("/{tool_id}", status_code=204)
def delete_tool(tool_id: str, request: Request):
    store = _store(request)
    _get_or_404(store.tools, tool_id, "Tool")
    del store.tools[tool_id]
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Voices API
# ---------------------------------------------------------------------------

voices_router = APIRouter(tags=["voices"])


@voices_router.post("/v1/voices/add")
def add_voice(
    request: Request,
    files: list[UploadFile] = File(...),
    name: str = Form(...),
    description: str | None = Form(None),
    labels: str | None = Form(None),
):
    voice_id = _new_id("voice")
    samples = [
        {"file_name": upload.filename, "size_bytes": len(upload.file.read())}
        for upload in files
    ]
    store = _store(request)
    store.voices[voice_id] = {
        "voice_id": voice_id,
        "name": name,
        "description": description,
        "labels": json.loads(labels) if labels else {},
        "samples": samples,
        "category": "cloned",
    }
    store.voice_settings[voice_id] = dict(DEFAULT_SETTINGS)
    return {"voice_id": voice_id}


@voices_router.get("/v2/voices")
def search_voices(
    request: Request,
    voice_ids: list[str] | None = Query(None),
    search: str | None = Query(None),
    category: str | None = Query(None),
    sort: str | None = Query(None),
    sort_direction: str | None = Query(None),
    voice_type: str | None = Query(None),
):
    voices = list(_store(request).voices.values())
    if voice_ids:
        voices = [v for v in voices if v["voice_id"] in voice_ids]
    if search:
        voices = [v for v in voices if search.lower() in v["name"].lower()]
    if category:
        voices = [v for v in voices if v.get("category") == category]
    if sort == "name":
        voices.sort(key=lambda v: v["name"], reverse=sort_direction == "desc")
    return {"voices": voices, "has_more": False, "total_count": len(voices)}


@voices_router.get("/v1/voices/{voice_id}/settings")
def get_voice_settings(voice_id: str, request: Request):
    return _get_or_404(_store(request).voice_settings, voice_id, "Voice")


@voices_router.post("/v1/voices/{voice_id}/settings/edit")
def edit_voice_settings(voice_id: str, request: Request, body: dict[str, Any] = Body(...)):
    store = _store(request)
    _get_or_404(store.voice_settings, voice_id, "Voice")
    missing = [key for key in ("stability", "similarity_boost") if key not in body]
    if missing:
        raise HTTPException(status_code=422, detail=f"missing fields: {', '.join(missing)}")
    store.voice_settings[voice_id] = {**DEFAULT_SETTINGS, **body}
    return {"status": "ok"}


@voices_router.delete("/v1/voices/{voice_id}")
def delete_voice(voice_id: str, request: Request):
    store = _store(request)
    _get_or_404(store.voices, voice_id, "Voice")
    del store.voices[voice_id]
    store.voice_settings.pop(voice_id, None)
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Knowledge-base API
# ---------------------------------------------------------------------------

documents_router = APIRouter(prefix="/v1/knowledge-base/documents", tags=["knowledge-base"])


def _add_document(
    request: Request,
    name: str,
    source_type: str,
    size_bytes: int,
    mime_type: str | None,
    source_url: str | None = None,
) -> dict[str, Any]:
    doc_id = _new_id("doc")
    _store(request).documents[doc_id] = {
        "id": doc_id,
        "name": name,
        "source_type": source_type,
        "source_url": source_url,
        "mime_type": mime_type or "text/plain",
        "size_bytes": size_bytes,
        "status": "ready",
        "created_at_unix": int(time.time()),
    }
    return {"document_id": doc_id, "status": "ready", "message": "Document created"}


@documents_router.post("/create-from-url")
def create_from_url(request: Request, body: dict[str, Any] = Body(...)):
    if not body.get("url") or not body.get("name"):
        raise HTTPException(status_code=422, detail="url and name are required")
    return _add_document(
        request, body["name"], "url", 0, body.get("mime_type") or "text/html",
        source_url=body["url"],
    )


@documents_router.post("/create-from-text")
def create_from_text(request: Request, body: dict[str, Any] = Body(...)):
    if not body.get("text") or not body.get("name"):
        raise HTTPException(status_code=422, detail="text and name are required")
    return _add_document(
        request, body["name"], "text", len(body["text"].encode("utf-8")), body.get("mime_type")
    )


@documents_router.post("/create-from-file")
def create_from_file(
    request: Request,
    file: UploadFile = File(...),
    name: str = Form(...),
    mime_type: str | None = Form(None),
):
    content = file.file.read()
    return _add_document(request, name, "file", len(content), mime_type or file.content_type)


@documents_router.get("/{document_id}")
def get_document(document_id: str, request: Request):
    return _get_or_404(_store(request).documents, document_id, "Document")


@documents_router.delete("/{document_id}", status_code=204)
def delete_document(document_id: str, request: Request):
    store = _store(request)
    _get_or_404(store.documents, document_id, "Document")
    del store.documents[document_id]
    return Response(status_code=204)


def create_app() -> FastAPI:
    """Build a fresh mock platform with empty storage."""
    app = FastAPI(
        title="Mock ElevenLabs Platform API",
        description="In-memory stand-in for the ElevenLabs REST API.",
        version="1.0.0",
        dependencies=[Depends(_require_api_key)],
    )
    app.state.platform = PlatformStore()
    for router in (agents_router, tools_router, voices_router, documents_router):
        app.include_router(router)
    return app


app = create_app()
