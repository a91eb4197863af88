"""Translate between tool configs and the platform's ``tool_config`` payloads."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from elevenlabs_iac.exceptions import TransportError
from elevenlabs_iac.tools.schemas import (
    ApiSchema,
    ParamSchema,
    QueryParamsSchema,
    ToolConfig,
    ToolState,
)


def _encode_api_schema(api_schema: ApiSchema) -> dict[str, Any]:
    encoded: dict[str, Any] = {"url": api_schema.url, "method": api_schema.method}
    if api_schema.path_params_schema is not None:
        encoded["path_params_schema"] = {
            name: param.model_dump() for name, param in api_schema.path_params_schema.items()
        }
    if api_schema.query_params_schema is not None:
        encoded["query_params_schema"] = api_schema.query_params_schema.model_dump()
    if api_schema.request_body_schema is not None:
        encoded["request_body_schema"] = api_schema.request_body_schema
    if api_schema.request_headers is not None:
        encoded["request_headers"] = dict(api_schema.request_headers)
    return encoded


def encode(config: ToolConfig) -> dict[str, Any]:
    """Build the create/update payload. Unset optionals are omitted."""
    tool: dict[str, Any] = {
        "name": config.name,
        "description": config.description,
        "type": config.type,
    }
    for field in ("response_timeout_secs", "disable_interruptions", "force_pre_tool_speech"):
        value = getattr(config, field)
        if value is not None:
            tool[field] = value
    if config.api_schema is not None:
        tool["api_schema"] = _encode_api_schema(config.api_schema)
    return {"tool_config": tool}


def _decode_params(params: dict[str, Any]) -> dict[str, ParamSchema]:
    return {
        name: ParamSchema(type=param.get("type", "string"), description=param.get("description") or "")
        for name, param in params.items()
    }


def _decode_api_schema(data: dict[str, Any]) -> ApiSchema:
    query_params = None
    if data.get("query_params_schema") is not None:
        query = data["query_params_schema"]
        query_params = QueryParamsSchema(
            properties=_decode_params(query.get("properties") or {}),
            required=query.get("required") or [],
        )

    path_params = None
    if data.get("path_params_schema") is not None:
        path_params = _decode_params(data["path_params_schema"])

    return ApiSchema(
        url=data.get("url", ""),
        method=data.get("method") or "GET",
        path_params_schema=path_params,
        query_params_schema=query_params,
        request_body_schema=data.get("request_body_schema"),
        request_headers=data.get("request_headers"),
    )


def decode(payload: dict[str, Any], tool_id: str | None = None) -> ToolState:
    """Rebuild observed state from a tool response.

    A response that does not fit the tool schema raises ``TransportError``.
    """
    try:
        return _decode(payload, tool_id)
    except ValidationError as exc:
        raise TransportError(f"Malformed tool response: {exc}") from exc


def _decode(payload: dict[str, Any], tool_id: str | None) -> ToolState:
    # Fields are normally nested under ``tool_config``; a flat body is accepted too
    tool_id = tool_id or payload.get("id")
    if not tool_id:
        raise TransportError("Tool response is missing 'id'")
    tool = payload.get("tool_config") or payload

    api_schema = None
    if tool.get("api_schema") is not None:
        api_schema = _decode_api_schema(tool["api_schema"])

    config = ToolConfig(
        name=tool.get("name", ""),
        description=tool.get("description") or "",
        type=tool.get("type") or "webhook",
        response_timeout_secs=tool.get("response_timeout_secs"),
        disable_interruptions=tool.get("disable_interruptions"),
        force_pre_tool_speech=tool.get("force_pre_tool_speech"),
        api_schema=api_schema,
    )
    return ToolState(tool_id=tool_id, config=config)


def diff(previous: ToolConfig | None, desired: ToolConfig) -> dict[str, Any] | None:
    """Full payload when anything changed, else ``None``."""
    if previous is not None and encode(previous) == encode(desired):
        return None
    return encode(desired)
