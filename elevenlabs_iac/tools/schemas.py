"""Pydantic models for the webhook tool resource."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class ParamSchema(BaseModel):
    """Literal JSON-schema property for a path or query parameter."""

    type: str
    description: str = ""


class QueryParamsSchema(BaseModel):
    properties: dict[str, ParamSchema]
    required: list[str] = []

    @model_validator(mode="after")
    def _required_are_declared(self) -> QueryParamsSchema:
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(
                f"required query params not declared in properties: {', '.join(unknown)}"
            )
        return self


class ApiSchema(BaseModel):
    url: str = Field(..., min_length=1)
    method: str = "GET"
    path_params_schema: dict[str, ParamSchema] | None = None
    query_params_schema: QueryParamsSchema | None = None
    request_body_schema: dict[str, Any] | None = None
    request_headers: dict[str, str] | None = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, method: str) -> str:
        return method.upper()

    @field_validator("request_body_schema", mode="before")
    @classmethod
    def _parse_body_schema(cls, value: Any) -> Any:
        # Accept a JSON document as a string, e.g. from a config file
        if isinstance(value, str):
            if not value:
                return None
            try:
                value = json.loads(value)
            except ValueError as exc:
                raise ValueError(f"request_body_schema contains invalid JSON: {exc}") from exc
        return value


class ToolConfig(BaseModel):
    """Desired state of a tool."""

    name: str = Field(..., min_length=1)
    description: str = ""
    type: str = "webhook"
    response_timeout_secs: int | None = Field(None, gt=0)
    disable_interruptions: bool | None = None
    force_pre_tool_speech: bool | None = None
    api_schema: ApiSchema | None = None


class ToolState(BaseModel):
    tool_id: str
    config: ToolConfig
