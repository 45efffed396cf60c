"""Unified tool response envelope contracts.

All tool business payloads are wrapped by this module so response shapes
stay consistent across file and git tools.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field, model_validator


class ToolError(BaseModel):
    """Structured business error for tool payloads."""

    code: str = Field(description="Stable machine-readable error code")
    message: str = Field(description="Human-readable error summary")
    details: dict[str, Any] | None = Field(
        default=None, description="Optional structured error details"
    )


class ToolEnvelope(BaseModel):
    """Unified response shape for all tool business results."""

    ok: bool = Field(description="Business-level success flag")
    data: Any | None = Field(default=None, description="Tool-specific payload")
    error: ToolError | None = Field(default=None, description="Structured error payload")

    @model_validator(mode="after")
    def _validate_coherence(self) -> "ToolEnvelope":
        if self.ok and self.error is not None:
            raise ValueError("ok=true responses must not include error")
        if not self.ok and self.error is None:
            raise ValueError("ok=false responses must include error")
        return self


class FileEntry(BaseModel):
    """One file reported by the bridge's list operation."""

    name: str
    path: str
    is_directory: bool = Field(default=False, alias="isDirectory")


class GitChange(BaseModel):
    """One uncommitted change reported by the bridge's git-status operation."""

    file: str
    status: str
    type: str


def build_ok(data: Any) -> dict[str, Any]:
    """Build and validate a success envelope."""
    return ToolEnvelope(ok=True, data=data).model_dump(exclude_none=True)


def build_error(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    *,
    data: Any | None = None,
) -> dict[str, Any]:
    """Build and validate an error envelope."""
    return ToolEnvelope(
        ok=False,
        data=data,
        error=ToolError(code=code, message=message, details=details),
    ).model_dump(exclude_none=True)


def build_error_from_response(
    operation: str,
    payload: Mapping[str, Any],
    *,
    default_code: str = "operation_error",
) -> dict[str, Any]:
    """Adapt a failed bridge response ``{kind?, success: false, error}`` to the envelope."""
    message = str(payload.get("error") or f"{operation} failed")
    details = {
        str(k): v
        for k, v in payload.items()
        if k not in {"success", "error"}
    }
    details["operation"] = operation
    return build_error(default_code, message, details)
