"""Validation models and utilities for dev bridge MCP tools."""

from typing import Annotated, Optional

from pydantic import Field
from pydantic.functional_validators import AfterValidator


COMMIT_MESSAGE_MAX_LENGTH = 500


def validate_non_empty_string(value: str) -> str:
    """Validate that a string is not empty after stripping whitespace."""
    stripped = value.strip()
    if not stripped:
        raise ValueError("Value cannot be empty or whitespace only")
    return stripped


def validate_commit_message(value: Optional[str]) -> Optional[str]:
    """Validate an optional commit message (blank means the bridge default)."""
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        return None
    if len(stripped) > COMMIT_MESSAGE_MAX_LENGTH:
        raise ValueError(f"message is too long (max {COMMIT_MESSAGE_MAX_LENGTH} chars)")
    return stripped


FilePath = Annotated[
    str,
    AfterValidator(validate_non_empty_string),
    Field(
        ...,
        description="File path, relative to the bridge workspace or absolute",
    ),
]

DirectoryPath = Annotated[
    str,
    AfterValidator(validate_non_empty_string),
    Field(
        default=".",
        description="Directory to list recursively (node_modules and dist are skipped)",
    ),
]

FileContent = Annotated[
    str,
    Field(..., description="Full file content; replaces any existing content"),
]

NewFileContent = Annotated[
    str,
    Field(default="", description="Initial file content (default: empty)"),
]

DiffFile = Annotated[
    Optional[str],
    Field(default=None, description="Limit the diff to this file. Omit for the whole working tree."),
]

CommitMessage = Annotated[
    Optional[str],
    AfterValidator(validate_commit_message),
    Field(default=None, description="Commit message (default: 'Update files')"),
]
