"""Tests for request decoding and response shapes."""

import json

import pytest

from devbridge.protocol import (
    Request,
    RequestError,
    RequestKind,
    build_error,
    build_failure,
    build_success,
    parse_request,
    require_field,
)


# ── parse_request ────────────────────────────────────────────────────


class TestParseRequest:

    def test_file_request(self):
        request = parse_request('{"kind": "write", "path": "src/a.ts", "content": "x"}')
        assert request == Request(kind=RequestKind.WRITE, path="src/a.ts", content="x")

    def test_git_request_fields(self):
        request = parse_request('{"kind": "git-commit", "message": "fix"}')
        assert request.kind is RequestKind.GIT_COMMIT
        assert request.message == "fix"
        assert request.path is None

    def test_bytes_payload(self):
        request = parse_request(b'{"kind": "git-diff", "file": "README.md"}')
        assert request.kind is RequestKind.GIT_DIFF
        assert request.file == "README.md"

    def test_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            parse_request("not json")

    def test_non_object(self):
        with pytest.raises(RequestError, match="JSON object"):
            parse_request('["read"]')

    def test_missing_kind(self):
        with pytest.raises(RequestError, match="kind required"):
            parse_request('{"path": "a.txt"}')

    def test_unknown_kind(self):
        with pytest.raises(RequestError, match="Unknown request kind: rename"):
            parse_request('{"kind": "rename", "path": "a.txt"}')

    def test_non_string_field(self):
        with pytest.raises(RequestError, match="content must be a string"):
            parse_request('{"kind": "write", "path": "a.txt", "content": 5}')


# ── kinds and helpers ────────────────────────────────────────────────


def test_kind_groups():
    git_kinds = {kind for kind in RequestKind if kind.is_git}
    assert git_kinds == {
        RequestKind.GIT_STATUS,
        RequestKind.GIT_DIFF,
        RequestKind.GIT_COMMIT,
        RequestKind.GIT_PUSH,
    }
    assert all(kind.is_file for kind in set(RequestKind) - git_kinds)


def test_require_field():
    request = Request(kind=RequestKind.READ, path="a.txt")
    assert require_field(request, "path") == "a.txt"

    with pytest.raises(RequestError, match="path required"):
        require_field(Request(kind=RequestKind.READ), "path")


def test_response_builders():
    assert build_success(RequestKind.CREATE, path="a/b/c.txt") == {
        "kind": "create",
        "path": "a/b/c.txt",
        "success": True,
    }
    assert build_failure(RequestKind.GIT_PUSH, "rejected") == {
        "kind": "git-push",
        "error": "rejected",
        "success": False,
    }
    assert build_error("boom") == {"error": "boom", "success": False}
    # Responses must be plain JSON
    assert json.loads(json.dumps(build_success(RequestKind.LIST, files=[]))) == {
        "kind": "list",
        "files": [],
        "success": True,
    }
