"""Unit tests for message builders and id normalization."""

from __future__ import annotations

import json

import pytest

from jsonrpc_peer.exceptions import JsonRpcError, MethodNotFoundError
from jsonrpc_peer.services.builders import (
    create_error_response,
    create_notification,
    create_request,
    create_response,
    encode,
    normalize_id,
)
from jsonrpc_peer.services.ids import SequentialIdGenerator
from jsonrpc_peer.services.parser import parse


class TestNormalizeId:
    """Tests for normalize_id()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, None),
            (1, 1),
            (0, 0),
            ("abc", "abc"),
            ("42.0", "42.0"),
            (42.0, 42),
            (1.5, 1.5),
            (float("inf"), "inf"),
            (True, "true"),
            (False, "false"),
        ],
    )
    def test_normalization(self, value: object, expected: object) -> None:
        """Test ids are numbers, strings or None."""
        assert normalize_id(value) == expected
        if expected is not None:
            assert type(normalize_id(value)) is type(expected)


class TestCreateRequest:
    """Tests for create_request()."""

    def test_auto_id(self) -> None:
        """Test ids are drawn from the generator when omitted."""
        generator = SequentialIdGenerator()

        first = create_request("subtract", [42, 23], id_generator=generator)
        second = create_request("subtract", [42, 23], id_generator=generator)

        assert first.id == 1
        assert second.id == 2

    def test_explicit_id_is_normalized(self) -> None:
        """Test explicit non-numeric ids are stringified."""
        assert create_request("ping", id=7).id == 7
        assert create_request("ping", id=True).id == "true"

    def test_missing_id_without_generator(self) -> None:
        """Test an id source is required."""
        with pytest.raises(ValueError):
            create_request("ping")

    def test_params_omitted_when_none(self) -> None:
        """Test params key disappears when there are no params."""
        wire = create_request("foobar", id=3).model_dump()

        assert wire == {"jsonrpc": "2.0", "method": "foobar", "id": 3}

    @pytest.mark.parametrize("request_id", [1, "req-1", None])
    def test_parse_round_trip(self, request_id: object) -> None:
        """Test parse(encode(request)) reproduces the request."""
        params = {"a": [1, {"b": None}], "c": 0}
        request = create_request("method.name", params, request_id, id_generator=SequentialIdGenerator())

        decoded = parse(encode(request))

        assert decoded == request.model_dump()
        assert decoded["method"] == "method.name"
        assert decoded.get("params") == params


class TestCreateNotification:
    """Tests for create_notification()."""

    def test_no_id(self) -> None:
        """Test notifications carry no id."""
        notification = create_notification("update", [1, 2, 3, 4, 5])

        assert notification.model_dump() == {
            "jsonrpc": "2.0",
            "method": "update",
            "params": [1, 2, 3, 4, 5],
        }


class TestCreateResponse:
    """Tests for create_response()."""

    def test_null_result(self) -> None:
        """Test a missing result becomes explicit null."""
        assert create_response(20, None).model_dump() == {"jsonrpc": "2.0", "result": None, "id": 20}
        assert create_response("test").model_dump() == {"jsonrpc": "2.0", "result": None, "id": "test"}

    @pytest.mark.parametrize("result", [0, False, "", [], {}])
    def test_falsy_results_preserved(self, result: object) -> None:
        """Test falsy but meaningful results are not turned into null."""
        assert create_response(1, result).model_dump()["result"] == result

    def test_fractional_id_stays_numeric(self) -> None:
        """Test a fractional numeric id is echoed as a number."""
        assert json.loads(encode(create_response(1.5, 1)))["id"] == 1.5

    def test_missing_id_becomes_null(self) -> None:
        """Test unknown ids are emitted as null."""
        assert create_response(None, 1).model_dump()["id"] is None

    def test_non_numeric_id_stringified(self) -> None:
        """Test non-numeric ids are stringified."""
        assert create_response(True, 1).model_dump()["id"] == "true"

    def test_error_response(self) -> None:
        """Test errors are converted and result is omitted."""
        wire = create_response(1, "ignored", ValueError("boom")).model_dump()

        assert wire == {
            "jsonrpc": "2.0",
            "error": {"code": -32603, "message": "boom"},
            "id": 1,
        }

    def test_error_keeps_jsonrpc_error_fields(self) -> None:
        """Test JsonRpcError codes and data reach the wire."""
        wire = create_error_response("a", MethodNotFoundError(data={"method": "x"})).model_dump()

        assert wire["error"] == {"code": -32601, "message": "Method not found", "data": {"method": "x"}}
        assert wire["id"] == "a"

    @pytest.mark.parametrize(
        ("result", "error"),
        [(None, None), (5, None), (None, JsonRpcError()), (5, RuntimeError("x"))],
    )
    def test_exactly_one_of_result_or_error(self, result: object, error: object) -> None:
        """Test every built response carries exactly one of result/error."""
        wire = json.loads(encode(create_response(1, result, error)))

        assert ("result" in wire) != ("error" in wire)


class TestEncode:
    """Tests for encode()."""

    def test_batch(self) -> None:
        """Test a list of responses encodes as a JSON array."""
        text = encode([create_response("1", "testsum"), create_response(2, None)])

        assert json.loads(text) == [
            {"jsonrpc": "2.0", "result": "testsum", "id": "1"},
            {"jsonrpc": "2.0", "result": None, "id": 2},
        ]
