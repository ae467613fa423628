"""Tests for perch.http.query — immutable QueryParams."""

import pytest

from perch.http.query import QueryParams


class TestQueryParams:
    def test_getitem(self) -> None:
        q = QueryParams(b"q=hello&page=2")
        assert q["q"] == "hello"
        assert q["page"] == "2"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            QueryParams(b"q=hello")["missing"]

    def test_contains_and_len(self) -> None:
        q = QueryParams(b"a=1&b=2&c=3")
        assert "a" in q
        assert "missing" not in q
        assert len(q) == 3
        assert set(q) == {"a", "b", "c"}

    def test_get_with_default(self) -> None:
        q = QueryParams(b"q=hello")
        assert q.get("q") == "hello"
        assert q.get("missing") is None
        assert q.get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        q = QueryParams(b"tag=python&tag=go&q=hello")
        assert q.get_list("tag") == ["python", "go"]
        assert q.get_list("missing") == []

    def test_first_value_returned(self) -> None:
        assert QueryParams(b"x=first&x=second")["x"] == "first"

    def test_blank_value_preserved(self) -> None:
        assert QueryParams(b"flag=")["flag"] == ""

    def test_percent_decoding(self) -> None:
        assert QueryParams(b"name=a%20b+c")["name"] == "a b c"

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.raw == b""

    def test_raw(self) -> None:
        assert QueryParams(b"a=1&b=2").raw == b"a=1&b=2"

    def test_repr(self) -> None:
        assert "hello" in repr(QueryParams(b"q=hello"))
