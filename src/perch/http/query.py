"""Query string access for ``Request.query``."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Read-only view of a query string.

    Indexing gives the first value of a repeated key and ``get_list``
    gives all of them, in order. ``?flag=`` is kept as ``""`` so that
    ``Context.param`` can tell an empty value from an absent one.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, query_string: bytes = b"") -> None:
        self._raw = query_string
        self._values: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string.decode("latin-1"), keep_blank_values=True):
            self._values.setdefault(key, []).append(value)

    @property
    def raw(self) -> bytes:
        """The query string as received, without the leading ``?``."""
        return self._raw

    def __getitem__(self, key: str) -> str:
        return self._values[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key, ()))

    def __repr__(self) -> str:
        return f"QueryParams({self._raw.decode('latin-1')!r})"
