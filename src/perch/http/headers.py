"""Case-insensitive HTTP headers.

``Headers`` indexes the raw byte pairs of an inbound request once,
at construction. ``MutableHeaders`` is the outbound side, owned by a
``ResponseWriter`` while a handler member runs.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Request headers, looked up case-insensitively.

    Built from the ASGI ``(name, value)`` byte pairs. Keys iterate
    lower-cased and once each; indexing gives the first value of a
    repeated header.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        self._index: dict[str, list[str]] = {}
        for name, value in raw:
            self._index.setdefault(name.decode("latin-1").lower(), []).append(
                value.decode("latin-1")
            )

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The byte pairs exactly as the ASGI server sent them."""
        return self._raw

    def __getitem__(self, key: str) -> str:
        values = self._index.get(key.lower())
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def get_list(self, key: str) -> list[str]:
        return list(self._index.get(key.lower(), ()))

    def __repr__(self) -> str:
        shown = {k: v if len(v) > 1 else v[0] for k, v in self._index.items()}
        return f"Headers({shown!r})"


class MutableHeaders:
    """Ordered, case-insensitive response headers.

    Names keep the casing they were first written with. ``set`` replaces
    every value for a name, ``add`` appends another one.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[tuple[str, str]] = []

    def set(self, name: str, value: str) -> None:
        """Replace all values of *name* with *value*."""
        self.delete(name)
        self._items.append((name, value))

    def add(self, name: str, value: str) -> None:
        """Append a value for *name*, keeping existing ones."""
        self._items.append((name, value))

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for *name*, or *default*."""
        lowered = name.lower()
        for key, value in self._items:
            if key.lower() == lowered:
                return value
        return default

    def get_list(self, name: str) -> list[str]:
        """Return all values for *name*."""
        lowered = name.lower()
        return [value for key, value in self._items if key.lower() == lowered]

    def delete(self, name: str) -> None:
        """Remove every value for *name*."""
        lowered = name.lower()
        self._items = [(key, value) for key, value in self._items if key.lower() != lowered]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"MutableHeaders({self._items!r})"

    def items(self) -> tuple[tuple[str, str], ...]:
        """All header pairs in write order."""
        return tuple(self._items)
