"""Form bodies for ``Request.form()`` and ``Context.param``.

``application/x-www-form-urlencoded`` is decoded with the standard
library. ``multipart/form-data`` is streamed through python-multipart's
callback parser, which is an optional dependency
(``pip install perch[forms]``).
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import TypeAlias
from urllib.parse import parse_qsl

from perch.errors import ConfigurationError

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"
FORM_CONTENT_TYPES = frozenset({URLENCODED, MULTIPART})

OptionsHeader: TypeAlias = tuple[bytes, dict[bytes, bytes]]


@dataclass(frozen=True, slots=True)
class UploadFile:
    """One uploaded file, held in memory."""

    filename: str
    content_type: str
    size: int
    _content: bytes

    async def read(self) -> bytes:
        return self._content

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Text fields of a submitted form, plus its files.

    Fields behave like ``QueryParams``: indexing gives the first value,
    ``get_list`` all of them. Files never appear among the fields.
    """

    __slots__ = ("_fields", "_files")

    def __init__(
        self,
        fields: dict[str, list[str]],
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        self._fields = fields
        self._files = files if files is not None else {}

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._fields[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def get_list(self, key: str) -> list[str]:
        return list(self._fields.get(key, ()))

    def __repr__(self) -> str:
        return f"FormData(fields={sorted(self._fields)!r}, files={sorted(self._files)!r})"


def _media_type(content_type: str) -> str:
    return content_type.partition(";")[0].strip().lower()


def is_form_content_type(content_type: str | None) -> bool:
    """Whether *content_type* is urlencoded or multipart form data."""
    return bool(content_type) and _media_type(content_type) in FORM_CONTENT_TYPES


async def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Decode a form *body* sent with *content_type*.

    Raises:
        ValueError: *content_type* is not a form encoding, a multipart
            body has no boundary, or an urlencoded body is not UTF-8.
        ConfigurationError: The body is multipart and python-multipart
            is not installed.
    """
    media_type = _media_type(content_type)
    if media_type == URLENCODED:
        fields: dict[str, list[str]] = {}
        for key, value in parse_qsl(body.decode("utf-8"), keep_blank_values=True):
            fields.setdefault(key, []).append(value)
        return FormData(fields)
    if media_type == MULTIPART:
        return _parse_multipart(body, content_type)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


class _PartCollector:
    """Callbacks for ``MultipartParser``; sorts finished parts into fields and files."""

    def __init__(self, parse_options_header: Callable[[bytes], OptionsHeader]) -> None:
        self._parse_options = parse_options_header
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self._headers: dict[str, str] = {}
        self._name = bytearray()
        self._value = bytearray()
        self._data = bytearray()

    def callbacks(self) -> dict[str, object]:
        return {
            "on_part_begin": self.part_begin,
            "on_header_field": self._name_chunk,
            "on_header_value": self._value_chunk,
            "on_header_end": self.header_end,
            "on_part_data": self._data_chunk,
            "on_part_end": self.part_end,
        }

    def part_begin(self) -> None:
        self._headers = {}
        self._data = bytearray()

    def _name_chunk(self, chunk: bytes, start: int, end: int) -> None:
        self._name += chunk[start:end]

    def _value_chunk(self, chunk: bytes, start: int, end: int) -> None:
        self._value += chunk[start:end]

    def _data_chunk(self, chunk: bytes, start: int, end: int) -> None:
        self._data += chunk[start:end]

    def header_end(self) -> None:
        self._headers[self._name.decode("latin-1").lower()] = self._value.decode("latin-1")
        self._name = bytearray()
        self._value = bytearray()

    def part_end(self) -> None:
        disposition = self._headers.get("content-disposition")
        if disposition is None:
            return
        _, params = self._parse_options(disposition.encode("latin-1"))
        if b"name" not in params:
            return
        field = params[b"name"].decode("utf-8")
        content = bytes(self._data)

        if b"filename" in params:
            self.files[field] = UploadFile(
                filename=params[b"filename"].decode("utf-8"),
                content_type=self._headers.get("content-type", "application/octet-stream"),
                size=len(content),
                _content=content,
            )
        else:
            self.fields.setdefault(field, []).append(content.decode("utf-8", errors="replace"))


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    try:
        from multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Parsing multipart/form-data needs python-multipart. "
            "Install it with: pip install perch[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "multipart/form-data body without a boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector(parse_options_header)
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    return FormData(collector.fields, collector.files)
