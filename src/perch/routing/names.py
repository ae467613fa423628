"""Method name → route compilation.

A handler member named ``<Verb><Segments>[By<Param>]`` compiles to an
HTTP verb plus a path pattern::

    GetRoot                              -> GET    /
    GetOtherByName                       -> GET    /other/{name}
    GetABBRIncluded                      -> GET    /abbr/included
    GetMultiPartRouteByOnlyOneParamPart  -> GET    /multi/part/route/{onlyoneparampart}
    HandleRoot                           -> HANDLE /        (any method)

A mount member named ``Mount<Segments>`` compiles to a prefix::

    MountRoot        -> /
    MountWebByParam  -> /web/by/param

Names outside both grammars compile to ``None``. Everything here is a
pure function of the input string.
"""

import re
from dataclasses import dataclass

VERBS: tuple[str, ...] = (
    "Get",
    "Put",
    "Post",
    "Patch",
    "Delete",
    "Trace",
    "Options",
    "Connect",
    "Head",
    "Handle",
)

# Registering under this verb matches every HTTP method.
ANY_METHOD = "HANDLE"

_HANDLER_RE = re.compile(
    rf"({'|'.join(VERBS)})([a-zA-Z][a-zA-Z0-9]*?)(?:By([a-zA-Z][a-zA-Z0-9]*))?"
)
_MOUNT_RE = re.compile(r"Mount([a-zA-Z][a-zA-Z0-9]*)")

_ROOT = "Root"


@dataclass(frozen=True, slots=True)
class CompiledHandler:
    """A handler name split into its route parts."""

    verb: str
    pattern: str
    param: str | None = None

    @property
    def any_method(self) -> bool:
        return self.verb == ANY_METHOD


def segment_identifier(ident: str) -> list[str]:
    """Split a CamelCase identifier into lower-cased path segments.

    A leading ``Root`` token is dropped. A boundary falls before an
    uppercase character that follows a non-uppercase one, or that starts
    a new word after an acronym (``ABBRIncluded`` -> ``abbr``,
    ``included``). The end of the string counts as uppercase, so trailing
    acronyms stay whole (``OtherJSON`` -> ``other``, ``json``).
    """
    if ident.startswith(_ROOT) and (len(ident) == len(_ROOT) or ident[len(_ROOT)].isupper()):
        ident = ident[len(_ROOT) :]
    if not ident:
        return []

    sections: list[str] = []
    start = 0
    is_upper, next_upper = True, ident[0].isupper()
    for i in range(len(ident)):
        last_upper = is_upper
        is_upper = next_upper
        next_upper = i >= len(ident) - 1 or ident[i + 1].isupper()
        if i > 0 and is_upper and (not last_upper or not next_upper):
            sections.append(ident[start:i].lower())
            start = i
    sections.append(ident[start:].lower())
    return sections


def _join(sections: list[str]) -> str:
    return "/" + "/".join(sections)


def compile_handler_name(name: str) -> CompiledHandler | None:
    """Compile a handler member name, or return None if it does not fit.

    The verb is upper-cased; ``HANDLE`` stands for any method. The
    parameter name is lower-cased whole and appended as the last
    ``{param}`` segment.
    """
    match = _HANDLER_RE.fullmatch(name)
    if match is None:
        return None
    verb, ident, param = match.groups()
    sections = segment_identifier(ident)
    if param:
        param = param.lower()
        sections.append(f"{{{param}}}")
    return CompiledHandler(verb=verb.upper(), pattern=_join(sections), param=param or None)


def compile_mount_name(name: str) -> str | None:
    """Compile a mount member name to its prefix, or None if it does not fit.

    No parameter suffix is recognised: ``By`` is just another word here.
    """
    match = _MOUNT_RE.fullmatch(name)
    if match is None:
        return None
    return _join(segment_identifier(match.group(1)))
