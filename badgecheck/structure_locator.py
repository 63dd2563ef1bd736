"""Locate extension properties inside a Badge Object.

A property declared in @context may live at the top level of the document, in
the embedded badge class, or in the badge class's embedded issuer. Those
places are the candidate scopes, searched in order; the first scope that is an
object and has the property wins.

Pointers are RFC 6901 JSON pointers ("" = whole document).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from badgecheck.errors import PropertyNotFoundError

Scope = tuple[str, ...]

DEFAULT_SCOPES: tuple[Scope, ...] = (
    (),
    ("badge",),
    ("badge", "issuer"),
)


@dataclass(frozen=True)
class LocatedProperty:
    pointer: str
    local_context_ref: str | None


def escape_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def make_pointer(parts: tuple[str, ...] | list[str]) -> str:
    return "".join("/" + escape_token(p) for p in parts)


def resolve_pointer(document: Any, pointer: str) -> Any:
    """Dereference `pointer` in `document`; KeyError if it does not resolve."""
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise KeyError(f"invalid pointer: {pointer!r}")

    cur = document
    for raw in pointer[1:].split("/"):
        token = unescape_token(raw)
        if isinstance(cur, dict):
            if token not in cur:
                raise KeyError(pointer)
            cur = cur[token]
        elif isinstance(cur, list):
            if not token.isdigit() or int(token) >= len(cur):
                raise KeyError(pointer)
            cur = cur[int(token)]
        else:
            raise KeyError(pointer)
    return cur


def _scope_object(document: Any, scope: Scope) -> dict | None:
    cur = document
    for key in scope:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur if isinstance(cur, dict) else None


def local_context_of(value: Any) -> str | None:
    if isinstance(value, dict) and isinstance(value.get("@context"), str):
        return value["@context"]
    return None


def locate_property(
    document: Any,
    property_name: str,
    scopes: tuple[Scope, ...] = DEFAULT_SCOPES,
) -> LocatedProperty:
    for scope in scopes:
        obj = _scope_object(document, scope)
        # a missing badge/issuer is just "no match at this scope"
        if obj is None or property_name not in obj:
            continue
        return LocatedProperty(
            pointer=make_pointer(scope + (property_name,)),
            local_context_ref=local_context_of(obj[property_name]),
        )
    raise PropertyNotFoundError(property_name)
