"""Build the validation manifest of a Badge Object from its @context.

Two shapes of @context are understood:

- a string: the base context (un-extended badge). One structure at "".
- a list: string entries are contexts applying to the whole document (base
  context plus any extension root schemas); mapping entries declare extended
  properties, {"someProp": "<extension iri>"}. The extended object carries its
  own scoped @context, and that context (not the declared iri) decides the
  schema.

Every entry is resolved as its own asyncio task and the manifest is assembled
only after all of them settle. An entry that fails is dropped with a
diagnostic; it never aborts the others.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Iterator

from badgecheck.context_resolver import ContextResolver
from badgecheck.errors import (
    BadgeCheckError,
    ContextLoadError,
    InvalidContextDeclarationError,
    MalformedContextError,
    MissingLocalContextError,
    PropertyNotFoundError,
)
from badgecheck.structure_locator import DEFAULT_SCOPES, Scope, locate_property


@dataclass(frozen=True)
class ValidationStructure:
    pointer: str
    context_ref: str
    schema_ref: str


@dataclass
class ValidationManifest:
    structures: list[ValidationStructure] = field(default_factory=list)
    diagnostics: list[dict] = field(default_factory=list)
    attempted: int = 0

    def __len__(self) -> int:
        return len(self.structures)

    def __iter__(self) -> Iterator[ValidationStructure]:
        return iter(self.structures)


_DIAG_CODES = {
    ContextLoadError: "W_CONTEXT_LOAD",
    MalformedContextError: "W_CONTEXT_MALFORMED",
    PropertyNotFoundError: "W_PROPERTY_NOT_FOUND",
    MissingLocalContextError: "W_NO_LOCAL_CONTEXT",
}


def diagnostic(code: str, msg: str, **extra: Any) -> dict:
    return {"code": code, "msg": msg, **extra}


def _diag_from_error(e: BadgeCheckError, **extra: Any) -> dict:
    return diagnostic(_DIAG_CODES.get(type(e), "W_ENTRY_FAILED"), str(e), **extra)


# (structure, diagnostic): exactly one of the two is set
Settled = tuple["ValidationStructure | None", "dict | None"]


class ManifestBuilder:
    def __init__(self, resolver: ContextResolver, *, scopes: tuple[Scope, ...] = DEFAULT_SCOPES):
        self.resolver = resolver
        self.scopes = scopes

    async def build(self, document: Any) -> ValidationManifest:
        decl = document.get("@context") if isinstance(document, dict) else None
        if isinstance(decl, str):
            entries: list[Any] = [decl]
        elif isinstance(decl, list):
            entries = decl
        else:
            raise InvalidContextDeclarationError(decl)

        manifest = ValidationManifest()
        jobs = []
        for entry in entries:
            if isinstance(entry, str):
                jobs.append(self._document_entry(entry))
            elif isinstance(entry, dict):
                for key, value in entry.items():
                    # the declared iri is only a shape check
                    if not isinstance(value, str):
                        manifest.diagnostics.append(
                            diagnostic(
                                "W_EXTENSION_SHAPE",
                                f"extension declaration for {key} is not an iri string",
                                property=key,
                            )
                        )
                        continue
                    jobs.append(self._extension_entry(document, key))
            else:
                manifest.diagnostics.append(
                    diagnostic(
                        "W_CONTEXT_ENTRY",
                        f"ignoring @context entry of type {type(entry).__name__}",
                    )
                )

        manifest.attempted = len(jobs)
        settled: list[Settled] = await asyncio.gather(*jobs)

        for structure, diag in settled:
            if structure is not None:
                manifest.structures.append(structure)
            elif diag is not None:
                manifest.diagnostics.append(diag)
        return manifest

    async def _document_entry(self, context_ref: str) -> Settled:
        try:
            schema_ref = await self.resolver.resolve_schema(context_ref)
        except BadgeCheckError as e:
            return None, _diag_from_error(e, context_ref=context_ref)
        return ValidationStructure(pointer="", context_ref=context_ref, schema_ref=schema_ref), None

    async def _extension_entry(self, document: Any, property_name: str) -> Settled:
        try:
            located = locate_property(document, property_name, self.scopes)
            if located.local_context_ref is None:
                raise MissingLocalContextError(property_name, located.pointer)
            schema_ref = await self.resolver.resolve_schema(located.local_context_ref)
        except BadgeCheckError as e:
            return None, _diag_from_error(e, property=property_name)
        return (
            ValidationStructure(
                pointer=located.pointer,
                context_ref=located.local_context_ref,
                schema_ref=schema_ref,
            ),
            None,
        )
