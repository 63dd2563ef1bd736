"""Context uri -> schema uri, via the context document's `validation` property."""

from __future__ import annotations

from badgecheck.document_loader import DocumentLoader
from badgecheck.errors import ContextLoadError, FetchError, MalformedContextError


class ContextResolver:
    # No cache: every call fetches the context document once.
    def __init__(self, loader: DocumentLoader):
        self.loader = loader

    async def resolve_schema(self, context_ref: str) -> str:
        try:
            loaded = await self.loader.load(context_ref)
        except FetchError as e:
            raise ContextLoadError(context_ref) from e

        doc = loaded.document
        schema_ref = doc.get("validation") if isinstance(doc, dict) else None
        if not isinstance(schema_ref, str):
            raise MalformedContextError(context_ref)
        return schema_ref
