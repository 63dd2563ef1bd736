"""Document loader for context documents.

Resolution order for a uri:
1. the local context table (built-in test contexts, plus any configured ones)
2. file:// uris, read from disk
3. http(s) uris, fetched with httpx (redirects followed, final url recorded)

Anything else is a FetchError. Missing documents raise NotFoundError.
Network fetches are bounded by `timeout` seconds so a dead host cannot stall
the manifest builder.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from badgecheck.errors import FetchError, NotFoundError

BUILTIN_CONTEXTS = {
    "http://openbadges.org/context": "test-obi-context.json",
    "http://openbadges.org/extension1": "test-obi-extension.json",
}

ACCEPT = "application/ld+json, application/json;q=0.9"
JSONLD_CONTEXT_REL = "http://www.w3.org/ns/json-ld#context"
DEFAULT_TIMEOUT = 10.0


def builtin_context_table() -> dict[str, Path]:
    root = Path(__file__).resolve().parent / "files" / "contexts"
    return {uri: root / name for uri, name in BUILTIN_CONTEXTS.items()}


@dataclass(frozen=True)
class LoadedDocument:
    document: Any
    document_url: str
    context_url: str | None = None


def read_json_file(uri: str, path: Path) -> Any:
    if not path.is_file():
        raise NotFoundError(uri, f"missing file {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as e:
        raise FetchError(uri, f"unreadable JSON in {path}: {e}") from e


class DocumentLoader:
    """Loads JSON(-LD) documents by uri.

    Use as an async context manager so the underlying http client is closed:

        async with DocumentLoader() as loader:
            doc = await loader.load("http://openbadges.org/context")
    """

    def __init__(
        self,
        *,
        local_contexts: dict[str, Path] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.local_contexts = (
            dict(local_contexts) if local_contexts is not None else builtin_context_table()
        )
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "DocumentLoader":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def load(self, uri: str) -> LoadedDocument:
        if not isinstance(uri, str) or not uri:
            raise FetchError(repr(uri), "uri must be a non-empty string")

        local = self.local_contexts.get(uri)
        if local is not None:
            return LoadedDocument(document=read_json_file(uri, Path(local)), document_url=uri)

        try:
            parsed = urlparse(uri)
        except ValueError as e:
            raise FetchError(uri, f"malformed uri: {e}") from e

        scheme = parsed.scheme
        if scheme == "file":
            path = Path(url2pathname(parsed.path))
            return LoadedDocument(document=read_json_file(uri, path), document_url=uri)
        if scheme in ("http", "https"):
            return await self._load_http(uri)

        raise FetchError(uri, f"unsupported uri scheme {scheme!r}")

    async def _load_http(self, uri: str) -> LoadedDocument:
        # InvalidURL is not an HTTPError
        try:
            resp = await self._http().get(uri, headers={"Accept": ACCEPT})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(uri, str(e) or type(e).__name__) from e

        if resp.status_code == 404:
            raise NotFoundError(uri, "HTTP 404")
        if resp.is_error:
            raise FetchError(uri, f"HTTP {resp.status_code}")

        try:
            doc = resp.json()
        except ValueError as e:
            raise FetchError(uri, f"invalid JSON: {e}") from e

        # Plain JSON responses may point at their JSON-LD context via a Link header.
        context_url = None
        if "application/ld+json" not in resp.headers.get("content-type", ""):
            link = resp.links.get(JSONLD_CONTEXT_REL)
            if link and link.get("url"):
                try:
                    context_url = str(resp.url.join(link["url"]))
                except httpx.InvalidURL as e:
                    raise FetchError(uri, f"malformed context link: {e}") from e

        return LoadedDocument(document=doc, document_url=str(resp.url), context_url=context_url)
