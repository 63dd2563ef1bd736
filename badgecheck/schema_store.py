"""Local schema store: schema id -> schema document, exposed as a referencing.Registry.

Schemas live in a directory (default: badgecheck/files/schemas). Each file is
JSON or YAML and is indexed by its `$id` (or draft-04 `id`), fragment stripped.
Files without an id are indexed by their file:// uri.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urldefrag

import yaml
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT4

from badgecheck.errors import ConfigError

SCHEMA_SUFFIXES = (".json", ".yaml", ".yml")


def default_schema_dir() -> Path:
    return Path(__file__).resolve().parent / "files" / "schemas"


def schema_key(ref: str) -> str:
    return urldefrag(ref)[0]


def _read_schema(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


@dataclass
class SchemaStore:
    schemas: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_directory(cls, schema_dir: str | Path | None = None) -> "SchemaStore":
        root = Path(schema_dir) if schema_dir is not None else default_schema_dir()
        if not root.is_dir():
            raise ConfigError(f"schema dir not found: {root}")
        store = cls()
        for p in sorted(root.rglob("*")):
            if p.suffix not in SCHEMA_SUFFIXES or not p.is_file():
                continue
            try:
                obj = _read_schema(p)
            except (OSError, ValueError, yaml.YAMLError) as e:
                raise ConfigError(f"unreadable schema {p}: {e}") from e
            if not isinstance(obj, dict):
                raise ConfigError(f"schema must be an object: {p}")
            sid = obj.get("$id") or obj.get("id")
            store.add(sid if isinstance(sid, str) and sid else p.resolve().as_uri(), obj)
        return store

    def add(self, ref: str, schema: dict[str, Any]) -> None:
        self.schemas[schema_key(ref)] = schema

    def has(self, ref: str) -> bool:
        return schema_key(ref) in self.schemas

    def get(self, ref: str) -> dict[str, Any] | None:
        return self.schemas.get(schema_key(ref))

    def registry(self) -> Registry:
        resources = [
            (uri, Resource.from_contents(schema, default_specification=DRAFT4))
            for uri, schema in self.schemas.items()
        ]
        return Registry().with_resources(resources)
