"""badgecheck config (v0.1): load/validate runtime config.

Config format: JSON or YAML (badgecheck_config_v0_1.schema.json)
Example:
{
  "contexts": {"https://example.org/ext/ctx": "contexts/ext.json"},
  "schema_dir": "schemas",
  "timeout_seconds": 5,
  "log_path": "logs/badge_analyzer.jsonl"
}

Rules:
- contexts are merged over the built-in context table (config wins).
- relative paths resolve against the config file's directory.
- schema_dir defaults to the packaged schemas; timeout_seconds to 10.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from badgecheck.document_loader import DEFAULT_TIMEOUT, builtin_context_table
from badgecheck.errors import ConfigError
from badgecheck.schema_store import default_schema_dir

CONFIG_SCHEMA_PATH = (
    Path(__file__).resolve().parent / "files" / "contracts" / "badgecheck_config_v0_1.schema.json"
)


def default_config() -> dict[str, Any]:
    return {
        "contexts": {uri: str(p) for uri, p in builtin_context_table().items()},
        "schema_dir": str(default_schema_dir()),
        "timeout_seconds": DEFAULT_TIMEOUT,
        "log_path": None,
    }


def validate_config(obj: Any) -> list[str]:
    schema = json.loads(CONFIG_SCHEMA_PATH.read_text(encoding="utf-8"))
    v = Draft202012Validator(schema)
    errors = sorted(v.iter_errors(obj), key=lambda e: (list(e.path), e.message))
    return [f"{list(e.path)}: {e.message}" for e in errors]


def _resolve(base: Path, p: str) -> str:
    path = Path(p)
    return str(path if path.is_absolute() else (base / path).resolve())


def load_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    try:
        obj = json.loads(text) if p.suffix == ".json" else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"unparseable config {p}: {e}") from e
    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        raise ConfigError("config must be a mapping")

    errs = validate_config(obj)
    if errs:
        raise ConfigError(f"invalid config {p}: " + "; ".join(errs))

    base = p.resolve().parent
    cfg = default_config()
    for uri, ctx_path in (obj.get("contexts") or {}).items():
        cfg["contexts"][uri] = _resolve(base, ctx_path)
    if obj.get("schema_dir") not in (None, ""):
        cfg["schema_dir"] = _resolve(base, obj["schema_dir"])
    if obj.get("timeout_seconds") is not None:
        cfg["timeout_seconds"] = float(obj["timeout_seconds"])
    if obj.get("log_path") not in (None, ""):
        cfg["log_path"] = _resolve(base, obj["log_path"])
    return cfg


def main(argv: list[str] | None = None) -> int:
    import argparse

    ap = argparse.ArgumentParser()
    ap.add_argument("--config", required=True)
    ns = ap.parse_args(argv)

    cfg = load_config(ns.config)
    print(json.dumps(cfg, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
