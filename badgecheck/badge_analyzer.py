"""Analyze a Badge Object (Assertion, BadgeClass or Issuer) and report on its validation.

Pipeline:
  document -> ManifestBuilder (ContextResolver + structure locator)
           -> ValidationManifest
           -> ReportAggregator (SchemaValidator)
           -> report text

Entries of @context that cannot be resolved are dropped from the manifest and
logged; they do not appear in the report. An @context that is neither a
string nor a list yields an empty manifest ("nothing to validate") and marks
the result as fatal.

Usage:
  python -m badgecheck.badge_analyzer --in assertion.json
  python -m badgecheck.badge_analyzer --in assertion.json --config badgecheck.yaml --json
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx

from badgecheck.context_resolver import ContextResolver
from badgecheck.document_loader import DocumentLoader
from badgecheck.errors import ConfigError, InvalidContextDeclarationError
from badgecheck.logger import log_analysis, log_diagnostic
from badgecheck.manifest_builder import ManifestBuilder, ValidationManifest, diagnostic
from badgecheck.report import ReportAggregator, ValidationOutcome, render_report
from badgecheck.schema_store import SchemaStore
from badgecheck.schema_validator import SchemaValidator
from badgecheck.structure_locator import DEFAULT_SCOPES, Scope

OBI_ASSERTION_SCHEMA = "http://openbadges.org/standard/1.1/OBI/Assertion.json#"


def get_iri_for_badge_object(obj: Any) -> str:
    # Only 1.1 assertions are understood so far.
    return OBI_ASSERTION_SCHEMA


def now_run_id() -> str:
    return datetime.now(timezone.utc).strftime("RUN-%Y%m%d-%H%M%S")


@dataclass
class AnalysisResult:
    report: str
    manifest: ValidationManifest
    outcomes: list[ValidationOutcome] = field(default_factory=list)
    fatal: str | None = None

    @property
    def ok(self) -> bool:
        return self.fatal is None and bool(self.outcomes) and all(o.ok for o in self.outcomes)


def _log_run(log_path: Path, run_id: str, result: AnalysisResult) -> None:
    for d in result.manifest.diagnostics:
        log_diagnostic(d, log_path=log_path, run_id=run_id)
    log_analysis(
        log_path=log_path,
        run_id=run_id,
        status="OK" if result.ok else "ERROR",
        fatal=result.fatal,
        attempted=result.manifest.attempted,
        dropped=len(result.manifest.diagnostics),
        structures=(
            {
                "pointer": o.structure.pointer,
                "schema_ref": o.structure.schema_ref,
                "ok": o.ok,
                "error_count": len(o.errors),
            }
            for o in result.outcomes
        ),
    )


async def analyze(
    document: Any,
    *,
    loader: DocumentLoader,
    store: SchemaStore,
    log_path: Path | None = None,
    scopes: tuple[Scope, ...] = DEFAULT_SCOPES,
    run_id: str | None = None,
) -> AnalysisResult:
    builder = ManifestBuilder(ContextResolver(loader), scopes=scopes)
    fatal = None
    try:
        manifest = await builder.build(document)
    except InvalidContextDeclarationError as e:
        fatal = str(e)
        manifest = ValidationManifest(diagnostics=[diagnostic("E_CONTEXT_DECLARATION", fatal)])

    outcomes = await ReportAggregator(SchemaValidator(store)).collect(document, manifest)
    result = AnalysisResult(
        report=render_report(outcomes),
        manifest=manifest,
        outcomes=outcomes,
        fatal=fatal,
    )
    if log_path is not None:
        _log_run(log_path, run_id or now_run_id(), result)
    return result


def analyze_sync(
    document: Any,
    *,
    config: dict | None = None,
    log_path: Path | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AnalysisResult:
    from badgecheck.badge_config import default_config

    cfg = config or default_config()
    store = SchemaStore.from_directory(cfg["schema_dir"])
    contexts = {uri: Path(p) for uri, p in cfg["contexts"].items()}

    async def _run() -> AnalysisResult:
        async with DocumentLoader(
            local_contexts=contexts,
            timeout=cfg["timeout_seconds"],
            transport=transport,
        ) as loader:
            return await analyze(document, loader=loader, store=store, log_path=log_path)

    return asyncio.run(_run())


def analyze_badge_object(
    document: Any,
    *,
    config: dict | None = None,
    log_path: Path | None = None,
) -> str:
    return analyze_sync(document, config=config, log_path=log_path).report


def _summary(result: AnalysisResult) -> dict:
    return {
        "ok": result.ok,
        "fatal": result.fatal,
        "structures": [
            {
                "pointer": o.structure.pointer,
                "context_ref": o.structure.context_ref,
                "schema_ref": o.structure.schema_ref,
                "errors": [str(e) for e in o.errors],
            }
            for o in result.outcomes
        ],
        "diagnostics": result.manifest.diagnostics,
    }


def main(argv: list[str] | None = None) -> int:
    import argparse

    from badgecheck.badge_config import default_config, load_config
    from badgecheck.logger import default_log_path

    ap = argparse.ArgumentParser(description="Validate a Badge Object against the schemas its @context declares.")
    ap.add_argument("--in", dest="inp", required=True, help="Badge Object JSON file")
    ap.add_argument("--config", default=None, help="badgecheck config (JSON or YAML)")
    ap.add_argument("--log", default=None, help="jsonl event log path")
    ap.add_argument("--no-log", action="store_true")
    ap.add_argument("--json", action="store_true", help="print a JSON summary instead of the report")
    ns = ap.parse_args(argv)

    try:
        cfg = load_config(ns.config) if ns.config else default_config()
    except ConfigError as e:
        raise SystemExit(f"config error: {e}")

    inp = Path(ns.inp)
    try:
        document = json.loads(inp.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as e:
        raise SystemExit(f"cannot read badge object {inp}: {e}")

    log_path = None
    if not ns.no_log:
        log_path = Path(ns.log or cfg["log_path"] or default_log_path("badge_analyzer"))

    try:
        result = analyze_sync(document, config=cfg, log_path=log_path)
    except ConfigError as e:
        raise SystemExit(f"config error: {e}")

    for d in result.manifest.diagnostics:
        print(f"Warning: {d['msg']}", file=sys.stderr)

    if ns.json:
        print(json.dumps(_summary(result), ensure_ascii=False, indent=2))
    else:
        print(result.report, end="")
    return 0 if result.ok else 2


def cli() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
