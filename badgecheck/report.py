"""Report aggregation: validate every manifest structure and render one text report.

Validations run concurrently; sections are emitted in manifest order no matter
which validation finishes first.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from badgecheck.manifest_builder import ValidationManifest, ValidationStructure
from badgecheck.schema_validator import NormalizedError, SchemaValidator
from badgecheck.structure_locator import resolve_pointer

RULE = "============================="
PASS_MARKER = "VALIDATION OF THIS OBJECT AGAINST ITS SCHEMA PASSED WITH NO ERRORS."
ERRORS_HEADER = "Schema validation errors follow:"
NOTHING_TO_VALIDATE = (
    "Nothing to validate: no validation structures could be derived from @context.\n"
)


@dataclass(frozen=True)
class ValidationOutcome:
    structure: ValidationStructure
    errors: tuple[NormalizedError, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


def pointer_label(pointer: str) -> str:
    return pointer or "root"


def render_section(outcome: ValidationOutcome) -> str:
    s = outcome.structure
    lines = [
        f"{RULE} {pointer_label(s.pointer)} {RULE}",
        f"Schema applied: {s.schema_ref}",
    ]
    if outcome.ok:
        lines.append(PASS_MARKER)
    else:
        lines.append(ERRORS_HEADER)
        lines.extend(f" - {e}" for e in outcome.errors)
    return "\n".join(lines) + "\n\n"


def render_report(outcomes: list[ValidationOutcome]) -> str:
    if not outcomes:
        return NOTHING_TO_VALIDATE
    return "".join(render_section(o) for o in outcomes)


class ReportAggregator:
    def __init__(self, validator: SchemaValidator):
        self.validator = validator

    async def _validate_one(self, document: Any, structure: ValidationStructure) -> ValidationOutcome:
        try:
            target = resolve_pointer(document, structure.pointer)
        except KeyError:
            missing = NormalizedError(
                path=structure.pointer,
                keyword="$pointer",
                expected=structure.pointer,
                actual=None,
                message="pointer does not resolve to a value in the document",
            )
            return ValidationOutcome(structure=structure, errors=(missing,))
        errors = await self.validator.validate(target, structure.schema_ref)
        return ValidationOutcome(structure=structure, errors=errors)

    async def collect(self, document: Any, manifest: ValidationManifest) -> list[ValidationOutcome]:
        return list(
            await asyncio.gather(*(self._validate_one(document, s) for s in manifest.structures))
        )

    async def build_report(self, document: Any, manifest: ValidationManifest) -> str:
        return render_report(await self.collect(document, manifest))
