"""Validate a sub-document against a schema ref and normalize the errors.

jsonschema reports errors keyed by the failed keyword with a terse message.
normalize_error turns each into a NormalizedError carrying the field pointer,
the constraint that was expected and the actual value, plus a readable
sentence. Validation failures are returned, never raised.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft4Validator
from jsonschema.exceptions import ValidationError, best_match
from jsonschema.validators import validator_for
from referencing.exceptions import Unresolvable

from badgecheck.schema_store import SchemaStore
from badgecheck.structure_locator import make_pointer

MAX_ACTUAL_CHARS = 80

_JSON_TYPES = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "number"),
    (str, "string"),
    (list, "array"),
    (dict, "object"),
    (type(None), "null"),
)


def json_type(value: Any) -> str:
    for py, name in _JSON_TYPES:
        if isinstance(value, py):
            return name
    return type(value).__name__


def _short(value: Any) -> str:
    s = json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
    if len(s) > MAX_ACTUAL_CHARS:
        s = s[: MAX_ACTUAL_CHARS - 3] + "..."
    return s


@dataclass(frozen=True)
class NormalizedError:
    path: str
    keyword: str
    expected: Any
    actual: Any
    message: str

    def __str__(self) -> str:
        where = self.path or "root"
        if self.keyword in ("required", "$ref", "$pointer"):
            return f"{where}: {self.message}"
        return f"{where}: {self.message} (actual: {_short(self.actual)})"


def _missing_property(e: ValidationError) -> str | None:
    for prop in e.validator_value or []:
        if e.message.startswith(repr(prop)):
            return prop
    return None


def _extra_properties(e: ValidationError) -> list[str]:
    if not isinstance(e.instance, dict):
        return []
    declared = e.schema.get("properties") or {}
    patterns = list((e.schema.get("patternProperties") or {}).keys())
    return sorted(
        k
        for k in e.instance
        if k not in declared and not any(re.search(p, k) for p in patterns)
    )


def _describe(kw: str, expected: Any, actual: Any, e: ValidationError) -> str:
    if kw == "type":
        want = " or ".join(expected) if isinstance(expected, list) else expected
        return f"expected type {want} but found {json_type(actual)}"
    if kw == "enum":
        return f"value must be one of {_short(expected)}"
    if kw == "const":
        return f"value must be exactly {_short(expected)}"
    if kw == "format":
        return f"value is not a valid {expected}"
    if kw == "pattern":
        return f"string does not match pattern {expected!r}"
    if kw == "minLength":
        return f"string is shorter than the minimum length of {expected}"
    if kw == "maxLength":
        return f"string is longer than the maximum length of {expected}"
    if kw == "minItems":
        return f"array has fewer than {expected} items"
    if kw == "maxItems":
        return f"array has more than {expected} items"
    # draft-04 spells exclusive bounds as a boolean next to minimum/maximum
    if kw == "minimum":
        if e.schema.get("exclusiveMinimum") is True:
            return f"value is less than or equal to the exclusive minimum of {expected}"
        return f"value is less than the minimum of {expected}"
    if kw == "maximum":
        if e.schema.get("exclusiveMaximum") is True:
            return f"value is greater than or equal to the exclusive maximum of {expected}"
        return f"value is greater than the maximum of {expected}"
    if kw == "exclusiveMinimum":
        return f"value must be greater than {expected}"
    if kw == "exclusiveMaximum":
        return f"value must be less than {expected}"
    if kw == "additionalProperties":
        extras = _extra_properties(e)
        if extras:
            return "object has properties the schema does not allow: " + ", ".join(map(repr, extras))
        return "object has properties the schema does not allow"
    if kw in ("anyOf", "oneOf"):
        if not e.context:
            return "value matches more than one of the exclusive alternatives"
        closest = best_match(e.context)
        msg = "value does not match any of the allowed alternatives"
        if closest is not None:
            msg += f"; closest: {normalize_error(closest)}"
        return msg
    return e.message


def normalize_error(e: ValidationError) -> NormalizedError:
    parts = [str(p) for p in e.absolute_path]
    kw = str(e.validator)

    if kw == "required":
        prop = _missing_property(e)
        if prop is not None:
            parts.append(prop)
        return NormalizedError(
            path=make_pointer(parts),
            keyword=kw,
            expected="required",
            actual=None,
            message=f"missing required property {prop!r}" if prop else e.message,
        )

    return NormalizedError(
        path=make_pointer(parts),
        keyword=kw,
        expected=e.validator_value,
        actual=e.instance,
        message=_describe(kw, e.validator_value, e.instance, e),
    )


def reference_error(schema_ref: str, reason: str) -> NormalizedError:
    return NormalizedError(
        path="",
        keyword="$ref",
        expected=schema_ref,
        actual=None,
        message=f"cannot resolve schema {schema_ref}: {reason}",
    )


class SchemaValidator:
    def __init__(self, store: SchemaStore):
        self.store = store
        self._registry = store.registry()

    def iter_normalized(self, sub_document: Any, schema_ref: str) -> list[NormalizedError]:
        target = self.store.get(schema_ref)
        if target is None:
            return [reference_error(schema_ref, "not in schema store")]

        cls = validator_for(target, default=Draft4Validator)
        v = cls(
            {"$ref": schema_ref},
            registry=self._registry,
            format_checker=cls.FORMAT_CHECKER,
        )
        try:
            errors = [normalize_error(e) for e in v.iter_errors(sub_document)]
        except Unresolvable as e:
            return [reference_error(schema_ref, str(e))]
        return sorted(errors, key=lambda n: (n.path, n.message))

    async def validate(self, sub_document: Any, schema_ref: str) -> tuple[NormalizedError, ...]:
        return tuple(self.iter_normalized(sub_document, schema_ref))
