"""Exception types raised while analyzing a Badge Object.

Per-entry errors (everything except InvalidContextDeclarationError and
ConfigError) are caught by the manifest builder and turned into diagnostics;
they never abort the whole analysis.
"""

from __future__ import annotations


class BadgeCheckError(Exception):
    """Base class for badgecheck errors."""


class FetchError(BadgeCheckError):
    """A context or schema document could not be retrieved."""

    def __init__(self, uri: str, reason: str):
        super().__init__(f"could not load {uri}: {reason}")
        self.uri = uri
        self.reason = reason


class NotFoundError(FetchError):
    """The document does not exist (HTTP 404, missing file)."""


class ContextLoadError(BadgeCheckError):
    def __init__(self, context_ref: str):
        super().__init__(f"couldn't get schema reference for context doc: {context_ref}")
        self.context_ref = context_ref


class MalformedContextError(BadgeCheckError):
    def __init__(self, context_ref: str):
        super().__init__(
            f"{context_ref}: the context file's validation property wasn't a string"
        )
        self.context_ref = context_ref


class PropertyNotFoundError(BadgeCheckError):
    def __init__(self, property_name: str):
        super().__init__(f"couldn't find pointer for {property_name}")
        self.property_name = property_name


class MissingLocalContextError(BadgeCheckError):
    def __init__(self, property_name: str, pointer: str):
        super().__init__(
            f"extension property {property_name} at {pointer} carries no string @context"
        )
        self.property_name = property_name
        self.pointer = pointer


class InvalidContextDeclarationError(BadgeCheckError):
    """@context is neither a string nor a list."""

    def __init__(self, value: object):
        super().__init__(
            f"@context must be a string or a list, got {type(value).__name__}"
        )
        self.value = value


class ConfigError(BadgeCheckError):
    pass
