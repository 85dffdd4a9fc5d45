"""Exception hierarchy shared by the index, resolver and builders."""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for every error raised by revbuild."""


class ApplicationError(ReviewError):
    """Fatal error: the enclosing document cannot be compiled further."""


class ConfigError(ReviewError, ValueError):
    """Raised when a configuration value is missing or invalid."""


class UnknownIdError(ReviewError, KeyError):
    """Lookup of an id that was never registered in an index."""

    def __init__(self, kind: str, id: str) -> None:
        super().__init__(f"unknown {kind}: {id}")
        self.kind = kind
        self.id = id

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


class DuplicateIdError(ReviewError, ValueError):
    """Registration of an id already present in the same index."""

    def __init__(self, kind: str, id: str) -> None:
        super().__init__(f"duplicate {kind} id: {id}")
        self.kind = kind
        self.id = id


class UnknownInlineTagError(ReviewError):
    """An inline directive names a tag the builder does not implement."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"unknown inline tag: @<{tag}>")
        self.tag = tag


class InlineSyntaxError(ReviewError):
    """Inline markup that cannot be parsed at all (e.g. runaway nesting)."""
