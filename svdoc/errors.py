"""Exceptions raised while extracting documentation."""

from __future__ import annotations

from typing import Any


class DocgenError(Exception):
    """Base class for documentation extraction errors."""


class MissingIdentifier(DocgenError):
    """A module-like declaration has no locatable name.

    Extraction of the enclosing file is abandoned; callers processing
    several files continue with the next one.
    """

    def __init__(self, kind: Any, detail: str = "") -> None:
        self.kind = kind
        message = f"no identifier found for {kind}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnparsableComment(DocgenError):
    """A comment is not delimited as an annotation comment."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        preview = text if len(text) <= 40 else text[:37] + "..."
        super().__init__(f"{reason}: {preview!r}")
