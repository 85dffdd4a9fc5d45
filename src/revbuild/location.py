"""Source position used to prefix diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Location:
    filename: Optional[str] = None
    lineno: Optional[int] = None

    def moved_to(self, lineno: Optional[int]) -> Location:
        """Return a copy pointing at *lineno* in the same file."""
        return Location(self.filename, lineno)

    def __str__(self) -> str:
        name = self.filename or "-"
        if self.lineno is None:
            return name
        return f"{name}:{self.lineno}"
