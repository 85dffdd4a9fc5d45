"""revbuild - compile Re:VIEW-style markup into HTML, LaTeX and plain text."""

from __future__ import annotations

__version__ = "0.1.0"

from revbuild.book import Book, BookConfig, Chapter
from revbuild.compiler import Command, Compiler
from revbuild.converter import Converter

__all__ = [
    "Book",
    "BookConfig",
    "Chapter",
    "Command",
    "Compiler",
    "Converter",
    "__version__",
]
