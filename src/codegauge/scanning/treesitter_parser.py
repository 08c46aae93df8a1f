"""Tree-sitter parser wrapper.

Maps file extensions to the JavaScript, TypeScript and TSX grammars and
hands out one tree-sitter ``Parser`` per thread and language, since parser
objects must not be shared between threads.

Usage:
    parser = TreeSitterParser()
    language = parser.language_for("src/app.tsx")   # "tsx"
    tree = parser.parse(code_bytes, language)
"""

from __future__ import annotations

import threading
from pathlib import PurePath
from typing import Callable, Optional

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

EXTENSION_LANGUAGES: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

_GRAMMARS: dict[str, Callable[[], object]] = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}


def get_supported_languages() -> list[str]:
    """Get list of languages with bundled grammars."""
    return sorted(_GRAMMARS)


def get_supported_extensions() -> list[str]:
    return sorted(EXTENSION_LANGUAGES)


class TreeSitterParser:
    """Thread-safe front end over the bundled tree-sitter grammars."""

    def __init__(self) -> None:
        # tree-sitter >= 0.23 grammars return a PyCapsule; wrap in Language()
        self._languages = {
            name: tree_sitter.Language(factory()) for name, factory in _GRAMMARS.items()
        }
        self._local = threading.local()

    def language_for(self, path: str | PurePath) -> Optional[str]:
        """Grammar name for a file path, or None if the extension is unknown."""
        return EXTENSION_LANGUAGES.get(PurePath(path).suffix.lower())

    def parse(self, code: bytes, language: str) -> tree_sitter.Tree:
        """Parse code with the named grammar.

        Raises:
            KeyError: If the language has no grammar
        """
        return self._parser(language).parse(code)

    def _parser(self, language: str) -> tree_sitter.Parser:
        parsers = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = self._local.parsers = {}
        parser = parsers.get(language)
        if parser is None:
            parser = parsers[language] = tree_sitter.Parser(self._languages[language])
        return parser
