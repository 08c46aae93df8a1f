"""Reading, enumerating and parsing JavaScript/TypeScript sources."""

from .discovery import Discovery, SkippedFile, discover_files
from .parser import FileParser
from .source import SourceFile, read_source
from .syntax import SyntaxNode, SyntaxTree
from .treesitter_parser import TreeSitterParser, get_supported_languages

__all__ = [
    "Discovery",
    "SkippedFile",
    "discover_files",
    "FileParser",
    "SourceFile",
    "read_source",
    "SyntaxNode",
    "SyntaxTree",
    "TreeSitterParser",
    "get_supported_languages",
]
