"""BasicAnalyzer: line-level facts from raw source text.

Needs no syntax tree. A small lexer tracks strings, template literals,
regex literals and comments so that ``//`` inside a string or regex is not
taken for a comment and a block comment spanning lines marks every line it
covers.
"""

from __future__ import annotations

import re

from ..scanning.source import SourceFile, split_lines
from .models import BasicMetrics, NamingStats

_DECLARATION = re.compile(r"\b(?:var|let|const|function\s*\*?|class)\s+([A-Za-z_$][\w$]*)")
_MARKER = re.compile(r"\b(?:TODO|FIXME|XXX|HACK)\b")

_UPPER = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")
_PASCAL = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_CAMEL = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_SNAKE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)+$")

# "/" opens a regex literal after these, and divides after anything else.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = frozenset(
    {
        "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
        "throw", "case", "do", "else", "yield", "await",
    }
)


def naming_style(name: str) -> str:
    """Classify an identifier: camel, pascal, snake, upper or other."""
    if len(name) > 1 and _UPPER.match(name):
        return "upper"
    if _PASCAL.match(name):
        return "pascal"
    if _SNAKE.match(name):
        return "snake"
    if _CAMEL.match(name):
        return "camel"
    return "other"


def _regex_end(line: str, start: int) -> int:
    """Index just past the regex literal whose opening slash is at ``start``.

    Slashes inside ``[...]`` classes and escaped slashes do not close it.
    An unterminated literal runs to the end of the line.
    """
    in_class = False
    i = start + 1
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "[":
            in_class = True
        elif ch == "]":
            in_class = False
        elif ch == "/" and not in_class:
            return i + 1
        i += 1
    return len(line)


class _LineScan:
    """Per-line lexical classification plus code-only and comment text."""

    def __init__(self, lines: list[str]):
        self.has_code = [False] * len(lines)
        self.has_comment = [False] * len(lines)
        self.code_text: list[str] = []
        self.comment_text: list[str] = []
        # Last significant character and the identifier ending at it.
        self._last = ""
        self._word = ""
        self._gap = True
        self._scan(lines)

    def _note(self, ch: str) -> None:
        if ch.isspace():
            self._gap = True
            return
        if ch.isalnum() or ch in "_$":
            self._word = self._word + ch if not self._gap and self._word else ch
        else:
            self._word = ""
        self._last = ch
        self._gap = False

    def _note_literal(self) -> None:
        self._last, self._word, self._gap = "0", "", False

    def _regex_allowed(self) -> bool:
        if self._word:
            return self._word in _REGEX_KEYWORDS
        return self._last == "" or self._last in _REGEX_PRECEDERS

    def _scan(self, lines: list[str]) -> None:
        in_block = False
        quote = None  # ', " or ` while inside a string literal

        for number, line in enumerate(lines):
            code_chars: list[str] = []
            i = 0
            length = len(line)
            while i < length:
                ch = line[i]
                nxt = line[i + 1] if i + 1 < length else ""

                if in_block:
                    self.has_comment[number] = True
                    if ch == "*" and nxt == "/":
                        in_block = False
                        self.comment_text.append(" ")
                        i += 2
                        continue
                    self.comment_text.append(ch)
                    i += 1
                    continue

                if quote is not None:
                    self.has_code[number] = True
                    if ch == "\\":
                        i += 2
                        continue
                    if ch == quote:
                        quote = None
                        self._note_literal()
                    code_chars.append(" ")
                    i += 1
                    continue

                if ch == "/" and nxt == "/":
                    self.has_comment[number] = True
                    self.comment_text.append(line[i + 2 :] + "\n")
                    break
                if ch == "/" and nxt == "*":
                    self.has_comment[number] = True
                    in_block = True
                    i += 2
                    continue
                if ch == "/" and self._regex_allowed():
                    end = _regex_end(line, i)
                    self.has_code[number] = True
                    code_chars.append(" " * (end - i))
                    self._note_literal()
                    i = end
                    continue
                if ch in ("'", '"', "`"):
                    quote = ch
                    self.has_code[number] = True
                    code_chars.append(" ")
                    i += 1
                    continue
                if not ch.isspace():
                    self.has_code[number] = True
                code_chars.append(ch)
                self._note(ch)
                i += 1

            # Plain quotes cannot span lines; template literals can.
            if quote in ("'", '"'):
                quote = None
                self._note_literal()
            if in_block:
                self.comment_text.append("\n")
            self.code_text.append("".join(code_chars))
            self._gap = True


class BasicAnalyzer:
    """Analyzer[SourceFile, BasicMetrics]."""

    name = "basic"

    def analyze(self, subject: SourceFile) -> BasicMetrics:
        lines = split_lines(subject.text)
        scan = _LineScan(lines)

        blank = code = comment = 0
        for number, line in enumerate(lines):
            if not line.strip():
                blank += 1
            elif scan.has_code[number]:
                code += 1
            elif scan.has_comment[number]:
                comment += 1
            else:
                code += 1

        longest_length, longest_number = 0, 0
        for number, line in enumerate(lines, start=1):
            if len(line) > longest_length:
                longest_length, longest_number = len(line), number

        non_blank = code + comment
        counts = {"camel": 0, "pascal": 0, "snake": 0, "upper": 0, "other": 0}
        for match in _DECLARATION.finditer("\n".join(scan.code_text)):
            counts[naming_style(match.group(1))] += 1

        return BasicMetrics(
            total_lines=len(lines),
            code_lines=code,
            comment_lines=comment,
            blank_lines=blank,
            longest_line_length=longest_length,
            longest_line_number=longest_number,
            average_line_length=(sum(len(line) for line in lines) / len(lines)) if lines else 0.0,
            comment_ratio=(comment / non_blank) if non_blank else 0.0,
            todo_count=len(_MARKER.findall("".join(scan.comment_text))),
            naming=NamingStats(
                camel_case=counts["camel"],
                pascal_case=counts["pascal"],
                snake_case=counts["snake"],
                upper_case=counts["upper"],
                other=counts["other"],
            ),
        )
