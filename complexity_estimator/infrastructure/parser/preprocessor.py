"""Utility helpers to normalize source text before structural parsing.

Real-world snippets mix comment styles, string literals containing braces,
and several statements per physical line.  The normalizer strips comments
and literal contents while preserving line numbers, then splits the text
into logical lines so that every ``{`` and ``}`` sits at a line boundary.
The parser and the pattern matcher both consume this once-normalized stream.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from complexity_estimator.domain.models.source import LogicalLine

# A ':'-terminated block header marks indentation-structured source, where
# '//' is floor division and only '#' opens a comment.
_COLON_BLOCK_HEADER = re.compile(
    r"^[ \t]*(?:(?:async[ \t]+)?def|class|for|while|if|elif|else|try|except|finally|with)"
    r"\b[^\n{};]*:[ \t]*(?:#[^\n]*)?$",
    re.MULTILINE,
)


@dataclass
class ParserWarning:
    """Represents a non-fatal issue detected while preprocessing."""

    message: str
    line: Optional[int] = None


@dataclass
class PreprocessingResult:
    """Container returned by the source normalizer."""

    code: str
    lines: List[LogicalLine] = field(default_factory=list)
    warnings: List[ParserWarning] = field(default_factory=list)


class SourceNormalizer:
    """Strip comments and literals, then split source into logical lines."""

    _TAB_WIDTH = 4
    _CLOSING_TRAILERS = " ;,)"

    def normalize(self, source: str) -> PreprocessingResult:
        """Return comment-free code and its logical line stream."""

        if not source or not source.strip():
            return PreprocessingResult(code="")

        warnings: List[ParserWarning] = []
        stripped = self._strip_comments_and_literals(source, warnings)

        lines: List[LogicalLine] = []
        physical_lines = stripped.split("\n")
        for number, raw_line in enumerate(physical_lines, start=1):
            expanded = raw_line.replace("\t", " " * self._TAB_WIDTH).rstrip()
            if not expanded.strip():
                continue
            indent = len(expanded) - len(expanded.lstrip())
            for segment in self._split_braces(expanded.strip()):
                lines.append(LogicalLine(number=number, text=segment, indent=indent))

        code = "\n".join(line.rstrip() for line in physical_lines).strip("\n") + "\n"
        warnings.extend(self._validate_brace_balance(lines))
        return PreprocessingResult(code=code, lines=lines, warnings=warnings)

    def _strip_comments_and_literals(
        self, source: str, warnings: List[ParserWarning]
    ) -> str:
        """Blank comments and empty string literals, keeping every newline."""

        out: List[str] = []
        i = 0
        line = 1
        text = source.replace("\r\n", "\n").replace("\r", "\n")
        length = len(text)
        slash_comments = not self.uses_colon_blocks(text)

        while i < length:
            ch = text[i]
            nxt = text[i + 1] if i + 1 < length else ""

            if ch == "\n":
                out.append(ch)
                line += 1
                i += 1
                continue

            if slash_comments and ch == "/" and nxt == "/":
                i = self._skip_to_line_end(text, i)
                continue

            if ch == "#" and self._starts_hash_comment(text, i):
                i = self._skip_to_line_end(text, i)
                continue

            if slash_comments and ch == "/" and nxt == "*":
                end = text.find("*/", i + 2)
                if end == -1:
                    warnings.append(
                        ParserWarning(message="Unterminated block comment", line=line)
                    )
                    end = length
                else:
                    end += 2
                newlines = text.count("\n", i, end)
                out.append("\n" * newlines)
                line += newlines
                i = end
                continue

            if ch in ("'", '"'):
                if text.startswith(ch * 3, i):
                    end = text.find(ch * 3, i + 3)
                    end = length if end == -1 else end + 3
                    newlines = text.count("\n", i, end)
                    out.append(ch * 2 + "\n" * newlines)
                    line += newlines
                    i = end
                    continue
                end = self._find_literal_end(text, i, ch)
                if end is None:
                    warnings.append(
                        ParserWarning(message="Unterminated string literal", line=line)
                    )
                    i = self._skip_to_line_end(text, i)
                    out.append(ch * 2)
                    continue
                out.append(ch * 2)
                i = end + 1
                continue

            out.append(ch)
            i += 1

        return "".join(out)

    @staticmethod
    def uses_colon_blocks(text: str) -> bool:
        """True for Python-style source, decided once per input."""

        return _COLON_BLOCK_HEADER.search(text) is not None

    def _starts_hash_comment(self, text: str, index: int) -> bool:
        """'#' opens a comment at line start or after whitespace."""

        if index == 0:
            return True
        return text[index - 1] in " \t\n"

    def _skip_to_line_end(self, text: str, index: int) -> int:
        end = text.find("\n", index)
        return len(text) if end == -1 else end

    def _find_literal_end(self, text: str, start: int, quote: str) -> Optional[int]:
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                return i
            if ch == "\n":
                return None
            i += 1
        return None

    def _split_braces(self, text: str) -> List[str]:
        """Put every block brace on a logical line boundary."""

        segments: List[str] = []
        current = ""
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == "{":
                current += ch
                if text[i + 1 :].strip():
                    segments.append(current)
                    current = ""
                i += 1
                continue
            if ch == "}":
                if current.strip():
                    segments.append(current)
                current = "}"
                i += 1
                while i < len(text) and text[i] in self._CLOSING_TRAILERS:
                    current += text[i]
                    i += 1
                segments.append(current)
                current = ""
                continue
            current += ch
            i += 1

        if current.strip():
            segments.append(current)
        return [segment.strip() for segment in segments if segment.strip()]

    def _validate_brace_balance(self, lines: List[LogicalLine]) -> List[ParserWarning]:
        """Emit a warning when '{' and '}' counts differ."""

        opens = sum(line.text.count("{") for line in lines)
        closes = sum(line.text.count("}") for line in lines)
        if opens == closes:
            return []
        return [
            ParserWarning(
                message=(
                    "Unbalanced braces detected "
                    f"(open={opens}, close={closes}); unmatched blocks run to end of input"
                )
            )
        ]
