"""High-level parser facade that returns the syntax tree with diagnostics."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from complexity_estimator.domain.models.source import FunctionSpan, SourceView
from complexity_estimator.domain.models.syntax import SyntaxNode
from complexity_estimator.domain.services.pattern_detectors.loop_detector import LoopPatternDetector
from complexity_estimator.infrastructure.parser.call_graph import CallGraph, CallGraphBuilder
from complexity_estimator.infrastructure.parser.preprocessor import (
    ParserWarning,
    SourceNormalizer,
)
from complexity_estimator.infrastructure.parser.structural_parser import StructuralParser
from complexity_estimator.shared.exceptions import ParsingError


@dataclass
class ParserDiagnostics:
    """Metadata emitted after parsing to aid debugging and tooling."""

    normalized_source: str
    warnings: List[ParserWarning] = field(default_factory=list)
    skipped_lines: int = 0
    logical_lines: int = 0


@dataclass
class ParserResult:
    """Tuple-like structure returned by :class:`LanguageParser`."""

    tree: SyntaxNode
    diagnostics: ParserDiagnostics
    view: SourceView
    call_graph: CallGraph

    @property
    def functions(self) -> List[FunctionSpan]:
        return self.view.functions


class ILanguageParser(ABC):
    """
    Interface for the language parser.
    """

    @abstractmethod
    def parse(self, code: str) -> ParserResult:
        """
        Parse code and return the syntax tree.
        """

    @abstractmethod
    def parse_file(self, file_path: str) -> ParserResult:
        """
        Parse a file and return the syntax tree.
        """


class LanguageParser(ILanguageParser):
    """
    Tolerant parser for C-like and Python-like snippets.
    Normalizes the source once, then builds the tree, source view and call graph.
    """

    def __init__(self):
        """
        Initializes the components needed for parsing.
        """
        self._normalizer = SourceNormalizer()
        self._structural_parser = StructuralParser()
        self._call_graph_builder = CallGraphBuilder()
        self._loop_detector = LoopPatternDetector()

    def parse(self, code: str) -> ParserResult:
        """
        Parse code and return the syntax tree.

        Malformed input never raises; unrecognised constructs are reported in
        the diagnostics instead.

        Args:
            code: Source code string to parse

        Returns:
            ParserResult with the tree, diagnostics, source view and call graph
        """
        preprocessed = self._normalizer.normalize(code or "")
        parsed = self._structural_parser.parse(preprocessed.lines)
        loops = self._loop_detector.detect(parsed.tree)

        view = SourceView(
            lines=preprocessed.lines,
            functions=parsed.functions,
            max_loop_depth=loops["max_loop_depth"],
            loop_count=loops["loop_count"],
        )
        diagnostics = ParserDiagnostics(
            normalized_source=preprocessed.code,
            warnings=preprocessed.warnings + parsed.warnings,
            skipped_lines=parsed.skipped_lines,
            logical_lines=len(preprocessed.lines),
        )
        return ParserResult(
            tree=parsed.tree,
            diagnostics=diagnostics,
            view=view,
            call_graph=self._call_graph_builder.build(parsed.tree),
        )

    def parse_file(self, file_path: str) -> ParserResult:
        """
        Parse a file and return the syntax tree.

        Raises:
            ParsingError: If the file cannot be read
        """
        try:
            code = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParsingError(f"Error reading file {file_path}: {str(e)}") from e
        return self.parse(code)


def build_source_view(code: str) -> SourceView:
    """Normalized view of ``code`` as consumed by the pattern matcher."""

    return LanguageParser().parse(code).view
