"""Call graph over user-defined functions, built from the parsed tree."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

import networkx as nx

from complexity_estimator.domain.models.syntax import NodeKind, SyntaxNode
from complexity_estimator.infrastructure.parser import statements

logger = logging.getLogger(__name__)


@dataclass
class CallGraph:
    """Directed function -> callee graph with per-function call counts."""

    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    call_counts: Dict[str, int] = field(default_factory=dict)

    def callees(self, name: str) -> List[str]:
        if name not in self.graph:
            return []
        return sorted(self.graph.successors(name))

    def mutual_recursion(self) -> List[List[str]]:
        """Cycles spanning more than one function, each sorted by name."""

        cycles = [sorted(cycle) for cycle in nx.simple_cycles(self.graph) if len(cycle) > 1]
        return sorted(cycles)

    def is_self_recursive(self, name: str) -> bool:
        return self.graph.has_edge(name, name)


class CallGraphBuilder:
    def build(self, tree: SyntaxNode) -> CallGraph:
        functions = tree.find(NodeKind.FUNCTION)
        names = {node.name for node in functions if node.name}

        graph = nx.DiGraph()
        graph.add_nodes_from(sorted(names))
        counts: Counter = Counter()

        for function in functions:
            for node in function.walk():
                if node is function or node.metadata.get("synthetic"):
                    continue
                for callee in statements.call_names(self._call_text(node)):
                    if callee not in names:
                        continue
                    counts[callee] += 1
                    graph.add_edge(function.name, callee)

        call_graph = CallGraph(
            graph=graph, call_counts={name: counts.get(name, 0) for name in names}
        )
        cycles = call_graph.mutual_recursion()
        if cycles:
            logger.debug("Mutual recursion detected: %s", cycles)
        return call_graph

    def _call_text(self, node: SyntaxNode) -> str:
        """Header nodes contribute only their condition; bodies are separate nodes."""

        if node.kind in (NodeKind.LOOP, NodeKind.CONDITIONAL):
            return statements.header_condition(node.text)
        return node.text
