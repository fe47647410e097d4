"""Dependency graph between flags, used to order constraint evaluation."""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Mapping


@dataclass
class DependencyGraph:
    """Graph of flag dependencies with cycle detection and traversal."""

    nodes: list[str] = field(default_factory=list)  # declaration order
    edges: dict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set)
    )  # flag -> flags it reads
    reverse_edges: dict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set)
    )  # flag -> flags that read it

    @classmethod
    def from_dependencies(cls, dependencies: Mapping[str, Iterable[str]]) -> "DependencyGraph":
        """Build graph from a flag -> depends_on mapping (insertion order is kept)."""
        graph = cls()

        for flag in dependencies:
            graph._add_node(flag)

        for flag, deps in dependencies.items():
            for dep in deps:
                graph._add_node(dep)
                graph.edges[flag].add(dep)
                graph.reverse_edges[dep].add(flag)

        return graph

    def _add_node(self, flag: str) -> None:
        if flag not in self.edges:
            self.nodes.append(flag)
            self.edges[flag] = set()

    def get_dependencies(self, flag: str) -> set[str]:
        return self.edges.get(flag, set())

    def get_dependents(self, flag: str) -> set[str]:
        return self.reverse_edges.get(flag, set())

    def transitive_dependents(self, start: str) -> set[str]:
        """All flags whose constraints read `start`, directly or indirectly (excluding start)."""
        visited: set[str] = set()
        stack = [start]

        while stack:
            current = stack.pop()
            for dependent in self.reverse_edges.get(current, set()):
                if dependent not in visited:
                    visited.add(dependent)
                    stack.append(dependent)

        visited.discard(start)
        return visited

    def topological_sort(self) -> list[str]:
        """Return flags in dependency order (deps first).

        Uses Kahn's algorithm; among ready nodes the earliest declared wins,
        so the order is stable. Returns a partial order if cycles exist.
        """
        position = {node: i for i, node in enumerate(self.nodes)}
        in_degree = {node: len(self.edges.get(node, set())) for node in self.nodes}

        ready = [node for node in self.nodes if in_degree[node] == 0]
        result = []

        while ready:
            ready.sort(key=position.__getitem__)
            node = ready.pop(0)
            result.append(node)

            for dependent in self.reverse_edges.get(node, set()):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    ready.append(dependent)

        return result

    def find_cycles(self) -> list[list[str]]:
        """Find all cycles using Tarjan's strongly connected components.

        Only returns SCCs with more than one node, plus self-loops.
        """
        index_counter = [0]
        stack = []
        lowlinks = {}
        index = {}
        on_stack = {}
        sccs = []

        def strongconnect(node):
            index[node] = index_counter[0]
            lowlinks[node] = index_counter[0]
            index_counter[0] += 1
            stack.append(node)
            on_stack[node] = True

            for dep in self.edges.get(node, set()):
                if dep not in index:
                    strongconnect(dep)
                    lowlinks[node] = min(lowlinks[node], lowlinks[dep])
                elif on_stack.get(dep, False):
                    lowlinks[node] = min(lowlinks[node], index[dep])

            if lowlinks[node] == index[node]:
                scc = []
                while True:
                    w = stack.pop()
                    on_stack[w] = False
                    scc.append(w)
                    if w == node:
                        break
                if len(scc) > 1 or node in self.edges.get(node, set()):
                    sccs.append(sorted(scc))

        for node in self.nodes:
            if node not in index:
                strongconnect(node)

        return sccs
