"""Invalidation relationship graph.

Declares which cached collections go stale as a side effect of mutating
another one. Edges are directional: mutating ``orders`` invalidates
``users`` and ``products`` but not the other way round.
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

from storefront.domain.exceptions import InvalidationGraphError

logger = logging.getLogger(__name__)

DEFAULT_RELATED_ENTITIES: dict[str, list[str]] = {
    "products": ["categories"],
    "reviews": ["products"],
    "orders": ["users", "products"],
    "categories": ["products"],
    "sales": ["products"],
    "banners": [],
}


class InvalidationGraph:
    """Validated, directed mapping ``entity -> related entities``.

    Construction checks every node against the known entity names. Self-edges
    are dropped (an entity is always invalidated when mutated) and one-way
    edges are reported, since a missing reverse edge is the usual source of
    silently stale reads.
    """

    def __init__(
        self,
        edges: Mapping[str, Iterable[str]],
        known_entities: Iterable[str],
    ) -> None:
        self._known = frozenset(known_entities)
        self._edges: dict[str, tuple[str, ...]] = {}
        self.extend(edges)

    def extend(self, edges: Mapping[str, Iterable[str]]) -> None:
        """Add (or replace) the related set of each entity in ``edges``."""
        for source, targets in edges.items():
            if source not in self._known:
                raise InvalidationGraphError(source)
            cleaned: list[str] = []
            for target in targets:
                if target not in self._known:
                    raise InvalidationGraphError(source, target)
                if target == source:
                    logger.warning("Dropping self-edge on '%s' in invalidation graph", source)
                    continue
                if target not in cleaned:
                    cleaned.append(target)
            self._edges[source] = tuple(cleaned)
        self._report_one_way_edges()

    def related(self, entity: str) -> tuple[str, ...]:
        """Entities to invalidate alongside ``entity``; empty when none are declared."""
        return self._edges.get(entity, ())

    def one_way_edges(self) -> list[tuple[str, str]]:
        """Edges ``a -> b`` for which ``b -> a`` is not declared."""
        return [
            (source, target)
            for source, targets in self._edges.items()
            for target in targets
            if source not in self._edges.get(target, ())
        ]

    def as_dict(self) -> dict[str, list[str]]:
        return {source: list(targets) for source, targets in self._edges.items()}

    def _report_one_way_edges(self) -> None:
        for source, target in self.one_way_edges():
            logger.warning(
                "Invalidation edge '%s' -> '%s' has no reverse edge; "
                "mutating '%s' will not refresh '%s'",
                source,
                target,
                target,
                source,
            )


def load_invalidation_graph(
    path: str | Path | None,
    known_entities: Iterable[str],
) -> InvalidationGraph:
    """Build the graph from a YAML file, falling back to the built-in table.

    The file is a mapping of entity name to a list of related entity names.
    Entries in the file replace the built-in related set for that entity.
    """
    known = list(known_entities)
    graph = InvalidationGraph(DEFAULT_RELATED_ENTITIES, known)
    if path is None:
        return graph

    file_path = Path(path)
    if not file_path.exists():
        logger.info("Invalidation graph file %s not found, using defaults", file_path)
        return graph

    raw = yaml.safe_load(file_path.read_text("utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalidation graph file {file_path} must contain a mapping")
    graph.extend({str(k): [str(t) for t in (v or [])] for k, v in raw.items()})
    logger.info("Loaded invalidation graph from %s (%d entities)", file_path, len(raw))
    return graph
