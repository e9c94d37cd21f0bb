"""
Pass pipeline: ordered, in-place simplification of a decoded graph.

Components:
    - Pass / PassOptions: base class and switches
    - GraalPass: kinds and labels for Graal compiler graphs
    - TastyPass: AST simplification for Tasty interpreter graphs
    - FallbackPass: defaults, edge reduction; always runs last
    - RankRegistry: ranks deferred until the whole pipeline has run

Usage:
    from graphdump.passes import apply_passes

    apply_passes(graph)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graphdump.passes.base import Pass, PassOptions
from graphdump.passes.fallback import FallbackPass
from graphdump.passes.graal import GraalPass
from graphdump.passes.ranks import DeferredRank, RankOrder, RankRegistry
from graphdump.passes.tasty import TastyPass

if TYPE_CHECKING:
    from graphdump.core.graph import Graph

logger = logging.getLogger(__name__)

DEFAULT_PASSES: tuple[type[Pass], ...] = (GraalPass, TastyPass, FallbackPass)


class Pipeline:
    """Runs passes strictly in order, then emits the deferred ranks.

    A pass that raises leaves the graph partially rewritten; the caller
    should discard it.
    """

    def __init__(
        self,
        passes: tuple[type[Pass], ...] = DEFAULT_PASSES,
        options: PassOptions | None = None,
    ) -> None:
        self.passes = passes
        self.options = options if options is not None else PassOptions()

    def applicable(self, graph: Graph) -> list[type[Pass]]:
        return [pass_class for pass_class in self.passes if pass_class.applies(graph)]

    def apply(self, graph: Graph) -> list[str]:
        """Apply every applicable pass to ``graph``. Returns their names."""
        ranks = RankRegistry()
        applied = []
        for pass_class in self.applicable(graph):
            logger.debug("Applying %s pass to %r", pass_class.name, graph)
            pass_class(self.options, ranks).apply(graph)
            applied.append(pass_class.name)
        logger.debug("Emitting %d deferred ranks", len(ranks))
        ranks.emit(graph)
        return applied


def apply_passes(graph: Graph, options: PassOptions | None = None) -> list[str]:
    """Apply the default pipeline to ``graph`` in place."""
    return Pipeline(options=options).apply(graph)


__all__ = [
    "Pass",
    "PassOptions",
    "Pipeline",
    "apply_passes",
    "DEFAULT_PASSES",
    # Passes
    "GraalPass",
    "TastyPass",
    "FallbackPass",
    # Ranks
    "RankOrder",
    "RankRegistry",
    "DeferredRank",
]
