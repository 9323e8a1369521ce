"""
Dependency graph resolution for feature assembly.

Provides lazy topological ordering and cycle detection for feature
dependencies.

Features:
- Depth-first topological order driven by declared dependency order
- Lazy expansion: node metadata is requested only when the node is visited
- Circular dependency detection with full cycle reporting
- Explicit work stack, so deep chains do not hit the recursion limit
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import CircularDependencyError
from .models import FeatureMeta

logger = logging.getLogger(__name__)


# Fetches metadata for (name, referrer); referrer is None for the root.
MetaFetcher = Callable[[str, Optional[str]], FeatureMeta]
# Called once per node when it is finished, in output order.
CompletionCallback = Callable[[str, Optional[str]], None]


class NodeState(Enum):
    """Traversal state of a node."""
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class DependencyGraph:
    """
    Ephemeral dependency graph built while resolving one feature.

    Nodes are feature names, edge A -> B means "A depends on B". The graph
    is filled in as nodes are visited and belongs to a single resolution.
    """

    def __init__(self):
        """Initialize an empty dependency graph."""
        self.states: Dict[str, NodeState] = {}
        self.edges: Dict[str, List[str]] = {}
        self.order: List[str] = []

    def state(self, feature_name: str) -> NodeState:
        return self.states.get(feature_name, NodeState.UNVISITED)

    def get_dependencies(self, feature_name: str) -> List[str]:
        """
        Get direct (de-duplicated) dependencies of a visited feature.

        Args:
            feature_name: Name of the feature

        Returns:
            Dependency names in declared order, empty if the node is unknown
        """
        return list(self.edges.get(feature_name, []))

    def walk(
        self,
        root: str,
        fetch_meta: MetaFetcher,
        on_complete: Optional[CompletionCallback] = None,
    ) -> List[str]:
        """
        Visit root and its transitive dependencies depth-first.

        Dependencies are visited in declared order and a node is emitted
        only after all of its dependencies, so the result is a topological
        order where ties between independent branches follow declaration.

        Args:
            root: Name of the feature to start from
            fetch_meta: Metadata lookup for (name, referrer)
            on_complete: Optional hook invoked as each node is emitted

        Returns:
            Feature names, dependencies before dependents, root last

        Raises:
            CircularDependencyError: If a node is reached while in progress
            Any error raised by fetch_meta or on_complete
        """
        # Frames hold (name, referrer, iterator over remaining dependencies).
        # The names of the frames form the current path from the root.
        stack: List[Tuple[str, Optional[str], Iterator[str]]] = []
        self._enter(root, None, fetch_meta, stack)

        while stack:
            name, parent, pending = stack[-1]
            dep = next(pending, None)
            if dep is None:
                stack.pop()
                self.states[name] = NodeState.DONE
                self.order.append(name)
                logger.debug(f"Completed '{name}' at position {len(self.order) - 1}")
                if on_complete is not None:
                    on_complete(name, parent)
                continue
            self._enter(dep, name, fetch_meta, stack)

        return list(self.order)

    def _enter(
        self,
        name: str,
        parent: Optional[str],
        fetch_meta: MetaFetcher,
        stack: List[Tuple[str, Optional[str], Iterator[str]]],
    ) -> None:
        state = self.state(name)
        if state is NodeState.DONE:
            return
        if state is NodeState.IN_PROGRESS:
            path = [frame[0] for frame in stack]
            raise CircularDependencyError(path[path.index(name):])

        self.states[name] = NodeState.IN_PROGRESS
        meta = fetch_meta(name, parent)
        dependencies = meta.unique_dependencies()
        self.edges[name] = dependencies
        logger.debug(f"Visiting '{name}' with dependencies {dependencies}")
        stack.append((name, parent, iter(dependencies)))
