"""Index-addressed tree with memoized node depths.

Nodes live in parallel arrays: ``names[i]`` is the label of node i,
``parents[i]`` is the index of its parent (or -1 for a root) and
``depths[i]`` caches its distance from the root (-1 until computed).
"""

from typing import Dict, List

NO_PARENT = -1
UNKNOWN = -1


class ArenaTreeError(Exception):
    """Exception for malformed trees or unknown nodes."""
    pass


class ArenaTree:
    """Tree of named nodes addressed by index."""

    def __init__(self):
        self.names: List[str] = []
        self.parents: List[int] = []
        self.depths: List[int] = []
        self.index: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: str) -> bool:
        return name in self.index

    def node(self, name: str) -> int:
        """Return the index of name, creating the node if needed."""
        if name not in self.index:
            self.index[name] = len(self.names)
            self.names.append(name)
            self.parents.append(NO_PARENT)
            self.depths.append(UNKNOWN)
        return self.index[name]

    def add_edge(self, parent: str, child: str) -> None:
        """Attach child beneath parent."""
        parent_id = self.node(parent)
        child_id = self.node(child)
        if self.parents[child_id] not in (NO_PARENT, parent_id):
            raise ArenaTreeError(f"{child!r} already has parent {self.names[self.parents[child_id]]!r}")
        self.parents[child_id] = parent_id
        # Cached depths may now be stale anywhere below child
        self.depths = [UNKNOWN] * len(self.names)

    def _lookup(self, name: str) -> int:
        try:
            return self.index[name]
        except KeyError:
            raise ArenaTreeError(f"Unknown node {name!r}") from None

    def _depth_of(self, node_id: int) -> int:
        # Walk up to the first node with a cached depth, then fill the chain
        chain = []
        current = node_id
        while current != NO_PARENT and self.depths[current] == UNKNOWN:
            chain.append(current)
            if len(chain) > len(self.names):
                raise ArenaTreeError(f"Cycle detected at {self.names[node_id]!r}")
            current = self.parents[current]

        depth = -1 if current == NO_PARENT else self.depths[current]
        for link in reversed(chain):
            depth += 1
            self.depths[link] = depth
        return self.depths[node_id]

    def depth(self, name: str) -> int:
        """Number of edges between name and its root."""
        return self._depth_of(self._lookup(name))

    def total_depth(self) -> int:
        """Sum of the depths of every node."""
        return sum(self._depth_of(node_id) for node_id in range(len(self.names)))

    def ancestors(self, name: str) -> List[str]:
        """Names from the parent of name up to its root."""
        self.depth(name)
        result = []
        current = self.parents[self._lookup(name)]
        while current != NO_PARENT:
            result.append(self.names[current])
            current = self.parents[current]
        return result

    def transfer_distance(self, source: str, target: str) -> int:
        """Edges between the parents of source and target."""
        source_chain = self.ancestors(source)
        target_chain = self.ancestors(target)
        if not source_chain or not target_chain:
            raise ArenaTreeError("Both nodes need a parent")

        steps_from_source = {name: steps for steps, name in enumerate(source_chain)}
        for steps, name in enumerate(target_chain):
            if name in steps_from_source:
                return steps + steps_from_source[name]
        raise ArenaTreeError(f"{source!r} and {target!r} are in different trees")
