# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Cluster tree built by bisecting k-means.

Nodes live in an arena and are addressed by integer id in creation order.
The root has id 0. Splitting a leaf appends two children; the split node
keeps the center, cost and size it had before the split.
"""

from typing import List, Optional, Tuple

import numpy as np


class ClusterNode:
    """
    One cluster in the tree.

    Attributes
    ----------
    index : int
        Node id (position in the arena, i.e. creation order).
    center : np.ndarray
        Centroid of the node's members.
    cost : float
        Sum of member costs against ``center``.
    size : int
        Number of members.
    parent : int or None
        Id of the parent node, None for the root.
    children : tuple of int
        Ids of the two children, empty for a leaf.
    """

    __slots__ = ("index", "center", "cost", "size", "parent", "children")

    def __init__(
        self,
        index: int,
        center: np.ndarray,
        cost: float,
        size: int,
        parent: Optional[int] = None,
    ):
        self.index = index
        self.center = center
        self.cost = cost
        self.size = size
        self.parent = parent
        self.children: Tuple[int, ...] = ()

    @property
    def isLeaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        return (
            f"ClusterNode(index={self.index}, size={self.size}, "
            f"cost={self.cost:.6g}, children={self.children})"
        )


class ClusterTree:
    """Arena of ClusterNodes forming a rooted binary tree."""

    def __init__(self, center: np.ndarray, cost: float, size: int):
        self._nodes: List[ClusterNode] = [ClusterNode(0, center, cost, size)]
        self._frozen = False

    @property
    def root(self) -> ClusterNode:
        return self._nodes[0]

    @property
    def numNodes(self) -> int:
        return len(self._nodes)

    def node(self, index: int) -> ClusterNode:
        return self._nodes[index]

    def nodes(self) -> List[ClusterNode]:
        return list(self._nodes)

    def split(
        self,
        index: int,
        left: Tuple[np.ndarray, float, int],
        right: Tuple[np.ndarray, float, int],
    ) -> Tuple[int, int]:
        """
        Turn leaf ``index`` into an internal node with two new children.

        ``left`` and ``right`` are ``(center, cost, size)`` triples. Returns
        the ids of the new children.
        """
        if self._frozen:
            raise RuntimeError("cluster tree is frozen")
        parent = self._nodes[index]
        if not parent.isLeaf:
            raise ValueError(f"node {index} has already been split")
        ids = []
        for center, cost, size in (left, right):
            child = ClusterNode(len(self._nodes), center, cost, size, parent=index)
            self._nodes.append(child)
            ids.append(child.index)
        parent.children = tuple(ids)
        return ids[0], ids[1]

    def leaves(self) -> List[ClusterNode]:
        """Leaves in left-to-right order."""
        result = []
        stack = [0]
        while stack:
            node = self._nodes[stack.pop()]
            if node.isLeaf:
                result.append(node)
            else:
                stack.extend(reversed(node.children))
        return result

    def depth(self, index: int) -> int:
        depth = 0
        node = self._nodes[index]
        while node.parent is not None:
            node = self._nodes[node.parent]
            depth += 1
        return depth

    def totalCost(self) -> float:
        return float(sum(leaf.cost for leaf in self.leaves()))

    def freeze(self) -> "ClusterTree":
        """Make every center read-only and forbid further splits."""
        for node in self._nodes:
            node.center.setflags(write=False)
        self._frozen = True
        return self

    def toDebugString(self) -> str:
        lines = []
        stack = [0]
        while stack:
            node = self._nodes[stack.pop()]
            indent = "  " * self.depth(node.index)
            lines.append(
                f"{indent}node {node.index}: size={node.size} cost={node.cost:.6g} "
                f"center={np.array2string(node.center, separator=',')}"
            )
            stack.extend(reversed(node.children))
        return "\n".join(lines)
