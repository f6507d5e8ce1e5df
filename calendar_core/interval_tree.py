"""
Augmented AVL tree of closed intervals.

Used by the in-memory storage to answer overlap queries without scanning
every stored event. Nodes are ordered by start; each node also tracks the
largest end found in its subtree so whole branches can be skipped.
"""

from typing import Any, Generic, Optional, TypeVar

# T is the totally ordered coordinate type (datetime for events)
T = TypeVar('T')


class IntervalNode(Generic[T]):
    """Tree node; callers keep it as a handle for later removal."""
    __slots__ = ['start', 'end', 'data', 'left', 'right', 'parent', 'max_end', 'height']

    def __init__(self, start: T, end: T, data: Any):
        self.start: T = start
        self.end: T = end
        self.data: Any = data
        self.left: Optional['IntervalNode[T]'] = None
        self.right: Optional['IntervalNode[T]'] = None
        self.parent: Optional['IntervalNode[T]'] = None
        self.max_end: T = end
        self.height: int = 1


class IntervalTree(Generic[T]):
    def __init__(self):
        self.root: Optional[IntervalNode[T]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    # --- Balancing ---

    @staticmethod
    def _height(node: Optional[IntervalNode[T]]) -> int:
        return node.height if node else 0

    def _refresh(self, node: IntervalNode[T]):
        node.height = 1 + max(self._height(node.left), self._height(node.right))
        max_end = node.end
        for child in (node.left, node.right):
            if child and child.max_end > max_end:
                max_end = child.max_end
        node.max_end = max_end

    def _replace_child(self, parent: Optional[IntervalNode[T]], old: IntervalNode[T],
                       new: Optional[IntervalNode[T]]):
        if parent is None:
            self.root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new
        if new:
            new.parent = parent

    def _rotate_left(self, x: IntervalNode[T]):
        y = x.right
        x.right = y.left
        if y.left:
            y.left.parent = x
        self._replace_child(x.parent, x, y)
        y.left = x
        x.parent = y
        self._refresh(x)
        self._refresh(y)

    def _rotate_right(self, y: IntervalNode[T]):
        x = y.left
        y.left = x.right
        if x.right:
            x.right.parent = y
        self._replace_child(y.parent, y, x)
        x.right = y
        y.parent = x
        self._refresh(y)
        self._refresh(x)

    def _rebalance_upwards(self, node: Optional[IntervalNode[T]]):
        while node:
            self._refresh(node)
            balance = self._height(node.left) - self._height(node.right)
            if balance > 1:
                if self._height(node.left.left) < self._height(node.left.right):
                    self._rotate_left(node.left)
                self._rotate_right(node)
                node = node.parent
            elif balance < -1:
                if self._height(node.right.right) < self._height(node.right.left):
                    self._rotate_right(node.right)
                self._rotate_left(node)
                node = node.parent
            node = node.parent

    # --- Public API ---

    def insert(self, start: T, end: T, data: Any) -> IntervalNode[T]:
        """
        Add an interval and return its node.

        Equal starts go to the right, so an in-order walk yields intervals
        with equal starts in insertion order.
        """
        node = IntervalNode(start, end, data)
        self._size += 1
        if not self.root:
            self.root = node
            return node

        parent = None
        current = self.root
        while current:
            parent = current
            current = current.left if start < current.start else current.right

        node.parent = parent
        if start < parent.start:
            parent.left = node
        else:
            parent.right = node
        self._rebalance_upwards(parent)
        return node

    def remove(self, node: IntervalNode[T]) -> Optional[IntervalNode[T]]:
        """
        Remove the interval held by node.

        When node has two children its in-order successor's payload is
        moved into node and the successor is unlinked instead. In that case
        node is returned so the caller can re-point whatever referenced the
        successor; otherwise None is returned.
        """
        self._size -= 1
        if node.left and node.right:
            victim = node.right
            while victim.left:
                victim = victim.left
        else:
            victim = node

        child = victim.left or victim.right
        rebalance_from = victim.parent
        self._replace_child(victim.parent, victim, child)

        if victim is node:
            self._rebalance_upwards(rebalance_from)
            return None

        node.start, node.end, node.data = victim.start, victim.end, victim.data
        self._rebalance_upwards(rebalance_from)
        self._rebalance_upwards(node)
        return node

    def find_intersecting(self, start: T, end: T) -> list[IntervalNode[T]]:
        """Nodes whose interval shares at least one point with [start, end], in start order."""
        found: list[IntervalNode[T]] = []

        def _search(node: Optional[IntervalNode[T]]):
            if not node or start > node.max_end:
                return
            _search(node.left)
            if node.start <= end:
                if node.end >= start:
                    found.append(node)
                _search(node.right)

        _search(self.root)
        return found

    # --- Debug Tool ---

    def verify_integrity(self):
        """Raise RuntimeError if AVL balance, max_end or parent links are broken."""
        def _walk(node: Optional[IntervalNode[T]]):
            if not node:
                return 0, None

            for child in (node.left, node.right):
                if child and child.parent is not node:
                    raise RuntimeError(f"Parent link violation at {node.start}")

            left_h, left_max = _walk(node.left)
            right_h, right_max = _walk(node.right)

            if abs(left_h - right_h) > 1:
                raise RuntimeError(f"AVL violation at {node.start}")

            expected_max = max(m for m in (node.end, left_max, right_max) if m is not None)
            if node.max_end != expected_max:
                raise RuntimeError(f"max_end violation at {node.start}")

            return 1 + max(left_h, right_h), expected_max

        _walk(self.root)
