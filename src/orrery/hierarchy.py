"""
Parent/child structure of a star system.

The hierarchy is an id-keyed adjacency map built once from the authoritative
object list. Display names play no part in it.
"""

import warnings
from typing import Dict, List, Iterable, Optional, Tuple
from .celestial import CelestialObject
from .errors import DataWarning


class SystemHierarchy:
    """
    Id-keyed adjacency map over a system's objects.

    Parameters
    ----------
    objects : iterable of CelestialObject
        Authoritative object list. Order is kept for children of the same
        parent.

    Notes
    -----
    Objects whose parent chain does not end at a root (a dangling parent
    reference, or a cycle) are skipped together with their whole subtree and
    reported with a DataWarning.

    Examples
    --------
    >>> h = SystemHierarchy(system.objects)
    >>> h.children('sol')
    ['mercury', 'venus', 'earth', ...]
    >>> h.depth('luna')
    2
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, objects: Iterable[CelestialObject]):
        self._objects: Dict[str, CelestialObject] = {}
        for obj in objects:
            if obj.id not in self._objects:
                self._objects[obj.id] = obj

        self._valid: Dict[str, bool] = {}
        self._skipped: List[str] = []
        for object_id in self._objects:
            self._resolve(object_id)

        self._children: Dict[str, List[str]] = {}
        self._roots: List[str] = []
        for object_id, obj in self._objects.items():
            if not self._valid[object_id]:
                self._skipped.append(object_id)
                continue
            if obj.parent_id is None:
                self._roots.append(object_id)
            else:
                self._children.setdefault(obj.parent_id, []).append(object_id)

        self._depth: Dict[str, int] = {}
        stack = [(root, 0) for root in reversed(self._roots)]
        while stack:
            object_id, depth = stack.pop()
            self._depth[object_id] = depth
            for child in reversed(self._children.get(object_id, [])):
                stack.append((child, depth + 1))

    @classmethod
    def build(cls, objects: Iterable[CelestialObject]) -> 'SystemHierarchy':
        return cls(objects)

    def _resolve(self, object_id: str) -> bool:
        """Walk up the parent chain with a visited set, caching the verdict."""
        path = []
        visited = set()
        current = object_id
        verdict = True
        while True:
            if current in self._valid:
                verdict = self._valid[current]
                break
            if current in visited:
                warnings.warn(
                    f"Orbit cycle through '{current}'; skipping "
                    f"{sorted(visited)}",
                    DataWarning, stacklevel=3
                )
                verdict = False
                break
            visited.add(current)
            path.append(current)
            parent = self._objects[current].parent_id
            if parent is None:
                verdict = True
                break
            if parent not in self._objects:
                warnings.warn(
                    f"Object '{current}' orbits unknown parent '{parent}'; "
                    f"skipping its subtree",
                    DataWarning, stacklevel=3
                )
                verdict = False
                break
            current = parent
        for visited_id in path:
            self._valid[visited_id] = verdict
        return verdict

    # ========== QUERIES ==========

    @property
    def roots(self) -> Tuple[str, ...]:
        """Ids of objects without a parent"""
        return tuple(self._roots)

    @property
    def skipped(self) -> Tuple[str, ...]:
        """Ids dropped because of a dangling parent or a cycle"""
        return tuple(self._skipped)

    def get(self, object_id: str) -> Optional[CelestialObject]:
        """Return the object if it is part of the valid hierarchy."""
        if object_id in self._depth:
            return self._objects[object_id]
        return None

    def children(self, object_id: str) -> List[str]:
        return list(self._children.get(object_id, []))

    def parent(self, object_id: str) -> Optional[str]:
        obj = self.get(object_id)
        return None if obj is None else obj.parent_id

    def siblings(self, object_id: str) -> List[str]:
        """Other children of the same parent, excluding ``object_id``."""
        parent = self.parent(object_id)
        if parent is None:
            return []
        return [c for c in self._children.get(parent, []) if c != object_id]

    def depth(self, object_id: str) -> int:
        """Number of ancestors; raises KeyError for unknown or skipped ids."""
        return self._depth[object_id]

    def ordered_top_down(self) -> List[str]:
        """All valid ids with every parent listed before its children."""
        return sorted(self._depth, key=lambda i: self._depth[i])

    def parents_deepest_first(self) -> List[str]:
        """Ids that have children, deepest first."""
        parents = [p for p in self._children if p in self._depth]
        return sorted(parents, key=lambda i: -self._depth[i])

    # ========== SPECIAL METHODS ==========

    def __contains__(self, object_id) -> bool:
        return object_id in self._depth

    def __len__(self) -> int:
        return len(self._depth)

    def __iter__(self):
        return iter(self.ordered_top_down())

    def __repr__(self):
        return (f"SystemHierarchy(objects={len(self._depth)}, "
                f"roots={self._roots}, skipped={self._skipped})")
