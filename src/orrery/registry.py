"""
Object Reference Registry
=========================

Maps object ids to the live scene nodes that render them, scoped to one
system. The animator and the camera resolve "where is object X now" through
it instead of searching the scene graph every frame.

Entries are written only when a node mounts or unmounts and read during the
per-frame passes, so no locking is involved.
"""

from typing import Dict, Optional, Tuple, Union
from .celestial import SystemData
from .scene import SceneNode


class ObjectReferenceRegistry:
    """
    Identity to live-node map for the active system.

    Parameters
    ----------
    system_id : str, optional
        Id of the system the registry starts bound to

    Notes
    -----
    The registry references nodes but does not own them; the scene does.
    Binding a system with the same id keeps all entries, even when the
    SystemData instance is a different (e.g. copied) object. Binding a
    different id empties the registry.

    Examples
    --------
    >>> reg = ObjectReferenceRegistry('sol')
    >>> reg.register('earth', earth_node)
    >>> reg.get('earth') is earth_node
    True
    >>> reg.unregister('earth')
    >>> reg.get('earth') is None
    True
    """

    def __init__(self, system_id: Optional[str] = None):
        self._system_id = system_id
        self._nodes: Dict[str, SceneNode] = {}

    @property
    def system_id(self) -> Optional[str]:
        return self._system_id

    def bind_system(self, system: Union[SystemData, str, None]) -> bool:
        """
        Scope the registry to a system.

        Parameters
        ----------
        system : SystemData or str or None
            The system (or its id) becoming active

        Returns
        -------
        bool
            True if the registry was cleared because the id changed
        """
        system_id = system.id if isinstance(system, SystemData) else system
        if system_id == self._system_id:
            return False
        self._system_id = system_id
        self._nodes.clear()
        return True

    def register(self, object_id: str, node: SceneNode) -> None:
        """Register (or replace) the live node for ``object_id``."""
        if not object_id:
            raise ValueError("Object id must be a non-empty string")
        if not isinstance(node, SceneNode):
            raise TypeError(f"Expected SceneNode, got {type(node).__name__}")
        self._nodes[object_id] = node

    def unregister(self, object_id: str) -> None:
        """Delete the entry for ``object_id``; unknown ids are ignored."""
        self._nodes.pop(object_id, None)

    def get(self, object_id: str) -> Optional[SceneNode]:
        return self._nodes.get(object_id)

    def clear(self) -> None:
        self._nodes.clear()

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._nodes)

    def __contains__(self, object_id) -> bool:
        return object_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self):
        return f"ObjectReferenceRegistry(system_id={self._system_id!r}, entries={len(self._nodes)})"
