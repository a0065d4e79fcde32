"""
Minimal retained scene graph.

A SceneNode carries a local translation and rotation and composes world
positions through its parent chain. Renderers mirror these nodes; the
animator and camera only ever read and write them.
"""

from enum import Enum
from typing import List, Optional
import numpy as np
from .utils import as_vector

class NodeKind(Enum):
    ROOT = 'root'
    CELESTIAL = 'celestial'
    CONTAINER = 'container'
    CAMERA = 'camera'
    LIGHT = 'light'


class SceneNode:
    """
    A node holding a mutable local transform.

    Parameters
    ----------
    name : str
    kind : NodeKind, optional
        Defaults to CONTAINER
    position : array_like, optional
        Local translation (default: origin)

    Examples
    --------
    >>> root = SceneNode('scene', NodeKind.ROOT)
    >>> group = root.add(SceneNode('earth-orbit', position=[1.0, 0, 0]))
    >>> body = group.add(SceneNode('earth', NodeKind.CELESTIAL, position=[0, 0, 0.5]))
    >>> body.world_position()
    array([1. , 0. , 0.5])
    """

    def __init__(self, name: str, kind: NodeKind = NodeKind.CONTAINER, position=None):
        self.name = name
        self.kind = kind
        self._position = np.zeros(3) if position is None else as_vector(position, "position").copy()
        self.rotation = np.zeros(3)
        self._parent: Optional['SceneNode'] = None
        self._children: List['SceneNode'] = []

    # ========== TRANSFORM ==========

    @property
    def position(self) -> np.ndarray:
        """Local translation (mutable view)"""
        return self._position

    @position.setter
    def position(self, value):
        self._position[:] = as_vector(value, "position")

    def world_position(self) -> np.ndarray:
        """Translation composed through every ancestor, as a new array."""
        total = self._position.copy()
        node = self._parent
        while node is not None:
            total += node._position
            node = node._parent
        return total

    # ========== TREE ==========

    @property
    def parent(self) -> Optional['SceneNode']:
        return self._parent

    @property
    def children(self) -> List['SceneNode']:
        return list(self._children)

    def add(self, child: 'SceneNode') -> 'SceneNode':
        """Attach ``child`` (detaching it from any previous parent) and return it."""
        if child is self:
            raise ValueError("A node cannot be its own child")
        if child._parent is not None:
            child._parent.remove(child)
        child._parent = self
        self._children.append(child)
        return child

    def remove(self, child: 'SceneNode') -> None:
        self._children.remove(child)
        child._parent = None

    def __repr__(self):
        return f"SceneNode('{self.name}', kind={self.kind.value}, position={self._position})"
