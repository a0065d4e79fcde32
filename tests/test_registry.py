"""
Test suite for the scene graph and the object reference registry.
"""

import pytest
import numpy as np
from orrery import ObjectReferenceRegistry, SceneNode, NodeKind, sol_system, alpha_centauri_system


class TestSceneNode:
    """Test transforms and tree edits."""

    def test_world_position_composes(self):
        """World position sums translations up the parent chain."""
        root = SceneNode('scene', NodeKind.ROOT, position=[1.0, 0.0, 0.0])
        group = root.add(SceneNode('earth-orbit', position=[2.0, 0.0, 0.0]))
        body = group.add(SceneNode('earth', NodeKind.CELESTIAL, position=[0.0, 0.0, 0.5]))
        assert np.allclose(body.world_position(), [3.0, 0.0, 0.5])

    def test_world_position_is_a_copy(self):
        """Mutating the returned vector does not move the node."""
        node = SceneNode('n', position=[1.0, 2.0, 3.0])
        pos = node.world_position()
        pos[0] = 99.0
        assert node.position[0] == 1.0

    def test_reparent(self):
        """Adding a node elsewhere detaches it from its old parent."""
        a, b = SceneNode('a'), SceneNode('b')
        child = a.add(SceneNode('c'))
        b.add(child)
        assert child.parent is b
        assert a.children == []
        assert b.children == [child]

    def test_self_parent(self):
        """A node cannot contain itself."""
        node = SceneNode('n')
        with pytest.raises(ValueError, match="own child"):
            node.add(node)

    def test_invalid_position(self):
        """Positions must be finite 3-vectors."""
        with pytest.raises(ValueError, match="3 components"):
            SceneNode('n', position=[1.0, 2.0])
        with pytest.raises(ValueError, match="finite"):
            SceneNode('n', position=[np.nan, 0.0, 0.0])


class TestRegistry:
    """Test id to live-node lookups."""

    @pytest.fixture
    def registry(self):
        return ObjectReferenceRegistry('sol')

    def test_register_and_get(self, registry):
        """Lookups return the registered node itself."""
        node = SceneNode('earth', NodeKind.CELESTIAL)
        registry.register('earth', node)
        assert registry.get('earth') is node
        assert 'earth' in registry
        assert registry.get('mars') is None

    def test_unregister_deletes_entry(self, registry):
        """Unregistering removes the key, not just the value."""
        registry.register('earth', SceneNode('earth'))
        registry.register('luna', SceneNode('luna'))
        registry.unregister('earth')
        assert 'earth' not in registry
        assert registry.ids() == ('luna',)
        assert len(registry) == 1
        registry.unregister('never-there')

    def test_register_replaces(self, registry):
        """A remount replaces the previous node."""
        old, new = SceneNode('earth'), SceneNode('earth')
        registry.register('earth', old)
        registry.register('earth', new)
        assert registry.get('earth') is new
        assert len(registry) == 1

    def test_register_validation(self, registry):
        """Ids must be non-empty and values scene nodes."""
        with pytest.raises(ValueError, match="non-empty"):
            registry.register('', SceneNode('x'))
        with pytest.raises(TypeError, match="Expected SceneNode"):
            registry.register('earth', object())

    def test_same_system_copy_keeps_entries(self, registry):
        """Rebinding a copied system with the same id keeps every entry."""
        sol = sol_system()
        registry.register('earth', SceneNode('earth'))
        assert registry.bind_system(sol.with_objects()) is False
        assert registry.bind_system('sol') is False
        assert 'earth' in registry

    def test_different_system_clears(self, registry):
        """Binding another system empties the registry."""
        registry.register('earth', SceneNode('earth'))
        assert registry.bind_system(alpha_centauri_system()) is True
        assert len(registry) == 0
        assert registry.system_id == 'alpha-centauri'

    def test_unbind(self, registry):
        """Binding None clears the registry."""
        registry.register('earth', SceneNode('earth'))
        assert registry.bind_system(None) is True
        assert registry.system_id is None
        assert len(registry) == 0
