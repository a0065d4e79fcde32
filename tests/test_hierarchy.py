"""
Test suite for the parent/child object hierarchy.
"""

import pytest
from orrery import (CelestialObject, OrbitData, Properties, SystemHierarchy,
                    DataWarning, sol_system)


def body(id, parent=None, a=1.0):
    orbit = None if parent is None else OrbitData(parent=parent, semi_major_axis=a)
    return CelestialObject(id=id, name=id, classification='planet' if parent else 'star',
                           properties=Properties(radius=1000.0), orbit=orbit)


class TestStructure:
    """Test queries on a well-formed system."""

    @pytest.fixture
    def hierarchy(self):
        return SystemHierarchy(sol_system().objects)

    def test_roots(self, hierarchy):
        """Sol is the only root."""
        assert hierarchy.roots == ('sol',)

    def test_children_in_catalog_order(self, hierarchy):
        """Children keep catalog order."""
        assert hierarchy.children('jupiter') == ['io', 'europa', 'ganymede', 'callisto']
        assert hierarchy.children('luna') == []

    def test_depth(self, hierarchy):
        """Depth counts ancestors."""
        assert hierarchy.depth('sol') == 0
        assert hierarchy.depth('earth') == 1
        assert hierarchy.depth('luna') == 2
        with pytest.raises(KeyError):
            hierarchy.depth('nope')

    def test_siblings(self, hierarchy):
        """Siblings exclude the object itself."""
        siblings = hierarchy.siblings('europa')
        assert 'europa' not in siblings
        assert set(siblings) == {'io', 'ganymede', 'callisto'}
        assert hierarchy.siblings('sol') == []

    def test_top_down_order(self, hierarchy):
        """Every parent appears before its children."""
        order = hierarchy.ordered_top_down()
        for object_id in order:
            parent = hierarchy.parent(object_id)
            if parent is not None:
                assert order.index(parent) < order.index(object_id)

    def test_parents_deepest_first(self, hierarchy):
        """Planets with moons are placed before the star."""
        parents = hierarchy.parents_deepest_first()
        assert parents[-1] == 'sol'
        assert set(parents) == {'sol', 'earth', 'jupiter', 'saturn'}


class TestMalformed:
    """Test dangling references and cycles."""

    def test_dangling_parent_skips_subtree(self):
        """An unknown parent drops the object and its descendants with one warning."""
        objects = [body('star'), body('lost', 'ghost'), body('moonlet', 'lost'), body('ok', 'star')]
        with pytest.warns(DataWarning, match="unknown parent 'ghost'") as record:
            hierarchy = SystemHierarchy(objects)
        assert len(record) == 1
        assert set(hierarchy.skipped) == {'lost', 'moonlet'}
        assert 'moonlet' not in hierarchy
        assert hierarchy.get('lost') is None
        assert hierarchy.children('star') == ['ok']

    def test_cycle_terminates(self):
        """A parent cycle is reported and skipped instead of looping."""
        objects = [body('star'), body('a', 'b'), body('b', 'a'), body('c', 'star')]
        with pytest.warns(DataWarning, match="Orbit cycle"):
            hierarchy = SystemHierarchy(objects)
        assert set(hierarchy.skipped) == {'a', 'b'}
        assert len(hierarchy) == 2

    def test_duplicate_ids_keep_first(self):
        """The first object with an id wins."""
        first = body('p', 'star', a=1.0)
        second = body('p', 'star', a=2.0)
        hierarchy = SystemHierarchy([body('star'), first, second])
        assert hierarchy.get('p') is first
        assert hierarchy.children('star') == ['p']
