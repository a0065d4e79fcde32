"""
Test suite for kinematic orbit animation.

Tests cover:
- Kepler solver and orbit offsets
- Deterministic seeded phases
- Parent-following containers updated parents-first
- Pause, static and linear modes
- Binary pairs and missing references
"""

import math
import pytest
import numpy as np
from orrery import (ObjectReferenceRegistry, OrbitalAnimator, OrbitalMechanicsCalculator,
                    NodeKind, sol_system, alpha_centauri_system, config)
from orrery.animator import solve_kepler, true_anomaly, orbital_offset, angular_rate
from orrery.view_modes import OrbitStyle, REALISTIC, NAVIGATIONAL, PROFILE


def distance(a, b):
    return float(np.linalg.norm(a - b))


@pytest.fixture
def sol():
    return sol_system()


@pytest.fixture
def calc():
    return OrbitalMechanicsCalculator()


@pytest.fixture
def registry():
    return ObjectReferenceRegistry('sol')


def attached(system, registry, calc, mode, seed=3, **kwargs):
    animator = OrbitalAnimator(registry, seed=seed, **kwargs)
    animator.attach(system)
    animator.apply_layout(calc.compute_layout(system.objects, mode), mode)
    return animator


class TestOrbitMath:
    """Test the Kepler solver and orbit offsets."""

    @pytest.mark.parametrize("e", [0.1, 0.5, 0.9])
    def test_kepler_equation_satisfied(self, e):
        """The eccentric anomaly solves M = E - e sin E."""
        M = 1.0
        E = solve_kepler(M, e)
        assert E - e * math.sin(E) == pytest.approx(M, abs=1e-6)

    def test_circular_shortcut(self):
        """Nearly circular orbits return the mean anomaly."""
        assert solve_kepler(2.0, 0.0) == 2.0

    def test_true_anomaly_at_periapsis(self):
        """E = 0 maps to theta = 0."""
        assert true_anomaly(0.0, 0.5) == 0.0

    def test_circular_offset(self):
        """A flat circle starts on +x and runs through +z."""
        assert np.allclose(orbital_offset(0.0, 2.0), [2.0, 0.0, 0.0])
        assert np.allclose(orbital_offset(math.pi / 2, 2.0), [0.0, 0.0, 2.0])

    def test_eccentric_periapsis(self):
        """Phase 0 of an eccentric orbit is at periapsis."""
        offset = orbital_offset(0.0, 10.0, eccentricity=0.5)
        assert np.allclose(offset, [5.0, 0.0, 0.0])

    def test_inclination_tilts_into_y(self):
        """A polar orbit at quarter phase points straight up."""
        offset = orbital_offset(math.pi / 2, 1.0, inclination=90.0)
        assert np.allclose(offset, [0.0, 1.0, 0.0], atol=1e-12)

    def test_style_flattens(self):
        """Styles without eccentricity and inclination give flat circles."""
        style = OrbitStyle(eccentric=False, inclined=False)
        offset = orbital_offset(math.pi / 2, 3.0, eccentricity=0.5, inclination=45.0, style=style)
        assert np.allclose(offset, [0.0, 0.0, 3.0])

    def test_linear_style(self):
        """Linear style ignores phase and puts the body on +x."""
        style = OrbitStyle(linear=True)
        assert np.allclose(orbital_offset(1.234, 7.0, 0.3, 20.0, style), [7.0, 0.0, 0.0])

    def test_angular_rate(self):
        """Rate scales with the speed factor and inverse period."""
        assert angular_rate(365.25) == pytest.approx(config.ORBIT_SPEED_FACTOR * 2 * math.pi / 365.25)
        assert angular_rate(0.5) == angular_rate(1.0)


class TestAttach:
    """Test node creation and registration."""

    def test_registers_every_body(self, sol, registry):
        """Each object gets a celestial body node under its own container."""
        animator = OrbitalAnimator(registry, seed=1)
        root = animator.attach(sol)
        assert set(registry.ids()) == {o.id for o in sol.objects}
        earth = registry.get('earth')
        assert earth.kind is NodeKind.CELESTIAL
        assert earth.parent.name == 'earth-orbit'
        assert earth.parent.parent is root

    def test_detach_unregisters(self, sol, registry):
        """Detaching removes bodies from the registry and the scene."""
        animator = OrbitalAnimator(registry, seed=1)
        root = animator.attach(sol)
        animator.detach()
        assert len(registry) == 0
        assert root.children == []

    def test_seeded_phases_repeat(self, sol):
        """The same seed gives the same initial phases."""
        a = OrbitalAnimator(ObjectReferenceRegistry(), seed=42)
        b = OrbitalAnimator(ObjectReferenceRegistry(), seed=42)
        a.attach(sol)
        b.attach(sol)
        assert a.initial_phase('earth') == b.initial_phase('earth')
        assert a.initial_phase('luna') == b.initial_phase('luna')

    def test_phases_differ_between_objects(self, sol, registry):
        """Every object draws its own phase."""
        animator = OrbitalAnimator(registry, seed=42)
        animator.attach(sol)
        assert animator.initial_phase('earth') != animator.initial_phase('mars')
        assert 0.0 <= animator.initial_phase('earth') < 2 * math.pi

    def test_negative_time_multiplier(self, registry):
        """Time cannot run backwards."""
        with pytest.raises(ValueError, match="non-negative"):
            OrbitalAnimator(registry, time_multiplier=-1.0)

    def test_reattach_same_system_keeps_tracks(self, sol, registry, calc):
        """Re-attaching a copy of the same system keeps nodes, phases and distances."""
        animator = attached(sol, registry, calc, 'navigational')
        animator.tick(1.0)
        animator.pause()
        earth_node = registry.get('earth')
        phase = animator.phase('earth')
        before = earth_node.world_position()

        root = animator.attach(sol.with_objects())
        assert root is animator.root
        assert registry.get('earth') is earth_node
        assert animator.phase('earth') == phase
        assert animator.tick(1.0) is True
        assert np.allclose(registry.get('earth').world_position(), before)

    def test_reattach_adds_and_drops_objects(self, sol, registry, calc):
        """Objects new to the system get tracks; objects gone from it are removed."""
        animator = attached(sol, registry, calc, 'navigational')
        phase = animator.phase('earth')
        remaining = [o for o in sol.objects if o.id != 'luna']
        animator.attach(sol.with_objects(remaining))
        assert 'luna' not in registry
        assert all(node.name != 'luna-orbit' for node in animator.root.children)
        assert animator.phase('earth') == phase

        animator.attach(sol)
        assert 'luna' in registry
        animator.tick(1.0)
        earth = registry.get('earth').world_position()
        luna = registry.get('luna').world_position()
        layout = calc.compute_layout(sol.objects, 'navigational')
        assert distance(luna, earth) == pytest.approx(layout['luna'].orbit_distance, rel=1e-9)


class TestTick:
    """Test per-frame position updates."""

    def test_no_layout_no_pass(self, sol, registry):
        """Nothing moves before a layout is applied."""
        animator = OrbitalAnimator(registry, seed=1)
        animator.attach(sol)
        assert animator.tick(1.0) is False

    def test_moon_follows_planet_same_frame(self, sol, registry, calc):
        """A moon sits at its orbit distance from the planet's current position every frame."""
        animator = attached(sol, registry, calc, 'navigational')
        layout = calc.compute_layout(sol.objects, 'navigational')
        for _ in range(20):
            assert animator.tick(1.0) is True
            earth = registry.get('earth').world_position()
            luna = registry.get('luna').world_position()
            sun = registry.get('sol').world_position()
            assert distance(luna, earth) == pytest.approx(layout['luna'].orbit_distance, rel=1e-9)
            assert distance(earth, sun) == pytest.approx(layout['earth'].orbit_distance, rel=1e-9)

    def test_navigational_orbits_are_flat(self, sol, registry, calc):
        """Navigational mode keeps every body in the y = 0 plane."""
        animator = attached(sol, registry, calc, 'navigational')
        animator.tick(5.0)
        for pos in animator.positions().values():
            assert pos[1] == pytest.approx(0.0, abs=1e-12)

    def test_realistic_eccentric_bounds(self, sol, registry, calc):
        """Realistic distances stay between periapsis and apoapsis."""
        animator = attached(sol, registry, calc, 'realistic')
        layout = calc.compute_layout(sol.objects, 'realistic')
        animator.tick(30.0)
        mercury = registry.get('mercury').world_position()
        a = layout['mercury'].orbit_distance
        e = sol.get('mercury').orbit.eccentricity
        r = distance(mercury, np.zeros(3))
        assert a * (1 - e) - 1e-9 <= r <= a * (1 + e) + 1e-9

    def test_phase_advances(self, sol, registry, calc):
        """Phases advance by rate times scaled time."""
        animator = attached(sol, registry, calc, 'navigational', time_multiplier=2.0)
        start = animator.phase('earth')
        animator.tick(10.0)
        expected = (start + 20.0 * angular_rate(365.25)) % (2 * math.pi)
        assert animator.phase('earth') == pytest.approx(expected)
        assert animator.simulated_time == pytest.approx(20.0)

    def test_pause_freezes_positions(self, sol, registry, calc):
        """Paused animators only run a pass after invalidation."""
        animator = attached(sol, registry, calc, 'navigational')
        animator.tick(1.0)
        animator.pause()
        before = animator.positions()
        assert animator.tick(1.0) is False
        after = animator.positions()
        assert all(np.array_equal(before[k], after[k]) for k in before)

        animator.apply_layout(calc.compute_layout(sol.objects, 'realistic'), 'realistic')
        assert animator.tick(1.0) is True
        assert animator.tick(1.0) is False
        animator.resume()
        assert animator.tick(1.0) is True

    def test_profile_is_linear_and_static(self, sol, registry, calc):
        """Profile mode lines bodies up on +x and does not animate."""
        animator = attached(sol, registry, calc, 'profile')
        layout = calc.compute_layout(sol.objects, 'profile')
        assert animator.tick(1.0) is True
        assert animator.tick(1.0) is False
        earth = registry.get('earth').world_position()
        luna = registry.get('luna').world_position()
        assert np.allclose(earth, [layout['earth'].orbit_distance, 0.0, 0.0])
        assert np.allclose(luna - earth, [layout['luna'].orbit_distance, 0.0, 0.0])

    def test_generation_counts_passes(self, sol, registry, calc):
        """Each pass bumps the generation counter."""
        animator = attached(sol, registry, calc, 'navigational')
        animator.tick(1.0)
        animator.tick(1.0)
        assert animator.generation == 2

    def test_container_ignores_sub_threshold_parent_motion(self, sol, registry, calc):
        """Containers only move once the parent moved more than CONTAINER_EPSILON."""
        animator = attached(sol, registry, calc, 'navigational', time_multiplier=0.0)
        animator.tick(1.0)
        container = registry.get('earth').parent
        start = container.position.copy()

        registry.get('sol').position = [0.0005, 0.0, 0.0]
        animator.tick(1.0)
        assert np.array_equal(container.position, start)

        registry.get('sol').position = [0.01, 0.0, 0.0]
        animator.tick(1.0)
        assert np.allclose(container.position, [0.01, 0.0, 0.0])

    def test_missing_parent_reference(self, sol, registry, calc):
        """A child whose parent node is gone is left where it was."""
        animator = attached(sol, registry, calc, 'navigational')
        animator.tick(1.0)
        luna_container = registry.get('luna').parent
        before = luna_container.position.copy()
        registry.unregister('earth')
        assert animator.tick(1.0) is True
        assert np.array_equal(luna_container.position, before)

    def test_binary_pair_opposite(self, calc):
        """Binary stars start and stay half an orbit apart."""
        system = alpha_centauri_system()
        registry = ObjectReferenceRegistry()
        animator = attached(system, registry, calc, 'navigational')
        assert animator.phase('alpha-centauri-b') - animator.phase('alpha-centauri-a') == pytest.approx(math.pi)
        for _ in range(5):
            animator.tick(100.0)
            a = registry.get('alpha-centauri-a').world_position()
            b = registry.get('alpha-centauri-b').world_position()
            assert np.allclose(a + b, 0.0, atol=1e-9)
