"""
Test suite for the SystemViewer session: layout, animation and camera wired
together frame by frame.
"""

import pytest
import numpy as np
from orrery import SystemViewer, CameraState, sol_system, alpha_centauri_system


class VirtualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def viewer(clock):
    v = SystemViewer(seed=1, clock=clock)
    yield v
    v.close()


def step(viewer, clock, seconds, dt=1 / 30):
    end = clock.now + seconds
    while clock.now < end:
        clock.now = min(end, clock.now + dt)
        viewer.tick(dt)
    return viewer.camera.state


def loaded(viewer, system=None):
    viewer.load(system if system is not None else sol_system())
    viewer.layout_service.wait()
    viewer.tick(1 / 30)
    return viewer


class TestSession:
    """Test loading and unloading systems."""

    def test_load_mounts_every_object(self, viewer):
        """Every object gets a live node and a layout entry."""
        loaded(viewer)
        ids = {o.id for o in sol_system().objects}
        assert set(viewer.references.ids()) == ids
        assert set(viewer.layout) == ids
        assert viewer.animator.mode.id == 'realistic'

    def test_layout_collected_by_wait_reaches_animator(self, viewer):
        """A layout installed outside tick is still applied on the next frame."""
        loaded(viewer)
        earth = viewer.references.get('earth').world_position()
        assert np.linalg.norm(earth) == pytest.approx(viewer.layout['earth'].orbit_distance, rel=0.05)

    def test_reload_same_system_keeps_ids(self, viewer):
        """Reloading a copy of the active system keeps every reference."""
        loaded(viewer)
        viewer.load(viewer.system.with_objects())
        assert viewer.references.system_id == 'sol'
        assert set(viewer.references.ids()) == {o.id for o in sol_system().objects}

    def test_reload_same_system_keeps_motion(self, viewer):
        """Reloading a copy of the active system leaves every body where it was."""
        loaded(viewer)
        viewer.animator.pause()
        viewer.tick(1 / 30)
        phase = viewer.animator.initial_phase('earth')
        before = viewer.references.get('earth').world_position()

        viewer.load(viewer.system.with_objects())
        viewer.tick(1 / 30)
        assert viewer.animator.initial_phase('earth') == phase
        assert np.allclose(viewer.references.get('earth').world_position(), before)
        viewer.layout_service.wait()
        viewer.tick(1 / 30)
        assert np.allclose(viewer.references.get('earth').world_position(), before)

    def test_switch_system_clears(self, viewer):
        """Loading another system leaves only its references."""
        loaded(viewer)
        loaded(viewer, alpha_centauri_system())
        assert set(viewer.references.ids()) == {'alpha-centauri', 'alpha-centauri-a',
                                                'alpha-centauri-b'}
        assert 'earth' not in viewer.references

    def test_unload(self, viewer):
        """Unloading empties the registry and drops the focus."""
        loaded(viewer)
        viewer.select('earth')
        viewer.unload()
        assert len(viewer.references) == 0
        assert viewer.system is None
        assert viewer.focal_id is None
        assert viewer.camera.state is CameraState.IDLE

    def test_unknown_mode(self, clock):
        """Unknown initial modes are rejected."""
        with pytest.raises(ValueError, match="Unknown view mode"):
            SystemViewer(view_mode='cinematic', clock=clock)


class TestInteraction:
    """Test selection, mode switches and overviews."""

    def test_select_follows_object(self, viewer, clock):
        """Selecting an object focuses on it and then follows it."""
        loaded(viewer)
        assert viewer.select('earth') is True
        assert viewer.focal_id == 'earth'
        assert step(viewer, clock, 1.0) is CameraState.FOLLOWING
        assert viewer.camera.following == 'earth'
        _, target = viewer.camera_pose
        earth = viewer.references.get('earth').world_position()
        assert np.linalg.norm(target - earth) < 0.05

    def test_select_unknown(self, viewer):
        """Unknown ids cannot be selected."""
        loaded(viewer)
        assert viewer.select('vulcan') is False
        assert viewer.focal_id is None

    def test_profile_switch_frames_focal_object(self, viewer, clock):
        """Switching to profile frames the focal object with its farthest child."""
        loaded(viewer)
        viewer.select('earth')
        step(viewer, clock, 1.0)

        viewer.set_view_mode('profile')
        assert viewer.view_mode == 'profile'
        assert viewer.camera.profile_pending
        viewer.layout_service.wait()
        step(viewer, clock, 1.0)

        assert viewer.animator.mode.id == 'profile'
        assert viewer.camera.state is CameraState.IDLE
        earth = viewer.references.get('earth').world_position()
        luna = viewer.references.get('luna').world_position()
        assert luna[1] == pytest.approx(0.0) and luna[2] == pytest.approx(0.0)
        _, target = viewer.camera_pose
        assert np.allclose(target, 0.5 * (earth + luna))

    def test_birds_eye(self, viewer, clock):
        """The overview ends looking at the system origin."""
        loaded(viewer)
        viewer.select('mars')
        step(viewer, clock, 1.0)
        viewer.request_birds_eye()
        assert viewer.focal_id is None
        assert step(viewer, clock, 2.0) is CameraState.IDLE
        _, target = viewer.camera_pose
        assert np.allclose(target, 0.0)

    def test_same_mode_is_noop(self, viewer):
        """Re-selecting the current mode issues no new layout request."""
        loaded(viewer)
        request = viewer.layout_service.request_id
        viewer.set_view_mode('realistic')
        assert viewer.layout_service.request_id == request
