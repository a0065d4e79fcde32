"""
Plotly previews of a layout.

These figures are a debugging aid for checking what a view mode does to a
system; the interactive viewer renders through its own scene.
"""

from typing import Dict, Mapping, Optional, Union
import numpy as np
import plotly.graph_objects as go
from .animator import orbital_offset
from .celestial import SystemData
from .config import config
from .hierarchy import SystemHierarchy
from .layout import LayoutResult
from .view_modes import ViewModeConfig, view_modes


def static_positions(system: SystemData, layout: Mapping[str, LayoutResult],
                     view_mode: Union[str, ViewModeConfig] = 'realistic',
                     phase: float = 0.0) -> Dict[str, np.ndarray]:
    """
    World positions of every laid-out object with all orbits at one phase.

    Parameters
    ----------
    system : SystemData
    layout : Mapping[str, LayoutResult]
    view_mode : str or ViewModeConfig
        Supplies the orbit style (eccentric, inclined, linear)
    phase : float, optional
        Orbit phase used for every object [rad]

    Returns
    -------
    dict
        Object id to position (objects missing from the layout are omitted)
    """
    mode = view_modes.require(view_mode) if isinstance(view_mode, str) else view_mode
    hierarchy = SystemHierarchy(system.objects)
    positions = {}
    for object_id in hierarchy.ordered_top_down():
        obj = hierarchy.get(object_id)
        result = layout.get(object_id)
        if result is None:
            continue
        if obj.parent_id is None:
            positions[object_id] = np.array(obj.position if obj.position is not None else (0.0, 0.0, 0.0))
            continue
        center = positions.get(obj.parent_id)
        if center is None:
            continue
        if obj.is_belt or result.orbit_distance is None:
            positions[object_id] = center.copy()
            continue
        e = getattr(obj.orbit, 'eccentricity', 0.0)
        i = getattr(obj.orbit, 'inclination', 0.0)
        offset_phase = phase + (np.pi * result.binary_index if result.binary_index else 0.0)
        positions[object_id] = center + orbital_offset(offset_phase, result.orbit_distance,
                                                       e, i, mode.orbit_style)
    return positions


def _add_sphere_to_plot(fig, center, radius, color, opacity, name):
    """Helper to add a sphere to the plot at specified center."""
    u = np.linspace(0, 2 * np.pi, 30)
    v = np.linspace(0, np.pi, 20)

    x = center[0] + radius * np.outer(np.cos(u), np.sin(v))
    y = center[1] + radius * np.outer(np.sin(u), np.sin(v))
    z = center[2] + radius * np.outer(np.ones(np.size(u)), np.cos(v))

    fig.add_trace(go.Surface(
        x=x, y=y, z=z,
        colorscale=[[0, color], [1, color]],
        showscale=False,
        opacity=opacity,
        name=name,
        hoverinfo='name'
    ))


def _add_ring(fig, center, points, color, name, dash='solid'):
    pts = center + points
    fig.add_trace(go.Scatter3d(
        x=pts[:, 0], y=pts[:, 1], z=pts[:, 2],
        mode='lines',
        line=dict(color=color, width=2, dash=dash),
        name=name,
        showlegend=False,
        hoverinfo='name'
    ))


def plot_layout(system: SystemData, layout: Mapping[str, LayoutResult],
                view_mode: Union[str, ViewModeConfig] = 'realistic',
                positions: Optional[Mapping[str, np.ndarray]] = None,
                n_points: Optional[int] = None, show_orbits: bool = True,
                title: Optional[str] = None) -> go.Figure:
    """
    Create a 3D figure of a system under a layout.

    Parameters
    ----------
    system : SystemData
    layout : Mapping[str, LayoutResult]
    view_mode : str or ViewModeConfig, optional
        Mode the layout was computed for (default: 'realistic')
    positions : mapping, optional
        Live world positions (e.g. ``OrbitalAnimator.positions()``); by
        default every orbit is drawn at phase 0
    n_points : int, optional
        Points per orbit ring (default: config.DEFAULT_PLOT_POINTS)
    show_orbits : bool, optional
        Draw orbit rings and belt edges (default: True)
    title : str, optional

    Returns
    -------
    go.Figure
    """
    mode = view_modes.require(view_mode) if isinstance(view_mode, str) else view_mode
    n_points = config.DEFAULT_PLOT_POINTS if n_points is None else n_points
    if positions is None:
        positions = static_positions(system, layout, mode)

    fig = go.Figure()
    angles = np.linspace(0, 2 * np.pi, n_points)

    for obj in system.objects:
        result = layout.get(obj.id)
        if result is None or obj.id not in positions:
            continue
        parent_center = positions.get(obj.parent_id) if obj.parent_id else None

        if show_orbits and parent_center is not None and not mode.orbit_style.linear:
            if result.belt is not None:
                for radius in (result.belt.inner_radius, result.belt.outer_radius):
                    ring = np.array([orbital_offset(a, radius, 0.0, obj.orbit.inclination,
                                                    mode.orbit_style) for a in angles])
                    _add_ring(fig, parent_center, ring, config.DEFAULT_BELT_COLOR,
                              obj.name, dash='dot')
            elif result.orbit_distance is not None:
                ring = np.array([orbital_offset(a, result.orbit_distance, obj.orbit.eccentricity,
                                                obj.orbit.inclination, mode.orbit_style)
                                 for a in angles])
                _add_ring(fig, parent_center, ring, config.DEFAULT_ORBIT_COLOR, obj.name)

        if result.belt is None and result.visual_radius > 0:
            _add_sphere_to_plot(fig, positions[obj.id], result.visual_radius,
                                config.DEFAULT_BODY_COLOR, config.DEFAULT_BODY_OPACITY, obj.name)

    fig.update_layout(
        scene=dict(
            xaxis_title='X [scene units]',
            yaxis_title='Y [scene units]',
            zaxis_title='Z [scene units]',
            aspectmode='data'
        ),
        title=title if title is not None else f'{system.name} ({mode.name})',
        showlegend=True
    )
    return fig


def add_positions_to_plot(fig: go.Figure, positions: Mapping[str, np.ndarray],
                          color: str = 'orange', name: Optional[str] = None,
                          **kwargs) -> go.Figure:
    """
    Add object positions to an existing figure as labelled markers.

    Returns
    -------
    go.Figure
        Same object, modified in place
    """
    if name is None:
        n_existing = sum(1 for trace in fig.data if isinstance(trace, go.Scatter3d)
                         and trace.mode == 'markers+text')
        name = f'Positions {n_existing + 1}'
    ids = list(positions)
    pts = np.array([positions[i] for i in ids]).reshape(-1, 3)
    fig.add_trace(go.Scatter3d(
        x=pts[:, 0], y=pts[:, 1], z=pts[:, 2],
        mode='markers+text',
        text=ids,
        marker=dict(color=color, size=4),
        name=name,
        hovertemplate='%{text}<br>x: %{x:.3f}<br>y: %{y:.3f}<br>z: %{z:.3f}<extra></extra>',
        **kwargs
    ))
    return fig
