"""
Orrery: Orbital Layout and Camera Framing for Star-System Viewers

A Python package that turns real astronomical data into view-mode specific
visual layouts (realistic, navigational, profile), animates kinematic orbits
through a parent-following scene hierarchy, and frames a camera on focused
objects, whole systems, and profile diagrams.
"""

# Configuration
from .config import config, temp_config

# Data model
from .celestial import (CelestialObject, Classification, GeometryType, Properties,
                        OrbitData, BeltOrbitData, Lighting, SystemData)
from .hierarchy import SystemHierarchy

# Core classes
from .view_modes import ViewModeConfig, ViewModeRegistry, view_modes
from .layout import (OrbitalMechanicsCalculator, OrbitalMechanicsCalculator as OMC,
                     LayoutResult, BeltLayout, layout_to_dataframe)
from .layout_service import LayoutService
from .scene import SceneNode, NodeKind
from .registry import ObjectReferenceRegistry
from .animator import OrbitalAnimator
from .camera import CameraController, CameraState, OrbitControls
from .viewer import SystemViewer
from .stellar_zones import StellarZones, calculate_zones
from .errors import DataWarning, CalculationTimeout, MissingReferenceWarning

# Sample systems
from .defaults import sol_system, alpha_centauri_system, lone_star_system

# Package metadata
__version__ = "0.1.0"
__author__ = "Shane Billingsley"

# Define what gets imported with "from orrery import *"
__all__ = [
    # Configuration
    "config",
    "temp_config",
    # Data model
    "CelestialObject",
    "Classification",
    "GeometryType",
    "Properties",
    "OrbitData",
    "BeltOrbitData",
    "Lighting",
    "SystemData",
    "SystemHierarchy",
    # Classes
    "ViewModeConfig",
    "ViewModeRegistry",
    "OrbitalMechanicsCalculator",
    "LayoutResult",
    "BeltLayout",
    "LayoutService",
    "SceneNode",
    "NodeKind",
    "ObjectReferenceRegistry",
    "OrbitalAnimator",
    "CameraController",
    "CameraState",
    "OrbitControls",
    "SystemViewer",
    "StellarZones",
    # Abbreviations
    "OMC",
    # Functions
    "calculate_zones",
    "layout_to_dataframe",
    "sol_system",
    "alpha_centauri_system",
    "lone_star_system",
    # Registries
    "view_modes",
    # Warnings and errors
    "DataWarning",
    "CalculationTimeout",
    "MissingReferenceWarning",
]
