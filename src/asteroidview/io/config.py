"""Load scene configuration from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import yaml

from asteroidview.config.schema import (
    DEFAULT_MESH_PREFIX,
    ConfigError,
    PublisherConfig,
    SceneConfig,
    ViewerConfig,
)
from asteroidview.utils.transforms import quat_normalize

REQUIRED_SECTIONS = ["topics", "camera", "mesh"]


def _require(section: dict[str, Any], key: str, section_name: str) -> Any:
    if key not in section:
        raise ConfigError(f"Missing required config key: {section_name}.{key}")
    return section[key]


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def _as_vector(value: Any, length: int, name: str) -> np.ndarray:
    if not isinstance(value, (list, tuple)) or len(value) != length:
        raise ConfigError(f"{name} must be a list of {length} numbers, got {value!r}")
    return np.array([_as_float(v, name) for v in value], dtype=np.float64)


def _as_quaternion(value: Any, name: str) -> np.ndarray:
    q = _as_vector(value, 4, name)
    try:
        return quat_normalize(q)
    except ValueError:
        raise ConfigError(f"{name} must be a non-zero quaternion (w, x, y, z)") from None


def _as_rate(value: Any, name: str) -> float:
    rate = _as_float(value, name)
    if rate <= 0:
        raise ConfigError(f"{name} must be positive, got {rate}")
    return rate


def _as_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")
    return value


def _optional_section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return section


def parse_config(data: dict[str, Any]) -> SceneConfig:
    """
    Build a SceneConfig from a parsed YAML mapping.

    Args:
        data: Mapping with required sections topics, camera, mesh and optional
            sections motion, viewer

    Returns:
        SceneConfig for the publisher and viewer loops

    Raises:
        ConfigError: If a section or key is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at top level")

    for key in REQUIRED_SECTIONS:
        if key not in data:
            raise ConfigError(f"Missing required config section: {key}")
        if not isinstance(data[key], dict):
            raise ConfigError(f"Config section '{key}' must be a mapping")

    topics = data["topics"]
    object_topic = str(_require(topics, "object_pose_topic", "topics"))
    camera_topic = str(_require(topics, "camera_pose_topic", "topics"))
    if object_topic == camera_topic:
        raise ConfigError(
            f"object_pose_topic and camera_pose_topic must differ (both '{object_topic}')"
        )

    camera = data["camera"]
    cam_baseline = _as_float(_require(camera, "cam_baseline", "camera"), "camera.cam_baseline")
    camera_position = _as_vector(camera.get("position", [0.0, 0.0, 0.0]), 3, "camera.position")
    camera_orientation = _as_quaternion(
        camera.get("orientation", [1.0, 0.0, 0.0, 0.0]), "camera.orientation"
    )

    mesh = data["mesh"]
    file_3d = _require(mesh, "file_3d", "mesh")
    if not isinstance(file_3d, str) or not file_3d:
        raise ConfigError(f"mesh.file_3d must be a non-empty string, got {file_3d!r}")
    scale = _as_float(_require(mesh, "scale_object", "mesh"), "mesh.scale_object")
    if scale <= 0:
        raise ConfigError(f"mesh.scale_object must be positive, got {scale}")
    offset = _as_vector(_require(mesh, "offset_object", "mesh"), 3, "mesh.offset_object")
    mesh_orientation = _as_quaternion(
        mesh.get("orientation_object", [1.0, 0.0, 0.0, 0.0]), "mesh.orientation_object"
    )

    motion = _optional_section(data, "motion")
    viewer = _optional_section(data, "viewer")

    publisher_config = PublisherConfig(
        object_pose_topic=object_topic,
        camera_pose_topic=camera_topic,
        omega=_as_float(motion.get("omega", 0.25), "motion.omega"),
        pitch=_as_float(motion.get("pitch", -np.pi / 2.0), "motion.pitch"),
        rate_hz=_as_rate(motion.get("rate_hz", 100.0), "motion.rate_hz"),
        camera_position=camera_position,
        camera_orientation=camera_orientation,
        broadcast_frames=_as_bool(
            motion.get("broadcast_frames", True), "motion.broadcast_frames"
        ),
    )
    viewer_config = ViewerConfig(
        object_pose_topic=object_topic,
        camera_pose_topic=camera_topic,
        cam_baseline=cam_baseline,
        file_3d=file_3d,
        scale_object=scale,
        offset_object=offset,
        orientation_object=mesh_orientation,
        marker_topic=str(topics.get("marker_topic", "asteroid_marker")),
        mesh_prefix=str(mesh.get("prefix", DEFAULT_MESH_PREFIX)),
        rate_hz=_as_rate(viewer.get("rate_hz", 200.0), "viewer.rate_hz"),
    )
    return SceneConfig(publisher=publisher_config, viewer=viewer_config)


def load_config(config_path: str | Path) -> SceneConfig:
    """
    Load scene configuration from YAML file.

    Args:
        config_path: Path to config.yaml file

    Returns:
        SceneConfig populated from file

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If config is invalid or missing required fields
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e

    return parse_config(data)


def generate_config_yaml(
    mesh_file: str = "asteroid.dae",
    cam_baseline: float = 0.2,
) -> str:
    """
    Template configuration with every option and its default.

    Args:
        mesh_file: Mesh file name to put in mesh.file_3d
        cam_baseline: Baseline to put in camera.cam_baseline

    Returns:
        YAML text
    """
    lines = [
        "# asteroidview configuration",
        "",
        "topics:",
        '  object_pose_topic: "/asteroid/pose"',
        '  camera_pose_topic: "/camera/pose"',
        '  marker_topic: "asteroid_marker"',
        "",
        "camera:",
        f"  cam_baseline: {cam_baseline}     # Lens separation along camera Y (meters)",
        "  position: [0.0, 0.0, 0.0]          # Camera pose published by the motion loop",
        "  orientation: [1.0, 0.0, 0.0, 0.0]  # (w, x, y, z)",
        "",
        "mesh:",
        f'  file_3d: "{mesh_file}"',
        f'  prefix: "{DEFAULT_MESH_PREFIX}"',
        "  scale_object: 1.0",
        "  offset_object: [0.0, 0.0, 0.0]     # Mesh-local units, scaled by scale_object",
        "  # orientation_object: [1.0, 0.0, 0.0, 0.0]",
        "",
        "motion:",
        "  omega: 0.25             # Spin rate about X (rad/s)",
        "  # pitch: -1.5707963     # Fixed tilt about Y (radians)",
        "  rate_hz: 100",
        "  broadcast_frames: true  # Standalone publisher broadcasts world -> asteroid (off under run)",
        "",
        "viewer:",
        "  rate_hz: 200",
        "",
    ]
    return "\n".join(lines)
