"""Configuration constants and settings for gesture tracking."""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml


class Chirality(Enum):
    LEFT = "Left"
    RIGHT = "Right"


class WakeMode(Enum):
    TWO_HANDS_IN = "TWO_HANDS_IN"
    FIST = "FIST"
    NONE = "NONE"


# Slot order used by every per-hand array (index 0 = Left, 1 = Right)
HAND_SLOTS = (Chirality.LEFT, Chirality.RIGHT)


# =============================================================================
# HAND GEOMETRY
# =============================================================================
CONSTANT_HAND_WIDTH = 300 * 0.05
MIN_KNUCKLE_SPAN = 1e-6
MAX_HAND_SCALE = 1e6


# =============================================================================
# PINCH DETECTION / FILTERING
# =============================================================================
PINCH_THRESHOLD = 10.0
PINCH_SMOOTHING = 0.2
PINCH_CACHE_LENGTH = 3
PINCH_DEADZONE_WS = 0.01


# =============================================================================
# TIMING / PERSISTENCE
# =============================================================================
MISSING_HAND_TIMEOUT_S = 0.50
POSE_HOLD_THRESHOLD_S = 1.50
# Summed float deltas can land just short of the threshold
HOLD_TOLERANCE_S = 1e-9


# =============================================================================
# BODY POSE
# =============================================================================
WRIST_VISIBILITY_MIN = 0.8
HAND_LERP_SPEED = 0.4
SHOULDER_DEADZONE_RATIO = 0.2
SHOULDER_PADDING_RATIO = 0.4
OFFSET_RECT_SCALE = 1.6
PINCH_DEADZONE_PX = 50.0
STATIC_MOVEMENT_RATIO = 1.1


# =============================================================================
# ASSOCIATION / ARBITRATION
# =============================================================================
HAND_BODY_MAX_DX = 0.2
WAKE_HOLD_S = 0.20
INACTIVE_HAND_TIMEOUT_S = 5.0
PERSON_NAMES = ("pete", "ant")


# =============================================================================
# DETECTOR SCHEDULING
# =============================================================================
POSE_CYCLE_LENGTH = 3
POSE_DUTY_TIME = 1


@dataclass
class HandConfig:
    pinch_threshold: float = PINCH_THRESHOLD
    pinch_smoothing: float = PINCH_SMOOTHING
    pinch_cache_length: int = PINCH_CACHE_LENGTH
    pinch_deadzone: float = PINCH_DEADZONE_WS
    missing_timeout_s: float = MISSING_HAND_TIMEOUT_S
    hold_threshold_s: float = POSE_HOLD_THRESHOLD_S
    check_finger_poses: bool = False

    def validate(self) -> None:
        _require(self.pinch_threshold > 0, "hands.pinch_threshold must be > 0")
        _require(0.0 <= self.pinch_smoothing < 1.0, "hands.pinch_smoothing must be in [0, 1)")
        _require(self.pinch_cache_length >= 2, "hands.pinch_cache_length must be >= 2")
        _require(self.pinch_deadzone >= 0, "hands.pinch_deadzone must be >= 0")
        _require(self.missing_timeout_s >= 0, "hands.missing_timeout_s must be >= 0")
        _require(self.hold_threshold_s > 0, "hands.hold_threshold_s must be > 0")


@dataclass
class BodyConfig:
    wrist_visibility_min: float = WRIST_VISIBILITY_MIN
    hand_lerp_speed: float = HAND_LERP_SPEED
    shoulder_deadzone_ratio: float = SHOULDER_DEADZONE_RATIO
    padding_ratio: float = SHOULDER_PADDING_RATIO
    offset_rect_scale: float = OFFSET_RECT_SCALE
    pinch_deadzone_px: float = PINCH_DEADZONE_PX
    static_movement_ratio: float = STATIC_MOVEMENT_RATIO
    check_head_turn: bool = False

    def validate(self) -> None:
        _require(0.0 <= self.wrist_visibility_min <= 1.0, "body.wrist_visibility_min must be in [0, 1]")
        _require(0.0 < self.hand_lerp_speed <= 1.0, "body.hand_lerp_speed must be in (0, 1]")
        _require(self.shoulder_deadzone_ratio >= 0, "body.shoulder_deadzone_ratio must be >= 0")
        _require(self.padding_ratio >= 0, "body.padding_ratio must be >= 0")
        _require(self.offset_rect_scale > 0, "body.offset_rect_scale must be > 0")
        _require(self.pinch_deadzone_px >= 0, "body.pinch_deadzone_px must be >= 0")
        _require(self.static_movement_ratio > 0, "body.static_movement_ratio must be > 0")


@dataclass
class ArbiterConfig:
    wake_mode: WakeMode = WakeMode.NONE
    wake_hold_s: float = WAKE_HOLD_S
    remove_after_timeout: bool = True
    inactive_timeout_s: float = INACTIVE_HAND_TIMEOUT_S
    hand_body_max_dx: float = HAND_BODY_MAX_DX
    person_names: tuple[str, ...] = PERSON_NAMES

    def validate(self) -> None:
        _require(isinstance(self.wake_mode, WakeMode), "arbiter.wake_mode must be a WakeMode")
        _require(self.wake_hold_s >= 0, "arbiter.wake_hold_s must be >= 0")
        _require(self.inactive_timeout_s > 0, "arbiter.inactive_timeout_s must be > 0")
        _require(self.hand_body_max_dx > 0, "arbiter.hand_body_max_dx must be > 0")
        _require(1 <= len(self.person_names) <= 2, "arbiter.person_names must name 1 or 2 people")
        _require(len(set(self.person_names)) == len(self.person_names), "arbiter.person_names must be unique")


@dataclass
class TrackingConfig:
    """Every recognised tracking option, validated on construction."""
    hands: HandConfig = field(default_factory=HandConfig)
    body: BodyConfig = field(default_factory=BodyConfig)
    arbiter: ArbiterConfig = field(default_factory=ArbiterConfig)
    pose_cycle_length: int = POSE_CYCLE_LENGTH
    pose_duty_time: int = POSE_DUTY_TIME

    def __post_init__(self):
        self.hands.validate()
        self.body.validate()
        self.arbiter.validate()
        _require(self.pose_cycle_length >= 1, "pose_cycle_length must be >= 1")
        _require(0 <= self.pose_duty_time <= self.pose_cycle_length,
                 "pose_duty_time must be in [0, pose_cycle_length]")

    @property
    def wake_with_fist(self) -> bool:
        return self.arbiter.wake_mode is WakeMode.FIST

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackingConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        return _build(cls, data or {}, "")


def load_config(path: str | Path | None = None) -> TrackingConfig:
    """
    Load tracking configuration from a YAML file.

    Args:
        path: Path to a YAML file. If None, the built-in defaults are used.

    Returns:
        Validated TrackingConfig
    """
    if path is None:
        return TrackingConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    return TrackingConfig.from_dict(data or {})


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


def _build(cls, data: dict[str, Any], prefix: str):
    if not isinstance(data, dict):
        raise ValueError(f"{prefix or 'config'} must be a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValueError(f"Unknown config option(s): {', '.join(prefix + k for k in unknown)}")

    defaults = cls()
    kwargs = {}
    for name, value in data.items():
        default = getattr(defaults, name)
        if is_dataclass(default):
            kwargs[name] = _build(type(default), value, f"{prefix}{name}.")
        elif isinstance(default, WakeMode):
            kwargs[name] = _wake_mode(value)
        elif isinstance(default, tuple):
            kwargs[name] = tuple(value)
        else:
            kwargs[name] = value
    return cls(**kwargs)


def _wake_mode(value) -> WakeMode:
    if isinstance(value, WakeMode):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        # Numeric modes follow declaration order: 0=TWO_HANDS_IN, 1=FIST, 2=NONE
        modes = list(WakeMode)
        if not 0 <= value < len(modes):
            raise ValueError(f"Unknown wake mode: {value!r}")
        return modes[value]
    try:
        return WakeMode(str(value).upper())
    except ValueError:
        raise ValueError(f"Unknown wake mode: {value!r}") from None
