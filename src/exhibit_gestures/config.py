import logging
from pathlib import Path
from typing import Literal

import platformdirs
from pydantic import BaseModel, Field, PositiveFloat, model_validator

from .events import HandGesture

logger = logging.getLogger(__name__)


class PinchConfig(BaseModel):
    enter_threshold: PositiveFloat = Field(
        0.08, description="Thumb/index tip distance (normalized) under which a pinch starts"
    )
    exit_threshold: PositiveFloat = Field(
        0.13, description="Thumb/index tip distance (normalized) over which a pinch may end"
    )
    grace_period: float = Field(
        0.25, ge=0.0, description="Seconds since the last close reading before a pinch may end"
    )

    @model_validator(mode="after")
    def check_thresholds(self) -> "PinchConfig":
        if self.exit_threshold < self.enter_threshold:
            raise ValueError("exit_threshold must be greater than or equal to enter_threshold")
        return self


class GrabConfig(BaseModel):
    grab_radius: PositiveFloat = Field(1.8, description="Play-space grab radius for normal entities")
    small_grab_radius: PositiveFloat = Field(1.2, description="Play-space grab radius for small entities")
    follow_stiffness: PositiveFloat = Field(
        18.0, description="Angular frequency of the critically damped spring pulling a held entity"
    )
    bounce_window: float = Field(0.6, ge=0.0, description="Seconds of bounce-back after a rejected delivery")
    hand_loss_grace: float = Field(
        0.3, ge=0.0, description="Seconds a held entity survives a lost hand before being dropped"
    )


class BoundsConfig(BaseModel):
    min_x: float = Field(-4.5, description="Left edge of the reachable play area")
    max_x: float = Field(4.5, description="Right edge of the reachable play area")
    min_y: float = Field(-2.5, description="Bottom edge of the reachable play area")
    max_y: float = Field(2.5, description="Top edge of the reachable play area")

    @model_validator(mode="after")
    def check_not_empty(self) -> "BoundsConfig":
        if self.max_x <= self.min_x or self.max_y <= self.min_y:
            raise ValueError("Reachable bounds must have a positive width and height")
        return self


class PlacementConfig(BaseModel):
    bounds: BoundsConfig = Field(
        default_factory=lambda: BoundsConfig(),
        description="Reachable bounding box where entities can be spawned",
    )
    plane_z: float = Field(0.0, description="Depth of spawned entities")
    min_entity_distance: float = Field(1.5, ge=0.0, description="Minimum distance between normal entities")
    small_min_entity_distance: float = Field(1.0, ge=0.0, description="Minimum distance around small entities")
    zone_exclusion_margin: float = Field(
        0.5, ge=0.0, description="Extra clearance kept around every delivery zone snap radius"
    )
    max_attempts: int = Field(100, ge=1, description="Random draws before falling back to a fixed position")
    fallback_ring_radius: float = Field(
        0.5, ge=0.0, description="Radius of the ring around the area center used as fallback"
    )
    small_ratio: float = Field(0.3, ge=0.0, le=1.0, description="Share of spawned entities that are small")
    seed: int | None = Field(None, description="Seed of the placement random generator")


class DwellConfig(BaseModel):
    dwell_seconds: PositiveFloat = Field(1.5, description="Default hover time to complete a dwell target")
    radius: PositiveFloat = Field(0.6, description="Default play-space radius of a dwell target")
    cursor_source: Literal["auto", "hand", "pose"] = Field(
        "auto", description="Which cursor drives dwell targets (auto: hand index tip, then pose)"
    )


class TwoHandsConfig(BaseModel):
    frame_threshold: PositiveFloat = Field(
        0.1, description="Thumb/index tip distance (normalized) over which both open hands frame a box"
    )
    debounce_seconds: float = Field(
        1.0, ge=0.0, description="Minimum seconds between two captures by pinching both hands"
    )


class ScoringConfig(BaseModel):
    round_seconds: PositiveFloat = Field(60.0, description="Duration of a timed delivery round")
    points_per_delivery: int = Field(100, ge=0, description="Points earned by each successful delivery")


class MappingConfig(BaseModel):
    mirror: bool = Field(True, description="Mirror the normalized x coordinate before mapping")
    width_scale: PositiveFloat = Field(10.0, description="Play-space width covered by the camera image")
    height_scale: PositiveFloat = Field(6.0, description="Play-space height covered by the camera image")
    depth_scale: float = Field(0.0, description="Multiplier applied to landmark depth")
    offset_x: float = Field(0.0, description="Play-space x of the image center")
    offset_y: float = Field(0.0, description="Play-space y of the image center")
    offset_z: float = Field(0.0, description="Play-space z added to mapped depth")
    pose_smoothing: float = Field(
        0.2, gt=0.0, le=1.0, description="Weight of new readings in the pose cursor moving average"
    )


class HandPoseConfig(BaseModel):
    open_palm_ratio: PositiveFloat = Field(
        1.1, description="Tip/base wrist distance ratio above which a finger counts as extended"
    )
    open_palm_min_fingers: int = Field(4, ge=1, le=5, description="Extended fingers needed for an open palm")
    fist_ratio: PositiveFloat = Field(
        1.2, description="Tip/knuckle wrist distance ratio under which a finger counts as curled"
    )
    fist_min_fingers: int = Field(3, ge=1, le=4, description="Curled fingers needed for a fist")
    hold_gesture: HandGesture = Field(HandGesture.FIST, description="Gesture reported by gesture_hold events")
    hold_seconds: PositiveFloat = Field(1.5, description="Seconds the hold gesture must be kept")


class CLIConfig(BaseModel):
    """Configuration for CLI settings."""

    camera: str | None = Field(None, description="Camera name filter for auto-selection")
    size: int = Field(1280, description="Maximum dimension for camera capture resolution")
    entities: int = Field(6, ge=0, description="Number of entities spawned by the run command")
    use_pose: bool = Field(False, description="Also run the pose landmarker for a body cursor")


class Config(BaseModel):
    pinch: PinchConfig = Field(default_factory=lambda: PinchConfig(), description="Pinch detection")
    grab: GrabConfig = Field(default_factory=lambda: GrabConfig(), description="Grab and delivery")
    placement: PlacementConfig = Field(
        default_factory=lambda: PlacementConfig(), description="Entity spawn placement"
    )
    dwell: DwellConfig = Field(default_factory=lambda: DwellConfig(), description="Dwell selection")
    mapping: MappingConfig = Field(
        default_factory=lambda: MappingConfig(), description="Landmark to play-space mapping"
    )
    hand_pose: HandPoseConfig = Field(
        default_factory=lambda: HandPoseConfig(), description="Open palm and fist detection"
    )
    two_hands: TwoHandsConfig = Field(
        default_factory=lambda: TwoHandsConfig(), description="Framing and pinching with both hands"
    )
    scoring: ScoringConfig = Field(default_factory=lambda: ScoringConfig(), description="Timed delivery rounds")
    cli: CLIConfig = Field(default_factory=lambda: CLIConfig(), description="CLI configuration")

    @classmethod
    def get_user_path(cls) -> Path:
        app_name = "exhibit-gestures"
        config_dir = Path(platformdirs.user_config_dir(app_name))
        return config_dir / "config.json"

    @classmethod
    def validate_path(cls, path: Path | str | None) -> Path:
        if path is None:
            path = cls.get_user_path()
        elif isinstance(path, str):
            path = Path(path)

        return path.resolve()

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Config":
        path = cls.validate_path(path)

        if not path.exists():
            # If the config file does not exist, return a default config
            logger.info("Config file %s does not exist. Using default config.", path)
            return cls()

        if not path.is_file():
            raise ValueError(f"Path {path} exists and is not a file.")

        try:
            return cls.model_validate_json(path.read_text())
        except Exception as e:
            logger.error("Error loading config from %s: %s", path, e)
            logger.warning("Using default config.")
            return cls()

    def save(self, path: Path | str | None = None) -> Path:
        path = self.validate_path(path)

        if path.exists() and not path.is_file():
            raise ValueError(f"Path {path} exists and is not a file.")

        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            path.write_text(self.model_dump_json(indent=2))
        except OSError as e:
            logger.error("Error saving config to %s: %s", path, e)
            raise
        return path
