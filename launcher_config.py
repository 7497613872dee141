"""
Ball-Launcher: Configuration and Constants
==========================================
Dataclasses for launcher parameters, physical constants, and flight results.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np


# Physical constants
GRAVITY = 9.8  # m/s^2

# Frame pacing
FRAME_DT = 0.016  # Fixed step per frame [s] (~60 updates per second)

# Arm geometry
ARM_RADIUS = 2.7          # Pivot to tip distance
ARM_MOUNT_OFFSET = 0.04   # Static mounting offset of the arm mesh [rad]

# Launch tuning
# Converts per-frame angular speed into release speed magnitude.
# Empirical, tuned against the rendered arm.
LAUNCH_SPEED_SCALE = 50.0
DEFAULT_SPEED = 0.10      # Arm rotation per frame [rad]
SPEED_STEP = 0.02         # Increment for speed up / speed down

# Scene
INIT_BALL_POSITION = (2.7, 10.1, 2.4)  # Resting tip location
GROUND_HEIGHT = 0.0

# Fixture mount chain (post -> hub -> arm)
BASE_POSITION = (0.0, 10.0, 0.2)
BASE_ROTATION = (np.pi / 2, np.pi / 2, 0.0)  # Intrinsic XYZ Euler angles [rad]
HUB_OFFSET = (0.0, 2.2, 0.0)

# Safety cap for headless throws
MAX_FLIGHT_STEPS = 10000


@dataclass
class LauncherConfig:
    """Configuration parameters for the launcher simulation."""

    # Geometry - Arm
    arm_radius: float = ARM_RADIUS
    mount_offset: float = ARM_MOUNT_OFFSET

    # Geometry - Fixture mount chain
    base_position: Tuple[float, float, float] = BASE_POSITION
    base_rotation: Tuple[float, float, float] = BASE_ROTATION
    hub_offset: Tuple[float, float, float] = HUB_OFFSET

    # Launch
    launch_speed_scale: float = LAUNCH_SPEED_SCALE
    default_speed: float = DEFAULT_SPEED
    speed_step: float = SPEED_STEP

    # Projectile
    initial_position: Tuple[float, float, float] = INIT_BALL_POSITION

    # Physics
    gravity: Tuple[float, float, float] = (0.0, -GRAVITY, 0.0)
    ground_height: float = GROUND_HEIGHT

    # Simulation parameters
    dt: float = FRAME_DT
    max_flight_steps: int = MAX_FLIGHT_STEPS

    def __post_init__(self):
        if not np.isfinite(self.arm_radius) or self.arm_radius <= 0:
            raise ValueError(f"arm_radius must be positive, got {self.arm_radius}")
        if not np.isfinite(self.dt) or self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if not np.isfinite(self.default_speed) or self.default_speed < 0:
            raise ValueError(f"default_speed must be >= 0, got {self.default_speed}")
        if not np.isfinite(self.speed_step) or self.speed_step < 0:
            raise ValueError(f"speed_step must be >= 0, got {self.speed_step}")
        if len(self.gravity) != 3 or not np.all(np.isfinite(self.gravity)):
            raise ValueError(f"gravity must be a finite 3-vector, got {self.gravity}")
        if self.gravity[1] >= 0:
            raise ValueError(f"gravity must point down (y < 0), got {self.gravity}")
        if self.max_flight_steps < 1:
            raise ValueError(f"max_flight_steps must be >= 1, got {self.max_flight_steps}")

    def get_gravity_vector(self) -> np.ndarray:
        """Gravity as a float vector."""
        return np.array(self.gravity, dtype=float)

    def get_initial_position(self) -> np.ndarray:
        """Fresh copy of the projectile's starting position."""
        return np.array(self.initial_position, dtype=float)


@dataclass
class FlightRecord:
    """Results from a single throw, release to landing."""

    # Trajectory data
    time: np.ndarray = None           # (N,) - time since release
    positions: np.ndarray = None      # (N, 3) - projectile position per step

    # Release state
    release_position: np.ndarray = None  # (3,)
    release_velocity: np.ndarray = None  # (3,)
    release_speed: float = 0.0

    # Landing state
    landing_position: np.ndarray = None  # (3,) - first position at or below ground
    landing_distance: float = None       # x at landing

    # Performance metrics
    max_height: float = 0.0
    flight_time: float = 0.0
    n_steps: int = 0
    landed: bool = False

    @classmethod
    def from_trail(cls, trail, release_velocity, dt, landed: bool) -> 'FlightRecord':
        """
        Build a record from a list of positions.

        The first entry of ``trail`` is the release position, every further
        entry is the position after one integration step. ``dt`` is either
        a fixed step or the step used for each entry after the first.
        """
        positions = np.array(trail, dtype=float).reshape(-1, 3)
        n_steps = len(positions) - 1
        steps = np.broadcast_to(np.asarray(dt, dtype=float), (n_steps,))
        time = np.concatenate([[0.0], np.cumsum(steps)])
        release_velocity = np.array(release_velocity, dtype=float)

        record = cls(
            time=time,
            positions=positions,
            release_position=positions[0].copy(),
            release_velocity=release_velocity,
            release_speed=float(np.linalg.norm(release_velocity)),
            max_height=float(np.max(positions[:, 1])),
            flight_time=float(time[-1]),
            n_steps=n_steps,
            landed=landed,
        )
        if landed:
            record.landing_position = positions[-1].copy()
            record.landing_distance = float(positions[-1, 0])
        return record
