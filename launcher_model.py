"""
Ball-Launcher: Simulation Model
===============================
Frame-paced simulation of a spinning launcher arm and its projectile:
- Arm rotation and tip kinematics
- Release velocity at launch
- Semi-implicit Euler ballistics
- Ground contact and re-anchoring to the arm tip
"""

import numpy as np
from scipy.spatial.transform import Rotation
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence
import warnings

from launcher_config import LauncherConfig, FlightRecord


class ProjectileState(Enum):
    """Projectile state. Landing is reported as a signal, never held."""
    PINNED = 'pinned'
    FLYING = 'flying'


class SimulationPhase(Enum):
    """Fixture phase as seen by the presentation layer."""
    IDLE = 'idle'
    SPINNING = 'spinning'
    FLYING = 'flying'


@dataclass(frozen=True)
class LauncherSnapshot:
    """Read-only view of the simulation after a command or frame."""
    arm_angle: float
    projectile_position: np.ndarray
    projectile_velocity: np.ndarray
    projectile_state: ProjectileState
    phase: SimulationPhase
    spin_enabled: bool
    speed_setting: float
    last_landing_distance: Optional[float]
    just_landed: bool
    frame: int


@dataclass
class ContactResult:
    """Outcome of a ground contact check."""
    state: ProjectileState
    position: np.ndarray
    velocity: np.ndarray
    landed: bool = False
    landing_distance: Optional[float] = None


class MountTransform:
    """
    World transform of the arm pivot.

    The pivot sits at ``hub_offset`` inside the fixture base, which is
    placed at ``base_position`` and rotated by ``base_rotation`` (intrinsic
    XYZ Euler angles).
    """

    def __init__(self, base_position: Sequence[float], base_rotation: Sequence[float],
                 hub_offset: Sequence[float]):
        self.base_position = np.array(base_position, dtype=float)
        self.hub_offset = np.array(hub_offset, dtype=float)
        self._rotation = Rotation.from_euler('XYZ', base_rotation)

    def pivot_world_position(self) -> np.ndarray:
        """Pivot position in world coordinates."""
        return self.base_position + self._rotation.apply(self.hub_offset)


class ArmRotator:
    """Arm rotation and tip kinematics."""

    def __init__(self, arm_radius: float, mount_offset: float):
        self.arm_radius = arm_radius
        self.mount_offset = mount_offset

    def advance(self, angle: float, spin_enabled: bool, speed_setting: float,
                dt: float = None) -> float:
        """
        Advance the arm angle by one frame.

        Speed is an angle per call, not per second, so ``dt`` does not
        scale the step.
        """
        if spin_enabled:
            return angle - speed_setting
        return angle

    def tip_world_position(self, pivot: np.ndarray, angle: float) -> np.ndarray:
        """
        Compute world position of the arm tip.

        Parameters
        ----------
        pivot : ndarray
            Pivot world position (3,)
        angle : float
            Current arm angle [rad]

        Returns
        -------
        ndarray : Tip position (3,)
        """
        tip_angle = -angle + self.mount_offset
        offset = np.array([np.cos(tip_angle), np.sin(tip_angle), 0.0])
        return pivot + offset * self.arm_radius


class LaunchVelocityResolver:
    """Release velocity of the projectile at the instant of throw."""

    def __init__(self, speed_scale: float):
        self.speed_scale = speed_scale

    def resolve(self, angle: float, speed_setting: float, spin_enabled: bool) -> np.ndarray:
        """
        Compute the release velocity.

        Release is perpendicular to the arm. A stationary arm releases with
        zero velocity and the projectile drops straight down.
        """
        launch_speed = speed_setting * self.speed_scale if spin_enabled else 0.0
        launch_angle = -angle
        return np.array([
            launch_speed * np.cos(launch_angle + np.pi / 2),
            launch_speed * np.sin(launch_angle + np.pi / 2),
            0.0,
        ])


class ProjectileIntegrator:
    """Semi-implicit Euler integration under constant gravity."""

    def __init__(self, gravity: np.ndarray):
        self.gravity = np.array(gravity, dtype=float)

    def step(self, position: np.ndarray, velocity: np.ndarray, dt: float,
             gravity: np.ndarray = None):
        """
        Advance position and velocity by one step.

        Velocity is updated first and the new velocity moves the position.
        Inputs are left untouched.

        Parameters
        ----------
        position, velocity : ndarray
            Current state (3,)
        dt : float
            Time step [s]
        gravity : ndarray, optional
            Acceleration for this step, defaults to the integrator's gravity

        Returns
        -------
        tuple : (position', velocity')
        """
        if gravity is None:
            gravity = self.gravity
        new_velocity = velocity + gravity * dt
        new_position = position + new_velocity * dt
        return new_position, new_velocity


class GroundContactHandler:
    """Detects the projectile reaching the ground plane."""

    def __init__(self, ground_height: float = 0.0):
        self.ground_height = ground_height

    def check_and_resolve(self, position: np.ndarray, velocity: np.ndarray,
                          arm_tip: np.ndarray) -> ContactResult:
        """
        Check for ground contact and re-anchor on landing.

        Parameters
        ----------
        position : ndarray
            Projectile position after the latest step
        velocity : ndarray
            Projectile velocity after the latest step
        arm_tip : ndarray
            Arm tip at the current (already advanced) angle

        Returns
        -------
        ContactResult : PINNED at the arm tip with zero velocity if the
            projectile is at or below ground, otherwise the inputs as FLYING
        """
        if position[1] > self.ground_height:
            return ContactResult(ProjectileState.FLYING, position, velocity)

        return ContactResult(
            state=ProjectileState.PINNED,
            position=np.array(arm_tip, dtype=float),
            velocity=np.zeros(3),
            landed=True,
            landing_distance=float(position[0]),
        )


class LauncherSimulation:
    """
    Orchestrates arm, release, flight and landing.

    Commands (``toggle_spin``, ``throw``, ``set_speed``, ``speed_up``,
    ``speed_down``, ``reset``) are applied immediately and take effect on
    the next ``update``. Every command returns a snapshot.
    """

    def __init__(self, config: LauncherConfig = None):
        """
        Initialize simulation in the idle state.

        Parameters
        ----------
        config : LauncherConfig, optional
            Configuration parameters
        """
        self.config = config if config is not None else LauncherConfig()
        cfg = self.config

        self.mount = MountTransform(cfg.base_position, cfg.base_rotation, cfg.hub_offset)
        self.rotator = ArmRotator(cfg.arm_radius, cfg.mount_offset)
        self.resolver = LaunchVelocityResolver(cfg.launch_speed_scale)
        self.integrator = ProjectileIntegrator(cfg.get_gravity_vector())
        self.ground = GroundContactHandler(cfg.ground_height)

        self._pivot = self.mount.pivot_world_position()
        self._speed = cfg.default_speed
        self._init_state()

    def _init_state(self):
        self._angle = 0.0
        self._spin = False
        self._state = ProjectileState.PINNED
        self._position = self.config.get_initial_position()
        self._velocity = np.zeros(3)
        self._last_landing_distance = None
        self._last_flight = None
        self._just_landed = False
        self._frame = 0

        # Current flight
        self._trail = []
        self._trail_dt = []
        self._release_velocity = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def arm_angle(self) -> float:
        return self._angle

    @property
    def pivot(self) -> np.ndarray:
        return self._pivot.copy()

    @property
    def arm_tip(self) -> np.ndarray:
        """Arm tip at the current angle."""
        return self.rotator.tip_world_position(self._pivot, self._angle)

    @property
    def phase(self) -> SimulationPhase:
        if self._state is ProjectileState.FLYING:
            return SimulationPhase.FLYING
        return SimulationPhase.SPINNING if self._spin else SimulationPhase.IDLE

    @property
    def trail(self) -> np.ndarray:
        """Positions of the current flight, release first."""
        return np.array(self._trail, dtype=float).reshape(-1, 3)

    @property
    def trail_dt(self) -> np.ndarray:
        """Step used for each trail entry after the release."""
        return np.array(self._trail_dt, dtype=float)

    @property
    def last_flight(self) -> Optional[FlightRecord]:
        """Record of the most recently landed flight."""
        return self._last_flight

    def snapshot(self) -> LauncherSnapshot:
        return LauncherSnapshot(
            arm_angle=self._angle,
            projectile_position=self._position.copy(),
            projectile_velocity=self._velocity.copy(),
            projectile_state=self._state,
            phase=self.phase,
            spin_enabled=self._spin,
            speed_setting=self._speed,
            last_landing_distance=self._last_landing_distance,
            just_landed=self._just_landed,
            frame=self._frame,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def toggle_spin(self) -> LauncherSnapshot:
        """Flip the spin flag. The arm cannot spin at zero speed."""
        self._spin = not self._spin and self._speed > 0.0
        return self.snapshot()

    def set_speed(self, value: float) -> LauncherSnapshot:
        """
        Set arm speed [rad per frame].

        Negative values clamp to zero; zero speed also stops the spin.
        """
        value = float(value)
        if not np.isfinite(value):
            raise ValueError(f"speed must be finite, got {value}")

        self._speed = max(0.0, value)
        if self._speed == 0.0:
            self._spin = False
        return self.snapshot()

    def speed_up(self) -> LauncherSnapshot:
        return self.set_speed(self._speed + self.config.speed_step)

    def speed_down(self) -> LauncherSnapshot:
        return self.set_speed(self._speed - self.config.speed_step)

    def throw(self) -> LauncherSnapshot:
        """Release the projectile. Ignored while it is already flying."""
        if self._state is ProjectileState.FLYING:
            return self.snapshot()

        self._velocity = self.resolver.resolve(self._angle, self._speed, self._spin)
        self._release_velocity = self._velocity.copy()
        self._trail = [self._position.copy()]
        self._trail_dt = []
        self._state = ProjectileState.FLYING
        return self.snapshot()

    def reset(self) -> LauncherSnapshot:
        """Return to the initial idle state. Speed setting is kept."""
        self._init_state()
        return self.snapshot()

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------

    def update(self, dt: float = None) -> LauncherSnapshot:
        """
        Advance the simulation by one frame.

        Parameters
        ----------
        dt : float, optional
            Time step [s], defaults to the configured fixed step

        Returns
        -------
        LauncherSnapshot : State after the frame
        """
        dt = self.config.dt if dt is None else float(dt)
        if not np.isfinite(dt) or dt <= 0:
            raise ValueError(f"dt must be a positive finite number, got {dt}")

        self._just_landed = False

        # Arm first, so a landing re-anchors to this frame's tip
        self._angle = self.rotator.advance(self._angle, self._spin, self._speed, dt)

        if self._state is ProjectileState.PINNED:
            if self._spin:
                self._position = self.arm_tip
        else:
            self._position, self._velocity = self.integrator.step(
                self._position, self._velocity, dt)
            self._trail.append(self._position.copy())
            self._trail_dt.append(dt)

            contact = self.ground.check_and_resolve(
                self._position, self._velocity, self.arm_tip)
            if contact.landed:
                self._land(contact)
            else:
                self._state = contact.state

        self._frame += 1
        return self.snapshot()

    def _land(self, contact: ContactResult):
        self._last_landing_distance = contact.landing_distance
        self._last_flight = FlightRecord.from_trail(
            self._trail, self._release_velocity, self._trail_dt, landed=True)

        self._state = contact.state
        self._position = contact.position
        self._velocity = contact.velocity
        self._just_landed = True

        self._trail = []
        self._trail_dt = []
        self._release_velocity = None


def simulate_throw(
    config: LauncherConfig = None,
    speed: float = None,
    spin: bool = True,
    warmup_frames: int = 0,
    max_steps: int = None,
) -> FlightRecord:
    """
    Run one complete throw without a viewer.

    Parameters
    ----------
    config : LauncherConfig, optional
        Configuration parameters
    speed : float, optional
        Arm speed, defaults to the configured default speed
    spin : bool
        Spin the arm before release
    warmup_frames : int
        Frames to run before the throw
    max_steps : int, optional
        Flight step cap, defaults to ``config.max_flight_steps``

    Returns
    -------
    FlightRecord : Flight from release to landing
    """
    sim = LauncherSimulation(config)
    cfg = sim.config

    if speed is not None:
        sim.set_speed(speed)
    if spin:
        sim.toggle_spin()
    for _ in range(warmup_frames):
        sim.update()

    sim.throw()
    release_velocity = sim.snapshot().projectile_velocity
    if max_steps is None:
        max_steps = cfg.max_flight_steps

    for _ in range(max_steps):
        if sim.update().just_landed:
            return sim.last_flight

    warnings.warn(f"Projectile did not land within {max_steps} steps", RuntimeWarning)
    return FlightRecord.from_trail(sim.trail, release_velocity, sim.trail_dt, landed=False)
