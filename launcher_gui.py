"""
Ball-Launcher: Visualization and Animation
==========================================
Interactive side view of the launcher with:
- Real-time animation of arm and projectile
- Flight trail and landing marker
- Start/Stop, Throw, Speed and Reset buttons
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.widgets import Button
from matplotlib.patches import Circle
import matplotlib.gridspec as gridspec

from launcher_config import LauncherConfig, FlightRecord
from launcher_model import LauncherSimulation, LauncherSnapshot, simulate_throw


class LauncherVisualizer:
    """
    Interactive visualization for the launcher simulation.
    """

    def __init__(self, config: LauncherConfig = None):
        """
        Initialize visualizer.

        Parameters
        ----------
        config : LauncherConfig, optional
            Initial configuration
        """
        self.config = config if config is not None else LauncherConfig()
        self.simulation = LauncherSimulation(self.config)
        self.animation = None

        # Figure and axes
        self.fig = None
        self.ax_main = None
        self.ax_info = None

        # Plot elements
        self._plot_elements = {}
        self._buttons = {}

    def create_figure(self):
        """Create the main figure with the scene, info panel and buttons."""
        self.fig = plt.figure(figsize=(14, 8))
        self.fig.suptitle('Ball Launcher Simulator', fontsize=14, fontweight='bold')

        gs = gridspec.GridSpec(2, 3, figure=self.fig, height_ratios=[6, 1],
                               hspace=0.3, wspace=0.3)

        # Main animation plot (spans 2 columns)
        self.ax_main = self.fig.add_subplot(gs[0, :2])
        self.ax_main.set_title('Side View')
        self.ax_main.set_xlabel('X')
        self.ax_main.set_ylabel('Y')
        self.ax_main.set_aspect('equal')
        self.ax_main.grid(True, alpha=0.3)

        # Info panel (right side)
        self.ax_info = self.fig.add_subplot(gs[0, 2])
        self.ax_info.axis('off')

        self._create_buttons()
        return self.fig

    def _create_buttons(self):
        """Button row along the bottom edge."""
        specs = [
            ('spin', 'Start Rotation', 'tab:blue', self._on_toggle_spin),
            ('throw', 'Throw Ball', 'tab:green', self._on_throw),
            ('faster', 'Speed up', 'darkred', self._on_speed_up),
            ('slower', 'Speed down', 'darkgreen', self._on_speed_down),
            ('reset', 'Reset', 'tab:red', self._on_reset),
        ]
        width, gap = 0.14, 0.02
        for i, (key, label, color, callback) in enumerate(specs):
            ax = self.fig.add_axes([0.05 + i * (width + gap), 0.04, width, 0.06])
            button = Button(ax, label, color=color, hovercolor='lightgray')
            button.label.set_color('white')
            button.on_clicked(callback)
            self._buttons[key] = button

    # Button callbacks run between animation frames

    def _on_toggle_spin(self, event=None):
        snap = self.simulation.toggle_spin()
        self._sync_spin_label(snap)

    def _on_throw(self, event=None):
        self.simulation.throw()

    def _on_speed_up(self, event=None):
        self.simulation.speed_up()

    def _on_speed_down(self, event=None):
        snap = self.simulation.speed_down()
        self._sync_spin_label(snap)

    def _on_reset(self, event=None):
        snap = self.simulation.reset()
        self._sync_spin_label(snap)
        self._plot_elements['trail'].set_data([], [])
        self._plot_elements['landing'].set_data([], [])

    def _sync_spin_label(self, snap: LauncherSnapshot):
        if 'spin' in self._buttons:
            text = 'Stop Rotation' if snap.spin_enabled else 'Start Rotation'
            self._buttons['spin'].label.set_text(text)

    def _init_plot_elements(self):
        """Initialize plot elements for animation."""
        ax = self.ax_main
        cfg = self.config
        pivot = self.simulation.pivot

        # Fixed view, no dynamic rescaling
        ax.set_xlim(-20, 30)
        ax.set_ylim(cfg.ground_height - 1, 20)

        # Ground
        self._plot_elements['ground'] = ax.axhline(y=cfg.ground_height, color='brown',
                                                   linewidth=2)

        # Post
        self._plot_elements['post'], = ax.plot([pivot[0], pivot[0]],
                                               [cfg.ground_height, pivot[1]],
                                               color='darkgray', linewidth=6)

        # Pivot point
        self._plot_elements['pivot'] = Circle((pivot[0], pivot[1]), 0.2,
                                              color='red', zorder=10)
        ax.add_patch(self._plot_elements['pivot'])

        # Arm
        self._plot_elements['arm'], = ax.plot([], [], 'k-', linewidth=3, label='Arm')

        # Projectile
        self._plot_elements['proj'] = Circle((0, 0), 0.25, color='red', zorder=5)
        ax.add_patch(self._plot_elements['proj'])

        # Trajectory trail
        self._plot_elements['trail'], = ax.plot([], [], 'orange', linewidth=1, alpha=0.7,
                                                label='Flight')

        # Landing marker
        self._plot_elements['landing'], = ax.plot([], [], 'rx', markersize=12,
                                                  markeredgewidth=3, label='Landing')

        # Frame text
        self._plot_elements['frame_text'] = ax.text(0.02, 0.98, '', transform=ax.transAxes,
                                                    verticalalignment='top', fontsize=10)

        ax.legend(loc='upper right', fontsize=8)

    def _draw(self, snap: LauncherSnapshot):
        """Push a snapshot into the plot elements."""
        pivot = self.simulation.pivot
        tip = self.simulation.arm_tip
        pos = snap.projectile_position

        self._plot_elements['arm'].set_data([pivot[0], tip[0]], [pivot[1], tip[1]])
        self._plot_elements['proj'].center = (pos[0], pos[1])

        trail = self.simulation.trail
        if len(trail) > 0:
            self._plot_elements['trail'].set_data(trail[:, 0], trail[:, 1])
        elif snap.just_landed:
            flight = self.simulation.last_flight
            self._plot_elements['trail'].set_data(flight.positions[:, 0],
                                                  flight.positions[:, 1])

        if snap.last_landing_distance is not None:
            self._plot_elements['landing'].set_data([snap.last_landing_distance],
                                                    [self.config.ground_height])

        self._plot_elements['frame_text'].set_text(f'frame {snap.frame}')
        self._update_info_panel(snap)

    def _update_info_panel(self, snap: LauncherSnapshot):
        """Update info panel with the current snapshot."""
        self.ax_info.clear()
        self.ax_info.axis('off')

        landing = snap.last_landing_distance
        flight = self.simulation.last_flight
        lines = [
            "STATE",
            f"Phase: {snap.phase.value}",
            f"Projectile: {snap.projectile_state.value}",
            f"Spin: {'ON' if snap.spin_enabled else 'off'}",
            f"Speed: {snap.speed_setting:.2f} rad/frame",
            f"Arm angle: {np.rad2deg(snap.arm_angle):.1f} deg",
            "",
            "LAST FLIGHT",
            f"Landing x: {landing:.2f}" if landing is not None else "Landing x: N/A",
        ]
        if flight is not None:
            lines += [
                f"Release speed: {flight.release_speed:.2f}",
                f"Max height: {flight.max_height:.2f}",
                f"Flight time: {flight.flight_time:.3f} s",
            ]

        text = '\n'.join(lines)
        self.ax_info.text(0.1, 0.95, text, transform=self.ax_info.transAxes,
                          verticalalignment='top', fontsize=9, family='monospace')

    def _update_frame(self, frame_idx: int):
        """Advance the simulation one tick and redraw."""
        snap = self.simulation.update()
        self._draw(snap)
        return list(self._plot_elements.values())

    def animate(self, interval: int = 16):
        """
        Create and show the live animation.

        Parameters
        ----------
        interval : int
            Frame interval in milliseconds
        """
        if self.fig is None:
            self.create_figure()

        self._init_plot_elements()
        self._draw(self.simulation.snapshot())

        def init():
            return list(self._plot_elements.values())

        self.animation = FuncAnimation(
            self.fig, self._update_frame, init_func=init,
            interval=interval, blit=False, cache_frame_data=False
        )

        plt.show()


def plot_trajectory(record: FlightRecord, config: LauncherConfig = None):
    """Plot the projectile trajectory of a completed flight."""
    config = config if config is not None else LauncherConfig()

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.set_title('Projectile Trajectory')
    ax.set_xlabel('X')
    ax.set_ylabel('Y')
    ax.set_aspect('equal')
    ax.grid(True, alpha=0.3)

    # Ground
    ax.axhline(y=config.ground_height, color='brown', linewidth=2)

    if record.positions is not None:
        ax.plot(record.positions[:, 0], record.positions[:, 1],
                'orange', linewidth=2, label='Flight')

    # Release point
    if record.release_position is not None:
        ax.plot(record.release_position[0], record.release_position[1],
                'go', markersize=10, label='Release')

    # Landing point
    if record.landed:
        ax.plot(record.landing_distance, config.ground_height, 'rx', markersize=15,
                markeredgewidth=3, label=f'Landing: x = {record.landing_distance:.2f}')

    ax.legend()
    plt.tight_layout()
    return fig


def report_throw(speed: float = None):
    """Run the reference throw and print its results."""
    print("=" * 60)
    print("Ball Launcher Throw")
    print("=" * 60)

    config = LauncherConfig()
    speed = config.default_speed if speed is None else speed
    print(f"\nConfiguration:")
    print(f"  Arm radius: {config.arm_radius}")
    print(f"  Speed: {speed} rad/frame")
    print(f"  dt: {config.dt} s")

    record = simulate_throw(config, speed=speed)

    print(f"\nResults:")
    print(f"  Release speed: {record.release_speed:.2f}")
    print(f"  Landed: {record.landed}")
    if record.landed:
        print(f"  Landing distance: {record.landing_distance:.4f}")
    print(f"  Max height: {record.max_height:.2f}")
    print(f"  Flight time: {record.flight_time:.3f} s ({record.n_steps} steps)")

    return record


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == '--headless':
        report_throw()
    elif len(sys.argv) > 1 and sys.argv[1] == '--trajectory':
        plot_trajectory(simulate_throw())
        plt.show()
    else:
        print("Starting animation...")
        LauncherVisualizer().animate()
