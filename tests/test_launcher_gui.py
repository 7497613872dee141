"""Headless tests for the launcher viewer."""

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import pytest

from launcher_gui import LauncherVisualizer, plot_trajectory, report_throw
from launcher_model import ProjectileState, simulate_throw


@pytest.fixture
def viz():
    viz = LauncherVisualizer()
    viz.create_figure()
    viz._init_plot_elements()
    yield viz
    plt.close('all')


def test_buttons_created(viz):
    assert set(viz._buttons) == {'spin', 'throw', 'faster', 'slower', 'reset'}
    assert viz._buttons['spin'].label.get_text() == 'Start Rotation'


def test_spin_button_toggles_label(viz):
    viz._on_toggle_spin()
    assert viz.simulation.snapshot().spin_enabled
    assert viz._buttons['spin'].label.get_text() == 'Stop Rotation'

    viz._on_toggle_spin()
    assert viz._buttons['spin'].label.get_text() == 'Start Rotation'


def test_start_rotation_ignored_at_zero_speed(viz):
    viz.simulation.set_speed(0)

    viz._on_toggle_spin()

    assert not viz.simulation.snapshot().spin_enabled
    assert viz._buttons['spin'].label.get_text() == 'Start Rotation'


def test_speed_down_to_zero_resets_label(viz):
    viz._on_toggle_spin()
    for _ in range(10):
        viz._on_speed_down()

    assert not viz.simulation.snapshot().spin_enabled
    assert viz._buttons['spin'].label.get_text() == 'Start Rotation'


def test_frame_moves_arm_and_projectile(viz):
    viz._on_toggle_spin()
    viz._update_frame(0)

    tip = viz.simulation.arm_tip
    xs, ys = viz._plot_elements['arm'].get_data()
    assert xs[1] == pytest.approx(tip[0])
    assert ys[1] == pytest.approx(tip[1])
    assert viz._plot_elements['proj'].center == pytest.approx((tip[0], tip[1]))


def test_throw_draws_trail_and_landing(viz):
    viz._on_speed_up()
    viz._on_toggle_spin()
    viz._on_throw()

    for frame in range(2000):
        viz._update_frame(frame)
        if viz.simulation.snapshot().last_landing_distance is not None:
            break

    snap = viz.simulation.snapshot()
    assert snap.projectile_state is ProjectileState.PINNED
    xs, _ = viz._plot_elements['landing'].get_data()
    assert xs[0] == pytest.approx(snap.last_landing_distance)
    trail_x, _ = viz._plot_elements['trail'].get_data()
    assert len(trail_x) == viz.simulation.last_flight.n_steps + 1


def test_reset_clears_markers(viz):
    viz._on_throw()
    for frame in range(500):
        viz._update_frame(frame)

    viz._on_reset()

    assert len(viz._plot_elements['landing'].get_data()[0]) == 0
    assert len(viz._plot_elements['trail'].get_data()[0]) == 0
    assert viz.simulation.snapshot().last_landing_distance is None


def test_plot_trajectory():
    record = simulate_throw(speed=0.1)
    fig = plot_trajectory(record)

    lines = fig.axes[0].get_lines()
    assert any(np.allclose(line.get_xdata(), record.positions[:, 0]) for line in lines
               if len(line.get_xdata()) == len(record.positions))
    plt.close(fig)


def test_report_throw(capsys):
    record = report_throw()

    out = capsys.readouterr().out
    assert record.landed
    assert f"{record.landing_distance:.4f}" in out
