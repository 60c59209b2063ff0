from pathlib import Path

import pytest

pygame = pytest.importorskip("pygame")

from chiton.app import viewer
from chiton.core.maps import load_map


@pytest.fixture
def headless(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    yield
    pygame.quit()


@pytest.fixture
def view(headless):
    scenario = load_map(viewer.MAP_FILES["01_sample"])
    return viewer.Viewer(scenario, map_key="01_sample")


def finish(v, limit=10_000):
    for _ in range(limit):
        v._do_step()
        if v.state in ("Done", "No path"):
            return v.state
    raise AssertionError("search did not finish")


def test_risk_color_gradient():
    assert viewer.risk_color(0) == viewer.LOW_RISK
    assert viewer.risk_color(9) == viewer.HIGH_RISK
    shades = [sum(viewer.risk_color(r)) for r in range(10)]
    assert shades == sorted(shades, reverse=True)


def test_runs_default_search(view):
    assert view.selected_algo == "Bidirectional A*"
    assert finish(view) == "Done"
    assert view._last_metrics["total_cost"] == 40
    assert view.closed_set and view.closed_back
    view._draw()


@pytest.mark.parametrize("algo", list(viewer.ALGOS))
def test_switch_algo(view, algo):
    view._switch_algo(algo)
    assert view.state == "Idle" and not view.closed_set
    assert finish(view) == "Done"
    assert view._last_metrics["total_cost"] == 40


def test_switch_to_walled_map(view):
    view._switch_map("03_walled")
    assert view.selected_map_key == "03_walled"
    assert finish(view) == "No path"
    view._draw()


def test_reset_and_speed(view):
    view._step_once()
    assert view.closed_set
    view._reset()
    assert view.state == "Idle" and not view.closed_set and not view.open_set
    before = view.steps_per_sec
    view._bump_speed(+1)
    assert view.steps_per_sec > before
    for _ in range(50):
        view._bump_speed(-1)
    assert view.steps_per_sec == viewer.SPEEDS[0]


def test_map_files_ship_inside_package():
    package_dir = Path(viewer.__file__).resolve().parents[1]
    assert viewer.MAP_DIR == package_dir / "maps"
    for path in viewer.MAP_FILES.values():
        assert path.is_file()
        assert load_map(path).grid.height > 0


def test_clicking_algo_button_rebuilds_buttons(view):
    old_buttons = list(view._buttons)
    target = view.algo_buttons["A*"]
    pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=target.rect.center))
    view._handle_events()
    assert view.selected_algo == "A*"
    assert view.selected_map_key == "01_sample"
    assert view.state == "Idle"
    assert view._buttons and view._buttons[0] is not old_buttons[0]
    assert view.algo_buttons["A*"].active
