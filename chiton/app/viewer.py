# chiton/app/viewer.py
#!/usr/bin/env python3
"""
Chiton Search Viewer: watch A* and bidirectional search expand over a risk grid

- Keyboard:
    [1]/[2]/[3]  -> switch map
    [A]/[B]/[D]  -> select algorithm (A* / Bidirectional A* / Bidirectional Dijkstra)
    [SPACE]      -> run/pause
    [N]          -> single step
    [R]          -> reset
    [+]/[-]      -> steps/sec
    [Q]/[ESC]    -> quit

Cells are shaded by risk (light = cheap, dark = risky); walls are black.
Forward frontier: cyan (open) / magenta (closed).
Backward frontier: amber (open) / violet (closed).
"""

# --- bootstrap import path so `from chiton...` works when run as a script ---
import sys, time
from pathlib import Path
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
# -------------------------------------------------------------------------

from typing import Callable, Dict, Iterable, List, Optional, Tuple
import logging
import pygame

from chiton.core.astar import AStarSearch
from chiton.core.bidirectional import BidirectionalSearch
from chiton.core.grid import MAX_RISK, GridFormatError, InvalidEndpointError
from chiton.core.maps import Scenario, load_map
from chiton.core.types import Point, StepResult

logger = logging.getLogger(__name__)

# ---------- Config ----------
MAP_DIR = Path(__file__).resolve().parents[1] / "maps"
MAP_FILES = {
    "01_sample":       MAP_DIR / "01_sample.json",
    "02_sample_tiled": MAP_DIR / "02_sample_tiled.json",
    "03_walled":       MAP_DIR / "03_walled.json",
}
MAP_LABELS = {
    "01_sample":       "Map 1: Sample",
    "02_sample_tiled": "Map 2: Tiled x5",
    "03_walled":       "Map 3: Walled",
}
ALGOS: Dict[str, Callable[[], object]] = {
    "A*":                     lambda: AStarSearch(name="A*"),
    "Bidirectional A*":       lambda: BidirectionalSearch(name="Bidirectional A*"),
    "Bidirectional Dijkstra": lambda: BidirectionalSearch(name="Bidirectional Dijkstra", heuristic=False),
}
SPEEDS = (1, 2, 4, 8, 15, 30, 60, 120, 250, 500, 1000, 2000, 5000)   # steps/sec
MAX_STEPS_PER_FRAME = 5000
PANEL_W = 360            # right band: metrics + buttons
GRID_MARGIN = 16
FONT_NAME = None  # default pygame font

# Colors
WHITE       = (255,255,255)
BLACK       = (  0,  0,  0)
BLUE        = ( 70,130,180)
RED         = (220, 50, 47)
GOLD        = (255,210,  0)
LOW_RISK    = (236,232,214)
HIGH_RISK   = ( 92, 58, 40)
FWD_OPEN    = (  0,150,255,110)
FWD_CLOSED  = (255,  0,120, 90)
BWD_OPEN    = (255,170,  0,110)
BWD_CLOSED  = (150, 80,255, 90)

CARD_BG     = (24,28,36,220)
CARD_HI     = (255,255,255,18)
TEXT_LIGHT  = (230,235,240)
ACCENT_GOLD = (255,210,0)


def risk_color(risk: int) -> Tuple[int, int, int]:
    """Blend LOW_RISK -> HIGH_RISK by risk level (0..MAX_RISK)."""
    t = min(max(risk, 0), MAX_RISK) / MAX_RISK
    return tuple(int(lo + (hi - lo) * t) for lo, hi in zip(LOW_RISK, HIGH_RISK))


# ---------- Simple UI Button ----------
class UIButton:
    def __init__(self, label: str, rect: pygame.Rect, callback, *, togglable: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.hover = False
        self.togglable = togglable
        self.active = False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        base = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        if self.active and self.togglable:
            bg = (58, 86, 160, 235)
        elif self.hover:
            bg = (46, 50, 60, 230)
        else:
            bg = (36, 40, 48, 220)
        pygame.draw.rect(base, bg, base.get_rect(), border_radius=10)
        screen.blit(base, self.rect.topleft)
        if self.active and self.togglable:
            pygame.draw.rect(screen, (120, 170, 255, 255), self.rect, width=2, border_radius=10)
        text = font.render(self.label, True, (235,238,242))
        screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event):
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()


# ---------- Viewer ----------
class Viewer:
    def __init__(self, scenario: Scenario, map_key: str = "custom"):
        pygame.init()

        self.scenario = scenario
        self.selected_map_key = map_key
        self.selected_algo = "Bidirectional A*"
        self.algo = ALGOS[self.selected_algo]()
        self.algo.init(scenario.grid, scenario.start, scenario.goal)

        self.font_small = pygame.font.Font(FONT_NAME, 14)
        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)

        grid = scenario.grid
        cs = max(1, min(24, (720 - 2 * GRID_MARGIN) // max(grid.height, grid.width)))
        win_w = GRID_MARGIN * 2 + grid.width * cs + PANEL_W
        win_h = max(GRID_MARGIN * 2 + grid.height * cs, 620)
        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption(f"Chiton: {scenario.name}")

        self._buttons: List[UIButton] = []
        self.open_set: set = set()
        self.closed_set: set = set()
        self.open_back: set = set()
        self.closed_back: set = set()
        self.meeting: Optional[Point] = None

        self.alive = True
        self.running = False
        self.clock = pygame.time.Clock()
        self.speed_idx = SPEEDS.index(60)
        self._step_budget = 0.0
        self._last_tick = time.time()
        self.state = "Idle"
        self._last_metrics: dict = {"algo": self.selected_algo}

        self._layout(win_w, win_h)

    @property
    def steps_per_sec(self) -> int:
        return SPEEDS[self.speed_idx]

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int):
        """Compute integer cell_size that fits the window, then rebuild cached surfaces."""
        grid = self.scenario.grid
        avail_w = max(1, win_w - PANEL_W - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        self.cell_size = max(1, min(avail_w // grid.width, avail_h // grid.height))

        plate_w = grid.width * self.cell_size + 2 * GRID_MARGIN
        plate_h = grid.height * self.cell_size + 2 * GRID_MARGIN
        left_x = max(0, (win_w - (plate_w + PANEL_W)) // 2)
        top_y = max(0, (win_h - plate_h) // 2)
        self.canvas_rect = pygame.Rect(left_x, top_y, plate_w, plate_h)
        self._grid_origin = (left_x + GRID_MARGIN, top_y + GRID_MARGIN)
        self._right_band = pygame.Rect(self.canvas_rect.right, 0,
                                       max(PANEL_W, win_w - self.canvas_rect.right), win_h)

        self._render_base()
        self._render_overlay()
        self._build_buttons()

    def _render_base(self):
        """Risk shading + walls, drawn once per layout."""
        grid, cs = self.scenario.grid, self.cell_size
        self._base = pygame.Surface((grid.width * cs, grid.height * cs))
        palette = [risk_color(r) for r in range(MAX_RISK + 1)]
        for row in range(grid.height):
            for col in range(grid.width):
                p = Point(row, col)
                rect = pygame.Rect(col * cs, row * cs, cs, cs)
                color = BLACK if grid.is_block(p) else palette[grid.cost_of(p)]
                self._base.fill(color, rect)
                if cs >= 12:
                    pygame.draw.rect(self._base, BLACK, rect, 1)

    def _render_overlay(self):
        grid, cs = self.scenario.grid, self.cell_size
        self._overlay = pygame.Surface((grid.width * cs, grid.height * cs), pygame.SRCALPHA)
        self._paint(self.open_set, FWD_OPEN)
        self._paint(self.open_back, BWD_OPEN)
        self._paint(self.closed_set, FWD_CLOSED)
        self._paint(self.closed_back, BWD_CLOSED)

    def _paint(self, cells: Iterable[Point], color: Tuple[int, int, int, int]):
        cs = self.cell_size
        for row, col in cells:
            self._overlay.fill(color, pygame.Rect(col * cs, row * cs, cs, cs))

    # ---------- loop ----------
    def run(self):
        while self.alive:
            self._handle_events()
            if self.running:
                self._tick_algorithm()
            self._draw()
            self.clock.tick(60)
        pygame.quit()

    def _tick_algorithm(self):
        now = time.time()
        self._step_budget += (now - self._last_tick) * self.steps_per_sec
        self._last_tick = now
        n = min(int(self._step_budget), MAX_STEPS_PER_FRAME)
        self._step_budget -= n
        for _ in range(n):
            if not self.running:
                break
            self._do_step()

    def _do_step(self) -> StepResult:
        res = self.algo.step()
        for c in res.opened: self.open_set.add(c)
        for c in res.opened_back: self.open_back.add(c)
        for c in res.closed: self.open_set.discard(c); self.closed_set.add(c)
        for c in res.closed_back: self.open_back.discard(c); self.closed_back.add(c)
        self._paint(res.opened, FWD_OPEN)
        self._paint(res.opened_back, BWD_OPEN)
        self._paint(res.closed, FWD_CLOSED)
        self._paint(res.closed_back, BWD_CLOSED)

        if res.metrics:
            self._last_metrics = res.metrics
            self.meeting = res.metrics.get("meeting")
        if res.status == "done":
            self.state = "Done"; self.running = False
        elif res.status == "no_path":
            self.state = "No path"; self.running = False
        else:
            self.state = "Running" if self.running else "Paused"
        self._refresh_active_states()
        return res

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                self.alive = False
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    self.alive = False
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_r:
                    self._reset()
                elif e.key == pygame.K_n:
                    self._step_once()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self._bump_speed(+1)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE, pygame.K_KP_MINUS):
                    self._bump_speed(-1)
                elif e.key == pygame.K_1:
                    self._switch_map("01_sample")
                elif e.key == pygame.K_2:
                    self._switch_map("02_sample_tiled")
                elif e.key == pygame.K_3:
                    self._switch_map("03_walled")
                elif e.key == pygame.K_a:
                    self._switch_algo("A*")
                elif e.key == pygame.K_b:
                    self._switch_algo("Bidirectional A*")
                elif e.key == pygame.K_d:
                    self._switch_algo("Bidirectional Dijkstra")
            elif e.type == pygame.VIDEORESIZE:
                w, h = max(640, e.w), max(480, e.h)
                self.screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
                self._layout(w, h)
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                for b in list(self._buttons):
                    b.handle_mouse(e)

    # ---------- controls ----------
    def _toggle_run(self):
        if self.state in ("Done", "No path"):
            return
        self.running = not self.running
        self.state = "Running" if self.running else "Paused"
        self._step_budget = 0.0
        self._last_tick = time.time()
        self._refresh_active_states()

    def _step_once(self):
        if self.state not in ("Done", "No path"):
            self._do_step()

    def _bump_speed(self, dv: int):
        self.speed_idx = max(0, min(len(SPEEDS) - 1, self.speed_idx + dv))

    def _switch_map(self, key: str):
        if key not in MAP_FILES:
            return
        try:
            scenario = load_map(MAP_FILES[key])
        except (OSError, ValueError) as ex:
            logger.warning("Failed to load map %s: %s", key, ex)
            return
        self.scenario = scenario
        self.selected_map_key = key
        pygame.display.set_caption(f"Chiton: {scenario.name}")
        self._switch_algo(self.selected_algo)

    def _switch_algo(self, label: str):
        self.selected_algo = label
        self.algo = ALGOS[label]()
        self.algo.init(self.scenario.grid, self.scenario.start, self.scenario.goal)
        self._reset()
        self._layout(*self.screen.get_size())

    def _reset(self):
        self.running = False
        self.state = "Idle"
        self.algo.reset()
        self.open_set.clear()
        self.closed_set.clear()
        self.open_back.clear()
        self.closed_back.clear()
        self.meeting = None
        self._last_metrics = {"algo": self.selected_algo}
        self._render_overlay()
        self._refresh_active_states()

    # ---------- drawing ----------
    def _draw(self):
        self._draw_backdrop()
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_backdrop(self):
        w, h = self.screen.get_size()
        top = (24, 26, 32); bot = (36, 40, 48)
        for y in range(h):
            t = y / max(1, h-1)
            c = tuple(int(a + (b - a) * t) for a, b in zip(top, bot))
            pygame.draw.line(self.screen, c, (0, y), (w, y))

    def _draw_grid(self):
        self.screen.blit(self._base, self._grid_origin)
        self.screen.blit(self._overlay, self._grid_origin)
        if self.meeting is not None:
            self._draw_badge(self.meeting, GOLD, "M")
        self._draw_badge(self.scenario.start, BLUE, "S")
        self._draw_badge(self.scenario.goal, RED, "G")

    def _draw_badge(self, cell: Point, color: Tuple[int, int, int], label: str):
        cs = self.cell_size
        ox, oy = self._grid_origin
        row, col = cell
        center = (ox + col*cs + cs//2, oy + row*cs + cs//2)
        pygame.draw.circle(self.screen, color, center, max(4, cs//2 - 1))
        if cs >= 14:
            txt = self.font_small.render(label, True, WHITE)
            self.screen.blit(txt, txt.get_rect(center=center))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 230  # leaves space for metrics card above
        w = max(160, rb.width - 32)
        h = 34
        gap = 8

        def add(label, cb, *, togglable=False):
            nonlocal y
            btn = UIButton(label, pygame.Rect(x, y, w, h), cb, togglable=togglable)
            self._buttons.append(btn)
            y += h + gap
            return btn

        self.btn_run = add("Run / Pause", self._toggle_run, togglable=True)
        add("Step Once", self._step_once)
        add("Reset", self._reset)

        half = (w - 8) // 2
        self._buttons.append(UIButton("Speed -", pygame.Rect(x, y, half, h), lambda: self._bump_speed(-1)))
        self._buttons.append(UIButton("Speed +", pygame.Rect(x + half + 8, y, half, h), lambda: self._bump_speed(+1)))
        y += h + gap

        self.algo_buttons = {
            label: add(f"Algo: {label}", lambda label=label: self._switch_algo(label), togglable=True)
            for label in ALGOS
        }
        self.map_buttons = {
            key: add(MAP_LABELS[key], lambda key=key: self._switch_map(key), togglable=True)
            for key in MAP_FILES
        }
        self._refresh_active_states()

    def _refresh_active_states(self):
        if not self._buttons:
            return
        self.btn_run.active = self.running
        for label, btn in self.algo_buttons.items():
            btn.active = label == self.selected_algo
        for key, btn in self.map_buttons.items():
            btn.active = key == self.selected_map_key

    def _draw_metrics_and_buttons(self):
        rb = self._right_band

        card = pygame.Surface((rb.width - 20, 210), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        hi = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(hi, CARD_HI, hi.get_rect(), border_radius=14)
        card.blit(hi, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        m = self._last_metrics
        line(f"Metrics ({self.state})", big=True, color=ACCENT_GOLD)
        line(f"Popped: {m.get('popped', 0)}")
        line(f"Open: {m.get('open_size', 0)}")
        line(f"Closed: {m.get('closed_count', 0)}")
        if m.get("total_cost") is not None:
            line(f"Total Risk: {m['total_cost']}")
        elif m.get("mu") is not None:
            line(f"Best So Far (mu): {m['mu']}")
        line("-" * 26)
        grid = self.scenario.grid
        line(f"{self.scenario.name} ({grid.height}x{grid.width})")
        line(f"Algo: {self.selected_algo}")
        line(f"Speed: {self.steps_per_sec} steps/s")

        for b in self._buttons:
            b.draw(self.screen, self.font_small)


# ---------- main ----------
def main() -> int:
    key = "01_sample"
    try:
        scenario = load_map(MAP_FILES[key])
    except (OSError, GridFormatError, InvalidEndpointError) as ex:
        print(f"Failed to load default map: {ex}")
        return 1
    Viewer(scenario, map_key=key).run()
    return 0

if __name__ == "__main__":
    sys.exit(main())
