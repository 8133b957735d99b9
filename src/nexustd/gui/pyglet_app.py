from __future__ import annotations

import logging

import pyglet
from pyglet.window import key, mouse

from ..app.session import GameSession
from ..core.model.enemies import get_enemy_def
from ..core.model.towers import TOWER_DEFS, get_tower_def
from ..net.coordinator import Phase


logger = logging.getLogger(__name__)

BACKGROUND = (10, 10, 10, 255)
GRID_COLOR = (31, 31, 31)
PATH_COLOR = (30, 41, 59)
CORE_COLOR = (59, 130, 246)
HEALTH_BG = (55, 65, 81)
HUD_HEIGHT = 60
TOWER_KEYS = {key._1: "laser", key._2: "plasma", key._3: "quantum"}


class DefenseWindow(pyglet.window.Window):
    """
    Flat-shape viewer. Reads ``engine.observe()`` every draw and sends back
    only discrete commands through the session.
    """

    def __init__(self, session: GameSession) -> None:
        engine = session.engine
        super().__init__(
            width=int(engine.width),
            height=int(engine.height) + HUD_HEIGHT,
            caption="Nexus Network Defense",
        )
        self.session = session
        self.selected_kind = "laser"
        self.hud = pyglet.text.Label(
            "",
            x=10,
            y=int(engine.height) + HUD_HEIGHT // 2,
            anchor_y="center",
            font_size=11,
            color=(220, 220, 220, 255),
        )

    # coordinates: engine is y-down, pyglet is y-up
    def _to_screen(self, x: float, y: float) -> tuple[float, float]:
        return x, self.session.engine.height - y

    def on_draw(self) -> None:
        pyglet.gl.glClearColor(*(c / 255.0 for c in BACKGROUND))
        self.clear()
        batch = pyglet.graphics.Batch()
        shapes: list = []
        engine = self.session.engine
        obs = engine.observe()
        sx = engine.scale_x

        step = 40 * sx
        gx = 0.0
        while gx < engine.width:
            shapes.append(pyglet.shapes.Line(gx, 0, gx, engine.height, color=GRID_COLOR, batch=batch))
            gx += step

        points = [self._to_screen(x, y) for x, y in obs["path"]]
        for (x1, y1), (x2, y2) in zip(points[:-1], points[1:]):
            shapes.append(pyglet.shapes.Line(x1, y1, x2, y2, color=PATH_COLOR, batch=batch))
        cx, cy = points[-1]
        shapes.append(pyglet.shapes.Circle(cx, cy, 25 * sx, color=CORE_COLOR, batch=batch))

        for tower in obs["towers"]:
            tx, ty = self._to_screen(tower["x"], tower["y"])
            color = get_tower_def(tower["kind"]).color
            shapes.append(pyglet.shapes.Circle(tx, ty, 15 * sx, color=color, batch=batch))
            if tower["kind"] == self.selected_kind:
                ring = pyglet.shapes.Arc(tx, ty, tower["range"], color=(*color, 64), batch=batch)
                shapes.append(ring)

        for enemy in obs["enemies"]:
            ex, ey = self._to_screen(enemy["x"], enemy["y"])
            enemy_def = get_enemy_def(enemy["kind"])
            size = enemy_def.size * sx
            shapes.append(pyglet.shapes.Circle(ex, ey, size, color=enemy_def.color, batch=batch))
            bar_w = 20 * sx
            frac = max(0.0, enemy["health"] / enemy["max_health"]) if enemy["max_health"] else 0.0
            bar_y = ey + size + 4
            shapes.append(pyglet.shapes.Rectangle(ex - bar_w / 2, bar_y, bar_w, 4, color=HEALTH_BG, batch=batch))
            shapes.append(pyglet.shapes.Rectangle(ex - bar_w / 2, bar_y, bar_w * frac, 4, color=CORE_COLOR, batch=batch))

        for projectile in obs["projectiles"]:
            px, py = self._to_screen(projectile["x"], projectile["y"])
            color = get_tower_def(projectile["kind"]).color
            shapes.append(pyglet.shapes.Circle(px, py, 3 * sx, color=color, batch=batch))

        batch.draw()
        self.hud.text = self._hud_text(obs)
        self.hud.draw()

    def _hud_text(self, obs) -> str:
        parts = [
            f"Core {obs['health']}",
            f"Credits {obs['credits']}",
            f"Wave {obs['wave']}",
            f"Score {obs['score']}",
            f"[{TOWER_DEFS[self.selected_kind].title}]",
        ]
        if obs["game_over"]:
            parts.append("NEXUS COMPROMISED (R to reset)")
        elif obs["paused"]:
            parts.append("PAUSED")
        coordinator = self.session.coordinator
        if coordinator is not None and coordinator.state.is_multiplayer:
            s = coordinator.state
            parts.append(f"room {s.room_id} vs {s.opponent_name or '...'}")
            if coordinator.phase is Phase.LOBBY:
                parts.append("ready" if s.ready else "Y: ready")
            else:
                parts.append(coordinator.phase.value.replace("_", " ").lower())
        return "  |  ".join(parts)

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int) -> None:
        if button != mouse.LEFT:
            return
        if y > self.session.engine.height:
            return
        ex, ey = self._to_screen(x, y)
        tower = self.session.place_tower(ex, ey, self.selected_kind)
        if tower is None:
            logger.debug("click at (%s,%s) did not place a tower", x, y)

    def on_key_press(self, symbol: int, modifiers: int) -> None:
        session = self.session
        if symbol in TOWER_KEYS:
            self.selected_kind = TOWER_KEYS[symbol]
        elif symbol == key.SPACE:
            if session.engine.state.playing:
                session.toggle_pause()
            else:
                session.start()
        elif symbol == key.R:
            session.reset()
        elif symbol == key.E:
            session.end_turn()
        elif symbol == key.Y and session.coordinator is not None:
            session.coordinator.set_ready(not session.coordinator.state.ready)
        elif symbol == key.ESCAPE:
            self.close()

    def on_close(self) -> None:
        self.session.stop()
        super().on_close()


def run(session: GameSession) -> None:
    DefenseWindow(session)
    pyglet.app.run()
