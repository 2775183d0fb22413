"""Local multi-snake arena (Battlesnake standard rules) with optional pygame rendering."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from . import config
from .geometry import Direction, Point, in_bounds
from .state import Board, GameState, Snake

logger = logging.getLogger(__name__)

MoveFunc = Callable[[GameState], Direction]

SNAKE_COLORS = [
    (0, 200, 160),
    (230, 90, 90),
    (90, 140, 240),
    (230, 200, 70),
    (190, 110, 220),
    (240, 150, 60),
    (120, 220, 90),
    (200, 200, 200),
]


def _import_pygame():
    import os
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    import pygame  # type: ignore
    return pygame


def spawn_points(width: int, height: int) -> List[Point]:
    points = [
        Point(1, 1),
        Point(width - 2, height - 2),
        Point(1, height - 2),
        Point(width - 2, 1),
        Point(width // 2, 1),
        Point(width // 2, height - 2),
        Point(1, height // 2),
        Point(width - 2, height // 2),
    ]
    return [Point(min(max(p.x, 0), width - 1), min(max(p.y, 0), height - 1)) for p in points]


def random_safe_move(state: GameState, rng: random.Random) -> Direction:
    """Reference opponent: any in-bounds move onto a cell no snake occupies."""
    board = state.board
    occupied: Set[Point] = set()
    for snake in board.snakes:
        occupied.update(snake.body)
    safe = [
        d
        for d in Direction
        if in_bounds(d.step(state.you.head), board.width, board.height)
        and d.step(state.you.head) not in occupied
    ]
    return rng.choice(safe) if safe else Direction.UP


class _ArenaSnake:
    """Mutable per-game snake record; converted to an immutable Snake for snapshots."""

    __slots__ = ("id", "body", "health")

    def __init__(self, snake_id: str, body: List[Point], health: int) -> None:
        self.id = snake_id
        self.body = body
        self.health = health

    def freeze(self) -> Snake:
        return Snake(id=self.id, body=tuple(self.body), health=self.health)


class ArenaGame:
    """Game state manager for a local match between move functions."""

    def __init__(
        self,
        num_snakes: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        seed: Optional[int] = None,
        render_enabled: bool = False,
        hazard_count: Optional[int] = None,
    ) -> None:
        self.num_snakes = int(config.NUM_SNAKES if num_snakes is None else num_snakes)
        self.width = int(config.BOARD_WIDTH if width is None else width)
        self.height = int(config.BOARD_HEIGHT if height is None else height)
        self.hazard_count = int(config.HAZARD_COUNT if hazard_count is None else hazard_count)
        self.seed = seed
        self.rng = random.Random(seed)
        self.render_enabled = bool(render_enabled)

        self.pygame = None
        self.screen = None
        self.clock = None
        self.font = None
        self.debug_font = None
        if self.render_enabled:
            self.pygame = _import_pygame()
            self.pygame.init()
            self.screen = self.pygame.display.set_mode(
                (self.width * config.GRID_SIZE, self.height * config.GRID_SIZE + 40)
            )
            self.pygame.display.set_caption("snakebrain arena")
            self.clock = self.pygame.time.Clock()
            self.font = self.pygame.font.SysFont("Arial", 20, bold=True)
            self.debug_font = self.pygame.font.SysFont("Arial", 13)

        self.reset()

    @property
    def snake_ids(self) -> List[str]:
        return [f"snake-{i}" for i in range(self.num_snakes)]

    def reset(self) -> None:
        self.turn = 0
        self.snakes: Dict[str, _ArenaSnake] = {}
        self.death_reasons: Dict[str, str] = {}
        self.game_over = False
        self.winner: Optional[str] = None
        self.debug_info: Optional[Dict[str, Any]] = None

        for sid, spawn in zip(self.snake_ids, spawn_points(self.width, self.height)):
            self.snakes[sid] = _ArenaSnake(sid, [spawn] * config.START_LENGTH, config.START_HEALTH)

        self.food: Set[Point] = set()
        self.hazards: Set[Point] = set()
        center = Point(self.width // 2, self.height // 2)
        if center not in self._occupied():
            self.food.add(center)
        self._spawn_food(self.num_snakes)
        self._spawn_hazards(self.hazard_count)

    # ----------------------------
    # Snapshots
    # ----------------------------
    def alive(self) -> List[str]:
        return [sid for sid in self.snakes if sid not in self.death_reasons]

    def board(self) -> Board:
        return Board(
            width=self.width,
            height=self.height,
            food=frozenset(self.food),
            hazards=frozenset(self.hazards),
            snakes=tuple(self.snakes[sid].freeze() for sid in self.alive()),
        )

    def snapshot(self, snake_id: str) -> GameState:
        return GameState(turn=self.turn, board=self.board(), you=self.snakes[snake_id].freeze())

    # ----------------------------
    # Placement
    # ----------------------------
    def _occupied(self) -> Set[Point]:
        cells: Set[Point] = set()
        for sid in self.alive():
            cells.update(self.snakes[sid].body)
        return cells

    def _free_cells(self) -> List[Point]:
        taken = self._occupied() | self.food | self.hazards
        return [
            Point(x, y)
            for y in range(self.height)
            for x in range(self.width)
            if Point(x, y) not in taken
        ]

    def _spawn_food(self, count: int) -> None:
        free = self._free_cells()
        for _ in range(min(count, len(free))):
            cell = free.pop(self.rng.randrange(len(free)))
            self.food.add(cell)

    def _spawn_hazards(self, count: int) -> None:
        free = self._free_cells()
        for _ in range(min(count, len(free))):
            cell = free.pop(self.rng.randrange(len(free)))
            self.hazards.add(cell)

    # ----------------------------
    # Rules
    # ----------------------------
    def step(self, moves: Dict[str, Direction]) -> Dict[str, str]:
        """Advance one turn; returns the snakes eliminated this turn and why."""
        if self.game_over:
            return {}

        alive = self.alive()
        for sid in alive:
            snake = self.snakes[sid]
            move = moves.get(sid, Direction.UP)
            snake.body.insert(0, move.step(snake.body[0]))
            snake.body.pop()
            snake.health -= 1

        for sid in alive:
            snake = self.snakes[sid]
            if snake.body[0] in self.hazards:
                snake.health -= config.HAZARD_DAMAGE

        eaten: Set[Point] = set()
        for sid in alive:
            snake = self.snakes[sid]
            head = snake.body[0]
            if head in self.food:
                snake.health = config.START_HEALTH
                snake.body.append(snake.body[-1])
                eaten.add(head)
        self.food -= eaten

        deaths = self._eliminate(alive)
        self.death_reasons.update(deaths)

        missing = config.MIN_FOOD - len(self.food)
        if missing > 0:
            self._spawn_food(missing)
        elif self.rng.random() < config.FOOD_SPAWN_CHANCE:
            self._spawn_food(1)

        self.turn += 1
        self._check_game_over()
        return deaths

    def _eliminate(self, alive: List[str]) -> Dict[str, str]:
        deaths: Dict[str, str] = {}
        for sid in alive:
            snake = self.snakes[sid]
            if not in_bounds(snake.body[0], self.width, self.height):
                deaths[sid] = "wall"
            elif snake.health <= 0:
                deaths[sid] = "starvation"

        # Collisions are judged simultaneously among the snakes that survived the first phase.
        contenders = [sid for sid in alive if sid not in deaths]
        for sid in contenders:
            head = self.snakes[sid].body[0]
            for other in contenders:
                if head in self.snakes[other].body[1:]:
                    deaths[sid] = "self" if other == sid else f"body:{other}"
                    break

        heads: Dict[Point, List[str]] = {}
        for sid in contenders:
            heads.setdefault(self.snakes[sid].body[0], []).append(sid)
        for group in heads.values():
            if len(group) < 2:
                continue
            longest = max(len(self.snakes[sid].body) for sid in group)
            winners = [sid for sid in group if len(self.snakes[sid].body) == longest]
            for sid in group:
                if sid not in winners or len(winners) > 1:
                    deaths[sid] = "head_to_head"
        return deaths

    def _check_game_over(self) -> None:
        alive = self.alive()
        solo = self.num_snakes == 1
        if (solo and not alive) or (not solo and len(alive) <= 1):
            self.game_over = True
            self.winner = alive[0] if alive else None
        elif self.turn >= config.MAX_TURNS_PER_GAME:
            self.game_over = True
            self.winner = max(alive, key=lambda sid: len(self.snakes[sid].body))
            logger.info("Reached turn cap (%d); ending game", config.MAX_TURNS_PER_GAME)

    def play(
        self,
        strategies: Dict[str, MoveFunc],
        on_turn: Optional[Callable[[Dict[str, GameState], Dict[str, Direction]], None]] = None,
    ) -> Dict[str, Any]:
        """Run the current game to completion; ``strategies`` maps snake id to move function."""
        while not self.game_over:
            states = {sid: self.snapshot(sid) for sid in self.alive()}
            moves: Dict[str, Direction] = {}
            for sid, state in states.items():
                moves[sid] = self._ask(strategies[sid], state)
            if on_turn is not None:
                on_turn(states, moves)
            self.step(moves)
            if self.render_enabled:
                self.handle_pygame_events()
                self.render()
        return self.summary()

    def _ask(self, strategy: MoveFunc, state: GameState) -> Direction:
        try:
            move = strategy(state)
        except Exception as exc:
            logger.warning("Move function for %s raised %s; defaulting to up", state.you.id, exc)
            return Direction.UP
        if not isinstance(move, Direction):
            logger.warning("Move function for %s returned %r; defaulting to up", state.you.id, move)
            return Direction.UP
        return move

    def summary(self) -> Dict[str, Any]:
        return {
            "winner": self.winner,
            "turns": self.turn,
            "death_reasons": dict(self.death_reasons),
            "lengths": {sid: len(s.body) for sid, s in self.snakes.items()},
            "alive": self.alive(),
        }

    # ----------------------------
    # Rendering
    # ----------------------------
    def _cell_rect(self, cell: Point) -> Tuple[int, int, int, int]:
        size = config.GRID_SIZE
        return (cell.x * size, 40 + (self.height - 1 - cell.y) * size, size, size)

    def render(self, debug_info: Optional[Dict[str, Any]] = None) -> None:
        if not self.render_enabled or self.screen is None or self.pygame is None:
            return

        pg = self.pygame
        self.screen.fill((20, 20, 30))
        size = config.GRID_SIZE
        for x in range(self.width + 1):
            pg.draw.line(self.screen, (40, 40, 50), (x * size, 40), (x * size, 40 + self.height * size))
        for y in range(self.height + 1):
            pg.draw.line(self.screen, (40, 40, 50), (0, 40 + y * size), (self.width * size, 40 + y * size))

        for cell in self.hazards:
            pg.draw.rect(self.screen, (70, 40, 80), pg.Rect(*self._cell_rect(cell)))
        for cell in self.food:
            pg.draw.rect(self.screen, (255, 80, 80), pg.Rect(*self._cell_rect(cell)), border_radius=10)

        for idx, sid in enumerate(self.snakes):
            if sid in self.death_reasons:
                continue
            color = SNAKE_COLORS[idx % len(SNAKE_COLORS)]
            for i, segment in enumerate(self.snakes[sid].body):
                rect = pg.Rect(*self._cell_rect(segment))
                shade = color if i == 0 else tuple(int(c * 0.7) for c in color)
                pg.draw.rect(self.screen, shade, rect, border_radius=6 if i == 0 else 4)

        if debug_info is None:
            debug_info = self.debug_info
        if config.UI_DEBUG_MODE and debug_info and self.debug_font:
            snake = self.snakes.get(str(debug_info.get("snake")))
            if snake is not None and snake.body:
                for name, area in (debug_info.get("space") or {}).items():
                    cell = Direction.parse(name).step(snake.body[0])
                    text = self.debug_font.render(str(area), True, (200, 200, 220))
                    x, y, w, h = self._cell_rect(cell)
                    self.screen.blit(text, text.get_rect(center=(x + w / 2, y + h / 2)))

        if self.font:
            status = self.font.render(f"Turn {self.turn}  Alive {len(self.alive())}", True, (255, 255, 255))
            self.screen.blit(status, (10, 8))

        pg.display.flip()
        if self.clock:
            self.clock.tick(config.FPS)

    def handle_pygame_events(self) -> None:
        if not self.render_enabled or self.pygame is None:
            return
        for event in self.pygame.event.get():
            if event.type == self.pygame.QUIT:
                raise KeyboardInterrupt
            if event.type == self.pygame.KEYDOWN and event.key == self.pygame.K_d:
                config.UI_DEBUG_MODE = not config.UI_DEBUG_MODE
