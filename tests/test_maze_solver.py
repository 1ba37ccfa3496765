"""Tests for the depth-first maze solver."""

import pytest

from mazebot.core.maze_raster import (
    BRANCH_MAZE,
    CORRIDOR_MAZE,
    PATH_COLOR,
    WALL_COLOR,
    RasterMaze,
    parse_maze_text,
)
from mazebot.core.maze_solver import (
    MazeSolver,
    Point,
    SolverState,
    StepEvent,
)


DEAD_END_MAZE = """XXXXX
..X..
XXXXX"""

NO_EXIT_MAZE = """XXXXX
...XX
XXXXX"""


def grid_solver(maze_text, x, y, sink=None, step_size=1, robot_size=0):
    """Solver on a text maze where one character is one pixel."""
    return MazeSolver(
        parse_maze_text(maze_text),
        start_x=x,
        start_y=y,
        sink=sink,
        step_size=step_size,
        robot_size=robot_size,
    )


def blank_raster(width, height, color=PATH_COLOR):
    return [[color] * width for _ in range(height)]


def l_shaped_raster():
    """61x61 raster: arm from the left edge turning up to the top edge."""
    rows = []
    for y in range(61):
        row = []
        for x in range(61):
            horizontal = 30 <= y <= 50 and x <= 50
            vertical = 30 <= x <= 50 and y <= 50
            row.append(PATH_COLOR if horizontal or vertical else WALL_COLOR)
        rows.append(row)
    return RasterMaze(rows)


def run_to_end(solver, limit=10_000):
    events = []
    while solver.is_solving and len(events) < limit:
        events.append(solver.tick())
    return events


class TestEntranceAndExit:
    """Tests for border scanning."""

    def test_top_row_before_bottom_row(self):
        maze = """X.XXX
X...X
XXX.X"""
        solver = grid_solver(maze, 1, 1)

        assert solver.start_point == Point(1, 0)
        assert solver.exit_point == Point(3, 2)

    def test_whole_top_row_scanned_before_bottom_row(self):
        maze = """XXX.X
X...X
X.XXX"""
        solver = grid_solver(maze, 1, 1)

        assert solver.start_point == Point(3, 0)
        assert solver.exit_point == Point(1, 2)

    def test_left_column_before_right_column(self):
        maze = """XXXXX
X....
....X
XXXXX"""
        solver = grid_solver(maze, 1, 1)

        assert solver.start_point == Point(0, 2)
        assert solver.exit_point == Point(4, 1)

    def test_matches_after_second_are_ignored(self):
        maze = """X.X.X.X
X.....X
XXXXXXX"""
        solver = grid_solver(maze, 1, 1)

        assert solver.start_point == Point(1, 0)
        assert solver.exit_point == Point(3, 0)

    def test_corner_pixel_counted_once(self):
        maze = """.XX
.XX
XXX"""
        solver = grid_solver(maze, 0, 0)

        assert solver.start_point == Point(0, 0)
        assert solver.exit_point == Point(0, 1)

    def test_single_border_match_leaves_exit_unset(self):
        solver = grid_solver(NO_EXIT_MAZE, 0, 1)

        assert solver.start_point == Point(0, 1)
        assert solver.exit_point is None

    def test_path_color_sampled_at_start(self):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3)
        assert solver.path_color == PATH_COLOR

        # Standing on a wall makes the walls the path
        solver = grid_solver(CORRIDOR_MAZE, 0, 0)
        assert solver.path_color == WALL_COLOR
        assert solver.start_point == Point(0, 0)
        assert solver.exit_point == Point(1, 0)


class TestValidityOracle:
    """Tests for footprint validity with the default robot size."""

    def test_open_field(self):
        solver = MazeSolver(RasterMaze(blank_raster(50, 50)), 0, 0)

        assert solver.is_valid_move(0, 0)
        assert solver.is_valid_move(29, 29)

    def test_far_corner_must_be_inside_raster(self):
        solver = MazeSolver(RasterMaze(blank_raster(50, 50)), 0, 0)

        # Passes the bounds check but the corner at x=50 is off the raster
        assert not solver.is_valid_move(30, 0)
        assert not solver.is_valid_move(0, 30)

    def test_out_of_bounds(self):
        solver = MazeSolver(RasterMaze(blank_raster(50, 50)), 0, 0)

        assert not solver.is_valid_move(-1, 0)
        assert not solver.is_valid_move(0, -1)
        assert not solver.is_valid_move(31, 0)
        assert not solver.is_valid_move(0, 31)

    def test_only_corners_are_checked(self):
        rows = blank_raster(50, 50)
        rows[10][10] = WALL_COLOR
        solver = MazeSolver(RasterMaze(rows), 0, 0)

        assert solver.is_valid_move(0, 0)

    def test_wall_under_corner_blocks(self):
        rows = blank_raster(50, 50)
        rows[0][20] = WALL_COLOR
        solver = MazeSolver(RasterMaze(rows), 0, 0)

        assert not solver.is_valid_move(0, 0)
        assert solver.is_valid_move(1, 0)

    def test_path_available_truncates_coordinates(self):
        solver = MazeSolver(RasterMaze(blank_raster(50, 50)), 0, 0)

        assert solver.is_path_available(49.9, 0.5)
        assert not solver.is_path_available(50, 0)
        assert not solver.is_path_available(-0.1, 0)
        assert not solver.is_path_available(float("nan"), 0)
        assert not solver.is_valid_move(0, float("nan"))


class TestSolver:
    """Tests for the depth-first state machine."""

    def test_straight_corridor(self, sink):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3, sink=sink)
        width = solver.width

        assert solver.state is SolverState.IDLE
        assert solver.solve_maze()
        events = run_to_end(solver)

        assert events.count(StepEvent.ADVANCED) == width - 1
        assert StepEvent.BACKTRACKED not in events
        assert events[-1] is StepEvent.REACHED
        assert solver.state is SolverState.REACHED
        assert solver.position == Point(9, 3)
        assert len(solver.path) == width
        assert sink.positions == [(x, 3) for x in range(1, width)]

    def test_dead_end_branch(self):
        solver = grid_solver(BRANCH_MAZE, 0, 3)
        solver.solve_maze()

        events = [solver.tick() for _ in range(6)]
        assert events == [
            StepEvent.ADVANCED,
            StepEvent.ADVANCED,
            StepEvent.ADVANCED,  # up into the dead end
            StepEvent.ADVANCED,
            StepEvent.BACKTRACKED,
            StepEvent.BACKTRACKED,
        ]
        # Back at the branch point with its depth on the stack
        assert solver.position == Point(2, 3)
        assert solver.path == [Point(0, 3), Point(1, 3), Point(2, 3)]
        assert solver.get_solver_info() == {
            "position": {"x": 2, "y": 3},
            "state": "solving",
            "start_point": {"x": 0, "y": 3},
            "exit_point": {"x": 8, "y": 3},
            "path_length": 3,
            "visited_count": 5,
        }

        events = run_to_end(solver)
        assert events.count(StepEvent.ADVANCED) == 6
        assert events[-1] is StepEvent.REACHED
        assert solver.position == Point(8, 3)

    def test_path_exhausted_is_stuck(self, sink):
        solver = grid_solver(DEAD_END_MAZE, 0, 1, sink=sink)
        solver.solve_maze()

        events = run_to_end(solver)

        assert events == [
            StepEvent.ADVANCED,
            StepEvent.BACKTRACKED,
            StepEvent.BACKTRACKED,
            StepEvent.STUCK,
        ]
        assert solver.state is SolverState.STUCK
        assert solver.path == []
        assert solver.position == Point(0, 1)
        assert sink.positions == [(1, 1), (0, 1)]

    def test_single_entry_backtrack_empties_stack(self):
        solver = grid_solver(DEAD_END_MAZE, 0, 1)
        solver.solve_maze()
        solver.tick()
        solver.tick()

        assert solver.path == [Point(0, 1)]
        assert solver.tick() is StepEvent.BACKTRACKED
        assert solver.path == []
        assert solver.is_solving
        assert solver.tick() is StepEvent.STUCK
        assert not solver.is_solving

    def test_no_exit_goes_straight_to_stuck(self, sink):
        solver = grid_solver(NO_EXIT_MAZE, 0, 1, sink=sink)

        assert solver.solve_maze() is False
        assert solver.state is SolverState.STUCK
        assert solver.tick() is None
        assert solver.position == Point(0, 1)
        assert sink.positions == []

    def test_reached_before_moving(self, sink):
        solver = grid_solver("...", 0, 0, sink=sink, step_size=2)
        assert solver.exit_point == Point(1, 0)

        solver.solve_maze()

        assert solver.tick() is StepEvent.REACHED
        assert sink.positions == []

    def test_step_skips_exit_check(self):
        solver = grid_solver("....", 0, 0, step_size=2)
        solver.solve_maze()

        assert solver.is_at_exit()
        assert solver.step() is StepEvent.ADVANCED
        assert solver.position == Point(2, 0)

    def test_tick_when_idle_does_nothing(self):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3)

        assert solver.tick() is None
        assert solver.step() is None
        assert solver.position == Point(0, 3)

    def test_solve_while_solving_is_noop(self):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3)
        solver.solve_maze()
        solver.tick()
        solver.tick()

        assert solver.solve_maze()
        assert len(solver.path) == 3
        assert len(solver.visited) == 3

    def test_resolve_after_terminal_resets_search(self):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3)
        solver.solve_maze()
        run_to_end(solver)

        assert solver.solve_maze()
        assert solver.path == [Point(9, 3)]
        assert solver.visited == {Point(9, 3)}
        assert solver.tick() is StepEvent.REACHED

    def test_default_footprint_reaches_top_exit(self):
        solver = MazeSolver(l_shaped_raster(), 0, 30)

        assert solver.start_point == Point(30, 0)
        assert solver.exit_point == Point(31, 0)

        solver.solve_maze()
        events = run_to_end(solver)

        assert events == [StepEvent.ADVANCED] * 6 + [StepEvent.REACHED]
        assert solver.position == Point(30, 0)

    def test_start_outside_maze_rejected(self):
        with pytest.raises(ValueError, match="outside"):
            grid_solver(CORRIDOR_MAZE, 10, 3)

    def test_non_positive_step_rejected(self):
        with pytest.raises(ValueError, match="step_size"):
            grid_solver(CORRIDOR_MAZE, 0, 3, step_size=0)


class TestSolverInvariants:
    """Properties that hold across whole solves."""

    @pytest.mark.parametrize(
        "maze, start",
        [
            (CORRIDOR_MAZE, (0, 3)),
            (BRANCH_MAZE, (0, 3)),
            (DEAD_END_MAZE, (0, 1)),
        ],
    )
    def test_only_valid_positions_committed(self, sink, maze, start):
        solver = grid_solver(maze, *start, sink=sink)
        solver.solve_maze()
        run_to_end(solver)

        assert sink.positions
        for x, y in sink.positions:
            assert solver.is_valid_move(x, y)

    @pytest.mark.parametrize(
        "maze, start",
        [
            (CORRIDOR_MAZE, (0, 3)),
            (BRANCH_MAZE, (0, 3)),
            (DEAD_END_MAZE, (0, 1)),
        ],
    )
    def test_visited_grows_by_at_most_one(self, maze, start):
        solver = grid_solver(maze, *start)
        solver.solve_maze()

        while solver.is_solving:
            before = set(solver.visited)
            solver.tick()
            assert before <= solver.visited
            assert len(solver.visited) - len(before) in (0, 1)

    def test_no_movement_after_terminal(self, sink):
        solver = grid_solver(DEAD_END_MAZE, 0, 1, sink=sink)
        solver.solve_maze()
        run_to_end(solver)
        recorded = list(sink.positions)

        for _ in range(3):
            assert solver.tick() is None

        assert sink.positions == recorded


class TestManualMove:
    """Tests for manual moves."""

    def test_move_out_of_bounds_is_noop(self, sink):
        solver = MazeSolver(RasterMaze(blank_raster(50, 50)), 0, 0, sink=sink)

        assert solver.move(-10, 0) is False
        assert solver.move(0, 40) is False
        assert solver.position == Point(0, 0)
        assert sink.positions == []

    def test_valid_move_commits(self, sink):
        solver = MazeSolver(RasterMaze(blank_raster(50, 50)), 0, 0, sink=sink)

        assert solver.move(10, 10) is True
        assert solver.position == Point(10, 10)
        assert sink.positions == [(10, 10)]

    def test_move_into_wall_is_noop(self, sink):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3, sink=sink)

        assert solver.move(0, -1) is False
        assert solver.move(1, 0) is True
        assert solver.position == Point(1, 3)
        assert sink.positions == [(1, 3)]

    def test_move_refused_while_solving(self):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3)
        solver.solve_maze()
        solver.tick()

        assert solver.move(1, 0) is False
        assert solver.position == Point(1, 3)

    def test_move_allowed_after_solve(self):
        solver = grid_solver(DEAD_END_MAZE, 0, 1)
        solver.solve_maze()
        run_to_end(solver)

        assert solver.move(1, 0) is True
        assert solver.position == Point(1, 1)

    def test_non_finite_move_is_noop(self, sink):
        solver = grid_solver(CORRIDOR_MAZE, 0, 3, sink=sink)

        assert solver.move(float("nan"), 0) is False
        assert solver.move(0, float("nan")) is False
        assert solver.move(float("inf"), 0) is False
        assert solver.move(float("-inf"), 0) is False
        assert solver.position == Point(0, 3)
        assert sink.positions == []
