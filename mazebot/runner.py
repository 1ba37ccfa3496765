#!/usr/bin/env python3
"""
Headless Runner for Maze Robot

Solves a maze file without a clock: ticks the solver back to back and
prints the outcome as JSON.
"""

import json
import sys
from typing import Optional

from mazebot.config import get_settings
from mazebot.core.maze_raster import MazeParseError, MazeValidationError, load_maze_file
from mazebot.core.maze_solver import MazeSolver, SolverState, StepEvent


def run_solver(
    maze_path: str,
    start_x: float,
    start_y: float,
    step_size: Optional[int] = None,
    robot_size: Optional[int] = None,
    cell_size: Optional[int] = None,
    max_ticks: int = 1_000_000,
) -> dict:
    """
    Solve a maze file and return results.

    Args:
        maze_path: Path to a text grid (.txt) or an image
        start_x: Initial robot x in pixels
        start_y: Initial robot y in pixels
        step_size: Grid pitch, defaults to settings
        robot_size: Footprint side, defaults to settings
        cell_size: Pixels per character for text grids
        max_ticks: Safety cap on the number of ticks

    Returns:
        Dictionary with the solve outcome
    """
    settings = get_settings()
    result = {
        "success": False,
        "state": None,
        "ticks": 0,
        "advances": 0,
        "backtracks": 0,
        "position": None,
        "exit_point": None,
        "error": None,
    }

    try:
        maze = load_maze_file(maze_path, cell_size=cell_size)
        solver = MazeSolver(
            maze,
            start_x=start_x,
            start_y=start_y,
            step_size=step_size if step_size is not None else settings.step_size,
            robot_size=robot_size if robot_size is not None else settings.robot_size,
        )
    except (FileNotFoundError, MazeParseError, MazeValidationError, ValueError) as e:
        result["error"] = f"{type(e).__name__}: {e}"
        return result

    result["exit_point"] = solver.exit_point.to_dict() if solver.exit_point else None

    solver.solve_maze()
    while solver.is_solving and result["ticks"] < max_ticks:
        event = solver.tick()
        result["ticks"] += 1
        if event is StepEvent.ADVANCED:
            result["advances"] += 1
        elif event is StepEvent.BACKTRACKED:
            result["backtracks"] += 1

    result["state"] = solver.state.value
    result["position"] = solver.position.to_dict()
    result["success"] = solver.state is SolverState.REACHED
    return result


USAGE = "Usage: runner.py <maze_path> <start_x> <start_y> [step_size] [robot_size] [cell_size]"


def main():
    """Main entry point."""
    if len(sys.argv) < 4:
        print(json.dumps({"success": False, "error": USAGE}))
        sys.exit(1)

    maze_path = sys.argv[1]
    try:
        start_x = float(sys.argv[2])
        start_y = float(sys.argv[3])
        extra = [int(arg) for arg in sys.argv[4:7]]
    except ValueError as e:
        print(json.dumps({"success": False, "error": f"Invalid argument: {e}. {USAGE}"}))
        sys.exit(1)
    extra += [None] * (3 - len(extra))

    result = run_solver(maze_path, start_x, start_y, *extra)
    print(json.dumps(result))
    sys.exit(0 if result["success"] else 2)


if __name__ == "__main__":
    main()
