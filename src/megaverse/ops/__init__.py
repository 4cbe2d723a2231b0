"""
megaverse.ops - operations the CLI exposes (build, clear, cross).
"""

from megaverse.ops.goal import GoalReport, build_goal, clear_goal, draw_cross, execute_plan, fetch_goal

__all__ = [
    "GoalReport",
    "build_goal",
    "clear_goal",
    "draw_cross",
    "execute_plan",
    "fetch_goal",
]
