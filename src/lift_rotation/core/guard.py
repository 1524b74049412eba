"""
Consecutive workout-type guard.

Blocks a third upper-body (or lower-body) workout in a row.  Full-body
workouts are always allowed.  The guard reads only the recent-type
window; it never touches the catalog or history.
"""

from .models import RecentTypeWindow, Workout


def record_workout(window: RecentTypeWindow, workout: Workout) -> RecentTypeWindow:
    """
    Return the window after ``workout``.

    Only completed workouts that declare a sub-type are recorded.
    """
    if workout.completed and workout.sub_type:
        return window.push(workout.sub_type)
    return window


def can_generate(window: RecentTypeWindow, sub_type: str) -> bool:
    """False iff the two most recent workouts were both ``sub_type`` (split days only)."""
    if sub_type == "full_body":
        return True
    recent = window.types
    return not (len(recent) >= 2 and recent[0] == sub_type and recent[1] == sub_type)


def consecutive_message(window: RecentTypeWindow, sub_type: str) -> str | None:
    """User-facing explanation when ``sub_type`` is blocked, else None."""
    if can_generate(window, sub_type):
        return None
    opposite = "lower body" if sub_type == "upper_body" else "upper body"
    return (
        f"You've done 2 consecutive {sub_type.replace('_', ' ')} workouts. "
        f"Try a full body or {opposite} workout for better balance."
    )
