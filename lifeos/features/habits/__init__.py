"""
Daily habits feature package: habits, their per-day completions and the
streaks computed from them.
"""
