"""
Narrator — world/clock.py
Game-time helpers: day/night boundary for a raw tick count (minutes).
"""

# Design variables. The day begins at 06:00 of a 24h (1440 minute) cycle.
DAY_START_TIME: int = 360
DAY_DURATION: int = 1440


def minute_of_day(game_time: int, day_duration: int = DAY_DURATION) -> int:
    return int(game_time) % day_duration


def is_day(game_time: int, start_time: int = DAY_START_TIME, day_duration: int = DAY_DURATION) -> bool:
    """True while the clock sits in the lit half of the cycle that opens at start_time."""
    if day_duration <= 0:
        return True
    minute = minute_of_day(game_time, day_duration)
    elapsed = (minute - start_time) % day_duration
    return elapsed < day_duration / 2
