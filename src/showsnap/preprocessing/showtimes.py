from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
from bson import ObjectId

from showsnap.constants import (
    ALL_SEATS,
    DAILY_SHOW_TIMES,
    DEFAULT_SCREEN,
    MAX_RANDOM_BLOCKED_SEATS,
)


def new_showtime_id() -> str:
    return str(ObjectId())


def generate_blocked_seats(rng: np.random.RandomState) -> List[str]:
    """Pick between 0 and MAX_RANDOM_BLOCKED_SEATS distinct seats to show as already taken."""
    total = int(rng.randint(0, MAX_RANDOM_BLOCKED_SEATS + 1))
    picked = rng.choice(len(ALL_SEATS), size=total, replace=False)
    return [ALL_SEATS[i] for i in picked]


def parse_show_time(hhmm: str) -> time:
    hours, minutes = hhmm.split(':')
    return time(int(hours), int(minutes))


def build_showtime(
    start_time: datetime,
    movie_id: Optional[str],
    screen: str = DEFAULT_SCREEN,
    blocked_seats: Optional[List[str]] = None,
) -> Dict[str, Any]:
    blocked = list(blocked_seats or [])
    return {
        'showtime_id': new_showtime_id(),
        'start_time': start_time,
        'screen': screen,
        'available_seats': len(ALL_SEATS) - len(blocked),
        'blocked_seats': blocked,
        'movie_id': movie_id,
    }


def build_daily_showtimes(
    day: date,
    movie_id: Optional[str],
    rng: Optional[np.random.RandomState] = None,
    times: Iterable[str] = DAILY_SHOW_TIMES,
    screen: str = DEFAULT_SCREEN,
) -> List[Dict[str, Any]]:
    """
    One showtime per daily slot on `day`.

    With an rng every showtime gets a random set of blocked seats, without one
    the whole seat map is free.
    """
    return [
        build_showtime(
            start_time=datetime.combine(day, parse_show_time(t)),
            movie_id=movie_id,
            screen=screen,
            blocked_seats=generate_blocked_seats(rng) if rng is not None else None,
        )
        for t in times
    ]


def invalid_seats(seats: Iterable[str]) -> List[str]:
    valid = set(ALL_SEATS)
    return [s for s in seats if s not in valid]
