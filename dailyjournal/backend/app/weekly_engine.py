from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Union

from .sentiment_engine import Mood

WINDOW_DAYS = 7


@dataclass(frozen=True)
class DailyObservation:
    day: date
    mood: Mood

    def __post_init__(self) -> None:
        object.__setattr__(self, "mood", Mood(self.mood))


@dataclass(frozen=True)
class WeeklyPoint:
    day: date
    dominant_mood: Mood
    entry_count: int

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "mood": self.dominant_mood.value,
            "entries": self.entry_count,
        }


def utc_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in UTC. Naive datetimes are taken to be UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def observation_from_timestamp(created_at: datetime, mood: Union[Mood, str]) -> DailyObservation:
    return DailyObservation(day=utc_day(created_at), mood=Mood(mood))


def window_bounds(reference_day: date, window_days: int = WINDOW_DAYS) -> tuple[date, date]:
    return reference_day - timedelta(days=window_days - 1), reference_day


def dominant_mood(moods: List[Mood]) -> Mood:
    if not moods:
        return Mood.NEUTRAL
    counts = Counter(moods)
    max_count = max(counts.values())
    winners = [mood for mood, count in counts.items() if count == max_count]
    if len(winners) > 1:
        return Mood.NEUTRAL
    return winners[0]


def aggregate_week(observations: Iterable[DailyObservation], reference_day: date) -> List[WeeklyPoint]:
    start_day, _end_day = window_bounds(reference_day)
    moods_by_day: Dict[date, List[Mood]] = {}
    for observation in observations:
        moods_by_day.setdefault(observation.day, []).append(observation.mood)

    points: List[WeeklyPoint] = []
    for offset in range(WINDOW_DAYS):
        day = start_day + timedelta(days=offset)
        day_moods = moods_by_day.get(day, [])
        points.append(WeeklyPoint(
            day=day,
            dominant_mood=dominant_mood(day_moods),
            entry_count=len(day_moods),
        ))
    return points


def collect_observations_for_window(
    user_id: int,
    reference_day: date,
    db,
) -> List[DailyObservation]:
    from .main import get_entries_in_range

    start_day, end_day = window_bounds(reference_day)
    start = datetime.combine(start_day, datetime.min.time())
    end = datetime.combine(end_day + timedelta(days=1), datetime.min.time())
    return [
        observation_from_timestamp(entry.created_at, entry.detected_mood)
        for entry in get_entries_in_range(user_id, start, end, db)
        if entry.created_at is not None
    ]
