"""
Join window evaluation for a scheduled session.

The window runs from 15 minutes before the scheduled start until 15 minutes
after the scheduled end, both bounds inclusive. It is unrelated to
Session.link_expires_at, which only gates video token issuance.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

NOT_STARTED = 'not-started'
JOINABLE = 'joinable'
ENDED = 'ended'

DEFAULT_DURATION = 50
JOIN_MARGIN_MINUTES = 15


@dataclass(frozen=True)
class JoinWindow:
    state: str
    window_start: datetime
    window_end: datetime
    session_end: datetime
    minutes_until: int
    hours_until: int

    @property
    def can_join(self) -> bool:
        return self.state == JOINABLE

    @property
    def label(self) -> str:
        if self.state == ENDED:
            return 'Ended'
        if self.state == JOINABLE:
            return 'Join now'
        if self.minutes_until < 60:
            return f"Starts in {self.minutes_until} min"
        return f"Starts in {self.hours_until}h {self.minutes_until % 60}m"

    def to_dict(self):
        return {
            'state': self.state,
            'can_join': self.can_join,
            'label': self.label,
            'minutes_until': self.minutes_until,
            'hours_until': self.hours_until,
            'window_start': self.window_start.isoformat() + 'Z',
            'window_end': self.window_end.isoformat() + 'Z',
        }


def evaluate_join_window(
    now: datetime,
    scheduled_date: datetime,
    duration: Optional[int] = None,
    margin_minutes: int = JOIN_MARGIN_MINUTES,
) -> JoinWindow:
    """
    Classify ``now`` against the join window of a session.

    Args:
        now: current instant (naive UTC)
        scheduled_date: session start (naive UTC)
        duration: session length in minutes, defaults to 50
        margin_minutes: slack before start and after end
    """
    duration = duration or DEFAULT_DURATION
    margin = timedelta(minutes=margin_minutes)
    session_end = scheduled_date + timedelta(minutes=duration)
    window_start = scheduled_date - margin
    window_end = session_end + margin

    if now < window_start:
        state = NOT_STARTED
    elif now > window_end:
        state = ENDED
    else:
        state = JOINABLE

    # Floor, as the dashboards do, so "59.5 minutes" reads as 59
    minutes_until = math.floor((scheduled_date - now).total_seconds() / 60)
    hours_until = math.floor(minutes_until / 60)

    return JoinWindow(
        state=state,
        window_start=window_start,
        window_end=window_end,
        session_end=session_end,
        minutes_until=minutes_until,
        hours_until=hours_until,
    )
