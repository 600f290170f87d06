"""Stats Module - Learner counters consumed by the risk and profile engines."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from typing import Any, Mapping, Protocol
from uuid import UUID
import re

from learnguard.shared.datetime_utils import datetime_to_iso, ensure_utc, iso_to_datetime
from learnguard.shared.exceptions import InvalidTimeRangeError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _check_counter(owner: str, name: str, value: object, signed: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{owner}.{name} must be a number, got {value!r}")
    if not signed and value < 0:
        raise ValueError(f"{owner}.{name} must be non-negative, got {value}")


def _check_non_negative(section: object, signed: tuple[str, ...] = ()) -> None:
    for f in fields(section):
        value = getattr(section, f.name)
        if value is not None:
            _check_counter(type(section).__name__, f.name, value, signed=f.name in signed)


def _section_kwargs(cls: type, raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Pick the known fields of ``cls`` out of a camelCase or snake_case mapping."""
    if not raw:
        return {}
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in raw.items():
        name = _snake(key)
        if name in known and value is not None:
            kwargs[name] = value
    return kwargs


@dataclass(frozen=True)
class OverallStats:
    """Session totals. ``total_time_spent`` is in minutes."""

    total_sessions: int = 0
    completed_sessions: int = 0
    overall_accuracy: float = 0.0
    total_time_spent: float = 0.0
    consistency_score: float = 0.0
    recent_sessions: float | None = None

    def __post_init__(self) -> None:
        _check_non_negative(self)


@dataclass(frozen=True)
class FocusModeStats:
    triggered: int = 0
    success_rate: float = 0.0
    effectiveness: float = 0.0

    def __post_init__(self) -> None:
        _check_non_negative(self)


@dataclass(frozen=True)
class PronunciationStats:
    average_score: float = 0.0
    assessments: int = 0
    improvement: float = 0.0

    def __post_init__(self) -> None:
        # improvement is a delta
        _check_non_negative(self, signed=("improvement",))


@dataclass(frozen=True)
class RescueModeStats:
    triggered: int = 0
    effectiveness: float = 0.0

    def __post_init__(self) -> None:
        _check_non_negative(self)


@dataclass(frozen=True)
class SRSStats:
    accuracy_rate: float = 0.0
    reviews_today: int = 0
    cards_total: int = 0
    graduated_cards: int = 0

    def __post_init__(self) -> None:
        _check_non_negative(self)


@dataclass(frozen=True)
class StatsSnapshot:
    """Immutable bundle of rolled-up counters for one learner.

    Missing sections and fields default to zero. Negative counters are
    rejected with ValueError when a section is constructed.
    """

    overall: OverallStats = field(default_factory=OverallStats)
    focus_mode: FocusModeStats = field(default_factory=FocusModeStats)
    pronunciation: PronunciationStats = field(default_factory=PronunciationStats)
    rescue_mode: RescueModeStats = field(default_factory=RescueModeStats)
    srs: SRSStats = field(default_factory=SRSStats)
    topic_counts: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatsSnapshot":
        """Build a snapshot from the aggregator's nested shape.

        Accepts camelCase (``focusMode.successRate``) or snake_case keys.
        Unknown keys are ignored.

        Args:
            data: Nested mapping of sections

        Returns:
            StatsSnapshot

        Raises:
            ValueError: If a counter is negative or not a number
        """
        sections = {_snake(key): value for key, value in data.items()}
        topic_counts = dict(sections.get("topic_counts") or {})
        for topic, count in topic_counts.items():
            _check_counter("topic_counts", repr(topic), count)

        return cls(
            overall=OverallStats(**_section_kwargs(OverallStats, sections.get("overall"))),
            focus_mode=FocusModeStats(**_section_kwargs(FocusModeStats, sections.get("focus_mode"))),
            pronunciation=PronunciationStats(
                **_section_kwargs(PronunciationStats, sections.get("pronunciation"))
            ),
            rescue_mode=RescueModeStats(**_section_kwargs(RescueModeStats, sections.get("rescue_mode"))),
            srs=SRSStats(**_section_kwargs(SRSStats, sections.get("srs"))),
            topic_counts=topic_counts,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the nested camelCase shape."""

        def camel(section: object) -> dict[str, Any]:
            out = {}
            for f in fields(section):
                head, *rest = f.name.split("_")
                out[head + "".join(part.title() for part in rest)] = getattr(section, f.name)
            return out

        return {
            "overall": camel(self.overall),
            "focusMode": camel(self.focus_mode),
            "pronunciation": camel(self.pronunciation),
            "rescueMode": camel(self.rescue_mode),
            "srs": camel(self.srs),
            "topicCounts": dict(self.topic_counts),
        }

    @property
    def average_session_minutes(self) -> float:
        """Mean session length, 0 when there are no sessions."""
        if self.overall.total_sessions <= 0:
            return 0.0
        return self.overall.total_time_spent / self.overall.total_sessions


@dataclass(frozen=True)
class TimeRange:
    """Half-open analysis window ``[start, end)`` in UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.end <= self.start:
            raise InvalidTimeRangeError(self.start.isoformat(), self.end.isoformat())

    @classmethod
    def from_iso(cls, start: str, end: str) -> "TimeRange":
        """Parse an ISO 8601 ``{start, end}`` pair."""
        return cls(start=iso_to_datetime(start), end=iso_to_datetime(end))

    @classmethod
    def last_days(cls, days: int, now: datetime) -> "TimeRange":
        """Window covering the ``days`` days that end at ``now``."""
        return cls(start=now - timedelta(days=days), end=now)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def days(self) -> float:
        return self.duration.total_seconds() / 86400

    def contains(self, moment: datetime) -> bool:
        moment = ensure_utc(moment)
        return self.start <= moment < self.end

    def previous(self) -> "TimeRange":
        """The window of equal length that ends where this one starts."""
        return TimeRange(start=self.start - self.duration, end=self.start)

    def split(self, buckets: int) -> list["TimeRange"]:
        """Split into ``buckets`` consecutive windows of equal length."""
        if buckets < 1:
            raise ValueError(f"buckets must be at least 1, got {buckets}")
        step = self.duration / buckets
        windows = []
        for index in range(buckets):
            start = self.start + step * index
            end = self.end if index == buckets - 1 else start + step
            windows.append(TimeRange(start=start, end=end))
        return windows

    def to_dict(self) -> dict[str, str]:
        return {"start": datetime_to_iso(self.start), "end": datetime_to_iso(self.end)}


class IStatsProvider(Protocol):
    """Interface for the statistics aggregator.

    The aggregator owns the raw activity data; this system only reads
    rolled-up snapshots from it.
    """

    async def get_snapshot(
        self,
        user_id: UUID,
        time_range: TimeRange | None = None,
    ) -> StatsSnapshot:
        """Get counters for a learner.

        Args:
            user_id: Learner to read
            time_range: Window to aggregate over; None means all-time/current

        Returns:
            StatsSnapshot (zeroed when the learner has no data)

        Raises:
            StatsProviderError: If the aggregator is unavailable
        """
        ...

    async def list_user_ids(self) -> list[UUID]:
        """List learners known to the aggregator."""
        ...
