"""Time window computation for historical price queries."""

from datetime import UTC, datetime, timedelta

from src.backend.models import Granularity

# Query width per granularity. Each entry yields roughly 390 bars of
# regular session data (6.5 hours per trading day).
WINDOW_BY_GRANULARITY: dict[Granularity, timedelta] = {
    Granularity.MINUTE: timedelta(days=1),
    Granularity.FIVE_MINUTES: timedelta(days=5),
    Granularity.FIFTEEN_MINUTES: timedelta(days=15),
    Granularity.DAY: timedelta(days=365),
}

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def floor_to_minute(value: datetime) -> datetime:
    """Drop seconds and sub-second precision.

    Timezone-aware values are converted to UTC first.
    """
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.replace(second=0, microsecond=0)


def get_start_time(to: datetime, granularity: Granularity) -> datetime:
    """Derive the start bound of a historical query ending at ``to``.

    Args:
        to: End of the query window.
        granularity: Requested bar resolution.

    Returns:
        A timestamp strictly earlier than ``to``.
    """
    return to - WINDOW_BY_GRANULARITY[Granularity(granularity)]


def format_timestamp(value: datetime) -> str:
    """Render a minute-resolution timestamp as ``YYYY-MM-DD HH:MM``."""
    return floor_to_minute(value).strftime(TIMESTAMP_FORMAT)
