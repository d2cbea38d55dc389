from datetime import datetime, timezone

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def utcnow() -> datetime:
    """Return the current UTC time as a naive (tzinfo=None) datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_rfc850(value: datetime) -> str:
    """Render a naive-UTC datetime like ``Monday, 02-Jan-06 15:04:05 UTC``.

    Day and month names are English regardless of the process locale.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return "{day}, {date:%d}-{month}-{date:%y} {date:%H:%M:%S} UTC".format(
        day=DAY_NAMES[value.weekday()],
        month=MONTH_ABBREVIATIONS[value.month - 1],
        date=value,
    )
