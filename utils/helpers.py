from datetime import datetime, timezone, date


def parse_client_timestamp(value):
    """Parse an ISO timestamp sent by the browser into naive UTC.

    Returns None for missing or unreadable values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value):
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def parse_bool(value):
    return str(value).lower() in ("1", "true", "yes")


def engine_settings():
    """Scoring settings for the current app, passed explicitly into the engine."""
    from flask import current_app
    from scoring.settings import EngineSettings
    return EngineSettings.from_config(current_app.config)
