from datetime import datetime, timezone


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    """
    DB guarda DateTime naive.
    Regla: lo guardamos como UTC naive.
    - Si dt es naive: asumimos que YA está en UTC.
    - Si dt tiene tz: convertimos a UTC y quitamos tzinfo.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def iso_z_from_utc_naive(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")
