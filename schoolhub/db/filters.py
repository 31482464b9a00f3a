"""Query helpers shared by list endpoints."""


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(search: str) -> str:
    """Substring pattern for ilike with a backslash escape; % and _ in search match literally."""
    return f"%{escape_like(search.strip())}%"
