import uuid


def parse_uuid(value: str | uuid.UUID) -> uuid.UUID | None:
    """Parse an opaque identifier; malformed input yields ``None``."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None
