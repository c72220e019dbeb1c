from collections.abc import Mapping


def get_field(record, name, default=None):
    """Read ``name`` from an ORM row, a dataclass or a plain mapping."""
    if isinstance(record, Mapping):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def as_float(value) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def number_field(record, name) -> float:
    return as_float(get_field(record, name))
