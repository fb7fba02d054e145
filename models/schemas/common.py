import uuid

from marshmallow import ValidationError


def not_blank(max_len: int | None = None):
    """Validator: non-empty after stripping, optionally bounded in length."""

    def _validate(value: str) -> None:
        if not value or not value.strip():
            raise ValidationError("Must not be blank.")
        if max_len is not None and len(value) > max_len:
            raise ValidationError(f"Must be at most {max_len} characters.")

    return _validate


def is_valid_id(raw) -> bool:
    """Ids are canonical UUID strings."""
    if not isinstance(raw, str):
        return False
    try:
        return str(uuid.UUID(raw)) == raw.lower()
    except ValueError:
        return False
