from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


class FieldErrors:
    """Collects field-level messages so a payload is rejected in one pass."""

    def __init__(self) -> None:
        self._errors: dict[str, str] = {}

    def require_text(
        self,
        field_name: str,
        value: Any,
        *,
        min_len: int = 1,
        max_len: Optional[int] = None,
        strip: bool = True,
    ) -> str:
        if not isinstance(value, str) or not value.strip():
            self._errors.setdefault(field_name, "must not be blank")
            return ""

        value = value.strip() if strip else value
        if len(value) < min_len:
            self._errors.setdefault(field_name, f"size must be at least {min_len}")
        elif max_len is not None and len(value) > max_len:
            self._errors.setdefault(field_name, f"size must be at most {max_len}")
        return value

    def raise_if_any(self) -> None:
        if self._errors:
            raise ValidationError("Validation failed", self._errors)
