# scoring/validation.py
from typing import Optional

from scoring.errors import SubmissionValidationError
from scoring.payloads import CarbonPayload, FoodPayload, RecyclingPayload, ShowerPayload


def validate_payload(payload) -> None:
    """Minimum-content rule per challenge type. Raises SubmissionValidationError."""
    if isinstance(payload, CarbonPayload):
        if not payload.trips:
            raise SubmissionValidationError("Please add at least one trip")
    elif isinstance(payload, RecyclingPayload):
        if payload.total_items <= 0:
            raise SubmissionValidationError("Please add at least one recycling item")
    elif isinstance(payload, FoodPayload):
        if not payload.items:
            raise SubmissionValidationError("Please add at least one food item")
    elif isinstance(payload, ShowerPayload):
        if not payload.skipped and not (payload.duration_minutes and payload.duration_minutes > 0):
            raise SubmissionValidationError("Please record a shower time or mark as skipped")
    else:
        raise SubmissionValidationError(f"Unsupported submission type: {type(payload).__name__}")


def check_shower_daily_cap(
    payload: ShowerPayload,
    completed_today: int,
    skipped_today: int,
    max_completed: int = 3,
    max_skips: int = 1,
) -> None:
    if payload.skipped:
        if skipped_today >= max_skips:
            raise SubmissionValidationError(
                "You've already skipped a shower today. You can only skip once per day.",
                code="DAILY_LIMIT_REACHED",
            )
    elif completed_today >= max_completed:
        raise SubmissionValidationError(
            f"You've already recorded {max_completed} showers today. That's the maximum allowed per day.",
            code="DAILY_LIMIT_REACHED",
        )


def check_recycling_daily_cap(payload: RecyclingPayload, items_today: int, limit: int = 100) -> None:
    if items_today + payload.total_items > limit:
        remaining = max(0, limit - items_today)
        raise SubmissionValidationError(
            f"Daily recycling limit of {limit} items reached ({remaining} remaining today).",
            code="DAILY_LIMIT_REACHED",
        )


# ─── Free-text fields ───────────────────────────────────────────────────────────

def _check_length(value: str, label: str, min_len: int, max_len: int) -> str:
    value = (value or "").strip()
    if not min_len <= len(value) <= max_len:
        raise SubmissionValidationError(
            f"{label} must be between {min_len} and {max_len} characters",
            code="INVALID_FIELD",
        )
    return value


def _check_optional_length(value: Optional[str], label: str, min_len: int, max_len: int) -> str:
    if not value or not value.strip():
        return ""
    return _check_length(value, label, min_len, max_len)


def validate_display_name(name: str) -> str:
    return _check_length(name, "Display name", 2, 50)


def validate_crew_name(name: str) -> str:
    return _check_length(name, "Crew name", 3, 50)


def validate_crew_description(description: Optional[str]) -> str:
    return _check_optional_length(description, "Crew description", 10, 500)


def validate_challenge_title(title: str) -> str:
    return _check_length(title, "Challenge title", 3, 100)


def validate_challenge_description(description: Optional[str]) -> str:
    return _check_optional_length(description, "Challenge description", 10, 1000)
