# scoring/errors.py

UNKNOWN_USER = "Unknown User"


class SubmissionValidationError(Exception):
    """A payload failed a minimum-content or daily-cap rule."""

    def __init__(self, reason: str, code: str = "INVALID_SUBMISSION"):
        super().__init__(reason)
        self.reason = reason
        self.code = code


class RateLimitExceeded(Exception):
    """Too many submissions for the same user and challenge inside the window."""

    def __init__(self, key: str, limit: int, retry_after: float):
        super().__init__(f"Rate limit exceeded for {key}")
        self.key = key
        self.limit = limit
        self.retry_after = retry_after


class UnknownCategoryWarning(UserWarning):
    """A food or recycling item used a category missing from the weight table."""
