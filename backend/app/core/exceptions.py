"""
Exceptions for failures that are not business-rule rejections.

Rejections (unit taken, guest already booked, ...) are returned as outcomes.
These are raised instead:
- InvalidBookingInput: the request itself is malformed (HTTP 422)
- UnitLockUnavailable: per-unit serialization could not be obtained (HTTP 503)
"""


class InvalidBookingInput(ValueError):
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UnitLockUnavailable(RuntimeError):
    def __init__(self, key: str, reason: str = "timed out"):
        self.key = key
        self.reason = reason
        super().__init__(f"Could not acquire booking lock {key}: {reason}")
