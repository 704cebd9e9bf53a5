"""Errors that callers of the assistant and booking service must handle."""


class InvalidRequest(ValueError):
    """A required request field is missing or blank. Nothing was done."""


class UsageLimitExceeded(Exception):
    """The user has used up today's AI calls. The model was not called."""

    def __init__(self, email: str):
        super().__init__(f"daily API limit reached for {email}")
        self.email = email
