"""
Users module exceptions.
"""

from shared.exceptions import AuthenticationError, ValidationError


class UserNotFoundError(AuthenticationError):
    """Raised when a token or request refers to a user that no longer exists."""

    def __init__(self, user_id: str):
        super().__init__("User not found", code="USER_NOT_FOUND")
        self.user_id = user_id


class EmailAlreadyExistsError(ValidationError):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        super().__init__(
            "User with this email already exists",
            code="EMAIL_EXISTS",
            details={"email": email},
        )
