"""
Tests for auth module interfaces.
"""

from modules.auth.interfaces import IAuthService


class TestIAuthService:
    def test_is_runtime_checkable(self):
        """IAuthService should support isinstance checks."""

        class Partial:
            async def authenticate(self, token):
                return None

        assert not isinstance(Partial(), IAuthService)

    def test_declares_account_operations(self):
        for name in (
            "authenticate",
            "register",
            "login",
            "refresh",
            "logout",
            "get_me",
            "update_profile",
            "change_password",
            "register_device_token",
            "remove_device_token",
            "delete_account",
        ):
            assert hasattr(IAuthService, name)
