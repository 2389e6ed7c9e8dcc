"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The storage backend (in-memory or Supabase) is chosen here from
DATABASE_BACKEND; the chat provider (OpenAI or mock) from whether an
OpenAI key is configured.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from shared.locks import KeyedLock
    from shared.ratelimit import FixedWindowRateLimiter
    from modules.users.interfaces import IUserRepository
    from modules.auth.passwords import PasswordHasher
    from modules.auth.service import AuthService
    from modules.auth.sessions import SessionManager
    from modules.auth.tokens import TokenSigner
    from modules.usage.service import UsageGate
    from modules.analytics.interfaces import IAnalyticsService
    from modules.chat.interfaces import IConversationRepository
    from modules.chat.pipeline import ResponsePipeline
    from modules.chat.service import ChatService
    from providers.base import ChatProvider


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._locks: "KeyedLock | None" = None
        self._users: "IUserRepository | None" = None
        self._conversations: "IConversationRepository | None" = None
        self._analytics: "IAnalyticsService | None" = None
        self._signer: "TokenSigner | None" = None
        self._hasher: "PasswordHasher | None" = None
        self._sessions: "SessionManager | None" = None
        self._usage_gate: "UsageGate | None" = None
        self._provider: "ChatProvider | None" = None
        self._pipeline: "ResponsePipeline | None" = None
        self._auth_service: "AuthService | None" = None
        self._chat_service: "ChatService | None" = None
        self._ai_rate_limiter: "FixedWindowRateLimiter | None" = None
        self._auth_rate_limiter: "FixedWindowRateLimiter | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def uses_supabase(self) -> bool:
        return self.settings.database_backend == "supabase"

    # -------------------------------------------------------------------------
    # Infrastructure
    # -------------------------------------------------------------------------

    @property
    def locks(self) -> "KeyedLock":
        """Per-user locks shared by every service that writes user records."""
        if self._locks is None:
            from shared.locks import KeyedLock
            self._locks = KeyedLock()
        return self._locks

    @property
    def users(self) -> "IUserRepository":
        """Get the user repository instance."""
        if self._users is None:
            if self.uses_supabase:
                from modules.users.repository import SupabaseUserRepository
                from shared.database import get_supabase_client
                self._users = SupabaseUserRepository(get_supabase_client(self.settings))
            else:
                from modules.users.repository import InMemoryUserRepository
                self._users = InMemoryUserRepository()
        return self._users

    @property
    def conversations(self) -> "IConversationRepository":
        """Get the conversation repository instance."""
        if self._conversations is None:
            if self.uses_supabase:
                from modules.chat.repository import SupabaseConversationRepository
                from shared.database import get_supabase_client
                self._conversations = SupabaseConversationRepository(get_supabase_client(self.settings))
            else:
                from modules.chat.repository import InMemoryConversationRepository
                self._conversations = InMemoryConversationRepository()
        return self._conversations

    @property
    def analytics(self) -> "IAnalyticsService":
        """Get the analytics service instance."""
        if self._analytics is None:
            from modules.analytics.service import AnalyticsService
            if self.uses_supabase:
                from modules.analytics.repository import SupabaseAnalyticsRepository
                from shared.database import get_supabase_client
                repository = SupabaseAnalyticsRepository(get_supabase_client(self.settings))
            else:
                from modules.analytics.repository import InMemoryAnalyticsRepository
                repository = InMemoryAnalyticsRepository()
            self._analytics = AnalyticsService(repository, enabled=self.settings.enable_analytics)
        return self._analytics

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    @property
    def signer(self) -> "TokenSigner":
        if self._signer is None:
            from modules.auth.tokens import TokenSigner
            settings = self.settings
            self._signer = TokenSigner(
                secret=settings.jwt_secret,
                refresh_secret=settings.jwt_refresh_secret,
                access_ttl=timedelta(days=settings.jwt_access_ttl_days),
                refresh_ttl=timedelta(days=settings.jwt_refresh_ttl_days),
                algorithm=settings.jwt_algorithm,
            )
        return self._signer

    @property
    def hasher(self) -> "PasswordHasher":
        if self._hasher is None:
            from modules.auth.passwords import PasswordHasher
            self._hasher = PasswordHasher(rounds=self.settings.bcrypt_rounds)
        return self._hasher

    @property
    def sessions(self) -> "SessionManager":
        """Get the Session Manager instance."""
        if self._sessions is None:
            from modules.auth.sessions import SessionManager
            self._sessions = SessionManager(
                users=self.users,
                signer=self.signer,
                locks=self.locks,
                max_refresh_tokens=self.settings.max_refresh_tokens,
                max_device_tokens=self.settings.max_device_tokens,
            )
        return self._sessions

    # -------------------------------------------------------------------------
    # Usage and AI
    # -------------------------------------------------------------------------

    @property
    def usage_gate(self) -> "UsageGate":
        """Get the usage gate instance."""
        if self._usage_gate is None:
            from modules.usage.models import UsageLimits, UsageLimitTable
            from modules.usage.service import UsageGate
            settings = self.settings
            table = UsageLimitTable(
                free=UsageLimits(
                    daily=settings.ai_daily_limit_free,
                    monthly=settings.ai_monthly_limit_free,
                ),
                premium=UsageLimits(
                    daily=settings.ai_daily_limit_premium,
                    monthly=settings.ai_monthly_limit_premium,
                ),
            )
            self._usage_gate = UsageGate(
                users=self.users,
                limits=table,
                tz=settings.usage_reset_timezone,
                locks=self.locks,
            )
        return self._usage_gate

    @property
    def provider(self) -> "ChatProvider":
        """Get the chat provider (OpenAI when configured, otherwise mock)."""
        if self._provider is None:
            from providers.factory import create_provider
            self._provider = create_provider(self.settings)
        return self._provider

    @property
    def pipeline(self) -> "ResponsePipeline":
        if self._pipeline is None:
            from modules.chat.pipeline import ResponsePipeline
            self._pipeline = ResponsePipeline(
                provider=self.provider,
                max_message_length=self.settings.max_message_length,
                history_window=self.settings.history_window,
            )
        return self._pipeline

    # -------------------------------------------------------------------------
    # Request rate limiting
    # -------------------------------------------------------------------------

    @property
    def ai_rate_limiter(self) -> "FixedWindowRateLimiter":
        """Throttle for POST /ai/chat, keyed by user."""
        if self._ai_rate_limiter is None:
            from shared.ratelimit import FixedWindowRateLimiter, RateLimitPolicy
            self._ai_rate_limiter = FixedWindowRateLimiter(
                RateLimitPolicy(
                    max_requests=self.settings.ai_rate_limit_requests,
                    window_seconds=self.settings.ai_rate_limit_window,
                )
            )
        return self._ai_rate_limiter

    @property
    def auth_rate_limiter(self) -> "FixedWindowRateLimiter":
        """Throttle for failed login/register attempts, keyed by client IP."""
        if self._auth_rate_limiter is None:
            from shared.ratelimit import FixedWindowRateLimiter, RateLimitPolicy
            self._auth_rate_limiter = FixedWindowRateLimiter(
                RateLimitPolicy(
                    max_requests=self.settings.auth_rate_limit_requests,
                    window_seconds=self.settings.auth_rate_limit_window,
                )
            )
        return self._auth_rate_limiter

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    @property
    def auth(self) -> "AuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                users=self.users,
                sessions=self.sessions,
                hasher=self.hasher,
                usage=self.usage_gate,
                analytics=self.analytics,
            )
        return self._auth_service

    @property
    def chat(self) -> "ChatService":
        """Get the chat service instance."""
        if self._chat_service is None:
            from modules.chat.service import ChatService
            self._chat_service = ChatService(
                conversations=self.conversations,
                usage=self.usage_gate,
                pipeline=self.pipeline,
                analytics=self.analytics,
            )
        return self._chat_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self.__init__(self._settings)


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (tests and embedding)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "AuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_chat_service() -> "ChatService":
    """FastAPI dependency for chat service."""
    return get_container().chat


def get_session_manager() -> "SessionManager":
    """FastAPI dependency for the Session Manager."""
    return get_container().sessions


def get_usage_gate() -> "UsageGate":
    """FastAPI dependency for the usage gate."""
    return get_container().usage_gate
