from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WARDEN_", env_file=".env", extra="ignore")

    # API
    PORT: int = 8040
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=list)
    MOUNT_POINT: str = "/api/warden"

    # Headers forwarded by the authenticating gateway (claims already verified upstream)
    AUTH_ISSUER_HEADER: str = "x-auth-issuer"
    AUTH_SUBJECT_HEADER: str = "x-auth-subject"
    AUTH_EMAIL_HEADER: str = "x-auth-email"
    AUTH_EMAIL_VERIFIED_HEADER: str = "x-auth-email-verified"

    # Persistence
    STORE: Literal["memory", "mongo"] = "memory"
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "warden"

    # Collections
    COL_USERS: str = "users"
    COL_EXTERNAL_IDENTITIES: str = "external_identities"
    COL_ROLES: str = "roles"
    COL_PERMISSIONS: str = "permissions"
    COL_ROLE_PERMISSIONS: str = "role_permissions"
    COL_USER_ROLES: str = "user_roles"
    COL_INVITATIONS: str = "invitations"
    COL_CONTACT_METHODS: str = "contact_methods"
    COL_USER_PREFERENCES: str = "user_preferences"

    # Invitations
    INVITATION_TTL_HOURS: int = 72
    REQUIRE_VERIFIED_EMAIL: bool = True
    TRUST_ISSUER_VERIFICATION: bool = True
    # prefix for acceptance links handed to notifiers
    INVITATION_BASE_URL: str = "http://localhost:8040/api/warden"

    # Unknown external identities: "deny" or "auto" (auto-provision)
    PROVISIONING_POLICY: Literal["deny", "auto"] = "deny"

    # Identity given the warden:admin role by the seed (both must be set)
    BOOTSTRAP_ADMIN_ISSUER: Optional[str] = None
    BOOTSTRAP_ADMIN_SUBJECT: Optional[str] = None

    # Contact methods
    NOTIFY_ON_CONTACT_ADD: bool = False

    # Notifications: "log" writes to the service log, "rabbit" publishes events
    NOTIFIER: Literal["log", "rabbit"] = "log"
    RABBITMQ_URI: Optional[str] = None
    RABBITMQ_EXCHANGE: str = "platform.events"
    EVENTS_ORG: str = "platform"

    @field_validator("INVITATION_TTL_HOURS")
    @classmethod
    def _positive_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("INVITATION_TTL_HOURS must be positive")
        return v


settings = Settings()
