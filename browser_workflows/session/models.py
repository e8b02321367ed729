"""
Session record models.

A session record captures the authentication state of one logical site:
the browser cookie jar plus localStorage snapshots per origin. Records are
stored as one JSON document per session name:

    {
      "cookies": [{"name": ..., "value": ..., "domain": ..., "path": ..., ...}],
      "origins": [{"origin": "https://...", "localStorage": [{"name": ..., "value": ...}]}],
      "savedAt": "2025-11-02T08:30:45.123Z",
      "expiresAt": "2025-11-03T08:30:45.123Z"      # optional
    }

Validity rule: a record is usable only when it has not passed expiresAt
(when present) and its cookie set is non-empty.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..utils.time import format_timestamp, parse_timestamp, utc_now


class Cookie(BaseModel):
    """
    One browser cookie, in the shape Playwright reads and writes.

    Unknown keys (partitionKey, etc.) are kept so a round trip through a
    session file does not lose driver-specific flags.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    value: str
    domain: str
    path: str = "/"
    expires: float | None = None
    http_only: bool | None = Field(default=None, alias="httpOnly")
    secure: bool | None = None
    same_site: str | None = Field(default=None, alias="sameSite")

    def to_record(self) -> dict[str, Any]:
        """Serialise with camelCase keys, omitting unset flags."""
        return self.model_dump(by_alias=True, exclude_none=True)


class LocalStorageEntry(BaseModel):
    name: str
    value: str


class OriginState(BaseModel):
    """localStorage snapshot for one origin."""

    model_config = ConfigDict(populate_by_name=True)

    origin: str
    local_storage: list[LocalStorageEntry] = Field(default_factory=list, alias="localStorage")

    @field_validator("local_storage", mode="before")
    @classmethod
    def accept_mapping(cls, v: Any) -> Any:
        """Accept {"key": "value"} mappings written by older tooling."""
        if isinstance(v, dict):
            return [{"name": str(k), "value": str(val)} for k, val in v.items()]
        if v is None:
            return []
        return v

    def as_mapping(self) -> dict[str, str]:
        return {entry.name: entry.value for entry in self.local_storage}


class SessionState(BaseModel):
    """Full persisted state of one named session."""

    model_config = ConfigDict(populate_by_name=True)

    cookies: list[Cookie] = Field(default_factory=list)
    origins: list[OriginState] = Field(default_factory=list)
    saved_at: datetime = Field(alias="savedAt")
    expires_at: datetime | None = Field(default=None, alias="expiresAt")

    @field_validator("saved_at", "expires_at", mode="before")
    @classmethod
    def parse_iso_timestamp(cls, v: Any) -> Any:
        """Parse ISO 8601 strings; naive timestamps are rejected."""
        if isinstance(v, str):
            return parse_timestamp(v)
        return v

    @field_validator("cookies", "origins", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_serializer("saved_at", "expires_at")
    def serialize_timestamp(self, v: datetime | None) -> str | None:
        return format_timestamp(v) if v is not None else None

    def is_expired(self, now: datetime | None = None) -> bool:
        """True when expiresAt is present and already in the past."""
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utc_now())

    def is_usable(self, now: datetime | None = None) -> bool:
        """
        Apply the session validity rule.

        An empty cookie set is never usable, whatever the expiry says.
        """
        return not self.is_expired(now) and len(self.cookies) > 0

    def to_record(self) -> dict[str, Any]:
        """Serialise to the on-disk JSON shape (expiresAt omitted when unset)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def playwright_cookies(self) -> list[dict[str, Any]]:
        """Cookies in the form accepted by BrowserContext.add_cookies()."""
        return [cookie.to_record() for cookie in self.cookies]
