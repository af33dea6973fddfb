"""Authentication payload models."""

from __future__ import annotations

from enum import StrEnum

from pyqapac.models._base import QapacBaseModel


class UserRole(StrEnum):
    RIDER = "rider"
    DRIVER = "driver"
    ADMIN = "admin"

    @classmethod
    def _missing_(cls, value: object) -> UserRole:
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        # Unknown roles get the least privileged behaviour.
        return cls.RIDER

    @property
    def reports_position(self) -> bool:
        return self in (UserRole.DRIVER, UserRole.ADMIN)


class UserInfo(QapacBaseModel):
    """The ``user`` object returned by login."""

    id: int
    username: str = ""
    full_name: str = ""
    role: UserRole = UserRole.RIDER


class LoginResult(QapacBaseModel):
    """Response of ``POST /api/v1/auth/login``."""

    access_token: str
    refresh_token: str = ""
    user: UserInfo


class TokenPair(QapacBaseModel):
    """Response of ``POST /api/v1/auth/refresh``."""

    access_token: str
    refresh_token: str = ""
