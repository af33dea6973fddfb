"""Authentication endpoints.

Endpoints:
  - POST /api/v1/auth/login
  - POST /api/v1/auth/refresh
  - POST /api/v1/auth/logout
"""

from __future__ import annotations

import logging

from pyqapac._api._common import parse_object
from pyqapac._constants import LOGIN_ENDPOINT, LOGOUT_ENDPOINT, REFRESH_ENDPOINT
from pyqapac._transport import Transport
from pyqapac.models.auth import LoginResult, TokenPair

_logger = logging.getLogger(__name__)


async def login(transport: Transport, username: str, password: str) -> LoginResult:
    """Exchange credentials for a token pair and the user profile.

    Raises
    ------
    QapacAuthError
        If the backend rejects the credentials.
    """
    payload = await transport.request_json(
        "POST",
        LOGIN_ENDPOINT,
        json_body={"username": username, "password": password},
    )
    result = parse_object(LoginResult, payload, endpoint=LOGIN_ENDPOINT)
    _logger.debug("Login ok user_id=%s role=%s", result.user.id, result.user.role)
    return result


async def refresh(transport: Transport, refresh_token: str) -> TokenPair:
    payload = await transport.request_json(
        "POST",
        REFRESH_ENDPOINT,
        json_body={"refresh_token": refresh_token},
    )
    return parse_object(TokenPair, payload, endpoint=REFRESH_ENDPOINT)


async def logout(transport: Transport, refresh_token: str) -> None:
    await transport.request_json(
        "POST",
        LOGOUT_ENDPOINT,
        json_body={"refresh_token": refresh_token},
    )
