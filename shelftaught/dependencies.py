"""
Request-scoped dependencies for the Shelf Taught front service

Every request gets its own ``AuthSession``, read from the caller's
``Authorization`` header or the cookies set at login, and a gateway view
acting for that session. Only the HTTP pool and the response cache are
shared between callers.
"""

import json
from typing import Dict, Optional
from urllib.parse import quote, unquote

from fastapi import Depends, Request, Response

from shelftaught.config import Config, get_gateway
from shelftaught.errors import AuthenticationExpired
from shelftaught.gateway import ApiGateway
from shelftaught.session import AuthSession


def _bearer_token(request: Request) -> Optional[str]:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def get_session(request: Request) -> AuthSession:
    """Session of the caller; empty when it sent no credentials"""
    store: Dict[str, str] = {}
    token = _bearer_token(request) or request.cookies.get(Config.TOKEN_KEY)
    if token:
        store[Config.TOKEN_KEY] = token
        user = request.cookies.get(Config.USER_KEY)
        if user:
            store[Config.USER_KEY] = unquote(user)
    return AuthSession(store)


def get_client(
    gateway: ApiGateway = Depends(get_gateway),
    session: AuthSession = Depends(get_session),
) -> ApiGateway:
    return gateway.for_session(session)


def require_login(client: ApiGateway = Depends(get_client)) -> ApiGateway:
    if not client.session.is_authenticated:
        raise AuthenticationExpired("Please log in to continue", redirect_to=Config.LOGIN_PATH)
    return client


def remember_session(response: Response, session: AuthSession) -> None:
    """Hand the session back to the caller as cookies"""
    response.set_cookie(Config.TOKEN_KEY, session.token, httponly=True, samesite="lax")
    user = session.user
    if user is not None:
        # percent-encoded so the JSON survives cookie quoting
        response.set_cookie(Config.USER_KEY, quote(json.dumps(user), safe=""), httponly=True, samesite="lax")


def forget_session(response: Response) -> None:
    response.delete_cookie(Config.TOKEN_KEY)
    response.delete_cookie(Config.USER_KEY)
