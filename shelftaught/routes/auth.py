"""
Authentication routes for the Shelf Taught front service

Login and register hand the backend token back to the caller, in the
response body and as cookies. Nothing about the session is kept on the
server.
"""

from fastapi import APIRouter, Depends, Response

from starlette.concurrency import run_in_threadpool

from shelftaught.dependencies import forget_session, get_client, remember_session
from shelftaught.gateway import ApiGateway
from shelftaught.models import LoginRequest, RegisterRequest

router = APIRouter(prefix="/auth", tags=["Auth"])


def _session_body(client: ApiGateway) -> dict:
    return {
        "authenticated": client.session.is_authenticated,
        "token": client.session.token,
        "user": client.session.user,
    }


@router.post("/login")
async def login(body: LoginRequest, response: Response, client: ApiGateway = Depends(get_client)):
    """Log in against the backend and return the token for later calls"""
    await run_in_threadpool(client.login, body.email, body.password)
    remember_session(response, client.session)
    return _session_body(client)


@router.post("/register")
async def register(body: RegisterRequest, response: Response, client: ApiGateway = Depends(get_client)):
    await run_in_threadpool(client.register, body.model_dump())
    remember_session(response, client.session)
    return _session_body(client)


@router.post("/logout")
async def logout(response: Response, client: ApiGateway = Depends(get_client)):
    client.logout()
    forget_session(response)
    return {"authenticated": False}


@router.get("/me")
async def current_user(client: ApiGateway = Depends(get_client)):
    return {"authenticated": client.session.is_authenticated, "user": client.session.user}
