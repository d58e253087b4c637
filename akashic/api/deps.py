from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.core.config import Settings
from akashic.exceptions import AuthenticationRequired
from akashic.models.definitions import User
from akashic.services import Services


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.database.sessionmaker() as session:
        yield session


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_services(
    request: Request, session: Annotated[AsyncSession, Depends(get_session)]
) -> Services:
    return Services.build(session, request.app.state.settings, request.app.state.responder)


def session_token(request: Request) -> str | None:
    """The session token from the cookie, or from an `Authorization: Bearer` header."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(request.app.state.settings.session_cookie)


async def optional_user(
    services: Annotated[Services, Depends(get_services)],
    token: Annotated[str | None, Depends(session_token)],
) -> User | None:
    return await services.users.resolve_session(token)


async def current_user(user: Annotated[User | None, Depends(optional_user)]) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
ServicesDep = Annotated[Services, Depends(get_services)]
TokenDep = Annotated[str | None, Depends(session_token)]
CurrentUser = Annotated[User, Depends(current_user)]
OptionalUser = Annotated[User | None, Depends(optional_user)]
