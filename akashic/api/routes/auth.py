from fastapi import APIRouter, Response, status

from akashic.api.deps import CurrentUser, ServicesDep, SettingsDep, TokenDep
from akashic.core.config import Settings
from akashic.exceptions import ValidationError
from akashic.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    ProfileRequest,
    RegisterRequest,
    UserResponse,
)

router = APIRouter(tags=["auth"])


def _set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, response: Response, services: ServicesDep, settings: SettingsDep):
    user = await services.users.register(data.username, data.email, data.password, data.phone)
    auth_session = await services.users.open_session(user)
    _set_session_cookie(response, settings, auth_session.token)
    return AuthResponse(
        user=UserResponse.model_validate(user), token=auth_session.token, welcome_bonus=settings.welcome_bonus
    )


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, response: Response, services: ServicesDep, settings: SettingsDep):
    user, auth_session = await services.users.login(data.username, data.password)
    _set_session_cookie(response, settings, auth_session.token)
    return AuthResponse(user=UserResponse.model_validate(user), token=auth_session.token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, services: ServicesDep, settings: SettingsDep, token: TokenDep):
    await services.users.logout(token)
    response.delete_cookie(settings.session_cookie)
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def get_user(user: CurrentUser):
    return user


@router.patch("/user", response_model=UserResponse)
async def update_profile(data: ProfileRequest, user: CurrentUser, services: ServicesDep):
    return await services.users.update_profile(user.id, data.model_dump(exclude_unset=True))


@router.post("/user/password", response_model=MessageResponse)
async def change_password(data: PasswordChangeRequest, user: CurrentUser, services: ServicesDep):
    if not await services.users.change_password(user.id, data.old_password, data.new_password):
        raise ValidationError("Current password is incorrect")
    return MessageResponse(message="Password updated")
