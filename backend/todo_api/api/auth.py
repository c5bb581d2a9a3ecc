import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from todo_api.core.database import get_db
from todo_api.core.errors import AppError, RateLimitedError
from todo_api.schemas import (
    ApiResponse,
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    UserOut,
)
from todo_api.services.audit import log_event
from todo_api.services.auth_service import AuthResult, AuthService
from todo_api.services.credentials import normalize_email
from todo_api.services.rate_limit import RateLimiter

router = APIRouter(prefix="/auth", tags=["auth"])
rate_limiter = RateLimiter()
logger = logging.getLogger(__name__)


def _auth_response(result: AuthResult) -> ApiResponse[AuthResponse]:
    return ApiResponse[AuthResponse](
        data=AuthResponse(
            token=result.token,
            refresh_token=result.refresh_token,
            user=UserOut.model_validate(result.user),
        )
    )


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    try:
        result = AuthService(db).register(payload.email, payload.password, payload.name)
    except AppError as exc:
        logger.warning("Registration rejected: %s", exc.code)
        log_event(db, "register", "failed", exc.code)
        raise
    response = _auth_response(result)
    log_event(db, "register", "success", user_id=response.data.user.id)
    return response


@router.post("/login", response_model=ApiResponse[AuthResponse])
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    client_key = request.client.host if request.client else normalize_email(payload.email)
    if not rate_limiter.hit(client_key):
        log_event(db, "login", "blocked", "rate limited")
        raise RateLimitedError()
    try:
        result = AuthService(db).login(payload.email, payload.password)
    except AppError as exc:
        logger.warning("Login rejected: %s", exc.code)
        log_event(db, "login", "failed", exc.code)
        raise
    response = _auth_response(result)
    log_event(db, "login", "success", user_id=response.data.user.id)
    rate_limiter.reset(client_key)
    return response


@router.post("/refresh", response_model=ApiResponse[AuthResponse])
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    try:
        result = AuthService(db).refresh(payload.refresh_token)
    except AppError as exc:
        logger.warning("Refresh rejected: %s", exc.code)
        log_event(db, "refresh", "failed", exc.code)
        raise
    response = _auth_response(result)
    log_event(db, "refresh", "success", user_id=response.data.user.id)
    return response


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(payload: LogoutRequest, db: Session = Depends(get_db)):
    try:
        user_id = AuthService(db).logout(payload.refresh_token)
    except AppError as exc:
        logger.warning("Logout rejected: %s", exc.code)
        log_event(db, "logout", "failed", exc.code)
        raise
    log_event(db, "logout", "success", user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
