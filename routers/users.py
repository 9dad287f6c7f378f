from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

import auth, models, schemas
from auth_service import AuthService
from database import get_db
from mailer import Mailer, get_mailer

router = APIRouter(tags=["auth"])


def get_auth_service(
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(db, mailer)


@router.get("/register", response_model=schemas.FormDescriptor, response_model_exclude_none=True)
def register_get():
    return schemas.FormDescriptor(
        form="register",
        action="/register",
        fields=["name", "email", "password", "confirmPassword"],
    )


@router.get("/login", response_model=schemas.FormDescriptor, response_model_exclude_none=True)
def login_get():
    return schemas.FormDescriptor(form="login", action="/login", fields=["email", "password"])


@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    user, token = service.register(
        payload.name, payload.email, payload.password, payload.confirm_password
    )
    auth.set_session_cookie(response, token)
    return {"user": user.id}


@router.post("/login", response_model=schemas.LoginResponse, status_code=status.HTTP_201_CREATED)
def login(
    payload: schemas.UserLogin,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    user, token = service.login(payload.email, payload.password)
    auth.set_session_cookie(response, token)
    return {"user": user.id, "role": user.role}


@router.get("/logout")
def logout():
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    auth.clear_session_cookie(response)
    return response


@router.get("/me", response_model=schemas.LoginResponse)
def me(user: models.User = Depends(auth.get_current_user)):
    return {"user": user.id, "role": user.role}


@router.post("/password-reset-request", response_model=schemas.MessageResponse)
def password_reset_request(
    payload: schemas.PasswordResetRequest,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_service),
):
    service.request_password_reset(payload.email, background_tasks)
    return {"message": "Password reset email sent"}


@router.get("/reset-password/{token}", response_model=schemas.FormDescriptor)
def reset_password_get(token: str):
    return schemas.FormDescriptor(
        form="reset-password",
        action="/reset-password",
        fields=["resetToken", "newPassword"],
        reset_token=token,
    )


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(
    payload: schemas.PasswordResetConfirm,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    _, token = service.confirm_password_reset(payload.reset_token, payload.new_password)
    auth.set_session_cookie(response, token)
    return {"message": "Password successfully reset"}
