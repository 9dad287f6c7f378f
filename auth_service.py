import logging
from typing import Tuple

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import auth, errors, models
from config import settings
from mailer import Mailer

logger = logging.getLogger(__name__)


def build_reset_link(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/reset-password/{token}"


class AuthService:
    """Registration, login and password reset on top of the user store.

    Methods that authenticate a user return ``(user, session_token)``;
    putting the token into a cookie is left to the caller.
    """

    def __init__(self, db: Session, mailer: Mailer):
        self.db = db
        self.mailer = mailer

    def _find_by_email(self, email: str):
        return self.db.query(models.User).filter(models.User.email == email).first()

    def register(
        self, name: str, email: str, password: str, confirm_password: str
    ) -> Tuple[models.User, str]:
        if password != confirm_password:
            raise errors.ValidationError(
                {
                    "password": errors.PASSWORD_MISMATCH,
                    "confirmPassword": errors.PASSWORD_MISMATCH,
                }
            )

        user = models.User(
            name=name,
            email=email,
            password=auth.hash_password(password),
            role="user",
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise errors.ConflictError(errors.unique_violation_field(exc)) from exc
        self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user, auth.create_session_token(user.id)

    def login(self, email: str, password: str) -> Tuple[models.User, str]:
        user = self._find_by_email(email)
        if user is None:
            raise errors.AuthError(errors.INCORRECT_EMAIL)
        if not auth.verify_password(password, user.password):
            raise errors.AuthError(errors.INCORRECT_PASSWORD)

        logger.info("Login: user %s", user.id)
        return user, auth.create_session_token(user.id)

    def request_password_reset(self, email: str, background_tasks: BackgroundTasks) -> None:
        user = self._find_by_email(email)
        if user is None:
            raise errors.NotFoundError("email")

        reset_link = build_reset_link(auth.create_reset_token(user.id))
        background_tasks.add_task(self.mailer.send_password_reset_email, user.email, reset_link)
        logger.info("Password reset requested for user %s", user.id)

    def confirm_password_reset(self, reset_token: str, new_password: str) -> Tuple[models.User, str]:
        user_id = auth.decode_token(reset_token, auth.RESET_TOKEN)

        user = self.db.get(models.User, user_id)
        if user is None:
            raise errors.InvalidTokenError()

        user.password = auth.hash_password(new_password)
        self.db.commit()

        logger.info("Password reset for user %s", user.id)
        return user, auth.create_session_token(user.id)
