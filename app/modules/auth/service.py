import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.common.exceptions import AuthenticationError, ConflictError
from app.modules.auth.models import User
from app.modules.auth.schemas import UserCreate, TokenResponse
from app.modules.auth.utils import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    """
    Registration and login for shop operators.
    """

    def __init__(self, db: Session):
        self.db = db

    def _issue_token(self, user: User) -> TokenResponse:
        token_data = {
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
        }
        return TokenResponse(token=create_access_token(token_data))

    def create_user(self, user_data: UserCreate) -> TokenResponse:
        """
        Create an operator account and log it in straight away.
        """
        existing_user = self.db.query(User).filter(User.email == user_data.email).first()
        if existing_user:
            raise ConflictError("This email is already registered")

        user = User(
            email=user_data.email,
            username=user_data.username,
            password=hash_password(user_data.password),
            is_active=True
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("This email is already registered")
        self.db.refresh(user)

        logger.info(f"User registered: {user.email}")
        return self._issue_token(user)

    def login(self, email: str, password: str) -> TokenResponse:
        user = self.db.query(User).filter(User.email == email).first()

        # Same message for unknown email and wrong password
        if not user or not verify_password(password, user.password):
            raise AuthenticationError("Incorrect email or password")

        if not user.is_active:
            raise AuthenticationError("Inactive account")

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()

        return self._issue_token(user)
