from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import Conflict, Unauthorized

from arcade.models import User


class AuthService:
    """Registers users, checks passwords and issues/validates bearer tokens."""

    def __init__(self, session, secret_key: str, token_ttl: timedelta, algorithm: str = 'HS256'):
        self.session = session
        self.secret_key = secret_key
        self.token_ttl = token_ttl
        self.algorithm = algorithm

    @classmethod
    def from_app(cls, session, app=None):
        app = app or current_app
        return cls(
            session,
            app.config['SECRET_KEY'],
            timedelta(hours=app.config.get('TOKEN_TTL_HOURS', 24)),
            app.config.get('TOKEN_ALGORITHM', 'HS256'),
        )

    def _find_user(self, username: str) -> Optional[User]:
        return self.session.execute(
            select(User).filter_by(username=username)
        ).scalar_one_or_none()

    def _check_unique(self, username: str, email: Optional[str]) -> None:
        if self._find_user(username):
            raise Conflict('Username already taken. Please choose another.')
        if email and self.session.execute(select(User.id).where(User.email == email)).first():
            raise Conflict('Email is already registered.')

    def register(self, username: str, password: str, email: Optional[str] = None) -> User:
        # Empty email is stored as NULL so many users can omit it
        email = email or None
        self._check_unique(username, email)

        user = User(username=username, email=email)
        user.set_password(password)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.session.rollback()
            self._check_unique(username, email)
            raise
        return user

    def login(self, username: str, password: str) -> str:
        user = self._find_user(username)
        if user is None or not user.check_password(password):
            raise Unauthorized('Invalid username or password')
        return self.issue_token(user.username)

    def issue_token(self, username: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        claims = {
            'username': username,
            'iat': now,
            'exp': now + self.token_ttl,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> str:
        """Return the username asserted by a valid token."""
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={'require': ['exp']},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized('Invalid token: token has expired')
        except jwt.InvalidTokenError as exc:
            raise Unauthorized(f'Invalid token: {exc}')

        username = claims.get('username')
        if not isinstance(username, str) or not username:
            raise Unauthorized('Invalid token: missing username claim')
        return username

    def authenticate(self, authorization: Optional[str]) -> User:
        if not authorization:
            raise Unauthorized('Missing token')
        scheme, _, token = authorization.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            raise Unauthorized('Invalid token: expected a Bearer token')

        username = self.decode_token(token.strip())
        user = self._find_user(username)
        if user is None:
            raise Unauthorized('Invalid token: unknown user')
        return user
