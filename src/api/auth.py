import logging
from typing import Optional, Tuple

from models.user import User
from .client import BackendClient, BackendError, unwrap

logger = logging.getLogger(__name__)


class AuthService:
    """Login, registration and token refresh against /auth"""

    def __init__(self, client: BackendClient):
        self.client = client

    def login(self, email: str, password: str) -> Tuple[User, str]:
        body = self.client.post('/auth/login', json={'email': email, 'password': password},
                                fallback='Login failed')
        data = unwrap(body) or {}
        token = data.get('token')
        if not token or not data.get('user'):
            raise BackendError('Login failed: no token in response')
        self.client.token = token
        user = User.from_api(data['user'])
        logger.info("User %s logged in with role %s", user.email, user.role)
        return user, token

    def register(self, name: str, email: str, password: str, role: Optional[str] = None,
                 department: Optional[str] = None) -> Tuple[User, str]:
        payload = {'name': name, 'email': email, 'password': password}
        if role:
            payload['role'] = role
        if department:
            payload['department'] = department
        data = unwrap(self.client.post('/auth/register', json=payload, fallback='Registration failed')) or {}
        return User.from_api(data.get('user') or {}), data.get('token')

    def current_user(self) -> User:
        return User.from_api(unwrap(self.client.get('/auth/me', fallback='Failed to load user')) or {})

    def refresh(self) -> str:
        data = unwrap(self.client.post('/auth/refresh', fallback='Token refresh failed')) or {}
        token = data.get('token')
        if not token:
            raise BackendError('Token refresh failed')
        self.client.token = token
        return token

    def logout(self) -> None:
        try:
            self.client.post('/auth/logout', fallback='Logout failed')
        finally:
            # The local session is dropped whatever the backend answered
            self.client.token = None
