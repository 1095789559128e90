"""Identity provider: turns a session into an authenticated user."""
import hmac
from typing import Dict, Iterable, MutableMapping, Optional

from demobank.errors import AuthenticationFailed, Unauthenticated
from demobank.models import User

SESSION_USER_KEY = "user_id"


class IdentityProvider:
    """
    Session-based login over a fixed set of users.

    Credentials are opaque strings compared in constant time. The rest of
    the system only ever sees the user id resolved here.
    """

    def __init__(self, users: Iterable[User] = ()):
        self._users_by_id: Dict[int, User] = {}
        self._users_by_name: Dict[str, User] = {}
        for user in users:
            self.add(user)

    def add(self, user: User) -> None:
        if user.id in self._users_by_id or user.username in self._users_by_name:
            raise ValueError(f"User {user.username!r} already exists")
        self._users_by_id[user.id] = user
        self._users_by_name[user.username] = user

    def get(self, user_id: int) -> Optional[User]:
        return self._users_by_id.get(user_id)

    def login(self, username: str, credential: str) -> User:
        """
        Authenticate a username/credential pair.

        Raises:
            AuthenticationFailed: Unknown username or wrong credential
        """
        user = self._users_by_name.get(username) if isinstance(username, str) else None
        if user is None or not isinstance(credential, str):
            raise AuthenticationFailed()
        if not hmac.compare_digest(user.credential.encode(), credential.encode()):
            raise AuthenticationFailed()
        return user

    def sign_in(self, session: MutableMapping, user: User) -> None:
        """Bind the user to the session."""
        session[SESSION_USER_KEY] = user.id

    def current_user(self, session: MutableMapping) -> User:
        """
        Resolve the user bound to a session.

        Raises:
            Unauthenticated: No user in the session, or the user no longer exists
        """
        user_id = session.get(SESSION_USER_KEY)
        user = self._users_by_id.get(user_id) if user_id is not None else None
        if user is None:
            raise Unauthenticated()
        return user

    def logout(self, session: MutableMapping) -> None:
        session.clear()
