"""
    streakipy - tools and library for a habit tracker restful API
    session state: the current token and who is told when it changes
"""
import enum
import logging
from typing import Callable, Optional

from .store import TokenStore
from .util import Subscribers

log = logging.getLogger(__name__)
LOGIN = 'login'
LOGOUT = 'logout'


class SessionStatus(enum.Enum):
    """the two states a session can be in"""
    ANONYMOUS = 'anonymous'
    AUTHENTICATED = 'authenticated'


class Session:
    """
    Holds the token of the current user and mirrors it to a `TokenStore`.

    The initial state comes from `store.load()`. Every transition writes the
    store first, then updates the in-memory token, then notifies subscribers
    with `(session, event)` where `event` is `'login'` or `'logout'`.

    `generation` grows by one on each transition; API responses that were
    requested under an older generation are stale.

    # Example
    ```python
    from streakipy.session import Session
    from streakipy.store import TokenStore
    session = Session(TokenStore('/tmp/token'))
    session.subscribe(lambda s, event: print(event, s.status))
    session.login('abc123')
    session.logout()
    ```
    ```
    login SessionStatus.AUTHENTICATED
    logout SessionStatus.ANONYMOUS
    ```
    """
    def __init__(self, store: TokenStore) -> None:
        self._store = store
        self._token = store.load()  # type: Optional[str]
        self._subscribers = Subscribers()
        self.generation = 0
        log.debug('Session started %s', self.status.value)

    @property
    def token(self) -> Optional[str]:
        """current token, None when anonymous"""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def status(self) -> SessionStatus:
        if self.is_authenticated:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.ANONYMOUS

    def subscribe(self, callback: Callable[['Session', str], None]) -> Callable[[], None]:
        """call `callback(session, event)` after every transition"""
        return self._subscribers.add(callback)

    def login(self, token: str) -> None:
        """become authenticated with `token`, replacing any previous one"""
        if not isinstance(token, str) or not token or token != token.strip():
            raise ValueError(
                'Token must be a non-empty string without surrounding whitespace, '
                'got {!r}'.format(token))
        self._store.save(token)
        self._token = token
        self.generation += 1
        log.debug('Logged in (generation %d)', self.generation)
        self._subscribers.notify(self, LOGIN)

    def logout(self) -> None:
        """forget the token; safe to call when already anonymous"""
        self._store.clear()
        self._token = None
        self.generation += 1
        log.debug('Logged out (generation %d)', self.generation)
        self._subscribers.notify(self, LOGOUT)

    def __repr__(self) -> str:
        return '<Session {} generation={}>'.format(self.status.value, self.generation)
