"""
    streakipy - tools and library for a habit tracker restful API
    locations and the guard keeping anonymous users out of protected ones
"""
import logging
from typing import Callable, List

from .session import LOGOUT, Session
from .util import Subscribers

LOGIN_PAGE = '/login'
SIGNUP_PAGE = '/signup'
DASHBOARD_PAGE = '/dashboard'
ROOT_PAGE = '/'
PUBLIC_PAGES = (LOGIN_PAGE, SIGNUP_PAGE)
log = logging.getLogger(__name__)


class Navigator:
    """current location plus everyone interested in it changing"""
    def __init__(self, location: str = ROOT_PAGE) -> None:
        self.location = location
        self.history = [location]  # type: List[str]
        self._subscribers = Subscribers()

    def subscribe(self, callback: Callable[['Navigator'], None]) -> Callable[[], None]:
        """call `callback(navigator)` whenever the location changes"""
        return self._subscribers.add(callback)

    def navigate(self, location: str) -> None:
        if location == self.location:
            return
        log.debug('Navigating %s -> %s', self.location, location)
        self.location = location
        self.history.append(location)
        self._subscribers.notify(self)

    def __repr__(self) -> str:
        return '<Navigator {}>'.format(self.location)


class RouteGuard:
    """
    Redirects anonymous users to the login page.

    The rule is checked right away and again after every session transition
    and every location change: an anonymous session anywhere except the
    login and signup pages is sent to the login page. Authenticated sessions
    are left alone. A logout always ends on the login page.
    """
    def __init__(self, session: Session, navigator: Navigator) -> None:
        self.session = session
        self.navigator = navigator
        self.redirects = 0
        self._unsubscribe = [
            session.subscribe(self._on_session),
            navigator.subscribe(self._on_location),
        ]
        self.evaluate()

    def allows(self, location: str) -> bool:
        """whether the current session may stay at `location`"""
        return self.session.is_authenticated or location in PUBLIC_PAGES

    def evaluate(self) -> None:
        if not self.allows(self.navigator.location):
            self._redirect(LOGIN_PAGE)

    def _redirect(self, location):
        self.redirects += 1
        log.debug('Redirecting %s from %s to %s',
                  self.session.status.value, self.navigator.location, location)
        self.navigator.navigate(location)

    def _on_session(self, session, event):
        if event == LOGOUT and self.navigator.location != LOGIN_PAGE:
            self._redirect(LOGIN_PAGE)
        else:
            self.evaluate()

    def _on_location(self, navigator):
        self.evaluate()

    def close(self) -> None:
        """stop reacting to the session and the navigator"""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
