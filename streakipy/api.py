"""
    streakipy - tools and library for a habit tracker restful API
    RESTful api abstraction module using requests
"""
# pylint: disable=invalid-name,too-few-public-methods

import json
import logging
import textwrap
import warnings
from typing import Any, Dict, List, Optional, Union

import requests

from .session import Session
from .util import get_translation_functions

API_CONTENT_TYPE = 'application/json'
DEFAULT_URL = 'https://habit-tracker-backend-b8nl.onrender.com'
DEFAULT_TIMEOUT = 30.0
_ = get_translation_functions('streakipy')[0]
log = logging.getLogger(__name__)


class ApiError(ValueError):
    """Base error for everything that can go wrong talking to the backend"""
    def __init__(self, message, status=None, msg=None):
        super().__init__(message)
        self.status = status
        self.msg = msg


class TransportError(ApiError):
    """The request could not complete"""


class AuthenticationFailed(ApiError):
    """The backend rejected login or signup data"""


class Unauthorized(ApiError):
    """The backend rejected the session token"""


class WrongReturnCode(ApiError):
    """Custom error type"""


class WrongData(ApiError):
    """Custom error type"""


class NotAuthenticated(ApiError):
    """A protected endpoint was called without a token"""


class StaleResponse(ApiError):
    """The session changed while the request was in flight"""


class ApiEndpoint:
    """
    Represents a single api endpoint.
    """
    def __init__(self, method, uri, title='', auth=True, retcode=200, data=True):
        self.method = method
        self.uri = uri
        self.title = title
        self.auth = auth
        self.retcode = retcode
        self.data = data

    def format_uri(self, **params):
        """fill `{name}` placeholders of the uri"""
        return self.uri.format(**params)

    def __repr__(self):
        return '<@api {{{self.method}}} {self.uri} {self.title}>'.format(self=self)


ENDPOINTS = {
    'register': ApiEndpoint('post', '/api/auth/register', 'Create an account', False, 201,
                            data=False),
    'login': ApiEndpoint('post', '/api/auth/login', 'Log in and get a token', False),
    'me': ApiEndpoint('get', '/api/auth/me', 'Current user with points and badges'),
    'habits': ApiEndpoint('get', '/api/habits', 'List habits'),
    'add_habit': ApiEndpoint('post', '/api/habits', 'Create a habit', retcode=201),
    'complete_habit': ApiEndpoint(
        'put', '/api/habits/{habit_id}/complete', 'Mark a habit completed'),
}  # type: Dict[str, ApiEndpoint]


def token_from(payload: Any) -> str:
    """extract the session token from a login response"""
    token = payload.get('token') if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token:
        raise WrongData(_("Login response carries no token"))  # noqa: Q000
    return token


def error_message(payload: Any) -> Optional[str]:
    """`msg` field of an error payload, if any"""
    if isinstance(payload, dict) and isinstance(payload.get('msg'), str):
        return payload['msg']
    return None


class HabitClient:
    """
    Represents the habit tracker API
    # Arguments
    conf : Configuration dictionary. Should contain the `url` field, may contain `timeout`
    session : `Session` supplying the bearer token
    logout_on_unauthorized : log the session out when the backend rejects its token
    strict : raise on unexpected success codes instead of warning

    # Example
    ```python
    from streakipy import HabitClient, Session, TokenStore, token_from
    session = Session(TokenStore())
    api = HabitClient({'url': 'https://habit-tracker-backend-b8nl.onrender.com'}, session)
    session.login(token_from(api.login('me@example.com', 'secret')))
    for habit in api.habits():
        print(habit['name'], habit['streak'])
    ```
    """
    def __init__(self, conf: Dict[str, Any], session: Session, *,
                 logout_on_unauthorized=False, strict=False) -> None:
        self._conf = conf
        self._session = session
        self._logout_on_unauthorized = logout_on_unauthorized
        self._strict = strict

    @property
    def session(self) -> Session:
        return self._session

    def _make_headers(self, endpoint: ApiEndpoint) -> Dict[str, str]:
        headers = {'content-type': API_CONTENT_TYPE}
        if endpoint.auth:
            token = self._session.token
            if token is None:
                raise NotAuthenticated(
                    _("{} requires a logged in user").format(endpoint.uri))  # noqa: Q000
            headers['Authorization'] = 'Bearer ' + token
        return headers

    def _prepare_request(self, name, backend=requests, params=None, body=None):
        endpoint = ENDPOINTS[name]
        uri = self._conf['url'].rstrip('/') + endpoint.format_uri(**(params or {}))
        headers = self._make_headers(endpoint)
        request = getattr(backend, endpoint.method)
        request_args = (uri,)
        request_kwargs = dict(headers=headers)
        if endpoint.method in ['put', 'post', 'delete']:
            request_kwargs['data'] = json.dumps(body or {})
        return endpoint, self._session.generation, request, request_args, request_kwargs

    def _handle_response(self, endpoint, generation, status, payload):
        """turn a status code and decoded body into data or an ApiError"""
        if generation != self._session.generation:
            raise StaleResponse(
                _("Session changed while waiting for {}").format(endpoint.uri),  # noqa: Q000
                status=status)
        msg = error_message(payload)
        if 200 <= status < 300:
            if status != endpoint.retcode:
                text = _("""
                Got return code {status}, but {node.retcode} was
                expected for {node.uri}.""")  # noqa: Q000
                text = textwrap.dedent(text).replace('\n', ' ').strip()
                text = text.format(status=status, node=endpoint)
                if self._strict:
                    raise WrongReturnCode(text, status=status)
                warnings.warn(text)
            if endpoint.data and payload is None:
                raise WrongData(
                    _("{} did not return JSON data").format(endpoint.uri),  # noqa: Q000
                    status=status)
            return payload
        if not endpoint.auth and 400 <= status < 500:
            raise AuthenticationFailed(
                msg or _("{} was rejected").format(endpoint.uri),  # noqa: Q000
                status=status, msg=msg)
        if endpoint.auth and status in (401, 403):
            if self._logout_on_unauthorized:
                log.info('Token rejected by %s, logging out', endpoint.uri)
                self._session.logout()
            raise Unauthorized(
                msg or _("Token rejected by {}").format(endpoint.uri),  # noqa: Q000
                status=status, msg=msg)
        raise WrongReturnCode(
            _("Got return code {} for {}").format(status, endpoint.uri),  # noqa: Q000
            status=status, msg=msg)

    def _request(self, endpoint, generation, request, request_args, request_kwargs):
        request_kwargs.setdefault('timeout', float(self._conf.get('timeout', DEFAULT_TIMEOUT)))
        log.debug('%s %s', endpoint.method.upper(), request_args[0])
        try:
            res = request(*request_args, **request_kwargs)
        except requests.exceptions.RequestException as error:
            raise TransportError(
                _("Could not reach {}: {}").format(request_args[0], error)) from error  # noqa: Q000
        try:
            payload = res.json()
        except ValueError:
            payload = None
        return self._handle_response(endpoint, generation, res.status_code, payload)

    def _call(self, name, params=None, body=None) -> Union[Dict, List]:
        return self._request(*self._prepare_request(name, params=params, body=body))

    def register(self, username: str, email: str, password: str):
        """create an account; does not log in"""
        body = dict(username=username, email=email, password=password)
        return self._call('register', body=body)

    def login(self, email: str, password: str):
        """exchange credentials for a token (see `token_from`)"""
        return self._call('login', body=dict(email=email, password=password))

    def me(self):
        return self._call('me')

    def habits(self):
        return self._call('habits')

    def add_habit(self, name: str, description: str = ''):
        return self._call('add_habit', body=dict(name=name, description=description))

    def complete_habit(self, habit_id: str):
        """returns the updated `habit` with the user's `points` and `badges`"""
        return self._call('complete_habit', params=dict(habit_id=habit_id))
