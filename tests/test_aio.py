import unittest
import json
from unittest import mock

import aiohttp

from streakipy.aio import HabitClientAsync
from streakipy.api import AuthenticationFailed, StaleResponse, TransportError, Unauthorized
from streakipy.api import WrongData
from streakipy.session import Session
from streakipy.store import TokenStore

URL = 'https://habits.example.com'


class FakeResponse:
    def __init__(self, status, payload, on_json=None, error=None):
        self.status = status
        self._payload = payload
        self._on_json = on_json
        self._error = error

    async def __aenter__(self):
        if self._error:
            raise self._error
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self, content_type='application/json'):
        if self._on_json:
            self._on_json()
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeHttp:
    """stands in for aiohttp.ClientSession, answering every call with `response`"""
    def __init__(self, response):
        self.response = response
        self.calls = []

    def _record(self, method):
        def request(uri, **kwargs):
            self.calls.append((method, uri, kwargs))
            return self.response
        return request

    def __getattr__(self, method):
        if method in ('get', 'post', 'put', 'delete'):
            return self._record(method)
        raise AttributeError(method)


def make_session(token=None):
    store = mock.Mock(spec=TokenStore)
    store.load.return_value = token
    return Session(store)


class TestHabitClientAsync(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.session = make_session('abc123')
        self.api = HabitClientAsync({'url': URL}, self.session)

    async def test_habits(self):
        http = FakeHttp(FakeResponse(200, [{'_id': 'h1', 'name': 'Read'}]))
        habits = await self.api.habits(http)
        self.assertEqual(habits, [{'_id': 'h1', 'name': 'Read'}])
        method, uri, kwargs = http.calls[0]
        self.assertEqual((method, uri), ('get', URL + '/api/habits'))
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer abc123')
        self.assertIsInstance(kwargs['timeout'], aiohttp.ClientTimeout)

    async def test_complete_habit(self):
        payload = {'habit': {'_id': 'h1'}, 'points': 20, 'badges': []}
        http = FakeHttp(FakeResponse(200, payload))
        self.assertEqual(await self.api.complete_habit(http, 'h1'), payload)
        method, uri, kwargs = http.calls[0]
        self.assertEqual((method, uri), ('put', URL + '/api/habits/h1/complete'))
        self.assertEqual(json.loads(kwargs['data']), {})

    async def test_login_rejected(self):
        self.session.logout()
        http = FakeHttp(FakeResponse(401, {'msg': 'Invalid credentials'}))
        with self.assertRaises(AuthenticationFailed) as ctx:
            await self.api.login(http, 'me@example.com', 'wrong')
        self.assertEqual(ctx.exception.msg, 'Invalid credentials')
        self.assertNotIn('Authorization', http.calls[0][2]['headers'])

    async def test_unauthorized(self):
        http = FakeHttp(FakeResponse(401, {'msg': 'expired'}))
        with self.assertRaises(Unauthorized):
            await self.api.me(http)
        self.assertTrue(self.session.is_authenticated)

    async def test_logout_while_waiting(self):
        http = FakeHttp(FakeResponse(200, [], on_json=self.session.logout))
        with self.assertRaises(StaleResponse):
            await self.api.habits(http)

    async def test_transport_error(self):
        http = FakeHttp(FakeResponse(200, [], error=aiohttp.ClientConnectionError('down')))
        with self.assertRaises(TransportError):
            await self.api.habits(http)

    async def test_success_without_json(self):
        http = FakeHttp(FakeResponse(200, json.JSONDecodeError('Expecting value', '<html>', 0)))
        with self.assertRaises(WrongData):
            await self.api.me(http)
