import unittest
import os
import shutil
import string
import tempfile
from unittest import mock

from hypothesis import given
from hypothesis.strategies import lists, text

from streakipy.guard import Navigator, RouteGuard, DASHBOARD_PAGE, LOGIN_PAGE
from streakipy.session import Session, SessionStatus
from streakipy.store import TokenStore

tokens = text(alphabet=string.ascii_letters + string.digits + '-_.', min_size=1)


class TestSession(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.store = TokenStore(os.path.join(self.dir, 'token'))

    def tearDown(self):
        shutil.rmtree(self.dir)

    def test_starts_anonymous(self):
        session = Session(self.store)
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(session.token)
        self.assertEqual(session.status, SessionStatus.ANONYMOUS)

    def test_starts_authenticated_from_store(self):
        self.store.save('abc123')
        session = Session(self.store)
        self.assertTrue(session.is_authenticated)
        self.assertEqual(session.token, 'abc123')
        self.assertEqual(session.status, SessionStatus.AUTHENTICATED)

    def test_later_login_wins(self):
        session = Session(self.store)
        session.login('T1')
        session.login('T2')
        self.assertEqual(session.token, 'T2')
        self.assertEqual(self.store.load(), 'T2')

    @given(lists(tokens, min_size=1))
    def test_last_of_many_logins_wins(self, values):
        session = Session(self.store)
        for value in values:
            session.login(value)
        self.assertEqual(session.token, values[-1])
        self.assertEqual(self.store.load(), values[-1])
        self.assertEqual(session.generation, len(values))
        self.assertEqual(Session(self.store).token, values[-1])

    def test_logout_clears(self):
        session = Session(self.store)
        session.login('T1')
        session.logout()
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(session.token)
        self.assertIsNone(self.store.load())

    def test_logout_twice(self):
        session = Session(self.store)
        session.login('T1')
        session.logout()
        once = (session.status, session.token, self.store.load())
        session.logout()
        self.assertEqual((session.status, session.token, self.store.load()), once)

    def test_login_needs_token(self):
        session = Session(self.store)
        for wrong in ('', None, 42, '   ', ' T1 ', 'T1\n'):
            with self.assertRaises(ValueError):
                session.login(wrong)
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(self.store.load())

    def test_subscribers_see_finished_transition(self):
        session = Session(self.store)
        seen = []

        def callback(s, event):
            seen.append((event, s.token, self.store.load()))
        unsubscribe = session.subscribe(callback)
        session.login('abc123')
        session.logout()
        self.assertEqual(seen, [('login', 'abc123', 'abc123'), ('logout', None, None)])
        unsubscribe()
        session.login('again')
        self.assertEqual(len(seen), 2)

    def test_every_transition_is_mirrored(self):
        store = mock.Mock(spec=TokenStore)
        store.load.return_value = None
        session = Session(store)
        session.login('abc123')
        store.save.assert_called_once_with('abc123')
        self.assertEqual(session.token, 'abc123')
        session.logout()
        store.clear.assert_called_once_with()


class TestScenario(unittest.TestCase):
    def test_login_reload_logout(self):
        with tempfile.TemporaryDirectory() as directory:
            store = TokenStore(os.path.join(directory, 'token'))
            session = Session(store)
            session.login('abc123')
            self.assertEqual(store.load(), 'abc123')
            self.assertTrue(session.is_authenticated)

            session = Session(store)
            self.assertEqual(session.status, SessionStatus.AUTHENTICATED)
            self.assertEqual(session.token, 'abc123')
            navigator = Navigator(DASHBOARD_PAGE)
            guard = RouteGuard(session, navigator)
            self.assertEqual(guard.redirects, 0)

            session.logout()
            self.assertIsNone(store.load())
            self.assertEqual(session.status, SessionStatus.ANONYMOUS)
            self.assertEqual(navigator.location, LOGIN_PAGE)
            self.assertEqual(navigator.history, [DASHBOARD_PAGE, LOGIN_PAGE])
