"""
    streakipy - tools and library for a habit tracker restful API
"""
import logging
from .api import HabitClient, ApiError, token_from
from .cli import load_conf, DEFAULT_CONF
from .guard import Navigator, RouteGuard
from .session import Session, SessionStatus
from .store import TokenStore
logging.getLogger(__name__).addHandler(logging.NullHandler())
