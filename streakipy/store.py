"""
    streakipy - tools and library for a habit tracker restful API
    durable slot for the session token
"""
import logging
import os
from typing import Optional

from plumbum import local

from .util import is_secure_file, secure_filestore

DEFAULT_TOKEN_FILE = '~/.config/streakipy/token'
log = logging.getLogger(__name__)


class TokenStore:
    """
    Keeps a single token in an owner-only file so it survives restarts.

    Failures of the underlying file system are logged and never raised:
    callers keep working with the token they hold in memory.

    # Example
    ```python
    from streakipy.store import TokenStore
    store = TokenStore('/tmp/token')
    store.save('abc123')
    assert store.load() == 'abc123'
    store.clear()
    assert store.load() is None
    ```
    """
    def __init__(self, path=DEFAULT_TOKEN_FILE) -> None:
        self.path = local.path(path)

    def save(self, token: str) -> None:
        """overwrite the stored token"""
        tmp = self.path.with_name(self.path.name + '.tmp')
        try:
            if not self.path.dirname.exists():
                self.path.dirname.mkdir()
            if tmp.exists():
                tmp.delete()
            with secure_filestore(), open(tmp, 'x') as f:
                f.write(token)
            os.replace(tmp, self.path)
        except OSError as error:
            log.warning('Could not store token in %s: %s', self.path, error)
            if tmp.exists():
                tmp.delete()

    def load(self) -> Optional[str]:
        """stored token or None"""
        if not self.path.exists():
            return None
        try:
            if not is_secure_file(self.path):
                log.warning(
                    'Ignoring token file %s: it can be read by other users. '
                    'Please run \'chmod 600 "%s"\'', self.path, self.path)
                return None
            with open(self.path) as f:
                token = f.read().strip()
        except OSError as error:
            log.warning('Could not read token from %s: %s', self.path, error)
            return None
        return token or None

    def clear(self) -> None:
        """remove the stored token, if any"""
        try:
            if self.path.exists():
                self.path.delete()
        except OSError as error:
            log.warning('Could not remove token file %s: %s', self.path, error)

    def __repr__(self) -> str:
        return '<TokenStore {}>'.format(self.path)
