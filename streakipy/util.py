"""
    streakipy - tools and library for a habit tracker restful API
    utility functions
"""
# pylint: disable=invalid-name
import os
import gettext
from contextlib import contextmanager
from functools import partial
from importlib import resources
from math import ceil
from typing import Callable, List, Tuple
from plumbum import colors


def progressed_bar(
        count,
        total=100, status=None, suffix=None,
        width=None, bar_len=10):
    """render a progressed.io like progress bar"""
    status = status or ''
    suffix = suffix or '%'
    assert isinstance(count, int)
    max_width = 60 if status == '' else 90
    width = max_width if width is None else width
    bar_len = ceil(bar_len * width / max_width)
    count_normalized = count if count <= total else total
    filled_len = int(round(bar_len * count_normalized / float(total)))
    percents = 100.0 * count / float(total)
    color = '#5cb85c'
    if percents < 30.0:
        color = '#d9534f'
    elif percents < 70.0:
        color = '#f0ad4e'
    text_color = colors.fg(color)
    bar_color = text_color + colors.bg(color)
    nc_color = colors.dark_gray
    progressbar = (colors.bg('#428bca') | status) if status else ''
    progressbar += (bar_color | ('█' * filled_len))
    progressbar += (nc_color | ('█' * (bar_len - filled_len)))
    progressbar += (text_color | (str(count) + suffix))
    return progressbar


STREAK_BLOCK = 7


def streak_bar(streak, block=STREAK_BLOCK, bar_len=7):
    """
    progress toward the next full block of `block` days

    # Example
    ```python
    from streakipy.util import streak_bar
    print(streak_bar(10))
    ```
    ```
    ███████3/7
    ```
    """
    streak = int(streak or 0)
    return progressed_bar(
        streak % block, total=block,
        suffix='/{}'.format(block), bar_len=bar_len)


class Subscribers:
    """ordered list of callbacks notified with the same arguments"""
    def __init__(self):
        self._callbacks = []  # type: List[Callable]

    def add(self, callback: Callable) -> Callable[[], None]:
        """register `callback`; returns a function that removes it again"""
        self._callbacks.append(callback)

        def remove():
            if callback in self._callbacks:
                self._callbacks.remove(callback)
        return remove

    def notify(self, *args):
        """call every callback registered at the moment of the call"""
        for callback in list(self._callbacks):
            callback(*args)


@contextmanager
def umask(mask):
    """
    temporarily change umask

    # Arguments
    mask : a umask (invese of chmod argument)

    # Example
    ```python
    with umask(0o077), open('yay.txt') as f:
        f.write('nyaroo~n')

    ```

    `yay.txt` will be written with 600 file mode
    """
    prev = os.umask(mask)
    try:
        yield
    finally:
        os.umask(prev)


secure_filestore = partial(umask, 0o077)


def is_secure_file(fn):
    """checks if a file can be accessed only by the owner"""
    st = os.stat(fn)
    return (st.st_mode & 0o777) == 0o600


def get_translation_for(package_name: str) -> gettext.NullTranslations:
    """find and return gettext translation for package"""
    localedir = None
    for localedir in str(resources.files(package_name) / 'i18n'), None:
        localefile = gettext.find(package_name, localedir)  # type: ignore
        if localefile:
            break
    return gettext.translation(package_name, localedir=localedir, fallback=True)  # type: ignore


def get_translation_functions(package_name: str, names: Tuple[str, ...] = ('gettext',)):
    """finds and installs translation functions for package"""
    translation = get_translation_for(package_name)
    return [getattr(translation, x) for x in names]
