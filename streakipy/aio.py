import asyncio
from typing import Union, Dict, List

import aiohttp

from .api import HabitClient, TransportError, DEFAULT_TIMEOUT
from .util import get_translation_functions

_ = get_translation_functions('streakipy')[0]


class HabitClientAsync(HabitClient):
    """
    HabitClient using aiohttp as backend for request

    Every operation becomes a coroutine taking the session first:

    ```python
    async def HabitClientAsync.habits(
        self,
        http: aiohttp.ClientSession
    ) -> Union[Dict, List]
    ```
    # Arguments

    http (aiohttp.ClientSession): aiohttp session used to make request.

    # Example
    ```python
    import asyncio
    from aiohttp import ClientSession
    from streakipy import Session, TokenStore, load_conf, DEFAULT_CONF
    from streakipy.aio import HabitClientAsync


    conf = load_conf(DEFAULT_CONF)
    api = HabitClientAsync(conf, Session(TokenStore(conf['token_file'])))

    async def main(api):
        async with ClientSession() as http:
            return await api.habits(http)
    asyncio.run(main(api))
    ```

    A logout while a request is in flight makes that request raise
    `StaleResponse` instead of returning data.
    """

    async def _call(  # type: ignore
        self,
        http: aiohttp.ClientSession,
        name,
        params=None,
        body=None
    ) -> Union[Dict, List]:
        endpoint, generation, request, request_args, request_kwargs = \
            self._prepare_request(name, backend=http, params=params, body=body)
        timeout = float(self._conf.get('timeout', DEFAULT_TIMEOUT))
        request_kwargs['timeout'] = aiohttp.ClientTimeout(total=timeout)
        try:
            async with request(*request_args, **request_kwargs) as resp:
                try:
                    payload = await resp.json(content_type=None)
                except ValueError:
                    payload = None
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as error:
            raise TransportError(
                _("Could not reach {}: {}").format(request_args[0], error)) from error  # noqa: Q000
        return self._handle_response(endpoint, generation, status, payload)

    async def register(self, http, username, email, password):  # type: ignore
        body = dict(username=username, email=email, password=password)
        return await self._call(http, 'register', body=body)

    async def login(self, http, email, password):  # type: ignore
        return await self._call(http, 'login', body=dict(email=email, password=password))

    async def me(self, http):  # type: ignore
        return await self._call(http, 'me')

    async def habits(self, http):  # type: ignore
        return await self._call(http, 'habits')

    async def add_habit(self, http, name, description=''):  # type: ignore
        body = dict(name=name, description=description)
        return await self._call(http, 'add_habit', body=body)

    async def complete_habit(self, http, habit_id):  # type: ignore
        return await self._call(http, 'complete_habit', params=dict(habit_id=habit_id))
