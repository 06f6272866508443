import asyncio
import logging

import aiohttp

from ...application.ports.user_api import ApiResponse, UserApiClient, UserApiError

logger = logging.getLogger(__name__)


class HttpUserApiClient(UserApiClient):
    """Calls POST /api/user on the Eazydoc API."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    async def create_user(self, name: str, email: str, password: str) -> ApiResponse:
        url = f"{self.base_url}/api/user"
        payload = {"name": name, "email": email, "password": password}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(url, json=payload) as response:
                    data = await response.json(content_type=None)
                    return ApiResponse(
                        ok=200 <= response.status < 300,
                        status=response.status,
                        data=data if isinstance(data, dict) else {},
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise UserApiError(str(e)) from e
