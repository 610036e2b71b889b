"""HTTP boundary for notification delivery.

Receivers describe what to send as SendRequest values; a NotificationSender
performs the actual call. The httpx-backed sender is the production
implementation, tests substitute a recording fake.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

import httpx


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "alertdispatch/1.0"


class DeliveryError(Exception):
    """Raised when a notification could not be delivered to an endpoint."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.url = url
        self.status_code = status_code
        super().__init__(self.message)


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str = ""


@dataclass
class SendRequest:
    """One outbound HTTP call."""

    url: str
    body: Union[str, bytes]
    method: str = "POST"
    headers: Dict[str, str] = field(default_factory=dict)
    basic_auth: Optional[BasicAuth] = None
    content_type: str = "application/json"

    @property
    def body_text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass
class SendResponse:
    status_code: int
    body: str = ""


class NotificationSender(ABC):
    """Abstract capability for sending one HTTP request."""

    @abstractmethod
    async def send(self, request: SendRequest) -> SendResponse:
        """Send the request.

        Raises:
            DeliveryError: On transport failure or a non-2xx response
        """
        pass


class HttpxNotificationSender(NotificationSender):
    """NotificationSender backed by an httpx.AsyncClient."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        connect_timeout_seconds: float = 10.0,
        verify_ssl: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.user_agent = user_agent
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout=timeout_seconds, connect=connect_timeout_seconds),
            verify=verify_ssl,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5)
        )

    async def send(self, request: SendRequest) -> SendResponse:
        headers = {
            "Content-Type": request.content_type,
            "User-Agent": self.user_agent,
            **request.headers
        }
        auth = None
        if request.basic_auth is not None:
            auth = httpx.BasicAuth(request.basic_auth.username, request.basic_auth.password)

        try:
            response = await self.client.request(
                method=request.method,
                url=request.url,
                content=request.body,
                headers=headers,
                auth=auth
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DeliveryError(f"request error: {e}", url=request.url) from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f"unexpected status code {response.status_code}: {response.text[:200]}",
                url=request.url,
                status_code=response.status_code
            )

        logger.debug(f"Sent notification to {request.url}: HTTP {response.status_code}")
        return SendResponse(status_code=response.status_code, body=response.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "HttpxNotificationSender":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
