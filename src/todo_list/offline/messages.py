"""Request and response objects exchanged with the cache controller."""

from dataclasses import dataclass, field

from todo_list.errors import BodyConsumedError

OFFLINE_PLACEHOLDER = b"Offline - Using cached data"


@dataclass(frozen=True)
class Request:
    """Intercepted resource request.

    url is the origin-relative path including any query string.
    """

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def path(self) -> str:
        return self.url.split("?", 1)[0]

    @property
    def cache_key(self) -> str:
        return self.url


class Response:
    """Response with a single-use body.

    The body can be read exactly once. To both cache and return a response,
    clone() it before either consumer reads.
    """

    def __init__(
        self,
        body: bytes = b"",
        status: int = 200,
        headers: dict[str, str] | None = None,
        status_text: str = "OK",
        is_error: bool = False,
    ) -> None:
        self.status = status
        self.status_text = status_text
        self.headers = dict(headers or {})
        self.is_error = is_error  # Network-level error response
        self._body = body
        self._body_used = False

    @property
    def ok(self) -> bool:
        return self.status == 200 and not self.is_error

    def read(self) -> bytes:
        """Consume and return the body.

        Raises:
            BodyConsumedError: If the body was already read
        """
        if self._body_used:
            raise BodyConsumedError("Response body already consumed")
        self._body_used = True
        return self._body

    def clone(self) -> "Response":
        """Duplicate the response, including an unread body."""
        if self._body_used:
            raise BodyConsumedError("Cannot clone a response whose body was consumed")
        return Response(
            body=self._body,
            status=self.status,
            headers=self.headers,
            status_text=self.status_text,
            is_error=self.is_error,
        )

    @classmethod
    def offline_placeholder(cls) -> "Response":
        """Synthetic response used when neither cache nor network can answer."""
        return cls(
            body=OFFLINE_PLACEHOLDER,
            status=200,
            headers={"content-type": "text/plain; charset=utf-8"},
        )

    def __repr__(self) -> str:
        return f"Response(status={self.status}, body_used={self._body_used})"
