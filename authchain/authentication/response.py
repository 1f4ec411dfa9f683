import logging
from http import HTTPStatus

from starlette.responses import RedirectResponse, Response

from authchain.authentication.exceptions import ResponseAlreadySentError
from authchain.types.asgi import ASGIReceive, ASGISend, Message, Scope

logger = logging.getLogger("authchain.response")


class ResponseWriter:
    """
    Accumulates status and headers for the current request and sends them
    with a single terminal write.

    `send` is the guarded channel handed to the downstream application:
    once this writer has ended the response, downstream response messages
    are dropped.
    """

    def __init__(self, scope: Scope, receive: ASGIReceive, send: ASGISend):
        self.scope = scope
        self._receive = receive
        self._send = send
        self.status_code: int = HTTPStatus.OK
        self.headers: list[tuple[str, str]] = []
        self.error: Exception | None = None
        self.sent = False
        self._ended_here = False

    def set_status(self, status: int) -> None:
        self.status_code = status

    def append_header(self, key: str, value: str) -> None:
        self.headers.append((key, value))

    async def end(self, body: bytes = b"") -> None:
        response = Response(content=body, status_code=self.status_code)
        await self._write(response)

    async def redirect(self, url: str, status: int = HTTPStatus.FOUND) -> None:
        self.status_code = status
        response = RedirectResponse(url, status_code=status)
        await self._write(response)

    async def _write(self, response: Response) -> None:
        if self.sent:
            raise ResponseAlreadySentError()
        for key, value in self.headers:
            response.headers.append(key, value)
        self.sent = True
        self._ended_here = True
        await response(self.scope, self._receive, self._send)

    async def send(self, message: Message) -> None:
        if self._ended_here and message["type"].startswith("http.response."):
            logger.debug(f"Dropping {message['type']} sent after the response was ended")
            return
        if message["type"] == "http.response.start":
            self.sent = True
            self.status_code = message["status"]
        await self._send(message)

    async def send_error(self) -> None:
        """Finish an unsent response whose request failed with an error."""
        if self.sent or self.error is None:
            return
        self.status_code = HTTPStatus.INTERNAL_SERVER_ERROR
        self.headers = []
        await self.end(HTTPStatus.INTERNAL_SERVER_ERROR.phrase.encode("utf-8"))
