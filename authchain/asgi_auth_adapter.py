from starlette.requests import Request

from authchain.authentication.manager import CredentialsManager
from authchain.authentication.response import ResponseWriter
from authchain.conf import Settings, get_settings
from authchain.logging import setup_logging
from authchain.types.asgi import ASGIApp, ASGIReceive, ASGISend, Scope


class ASGICredentialsMiddleware:
    def __init__(self, app: ASGIApp, manager: CredentialsManager, *, exclude_paths=None):
        self.app = app
        self.manager = manager
        self.exclude_paths = set(exclude_paths or [])

    @classmethod
    def from_settings(
        cls, app: ASGIApp, settings: Settings | None = None
    ) -> "ASGICredentialsMiddleware":
        settings = settings or get_settings()
        setup_logging(settings)
        return cls(
            app,
            CredentialsManager(settings.auth),
            exclude_paths=settings.auth.get("exclude_paths", []),
        )

    async def __call__(self, scope: Scope, receive: ASGIReceive, send: ASGISend):
        if scope["type"] != "http" or scope["path"] in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        response = ResponseWriter(scope, receive, send)

        async def call_next():
            await self.app(scope, receive, response.send)

        await self.manager.handle(request, response, call_next)
        await response.send_error()
