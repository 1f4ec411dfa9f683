import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

from starlette.requests import Request

from authchain.authentication.base import InProgress, Success
from authchain.authentication.exceptions import ConfigurationError
from authchain.authentication.response import ResponseWriter
from authchain.authentication.session import SessionState
from authchain.types.asgi import ASGIApp, ASGIReceive, ASGISend, CallNext, Scope

if TYPE_CHECKING:  # pragma: no cover
    from authchain.authentication.manager import CredentialsManager

logger = logging.getLogger("authchain.callback")

NO_SESSION_ERROR = (
    "The server was not configured properly: no session found for redirecting authentication"
)


class CallbackEndpoint:
    """
    Completes the login flow of one redirecting plugin.

    Mount it at the path the identity provider redirects back to. `app`,
    when given, runs after the endpoint the way the next handler of a
    router would.
    """

    def __init__(
        self,
        manager: "CredentialsManager",
        credentials_type: str,
        *,
        success_redirect: str | None = None,
        failure_redirect: str | None = None,
        app: ASGIApp | None = None,
    ):
        self.manager = manager
        self.credentials_type = credentials_type
        self.success_redirect = success_redirect
        self.failure_redirect = failure_redirect
        self.app = app

    async def __call__(self, scope: Scope, receive: ASGIReceive, send: ASGISend):
        request = Request(scope, receive)
        response = ResponseWriter(scope, receive, send)

        async def call_next():
            if self.app is not None:
                await self.app(scope, receive, response.send)

        await self.handle(request, response, call_next)
        if self.app is None and not response.sent and response.error is None:
            response.set_status(HTTPStatus.NO_CONTENT)
            await response.end()
        await response.send_error()

    async def handle(self, request: Request, response: ResponseWriter, call_next: CallNext):
        session = SessionState.from_scope(request.scope)
        if session is None:
            logger.error(NO_SESSION_ERROR)
            response.error = ConfigurationError(NO_SESSION_ERROR)
            return

        redirects = self.manager.redirects
        plugin = self.manager.registry.get_redirecting(self.credentials_type)
        if plugin is None:
            logger.warning(f"No redirecting plugin named '{self.credentials_type}' is registered")
            await redirects.write_failure(response)
            await call_next()
            return

        outcome = await self.manager.run_plugin(plugin, request, response)

        if isinstance(outcome, Success):
            session.user_profile = outcome.profile
            redirect = session.pop_return_to()
            await redirects.issue_authorized(response, redirect or self.success_redirect)
            await call_next()
        elif isinstance(outcome, InProgress):
            await call_next()
        else:
            await redirects.issue_unauthorized(response, self.failure_redirect)
