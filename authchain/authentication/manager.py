import logging
from http import HTTPStatus

from dynaconf.utils.boxing import DynaBox
from starlette.requests import Request

from authchain.authentication.base import (
    OUTCOME_TYPES,
    BaseCredentialsPlugin,
    Failure,
    InProgress,
    Outcome,
    Success,
)
from authchain.authentication.cache import DEFAULT_CACHE_MAXSIZE, DEFAULT_CACHE_TTL, ProfileCache
from authchain.authentication.callback import CallbackEndpoint
from authchain.authentication.exceptions import PluginContractError
from authchain.authentication.profile import get_user_profile, set_user_profile
from authchain.authentication.redirects import RedirectController
from authchain.authentication.registry import PluginRegistry, get_credentials_plugin
from authchain.authentication.response import ResponseWriter
from authchain.authentication.session import SessionState
from authchain.types.asgi import ASGIApp, CallNext

logger = logging.getLogger("authchain.manager")


def original_url(request: Request) -> str:
    url = request.url
    path = "/" + url.path.lstrip("/\\")
    return f"{path}?{url.query}" if url.query else path


class CredentialsManager:
    """
    Authenticates requests by trying the registered plugins in turn.

    Non-redirecting plugins are tried in registration order until one
    succeeds or fails. When all of them pass and redirecting plugins are
    available, the client is sent to the failure redirect to start a
    redirecting login, and comes back through a callback endpoint built
    with `authenticate`.
    """

    def __init__(self, auth_settings: DynaBox | None = None):
        self.auth_settings = auth_settings if auth_settings is not None else DynaBox({})
        self.options = self.auth_settings.get("options") or DynaBox({})
        self.registry = PluginRegistry(cache_factory=self._build_cache)
        self.redirects = RedirectController(self.options)
        self._setup_plugins()

    def _build_cache(self) -> ProfileCache:
        cache_settings = self.auth_settings.get("cache") or {}
        return ProfileCache(
            maxsize=cache_settings.get("maxsize", DEFAULT_CACHE_MAXSIZE),
            ttl=cache_settings.get("ttl", DEFAULT_CACHE_TTL),
        )

    def _setup_plugins(self):
        enabled_keys = self.auth_settings.get("plugins", [])

        for key in enabled_keys:
            plugin_cls = get_credentials_plugin(key)
            if not plugin_cls:
                raise ValueError(f"Plugin '{key}' is not registered.")

            specific_config = self.auth_settings.get(key, {})
            self.register(plugin_cls(specific_config))

    def register(self, plugin: BaseCredentialsPlugin) -> None:
        self.registry.register(plugin)

    async def run_plugin(
        self, plugin: BaseCredentialsPlugin, request: Request, response: ResponseWriter
    ) -> Outcome:
        outcome = await plugin.authenticate(request, response, self.options)
        if not isinstance(outcome, OUTCOME_TYPES):
            raise PluginContractError(plugin.name or type(plugin).__name__, outcome)
        return outcome

    async def handle(self, request: Request, response: ResponseWriter, call_next: CallNext):
        if self.registry.is_empty():
            logger.error("No credentials plugins registered")
            await call_next()
            return

        if get_user_profile(request) is not None:
            await call_next()
            return

        session = SessionState.from_scope(request.scope)
        if session is not None:
            profile = session.user_profile
            if profile is not None:
                set_user_profile(request, profile)
                await call_next()
                return

        pass_status: int | None = None
        pass_headers = None

        for plugin in self.registry.non_redirecting:
            outcome = await self.run_plugin(plugin, request, response)

            if isinstance(outcome, Success):
                set_user_profile(request, outcome.profile)
                await call_next()
                return

            if isinstance(outcome, Failure):
                await self.redirects.write_failure(response, outcome.status, outcome.headers)
                return

            if isinstance(outcome, InProgress):
                if not response.sent:
                    await self.redirects.issue_unauthorized(response)
                await call_next()
                return

            if outcome.status is not None and pass_status is None:
                pass_status = outcome.status
                pass_headers = outcome.headers

        if session is not None and self.registry.redirecting:
            session.return_to = original_url(request)
            await self.redirects.issue_unauthorized(response)
            return

        logger.error(
            "Authentication failed: the credentials were not recognized by any "
            "non-redirecting plugin, or redirecting authentication has no session configured"
        )
        await self.redirects.write_failure(
            response, pass_status or HTTPStatus.UNAUTHORIZED, pass_headers
        )

    def authenticate(
        self,
        credentials_type: str,
        success_redirect: str | None = None,
        failure_redirect: str | None = None,
        app: ASGIApp | None = None,
    ) -> CallbackEndpoint:
        """
        Build the callback endpoint of a redirecting plugin.

        :param credentials_type: Name of the redirecting plugin.
        :param success_redirect: Where to go after a successful login.
        :param failure_redirect: Where to go after a failed login.
        :param app: Application to continue with once the endpoint is done.
        :return: An ASGI application to mount at the provider callback path.
        """
        return CallbackEndpoint(
            self,
            credentials_type,
            success_redirect=success_redirect,
            failure_redirect=failure_redirect,
            app=app,
        )

    def log_out(self, request: Request) -> None:
        session = SessionState.from_scope(request.scope)
        if session is None:
            return
        set_user_profile(request, None)
        session.user_profile = None
