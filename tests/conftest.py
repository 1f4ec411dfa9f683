import asyncio
from typing import Any

import pytest
from dynaconf import Dynaconf
from starlette.requests import Request

from authchain.authentication import (
    Outcome,
    ResponseWriter,
    UserProfile,
    UserProfileEmail,
    UserProfileName,
    UserProfilePhoto,
)
from authchain.conf import Settings
from authchain.types.asgi import ASGIReceive, ASGISend, Message, Scope
from tests.helpers import Exchange, ScriptedPlugin
from tests.types import (
    ExchangeFactory,
    PluginFactory,
    ProfileFactory,
    ReceiveFactory,
    ScopeFactory,
    SendFactory,
    SettingsFactory,
)


@pytest.fixture(scope="session")
def settings_factory() -> SettingsFactory:
    def _get_settings(
        logging: dict | None = None,
        auth: dict | None = None,
    ) -> Settings:
        logging = logging or {
            "debug": True,
            "rich": False,
        }
        auth = auth or {
            "plugins": [],
            "options": {
                "failure_redirect": "/login",
                "success_redirect": "/home",
            },
            "cache": {"maxsize": 10, "ttl": 60},
            "exclude_paths": ["/login", "/auth/callback"],
        }
        settings = Dynaconf(
            environments=True,
            settings_files=[],
            ENV_FOR_DYNACONF="testing",
            LOGGING=logging,
            AUTH=auth,
        )

        return settings

    return _get_settings


@pytest.fixture()
def profile_factory() -> ProfileFactory:
    def _factory(**overrides: Any) -> UserProfile:
        data: dict[str, Any] = {
            "id": "1234",
            "display_name": "Peter Parker",
            "provider": "dummy",
        }
        data.update(overrides)
        return UserProfile(**data)

    return _factory


@pytest.fixture()
def full_profile(profile_factory: ProfileFactory) -> UserProfile:
    return profile_factory(
        name=UserProfileName(family_name="Parker", given_name="Peter", middle_name="Benjamin"),
        emails=[
            UserProfileEmail(value="peter@dailybugle.com", type="work"),
            UserProfileEmail(value="spidey@example.com", type="home"),
        ],
        photos=[UserProfilePhoto(value="https://example.com/peter.png")],
        extended_properties={"team": "avengers", "level": 3},
    )


@pytest.fixture()
def plugin_factory() -> PluginFactory:
    def _factory(
        outcome: Outcome | None = None,
        *,
        name: str = "",
        redirecting: bool = False,
        writes=None,
    ) -> ScriptedPlugin:
        return ScriptedPlugin(outcome, name=name, redirecting=redirecting, writes=writes)

    return _factory


@pytest.fixture()
def scope_factory() -> ScopeFactory:
    def _factory(
        path: str = "/private",
        query_string: bytes = b"",
        headers: list[tuple[bytes, bytes]] | None = None,
        session: dict[str, Any] | None = None,
    ) -> Scope:
        scope: Scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": path,
            "raw_path": path.encode("latin-1"),
            "query_string": query_string,
            "headers": headers or [],
        }
        if session is not None:
            scope["session"] = session
        return scope

    return _factory


@pytest.fixture
def receive_factory() -> ReceiveFactory:
    def _factory(messages: list[Message] | None = None) -> ASGIReceive:
        if not messages:
            messages = [{"type": "http.request", "body": b"", "more_body": False}]

        class Receiver:
            def __init__(self, messages: list[Message]):
                self.messages = messages

            async def __call__(self):
                await asyncio.sleep(0)
                try:
                    return self.messages.pop(0)
                except Exception:
                    return

        return Receiver(messages)

    return _factory


@pytest.fixture
def send_factory() -> SendFactory:
    def _factory(collected: list[Message]) -> ASGISend:
        async def send(message: Message) -> None:
            await asyncio.sleep(0)
            collected.append(message)

        return send

    return _factory


@pytest.fixture()
def exchange_factory(
    scope_factory: ScopeFactory,
    receive_factory: ReceiveFactory,
    send_factory: SendFactory,
) -> ExchangeFactory:
    def _factory(
        path: str = "/private",
        query_string: bytes = b"",
        headers: list[tuple[bytes, bytes]] | None = None,
        session: dict[str, Any] | None = None,
    ) -> Exchange:
        scope = scope_factory(path, query_string, headers, session)
        receive = receive_factory()
        sent: list[Message] = []
        return Exchange(
            request=Request(scope, receive),
            response=ResponseWriter(scope, receive, send_factory(sent)),
            sent=sent,
        )

    return _factory
