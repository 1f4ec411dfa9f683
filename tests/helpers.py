from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request

from authchain.authentication import BaseCredentialsPlugin, Outcome, ResponseWriter
from authchain.types.asgi import Message


@dataclass
class Exchange:
    request: Request
    response: ResponseWriter
    sent: list[Message] = field(default_factory=list)

    @property
    def session(self) -> dict[str, Any] | None:
        return self.request.scope.get("session")

    @property
    def status(self) -> int | None:
        for message in self.sent:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    def headers(self, name: str) -> list[str]:
        for message in self.sent:
            if message["type"] == "http.response.start":
                return [
                    value.decode("latin-1")
                    for key, value in message["headers"]
                    if key.decode("latin-1").lower() == name.lower()
                ]
        return []


class ScriptedPlugin(BaseCredentialsPlugin):
    def __init__(
        self,
        outcome: Outcome | None,
        *,
        name: str = "",
        redirecting: bool = False,
        writes: Mapping[str, Any] | None = None,
    ):
        super().__init__()
        self.outcome = outcome
        self.name = name
        self.redirecting = redirecting
        self.writes = writes
        self.calls: list[tuple[Request, ResponseWriter, Mapping[str, Any]]] = []

    async def authenticate(self, request, response, options):
        self.calls.append((request, response, options))
        if self.writes:
            response.set_status(self.writes["status"])
            await response.end(self.writes.get("body", b""))
        return self.outcome
