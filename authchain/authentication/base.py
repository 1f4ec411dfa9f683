from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from dynaconf.utils.boxing import DynaBox
from starlette.requests import Request

from authchain.authentication.cache import ProfileCache
from authchain.authentication.profile import UserProfile
from authchain.authentication.response import ResponseWriter

Headers = Mapping[str, str]


@dataclass(frozen=True)
class Success:
    profile: UserProfile


@dataclass(frozen=True)
class Failure:
    status: int | None = None
    headers: Headers | None = None


@dataclass(frozen=True)
class Pass:
    status: int | None = None
    headers: Headers | None = None


@dataclass(frozen=True)
class InProgress:
    pass


type Outcome = Success | Failure | Pass | InProgress

OUTCOME_TYPES = (Success, Failure, Pass, InProgress)


class BaseCredentialsPlugin(ABC):
    """
    Framework-agnostic credentials plugin.

    Non-redirecting plugins validate the credentials carried by the current
    request. Redirecting plugins drive a multi request flow through an
    external identity provider and are looked up by `name`.
    """

    name: str = ""
    redirecting: bool = False

    def __init__(self, config: DynaBox | None = None, *, users_cache: ProfileCache | None = None):
        self.config = config if config is not None else DynaBox({})
        self.users_cache = users_cache

    @abstractmethod
    async def authenticate(
        self,
        request: Request,
        response: ResponseWriter,
        options: Mapping[str, Any],
    ) -> Outcome:
        """
        Try to authenticate the request.

        :param request: The incoming request.
        :param response: The response, for plugins that write to it themselves.
        :param options: The options shared by every plugin.
        :return: Exactly one outcome.
        """
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} redirecting={self.redirecting}>"


class BaseRedirectingPlugin(BaseCredentialsPlugin):
    redirecting: bool = True

    def __init__(self, config: DynaBox | None = None):
        if not self.name:
            raise ValueError(f"{type(self).__name__} must define a name.")
        super().__init__(config)
