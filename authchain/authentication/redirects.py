import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from authchain.authentication.exceptions import ResponseAlreadySentError
from authchain.authentication.response import ResponseWriter

logger = logging.getLogger("authchain.redirects")

WRITE_ERRORS = (ResponseAlreadySentError, OSError, UnicodeEncodeError)


class RedirectController:
    def __init__(self, options: Mapping[str, Any]):
        self.options = options

    async def issue_unauthorized(self, response: ResponseWriter, path: str | None = None) -> None:
        redirect = path or self.options.get("failure_redirect")
        try:
            if redirect:
                await response.redirect(redirect)
            else:
                response.set_status(HTTPStatus.UNAUTHORIZED)
                await response.end()
        except WRITE_ERRORS as e:
            logger.error("Failed to redirect unauthorized request")
            response.error = e

    async def issue_authorized(self, response: ResponseWriter, path: str | None = None) -> None:
        redirect = path or self.options.get("success_redirect")
        if not redirect:
            return
        try:
            await response.redirect(redirect)
        except WRITE_ERRORS as e:
            logger.error("Failed to redirect successfully authorized request")
            response.error = e

    async def write_failure(
        self,
        response: ResponseWriter,
        status: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        for key, value in (headers or {}).items():
            response.append_header(key, value)
        response.set_status(status or HTTPStatus.UNAUTHORIZED)
        try:
            await response.end()
        except WRITE_ERRORS as e:
            logger.error("Failed to send response")
            response.error = e
