from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import HTTPConnection


class UserProfileName(BaseModel):
    family_name: str
    given_name: str
    middle_name: str


class UserProfileEmail(BaseModel):
    value: str
    type: str


class UserProfilePhoto(BaseModel):
    value: str


class UserProfile(BaseModel):
    """
    Authenticated identity produced by a credentials plugin.

    `id` is unique within `provider`, the name of the plugin that
    produced the profile.
    """

    id: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    provider: str = Field(min_length=1)
    name: UserProfileName | None = None
    emails: list[UserProfileEmail] | None = None
    photos: list[UserProfilePhoto] | None = None
    extended_properties: dict[str, Any] = {}


USER_PROFILE_SCOPE_KEY = "user_profile"


def get_user_profile(request: HTTPConnection) -> UserProfile | None:
    return request.scope.get(USER_PROFILE_SCOPE_KEY)


def set_user_profile(request: HTTPConnection, profile: UserProfile | None) -> None:
    if profile is None:
        request.scope.pop(USER_PROFILE_SCOPE_KEY, None)
    else:
        request.scope[USER_PROFILE_SCOPE_KEY] = profile
