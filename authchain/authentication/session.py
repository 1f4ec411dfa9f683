import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from pydantic import ValidationError

from authchain.authentication.profile import (
    UserProfile,
    UserProfileEmail,
    UserProfileName,
    UserProfilePhoto,
)
from authchain.types.asgi import Scope

logger = logging.getLogger("authchain.session")

USER_PROFILE_KEY = "userProfile"
RETURN_TO_KEY = "returnTo"

PROFILE_FORMAT_VERSION = 1


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def is_local_path(url: str) -> bool:
    return url.startswith("/") and not url.startswith(("//", "/\\"))


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def restore_user_profile(session: Mapping[str, Any]) -> UserProfile | None:
    """
    Rebuild the profile stored in the session.

    Returns None unless id, displayName and provider are non-empty strings.
    Optional parts are rebuilt only when all their fields are present;
    emails and emailTypes must be parallel lists of the same length.
    """
    data = session.get(USER_PROFILE_KEY)
    if not isinstance(data, Mapping):
        return None

    version = data.get("version", PROFILE_FORMAT_VERSION)
    if version != PROFILE_FORMAT_VERSION:
        logger.warning(f"Ignoring session profile with unknown format version {version!r}")
        return None

    if not all(_non_empty_string(data.get(key)) for key in ("id", "displayName", "provider")):
        return None

    name = None
    family_name, given_name, middle_name = (
        data.get("familyName"),
        data.get("givenName"),
        data.get("middleName"),
    )
    if all(isinstance(part, str) for part in (family_name, given_name, middle_name)):
        name = UserProfileName(
            family_name=family_name,
            given_name=given_name,
            middle_name=middle_name,
        )

    emails = None
    values, types = data.get("emails"), data.get("emailTypes")
    if _is_string_list(values) and _is_string_list(types):
        if len(values) == len(types):
            emails = [
                UserProfileEmail(value=value, type=type_)
                for value, type_ in zip(values, types, strict=True)
            ]
        else:
            logger.warning(
                f"Discarding session emails: {len(values)} addresses for {len(types)} types"
            )

    photos = None
    if _is_string_list(data.get("photos")):
        photos = [UserProfilePhoto(value=value) for value in data["photos"]]

    extended_properties = data.get("extendedProperties")
    if not isinstance(extended_properties, Mapping):
        extended_properties = {}

    try:
        return UserProfile(
            id=data["id"],
            display_name=data["displayName"],
            provider=data["provider"],
            name=name,
            emails=emails,
            photos=photos,
            extended_properties=dict(extended_properties),
        )
    except ValidationError:
        logger.exception("Invalid user profile found in session")
        return None


def store_user_profile(profile: UserProfile, session: MutableMapping[str, Any]) -> None:
    data: dict[str, Any] = {
        "version": PROFILE_FORMAT_VERSION,
        "id": profile.id,
        "displayName": profile.display_name,
        "provider": profile.provider,
    }
    if profile.name is not None:
        data["familyName"] = profile.name.family_name
        data["givenName"] = profile.name.given_name
        data["middleName"] = profile.name.middle_name
    if profile.emails is not None:
        data["emails"] = [email.value for email in profile.emails]
        data["emailTypes"] = [email.type for email in profile.emails]
    if profile.photos is not None:
        data["photos"] = [photo.value for photo in profile.photos]
    if profile.extended_properties:
        data["extendedProperties"] = dict(profile.extended_properties)
    session[USER_PROFILE_KEY] = data


def clear_user_profile(session: MutableMapping[str, Any]) -> None:
    session.pop(USER_PROFILE_KEY, None)


class SessionState:
    """Typed access to the keys the credentials layer keeps in the session."""

    def __init__(self, data: MutableMapping[str, Any]):
        self.data = data

    @classmethod
    def from_scope(cls, scope: Scope) -> "SessionState | None":
        data = scope.get("session")
        if data is None:
            return None
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    @property
    def user_profile(self) -> UserProfile | None:
        return restore_user_profile(self.data)

    @user_profile.setter
    def user_profile(self, profile: UserProfile | None) -> None:
        if profile is None:
            clear_user_profile(self.data)
        else:
            store_user_profile(profile, self.data)

    @property
    def return_to(self) -> str | None:
        value = self.data.get(RETURN_TO_KEY)
        return value if isinstance(value, str) else None

    @return_to.setter
    def return_to(self, url: str | None) -> None:
        if url is None:
            self.remove(RETURN_TO_KEY)
        else:
            self.set(RETURN_TO_KEY, url)

    def pop_return_to(self) -> str | None:
        url = self.return_to
        self.remove(RETURN_TO_KEY)
        if url is not None and not is_local_path(url):
            logger.warning(f"Ignoring return-to URL outside this site: {url!r}")
            return None
        return url
