from authchain.authentication.base import (
    BaseCredentialsPlugin,
    BaseRedirectingPlugin,
    Failure,
    InProgress,
    Outcome,
    Pass,
    Success,
)
from authchain.authentication.cache import ProfileCache
from authchain.authentication.callback import CallbackEndpoint
from authchain.authentication.exceptions import (
    ConfigurationError,
    CredentialsError,
    DuplicatePluginError,
    PluginContractError,
    ResponseAlreadySentError,
)
from authchain.authentication.manager import CredentialsManager
from authchain.authentication.profile import (
    UserProfile,
    UserProfileEmail,
    UserProfileName,
    UserProfilePhoto,
    get_user_profile,
)
from authchain.authentication.registry import PluginRegistry, register_credentials_plugin
from authchain.authentication.response import ResponseWriter
from authchain.authentication.session import SessionState

__all__ = [
    "BaseCredentialsPlugin",
    "BaseRedirectingPlugin",
    "CallbackEndpoint",
    "ConfigurationError",
    "CredentialsError",
    "CredentialsManager",
    "DuplicatePluginError",
    "Failure",
    "InProgress",
    "Outcome",
    "Pass",
    "PluginContractError",
    "PluginRegistry",
    "ProfileCache",
    "ResponseAlreadySentError",
    "ResponseWriter",
    "SessionState",
    "Success",
    "UserProfile",
    "UserProfileEmail",
    "UserProfileName",
    "UserProfilePhoto",
    "get_user_profile",
    "register_credentials_plugin",
]
