class CredentialsError(Exception):
    pass


class ConfigurationError(CredentialsError):
    pass


class DuplicatePluginError(ConfigurationError):
    def __init__(self, name: str):
        super().__init__(f"A redirecting plugin named '{name}' is already registered.")
        self.name = name


class PluginContractError(CredentialsError):
    def __init__(self, plugin_name: str, result: object):
        super().__init__(
            f"Plugin '{plugin_name}' returned {type(result).__name__!r} instead of an Outcome."
        )
        self.plugin_name = plugin_name
        self.result = result


class ResponseAlreadySentError(CredentialsError):
    def __init__(self):
        super().__init__("The response has already been sent.")
