class SSXAuthError(Exception):
    """Base class for every error raised by ssx_auth."""
    pass


class ProviderConnectionError(SSXAuthError):
    """Raised when the wallet provider cannot be created or refuses access."""
    pass


class SessionBuilderError(SSXAuthError):
    """Raised when the session builder fails to initialize or build."""
    pass


class SessionKeyUnavailable(SessionBuilderError):
    """Raised when the session builder did not produce a session key."""
    pass


class ServerError(SSXAuthError):
    """Raised when a round-trip with the verifier server fails."""
    pass


class ServerNonceError(ServerError):
    pass


class ServerLoginError(ServerError):
    pass


class ServerLogoutError(ServerError):
    pass


class InvalidAlgorithmList(SSXAuthError, ValueError):
    """Raised when an explicit, empty public key algorithm list is configured."""
    pass


class OperationNotImplemented(SSXAuthError, NotImplementedError):
    """Raised by operations that are deliberately not implemented."""
    pass


class InvalidStateTransition(SSXAuthError):
    """Raised when an operation is not valid in the strategy's current state."""
    pass


class ConfigurationError(SSXAuthError):
    """Raised when a required collaborator or setting is missing."""
    pass
