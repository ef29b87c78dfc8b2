from enum import Enum


class AuthState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    SIGNED_IN = "signed_in"


class AuthMethod(Enum):
    WALLET = "wallet"
    WEBAUTHN = "webauthn"


class ServerOperation(Enum):
    NONCE = "nonce"
    LOGIN = "login"
    LOGOUT = "logout"


DEFAULT_ROUTE_PATHS = {
    ServerOperation.NONCE: "/ssx-nonce",
    ServerOperation.LOGIN: "/ssx-login",
    ServerOperation.LOGOUT: "/ssx-logout",
}

DEFAULT_ROUTE_METHODS = {
    ServerOperation.NONCE: "GET",
    ServerOperation.LOGIN: "POST",
    ServerOperation.LOGOUT: "POST",
}

# Namespace of the delegation extension; its presence sets `daoLogin`.
DELEGATION_REGISTRY_NAMESPACE = "delegationRegistry"
