"""HTTP clients for the remote signer and the validator client."""

from .custodian import CustodianProvider
from .exceptions import FetchError, KeySyncError, MutationError, TransportError
from .transport import Transport
from .validator import ValidatorClient

__all__ = [
    "CustodianProvider", "ValidatorClient", "Transport",
    "KeySyncError", "TransportError", "FetchError", "MutationError",
]
