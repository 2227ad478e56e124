"""keysync: keeps a validator client's remote keys in step with a remote signer."""

from ._version import __version__

__all__ = ["__version__"]
