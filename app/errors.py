"""Error taxonomy shared by the record store, the session and the screens."""


class PassMngError(Exception):
    """Base class for every error raised by passmng."""


class AuthenticationError(PassMngError):
    """The passphrase does not unlock the existing store."""


class StoreIOError(PassMngError, IOError):
    """A read or write against the record store failed."""


class PreconditionViolation(PassMngError):
    """An operation was attempted without the state it needs (e.g. no selection)."""


class ClipboardError(PassMngError):
    """The clipboard refused the value. Never fatal."""
