"""Custom exception hierarchy for filebot."""


class FileBotError(Exception):
    """Base exception for filebot."""
    pass


class UserError(FileBotError):
    """Raised when a command is used wrongly; the message is sent back to the chat."""
    pass


class TransportError(FileBotError):
    """Raised when a network fetch or attachment encode/decode fails.

    The message is a generic, user-safe reply; the underlying cause is chained.
    """
    pass


class PersistenceError(FileBotError):
    """Raised when the allow-list file cannot be read or written. Logged only."""
    pass


class AuthFailure(FileBotError):
    """Raised when the messaging session cannot authenticate."""
    pass
