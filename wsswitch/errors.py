"""
Error types for wsswitch.

Every failure is fatal to a single invocation: nothing here is retried, the
CLI reports the message on stderr and exits non-zero.
"""


class SwitchError(Exception):
    """Base class for all wsswitch errors."""


class ConfigError(SwitchError):
    """Required configuration (e.g. the socket path) is missing or invalid."""


class IPCError(SwitchError):
    """Base class for IPC transport failures."""


class ConnectError(IPCError):
    """The window manager socket could not be opened."""


class ProtocolError(IPCError):
    """A reply header had the wrong magic or was cut short."""


class TransportError(IPCError):
    """A read or write on the socket failed or returned too little data."""


class ParseError(SwitchError):
    """A reply body was malformed or did not have the expected shape."""


class FatalError(SwitchError):
    """A logic invariant was violated while planning or rendering."""


class CommandError(FatalError):
    """The window manager reported that a command failed."""
