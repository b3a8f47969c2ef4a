from __future__ import annotations


class BatowlError(Exception):
    """Base class for every error raised by batowl."""


class ConfigParseError(BatowlError, ValueError):
    """Malformed interval/duration input. Recoverable: the prompt asks again."""


class ProbeError(BatowlError):
    """The battery level could not be read."""


class TerminalModeError(BatowlError):
    """The controlling terminal could not be switched into or out of raw mode."""


class RenderError(BatowlError):
    """The chart could not be produced."""
