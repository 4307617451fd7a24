"""Exceptions raised by the analysis core."""


class CajonCoachError(Exception):
    """Base exception for cajoncoach."""

    code: str = "E_UNKNOWN"


class DecodeError(CajonCoachError):
    """Audio could not be decoded (corrupt, empty or unsupported container)."""

    code = "E_DECODE"


class InvalidParameterError(CajonCoachError, ValueError):
    """A parameter is outside its valid domain (e.g. BPM <= 0)."""

    code = "E_INVALID_PARAMETER"


class HistoryError(CajonCoachError):
    """The practice history store is unreadable."""

    code = "E_HISTORY"
