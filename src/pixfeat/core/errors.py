"""Errors raised by the detectors."""


class PixfeatError(ValueError):
    """Base class for rejected inputs and parameters."""


class InvalidInputError(PixfeatError):
    """The pixel buffer is empty, malformed or holds invalid values."""


class ParameterOutOfRangeError(PixfeatError):
    """A detector parameter lies outside its accepted range."""
