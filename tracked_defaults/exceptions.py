class TrackingException(Exception):
    """Base class for all tracked-defaults exceptions."""
    pass

class WrongTypeError(TrackingException):
    """Raised when a value does not fit the typed slot it is written to or read from."""
    def __init__(self, message="WRONGTYPE Operation against a key holding the wrong kind of value"):
        super().__init__(message)

class ConfigurationError(TrackingException):
    """Raised for invalid settings, e.g. an empty reserved timestamp prefix."""
    pass

class ParserError(TrackingException):
    """Raised when there is an error in command parsing."""
    pass
