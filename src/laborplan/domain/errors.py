"""Errors raised by the scheduling engine.

Capacity shortfalls are never errors: they are reported on the results as
unscheduled or remaining hours. Only caller contract violations raise.
"""


class InvalidInputError(ValueError):
    """Raised when the caller passes input the engine cannot work with.

    Examples are non-positive required hours, a malformed date, an
    employee count below one or a non-positive search horizon.

    Attributes:
        field: Name of the offending input, when known.
        value: The rejected value.
    """

    def __init__(self, message: str, field: str = "", value=None):
        super().__init__(message)
        self.field = field
        self.value = value
