"""Exception types shared across slamgeo."""


class ContractViolation(ValueError):
    """
    Raised when an input breaks a documented precondition.

    Examples are scan buffers whose record width is not one of the supported
    encodings, correspondence sets of different lengths, or an ENU
    conversion requested without an origin. The call fails before producing
    any output; data is never truncated or reinterpreted silently.
    """
