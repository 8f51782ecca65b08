"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """A required input is missing, of the wrong type or out of range"""

    pass


class InvalidDecisionError(DomainException):
    """Underwriting decision is incomplete or inconsistent"""

    pass
