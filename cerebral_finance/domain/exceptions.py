"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Balance, APR or percentage is negative or not a number"""

    pass


class RecordNotFoundError(DomainException):
    """Requested card, debt, asset or goal does not exist for this user"""

    pass
