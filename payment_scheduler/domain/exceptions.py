"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidObligationError(DomainException):
    """Obligation record is malformed and cannot be scheduled"""

    def __init__(self, message: str, obligation_id=None):
        super().__init__(message)
        self.obligation_id = obligation_id


class MissingInputError(DomainException):
    """Required engine input is absent (caller contract violation)"""

    pass


class ScheduleNotFoundError(DomainException):
    """Referenced payment schedule does not exist"""

    pass


class ObligationNotFoundError(DomainException):
    """Referenced payment item does not exist"""

    pass
