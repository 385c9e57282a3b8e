# core/exceptions.py - Domain errors surfaced to API clients as 400 responses


class DomainError(Exception):
    """A request that breaks a school rule (capacity, duplicate assignment...)"""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class CapacityExceeded(DomainError):
    pass


class DuplicateAssignment(DomainError):
    pass
