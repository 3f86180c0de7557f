"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InstallmentValidationError(DomainException):
    """Request would produce an invalid entry or schedule; raised before any write"""

    pass


class InvalidPeriodIndexError(InstallmentValidationError):
    """Requested installment period is outside [1, months]"""

    pass


class EntryNotFoundError(DomainException):
    """Ledger entry does not exist in the workspace"""

    pass


class ScheduleIntegrityError(DomainException):
    """Persisted schedule does not match the parent after a write"""

    pass


class CorruptEntryError(DomainException):
    """Stored row has a field combination that maps to no entry role"""

    pass
