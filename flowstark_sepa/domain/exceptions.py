"""Domain-specific exceptions

Only build-time faults live here. Validation problems and incomplete creditor
profiles are returned as values so the caller can show them to the user.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class MissingMandateError(DomainException):
    """A transaction reached the message builder without a debtor mandate"""

    def __init__(self, debtor_name: str):
        super().__init__(f"Debtor {debtor_name!r} has no SEPA mandate")
        self.debtor_name = debtor_name


class InvalidAmountError(DomainException):
    """Amount cannot be collected (non-numeric, zero or negative)"""

    pass


class DocumentIntegrityError(DomainException):
    """Document totals are not consistent with their transactions"""

    pass
