"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from flowstark_sepa.utils.formatting import to_cents

DIRECT_DEBIT = "direct_debit"


class SequenceType(str, Enum):
    """Position of a collection within the debtor's mandate series"""

    FRST = "FRST"  # first of a series
    RCUR = "RCUR"  # recurring
    OOFF = "OOFF"  # one-off
    FNAL = "FNAL"  # final


@dataclass
class DebtorMandate:
    """Debtor's signed authorization to be collected by direct debit"""

    mandate_id: str
    signature_date: date


@dataclass
class Debtor:
    """Client being collected from"""

    id: str
    name: str
    iban: str = ""
    mandate: Optional[DebtorMandate] = None
    tax_id: Optional[str] = None
    bic: Optional[str] = None
    fiscal_name: Optional[str] = None

    @property
    def account_holder(self) -> str:
        """Name that goes on the debit: fiscal name when known"""
        return self.fiscal_name or self.name


@dataclass
class CollectionItem:
    """Amount due from a debtor (a billing ticket)"""

    id: str
    amount: Decimal
    due_date: Optional[date]
    debtor: Optional[Debtor]
    payment_channel: str = DIRECT_DEBIT
    description: str = ""
    status: str = "pending"  # pending | paid | cancelled
    service_name: Optional[str] = None
    service_start: Optional[date] = None
    service_end: Optional[date] = None


@dataclass
class CreditorData:
    """Entity initiating the collection"""

    name: str
    iban: str
    creditor_scheme_id: str
    bic: Optional[str] = None


@dataclass
class OrganizationProfile:
    """Organization profile as kept by the billing application"""

    name: Optional[str] = None  # legal name
    commercial_name: Optional[str] = None
    tax_id: Optional[str] = None
    sepa_iban: Optional[str] = None
    sepa_bic: Optional[str] = None
    sepa_creditor_id: Optional[str] = None


@dataclass
class DirectDebitTransaction:
    """A collection item paired with its debtor and resolved sequence type"""

    item: CollectionItem
    debtor: Debtor
    sequence_type: SequenceType

    @property
    def amount(self) -> Decimal:
        return to_cents(self.item.amount)


@dataclass
class PaymentGroup:
    """Transactions sharing one collection date and one sequence type"""

    collection_date: date
    sequence_type: SequenceType
    transactions: List[DirectDebitTransaction] = field(default_factory=list)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def control_sum(self) -> Decimal:
        return sum((t.amount for t in self.transactions), Decimal("0.00"))
