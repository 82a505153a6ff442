"""In-memory pain.008 document model and its builder

The builder turns grouped transactions into header / payment block /
transaction records, with every value already formatted-ready (ids, cleaned
IBANs, truncated remittance text). Totals are checked on this model before
anything is serialized.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from flowstark_sepa.config import settings
from flowstark_sepa.domain.exceptions import (
    DocumentIntegrityError,
    InvalidAmountError,
    MissingMandateError,
)
from flowstark_sepa.domain.models import (
    CollectionItem,
    CreditorData,
    DirectDebitTransaction,
    PaymentGroup,
    SequenceType,
)
from flowstark_sepa.utils.formatting import clean_iban, format_date, truncate
from flowstark_sepa.utils.identifiers import IdentifierGenerator

logger = logging.getLogger(__name__)


@dataclass
class TransactionRecord:
    """DrctDbtTxInf"""

    end_to_end_id: str
    amount: Decimal
    mandate_id: str
    mandate_signature_date: date
    debtor_name: str
    debtor_iban: str
    remittance_info: str
    debtor_bic: Optional[str] = None
    debtor_tax_id: Optional[str] = None


@dataclass
class PaymentBlock:
    """PmtInf: one collection date, one sequence type"""

    payment_id: str
    sequence_type: SequenceType
    collection_date: date
    creditor: CreditorData
    number_of_transactions: int
    control_sum: Decimal
    transactions: List[TransactionRecord] = field(default_factory=list)
    batch_booking: bool = True
    local_instrument: str = "CORE"
    payment_method: str = "DD"


@dataclass
class GroupHeader:
    """GrpHdr"""

    message_id: str
    created_at: datetime
    number_of_transactions: int
    control_sum: Decimal
    initiating_party_name: str
    initiating_party_id: str


@dataclass
class Pain008Document:
    header: GroupHeader
    payment_blocks: List[PaymentBlock]
    currency: str = "EUR"

    def check_totals(self) -> None:
        """
        Raise DocumentIntegrityError unless every declared count/sum matches.

        Block figures must equal the sum of their own transactions; header
        figures must equal the sum of the blocks.
        """
        if not self.payment_blocks:
            raise DocumentIntegrityError("Document has no payment blocks")
        for block in self.payment_blocks:
            if not block.transactions:
                raise DocumentIntegrityError(f"Payment block {block.payment_id} is empty")
            actual_sum = sum((t.amount for t in block.transactions), Decimal("0.00"))
            if block.number_of_transactions != len(block.transactions):
                raise DocumentIntegrityError(
                    f"Payment block {block.payment_id} declares {block.number_of_transactions} "
                    f"transactions but holds {len(block.transactions)}"
                )
            if block.control_sum != actual_sum:
                raise DocumentIntegrityError(
                    f"Payment block {block.payment_id} declares control sum {block.control_sum} "
                    f"but its transactions add up to {actual_sum}"
                )

        block_count = sum(b.number_of_transactions for b in self.payment_blocks)
        block_sum = sum((b.control_sum for b in self.payment_blocks), Decimal("0.00"))
        if self.header.number_of_transactions != block_count:
            raise DocumentIntegrityError(
                f"Header declares {self.header.number_of_transactions} transactions "
                f"but payment blocks hold {block_count}"
            )
        if self.header.control_sum != block_sum:
            raise DocumentIntegrityError(
                f"Header declares control sum {self.header.control_sum} "
                f"but payment blocks add up to {block_sum}"
            )


def remittance_text(item: CollectionItem, max_length: int = 140) -> str:
    """Item description, or a service/period summary when there is none"""
    if item.description:
        text = item.description
    else:
        start = format_date(item.service_start) if item.service_start else "N/A"
        end = format_date(item.service_end) if item.service_end else "N/A"
        text = f"Servicio: {item.service_name or 'N/A'} - Periodo: {start} a {end}"
    return truncate(text, max_length)


def _transaction_record(
    txn: DirectDebitTransaction,
    id_generator: IdentifierGenerator,
    remittance_max_length: int,
) -> TransactionRecord:
    debtor = txn.debtor
    mandate = debtor.mandate
    if mandate is None:
        logger.error("Transaction without mandate reached the builder", extra={"item_id": txn.item.id})
        raise MissingMandateError(debtor.name)

    amount = txn.amount
    if amount <= 0:
        raise InvalidAmountError(f"Item {txn.item.id}: amount {amount} cannot be collected")

    return TransactionRecord(
        end_to_end_id=id_generator.end_to_end_id(txn.item.id),
        amount=amount,
        mandate_id=mandate.mandate_id,
        mandate_signature_date=mandate.signature_date,
        debtor_name=debtor.account_holder,
        debtor_iban=clean_iban(debtor.iban),
        remittance_info=remittance_text(txn.item, remittance_max_length),
        debtor_bic=debtor.bic or None,
        debtor_tax_id=debtor.tax_id or None,
    )


def build_document(
    groups: Sequence[PaymentGroup],
    creditor: CreditorData,
    now: Optional[datetime] = None,
    id_generator: Optional[IdentifierGenerator] = None,
    currency: Optional[str] = None,
    local_instrument: Optional[str] = None,
    batch_booking: Optional[bool] = None,
    remittance_max_length: Optional[int] = None,
) -> Pain008Document:
    """
    Build the pain.008 document model from payment groups.

    Raises:
        MissingMandateError: a transaction's debtor has no mandate
        InvalidAmountError: a transaction amount is not collectable
        DocumentIntegrityError: declared totals do not add up
    """
    now = now or datetime.now()
    id_generator = id_generator or IdentifierGenerator(
        prefix=settings.message_id_prefix,
        end_to_end_budget=settings.end_to_end_id_budget,
    )
    currency = currency or settings.currency
    local_instrument = local_instrument or settings.local_instrument
    batch_booking = settings.batch_booking if batch_booking is None else batch_booking
    remittance_max_length = remittance_max_length or settings.remittance_max_length

    blocks = []
    for index, group in enumerate(groups, start=1):
        records = [
            _transaction_record(txn, id_generator, remittance_max_length)
            for txn in group.transactions
        ]
        if not records:
            continue
        blocks.append(
            PaymentBlock(
                payment_id=id_generator.payment_id(now, index, group.sequence_type),
                sequence_type=group.sequence_type,
                collection_date=group.collection_date,
                creditor=creditor,
                number_of_transactions=group.transaction_count,
                control_sum=group.control_sum,
                transactions=records,
                batch_booking=batch_booking,
                local_instrument=local_instrument,
            )
        )

    header = GroupHeader(
        message_id=id_generator.message_id(now),
        created_at=now,
        number_of_transactions=sum(b.number_of_transactions for b in blocks),
        control_sum=sum((b.control_sum for b in blocks), Decimal("0.00")),
        initiating_party_name=creditor.name,
        initiating_party_id=creditor.creditor_scheme_id,
    )

    document = Pain008Document(header=header, payment_blocks=blocks, currency=currency)
    document.check_totals()
    return document
