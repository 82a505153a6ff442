"""Partition transactions into pain.008 payment blocks"""

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Mapping, Sequence, Tuple

from flowstark_sepa.domain.models import (
    CollectionItem,
    DirectDebitTransaction,
    PaymentGroup,
    SequenceType,
)
from flowstark_sepa.domain.sequencing import determine_sequence_type

# FRST block before RCUR block on the same date
_SEQUENCE_ORDER = {
    SequenceType.FRST: 0,
    SequenceType.RCUR: 1,
    SequenceType.OOFF: 2,
    SequenceType.FNAL: 3,
}


def _calendar_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def build_transactions(
    items: Sequence[CollectionItem],
    prior_collections: Mapping[str, int],
) -> List[DirectDebitTransaction]:
    """
    Pair each item with its debtor and resolved sequence type.

    `prior_collections` is read, never updated: every item for the same
    debtor gets the same sequence type within one run. Items without a debtor
    or a due date cannot be collected and are left out.
    """
    transactions = []
    for item in items:
        if item.debtor is None or item.due_date is None:
            continue
        prior = prior_collections.get(item.debtor.id, 0)
        transactions.append(
            DirectDebitTransaction(
                item=item,
                debtor=item.debtor,
                sequence_type=determine_sequence_type(item.debtor, prior),
            )
        )
    return transactions


def group_payments(transactions: Sequence[DirectDebitTransaction]) -> List[PaymentGroup]:
    """
    Group transactions by collection date, then by sequence type.

    Sequence types never mix inside one block. Blocks come out by ascending
    date (FRST before RCUR on the same date); transactions keep input order.
    Empty blocks are never produced.
    """
    buckets: Dict[Tuple[date, SequenceType], List[DirectDebitTransaction]] = defaultdict(list)
    for txn in transactions:
        key = (_calendar_date(txn.item.due_date), txn.sequence_type)
        buckets[key].append(txn)

    ordered_keys = sorted(buckets, key=lambda k: (k[0], _SEQUENCE_ORDER[k[1]]))
    return [
        PaymentGroup(collection_date=key[0], sequence_type=key[1], transactions=buckets[key])
        for key in ordered_keys
    ]
