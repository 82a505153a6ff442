"""FRST/RCUR resolution from a debtor's collection history"""

from collections import Counter
from typing import Dict, Iterable

from flowstark_sepa.domain.models import DIRECT_DEBIT, CollectionItem, Debtor, SequenceType


def determine_sequence_type(debtor: Debtor, prior_collections: int) -> SequenceType:
    """
    FRST when the debtor has never been successfully collected by direct
    debit, RCUR otherwise.

    Depends only on history from before the current run: two new items for a
    debtor with no history are both FRST.
    """
    if prior_collections > 0:
        return SequenceType.RCUR
    return SequenceType.FRST


def count_prior_collections(history: Iterable[CollectionItem]) -> Dict[str, int]:
    """Paid direct-debit items per debtor id, as a snapshot taken before sequencing"""
    counts = Counter(
        item.debtor.id
        for item in history
        if item.status == "paid"
        and item.payment_channel == DIRECT_DEBIT
        and item.debtor is not None
        and item.debtor.id
    )
    return dict(counts)
