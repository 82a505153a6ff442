"""Unit tests for FRST/RCUR resolution"""

from flowstark_sepa.domain.models import SequenceType
from flowstark_sepa.domain.sequencing import count_prior_collections, determine_sequence_type


def test_determine_sequence_type_first(debtor_a):
    """Test debtor with no prior collections is FRST"""
    assert determine_sequence_type(debtor_a, 0) == SequenceType.FRST


def test_determine_sequence_type_recurring(debtor_b):
    """Test any prior collection makes the debtor RCUR"""
    assert determine_sequence_type(debtor_b, 1) == SequenceType.RCUR
    assert determine_sequence_type(debtor_b, 3) == SequenceType.RCUR


def test_count_prior_collections(debtor_a, debtor_b, make_item):
    """Test only paid direct-debit items count towards history"""
    history = [
        make_item("h1", debtor_b, status="paid"),
        make_item("h2", debtor_b, status="paid"),
        make_item("h3", debtor_b, status="pending"),
        make_item("h4", debtor_a, status="paid", payment_channel="cash"),
        make_item("h5", None, status="paid"),
    ]

    counts = count_prior_collections(history)

    assert counts == {"client-b": 2}


def test_count_prior_collections_empty():
    """Test empty history yields empty snapshot"""
    assert count_prior_collections([]) == {}
