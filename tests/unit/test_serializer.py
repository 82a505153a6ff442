"""Unit tests for pain.008 XML rendering"""

import random
import pytest
from datetime import date
from decimal import Decimal
from lxml import etree
from flowstark_sepa.domain.exceptions import DocumentIntegrityError
from flowstark_sepa.domain.grouping import build_transactions, group_payments
from flowstark_sepa.sepa.document import build_document
from flowstark_sepa.sepa.serializer import render_document
from flowstark_sepa.utils.identifiers import IdentifierGenerator

NS = {"p": "urn:iso:std:iso:20022:tech:xsd:pain.008.001.02"}


def _render(items, creditor, now, prior=None, rng_seed=42):
    groups = group_payments(build_transactions(items, prior or {}))
    generator = IdentifierGenerator(rng=random.Random(rng_seed))
    return render_document(build_document(groups, creditor, now=now, id_generator=generator))


def _text(node, path):
    return node.findtext(path, namespaces=NS)


def test_render_document_header(creditor, debtor_a, debtor_b, make_item, fixed_now):
    """Test group header values and structure"""
    items = [make_item("a1", debtor_a, amount="12.5"), make_item("b1", debtor_b, amount="20")]

    xml = _render(items, creditor, fixed_now, {"client-b": 3})
    root = etree.fromstring(xml.encode("utf-8"))

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<Document')
    header = root.find("p:CstmrDrctDbtInitn/p:GrpHdr", namespaces=NS)
    assert _text(header, "p:CreDtTm") == "2025-02-20T09:30:00"
    assert _text(header, "p:NbOfTxs") == "2"
    assert _text(header, "p:CtrlSum") == "32.50"
    assert _text(header, "p:InitgPty/p:Nm") == "Gimnasio Norte S.L."
    assert _text(header, "p:InitgPty/p:Id/p:OrgId/p:Othr/p:Id") == "ES12000B12345678"


def test_render_document_payment_blocks(creditor, debtor_a, debtor_b, make_item, fixed_now):
    """Test one PmtInf per date/sequence pair with its own totals"""
    items = [
        make_item("a1", debtor_a, amount="30.00"),
        make_item("a2", debtor_a, amount="30.00"),
        make_item("b1", debtor_b, amount="45.50"),
    ]

    root = etree.fromstring(_render(items, creditor, fixed_now, {"client-b": 3}).encode("utf-8"))
    blocks = root.findall(".//p:PmtInf", namespaces=NS)

    assert [_text(b, "p:PmtTpInf/p:SeqTp") for b in blocks] == ["FRST", "RCUR"]
    assert [_text(b, "p:NbOfTxs") for b in blocks] == ["2", "1"]
    assert [_text(b, "p:CtrlSum") for b in blocks] == ["60.00", "45.50"]
    first = blocks[0]
    assert _text(first, "p:PmtMtd") == "DD"
    assert _text(first, "p:BtchBookg") == "true"
    assert _text(first, "p:PmtTpInf/p:SvcLvl/p:Cd") == "SEPA"
    assert _text(first, "p:PmtTpInf/p:LclInstrm/p:Cd") == "CORE"
    assert _text(first, "p:ReqdColltnDt") == "2025-03-01"
    assert _text(first, "p:CdtrAcct/p:Id/p:IBAN") == "ES9121000418450200051332"
    assert _text(first, "p:CdtrAgt/p:FinInstnId/p:BIC") == "CAIXESBBXXX"
    assert _text(first, "p:ChrgBr") == "SLEV"
    assert _text(first, "p:CdtrSchmeId/p:Id/p:PrvtId/p:Othr/p:Id") == "ES12000B12345678"
    # creditor identity appears once per block, never per transaction
    assert len(first.findall(".//p:Cdtr", namespaces=NS)) == 1


def test_render_document_transaction(creditor, debtor_a, make_item, fixed_now):
    """Test DrctDbtTxInf fields, NOTPROVIDED agent and debtor tax id"""
    items = [make_item("ticket-0001", debtor_a, amount="12.5", description="Cuota marzo")]

    root = etree.fromstring(_render(items, creditor, fixed_now).encode("utf-8"))
    tx = root.find(".//p:DrctDbtTxInf", namespaces=NS)

    assert _text(tx, "p:PmtId/p:EndToEndId") == "E2E-ticket-0001"
    amount = tx.find("p:InstdAmt", namespaces=NS)
    assert amount.text == "12.50"
    assert amount.get("Ccy") == "EUR"
    assert _text(tx, "p:DrctDbtTx/p:MndtRltdInf/p:MndtId") == "MANDATE-A-001"
    assert _text(tx, "p:DrctDbtTx/p:MndtRltdInf/p:DtOfSgntr") == "2024-11-05"
    assert _text(tx, "p:DrctDbtTx/p:MndtRltdInf/p:AmdmntInd") == "false"
    assert _text(tx, "p:DbtrAgt/p:FinInstnId/p:Othr/p:Id") == "NOTPROVIDED"
    assert _text(tx, "p:Dbtr/p:Nm") == "Ana Garcia"
    assert _text(tx, "p:Dbtr/p:Id/p:PrvtId/p:Othr/p:Id") == "12345678Z"
    assert _text(tx, "p:DbtrAcct/p:Id/p:IBAN") == "ES7921000813610123456789"
    assert _text(tx, "p:RmtInf/p:Ustrd") == "Cuota marzo"


def test_render_document_escapes_free_text(creditor, debtor_a, make_item, fixed_now):
    """Test metacharacters in names and descriptions are entity-encoded"""
    debtor_a.name = "O'Brien & Sons"
    items = [make_item("a1", debtor_a, description='Plan <Premium> & "Plus"')]

    xml = _render(items, creditor, fixed_now)

    assert "<Ustrd>Plan &lt;Premium&gt; &amp; &quot;Plus&quot;</Ustrd>" in xml
    assert "<Nm>O&apos;Brien &amp; Sons</Nm>" in xml
    assert '"Plus"' not in xml
    root = etree.fromstring(xml.encode("utf-8"))
    assert _text(root, ".//p:RmtInf/p:Ustrd") == 'Plan <Premium> & "Plus"'


def test_render_document_is_deterministic(creditor, debtor_a, debtor_b, make_item, fixed_now):
    """Test same inputs, timestamp and seed give identical bytes"""
    items = [make_item("a1", debtor_a), make_item("b1", debtor_b, due_date=date(2025, 3, 5))]

    assert _render(items, creditor, fixed_now) == _render(items, creditor, fixed_now)


def test_render_document_rejects_inconsistent_totals(creditor, debtor_a, make_item, fixed_now, id_generator):
    groups = group_payments(build_transactions([make_item("a1", debtor_a)], {}))
    document = build_document(groups, creditor, now=fixed_now, id_generator=id_generator)
    document.header.control_sum = Decimal("1.00")

    with pytest.raises(DocumentIntegrityError):
        render_document(document)


def test_render_document_rejects_empty_document(creditor, debtor_a, make_item, fixed_now, id_generator):
    groups = group_payments(build_transactions([make_item("a1", debtor_a)], {}))
    document = build_document(groups, creditor, now=fixed_now, id_generator=id_generator)
    document.payment_blocks = []

    with pytest.raises(DocumentIntegrityError):
        render_document(document)


def test_render_document_control_character_is_integrity_error(creditor, debtor_a, make_item, fixed_now, id_generator):
    """Test text lxml refuses surfaces as a domain fault, not a bare ValueError"""
    groups = group_payments(build_transactions([make_item("a1", debtor_a)], {}))
    document = build_document(groups, creditor, now=fixed_now, id_generator=id_generator)
    document.payment_blocks[0].transactions[0].remittance_info = "Cuota\x0bmarzo"

    with pytest.raises(DocumentIntegrityError, match="Ustrd"):
        render_document(document)
