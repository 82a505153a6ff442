"""pain.008.001.02 XML rendering"""

from typing import List, Optional

from lxml import etree

from flowstark_sepa.domain.exceptions import DocumentIntegrityError
from flowstark_sepa.sepa.document import PaymentBlock, Pain008Document, TransactionRecord
from flowstark_sepa.utils.formatting import (
    clean_iban,
    escape_xml,
    format_amount,
    format_date,
    format_datetime,
)

NS = "urn:iso:std:iso:20022:tech:xsd:pain.008.001.02"
XSI = "http://www.w3.org/2001/XMLSchema-instance"
NSMAP = {None: NS, "xsi": XSI}
NOT_PROVIDED = "NOTPROVIDED"
INDENT = "  "


def _el(parent, tag: str, text: Optional[str] = None, **attrib):
    e = etree.SubElement(parent, f"{{{NS}}}{tag}", **attrib)
    if text is not None:
        try:
            e.text = str(text)
        except ValueError as err:
            raise DocumentIntegrityError(f"<{tag}> text is not XML-compatible: {text!r}") from err
    return e


def _sepa_party_id(parent, wrapper: str, identifier: str) -> None:
    """<Id><{wrapper}><Othr><Id>...</Id><SchmeNm><Prtry>SEPA</Prtry></SchmeNm></Othr></...></Id>"""
    othr = _el(_el(_el(parent, "Id"), wrapper), "Othr")
    _el(othr, "Id", identifier)
    _el(_el(othr, "SchmeNm"), "Prtry", "SEPA")


def _financial_institution(parent, tag: str, bic: Optional[str]) -> None:
    fin = _el(_el(parent, tag), "FinInstnId")
    if bic:
        _el(fin, "BIC", bic)
    else:
        _el(_el(fin, "Othr"), "Id", NOT_PROVIDED)


def _add_transaction(pmt_inf, txn: TransactionRecord, currency: str) -> None:
    tx = _el(pmt_inf, "DrctDbtTxInf")
    _el(_el(tx, "PmtId"), "EndToEndId", txn.end_to_end_id)
    _el(tx, "InstdAmt", format_amount(txn.amount), Ccy=currency)

    mandate = _el(_el(tx, "DrctDbtTx"), "MndtRltdInf")
    _el(mandate, "MndtId", txn.mandate_id)
    _el(mandate, "DtOfSgntr", format_date(txn.mandate_signature_date))
    _el(mandate, "AmdmntInd", "false")

    _financial_institution(tx, "DbtrAgt", txn.debtor_bic)

    debtor = _el(tx, "Dbtr")
    _el(debtor, "Nm", txn.debtor_name)
    if txn.debtor_tax_id:
        _sepa_party_id(debtor, "PrvtId", txn.debtor_tax_id)

    _el(_el(_el(tx, "DbtrAcct"), "Id"), "IBAN", txn.debtor_iban)
    _el(_el(tx, "RmtInf"), "Ustrd", txn.remittance_info)


def _add_payment_block(root, block: PaymentBlock, currency: str) -> None:
    pmt_inf = _el(root, "PmtInf")
    _el(pmt_inf, "PmtInfId", block.payment_id)
    _el(pmt_inf, "PmtMtd", block.payment_method)
    _el(pmt_inf, "BtchBookg", "true" if block.batch_booking else "false")
    _el(pmt_inf, "NbOfTxs", str(block.number_of_transactions))
    _el(pmt_inf, "CtrlSum", format_amount(block.control_sum))

    pmt_tp_inf = _el(pmt_inf, "PmtTpInf")
    _el(_el(pmt_tp_inf, "SvcLvl"), "Cd", "SEPA")
    _el(_el(pmt_tp_inf, "LclInstrm"), "Cd", block.local_instrument)
    _el(pmt_tp_inf, "SeqTp", block.sequence_type.value)

    _el(pmt_inf, "ReqdColltnDt", format_date(block.collection_date))

    creditor = block.creditor
    _el(_el(pmt_inf, "Cdtr"), "Nm", creditor.name)
    _el(_el(_el(pmt_inf, "CdtrAcct"), "Id"), "IBAN", clean_iban(creditor.iban))
    _financial_institution(pmt_inf, "CdtrAgt", creditor.bic)
    _el(pmt_inf, "ChrgBr", "SLEV")
    _sepa_party_id(_el(pmt_inf, "CdtrSchmeId"), "PrvtId", creditor.creditor_scheme_id)

    for txn in block.transactions:
        _add_transaction(pmt_inf, txn, currency)


def to_element_tree(document: Pain008Document):
    """Build the lxml tree for a document"""
    root = etree.Element(f"{{{NS}}}Document", nsmap=NSMAP)
    initn = _el(root, "CstmrDrctDbtInitn")

    header = document.header
    grp_hdr = _el(initn, "GrpHdr")
    _el(grp_hdr, "MsgId", header.message_id)
    _el(grp_hdr, "CreDtTm", format_datetime(header.created_at))
    _el(grp_hdr, "NbOfTxs", str(header.number_of_transactions))
    _el(grp_hdr, "CtrlSum", format_amount(header.control_sum))
    initg_pty = _el(grp_hdr, "InitgPty")
    _el(initg_pty, "Nm", header.initiating_party_name)
    _sepa_party_id(initg_pty, "OrgId", header.initiating_party_id)

    for block in document.payment_blocks:
        _add_payment_block(initn, block, document.currency)

    return root


def _write(element, lines: List[str], depth: int) -> None:
    # lxml leaves quotes raw in text nodes; escape_xml encodes all five
    # metacharacters wherever free text lands.
    pad = INDENT * depth
    tag = etree.QName(element).localname
    attrs = ""
    if depth == 0:
        for prefix, uri in element.nsmap.items():
            name = f"xmlns:{prefix}" if prefix else "xmlns"
            attrs += f' {name}="{escape_xml(uri)}"'
    for name, value in element.attrib.items():
        attrs += f' {name}="{escape_xml(value)}"'

    if len(element):
        lines.append(f"{pad}<{tag}{attrs}>")
        for child in element:
            _write(child, lines, depth + 1)
        lines.append(f"{pad}</{tag}>")
    else:
        lines.append(f"{pad}<{tag}{attrs}>{escape_xml(element.text)}</{tag}>")


def render_document(document: Pain008Document) -> str:
    """
    Serialize a document to pain.008.001.02 XML text.

    Totals are re-checked first; the output is parsed back once so a
    malformed file never leaves this function.
    """
    document.check_totals()
    lines = ['<?xml version="1.0" encoding="UTF-8"?>']
    _write(to_element_tree(document), lines, 0)
    xml = "\n".join(lines) + "\n"

    try:
        etree.fromstring(xml.encode("utf-8"))
    except etree.XMLSyntaxError as e:
        raise DocumentIntegrityError(f"Rendered document is not well-formed XML: {e}") from e
    return xml
