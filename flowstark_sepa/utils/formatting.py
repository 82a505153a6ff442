"""Value formatting for pain.008 fields"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
from xml.sax.saxutils import escape

from flowstark_sepa.domain.exceptions import InvalidAmountError

CENT = Decimal("0.01")

_XML_QUOTES = {'"': "&quot;", "'": "&apos;"}
_WHITESPACE = re.compile(r"\s+")
# Anything outside the XML 1.0 Char production
_XML_INCOMPATIBLE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def to_cents(amount) -> Decimal:
    """
    Convert an amount to a Decimal rounded half-up to whole cents.

    This is the only rounding applied anywhere, so transaction amounts and the
    block/header control sums built from them always agree: 9.999 -> 10.00.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(amount) -> str:
    """Two decimals, decimal point, no thousands separator: 12.5 -> '12.50'"""
    return f"{to_cents(amount):.2f}"


def format_date(value: date) -> str:
    """Calendar date as YYYY-MM-DD"""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def local_naive(value: datetime) -> datetime:
    """Aware timestamps converted to server-local time with the zone dropped"""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def format_datetime(value: datetime) -> str:
    """Naive local ISO-8601 timestamp truncated to whole seconds"""
    return local_naive(value).replace(microsecond=0).isoformat()


def is_xml_compatible(text: Optional[str]) -> bool:
    """False when text holds NUL, vertical tab or another char XML 1.0 forbids"""
    return not text or _XML_INCOMPATIBLE.search(text) is None


def escape_xml(text: Optional[str]) -> str:
    """Escape & < > " ' for embedding free text in XML"""
    if not text:
        return ""
    return escape(text, _XML_QUOTES)


def clean_iban(iban: Optional[str]) -> str:
    """Strip whitespace and upper-case: 'es91 2100 ...' -> 'ES912100...'"""
    if not iban:
        return ""
    return _WHITESPACE.sub("", iban).upper()


def truncate(text: str, max_length: int) -> str:
    return text[:max_length]
