"""Pre-flight checks for a direct-debit batch

Every rule is evaluated and every violation collected; the caller gets the
whole list in one go, or a green light. Nothing here raises for bad input.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from flowstark_sepa.domain.exceptions import InvalidAmountError
from flowstark_sepa.domain.models import DIRECT_DEBIT, CollectionItem, CreditorData
from flowstark_sepa.utils.formatting import clean_iban, format_date, is_xml_compatible, to_cents
from flowstark_sepa.utils.identifiers import MAX35

IBAN_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}$")
# country + check digits + creditor business code + national identifier
CREDITOR_ID_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{3}[A-Z0-9]{1,28}$")


@dataclass
class ValidationResult:
    """Outcome of batch validation"""

    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _validate_creditor(creditor: CreditorData) -> List[str]:
    errors = []
    if not creditor.name:
        errors.append("Creditor name is missing")
    elif not is_xml_compatible(creditor.name):
        errors.append("Creditor name contains control characters")

    if not creditor.iban:
        errors.append("Creditor IBAN is missing")
    elif not IBAN_PATTERN.match(clean_iban(creditor.iban)):
        errors.append(f"Creditor IBAN {creditor.iban!r} is not valid")

    if not creditor.creditor_scheme_id:
        errors.append("Creditor SEPA scheme identifier (creditorSchemeId) is missing")
    elif not CREDITOR_ID_PATTERN.match(clean_iban(creditor.creditor_scheme_id)):
        errors.append(
            f"Creditor SEPA scheme identifier {creditor.creditor_scheme_id!r} is not valid"
        )
    return errors


def _validate_item(item: CollectionItem, today: date) -> List[str]:
    errors = []
    debtor = item.debtor

    if debtor is None:
        errors.append(f"Item {item.id}: no debtor linked")
    else:
        if not debtor.iban:
            errors.append(f'Debtor "{debtor.name}": no IBAN configured')
        elif not IBAN_PATTERN.match(clean_iban(debtor.iban)):
            errors.append(f'Debtor "{debtor.name}": IBAN {debtor.iban!r} is not valid')

        if debtor.mandate is None:
            errors.append(f'Debtor "{debtor.name}": no SEPA mandate')
        else:
            mandate_id = debtor.mandate.mandate_id
            if len(mandate_id) > MAX35:
                errors.append(
                    f'Debtor "{debtor.name}": mandate id is {len(mandate_id)} characters long '
                    f"(max {MAX35})"
                )
            if debtor.mandate.signature_date > today:
                errors.append(
                    f'Debtor "{debtor.name}": mandate {mandate_id} is signed '
                    f"in the future ({format_date(debtor.mandate.signature_date)})"
                )

        debtor_text = (debtor.name, debtor.fiscal_name, debtor.tax_id)
        if debtor.mandate is not None:
            debtor_text += (debtor.mandate.mandate_id,)
        if not all(is_xml_compatible(text) for text in debtor_text):
            errors.append(f"Debtor {debtor.name!r}: name or identifiers contain control characters")

    if not all(is_xml_compatible(text) for text in (item.id, item.description, item.service_name)):
        errors.append(f"Item {item.id!r}: description or service name contains control characters")

    if item.payment_channel != DIRECT_DEBIT:
        errors.append(f"Item {item.id}: payment channel is not direct debit")

    try:
        if to_cents(item.amount) <= 0:
            errors.append(f"Item {item.id}: amount must be greater than zero")
    except InvalidAmountError:
        errors.append(f"Item {item.id}: amount {item.amount!r} is not a number")

    if item.due_date is None:
        errors.append(f"Item {item.id}: no collection date")

    return errors


def validate_collection(
    creditor: CreditorData,
    items: Sequence[CollectionItem],
    today: Optional[date] = None,
) -> ValidationResult:
    """
    Check creditor and items carry everything a pain.008 file needs.

    Rules:
    - Creditor: name, IBAN and scheme identifier present (and well-formed)
    - Item: linked debtor, direct-debit channel, positive amount, due date
    - Debtor: IBAN and mandate present, mandate id within 35 characters,
      mandate not signed in the future
    - Free text (names, identifiers, descriptions): only characters XML allows

    Returns:
        ValidationResult; `valid` is True only when no rule was broken
    """
    today = today or date.today()
    errors = _validate_creditor(creditor)

    if not items:
        errors.append("No collection items to process")

    for item in items:
        errors.extend(_validate_item(item, today))

    return ValidationResult(errors=errors)


def select_eligible_items(items: Sequence[CollectionItem]) -> List[CollectionItem]:
    """Pending direct-debit items whose debtor has an IBAN and a mandate"""
    return [
        item
        for item in items
        if item.status == "pending"
        and item.payment_channel == DIRECT_DEBIT
        and item.debtor is not None
        and item.debtor.iban
        and item.debtor.mandate is not None
    ]
