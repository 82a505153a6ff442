"""Direct-debit remittance generation - validate, sequence, group, build, export"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Mapping, Optional, Sequence

from flowstark_sepa.domain.grouping import build_transactions, group_payments
from flowstark_sepa.domain.models import CollectionItem, OrganizationProfile
from flowstark_sepa.domain.profile import creditor_from_profile
from flowstark_sepa.domain.validation import select_eligible_items, validate_collection
from flowstark_sepa.sepa.document import build_document
from flowstark_sepa.sepa.export import ExportedFile, export_document
from flowstark_sepa.sepa.serializer import render_document
from flowstark_sepa.utils.formatting import local_naive
from flowstark_sepa.utils.identifiers import IdentifierGenerator

logger = logging.getLogger(__name__)

GENERATED = "generated"
VALIDATION_FAILED = "validation_failed"
PROFILE_INCOMPLETE = "profile_incomplete"

PROFILE_INCOMPLETE_MESSAGE = (
    "SEPA data missing from the organization profile: "
    "complete the SEPA IBAN and the creditor scheme identifier in Settings"
)
NO_ELIGIBLE_ITEMS_MESSAGE = (
    "None of the selected items is eligible: they must be pending direct-debit "
    "items whose debtor has an IBAN and a SEPA mandate"
)


@dataclass
class RemittanceResult:
    """Outcome of a generation attempt; `export` is set only when generated"""

    status: str
    errors: List[str] = field(default_factory=list)
    export: Optional[ExportedFile] = None
    transaction_count: int = 0
    control_sum: Decimal = Decimal("0.00")

    @property
    def succeeded(self) -> bool:
        return self.status == GENERATED


def generate_remittance(
    items: Sequence[CollectionItem],
    profile: OrganizationProfile,
    prior_collections: Mapping[str, int],
    now: Optional[datetime] = None,
    id_generator: Optional[IdentifierGenerator] = None,
    skip_ineligible: bool = False,
    today: Optional[date] = None,
) -> RemittanceResult:
    """
    Main entry point: turn due collection items into a pain.008 file.

    Flow:
    1. Derive creditor data from the profile (incomplete -> PROFILE_INCOMPLETE)
    2. Optionally drop ineligible items
    3. Validate creditor and items (any error -> VALIDATION_FAILED)
    4. Resolve FRST/RCUR against the prior-collection snapshot
    5. Group by collection date and sequence type
    6. Build, render and export the document

    Build-time faults (DomainException) propagate to the caller.
    """
    now = local_naive(now) if now else datetime.now()
    today = today or now.date()

    creditor = creditor_from_profile(profile)
    if creditor is None:
        logger.warning("Creditor profile incomplete", extra={"step": "profile"})
        return RemittanceResult(status=PROFILE_INCOMPLETE, errors=[PROFILE_INCOMPLETE_MESSAGE])

    if skip_ineligible:
        selected = select_eligible_items(items)
        if items and not selected:
            logger.warning("No eligible items", extra={"step": "eligibility", "item_count": len(items)})
            return RemittanceResult(status=VALIDATION_FAILED, errors=[NO_ELIGIBLE_ITEMS_MESSAGE])
        items = selected

    validation = validate_collection(creditor, items, today=today)
    if not validation.valid:
        logger.warning(
            "Remittance validation failed",
            extra={"step": "validation", "error_count": len(validation.errors)},
        )
        return RemittanceResult(status=VALIDATION_FAILED, errors=validation.errors)

    transactions = build_transactions(items, prior_collections)
    groups = group_payments(transactions)
    document = build_document(groups, creditor, now=now, id_generator=id_generator)
    xml = render_document(document)

    return RemittanceResult(
        status=GENERATED,
        export=export_document(xml, now.date()),
        transaction_count=document.header.number_of_transactions,
        control_sum=document.header.control_sum,
    )
