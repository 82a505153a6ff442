"""Creditor data derived from the organization profile"""

from typing import Optional

from flowstark_sepa.domain.models import CreditorData, OrganizationProfile

FALLBACK_CREDITOR_NAME = "Empresa"


def creditor_from_profile(profile: OrganizationProfile) -> Optional[CreditorData]:
    """
    Map an organization profile to creditor data.

    Returns None when the SEPA IBAN or the creditor scheme identifier is
    missing, so the user can be sent to complete the profile.
    """
    if not profile.sepa_creditor_id or not profile.sepa_iban:
        return None

    return CreditorData(
        name=profile.commercial_name or profile.name or FALLBACK_CREDITOR_NAME,
        iban=profile.sepa_iban,
        bic=profile.sepa_bic or None,
        creditor_scheme_id=profile.sepa_creditor_id,
    )
