"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from flowstark_sepa.domain.models import (
    DIRECT_DEBIT,
    CollectionItem,
    Debtor,
    DebtorMandate,
    OrganizationProfile,
)


class MandateSchema(BaseModel):
    """Debtor's SEPA mandate"""

    mandate_id: str = Field(..., min_length=1)
    signature_date: date

    def to_domain(self) -> DebtorMandate:
        return DebtorMandate(mandate_id=self.mandate_id, signature_date=self.signature_date)


class DebtorSchema(BaseModel):
    """Client being collected from"""

    id: str
    name: str
    iban: str = ""
    mandate: Optional[MandateSchema] = None
    tax_id: Optional[str] = None
    bic: Optional[str] = None
    fiscal_name: Optional[str] = None

    def to_domain(self) -> Debtor:
        return Debtor(
            id=self.id,
            name=self.name,
            iban=self.iban,
            mandate=self.mandate.to_domain() if self.mandate else None,
            tax_id=self.tax_id,
            bic=self.bic,
            fiscal_name=self.fiscal_name,
        )


class CollectionItemSchema(BaseModel):
    """Billing ticket to be collected"""

    id: str
    # Range checks happen in the domain validator so they are reported with the rest
    amount: Decimal
    due_date: Optional[date] = None
    debtor: Optional[DebtorSchema] = None
    payment_channel: str = DIRECT_DEBIT
    description: str = ""
    status: str = "pending"
    service_name: Optional[str] = None
    service_start: Optional[date] = None
    service_end: Optional[date] = None

    def to_domain(self) -> CollectionItem:
        return CollectionItem(
            id=self.id,
            amount=self.amount,
            due_date=self.due_date,
            debtor=self.debtor.to_domain() if self.debtor else None,
            payment_channel=self.payment_channel,
            description=self.description,
            status=self.status,
            service_name=self.service_name,
            service_start=self.service_start,
            service_end=self.service_end,
        )


class OrganizationProfileSchema(BaseModel):
    """Organization profile fields relevant to SEPA"""

    name: Optional[str] = None
    commercial_name: Optional[str] = None
    tax_id: Optional[str] = None
    sepa_iban: Optional[str] = None
    sepa_bic: Optional[str] = None
    sepa_creditor_id: Optional[str] = None

    def to_domain(self) -> OrganizationProfile:
        return OrganizationProfile(**self.model_dump())


class RemittanceRequest(BaseModel):
    """Request body for POST /v1/remittances and /v1/remittances/validate"""

    profile: OrganizationProfileSchema
    items: List[CollectionItemSchema]
    history: List[CollectionItemSchema] = Field(
        default_factory=list, description="Past items used to count prior paid direct debits"
    )
    prior_collections: Dict[str, int] = Field(
        default_factory=dict, description="Paid direct debits per debtor id; overrides history counts"
    )
    skip_ineligible: bool = False
    generated_at: Optional[datetime] = None


class ValidationResponse(BaseModel):
    """Response for POST /v1/remittances/validate"""

    valid: bool
    errors: List[str]


class RemittanceErrorResponse(BaseModel):
    """Error body for POST /v1/remittances when no file is produced"""

    status: str
    errors: List[str]
