"""Pytest fixtures for testing"""

import random
import pytest
from datetime import date, datetime
from decimal import Decimal
from typing import Callable
from fastapi.testclient import TestClient

from flowstark_sepa.api.main import create_app
from flowstark_sepa.api.dependencies import get_id_generator
from flowstark_sepa.domain.models import (
    CollectionItem,
    CreditorData,
    Debtor,
    DebtorMandate,
    OrganizationProfile,
)
from flowstark_sepa.utils.identifiers import IdentifierGenerator

CREDITOR_IBAN = "ES9121000418450200051332"
CREDITOR_ID = "ES12000B12345678"
DEBTOR_A_IBAN = "ES7921000813610123456789"
DEBTOR_B_IBAN = "DE89370400440532013000"

PAIN_NS = {"p": "urn:iso:std:iso:20022:tech:xsd:pain.008.001.02"}


@pytest.fixture
def fixed_now() -> datetime:
    """Generation timestamp used across deterministic tests"""
    return datetime(2025, 2, 20, 9, 30, 0, 123456)


@pytest.fixture
def id_generator() -> IdentifierGenerator:
    """Seeded identifier generator"""
    return IdentifierGenerator(prefix="FLOWSTARK", rng=random.Random(42))


@pytest.fixture
def creditor() -> CreditorData:
    return CreditorData(
        name="Gimnasio Norte S.L.",
        iban=CREDITOR_IBAN,
        bic="CAIXESBBXXX",
        creditor_scheme_id=CREDITOR_ID,
    )


@pytest.fixture
def profile() -> OrganizationProfile:
    return OrganizationProfile(
        name="Gimnasio Norte Sociedad Limitada",
        commercial_name="Gimnasio Norte S.L.",
        sepa_iban=CREDITOR_IBAN,
        sepa_bic="CAIXESBBXXX",
        sepa_creditor_id=CREDITOR_ID,
    )


@pytest.fixture
def debtor_a() -> Debtor:
    """Debtor never collected before"""
    return Debtor(
        id="client-a",
        name="Ana Garcia",
        iban=DEBTOR_A_IBAN,
        mandate=DebtorMandate(mandate_id="MANDATE-A-001", signature_date=date(2024, 11, 5)),
        tax_id="12345678Z",
    )


@pytest.fixture
def debtor_b() -> Debtor:
    """Debtor with collection history"""
    return Debtor(
        id="client-b",
        name="Bruno Lopez",
        iban=DEBTOR_B_IBAN,
        mandate=DebtorMandate(mandate_id="MANDATE-B-001", signature_date=date(2023, 6, 1)),
        bic="COBADEFFXXX",
        fiscal_name="Lopez Consulting GmbH",
    )


@pytest.fixture
def make_item() -> Callable[..., CollectionItem]:
    """Factory for collection items with sensible defaults"""

    def _make(item_id: str, debtor, amount="30.00", due_date=date(2025, 3, 1), **kwargs) -> CollectionItem:
        return CollectionItem(
            id=item_id,
            amount=Decimal(str(amount)),
            due_date=due_date,
            debtor=debtor,
            **kwargs,
        )

    return _make


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client with a seeded identifier generator"""
    app = create_app()
    app.dependency_overrides[get_id_generator] = lambda: IdentifierGenerator(rng=random.Random(42))
    return TestClient(app)
