"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from flowstark_sepa.config import settings
from flowstark_sepa.utils.identifiers import IdentifierGenerator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_id_generator() -> IdentifierGenerator:
    """Provide a message/payment/end-to-end identifier generator"""
    return IdentifierGenerator(
        prefix=settings.message_id_prefix,
        end_to_end_budget=settings.end_to_end_id_budget,
    )
