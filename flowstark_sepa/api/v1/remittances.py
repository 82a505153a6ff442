"""POST /v1/remittances - SEPA direct-debit remittance file generation"""

import time
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from flowstark_sepa.api.v1.schemas import (
    CollectionItemSchema,
    RemittanceErrorResponse,
    RemittanceRequest,
    ValidationResponse,
)
from flowstark_sepa.api.dependencies import get_id_generator, get_request_id
from flowstark_sepa.domain.exceptions import DomainException
from flowstark_sepa.domain.profile import creditor_from_profile
from flowstark_sepa.domain.remittance import (
    NO_ELIGIBLE_ITEMS_MESSAGE,
    PROFILE_INCOMPLETE,
    PROFILE_INCOMPLETE_MESSAGE,
    VALIDATION_FAILED,
    generate_remittance,
)
from flowstark_sepa.domain.sequencing import count_prior_collections
from flowstark_sepa.domain.validation import select_eligible_items, validate_collection
from flowstark_sepa.infrastructure.observability.logging import log_remittance
from flowstark_sepa.infrastructure.observability.metrics import record_remittance
from flowstark_sepa.utils.identifiers import IdentifierGenerator

router = APIRouter()

_ERROR_STATUS_CODES = {
    VALIDATION_FAILED: 422,
    PROFILE_INCOMPLETE: 409,
}


def _prior_collections(history: List[CollectionItemSchema], explicit: Dict[str, int]) -> Dict[str, int]:
    counts = count_prior_collections(item.to_domain() for item in history)
    counts.update(explicit)
    return counts


@router.post("/remittances/validate", response_model=ValidationResponse)
def validate_remittance(request_body: RemittanceRequest):
    """
    Dry run: report every problem that would block file generation.

    Always 200; `valid` tells whether a file can be produced.
    """
    creditor = creditor_from_profile(request_body.profile.to_domain())
    if creditor is None:
        return ValidationResponse(valid=False, errors=[PROFILE_INCOMPLETE_MESSAGE])

    items = [item.to_domain() for item in request_body.items]
    if request_body.skip_ineligible:
        selected = select_eligible_items(items)
        if items and not selected:
            return ValidationResponse(valid=False, errors=[NO_ELIGIBLE_ITEMS_MESSAGE])
        items = selected

    result = validate_collection(creditor, items)
    return ValidationResponse(valid=result.valid, errors=result.errors)


@router.post(
    "/remittances",
    response_class=Response,
    responses={
        200: {"content": {"application/xml": {}}, "description": "pain.008.001.02 file"},
        409: {"model": RemittanceErrorResponse, "description": "Organization profile incomplete"},
        422: {"model": RemittanceErrorResponse, "description": "Items failed validation"},
    },
)
def create_remittance(
    request_body: RemittanceRequest,
    request: Request,
    id_generator: IdentifierGenerator = Depends(get_id_generator),
):
    """
    Generate a SEPA direct-debit (pain.008) remittance file.

    Flow:
    1. Snapshot prior paid direct debits per debtor
    2. Validate profile and items
    3. Build and return the XML file as an attachment
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = generate_remittance(
            items=[item.to_domain() for item in request_body.items],
            profile=request_body.profile.to_domain(),
            prior_collections=_prior_collections(request_body.history, request_body.prior_collections),
            now=request_body.generated_at,
            id_generator=id_generator,
            skip_ineligible=request_body.skip_ineligible,
        )
    except DomainException as e:
        record_remittance("error")
        logging.error(f"Remittance build failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_remittance(result.status, result.transaction_count, len(result.errors))
    log_remittance(request_id, result.status, result.transaction_count, str(result.control_sum), duration_ms)

    if not result.succeeded:
        body = RemittanceErrorResponse(status=result.status, errors=result.errors)
        return JSONResponse(status_code=_ERROR_STATUS_CODES[result.status], content=body.model_dump())

    exported = result.export
    return Response(
        content=exported.content,
        media_type=exported.content_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.file_name}"'},
    )
