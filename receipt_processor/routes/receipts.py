import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from ..schemas import PointsResponse, ProcessResponse, Receipt
from ..services.points import breakdown
from ..store import ReceiptStore
from ..utils.logging import logger

router = APIRouter(prefix="/receipts", tags=["receipts"])

def get_store(request: Request) -> ReceiptStore:
    return request.app.state.store

@router.post("/process", response_model=ProcessResponse)
async def process_receipt(request: Request, store: ReceiptStore = Depends(get_store)):
    # Decode the body whatever its Content-Type says
    raw = await request.body()
    try:
        payload = Receipt.model_validate_json(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    receipt_id, scored = await run_in_threadpool(store.process, payload)
    logger.info("Receipt %s from %r scored %s", receipt_id, scored.retailer, scored.points)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Receipt %s breakdown: %s", receipt_id, breakdown(scored))
    return ProcessResponse(id=receipt_id)

@router.get("/{receipt_path:path}", response_model=PointsResponse)
def get_points(receipt_path: str, store: ReceiptStore = Depends(get_store)):
    """
    Any path under /receipts/ ending in /points is a lookup; the id is the
    first segment after /receipts/, even if empty.
    """
    if not f"/receipts/{receipt_path}".endswith("/points"):
        raise HTTPException(status_code=404)
    receipt_id = receipt_path.split("/")[0]
    scored = store.get(receipt_id)
    if scored is None:
        logger.info("Points requested for unknown receipt %r", receipt_id)
        raise HTTPException(status_code=400, detail="Invalid receipt ID")
    return PointsResponse(points=scored.points)
