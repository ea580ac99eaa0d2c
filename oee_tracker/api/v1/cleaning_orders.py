from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from ... import schemas
from ...core.cleaning import CleaningOrderService
from ..deps import get_cleaning_service

router = APIRouter()


@router.get("/cleaning-orders/", response_model=List[schemas.CleaningOrderRead])
def list_cleaning_orders_endpoint(
    days: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    service: CleaningOrderService = Depends(get_cleaning_service),
):
    """清洁工单列表，可按最近 days 天过滤"""
    return service.list_all(days=days, skip=skip, limit=limit)


@router.get("/cleaning-orders/summary", response_model=schemas.CleaningSummary)
def cleaning_summary_endpoint(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    service: CleaningOrderService = Depends(get_cleaning_service),
):
    return service.summary(start=start, end=end)


@router.get("/cleaning-orders/{cleaning_id}", response_model=schemas.CleaningOrderRead)
def get_cleaning_order_endpoint(cleaning_id: int, service: CleaningOrderService = Depends(get_cleaning_service)):
    return service.get(cleaning_id)


@router.post("/cleaning-orders/", response_model=schemas.CleaningOrderRead, status_code=201)
def create_cleaning_order_endpoint(
    body: schemas.CleaningOrderCreate,
    service: CleaningOrderService = Depends(get_cleaning_service),
):
    return service.create(body.model_dump())


@router.put("/cleaning-orders/{cleaning_id}", response_model=schemas.CleaningOrderRead)
def update_cleaning_order_endpoint(
    cleaning_id: int,
    body: schemas.CleaningOrderUpdate,
    service: CleaningOrderService = Depends(get_cleaning_service),
):
    return service.update(cleaning_id, body.model_dump(exclude_unset=True))


@router.delete("/cleaning-orders/{cleaning_id}")
def delete_cleaning_order_endpoint(cleaning_id: int, service: CleaningOrderService = Depends(get_cleaning_service)):
    """只允许删除 created 状态的清洁工单"""
    service.delete(cleaning_id)
    return {"message": "Cleaning order deleted successfully"}


@router.post("/cleaning-orders/{cleaning_id}/start", response_model=schemas.CleaningOrderRead)
def start_cleaning_order_endpoint(cleaning_id: int, service: CleaningOrderService = Depends(get_cleaning_service)):
    return service.start(cleaning_id)


@router.post("/cleaning-orders/{cleaning_id}/finish", response_model=schemas.CleaningOrderRead)
def finish_cleaning_order_endpoint(cleaning_id: int, service: CleaningOrderService = Depends(get_cleaning_service)):
    return service.finish(cleaning_id)
