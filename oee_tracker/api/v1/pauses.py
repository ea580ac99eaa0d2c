from typing import List

from fastapi import APIRouter, Depends

from ... import schemas
from ...config.pause_types import list_pause_types
from ...core.state_machine import OrderStateMachine
from ..deps import get_state_machine

router = APIRouter()


@router.get("/pauses/", response_model=List[schemas.PauseRead])
def list_pauses_endpoint(skip: int = 0, limit: int = 100, machine: OrderStateMachine = Depends(get_state_machine)):
    return machine.ledger.list_all(skip=skip, limit=limit)


@router.get("/pauses/types", response_model=List[schemas.PauseTypeRead])
def list_pause_types_endpoint():
    """暂停类型目录及是否计入停机"""
    return list_pause_types()


@router.get("/pauses/statistics/{order_id}", response_model=schemas.PauseStatistics)
def pause_statistics_endpoint(order_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    machine.get_order(order_id)
    return machine.ledger.statistics(order_id)


@router.get("/pauses/order/{order_id}", response_model=List[schemas.PauseRead])
def list_order_pauses_endpoint(order_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    machine.get_order(order_id)
    return machine.ledger.list_for_order(order_id)


@router.get("/pauses/{pause_id}", response_model=schemas.PauseRead)
def get_pause_endpoint(pause_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    return machine.ledger.get(pause_id)


@router.post("/pauses/", response_model=schemas.PauseOutcome, status_code=201)
def create_pause_endpoint(body: schemas.PauseCreate, machine: OrderStateMachine = Depends(get_state_machine)):
    """暂停订单（与 POST /production-orders/{id}/pause 相同）"""
    order, pause = machine.pause(body.order_id, body.pause_type, body.comment)
    return {"order": order, "pause": pause, "counts_toward_downtime": pause.counts_toward_downtime}


@router.post("/pauses/{pause_id}/finish", response_model=schemas.ProductionOrderRead)
def finish_pause_endpoint(pause_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    """结束暂停并恢复订单"""
    return machine.resume_pause(pause_id)


@router.put("/pauses/{pause_id}", response_model=schemas.PauseRead)
def update_pause_endpoint(
    pause_id: int,
    body: schemas.PauseUpdate,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    return machine.update_pause(pause_id, comment=body.comment, pause_type=body.pause_type)


@router.delete("/pauses/{pause_id}")
def delete_pause_endpoint(pause_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    machine.delete_pause(pause_id)
    return {"message": "Pause deleted successfully"}
