from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ... import crud, schemas
from ...core.counters import CounterAdjuster
from ...core.metrics import MetricsEngine
from ...core.state_machine import OrderStateMachine
from ...database.connection import get_db
from ...utils.helpers import format_duration_seconds
from ..deps import get_clock, get_counter_adjuster, get_state_machine

router = APIRouter()


def _increment_amount(body: Optional[schemas.CounterRequest]):
    # 不带请求体时默认 +1
    return 1 if body is None else body.amount


@router.post("/production-orders/", response_model=schemas.ProductionOrderRead, status_code=201)
def create_order_endpoint(
    order: schemas.ProductionOrderCreate,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    """创建新的生产订单"""
    return machine.create(order.model_dump())


@router.get("/production-orders/", response_model=List[schemas.ProductionOrderRead])
def list_orders_endpoint(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return crud.list_orders(db, skip=skip, limit=limit)


@router.get("/production-orders/{order_id}", response_model=schemas.ProductionOrderRead)
def get_order_endpoint(order_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    return machine.get_order(order_id)


@router.put("/production-orders/{order_id}", response_model=schemas.ProductionOrderRead)
def update_order_endpoint(
    order_id: int,
    fields: schemas.ProductionOrderUpdate,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    """部分更新订单（状态只能通过 start / pause / finish 修改）"""
    return machine.update(order_id, fields.model_dump(exclude_unset=True))


@router.delete("/production-orders/{order_id}")
def delete_order_endpoint(order_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    """删除 created 状态的订单"""
    machine.delete(order_id)
    return {"message": "Production order deleted successfully"}


@router.put("/production-orders/{order_id}/product-details", response_model=schemas.ProductionOrderRead)
def update_product_details_endpoint(
    order_id: int,
    fields: schemas.ProductDetailsUpdate,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    return machine.update_product_details(order_id, fields.model_dump(exclude_unset=True))


# 生命周期
@router.post("/production-orders/{order_id}/start", response_model=schemas.ProductionOrderRead)
def start_order_endpoint(order_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    """开始或恢复订单"""
    return machine.start(order_id)


@router.post("/production-orders/{order_id}/pause", response_model=schemas.PauseOutcome)
def pause_order_endpoint(
    order_id: int,
    body: schemas.PauseRequest,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    order, pause = machine.pause(order_id, body.pause_type, body.comment)
    return {"order": order, "pause": pause, "counts_toward_downtime": pause.counts_toward_downtime}


@router.post("/production-orders/{order_id}/finish", response_model=schemas.FinishOutcome)
def finish_order_endpoint(
    order_id: int,
    body: Optional[schemas.FinishRequest] = None,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    """完成订单并计算 OEE 指标"""
    closing = body.model_dump() if body is not None else {}
    order, snapshot = machine.finish(order_id, closing)
    return {"order": order, "warnings": list(snapshot.warnings)}


@router.post("/production-orders/{order_id}/simulate-time", response_model=schemas.ProductionOrderRead)
def simulate_time_endpoint(
    order_id: int,
    body: Optional[schemas.SimulateTimeRequest] = None,
    machine: OrderStateMachine = Depends(get_state_machine),
):
    minutes = body.minutes if body is not None else 60
    return machine.simulate_time(order_id, minutes)


# 指标
@router.get("/production-orders/{order_id}/oee-metrics", response_model=schemas.OEEMetricsRead)
def get_oee_metrics_endpoint(order_id: int, machine: OrderStateMachine = Depends(get_state_machine)):
    """返回订单完成时保存的 OEE 指标"""
    return machine.get_order(order_id)


@router.get("/production-orders/{order_id}/statistics", response_model=schemas.OrderStatistics)
def get_order_statistics_endpoint(
    order_id: int,
    machine: OrderStateMachine = Depends(get_state_machine),
    clock=Depends(get_clock),
):
    """实时时间统计"""
    order = machine.get_order(order_id)
    times = MetricsEngine.live_times(order, machine.ledger.list_for_order(order.id), now=clock())
    return schemas.OrderStatistics(
        order_id=order.id,
        total_display=format_duration_seconds(times["total_seconds"]),
        active_display=format_duration_seconds(times["active_seconds"]),
        paused_display=format_duration_seconds(times["paused_seconds"]),
        **times,
    )


# 计数器
@router.post("/production-orders/{order_id}/good-units/increment", response_model=schemas.ProductionOrderRead)
def increment_good_units_endpoint(
    order_id: int,
    body: Optional[schemas.CounterRequest] = None,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.increment_good_units(order_id, _increment_amount(body))


@router.post("/production-orders/{order_id}/good-units/set", response_model=schemas.ProductionOrderRead)
def set_good_units_endpoint(
    order_id: int,
    body: schemas.CounterRequest,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.set_good_units(order_id, body.amount)


@router.post("/production-orders/{order_id}/boxes/increment", response_model=schemas.ProductionOrderRead)
def increment_boxes_endpoint(
    order_id: int,
    body: Optional[schemas.CounterRequest] = None,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.increment_boxes(order_id, _increment_amount(body))


@router.post("/production-orders/{order_id}/boxes/set", response_model=schemas.ProductionOrderRead)
def set_boxes_endpoint(
    order_id: int,
    body: schemas.CounterRequest,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.set_boxes(order_id, body.amount)


@router.post("/production-orders/{order_id}/rejected/increment", response_model=schemas.ProductionOrderRead)
def increment_rejected_endpoint(
    order_id: int,
    body: Optional[schemas.CounterRequest] = None,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.increment_rejected(order_id, _increment_amount(body))


@router.post("/production-orders/{order_id}/weight-scale/increment", response_model=schemas.ProductionOrderRead)
def increment_weight_scale_endpoint(
    order_id: int,
    body: Optional[schemas.CounterRequest] = None,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.increment_weight_scale_units(order_id, _increment_amount(body))


@router.post("/production-orders/{order_id}/weight-scale/set", response_model=schemas.ProductionOrderRead)
def set_weight_scale_endpoint(
    order_id: int,
    body: schemas.CounterRequest,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.set_weight_scale_units(order_id, body.amount)


@router.post("/production-orders/{order_id}/operator-units/increment", response_model=schemas.ProductionOrderRead)
def increment_operator_units_endpoint(
    order_id: int,
    body: Optional[schemas.CounterRequest] = None,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.increment_operator_units(order_id, _increment_amount(body))


@router.post("/production-orders/{order_id}/operator-units/set", response_model=schemas.ProductionOrderRead)
def set_operator_units_endpoint(
    order_id: int,
    body: schemas.CounterRequest,
    counters: CounterAdjuster = Depends(get_counter_adjuster),
):
    return counters.set_operator_units(order_id, body.amount)
