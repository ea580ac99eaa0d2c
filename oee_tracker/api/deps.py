"""路由依赖

时钟、通知器、指标引擎都通过依赖注入提供，测试中可用 app.dependency_overrides 替换
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.cleaning import CleaningOrderService
from ..core.counters import CounterAdjuster
from ..core.metrics import MetricsEngine
from ..core.notifier import notifier
from ..core.state_machine import OrderStateMachine
from ..database.connection import get_db
from ..utils.helpers import utcnow


def get_clock():
    return utcnow


def get_notifier():
    return notifier


def get_metrics_engine():
    return MetricsEngine()


def get_state_machine(
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    events=Depends(get_notifier),
    engine: MetricsEngine = Depends(get_metrics_engine),
) -> OrderStateMachine:
    return OrderStateMachine(db, notifier=events, clock=clock, engine=engine)


def get_counter_adjuster(db: Session = Depends(get_db), events=Depends(get_notifier)) -> CounterAdjuster:
    return CounterAdjuster(db, notifier=events)


def get_cleaning_service(
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    events=Depends(get_notifier),
) -> CleaningOrderService:
    return CleaningOrderService(db, notifier=events, clock=clock)
