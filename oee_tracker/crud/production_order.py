"""数据库操作（CRUD）- 生产订单相关

封装常用的数据库读写操作，供核心状态机调用。
这里的函数只 flush 不 commit，事务边界由调用方的 transaction() 控制。
"""

from sqlalchemy.orm import Session

from .. import models


def get_order(db: Session, order_id: int):
    """根据ID获取订单"""
    return db.query(models.ProductionOrder).filter(models.ProductionOrder.id == order_id).first()


def get_order_by_code(db: Session, order_code: str):
    """根据订单编号获取订单（用于避免重复编号）"""
    return db.query(models.ProductionOrder).filter(models.ProductionOrder.order_code == order_code).first()


def get_started_order(db: Session, exclude_id: int = None):
    """查找当前处于 started 状态的订单"""
    query = db.query(models.ProductionOrder).filter(models.ProductionOrder.state == models.OrderState.started)
    if exclude_id is not None:
        query = query.filter(models.ProductionOrder.id != exclude_id)
    return query.first()


def list_orders(db: Session, skip: int = 0, limit: int = 100):
    """获取所有订单，按创建时间倒序"""
    return (
        db.query(models.ProductionOrder)
        .order_by(models.ProductionOrder.created_at.desc(), models.ProductionOrder.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def create_order(db: Session, fields: dict):
    """创建新订单"""
    db_order = models.ProductionOrder(**fields)
    db.add(db_order)
    db.flush()
    return db_order


def update_order(db: Session, db_order, fields: dict):
    """按字段部分更新订单"""
    for field, value in fields.items():
        setattr(db_order, field, value)
    db.flush()
    return db_order


def delete_order(db: Session, db_order):
    """删除订单（关联的暂停记录级联删除）"""
    db.delete(db_order)
    db.flush()


# 活动订单槽
def get_active_slot(db: Session, for_update: bool = False):
    """获取活动订单槽，不存在时创建"""
    query = db.query(models.ActiveOrderSlot).filter(models.ActiveOrderSlot.id == models.ACTIVE_SLOT_ID)
    if for_update:
        query = query.with_for_update()
    slot = query.first()
    if slot is None:
        slot = models.ActiveOrderSlot(id=models.ACTIVE_SLOT_ID, order_id=None)
        db.add(slot)
        db.flush()
    return slot


def release_active_slot(db: Session, order_id: int):
    """若活动槽被该订单占用则清空"""
    slot = db.query(models.ActiveOrderSlot).filter(models.ActiveOrderSlot.id == models.ACTIVE_SLOT_ID).first()
    if slot is not None and slot.order_id == order_id:
        slot.order_id = None
        db.flush()
