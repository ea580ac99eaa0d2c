"""数据库操作（CRUD）- 清洁工单相关"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .. import models


def get_cleaning_order(db: Session, cleaning_id: int):
    return db.query(models.CleaningOrder).filter(models.CleaningOrder.id == cleaning_id).first()


def list_cleaning_orders(db: Session, since: Optional[datetime] = None, skip: int = 0, limit: int = 100):
    """获取清洁工单，按创建时间倒序；since 不为空时只返回之后创建的"""
    query = db.query(models.CleaningOrder)
    if since is not None:
        query = query.filter(models.CleaningOrder.created_at >= since)
    return (
        query.order_by(models.CleaningOrder.created_at.desc(), models.CleaningOrder.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_finished_cleaning_orders(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None):
    """已完成的清洁工单，按结束时间过滤"""
    query = db.query(models.CleaningOrder).filter(models.CleaningOrder.state == models.CleaningState.finished)
    if start is not None:
        query = query.filter(models.CleaningOrder.end_time >= start)
    if end is not None:
        query = query.filter(models.CleaningOrder.end_time <= end)
    return query.order_by(models.CleaningOrder.end_time).all()


def create_cleaning_order(db: Session, fields: dict):
    db_cleaning = models.CleaningOrder(**fields)
    db.add(db_cleaning)
    db.flush()
    return db_cleaning


def update_cleaning_order(db: Session, db_cleaning, fields: dict):
    for key, value in fields.items():
        setattr(db_cleaning, key, value)
    db.flush()
    return db_cleaning


def delete_cleaning_order(db: Session, db_cleaning):
    db.delete(db_cleaning)
    db.flush()
