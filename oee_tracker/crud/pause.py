"""数据库操作（CRUD）- 暂停记录相关"""

from sqlalchemy.orm import Session

from .. import models


def get_pause(db: Session, pause_id: int):
    """根据ID获取暂停记录"""
    return db.query(models.PauseRecord).filter(models.PauseRecord.id == pause_id).first()


def get_open_pause(db: Session, order_id: int):
    """获取订单进行中的暂停（end_time 为空）"""
    return (
        db.query(models.PauseRecord)
        .filter(models.PauseRecord.order_id == order_id, models.PauseRecord.end_time.is_(None))
        .first()
    )


def list_pauses(db: Session, skip: int = 0, limit: int = 100):
    """获取所有暂停记录，按开始时间倒序"""
    return (
        db.query(models.PauseRecord)
        .order_by(models.PauseRecord.start_time.desc(), models.PauseRecord.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_pauses_for_order(db: Session, order_id: int):
    """获取订单的全部暂停记录（按开始时间排序）"""
    return (
        db.query(models.PauseRecord)
        .filter(models.PauseRecord.order_id == order_id)
        .order_by(models.PauseRecord.start_time, models.PauseRecord.id)
        .all()
    )


def create_pause(db: Session, fields: dict):
    db_pause = models.PauseRecord(**fields)
    db.add(db_pause)
    db.flush()
    return db_pause


def delete_pause(db: Session, db_pause):
    db.delete(db_pause)
    db.flush()
