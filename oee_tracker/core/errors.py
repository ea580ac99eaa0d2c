"""领域错误类型

路由层根据 status_code 将错误映射为 HTTP 响应
- ValidationError: 输入缺失或格式错误（400）
- NotFoundError: 订单 / 暂停不存在（404）
- ConflictError: 违反单一活动订单约束、订单编号重复（409）
- InvalidStateError: 当前生命周期状态不允许该操作（400）
"""

from typing import List, Optional


class DomainError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationError(DomainError):
    status_code = 400


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class InvalidStateError(DomainError):
    status_code = 400
