"""暂停类型目录

暂停类型是配置而非核心逻辑：每个类型标记是否计入停机时间（counts_toward_downtime）。
- 换班（cambio_turno）与部分中断（pausa_parcial）不计入停机，不影响效率指标
- 其余类型全部计入停机
"""

from typing import Dict, List

SHIFT_CHANGE = "cambio_turno"
PARTIAL_INTERRUPTION = "pausa_parcial"

# 不计入停机的类型
NON_COUNTING_PAUSE_TYPES = frozenset({SHIFT_CHANGE, PARTIAL_INTERRUPTION})

# 类型标识 -> 说明
PAUSE_TYPES: Dict[str, str] = {
    "Preparación Arranque": "开机准备",
    "Verificación Calidad": "质量检查",
    "Falta de Material": "缺料",
    "Incidencia Llenadora": "灌装机故障",
    "Incidencia Taponadora": "封盖机故障",
    "Incidencia Etiquetadora": "贴标机故障",
    "Incidencia Encajonadora": "装箱机故障",
    "Incidencia Paletizadora": "码垛机故障",
    "Mantenimiento": "维护保养",
    "Limpieza": "清洁",
    SHIFT_CHANGE: "换班",
    PARTIAL_INTERRUPTION: "部分中断",
    "Otros": "其他",
}


def is_valid_pause_type(pause_type) -> bool:
    return isinstance(pause_type, str) and pause_type in PAUSE_TYPES


def counts_toward_downtime(pause_type: str) -> bool:
    """根据类型判断该暂停是否计入停机时间"""
    return pause_type not in NON_COUNTING_PAUSE_TYPES


def list_pause_types() -> List[dict]:
    """返回所有暂停类型及其停机计入标记"""
    return [
        {
            "type": key,
            "description": description,
            "counts_toward_downtime": counts_toward_downtime(key),
        }
        for key, description in PAUSE_TYPES.items()
    ]
