"""
Prometheus 序列转换模块 (Prometheus Series Transformer)

把 range query 返回的原始序列整理为 {短名称: [0/1 健康标记, ...]} 结构：
  - 短名称取自 instance 标签的主机名首段（去掉协议和 www. 前缀）
  - 状态码 200/301/302 记为 0（健康），其他状态码或无法解析的值记为 1（异常）
  - 标记顺序与采样点顺序一致

Reshapes raw range-query series into {short_name: [0/1 health flags]}.
All functions here are pure: no I/O, deterministic for identical input.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

logger = logging.getLogger(__name__)

HEALTHY_STATUS_CODES = frozenset({200, 301, 302})
UNKNOWN_NAME = "unknown"

_SCHEME_RE = re.compile(r"^https?://")
_WWW_RE = re.compile(r"^www\.")
_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d{1,10}")


@dataclass(frozen=True)
class RawSeries:
    """单条原始序列：标签 + 有序采样点 [(timestamp, value), ...]"""
    labels: Dict[str, str] = field(default_factory=dict)
    points: Tuple[Any, ...] = ()

    @property
    def instance(self) -> str | None:
        return self.labels.get("instance")


def short_name(instance: str | None) -> str:
    """
    从 instance 标签提取短名称 (Derive the short name from an instance label)

    https://www.playstation.com/status -> playstation
    example.org -> example
    缺失 instance -> unknown
    """
    if not instance:
        return UNKNOWN_NAME
    host = _WWW_RE.sub("", _SCHEME_RE.sub("", instance))
    return host.split(".", 1)[0]


def status_flag(value: Any) -> int:
    """
    状态码映射为健康标记 (Map a status value to a health flag)

    按前导整数（最多 10 位）解析（"200"、" 301"），200/301/302 -> 0，其余或解析失败 -> 1。
    """
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        return 1
    return 0 if int(match.group()) in HEALTHY_STATUS_CODES else 1


def _point_flag(point: Any) -> int:
    # 非 [timestamp, value] 结构的采样点视为异常，保证标记数量与采样点数量一致
    if isinstance(point, (list, tuple)) and len(point) >= 2:
        return status_flag(point[1])
    return 1


def parse_series(result: Sequence[Any]) -> List[RawSeries]:
    """
    解析 Prometheus data.result 列表 (Parse the data.result list)

    跳过格式错误的条目（非对象、metric 非对象、values 非列表），不中断整个响应。
    """
    series: List[RawSeries] = []
    for index, item in enumerate(result):
        if not isinstance(item, dict):
            logger.debug("跳过格式错误的序列 #%d: not an object", index)
            continue
        metric = item.get("metric", {})
        values = item.get("values")
        if not isinstance(metric, dict) or not isinstance(values, list):
            logger.debug("跳过格式错误的序列 #%d: metric=%r values=%r", index, type(metric), type(values))
            continue
        labels = {str(k): str(v) for k, v in metric.items()}
        series.append(RawSeries(labels=labels, points=tuple(values)))
    return series


def transform_series(series: Sequence[RawSeries]) -> Dict[str, List[int]]:
    """
    转换为 {短名称: 健康标记列表} (Transform into {short_name: flags})

    多条序列映射到同一短名称时，按输入顺序后者覆盖前者 (last write wins)。
    """
    output: Dict[str, List[int]] = {}
    for item in series:
        output[short_name(item.instance)] = [_point_flag(point) for point in item.points]
    return output
