"""
查询时间窗口解析模块。

把请求中可选的 date (YYYY-MM-DD) 与 time (HH:mm) 转换为 Prometheus range query
使用的 Unix 时间戳区间。所有计算均按 UTC 进行，不做本地时区转换。
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.exceptions import ValidationError

DEFAULT_WINDOW_HOURS = 6

DATE_FORMAT_ERROR = "Invalid date format. Expected format: YYYY-MM-DD"
TIME_FORMAT_ERROR = "Invalid time format. Expected format: HH:mm (24-hour)"
PAIR_REQUIRED_ERROR = "Both date and time are required when either is supplied"
RANGE_ERROR = "Date and time are out of range"

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"\d{2}:\d{2}")


@dataclass(frozen=True)
class QueryWindow:
    """查询窗口，start/end 为 UTC Unix 秒。"""
    start: int
    end: int

    @property
    def span(self) -> int:
        return self.end - self.start


def validate_date(value: str) -> datetime:
    """严格校验 YYYY-MM-DD，返回当天零点 (UTC)。"""
    if not _DATE_RE.fullmatch(value):
        raise ValidationError(DATE_FORMAT_ERROR)
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(DATE_FORMAT_ERROR) from None
    return parsed.replace(tzinfo=timezone.utc)


def validate_time(value: str) -> timedelta:
    """严格校验 24 小时制 HH:mm，返回距零点的偏移。"""
    if not _TIME_RE.fullmatch(value):
        raise ValidationError(TIME_FORMAT_ERROR)
    try:
        parsed = datetime.strptime(value, "%H:%M")
    except ValueError:
        raise ValidationError(TIME_FORMAT_ERROR) from None
    return timedelta(hours=parsed.hour, minutes=parsed.minute)


def resolve_window(
    date: Optional[str] = None,
    time: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    hours: int = DEFAULT_WINDOW_HOURS,
    require_pair: bool = False,
) -> QueryWindow:
    """解析查询窗口。

    - 已提供的字段先各自独立校验，格式错误立即抛出 ValidationError；
    - date 与 time 都提供时：start 为该时刻 (UTC)，end = start + hours；
    - 否则使用默认窗口：end 为当前时刻，start = end - hours。
    窗口超出可表示的日期范围时抛出 ValidationError。

    只提供其中一个字段时默认退回默认窗口；require_pair=True 时改为校验失败。
    空字符串视为未提供。
    """
    day = validate_date(date) if date else None
    offset = validate_time(time) if time else None
    span = timedelta(hours=hours)

    if day is not None and offset is not None:
        try:
            start = day + offset
            end = start + span
        except OverflowError:
            raise ValidationError(RANGE_ERROR) from None
    else:
        if require_pair and (day is not None or offset is not None):
            raise ValidationError(PAIR_REQUIRED_ERROR)
        end = now or datetime.now(timezone.utc)
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        start = end - span

    return QueryWindow(start=int(start.timestamp()), end=int(end.timestamp()))
