# -*- coding: utf-8 -*-
import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, time
from typing import Tuple, Union

from ..errors import InvalidInput, ValidationError

END_OF_DAY = time(23, 59, 59, 999000)


def _as_date(d: Union[date, datetime]) -> date:
    return d.date() if isinstance(d, datetime) else d


def day_range(d: Union[date, datetime]) -> Tuple[datetime, datetime]:
    d = _as_date(d)
    return datetime.combine(d, time.min), datetime.combine(d, END_OF_DAY)


def month_range(y: int, m: int) -> Tuple[datetime, datetime]:
    if not 1 <= m <= 12:
        raise InvalidInput("month 必須介於 1 到 12")
    if not MINYEAR <= y <= MAXYEAR:
        raise InvalidInput(f"year 必須介於 {MINYEAR} 到 {MAXYEAR}")
    first = date(y, m, 1)
    last = date(y, m, calendar.monthrange(y, m)[1])
    return datetime.combine(first, time.min), datetime.combine(last, END_OF_DAY)


def _is_date_only(s: str) -> bool:
    return len(s.strip()) == 10


def parse_date(s: str) -> datetime:
    # 接受 YYYY-MM-DD 或 ISO 8601 日期時間；帶時區的一律轉成本地時間再去掉 tzinfo
    if not s or not s.strip():
        raise ValidationError("日期不可為空")
    s = s.strip()
    try:
        if _is_date_only(s):
            return datetime.combine(date.fromisoformat(s), time.min)
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"日期格式錯誤：{s}（需為 YYYY-MM-DD）")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def parse_range_end(s: str) -> datetime:
    # 只給日期時，結束時間包含當天到 23:59:59.999
    dt = parse_date(s)
    if _is_date_only(s):
        return datetime.combine(dt.date(), END_OF_DAY)
    return dt
