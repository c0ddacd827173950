# pincorp/utils/date_converter.py

from datetime import date, datetime, time
import calendar
from typing import Optional, Tuple, Union

from pincorp.constants import DISPLAY_DATE_FORMAT, DISPLAY_DATETIME_FORMAT, DAY_LABEL_FORMAT


def to_display_date(value: Optional[Union[date, datetime]]) -> str:
    """dd/mm/YYYY, or '-' when there is no date."""
    if value is None:
        return "-"
    if not isinstance(value, (date, datetime)):
        return str(value)
    return value.strftime(DISPLAY_DATE_FORMAT)


def to_display_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    if not isinstance(value, datetime):
        return to_display_date(value)
    return value.strftime(DISPLAY_DATETIME_FORMAT)


def to_day_label(value: Union[date, datetime]) -> str:
    return value.strftime(DAY_LABEL_FORMAT)


def parse_display_date(text: str) -> Optional[date]:
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        return datetime.strptime(text.strip(), DISPLAY_DATE_FORMAT).date()
    except ValueError:
        return None


def day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """Whole-day range: start at 00:00:00, end at 23:59:59.999999."""
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def one_month_before(value: date) -> date:
    year, month = (value.year - 1, 12) if value.month == 1 else (value.year, value.month - 1)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def from_qdate(q_date: 'QDate') -> date:
    return q_date.toPyDate()


def to_qdate(g_date: Optional[Union[date, datetime]]) -> 'QDate':
    from PyQt5.QtCore import QDate
    if g_date is None:
        return QDate.currentDate()
    return QDate(g_date.year, g_date.month, g_date.day)
