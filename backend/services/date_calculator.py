"""Age and date-difference calculations."""
import logging
from datetime import date, datetime
from typing import Optional, Union
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from models.api import AgeResult, DateDiffResult
from services.errors import InvalidInputError

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def parse_date(value: Union[str, date, None], field_name: str = "date") -> date:
    """Parse user input such as '2024-03-01' or '2024. 03. 01.' into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise InvalidInputError(f"{field_name} is required", {"field": field_name})
    try:
        return date_parser.parse(str(value).strip().rstrip(".")).date()
    except (ValueError, OverflowError) as e:
        raise InvalidInputError(f"Could not parse {field_name}: {value}", {"field": field_name}) from e


def d_day_label(total_days: int) -> str:
    if total_days > 0:
        return f"D+{total_days}"
    if total_days < 0:
        return f"D{total_days}"
    return "D-DAY"


class DateCalculator:
    """Calendar arithmetic for the age and date-difference tools."""

    def age(self, birth: date, target: Optional[date] = None) -> AgeResult:
        """
        Compute the full age at `target` (today by default).

        The next birthday is the anniversary after the last completed year,
        so on the birthday itself it is a year away. A Feb 29 birthday falls
        on Feb 28 in common years.
        """
        target = target or date.today()
        if birth > target:
            raise InvalidInputError("Birth date must not be after the target date")

        delta = relativedelta(target, birth)
        total_days = (target - birth).days
        next_birthday = birth + relativedelta(years=delta.years + 1)

        return AgeResult(
            birth_date=birth,
            target_date=target,
            years=delta.years,
            months=delta.months,
            days=delta.days,
            total_days=total_days,
            total_hours=total_days * 24,
            total_minutes=total_days * 24 * 60,
            birth_weekday=WEEKDAYS[birth.weekday()],
            next_birthday=next_birthday,
            days_until_birthday=(next_birthday - target).days,
        )

    def diff(self, start: date, end: date) -> DateDiffResult:
        """Difference from `start` to `end`; negative when `end` is earlier."""
        total_days = (end - start).days
        delta = relativedelta(end, start)

        return DateDiffResult(
            start_date=start,
            end_date=end,
            years=abs(delta.years),
            months=abs(delta.months),
            days=abs(delta.days),
            total_days=total_days,
            total_hours=total_days * 24,
            total_minutes=total_days * 24 * 60,
            start_weekday=WEEKDAYS[start.weekday()],
            end_weekday=WEEKDAYS[end.weekday()],
            d_day=d_day_label(total_days),
        )
