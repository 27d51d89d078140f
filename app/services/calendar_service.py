"""
Calendar Service - Quick date options, the date picker grid and public holidays.

Architecture Decision: Strategy Pattern
Holidays come from the `holidays` package for whatever country the user
configured, so the picker can mark public holidays without country-specific code.
"""

import calendar
import datetime
import logging
from typing import List, Optional

import holidays
from pydantic import BaseModel
from PySide6.QtCore import QLocale

from app.i18n import get_language, tr
from app.services.natural_language import day_name, month_name

logger = logging.getLogger(__name__)

SATURDAY = 5


class QuickDateOption(BaseModel):
    label: str
    sublabel: str
    date: datetime.date


class CalendarDay(BaseModel):
    date: datetime.date
    is_current_month: bool
    is_today: bool
    is_selected: bool
    is_past: bool
    is_weekend: bool
    holiday_name: str = ""


def _next_weekday(from_date: datetime.date, weekday: int) -> datetime.date:
    """The given weekday strictly after from_date"""
    delta = (weekday - from_date.weekday()) % 7 or 7
    return from_date + datetime.timedelta(days=delta)


def this_weekend(from_date: datetime.date) -> datetime.date:
    """The coming Saturday; on a weekend, the Saturday after"""
    return _next_weekday(from_date, SATURDAY)


def next_week(from_date: datetime.date) -> datetime.date:
    """The coming Monday (a week ahead when from_date is a Monday)"""
    return _next_weekday(from_date, calendar.MONDAY)


class CalendarService:
    """
    Date picker logic with optional public holidays.
    """

    def __init__(self, country: Optional[str] = None, subdivision: Optional[str] = None):
        """
        Args:
            country: ISO country code (e.g. 'DE'); None disables holidays
            subdivision: Optional state/province code (e.g. 'BY')
        """
        self.country = country
        self.subdivision = subdivision
        self.holidays = {}

        if country:
            try:
                # 'holidays' falls back to the native names for unsupported languages
                self.holidays = holidays.country_holidays(
                    country, subdiv=subdivision, language=get_language()
                )
            except NotImplementedError:
                logger.warning(f"No holiday calendar for {country}/{subdivision}, holidays disabled")

    @classmethod
    def from_preferences(cls, preferences) -> "CalendarService":
        return cls(preferences.holiday_country, preferences.holiday_subdivision)

    def get_holiday_name(self, date_obj: datetime.date) -> str:
        """Holiday name or empty string if not a holiday"""
        return self.holidays.get(date_obj, "")

    def is_holiday(self, date_obj: datetime.date) -> bool:
        return date_obj in self.holidays

    @staticmethod
    def is_weekend(date_obj: datetime.date) -> bool:
        return date_obj.weekday() >= SATURDAY

    def quick_date_options(self, today: Optional[datetime.date] = None) -> List[QuickDateOption]:
        """Today, Tomorrow, This weekend and Next week with short sublabels"""
        today = today or datetime.date.today()
        tomorrow = today + datetime.timedelta(days=1)
        weekend = this_weekend(today)
        monday = next_week(today)

        return [
            QuickDateOption(label=tr("date.today"), sublabel=day_name(today), date=today),
            QuickDateOption(label=tr("date.tomorrow"), sublabel=day_name(tomorrow), date=tomorrow),
            QuickDateOption(label=tr("date.this_weekend"), sublabel=day_name(weekend), date=weekend),
            QuickDateOption(label=tr("date.next_week"),
                            sublabel=f"{day_name(monday)} {monday.day} {month_name(monday)}",
                            date=monday),
        ]

    def month_grid(self, year: int, month: int, selected: Optional[datetime.date] = None,
                   today: Optional[datetime.date] = None) -> List[List[CalendarDay]]:
        """
        Weeks (Monday first) covering the month, padded with days of the
        neighbouring months.
        """
        today = today or datetime.date.today()
        weeks = calendar.Calendar(firstweekday=calendar.MONDAY).monthdatescalendar(year, month)
        return [
            [
                CalendarDay(
                    date=day,
                    is_current_month=day.month == month,
                    is_today=day == today,
                    is_selected=selected is not None and day == selected,
                    is_past=day < today,
                    is_weekend=self.is_weekend(day),
                    holiday_name=self.get_holiday_name(day),
                )
                for day in week
            ]
            for week in weeks
        ]

    @staticmethod
    def month_label(year: int, month: int) -> str:
        """e.g. 'January 2025', in the current language"""
        return f"{month_name(datetime.date(year, month, 1), QLocale.FormatType.LongFormat)} {year}"
