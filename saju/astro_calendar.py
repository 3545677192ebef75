"""
Calendar oracle for Saju calculations.

The astronomical work (solar -> lunar conversion, solar term boundaries,
sexagenary day count, decade start age) is delegated to ``lunar_python``.
This module wraps it behind a narrow interface so the cycle generators can
be driven by any object with the same four methods, and turns every library
failure into an OracleError.

Also handles the hour-boundary correction applied to the birth time before
it is handed to the oracle.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from lunar_python import Solar

logger = logging.getLogger(__name__)

# Years the lunar tables are trusted for
SUPPORTED_YEARS = (1900, 2100)

# Sample days that sidestep the lunar new year / solar term boundaries
YEAR_SAMPLE_MONTH, YEAR_SAMPLE_DAY = 6, 1
MONTH_SAMPLE_DAY = 15


class OracleError(Exception):
    """Raised when the calendar oracle cannot answer for a date."""


@dataclass(frozen=True)
class OracleReading:
    """Everything the oracle knows about one birth instant."""

    year_ganji: str
    month_ganji: str
    day_ganji: str
    hour_ganji: str
    lunar_year: int
    lunar_month: int
    lunar_day: int
    is_leap_month: bool
    solar_term_name: str
    solar_term_date: date


@dataclass(frozen=True)
class DecadeAnchor:
    """Start age and stem-branch of the first decade cycle."""

    start_age: int  # international age; 0 opens in the birth year
    ganji: str


class CalendarOracle(Protocol):
    def read(self, year: int, month: int, day: int,
             hour: int, minute: int) -> OracleReading: ...

    def decade_anchor(self, year: int, month: int, day: int,
                      hour: int, minute: int, gender: str) -> Optional[DecadeAnchor]: ...

    def year_ganji(self, year: int) -> str: ...

    def month_ganji(self, year: int, month: int, day: int) -> str: ...


# ============================================================
# SOLAR TERM NAMES
# ============================================================
#
# lunar_python reports the 24 terms by their Chinese names; the chart shows
# the Korean reading.

SOLAR_TERM_KOREAN = {
    "小寒": "소한", "大寒": "대한", "立春": "입춘", "雨水": "우수",
    "惊蛰": "경칩", "春分": "춘분", "清明": "청명", "谷雨": "곡우",
    "立夏": "입하", "小满": "소만", "芒种": "망종", "夏至": "하지",
    "小暑": "소서", "大暑": "대서", "立秋": "입추", "处暑": "처서",
    "白露": "백로", "秋分": "추분", "寒露": "한로", "霜降": "상강",
    "立冬": "입동", "小雪": "소설", "大雪": "대설", "冬至": "동지",
}


def solar_term_korean(name: str) -> str:
    """Korean name of a solar term; unknown names pass through unchanged."""
    return SOLAR_TERM_KOREAN.get(name, name)


# ============================================================
# HOUR BOUNDARY CORRECTION
# ============================================================

def correct_hour_boundary(hour: int, minute: int) -> tuple[int, int]:
    """
    Pull a birth time stamped exactly on an odd hour back by one minute.

    Saju hour blocks are bounded by odd clock hours (01:00, 03:00, ...,
    23:00). A time of exactly 19:00 is the closing instant of the 17:00-19:00
    block and must resolve to it, not to the block that opens at 19:00.

    Args:
        hour: 0-23
        minute: 0-59

    Returns:
        (hour, minute) to hand to the oracle
    """
    if minute == 0 and hour % 2 == 1:
        return hour - 1, 59
    return hour, minute


# ============================================================
# LUNAR_PYTHON ADAPTER
# ============================================================

def _check_range(year: int):
    lo, hi = SUPPORTED_YEARS
    if not lo <= year <= hi:
        raise OracleError(f"Year {year} outside supported calendar range {lo}-{hi}")


class LunarCalendarOracle:
    """CalendarOracle backed by lunar_python."""

    def read(self, year, month, day, hour, minute):
        _check_range(year)
        try:
            solar = Solar.fromYmdHms(year, month, day, hour, minute, 0)
            lunar = solar.getLunar()
            eight_char = lunar.getEightChar()
            jie_qi = lunar.getPrevJieQi(True)
            jq_solar = jie_qi.getSolar()
            lunar_month = lunar.getMonth()
            reading = OracleReading(
                year_ganji=eight_char.getYear(),
                month_ganji=eight_char.getMonth(),
                day_ganji=eight_char.getDay(),
                hour_ganji=eight_char.getTime(),
                lunar_year=lunar.getYear(),
                lunar_month=abs(lunar_month),
                lunar_day=lunar.getDay(),
                is_leap_month=lunar_month < 0,
                solar_term_name=jie_qi.getName(),
                solar_term_date=date(jq_solar.getYear(), jq_solar.getMonth(), jq_solar.getDay()),
            )
        except Exception as exc:
            raise OracleError(f"Calendar lookup failed for {year}-{month:02d}-{day:02d} "
                              f"{hour:02d}:{minute:02d}: {exc}") from exc
        logger.debug("Oracle reading %04d-%02d-%02d %02d:%02d -> %s %s %s %s",
                     year, month, day, hour, minute, reading.year_ganji,
                     reading.month_ganji, reading.day_ganji, reading.hour_ganji)
        return reading

    def decade_anchor(self, year, month, day, hour, minute, gender):
        """
        First real decade from lunar_python's own luck cycle.

        Index 0 of getDaYun() is the stretch before the first decade starts
        and carries no stem-branch, so the anchor is index 1.

        DaYun.getStartAge() counts in Korean reckoning (1 in the birth
        year). The anchor age is international, taken from the decade's
        start year, so birth_year + start_age is the year it opens.
        """
        _check_range(year)
        try:
            solar = Solar.fromYmdHms(year, month, day, hour, minute, 0)
            yun = solar.getLunar().getEightChar().getYun(1 if gender == "male" else 0)
            da_yun = yun.getDaYun()
            if len(da_yun) < 2:
                return None
            first = da_yun[1]
            return DecadeAnchor(start_age=first.getStartYear() - year, ganji=first.getGanZhi())
        except Exception as exc:
            raise OracleError(f"Decade anchor lookup failed for {year}-{month:02d}-{day:02d}: {exc}") from exc

    def year_ganji(self, year):
        _check_range(year)
        try:
            lunar = Solar.fromYmd(year, YEAR_SAMPLE_MONTH, YEAR_SAMPLE_DAY).getLunar()
            return lunar.getYearInGanZhi()
        except Exception as exc:
            raise OracleError(f"Year stem-branch lookup failed for {year}: {exc}") from exc

    def month_ganji(self, year, month, day):
        _check_range(year)
        try:
            return Solar.fromYmd(year, month, day).getLunar().getEightChar().getMonth()
        except Exception as exc:
            raise OracleError(f"Month stem-branch lookup failed for {year}-{month:02d}-{day:02d}: {exc}") from exc
