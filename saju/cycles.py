"""
Luck cycle tables: decade (대운), annual (세운) and monthly (월운).

All three share one entry shape, CycleItem, whose Ten God is the relation of
the entry's stem alone to the natal day stem.

The generators never raise. Calendar failures are handled by policy:
- decade: fall back to a conservative anchor (age 1, natal month pillar)
- annual: stop at the last good year, so the table has no gaps
- monthly: skip the failing month and keep going
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from saju.astro_calendar import MONTH_SAMPLE_DAY, CalendarOracle, DecadeAnchor, OracleError
from saju.bazi import (
    STEM_BY_HANJA, Polarity, TenGod, get_combined_phonetic, get_ten_god,
    is_valid_ganji, shift_ganji,
)

logger = logging.getLogger(__name__)

# Decade generation runs a little past the display ceiling
DECADE_HARD_STOP = 130
DECADE_DISPLAY_CEILING = 121
# Shown instead of 0 when the first decade starts before the first birthday
INFANT_AGE_LABEL = "0.6"

ANNUAL_SPAN = 80
CALENDAR_CEILING = 2100

WOLWUN_YEARS_AHEAD = 5


@dataclass(frozen=True)
class CycleItem:
    label: str
    ganji: str
    ganji_korean: str
    ten_god: TenGod
    age: Optional[int] = None
    year: Optional[int] = None  # decade: start year; annual/monthly: calendar year
    month: Optional[int] = None
    span: str = ""  # decade only, e.g. "7 ~ 16"

    def to_dict(self):
        data = {
            "label": self.label,
            "ganji": self.ganji,
            "ganji_korean": self.ganji_korean,
            "ten_god": self.ten_god.value,
        }
        for key in ("age", "year", "month"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.span:
            data["span"] = self.span
        return data


def _cycle_item(label: str, ganji: str, day_stem: str, **extra) -> CycleItem:
    return CycleItem(
        label=label,
        ganji=ganji,
        ganji_korean=get_combined_phonetic(ganji),
        ten_god=get_ten_god(day_stem, ganji[:1]),
        **extra,
    )


# ============================================================
# DECADE CYCLE (대운)
# ============================================================

def is_forward(year_stem: str, gender: str) -> bool:
    """
    Direction of the decade cycle.

    Yang year stem + male or Yin year stem + female -> forward.
    Yang year stem + female or Yin year stem + male -> backward.
    """
    stem = STEM_BY_HANJA.get(year_stem)
    year_yang = stem is not None and stem.polarity == Polarity.YANG
    return (year_yang and gender == "male") or (not year_yang and gender == "female")


def generate_daewun(anchor: Optional[DecadeAnchor], month_ganji: str, day_stem: str,
                    year_stem: str, gender: str, birth_year: int,
                    hard_stop: int = DECADE_HARD_STOP) -> list[CycleItem]:
    """
    Compute the decade cycle table.

    Only the first decade comes from the oracle; every later decade is
    stepped from it by the year-stem/gender direction rule.

    Args:
        anchor: first decade from the oracle, None if unavailable
        month_ganji: natal month pillar, the fallback first decade
        day_stem: natal day stem (Ten God reference)
        year_stem: natal year stem (direction)
        gender: "male" or "female"
        birth_year: Gregorian birth year
        hard_stop: last age that may still open a decade

    Returns:
        List of CycleItem, ages strictly increasing by 10
    """
    if anchor is not None and is_valid_ganji(anchor.ganji) and anchor.start_age is not None \
            and anchor.start_age >= 0:
        start_age, start_ganji = anchor.start_age, anchor.ganji
    else:
        logger.warning("Decade anchor missing or malformed (%r); starting at age 1 from month pillar %s",
                       anchor, month_ganji)
        start_age, start_ganji = 1, month_ganji

    if not is_valid_ganji(start_ganji):
        logger.warning("No usable stem-branch to start the decade cycle from: %r", start_ganji)
        return []

    step = 1 if is_forward(year_stem, gender) else -1

    decades = []
    i = 0
    while True:
        age = start_age + 10 * i
        if age > hard_stop:
            break
        label = INFANT_AGE_LABEL if i == 0 and age == 0 else str(age)
        decades.append(_cycle_item(
            label,
            shift_ganji(start_ganji, step * i),
            day_stem,
            age=age,
            year=birth_year + math.floor(age),
            span=f"{label} ~ {age + 9}",
        ))
        i += 1
    return decades


def visible_daewun(decades: list[CycleItem],
                   ceiling: int = DECADE_DISPLAY_CEILING) -> list[CycleItem]:
    """Decades that open at or below the display ceiling."""
    return [d for d in decades if d.age is not None and d.age <= ceiling]


# ============================================================
# ANNUAL CYCLE (세운)
# ============================================================

def generate_saewun(oracle: CalendarOracle, birth_year: int, day_stem: str,
                    span: int = ANNUAL_SPAN,
                    ceiling: int = CALENDAR_CEILING) -> list[CycleItem]:
    """
    One entry per calendar year from the birth year onward.

    Age is Korean reckoning (1 in the birth year). The first year the
    oracle cannot answer ends the table.
    """
    years = []
    for i in range(span + 1):
        year = birth_year + i
        if year > ceiling:
            break
        try:
            ganji = oracle.year_ganji(year)
        except OracleError as exc:
            logger.warning("Annual cycle stopped at %d: %s", year, exc)
            break
        if not is_valid_ganji(ganji):
            logger.warning("Annual cycle stopped at %d: malformed stem-branch %r", year, ganji)
            break
        years.append(_cycle_item(str(i + 1), ganji, day_stem, age=i + 1, year=year))
    return years


# ============================================================
# MONTHLY CYCLE (월운)
# ============================================================

def month_sample_date(year: int, month: int) -> tuple[int, int, int]:
    """
    Date whose month pillar governs display month ``month`` of ``year``.

    Month pillars turn over at the solar term early in the following
    Gregorian month (e.g. Ip-chun around Feb 4 opens the first month), so
    the 15th of the next month is sampled. December rolls into January.
    """
    if month == 12:
        return year + 1, 1, MONTH_SAMPLE_DAY
    return year, month + 1, MONTH_SAMPLE_DAY


def generate_wolwun(oracle: CalendarOracle, start_year: int, end_year: int,
                    day_stem: str) -> list[CycleItem]:
    """
    Twelve entries per year for every year in [start_year, end_year].

    A month the oracle cannot answer is logged and left out.
    """
    months = []
    for year in range(start_year, end_year + 1):
        for month in range(1, 13):
            qy, qm, qd = month_sample_date(year, month)
            try:
                ganji = oracle.month_ganji(qy, qm, qd)
            except OracleError as exc:
                logger.warning("Skipping monthly cycle %d-%02d: %s", year, month, exc)
                continue
            if not is_valid_ganji(ganji):
                logger.warning("Skipping monthly cycle %d-%02d: malformed stem-branch %r",
                               year, month, ganji)
                continue
            months.append(_cycle_item(str(month), ganji, day_stem, year=year, month=month))
    return months
