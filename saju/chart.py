"""
Birth chart creation library.
Computes the Four Pillars, element counts and luck cycle tables from a
solar birth date and clock time.

Usage from Python:
    from saju.chart import compute_birth_chart
    chart = compute_birth_chart(
        name="홍길동", birth_date="1990-05-15", birth_time="14:30", gender="male",
    )
    chart.to_dict()
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, Union

from saju.astro_calendar import (
    CalendarOracle, LunarCalendarOracle, OracleError, correct_hour_boundary, solar_term_korean,
)
from saju.bazi import Element, Pillar, build_pillar, element_of
from saju.cycles import (
    WOLWUN_YEARS_AHEAD, CycleItem, generate_daewun, generate_saewun, generate_wolwun,
    visible_daewun,
)
from saju.narrative import Narrative, NarrativeGenerator, attach_narrative

logger = logging.getLogger(__name__)

GENDER_ALIASES = {
    "male": "male", "m": "male", "남": "male", "남성": "male",
    "female": "female", "f": "female", "여": "female", "여성": "female",
}


@dataclass(frozen=True)
class MissingElement:
    element: Element
    priority: int  # 1 or 2

    def to_dict(self):
        return {
            "element": self.element.value,
            "korean": self.element.korean,
            "priority": self.priority,
        }


@dataclass
class BirthChart:
    name: str
    gender: str
    birth_date: date
    birth_time: str
    korean_age: int
    solar_date_str: str
    lunar_date_str: str
    solar_term_str: str
    year_pillar: Pillar
    month_pillar: Pillar
    day_pillar: Pillar
    hour_pillar: Pillar
    element_counts: dict[Element, int]
    missing_elements: list[MissingElement] = field(default_factory=list)
    daewun: list[CycleItem] = field(default_factory=list)
    saewun: list[CycleItem] = field(default_factory=list)
    wolwun: list[CycleItem] = field(default_factory=list)
    narrative: Optional[Narrative] = None

    @property
    def pillars(self) -> tuple[Pillar, Pillar, Pillar, Pillar]:
        return self.year_pillar, self.month_pillar, self.day_pillar, self.hour_pillar

    @property
    def day_stem(self) -> str:
        return self.day_pillar.stem

    def to_dict(self):
        return {
            "name": self.name,
            "gender": self.gender,
            "birth_date": self.birth_date.strftime("%Y-%m-%d"),
            "birth_time": self.birth_time,
            "korean_age": self.korean_age,
            "solar_date": self.solar_date_str,
            "lunar_date": self.lunar_date_str,
            "solar_term": self.solar_term_str,
            "pillars": {p.position: p.to_dict() for p in self.pillars},
            "element_counts": {e.value: n for e, n in self.element_counts.items()},
            "missing_elements": [m.to_dict() for m in self.missing_elements],
            "daewun": [c.to_dict() for c in visible_daewun(self.daewun)],
            "saewun": [c.to_dict() for c in self.saewun],
            "wolwun": [c.to_dict() for c in self.wolwun],
            "narrative": self.narrative.to_dict() if self.narrative else None,
        }


# ============================================================
# INPUT PARSING
# ============================================================

def parse_birth_date(birth_date: Union[str, date, datetime]) -> date:
    if isinstance(birth_date, datetime):
        return birth_date.date()
    if isinstance(birth_date, date):
        return birth_date
    try:
        return datetime.strptime(birth_date.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Birth date must be YYYY-MM-DD, got {birth_date!r}") from exc


def parse_birth_time(birth_time: Union[str, time]) -> tuple[int, int]:
    if isinstance(birth_time, time):
        return birth_time.hour, birth_time.minute
    try:
        parsed = datetime.strptime(birth_time.strip(), "%H:%M")
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Birth time must be HH:MM (24h), got {birth_time!r}") from exc
    return parsed.hour, parsed.minute


def parse_gender(gender: str) -> str:
    normalized = GENDER_ALIASES.get(str(gender).strip().lower())
    if normalized is None:
        raise ValueError(f"Gender must be 'male' or 'female', got {gender!r}")
    return normalized


# ============================================================
# COMPUTATION HELPERS
# ============================================================

def count_elements(chars) -> dict[Element, int]:
    """
    Count elements over the chart's characters (4 stems + 4 branches).

    Characters without an element are skipped.
    """
    counts = {e: 0 for e in Element}
    for char in chars:
        element = element_of(char)
        if element is None:
            logger.warning("Character %r has no element; not counted", char)
            continue
        counts[element] += 1
    return counts


def missing_elements(counts: dict[Element, int], limit: int = 2) -> list[MissingElement]:
    """
    Weakest elements of the chart, for the narrative layer.

    Elements with count 0 or 1, ascending by count; ties keep the
    Wood, Fire, Earth, Metal, Water order.
    """
    weak = [e for e in Element if counts.get(e, 0) <= 1]
    weak.sort(key=lambda e: counts.get(e, 0))
    return [MissingElement(e, priority) for priority, e in enumerate(weak[:limit], start=1)]


def format_solar_date(d: date) -> str:
    return f"{d.year}년 {d.month:02d}월 {d.day:02d}일"


def format_lunar_date(year: int, month: int, day: int, is_leap: bool) -> str:
    leap = "윤" if is_leap else ""
    return f"{year}년 {leap}{month:02d}월 {day:02d}일"


def format_solar_term(name: str, term_date: date) -> str:
    return f"{solar_term_korean(name)} {term_date.year}년 {term_date.month}월 {term_date.day}일"


# ============================================================
# CHART COMPUTATION
# ============================================================

def compute_birth_chart(name, birth_date, birth_time, gender, *,
                        oracle: Optional[CalendarOracle] = None,
                        today: Optional[date] = None,
                        month_window: Optional[tuple[int, int]] = None,
                        narrative: Optional[NarrativeGenerator] = None,
                        with_narrative: bool = True) -> BirthChart:
    """
    Compute a full birth chart.

    This is the main entry point for the presentation layer.

    Args:
        name: str, used for the narrative only
        birth_date: str "YYYY-MM-DD", date or datetime (solar calendar)
        birth_time: str "HH:MM" (24h clock time) or time
        gender: "male" or "female"; decides the decade cycle direction
        oracle: CalendarOracle; defaults to LunarCalendarOracle
        today: reference date for the Korean age and the monthly window
        month_window: (first_year, last_year) of the monthly cycle table;
            defaults to the birth year through today.year + 5
        narrative: optional NarrativeGenerator; its failure falls back to
            the built-in narrative
        with_narrative: False leaves chart.narrative as None

    Returns:
        BirthChart

    Raises:
        ValueError: malformed date, time or gender
        OracleError: the calendar cannot read the birth instant itself
    """
    bdate = parse_birth_date(birth_date)
    hour, minute = parse_birth_time(birth_time)
    gender = parse_gender(gender)
    oracle = oracle or LunarCalendarOracle()
    today = today or date.today()

    eff_hour, eff_minute = correct_hour_boundary(hour, minute)
    if (eff_hour, eff_minute) != (hour, minute):
        logger.debug("Birth time %02d:%02d on an hour boundary, reading as %02d:%02d",
                     hour, minute, eff_hour, eff_minute)

    reading = oracle.read(bdate.year, bdate.month, bdate.day, eff_hour, eff_minute)

    day_stem = reading.day_ganji[:1]
    pillars = [
        build_pillar(ganji[:1], ganji[1:2], day_stem, position)
        for position, ganji in (
            ("year", reading.year_ganji),
            ("month", reading.month_ganji),
            ("day", reading.day_ganji),
            ("hour", reading.hour_ganji),
        )
    ]
    yp, mp, dp, hp = pillars

    counts = count_elements(ch for p in pillars for ch in (p.stem, p.branch))

    # Decade anchor; a failure here only costs the oracle's start age
    try:
        anchor = oracle.decade_anchor(bdate.year, bdate.month, bdate.day,
                                      eff_hour, eff_minute, gender)
    except OracleError as exc:
        logger.warning("Decade anchor unavailable: %s", exc)
        anchor = None

    if month_window is None:
        month_window = (bdate.year, max(bdate.year, today.year + WOLWUN_YEARS_AHEAD))
    if month_window[0] > month_window[1]:
        logger.warning("Monthly cycle window %d-%d is empty", *month_window)

    chart = BirthChart(
        name=name,
        gender=gender,
        birth_date=bdate,
        birth_time=f"{hour:02d}:{minute:02d}",
        korean_age=today.year - bdate.year + 1,
        solar_date_str=format_solar_date(bdate),
        lunar_date_str=format_lunar_date(reading.lunar_year, reading.lunar_month,
                                         reading.lunar_day, reading.is_leap_month),
        solar_term_str=format_solar_term(reading.solar_term_name, reading.solar_term_date),
        year_pillar=yp,
        month_pillar=mp,
        day_pillar=dp,
        hour_pillar=hp,
        element_counts=counts,
        missing_elements=missing_elements(counts),
        daewun=generate_daewun(anchor, mp.ganji, day_stem, yp.stem, gender, bdate.year),
        saewun=generate_saewun(oracle, bdate.year, day_stem),
        wolwun=generate_wolwun(oracle, month_window[0], month_window[1], day_stem),
    )

    if with_narrative:
        attach_narrative(chart, narrative, target_year=today.year)
    return chart
