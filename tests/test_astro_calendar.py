from __future__ import annotations

from datetime import date

import pytest
from lunar_python import Solar

from saju.astro_calendar import (
    LunarCalendarOracle, OracleError, correct_hour_boundary, solar_term_korean,
)
from saju.bazi import STEM_BY_HANJA, shift_ganji
from saju.chart import compute_birth_chart
from saju.cycles import generate_saewun

TODAY = date(2026, 10, 17)


@pytest.fixture(scope="module")
def oracle():
    return LunarCalendarOracle()


def _chart(oracle, birth_date, birth_time, gender="male"):
    return compute_birth_chart("A", birth_date, birth_time, gender, oracle=oracle,
                               today=TODAY, month_window=(2026, 2026), with_narrative=False)


@pytest.mark.parametrize("clock, expected", [
    ((19, 0), (18, 59)),
    ((23, 0), (22, 59)),
    ((1, 0), (0, 59)),
    ((19, 1), (19, 1)),
    ((20, 0), (20, 0)),
    ((0, 0), (0, 0)),
])
def test_correct_hour_boundary(clock, expected) -> None:
    assert correct_hour_boundary(*clock) == expected


def test_solar_term_korean_names() -> None:
    assert solar_term_korean("立夏") == "입하"
    assert solar_term_korean("冬至") == "동지"
    assert solar_term_korean("unknown") == "unknown"


def test_reading_for_new_year_2000(oracle) -> None:
    """2000-01-01 falls before Lunar New Year and before Ip-chun."""

    reading = oracle.read(2000, 1, 1, 0, 0)

    assert reading.year_ganji == "己卯"
    assert reading.month_ganji == "丙子"
    assert reading.day_ganji == "戊午"
    assert reading.hour_ganji == "壬子"
    assert (reading.lunar_year, reading.lunar_month, reading.lunar_day) == (1999, 11, 25)
    assert not reading.is_leap_month
    assert solar_term_korean(reading.solar_term_name) == "동지"
    assert reading.solar_term_date == date(1999, 12, 22)


def test_lunar_date_string_keeps_previous_lunar_year(oracle) -> None:
    chart = _chart(oracle, "2000-01-01", "00:00", "female")

    assert chart.lunar_date_str == "1999년 11월 25일"
    assert chart.solar_term_str == "동지 1999년 12월 22일"


def test_chart_1990(oracle) -> None:
    chart = _chart(oracle, "1990-05-15", "14:30")

    assert chart.year_pillar.ganji == "庚午"
    assert chart.month_pillar.ganji == "辛巳"
    assert sum(chart.element_counts.values()) == 8
    # 庚 is Yang: a male chart steps forward from the month pillar
    assert chart.daewun[0].ganji == "壬午"
    assert 0 <= chart.daewun[0].age <= 10
    stems = [STEM_BY_HANJA[d.ganji[0]].index for d in chart.daewun]
    assert all((b - a) % 10 == 1 for a, b in zip(stems, stems[1:]))


def test_decade_anchor_backward_for_female(oracle) -> None:
    anchor = oracle.decade_anchor(1990, 5, 15, 14, 30, "female")

    assert anchor.ganji == shift_ganji("辛巳", -1)


@pytest.mark.parametrize("boundary, before", [("19:00", "18:59"), ("23:00", "22:59")])
def test_hour_boundary_with_real_calendar(oracle, boundary, before) -> None:
    assert (_chart(oracle, "1990-05-15", boundary).hour_pillar
            == _chart(oracle, "1990-05-15", before).hour_pillar)


def test_minute_past_boundary_changes_hour_pillar(oracle) -> None:
    assert (_chart(oracle, "1990-05-15", "19:01").hour_pillar.branch
            != _chart(oracle, "1990-05-15", "19:00").hour_pillar.branch)


def test_year_and_month_ganji(oracle) -> None:
    assert oracle.year_ganji(1990) == "庚午"
    assert oracle.year_ganji(2000) == "庚辰"
    assert oracle.year_ganji(2026) == "丙午"
    assert oracle.month_ganji(2025, 2, 15) == "戊寅"


def test_out_of_range_raises_oracle_error(oracle) -> None:
    with pytest.raises(OracleError):
        oracle.year_ganji(2101)
    with pytest.raises(OracleError):
        oracle.read(1899, 6, 1, 12, 0)
    with pytest.raises(OracleError):
        oracle.month_ganji(2101, 1, 15)


def test_annual_cycle_with_real_calendar(oracle) -> None:
    years = generate_saewun(oracle, 1950, "甲")

    assert [y.year for y in years] == list(range(1950, 2031))
    assert years[0].ganji == "庚寅"


def test_annual_cycle_halts_cleanly_near_2100(oracle) -> None:
    years = generate_saewun(oracle, 2050, "甲")

    assert years[-1].year == 2100


def test_decade_years_match_calendar_start_year(oracle) -> None:
    chart = compute_birth_chart("A", "1990-05-15", "14:30", "male", oracle=oracle,
                                today=TODAY, month_window=(2026, 2026), with_narrative=False)
    da_yun = Solar.fromYmdHms(1990, 5, 15, 14, 30, 0).getLunar().getEightChar().getYun(1).getDaYun()

    first = chart.daewun[0]
    assert first.year == da_yun[1].getStartYear()
    assert first.year == 1990 + first.age
    # the annual row for the same calendar year is one older in Korean reckoning
    annual = {y.year: y for y in chart.saewun}
    assert annual[first.year].age == first.age + 1
    assert [d.year for d in chart.daewun[:3]] == [first.year, first.year + 10, first.year + 20]


def test_decade_opening_in_birth_year_shows_infant_label(oracle) -> None:
    # two days before 惊蛰 in a Yang year: a male chart runs forward and
    # the first decade opens before the year is out
    chart = _chart(oracle, "1990-03-04", "12:00")

    assert chart.month_pillar.ganji == "戊寅"
    assert chart.daewun[0].ganji == "己卯"
    assert chart.daewun[0].age == 0
    assert chart.daewun[0].label == "0.6"
    assert chart.daewun[0].year == 1990
