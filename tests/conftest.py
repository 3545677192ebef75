from __future__ import annotations

from datetime import date

import pytest

from saju.astro_calendar import DecadeAnchor, OracleError, OracleReading
from saju.bazi import EARTHLY_BRANCHES, HEAVENLY_STEMS, STEM_BY_HANJA, shift_ganji

# 1949-10-01 was a 甲子 day.
_DAY_ZERO = date(1949, 10, 1)

# Day of each Gregorian month on which its opening solar term (절기) falls.
_JIE_DAY = {1: 6, 2: 4, 3: 6, 4: 5, 5: 6, 6: 6, 7: 7, 8: 8, 9: 8, 10: 8, 11: 7, 12: 7}
_JIE_NAME = {1: "小寒", 2: "立春", 3: "惊蛰", 4: "清明", 5: "立夏", 6: "芒种",
             7: "小暑", 8: "立秋", 9: "白露", 10: "寒露", 11: "立冬", 12: "大雪"}


def _ganji(stem_index: int, branch_index: int) -> str:
    return HEAVENLY_STEMS[stem_index % 10].hanja + EARTHLY_BRANCHES[branch_index % 12].hanja


class FakeOracle:
    """Arithmetic calendar with fixed solar term days, for generator tests."""

    def __init__(self, supported=(1900, 2100), anchor="auto",
                 failing_years=(), failing_months=(), malformed_years=()):
        self.supported = supported
        self.anchor = anchor
        self.failing_years = set(failing_years)
        self.failing_months = set(failing_months)
        self.malformed_years = set(malformed_years)
        self.month_queries = []
        self.read_calls = []

    def _check(self, year):
        lo, hi = self.supported
        if not lo <= year <= hi:
            raise OracleError(f"{year} out of range")

    @staticmethod
    def _solar_year(year, month, day):
        return year - 1 if (month, day) < (2, 4) else year

    def _month(self, year, month, day):
        branch = month % 12 if day >= _JIE_DAY[month] else (month - 1) % 12
        y_stem = (self._solar_year(year, month, day) - 4) % 10
        tiger_stem = (y_stem % 5) * 2 + 2
        return _ganji(tiger_stem + (branch - 2) % 12, branch)

    def read(self, year, month, day, hour, minute):
        self._check(year)
        self.read_calls.append((year, month, day, hour, minute))
        solar_year = self._solar_year(year, month, day)
        idx = (date(year, month, day) - _DAY_ZERO).days % 60
        day_stem = idx % 10
        hour_branch = 0 if hour in (23, 0) else ((hour + 1) // 2) % 12
        term_month = month if day >= _JIE_DAY[month] else (month - 2) % 12 + 1
        term_year = year if term_month <= month else year - 1
        return OracleReading(
            year_ganji=_ganji(solar_year - 4, solar_year - 4),
            month_ganji=self._month(year, month, day),
            day_ganji=_ganji(idx, idx),
            hour_ganji=_ganji((day_stem % 5) * 2 + hour_branch, hour_branch),
            lunar_year=year,
            lunar_month=month,
            lunar_day=day,
            is_leap_month=False,
            solar_term_name=_JIE_NAME[term_month],
            solar_term_date=date(term_year, term_month, _JIE_DAY[term_month]),
        )

    def decade_anchor(self, year, month, day, hour, minute, gender):
        if self.anchor != "auto":
            return self.anchor
        reading = self.read(year, month, day, hour, minute)
        yang = STEM_BY_HANJA[reading.year_ganji[0]].index % 2 == 0
        forward = yang == (gender == "male")
        return DecadeAnchor(start_age=3, ganji=shift_ganji(reading.month_ganji, 1 if forward else -1))

    def year_ganji(self, year):
        self._check(year)
        if year in self.failing_years:
            raise OracleError(f"no data for {year}")
        if year in self.malformed_years:
            return "?"
        return _ganji(year - 4, year - 4)

    def month_ganji(self, year, month, day):
        self._check(year)
        self.month_queries.append((year, month, day))
        if (year, month) in self.failing_months:
            raise OracleError(f"no data for {year}-{month}")
        return self._month(year, month, day)


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture
def make_oracle():
    return FakeOracle
