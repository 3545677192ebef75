"""
Saju (Four Pillars) lookup tables and relational functions.

Handles:
- Heavenly Stem / Earthly Branch tables (Hanja, Korean reading, element, polarity)
- Hidden stems (jijanggan) and main qi of each branch
- Ten Gods (십신) labels relative to the day stem
- Pillar construction for the natal chart

Every table here is closed and static. Lookups on an unrecognized token
never raise; they return an explicit sentinel and log.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    WOOD = "Wood"
    FIRE = "Fire"
    EARTH = "Earth"
    METAL = "Metal"
    WATER = "Water"

    @property
    def korean(self) -> str:
        return ELEMENT_KOREAN[self]


ELEMENT_KOREAN = {
    Element.WOOD: "목(木)",
    Element.FIRE: "화(火)",
    Element.EARTH: "토(土)",
    Element.METAL: "금(金)",
    Element.WATER: "수(水)",
}


class TenGod(Enum):
    BI_GYEON = "비견"      # same element, same polarity
    GEOP_JAE = "겁재"      # same element, other polarity
    SIK_SIN = "식신"       # I produce, same polarity
    SANG_GWAN = "상관"     # I produce, other polarity
    PYEON_JAE = "편재"     # I control, same polarity
    JEONG_JAE = "정재"     # I control, other polarity
    PYEON_GWAN = "편관"    # controls me, same polarity
    JEONG_GWAN = "정관"    # controls me, other polarity
    PYEON_IN = "편인"      # produces me, same polarity
    JEONG_IN = "정인"      # produces me, other polarity
    DAY_MASTER = "일원"    # the day stem itself, natal stem row only
    UNKNOWN = ""

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class HeavenlyStem:
    hanja: str
    korean: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.hanja}({self.korean}) {self.polarity.value} {self.element.value}"


@dataclass(frozen=True)
class EarthlyBranch:
    hanja: str
    korean: str
    element: Element  # dominant element, used for counting
    index: int  # 0-11 in the cycle
    main_qi: str  # hanja of the dominant stem
    hidden_stems: tuple[str, ...]  # jijanggan, residual -> middle -> main

    def __str__(self):
        return f"{self.hanja}({self.korean}) {self.element.value}"


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("甲", "갑", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "을", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "병", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "정", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "무", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "기", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "경", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "신", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "임", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "계", Element.WATER, Polarity.YIN, 9),
)

EARTHLY_BRANCHES = (
    EarthlyBranch("子", "자", Element.WATER, 0, "癸", ("壬", "癸")),
    EarthlyBranch("丑", "축", Element.EARTH, 1, "己", ("癸", "辛", "己")),
    EarthlyBranch("寅", "인", Element.WOOD, 2, "甲", ("戊", "丙", "甲")),
    EarthlyBranch("卯", "묘", Element.WOOD, 3, "乙", ("甲", "乙")),
    EarthlyBranch("辰", "진", Element.EARTH, 4, "戊", ("乙", "癸", "戊")),
    EarthlyBranch("巳", "사", Element.FIRE, 5, "丙", ("戊", "庚", "丙")),
    EarthlyBranch("午", "오", Element.FIRE, 6, "丁", ("丙", "己", "丁")),
    EarthlyBranch("未", "미", Element.EARTH, 7, "己", ("丁", "乙", "己")),
    EarthlyBranch("申", "신", Element.METAL, 8, "庚", ("戊", "壬", "庚")),
    EarthlyBranch("酉", "유", Element.METAL, 9, "辛", ("庚", "辛")),
    EarthlyBranch("戌", "술", Element.EARTH, 10, "戊", ("辛", "丁", "戊")),
    EarthlyBranch("亥", "해", Element.WATER, 11, "壬", ("戊", "甲", "壬")),
)

# Lookup helpers
STEM_BY_HANJA = {s.hanja: s for s in HEAVENLY_STEMS}
BRANCH_BY_HANJA = {b.hanja: b for b in EARTHLY_BRANCHES}


def element_of(char: str) -> Optional[Element]:
    """Element of a stem or branch character; None for anything else."""
    token = STEM_BY_HANJA.get(char) or BRANCH_BY_HANJA.get(char)
    return token.element if token else None


# ============================================================
# TEN GODS (십신) RELATIONSHIP MATRIX
# ============================================================

# Row = day stem, column = target stem, both in 甲..癸 order.
# Precomputed from the element (same / produces / controls) and polarity
# (same / opposite) relations between the two stems.
_TEN_GOD_ROWS = (
    ("비견", "겁재", "식신", "상관", "편재", "정재", "편관", "정관", "편인", "정인"),  # 甲
    ("겁재", "비견", "상관", "식신", "정재", "편재", "정관", "편관", "정인", "편인"),  # 乙
    ("편인", "정인", "비견", "겁재", "식신", "상관", "편재", "정재", "편관", "정관"),  # 丙
    ("정인", "편인", "겁재", "비견", "상관", "식신", "정재", "편재", "정관", "편관"),  # 丁
    ("편관", "정관", "편인", "정인", "비견", "겁재", "식신", "상관", "편재", "정재"),  # 戊
    ("정관", "편관", "정인", "편인", "겁재", "비견", "상관", "식신", "정재", "편재"),  # 己
    ("편재", "정재", "편관", "정관", "편인", "정인", "비견", "겁재", "식신", "상관"),  # 庚
    ("정재", "편재", "정관", "편관", "정인", "편인", "겁재", "비견", "상관", "식신"),  # 辛
    ("식신", "상관", "편재", "정재", "편관", "정관", "편인", "정인", "비견", "겁재"),  # 壬
    ("상관", "식신", "정재", "편재", "정관", "편관", "정인", "편인", "겁재", "비견"),  # 癸
)

TEN_GOD_MATRIX = tuple(tuple(TenGod(label) for label in row) for row in _TEN_GOD_ROWS)


# ============================================================
# RELATIONAL FUNCTIONS
# ============================================================

def get_phonetic(char: str) -> str:
    """Korean reading of a stem or branch Hanja ("" if neither)."""
    token = STEM_BY_HANJA.get(char) or BRANCH_BY_HANJA.get(char)
    return token.korean if token else ""


def get_ten_god(day_stem: str, target: str) -> TenGod:
    """
    Ten God relation of ``target`` as seen from ``day_stem``.

    Branches are resolved to their main qi stem first, so a branch and its
    main qi stem always carry the same label.

    Args:
        day_stem: Hanja of the reference day stem
        target: Hanja of a stem or a branch

    Returns:
        TenGod member; TenGod.UNKNOWN if either token is unrecognized
    """
    if day_stem == target and day_stem in STEM_BY_HANJA:
        return TenGod.BI_GYEON

    branch = BRANCH_BY_HANJA.get(target)
    target_stem = STEM_BY_HANJA.get(branch.main_qi if branch else target)
    dm = STEM_BY_HANJA.get(day_stem)

    if dm is None or target_stem is None:
        logger.warning("Unrecognized token in Ten God lookup: day_stem=%r target=%r",
                       day_stem, target)
        return TenGod.UNKNOWN
    return TEN_GOD_MATRIX[dm.index][target_stem.index]


def get_combined_phonetic(ganji: str) -> str:
    """Korean reading of a two character stem-branch string, e.g. 甲子 -> 갑자."""
    if not ganji or len(ganji) < 2:
        return ""
    return get_phonetic(ganji[0]) + get_phonetic(ganji[1])


def is_valid_ganji(ganji: str) -> bool:
    """True for a two character string made of a stem then a branch."""
    return (isinstance(ganji, str) and len(ganji) == 2
            and ganji[0] in STEM_BY_HANJA and ganji[1] in BRANCH_BY_HANJA)


def shift_ganji(ganji: str, steps: int) -> str:
    """
    Move a stem-branch pair ``steps`` places through the cycle.

    Stem and branch advance independently (mod 10 / mod 12), so the pair
    stays on the same sexagenary track. Negative steps count backward.
    """
    stem = STEM_BY_HANJA[ganji[0]]
    branch = BRANCH_BY_HANJA[ganji[1]]
    return (HEAVENLY_STEMS[(stem.index + steps) % 10].hanja
            + EARTHLY_BRANCHES[(branch.index + steps) % 12].hanja)


def sexagenary_for_year(year: int) -> str:
    """
    Stem-branch of a Gregorian year (after Ip-chun).

    Year 4 CE was 甲子, the start of the cycle.
    """
    return HEAVENLY_STEMS[(year - 4) % 10].hanja + EARTHLY_BRANCHES[(year - 4) % 12].hanja


# ============================================================
# PILLAR CONSTRUCTION
# ============================================================

@dataclass(frozen=True)
class Pillar:
    stem: str
    stem_korean: str
    stem_ten_god: TenGod
    branch: str
    branch_korean: str
    branch_ten_god: TenGod
    element: Optional[Element]
    hidden_stems: tuple[str, ...]
    position: str = ""  # "year", "month", "day", "hour"

    @property
    def ganji(self) -> str:
        return self.stem + self.branch

    def __str__(self):
        return f"{self.ganji}({self.stem_korean}{self.branch_korean}) {self.stem_ten_god}/{self.branch_ten_god}"

    def to_dict(self):
        return {
            "position": self.position,
            "stem": self.stem,
            "stem_korean": self.stem_korean,
            "stem_ten_god": self.stem_ten_god.value,
            "branch": self.branch,
            "branch_korean": self.branch_korean,
            "branch_ten_god": self.branch_ten_god.value,
            "element": self.element.value if self.element else None,
            "hidden_stems": list(self.hidden_stems),
            "combined": self.ganji,
        }


def build_pillar(stem: str, branch: str, day_stem: str, position: str = "") -> Pillar:
    """
    Assemble one natal pillar.

    Ten Gods are always relative to the birth chart's day stem; the day
    pillar's own stem is labelled DAY_MASTER instead of a relation.
    """
    if stem == day_stem:
        stem_god = TenGod.DAY_MASTER
    else:
        stem_god = get_ten_god(day_stem, stem)

    stem_token = STEM_BY_HANJA.get(stem)
    branch_token = BRANCH_BY_HANJA.get(branch)
    if branch_token is None:
        logger.warning("Unrecognized branch %r while building %s pillar", branch, position or "a")

    return Pillar(
        stem=stem,
        stem_korean=get_phonetic(stem),
        stem_ten_god=stem_god,
        branch=branch,
        branch_korean=get_phonetic(branch),
        branch_ten_god=get_ten_god(day_stem, branch),
        element=stem_token.element if stem_token else None,
        hidden_stems=branch_token.hidden_stems if branch_token else (),
        position=position,
    )
