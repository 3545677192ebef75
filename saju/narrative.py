"""
Narrative layer interface.

Readings (personality, element advice, health, yearly fortune, feng shui)
are written by an external text generator. This module builds the payload
that generator receives and provides the built-in offline narrative used
when no generator is configured or the generator fails.

The computed chart never depends on this layer. A
narrative is attached to the chart as a whole or not at all.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Optional, Protocol

from saju.bazi import Element, get_combined_phonetic, sexagenary_for_year

logger = logging.getLogger(__name__)


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class NarrativeContext:
    """What the text generator is told about the chart."""

    name: str
    gender: str
    year_ganji: str
    month_ganji: str
    day_ganji: str
    hour_ganji: str
    day_stem: str
    element_counts: dict
    missing_elements: list  # Element, priority order
    target_year: int
    target_year_ganji: str

    def to_prompt(self) -> str:
        c = self.element_counts
        gender = "남성" if self.gender == "male" else "여성"
        missing = ", ".join(e.korean for e in self.missing_elements) or "없음"
        return "\n".join([
            "[사주 원국]",
            f"년주: {self.year_ganji}",
            f"월주: {self.month_ganji}",
            f"일주: {self.day_ganji}",
            f"시주: {self.hour_ganji}",
            f"오행: 목({c[Element.WOOD]}), 화({c[Element.FIRE]}), 토({c[Element.EARTH]}), "
            f"금({c[Element.METAL]}), 수({c[Element.WATER]})",
            f"부족한 오행: {missing}",
            f"사용자: {self.name}, {gender}",
            f"대상 연도: {self.target_year}년 "
            f"({get_combined_phonetic(self.target_year_ganji)}년 {self.target_year_ganji}年)",
        ])


@dataclass
class ChaeumAdvice:
    summary: str
    color: str
    direction: str
    items: str


@dataclass
class HealthAnalysis:
    weak_organs: str
    symptoms: str
    medical_advice: str
    food_recommendation: str


@dataclass
class YearFortune:
    overall: str
    wealth: str
    career: str
    health: str
    love: str


@dataclass
class LuckyDay:
    date: str
    time: str
    direction: str


@dataclass
class Narrative:
    day_master_reading: str
    chaeum_advice: ChaeumAdvice
    health_analysis: HealthAnalysis
    fortune: YearFortune
    lucky_table: list[LuckyDay] = field(default_factory=list)
    feng_shui_thesis: str = ""
    source: str = "default"

    def to_dict(self):
        return asdict(self)


class NarrativeGenerator(Protocol):
    def generate(self, context: NarrativeContext) -> Narrative: ...


def build_context(chart, target_year: int) -> NarrativeContext:
    """Narrative payload for a computed BirthChart."""
    return NarrativeContext(
        name=chart.name,
        gender=chart.gender,
        year_ganji=chart.year_pillar.ganji,
        month_ganji=chart.month_pillar.ganji,
        day_ganji=chart.day_pillar.ganji,
        hour_ganji=chart.hour_pillar.ganji,
        day_stem=chart.day_stem,
        element_counts=dict(chart.element_counts),
        missing_elements=[m.element for m in chart.missing_elements],
        target_year=target_year,
        target_year_ganji=sexagenary_for_year(target_year),
    )


# ============================================================
# DEFAULT NARRATIVE
# ============================================================

DAY_MASTER_READINGS = {
    "甲": "갑목(甲木)은 큰 나무와 같아 곧고 정직하며 리더십이 강합니다. 성장과 발전을 추구하며, 새로운 시작을 좋아합니다. 다소 고집이 있지만 의리가 있고 정의로운 성품을 지녔습니다.",
    "乙": "을목(乙木)은 풀과 넝쿨처럼 유연하고 적응력이 뛰어납니다. 부드럽고 온화하며 예술적 감각이 있습니다. 협조적이고 외교적 능력이 탁월합니다.",
    "丙": "병화(丙火)는 태양처럼 밝고 열정적입니다. 활발하고 적극적이며 사교성이 좋습니다. 낙천적이고 명랑하여 주변을 밝게 만드는 능력이 있습니다.",
    "丁": "정화(丁火)는 촛불처럼 은은하고 따뜻합니다. 섬세하고 예민하며 통찰력이 뛰어납니다. 내면의 열정을 간직하고 있으며 정신적 깊이가 있습니다.",
    "戊": "무토(戊土)는 산과 같이 듬직하고 안정적입니다. 신뢰감을 주며 포용력이 큽니다. 중재 능력이 뛰어나고 책임감이 강합니다.",
    "己": "기토(己土)는 논밭처럼 비옥하고 생산적입니다. 꼼꼼하고 실용적이며 현실적입니다. 인내심이 강하고 성실합니다.",
    "庚": "경금(庚金)은 강철처럼 강인하고 결단력이 있습니다. 정의감이 강하고 원칙을 중시합니다. 추진력과 실행력이 뛰어납니다.",
    "辛": "신금(辛金)은 보석처럼 섬세하고 정교합니다. 미적 감각이 뛰어나고 완벽을 추구합니다. 예민하고 감수성이 풍부합니다.",
    "壬": "임수(壬水)는 바다처럼 넓고 깊습니다. 지혜롭고 창의적이며 포용력이 큽니다. 자유로운 영혼으로 모험을 즐깁니다.",
    "癸": "계수(癸水)는 비와 이슬처럼 부드럽고 침투력이 있습니다. 직관력이 뛰어나고 영적 감각이 있습니다. 적응력이 좋고 인내심이 강합니다.",
}

# (color, direction) that strengthens each element
ELEMENT_REMEDIES = {
    Element.WOOD: ("초록색, 청색", "동쪽"),
    Element.FIRE: ("빨간색, 보라색", "남쪽"),
    Element.EARTH: ("노란색, 갈색", "중앙"),
    Element.METAL: ("흰색, 금색", "서쪽"),
    Element.WATER: ("검은색, 파란색", "북쪽"),
}

BALANCED_LABEL = "균형 잡힘"


def default_narrative(context: NarrativeContext) -> Narrative:
    """Offline narrative built from fixed text keyed on the chart."""
    missing = context.missing_elements
    if missing:
        labels = ", ".join(e.korean for e in missing)
        color, direction = ELEMENT_REMEDIES[missing[0]]
    else:
        labels = BALANCED_LABEL
        color, direction = ELEMENT_REMEDIES[Element.WATER]

    ganji = context.target_year_ganji
    year_label = f"{context.target_year}년 {get_combined_phonetic(ganji)}년({ganji}年)"

    return Narrative(
        day_master_reading=DAY_MASTER_READINGS.get(context.day_stem, "일간의 기운을 분석 중입니다."),
        chaeum_advice=ChaeumAdvice(
            summary=f"부족한 오행을 보충하여 균형을 맞추는 것이 좋습니다. {labels} 기운을 보강하세요.",
            color=color,
            direction=direction,
            items="해당 오행과 관련된 물건이나 음식을 가까이 하세요.",
        ),
        health_analysis=HealthAnalysis(
            weak_organs="오행 균형에 따라 주의가 필요한 장기가 있습니다.",
            symptoms="평소 건강 관리에 신경 쓰시기 바랍니다.",
            medical_advice="정기적인 건강검진을 권장합니다.",
            food_recommendation="균형 잡힌 식단을 유지하세요.",
        ),
        fortune=YearFortune(
            overall=f"{year_label}의 흐름을 살펴 꾸준히 준비하는 한 해가 될 것입니다.",
            wealth="재물운은 노력한 만큼 결실을 맺을 수 있습니다.",
            career="직장에서 인정받을 수 있는 기회가 있습니다.",
            health="건강 관리에 신경 쓰시기 바랍니다.",
            love="인간관계가 활발해지는 시기입니다.",
        ),
        lucky_table=[
            LuckyDay("1월 15일", "오전 9시-11시", "동쪽"),
            LuckyDay("3월 21일", "오전 7시-9시", "남쪽"),
            LuckyDay("6월 10일", "오후 1시-3시", "서쪽"),
        ],
        feng_shui_thesis="거주 공간의 기운을 좋게 하려면 환기를 자주 하고, 밝은 조명을 사용하세요. "
                         "침실은 북쪽이나 동쪽에 배치하면 좋습니다.",
        source="default",
    )


def attach_narrative(chart, generator: Optional[NarrativeGenerator] = None,
                     target_year: Optional[int] = None):
    """
    Attach a narrative to ``chart`` in place and return it.

    The generator's output is used when it succeeds; any failure falls back
    to the default narrative. The chart's computed fields are not touched.
    """
    if target_year is None:
        target_year = chart.birth_date.year + chart.korean_age - 1
    context = build_context(chart, target_year)

    narrative = None
    if generator is not None:
        try:
            narrative = generator.generate(context)
        except Exception:
            logger.exception("Narrative generation failed; using default narrative")
    if narrative is None:
        narrative = default_narrative(context)

    chart.narrative = narrative
    return narrative
