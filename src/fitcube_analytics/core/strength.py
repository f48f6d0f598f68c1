"""
Strength analysis: E1RM estimation, best lifts, strength levels,
inter-lift imbalances and recurring pain.

E1RM uses the Epley formula (Epley 1985):

    e1rm = w                      if reps == 1
    e1rm = w * (1 + reps / 30)    otherwise

Strength levels classify E1RM relative to bodyweight against
gender-specific standards for five reference lifts.  Only completed sets
of non-warmup exercises are considered anywhere in this module.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime

from .config import (
    DEFAULT_BODYWEIGHT_KG,
    EPLEY_REPS_DIVISOR,
    PAIN_MAX_EXERCISES,
    PAIN_MIN_FREQUENCY,
    PLATEAU_MIN_SESSIONS,
    PLATEAU_WEEKS_THRESHOLD,
    STRENGTH_LEVELS,
    TREND_CHANGE_THRESHOLD,
    TREND_MIN_POINTS,
    round_half_up,
)
from .engine.config_loader import ImbalanceRule, Policy, load_policy
from .models import (
    BestLift,
    CompletedExercise,
    Gender,
    ImbalanceReport,
    PainPattern,
    Plateau,
    Severity,
    StrengthAnalysis,
    StrengthLevel,
    Trend,
    WorkoutLog,
)
from .muscle_map import lift_name, normalize_exercise_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrengthStandard:
    """Relative-strength tier thresholds (E1RM / bodyweight) for one lift."""

    exercise: str
    name_ru: str
    aliases: tuple[str, ...]
    movement_pattern: str  # push | pull | squat | hinge
    male: tuple[float, float, float, float, float]  # untrained..elite
    female: tuple[float, float, float, float, float]

    def thresholds(self, gender: Gender) -> tuple[float, float, float, float, float]:
        return self.male if gender == "male" else self.female


# Tier thresholds in STRENGTH_LEVELS order: untrained, beginner,
# intermediate, advanced, elite.
STRENGTH_STANDARDS: tuple[StrengthStandard, ...] = (
    StrengthStandard(
        exercise="squat",
        name_ru="Приседания",
        aliases=("squat", "приседания", "присед", "goblet"),
        movement_pattern="squat",
        male=(0.75, 1.25, 1.5, 2.0, 2.5),
        female=(0.5, 0.75, 1.0, 1.5, 2.0),
    ),
    StrengthStandard(
        exercise="bench",
        name_ru="Жим лежа",
        aliases=("bench", "жим лежа", "жим лёжа"),
        movement_pattern="push",
        male=(0.5, 1.0, 1.25, 1.75, 2.0),
        female=(0.35, 0.5, 0.75, 1.0, 1.35),
    ),
    StrengthStandard(
        exercise="deadlift",
        name_ru="Становая тяга",
        aliases=("deadlift", "rdl", "становая", "румынская тяга", "мертвая тяга"),
        movement_pattern="hinge",
        male=(1.0, 1.5, 2.0, 2.5, 3.0),
        female=(0.75, 1.0, 1.5, 2.0, 2.5),
    ),
    StrengthStandard(
        exercise="ohp",
        name_ru="Жим стоя",
        aliases=("overhead press", "ohp", "shoulder press", "military press",
                 "армейский жим", "жим стоя", "жим над головой"),
        movement_pattern="push",
        male=(0.35, 0.55, 0.75, 1.0, 1.25),
        female=(0.25, 0.35, 0.5, 0.65, 0.85),
    ),
    StrengthStandard(
        exercise="row",
        name_ru="Тяга к поясу",
        aliases=("row", "тяга к поясу", "тяга штанги", "тяга гантели", "тяга в наклоне"),
        movement_pattern="pull",
        male=(0.5, 0.75, 1.0, 1.25, 1.5),
        female=(0.35, 0.5, 0.65, 0.85, 1.0),
    ),
)


# ---------------------------------------------------------------------------
# E1RM and best lifts
# ---------------------------------------------------------------------------


def calculate_e1rm(weight: float, reps: int) -> float:
    """
    Estimated one-rep max (Epley).

    A single is its own max; multi-rep estimates are rounded to the nearest
    whole unit.

    Args:
        weight: Load lifted
        reps: Reps performed

    Returns:
        E1RM; 0 for non-positive weight or reps
    """
    if weight <= 0 or reps <= 0:
        return 0
    if reps == 1:
        return weight
    return round_half_up(weight * (1 + reps / EPLEY_REPS_DIVISOR))


def _measurable_sets(exercise: CompletedExercise):
    """Yield (weight, reps) for working sets with usable numbers."""
    for s in exercise.working_sets():
        if not s.is_measurable:
            logger.debug("skipping set without weight/reps in %r", exercise.name)
            continue
        yield float(s.weight), int(s.reps)  # type: ignore[arg-type]


def get_best_lift_for_exercise(exercise_name: str, logs: list[WorkoutLog]) -> BestLift | None:
    """
    Best historical set for an exercise, by E1RM.

    Names match case-insensitively when either name contains the other,
    ignoring warm-up prefixes and set-up phrases (see lift_name).  Ties
    on E1RM go to the heavier weight, then the more recent date.

    Args:
        exercise_name: Exercise to look up
        logs: Workout history (any order)

    Returns:
        BestLift, or None if no matching working set exists
    """
    target = lift_name(exercise_name)
    if not target:
        return None

    best: BestLift | None = None
    best_key: tuple[float, float, str] | None = None

    for log in logs:
        for ex in log.completed_exercises:
            if ex.is_warmup:
                continue
            name = lift_name(ex.name)
            if not name or (target not in name and name not in target):
                continue
            for weight, reps in _measurable_sets(ex):
                e1rm = calculate_e1rm(weight, reps)
                key = (e1rm, weight, log.date)
                if best_key is None or key > best_key:
                    best_key = key
                    best = BestLift(weight=weight, reps=reps, e1rm=e1rm, date=log.date)

    return best


def _sorted_logs(logs: list[WorkoutLog]) -> list[WorkoutLog]:
    return sorted(logs, key=lambda log: log.date)


def find_standard_for_exercise(exercise_name: str) -> StrengthStandard | None:
    """Return the reference lift an exercise name belongs to, or None."""
    name = normalize_exercise_name(exercise_name)
    for standard in STRENGTH_STANDARDS:
        if any(alias in name for alias in standard.aliases):
            return standard
    return None


def _trend(history: list[float]) -> Trend:
    """Compare the mean of the recent half against the older half."""
    if len(history) < TREND_MIN_POINTS:
        return "stable"
    mid = len(history) // 2
    older, recent = history[:mid], history[mid:]
    avg_older = sum(older) / len(older)
    avg_recent = sum(recent) / len(recent)
    change = 0.0 if avg_older == 0 else (avg_recent - avg_older) / avg_older
    if change > TREND_CHANGE_THRESHOLD:
        return "improving"
    if change < -TREND_CHANGE_THRESHOLD:
        return "declining"
    return "stable"


def get_best_lifts(logs: list[WorkoutLog]) -> dict[str, dict]:
    """
    Best E1RM per reference lift with its date and trend.

    Returns:
        {standard.exercise: {"e1rm", "date", "trend"}}
    """
    history: dict[str, list[tuple[float, str]]] = {}

    for log in _sorted_logs(logs):
        for ex in log.completed_exercises:
            if ex.is_warmup:
                continue
            standard = find_standard_for_exercise(ex.name)
            if standard is None:
                continue
            top = max((calculate_e1rm(w, r) for w, r in _measurable_sets(ex)), default=0)
            if top > 0:
                history.setdefault(standard.exercise, []).append((top, log.date))

    result: dict[str, dict] = {}
    for key, points in history.items():
        best_e1rm, best_date = points[0]
        for e1rm, day in points[1:]:
            if e1rm > best_e1rm:
                best_e1rm, best_date = e1rm, day
        result[key] = {
            "e1rm": best_e1rm,
            "date": best_date,
            "trend": _trend([p[0] for p in points]),
        }
    return result


# ---------------------------------------------------------------------------
# Strength levels
# ---------------------------------------------------------------------------


def calculate_relative_strength(e1rm: float, bodyweight: float) -> float:
    """E1RM / bodyweight rounded to 2 decimals; 0 when bodyweight is unknown."""
    if bodyweight <= 0:
        return 0.0
    return round(e1rm / bodyweight, 2)


def get_strength_level(relative_strength: float, standard: StrengthStandard, gender: Gender) -> StrengthLevel:
    """Highest tier whose threshold the ratio reaches ("untrained" below beginner)."""
    thresholds = standard.thresholds(gender)
    level: StrengthLevel = "untrained"
    for name, threshold in zip(STRENGTH_LEVELS[1:], thresholds[1:]):
        if relative_strength >= threshold:
            level = name  # type: ignore[assignment]
    return level


def calculate_percentile(relative_strength: float, standard: StrengthStandard, gender: Gender) -> int:
    """
    Position on a 0-100 scale where each tier spans 20 points.

    Below the untrained threshold maps to 0, at or above elite to 100.
    """
    t = standard.thresholds(gender)
    if relative_strength <= t[0]:
        return 0
    for i in range(len(t) - 1):
        if relative_strength < t[i + 1]:
            position = (relative_strength - t[i]) / (t[i + 1] - t[i])
            return round_half_up(i * 20 + position * 20)
    return 100


def get_next_level_target(
    current_e1rm: float,
    bodyweight: float,
    standard: StrengthStandard,
    gender: Gender,
    current_level: StrengthLevel,
) -> float:
    """E1RM needed for the next tier; the current E1RM once elite."""
    idx = STRENGTH_LEVELS.index(current_level)
    if idx >= len(STRENGTH_LEVELS) - 1:
        return current_e1rm
    return round_half_up(standard.thresholds(gender)[idx + 1] * bodyweight)


def analyze_strength(
    logs: list[WorkoutLog],
    bodyweight: float,
    gender: Gender,
) -> list[StrengthAnalysis]:
    """
    Classify every reference lift that has at least one recorded set.

    Args:
        logs: Full workout history
        bodyweight: Bodyweight in kg (<= 0 → DEFAULT_BODYWEIGHT_KG)
        gender: "male" or "female"

    Returns:
        One StrengthAnalysis per lift, in STRENGTH_STANDARDS order
    """
    if bodyweight <= 0:
        bodyweight = DEFAULT_BODYWEIGHT_KG

    best = get_best_lifts(logs)
    analysis: list[StrengthAnalysis] = []

    for standard in STRENGTH_STANDARDS:
        lift = best.get(standard.exercise)
        if lift is None:
            continue
        rel = calculate_relative_strength(lift["e1rm"], bodyweight)
        level = get_strength_level(rel, standard, gender)
        analysis.append(
            StrengthAnalysis(
                exercise_name=standard.exercise,
                exercise_name_ru=standard.name_ru,
                e1rm=lift["e1rm"],
                relative_strength=rel,
                level=level,
                percentile=calculate_percentile(rel, standard, gender),
                next_level_target=get_next_level_target(lift["e1rm"], bodyweight, standard, gender, level),
                trend=lift["trend"],
            )
        )
    return analysis


def calculate_overall_level(strength_analysis: list[StrengthAnalysis]) -> StrengthLevel:
    """Average tier across analysed lifts ("untrained" when none)."""
    if not strength_analysis:
        return "untrained"
    avg = sum(STRENGTH_LEVELS.index(s.level) for s in strength_analysis) / len(strength_analysis)
    return STRENGTH_LEVELS[round_half_up(avg)]  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Imbalances
# ---------------------------------------------------------------------------

# rule name -> direction ("high" = ratio above ideal) -> (description, recommendation, exercises)
_IMBALANCE_TEXT: dict[str, dict[str, tuple[str, str, tuple[str, ...]]]] = {
    "upper_lower": {
        "high": (
            "Ноги значительно сильнее верха тела",
            "Добавьте больше жимовых движений (жим лёжа, отжимания на брусьях)",
            ("Жим лежа", "Жим гантелей"),
        ),
        "low": (
            "Верх тела непропорционально силён относительно ног",
            "Увеличьте объём приседаний и выпадов",
            ("Приседания", "Выпады"),
        ),
    },
    "quad_hip": {
        "high": (
            "Ягодицы и бицепс бедра сильнее квадрицепсов",
            "Добавьте фронтальные приседания и жим ногами",
            ("Приседания", "Жим ногами"),
        ),
        "low": (
            "Квадрицепсы сильнее ягодиц и бицепса бедра",
            "Увеличьте объём становой и румынской тяги",
            ("Становая тяга", "Румынская тяга"),
        ),
    },
    "push_pull": {
        "high": (
            "Тяговые движения доминируют над жимовыми",
            "Можно добавить жимовые упражнения для баланса",
            ("Жим лежа", "Жим гантелей", "Отжимания"),
        ),
        "low": (
            "Жимовые движения сильнее тяговых — риск проблем с осанкой",
            "Добавьте тяги: к поясу, горизонтальные, подтягивания",
            ("Тяга к поясу", "Подтягивания", "Тяга в наклоне"),
        ),
    },
    "vertical_horizontal_press": {
        "high": (
            "Жим стоя непропорционально силён относительно жима лёжа",
            "Добавьте горизонтальные жимы",
            ("Жим лежа",),
        ),
        "low": (
            "Жим над головой отстаёт от жима лёжа",
            "Увеличьте объём вертикальных жимов и работу на плечи",
            ("Жим стоя", "Жим гантелей сидя"),
        ),
    },
}


def _severity(deviation: float, rule: ImbalanceRule) -> Severity:
    if deviation > rule.severe:
        return "severe"
    if deviation > rule.moderate:
        return "moderate"
    return "mild"


def detect_imbalances(
    strength_analysis: list[StrengthAnalysis],
    policy: Policy | None = None,
) -> list[ImbalanceReport]:
    """
    Compare E1RM ratios of paired lifts against their ideal ratio.

    A pair is reported when the relative deviation |ratio - ideal| / ideal
    exceeds the rule's mild band; both lifts must have an E1RM.

    Args:
        strength_analysis: Output of analyze_strength()
        policy: Policy tables (defaults to load_policy())

    Returns:
        One ImbalanceReport per out-of-band pair, in rule order
    """
    policy = policy or load_policy()
    e1rm = {s.exercise_name: s.e1rm for s in strength_analysis}
    reports: list[ImbalanceReport] = []

    for rule in policy.imbalance_rules:
        num = e1rm.get(rule.numerator, 0)
        den = e1rm.get(rule.denominator, 0)
        if num <= 0 or den <= 0:
            continue
        ratio = num / den
        deviation = abs(ratio - rule.ideal) / rule.ideal
        if deviation <= rule.mild:
            continue

        direction = "high" if ratio > rule.ideal else "low"
        description, recommendation, related = _IMBALANCE_TEXT.get(rule.name, {}).get(
            direction,
            (
                f"Соотношение {rule.numerator}/{rule.denominator} вне нормы",
                f"Подтяните отстающее движение ({rule.denominator if direction == 'high' else rule.numerator})",
                (),
            ),
        )
        reports.append(
            ImbalanceReport(
                type=rule.name,
                description=description,
                severity=_severity(deviation, rule),
                ratio=round(ratio, 2),
                ideal_ratio=rule.ideal,
                recommendation=recommendation,
                related_exercises=related,
            )
        )
    return reports


# ---------------------------------------------------------------------------
# Pain patterns and plateaus
# ---------------------------------------------------------------------------


def _movement_pattern(exercise_names: list[str]) -> str:
    lowered = [n.lower() for n in exercise_names]
    if any("жим" in n or "press" in n for n in lowered):
        return "жимовые"
    if any("тяга" in n or "pull" in n or "row" in n for n in lowered):
        return "тяговые"
    if any("присед" in n or "squat" in n for n in lowered):
        return "приседания"
    return "общий"


def analyze_pain_patterns(logs: list[WorkoutLog]) -> list[PainPattern]:
    """
    Group reported pain by body location.

    Only locations reported at least PAIN_MIN_FREQUENCY times are returned,
    most frequent first.  Associated exercises are the non-warmup exercises
    of the painful workouts, most frequent first.
    """
    counts: dict[str, int] = {}
    dates: dict[str, list[str]] = {}
    exercises: dict[str, Counter] = {}

    for log in logs:
        pain = log.feedback.pain
        if not pain.has_pain or not pain.location or not pain.location.strip():
            continue
        location = pain.location.strip().lower()
        counts[location] = counts.get(location, 0) + 1
        dates.setdefault(location, []).append(log.date)
        counter = exercises.setdefault(location, Counter())
        for ex in log.completed_exercises:
            if not ex.is_warmup:
                counter[ex.name] += 1

    patterns: list[PainPattern] = []
    for location, count in counts.items():
        if count < PAIN_MIN_FREQUENCY:
            continue
        names = [name for name, _ in exercises[location].most_common()]
        patterns.append(
            PainPattern(
                location=location,
                frequency=count,
                last_occurrence=max(dates[location]),
                associated_exercises=tuple(names[:PAIN_MAX_EXERCISES]),
                movement_pattern=_movement_pattern(names),
            )
        )

    patterns.sort(key=lambda p: p.frequency, reverse=True)
    return patterns


def detect_plateaus(
    logs: list[WorkoutLog],
    today: date | None = None,
    weeks_threshold: int = PLATEAU_WEEKS_THRESHOLD,
) -> list[Plateau]:
    """
    Exercises whose E1RM record is at least ``weeks_threshold`` weeks old.

    Requires PLATEAU_MIN_SESSIONS sessions of the exercise.

    Returns:
        Plateaus, longest-stuck first
    """
    today = today or date.today()
    history: dict[str, list[tuple[float, str]]] = {}

    for log in _sorted_logs(logs):
        for ex in log.completed_exercises:
            if ex.is_warmup:
                continue
            top = max((calculate_e1rm(w, r) for w, r in _measurable_sets(ex)), default=0)
            if top > 0:
                history.setdefault(ex.name, []).append((top, log.date))

    plateaus: list[Plateau] = []
    for name, points in history.items():
        if len(points) < PLATEAU_MIN_SESSIONS:
            continue
        pr_e1rm, pr_date = points[0]
        for e1rm, day in points[1:]:
            if e1rm > pr_e1rm:
                pr_e1rm, pr_date = e1rm, day
        pr_day = datetime.strptime(pr_date, "%Y-%m-%d").date()
        weeks = (today - pr_day).days // 7
        if weeks >= weeks_threshold:
            plateaus.append(
                Plateau(
                    exercise_name=name,
                    weeks_stuck=weeks,
                    last_pr=pr_date,
                    current_e1rm=points[-1][0],
                )
            )

    plateaus.sort(key=lambda p: p.weeks_stuck, reverse=True)
    return plateaus
