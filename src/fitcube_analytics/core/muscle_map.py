"""
Exercise → muscle group mapping.

Static lookup from exercise name to the primary muscle group (full set
credit) and secondary groups (partial credit).  Matching is keyword-based
on a normalized name, most specific keyword first, so "leg press" resolves
to quads before the generic "press" rule can claim it for chest.

Every name-based join in the package (volume credit, best-lift lookup,
weight sync) goes through normalize_exercise_name().
"""

import logging
import re
from dataclasses import dataclass

from .config import PRIMARY_MUSCLE_CREDIT, SECONDARY_MUSCLE_CREDIT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MuscleGroup:
    """One trackable muscle group."""

    id: str
    name_ru: str
    name_en: str


@dataclass(frozen=True)
class MuscleCredit:
    """Muscles credited by one set of an exercise."""

    primary: str
    secondary: tuple[str, ...] = ()

    def credits(self) -> list[tuple[str, float]]:
        """(muscle_id, credit) pairs for one working set."""
        pairs = [(self.primary, PRIMARY_MUSCLE_CREDIT)]
        pairs.extend((m, SECONDARY_MUSCLE_CREDIT) for m in self.secondary if m != self.primary)
        return pairs


MUSCLE_GROUPS: tuple[MuscleGroup, ...] = (
    # Upper body - push
    MuscleGroup("chest", "Грудные мышцы", "Chest"),
    MuscleGroup("shoulders", "Плечи (передние и средние дельты)", "Shoulders"),
    MuscleGroup("triceps", "Трицепс", "Triceps"),
    # Upper body - pull
    MuscleGroup("back", "Спина (широчайшие, ромбовидные)", "Back"),
    MuscleGroup("rear_delts", "Задние дельты", "Rear Delts"),
    MuscleGroup("biceps", "Бицепс", "Biceps"),
    # Lower body
    MuscleGroup("quads", "Квадрицепсы", "Quadriceps"),
    MuscleGroup("hamstrings", "Бицепс бедра", "Hamstrings"),
    MuscleGroup("glutes", "Ягодицы", "Glutes"),
    MuscleGroup("calves", "Икры", "Calves"),
    # Core / accessory
    MuscleGroup("core", "Кор (пресс, косые)", "Core"),
    MuscleGroup("forearms", "Предплечья", "Forearms"),
)

MUSCLE_IDS: tuple[str, ...] = tuple(m.id for m in MUSCLE_GROUPS)

_BY_ID: dict[str, MuscleGroup] = {m.id: m for m in MUSCLE_GROUPS}

# (keywords, primary, secondary); first rule with a matching keyword wins.
_KEYWORD_RULES: tuple[tuple[tuple[str, ...], str, tuple[str, ...]], ...] = (
    # Specific lower-body compounds before generic press/row/curl rules
    (("leg press", "жим ногами"), "quads", ("glutes",)),
    (("leg extension", "разгибание ног"), "quads", ()),
    (("leg curl", "сгибание ног"), "hamstrings", ()),
    (("romanian", "rdl", "румынская", "stiff-leg"), "hamstrings", ("glutes", "back")),
    (("deadlift", "становая", "мертвая тяга"), "hamstrings", ("back", "glutes", "quads")),
    (("hip thrust", "glute bridge", "ягодичный", "мостик"), "glutes", ("hamstrings",)),
    (("squat", "присед", "lunge", "выпады", "step-up", "зашагивания"), "quads", ("glutes", "hamstrings")),
    (("calf", "икры", "подъем на носки", "голень"), "calves", ()),
    # Shoulders before generic press
    (("face pull", "rear delt", "reverse fly", "задние дельты", "обратные разведения"), "rear_delts", ("back",)),
    (("lateral raise", "махи", "разведение в стороны"), "shoulders", ()),
    (("overhead press", "shoulder press", "military press", "ohp", "жим стоя", "жим сидя", "армейский жим", "жим над головой"),
     "shoulders", ("triceps",)),
    # Arms
    (("hammer curl", "молотки"), "biceps", ("forearms",)),
    (("curl", "бицепс", "сгибание рук", "сгибание"), "biceps", ("forearms",)),
    (("skull crusher", "french press", "французский", "pushdown", "triceps", "трицепс", "разгибание"), "triceps", ()),
    (("dip", "брусья"), "triceps", ("chest", "shoulders")),
    (("wrist", "запясть", "farmer", "фермер"), "forearms", ()),
    # Back
    (("pull-up", "pull up", "pullup", "chin-up", "подтягивания"), "back", ("biceps",)),
    (("pulldown", "тяга верхнего", "вертикальная тяга"), "back", ("biceps",)),
    (("row", "тяга штанги", "тяга гантели", "тяга нижнего", "тяга к поясу", "тяга в наклоне"), "back", ("biceps", "rear_delts")),
    (("hyperextension", "back extension", "гиперэкстензия"), "back", ("hamstrings", "glutes")),
    (("pullover", "пуловер"), "chest", ("back",)),
    # Chest
    (("bench", "chest press", "жим лежа", "жим лёжа", "push-up", "pushup", "отжимания"), "chest", ("triceps", "shoulders")),
    (("fly", "flye", "crossover", "разводка", "кроссовер"), "chest", ()),
    (("press", "жим"), "chest", ("triceps", "shoulders")),
    # Core
    (("plank", "crunch", "sit-up", "ab wheel", "leg raise", "планка", "пресс", "скручивания", "кор"), "core", ()),
)

_WARMUP_PREFIX = re.compile(r"^(разминка|warm-?up)\s*:\s*", re.IGNORECASE)
_EQUIPMENT_QUALIFIERS = re.compile(
    r"\b(with (a )?(barbell|dumbbells?|kettlebells?|cable)|on (a )?(bench|machine))\b"
    r"|со штангой|штанги|с гантел\w*|гантел\w*|на скамье|на тренажере|в тренажере|в кроссовере",
    re.IGNORECASE,
)


def normalize_exercise_name(name: str) -> str:
    """
    Normalize an exercise name for matching.

    Lowercases, strips warm-up prefixes and equipment qualifiers, and
    collapses whitespace.  "Разминка: Жим штанги лежа" → "жим лежа".
    """
    n = name.lower().strip()
    n = _WARMUP_PREFIX.sub("", n)
    n = _EQUIPMENT_QUALIFIERS.sub("", n)
    return re.sub(r"\s+", " ", n).strip()


_LIFT_SUFFIXES = re.compile(r"\s*(со штангой|с гантел\w*|на тренажере|в кроссовере)\s*", re.IGNORECASE)


def lift_name(name: str) -> str:
    """
    Lowercase an exercise name for best-lift lookups.

    Only the warm-up prefix and set-up phrases such as "со штангой" or
    "с гантелями" are dropped.  Bare equipment words stay, so
    "Жим гантелей лежа" and "Жим штанги лежа" remain different lifts.
    """
    n = _WARMUP_PREFIX.sub("", name.lower().strip())
    n = _LIFT_SUFFIXES.sub(" ", n)
    return re.sub(r"\s+", " ", n).strip()


def names_match(a: str, b: str) -> bool:
    """
    Fuzzy name match on normalized names.

    Equal, or one contains the other (both longer than 3 chars), or at least
    two significant words overlap.
    """
    n1 = normalize_exercise_name(a)
    n2 = normalize_exercise_name(b)
    if not n1 or not n2:
        return False
    if n1 == n2:
        return True
    if len(n1) > 3 and len(n2) > 3 and (n1 in n2 or n2 in n1):
        return True

    words1 = [w for w in n1.split(" ") if len(w) > 2]
    words2 = [w for w in n2.split(" ") if len(w) > 2]
    common = [w for w in words1 if any(w in w2 or w2 in w for w2 in words2)]
    return len(common) >= 2


def resolve_muscles(exercise_name: str) -> MuscleCredit | None:
    """
    Resolve the muscles an exercise trains.

    Args:
        exercise_name: Free-text exercise name (English or Russian)

    Returns:
        MuscleCredit, or None when no keyword matches
    """
    name = normalize_exercise_name(exercise_name)
    for keywords, primary, secondary in _KEYWORD_RULES:
        if any(k in name for k in keywords):
            return MuscleCredit(primary=primary, secondary=secondary)
    logger.debug("no muscle mapping for exercise %r", exercise_name)
    return None


def get_muscle_group(muscle_id: str) -> MuscleGroup | None:
    """Return the muscle group for an id, or None."""
    return _BY_ID.get(muscle_id)
