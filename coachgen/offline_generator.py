"""
Deterministic offline program generation.

The prompt is scanned for a coarse event category, an age group, a
training term and a period. The matching bundled template is then
customised by a list of substitution rules applied to two parsed fields
of the template text:

- volume: "N sets x M reps" and "N x Dm"
- intensity: "P% effort" and "P-Q% effort"

Each field occurrence is rewritten at most once, so the output of one rule
is never fed into another.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .offline_templates import DEFAULT_TEMPLATES, TemplateCategory

logger = logging.getLogger(__name__)

OFFLINE_MARKER = "OFFLINE GENERATED PROGRAM"

AGE_GROUPS = ("U12", "U14", "U16", "U18", "U20")
DEFAULT_AGE_GROUP = "Senior"

MIDDLE_DISTANCE_KEYWORDS = ("middle", "800", "1500")
LONG_DISTANCE_KEYWORDS = ("long", "5000", "10000")

# "Long Term" describes program length, not the event
_TRAINING_LENGTH_RE = re.compile(r"\b(?:short|medium|long) term\b")
_PRE_COMPETITION_RE = re.compile(r"\bPre-Competition\b")
_COMPETITION_RE = re.compile(r"(?<!Pre-)\bCompetition\b")


class TemplateField(Enum):
    VOLUME = "volume"
    INTENSITY = "intensity"


FIELD_PATTERNS: Dict[TemplateField, "re.Pattern[str]"] = {
    TemplateField.VOLUME: re.compile(r"\b\d+ sets x \d+ reps\b|\b\d+ x \d+m\b"),
    TemplateField.INTENSITY: re.compile(r"\b\d+(?:-\d+)?% effort\b"),
}


@dataclass(frozen=True)
class ProgramContext:
    """Parameters extracted from a prompt"""
    category: TemplateCategory
    age_group: str
    term: Optional[str] = None
    period: Optional[str] = None


@dataclass(frozen=True)
class SubstitutionRule:
    """Replace one field value when the condition holds for the context"""
    field: TemplateField
    target: str
    replacement: str
    condition: Callable[[ProgramContext], bool]
    description: str = ""

    def applies_to(self, context: ProgramContext) -> bool:
        return self.condition(context)


def _is_youth(context: ProgramContext) -> bool:
    return context.age_group in ("U12", "U14")


def _term_is(term: str) -> Callable[[ProgramContext], bool]:
    return lambda context: context.term == term


def _period_is(period: str) -> Callable[[ProgramContext], bool]:
    return lambda context: context.period == period


DEFAULT_RULES: Sequence[SubstitutionRule] = (
    # Younger athletes: reduce volume
    SubstitutionRule(TemplateField.VOLUME, "4 sets x 6 reps", "3 sets x 8 reps", _is_youth, "youth strength volume"),
    SubstitutionRule(TemplateField.VOLUME, "4 x 100m", "3 x 80m", _is_youth, "youth sprint volume"),
    SubstitutionRule(TemplateField.VOLUME, "6 x 200m", "4 x 150m", _is_youth, "youth interval volume"),

    # Closer to competition: raise intensity
    SubstitutionRule(TemplateField.INTENSITY, "70-75% effort", "75-80% effort",
                     _term_is("Pre-Competition"), "pre-competition aerobic intensity"),
    SubstitutionRule(TemplateField.INTENSITY, "80% effort", "85% effort",
                     _term_is("Pre-Competition"), "pre-competition interval intensity"),
    SubstitutionRule(TemplateField.INTENSITY, "70-75% effort", "80-85% effort",
                     _term_is("Competition"), "competition aerobic intensity"),
    SubstitutionRule(TemplateField.INTENSITY, "80% effort", "90% effort",
                     _term_is("Competition"), "competition interval intensity"),

    # General period: more volume at lower intensity
    SubstitutionRule(TemplateField.VOLUME, "4 x 100m", "3 x 80m", _period_is("General"), "general period sprint volume"),
    SubstitutionRule(TemplateField.VOLUME, "6 x 200m", "4 x 150m", _period_is("General"), "general period interval volume"),

    # Specific period: event-specific intensity
    SubstitutionRule(TemplateField.INTENSITY, "70-75% effort", "75-80% effort",
                     _period_is("Specific"), "specific period intensity"),
)


def select_category(prompt: str) -> TemplateCategory:
    """Pick the template category: middle distance, then long distance, else sprints"""
    text = _TRAINING_LENGTH_RE.sub(" ", prompt.lower())

    if any(keyword in text for keyword in MIDDLE_DISTANCE_KEYWORDS):
        return TemplateCategory.MIDDLE_DISTANCE
    if any(keyword in text for keyword in LONG_DISTANCE_KEYWORDS):
        return TemplateCategory.LONG_DISTANCE
    return TemplateCategory.SPRINTS


def extract_age_group(prompt: str) -> str:
    for age_group in AGE_GROUPS:
        if re.search(rf"\b{age_group}\b", prompt):
            return age_group
    return DEFAULT_AGE_GROUP


def extract_term(prompt: str) -> Optional[str]:
    if _PRE_COMPETITION_RE.search(prompt):
        return "Pre-Competition"
    if _COMPETITION_RE.search(prompt):
        return "Competition"
    return None


def extract_period(prompt: str) -> Optional[str]:
    for period in ("General", "Specific"):
        if re.search(rf"\b{period}\b", prompt):
            return period
    return None


def extract_context(prompt: str) -> ProgramContext:
    return ProgramContext(
        category=select_category(prompt),
        age_group=extract_age_group(prompt),
        term=extract_term(prompt),
        period=extract_period(prompt),
    )


class OfflineFallbackGenerator:
    """
    Produces a complete program document with no network dependency.

    Templates are captured once at construction and never mutated. Output
    is a pure function of the prompt.
    """

    def __init__(self,
                 templates: Optional[Mapping[TemplateCategory, str]] = None,
                 rules: Optional[Sequence[SubstitutionRule]] = None):
        source = DEFAULT_TEMPLATES if templates is None else templates
        missing = [category.value for category in TemplateCategory if category not in source]
        if missing:
            raise ValueError(f"Missing offline templates: {missing}")

        self._templates: Dict[TemplateCategory, str] = dict(source)
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)

    def template_for(self, category: TemplateCategory) -> str:
        return self._templates[category]

    def active_replacements(self, context: ProgramContext) -> Dict[TemplateField, Dict[str, str]]:
        """Merge applicable rules per field; the first rule for a target wins"""
        merged: Dict[TemplateField, Dict[str, str]] = {field: {} for field in TemplateField}
        for rule in self.rules:
            if rule.applies_to(context):
                merged[rule.field].setdefault(rule.target, rule.replacement)
        return merged

    def customize(self, template: str, context: ProgramContext) -> str:
        """Rewrite volume and intensity fields of a template for the context"""
        text = template
        for field, replacements in self.active_replacements(context).items():
            if not replacements:
                continue
            text = FIELD_PATTERNS[field].sub(
                lambda match: replacements.get(match.group(0), match.group(0)),
                text
            )
        return text

    def generate_offline(self, prompt: str) -> str:
        context = extract_context(prompt)
        logger.info(
            f"Generating offline program: category={context.category.value}, "
            f"age_group={context.age_group}, term={context.term}, period={context.period}"
        )

        program = self.customize(self.template_for(context.category), context)
        return f"{OFFLINE_MARKER}\n\n{program}"

    def list_rules(self, context: Optional[ProgramContext] = None) -> List[SubstitutionRule]:
        """Rules in order, optionally limited to those that apply to a context"""
        if context is None:
            return list(self.rules)
        return [rule for rule in self.rules if rule.applies_to(context)]
