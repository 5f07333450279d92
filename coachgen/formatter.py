"""
Conversion of generated program text into role-tagged segments.

The formatter does not care whether text came from the remote service or
the offline generator. Text is split into blocks on blank lines; blocks
that start with a weekday name are classified line by line, every other
block becomes a single plain segment.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple


class SegmentRole(Enum):
    DAY_HEADER = "day_header"
    FOCUS_LINE = "focus_line"
    SECTION_HEADER = "section_header"
    EXERCISE_LABEL = "exercise_label"
    DETAIL = "detail"
    PLAIN = "plain"


@dataclass(frozen=True)
class StyledSegment:
    text: str
    role: SegmentRole

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "role": self.role.value}


@dataclass(frozen=True)
class StyledDocument:
    """Ordered, immutable sequence of styled segments"""
    segments: Tuple[StyledSegment, ...] = ()

    def __iter__(self) -> Iterator[StyledSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> StyledSegment:
        return self.segments[index]

    def to_dicts(self) -> List[Dict[str, str]]:
        return [segment.to_dict() for segment in self.segments]

    def plain_text(self) -> str:
        return "\n".join(segment.text for segment in self.segments)

    def with_role(self, role: SegmentRole) -> List[StyledSegment]:
        return [segment for segment in self.segments if segment.role == role]


class LineClassifier:
    """Decides whether a single line has a given role"""

    role: SegmentRole = SegmentRole.PLAIN

    def matches(self, line: str) -> bool:
        raise NotImplementedError


class RegexLineClassifier(LineClassifier):

    def __init__(self, pattern: str, role: SegmentRole):
        self.pattern = re.compile(pattern)
        self.role = role

    def matches(self, line: str) -> bool:
        return self.pattern.match(line) is not None

    def __repr__(self) -> str:
        return f"RegexLineClassifier({self.pattern.pattern!r}, {self.role})"


DEFAULT_CLASSIFIERS: Tuple[LineClassifier, ...] = (
    # "Warm-Up (15 minutes)"
    RegexLineClassifier(r"^\s*[\w/ -]+\s\(\d[^)]*\)\s*:?\s*$", SegmentRole.SECTION_HEADER),
    # "Squats: 4 sets x 6 reps"
    RegexLineClassifier(r"^\s*[A-Za-z][\w /-]*:.*$", SegmentRole.EXERCISE_LABEL),
    # "• Light jogging"
    RegexLineClassifier(r"^\s*[•\-*]", SegmentRole.DETAIL),
)

WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")

_BLOCK_SEPARATOR = re.compile(r"\n[ \t]*\n")
_DAY_HEADER = re.compile(rf"^(?:{'|'.join(WEEKDAYS)})\b")
FOCUS_PREFIX = "Focus:"


class OutputFormatter:
    """Stateless converter from raw text to a StyledDocument"""

    def __init__(self, classifiers: Optional[Sequence[LineClassifier]] = None):
        self.classifiers = tuple(DEFAULT_CLASSIFIERS if classifiers is None else classifiers)

    def format(self, text: str) -> StyledDocument:
        segments: List[StyledSegment] = []
        normalized = text.replace("\r\n", "\n").replace("\r", "\n")

        for block in _BLOCK_SEPARATOR.split(normalized):
            if not block.strip():
                continue
            lines = block.split("\n")
            # Leading blank lines from runs of separators
            while lines and not lines[0].strip():
                lines.pop(0)

            if _DAY_HEADER.match(lines[0]):
                segments.extend(self._format_day_block(lines))
            else:
                segments.append(StyledSegment(block.strip(), SegmentRole.PLAIN))

        return StyledDocument(tuple(segments))

    def _format_day_block(self, lines: List[str]) -> List[StyledSegment]:
        segments = [StyledSegment(lines[0].strip(), SegmentRole.DAY_HEADER)]
        focus_seen = False

        for line in lines[1:]:
            stripped = line.strip()
            if not stripped:
                continue
            if not focus_seen and stripped.startswith(FOCUS_PREFIX):
                focus_seen = True
                segments.append(StyledSegment(stripped, SegmentRole.FOCUS_LINE))
                continue
            segments.append(StyledSegment(stripped, self.classify_line(line)))

        return segments

    def classify_line(self, line: str) -> SegmentRole:
        for classifier in self.classifiers:
            if classifier.matches(line):
                return classifier.role
        return SegmentRole.PLAIN
