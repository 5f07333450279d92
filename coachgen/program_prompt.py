"""Request text for a weekly program built from structured parameters."""

from dataclasses import dataclass, field
from typing import List, Optional

WEEKDAY_HEADERS = "MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY"


@dataclass(frozen=True)
class ProgramParameters:
    """Athlete profile and training context. Values are passed through verbatim."""
    age_group: str
    event: str
    term: str
    period: str
    week: int = 1
    gender: Optional[str] = None
    training_years: Optional[int] = None
    facility_limitations: List[str] = field(default_factory=list)
    previous_injuries: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.week < 1:
            raise ValueError("week must be at least 1")


def build_program_prompt(parameters: ProgramParameters) -> str:
    lines = [
        f"Generate a detailed {parameters.event} training program for {parameters.age_group} athletes.",
        "",
        "Athlete Profile:",
        f"- Age Group: {parameters.age_group}",
        f"- Event: {parameters.event}",
    ]
    if parameters.gender:
        lines.append(f"- Gender: {parameters.gender}")
    if parameters.training_years is not None:
        lines.append(f"- Training History: {parameters.training_years} years")

    lines.extend([
        "",
        "Training Context:",
        f"- Term: {parameters.term}",
        f"- Period: {parameters.period}",
        f"- Week: {parameters.week}",
    ])

    if parameters.facility_limitations:
        lines.extend(["", "Facility Limitations:"])
        lines.extend(f"- {item}" for item in parameters.facility_limitations)

    if parameters.previous_injuries:
        lines.extend(["", "Previous Injuries:"])
        lines.extend(f"- {item}" for item in parameters.previous_injuries)

    lines.extend([
        "",
        "Format the program as follows:",
        f"1. Use {WEEKDAY_HEADERS} as day headers in all caps",
        "2. Start each day with a 'Focus:' line",
        "3. List the workout details under each day",
        "4. Include rest and recovery recommendations",
        "5. Add technical focus points",
        "6. Specify key performance indicators",
    ])
    return "\n".join(lines)
