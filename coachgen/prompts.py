"""
System instructions for remote program generation.

The instruction is chosen by finding the most specific event name in the
prompt and appending that event's coaching guidance to a common base.
"""

import re
from typing import Dict, Tuple

GENERAL_TRAINING = "General Training"

SPRINT_EVENTS = ("75m", "100m", "150m", "200m", "300m", "400m")
MIDDLE_DISTANCE_EVENTS = ("800m", "1200m", "1500m", "3000m")
LONG_DISTANCE_EVENTS = ("5000m", "10000m")
HURDLE_EVENTS = (
    "75m Hurdles", "80m Hurdles", "100m Hurdles",
    "110m Hurdles", "300m Hurdles", "400m Hurdles",
)
JUMP_EVENTS = ("Long Jump", "Triple Jump", "High Jump", "Pole Vault")
THROW_EVENTS = ("Shot Put", "Discus", "Javelin", "Hammer")

EVENT_GROUPS = ("Sprints", "Middle Distance", "Long Distance", "Hurdles", "Jumps", "Throws")

ALL_EVENTS: Tuple[str, ...] = (
    SPRINT_EVENTS + MIDDLE_DISTANCE_EVENTS + LONG_DISTANCE_EVENTS
    + HURDLE_EVENTS + JUMP_EVENTS + THROW_EVENTS
)

# Longest names first so "100m Hurdles" wins over "100m"
_EVENT_PATTERNS = [
    (event, re.compile(rf"(?<!\w){re.escape(event)}(?!\w)"))
    for event in sorted(ALL_EVENTS, key=len, reverse=True)
]
_GROUP_PATTERNS = [
    (group, re.compile(rf"(?<!\w){re.escape(group)}(?!\w)"))
    for group in EVENT_GROUPS
]

BASE_INSTRUCTION = """You are a professional track and field coach specializing in {event} training.
Format your response exactly as shown in the template.
Use proper bullet points (•) and consistent indentation.
Include specific numbers for all sets, reps, and intensities.
Separate days with clear headers using an en dash (–).
Keep workouts appropriate for the specified age group and event."""

# Guidance lines shared by every event block
COMMON_GUIDANCE = (
    "Include core stability work",
    "Adapt training volume based on age group",
    "Include injury prevention exercises",
    "Focus on technical mastery",
)

SPRINT_GUIDANCE = (
    "Focus on explosive starts and acceleration",
    "Include sprint mechanics drills",
    "Emphasize proper arm action and leg drive",
    "Include block starts and reaction time drills",
    "Add plyometric exercises for power development",
)

ENDURANCE_GUIDANCE = (
    "Focus on aerobic and anaerobic conditioning",
    "Include pace judgment and race strategy",
    "Emphasize proper running form at different speeds",
    "Include interval training with appropriate work/rest ratios",
    "Add strength endurance exercises",
)

HURDLE_GUIDANCE = (
    "Focus on hurdle technique and rhythm",
    "Include lead leg and trail leg drills",
    "Emphasize proper hurdle clearance",
    "Include approach run practice",
    "Add plyometric exercises for power development",
)

JUMP_GUIDANCE: Dict[str, Tuple[str, ...]] = {
    "Long Jump": (
        "Focus on approach run and takeoff technique",
        "Include takeoff drills and exercises",
        "Emphasize proper landing mechanics",
        "Include approach run practice",
        "Add plyometric exercises for power development",
    ),
    "Triple Jump": (
        "Focus on the three phases: hop, step, and jump",
        "Include phase-specific drills and exercises",
        "Emphasize proper landing mechanics",
        "Include approach run practice",
        "Add plyometric exercises for power development",
    ),
    "High Jump": (
        "Focus on approach run and takeoff technique",
        "Include bar clearance drills",
        "Emphasize proper landing mechanics",
        "Include approach run practice",
        "Add plyometric exercises for power development",
    ),
    "Pole Vault": (
        "Focus on approach run and plant technique",
        "Include pole carry and plant drills",
        "Emphasize proper swing-up and bar clearance",
        "Include approach run practice",
        "Add upper body and core strength exercises",
    ),
}

THROW_GUIDANCE = (
    "Focus on throwing technique and mechanics",
    "Include specific throwing drills",
    "Emphasize proper release and follow-through",
    "Include approach/glide/spin practice",
    "Add strength exercises for throwing power",
)

GENERIC_GUIDANCE = (
    "Focus on event-specific technique and conditioning",
    "Include appropriate drills and exercises",
    "Emphasize proper form and mechanics",
    "Include strength and power development",
    "Add event-specific conditioning",
)

SPRINT_EMPHASIS = {"100m": "maximal velocity", "200m": "curve running", "400m": "lactate tolerance"}
ENDURANCE_EMPHASIS = {"800m": "lactate tolerance", "1500m": "aerobic power"}


def extract_event(prompt: str) -> str:
    """Return the most specific event named in the prompt, or General Training"""
    for event, pattern in _EVENT_PATTERNS:
        if pattern.search(prompt):
            return event
    for group, pattern in _GROUP_PATTERNS:
        if pattern.search(prompt):
            return group
    return GENERAL_TRAINING


def _guidance_for(event: str) -> Tuple[str, Tuple[str, ...], str]:
    """Heading, focus lines and emphasis (may be empty) for an event"""
    if event in SPRINT_EVENTS:
        return "specifically", SPRINT_GUIDANCE, SPRINT_EMPHASIS.get(event, "acceleration")
    if event in MIDDLE_DISTANCE_EVENTS or event in LONG_DISTANCE_EVENTS:
        return "specifically", ENDURANCE_GUIDANCE, ENDURANCE_EMPHASIS.get(event, "aerobic endurance")
    if event in HURDLE_EVENTS:
        long_hurdles = event.startswith(("300m", "400m"))
        return "specifically", HURDLE_GUIDANCE, "endurance" if long_hurdles else "speed"
    if event in JUMP_GUIDANCE:
        return "specifically", JUMP_GUIDANCE[event], ""
    if event in THROW_EVENTS:
        return "specifically", THROW_GUIDANCE, ""
    return "training", GENERIC_GUIDANCE, ""


def build_system_prompt(event: str) -> str:
    """Base coaching instruction plus the guidance block for one event"""
    heading, focus, emphasis = _guidance_for(event)

    lines = [f"For {event} {heading}:"]
    lines.extend(f"- {line}" for line in focus + COMMON_GUIDANCE)
    if emphasis:
        lines.append(f"- For {event}, emphasize {emphasis}")

    return BASE_INSTRUCTION.format(event=event) + "\n\n" + "\n".join(lines)


def system_prompt_for(prompt: str) -> str:
    return build_system_prompt(extract_event(prompt))
