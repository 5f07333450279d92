"""
Bundled weekly programs served when no remote generation can succeed.

Each template uses the same shape as a live response: one block per day,
weekday header, a Focus line, section headers with a duration in
parentheses, and bullet details. Days are separated by a blank line.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class TemplateCategory(Enum):
    """Coarse event categories that have an offline template"""
    SPRINTS = "sprints"
    MIDDLE_DISTANCE = "middleDistance"
    LONG_DISTANCE = "longDistance"


SPRINTS_TEMPLATE = """WEEKLY TRAINING PROGRAM FOR SPRINTS

MONDAY
Focus: Speed and Power Development
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
• Light jogging
Sprint Drills (20 minutes)
• High knees
• A-skips
• B-skips
• Arm drive exercises
Sprint Work (30 minutes)
• 4 x 30m accelerations
• 4 x 60m sprints at 80% effort
• 3 x 100m sprints at 90% effort
Cool-Down (15 minutes)
• Light jogging
• Static stretching

TUESDAY
Focus: Strength and Power
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Strength Training (45 minutes)
• Squats: 4 sets x 6 reps
• Deadlifts: 4 sets x 5 reps
• Box jumps: 3 sets x 8 reps
• Medicine ball throws: 3 sets x 10 reps
Core Work (15 minutes)
• Planks: 3 x 30 seconds
• Russian twists: 3 x 20 reps
• Leg raises: 3 x 15 reps
Cool-Down (15 minutes)
• Light stretching

WEDNESDAY
Focus: Recovery and Technique
Warm-Up (15 minutes)
• Light jogging
• Dynamic stretching
Technique Work (30 minutes)
• Block starts: 6-8 reps
• Acceleration drills
• Form running
Light Conditioning (20 minutes)
• Circuit training with bodyweight exercises
Cool-Down (15 minutes)
• Light stretching

THURSDAY
Focus: Speed Endurance
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Speed Endurance (40 minutes)
• 6 x 150m at 85% effort with 3-minute recovery
• 4 x 200m at 80% effort with 4-minute recovery
Cool-Down (15 minutes)
• Light jogging
• Static stretching

FRIDAY
Focus: Strength and Power
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Plyometric Training (30 minutes)
• Box jumps: 4 sets x 8 reps
• Depth jumps: 3 sets x 6 reps
• Bounding: 3 sets x 20m
Upper Body Strength (30 minutes)
• Bench press: 4 sets x 6 reps
• Pull-ups: 3 sets x max reps
• Medicine ball throws: 3 sets x 10 reps
Cool-Down (15 minutes)
• Light stretching

SATURDAY
Focus: Competition Simulation
Warm-Up (20 minutes)
• Dynamic stretching
• Mobility exercises
• Sprint drills
Competition Simulation (40 minutes)
• 3 x 100m at race pace with full recovery
• 2 x 200m at race pace with full recovery
Cool-Down (20 minutes)
• Light jogging
• Static stretching

SUNDAY
Focus: Active Recovery
Light Activity (30-45 minutes)
• Swimming, cycling, or light jogging
Mobility Work (20 minutes)
• Foam rolling
• Dynamic stretching
Recovery Focus
• Hydration
• Proper nutrition
• Adequate sleep"""


MIDDLE_DISTANCE_TEMPLATE = """WEEKLY TRAINING PROGRAM FOR MIDDLE DISTANCE

MONDAY
Focus: Speed and Anaerobic Capacity
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
• Light jogging
Speed Work (30 minutes)
• 6 x 200m at 85% effort with 2-minute recovery
• 4 x 400m at 80% effort with 3-minute recovery
Cool-Down (15 minutes)
• Light jogging
• Static stretching

TUESDAY
Focus: Strength and Power
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Strength Training (45 minutes)
• Squats: 4 sets x 8 reps
• Deadlifts: 4 sets x 6 reps
• Lunges: 3 sets x 12 reps each leg
• Calf raises: 3 sets x 15 reps
Core Work (15 minutes)
• Planks: 3 x 45 seconds
• Russian twists: 3 x 20 reps
• Leg raises: 3 x 15 reps
Cool-Down (15 minutes)
• Light stretching

WEDNESDAY
Focus: Aerobic Base
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Aerobic Run (45-60 minutes)
• Steady-state running at 70-75% effort
• Focus on maintaining consistent pace
Cool-Down (15 minutes)
• Light stretching

THURSDAY
Focus: Threshold Training
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Threshold Work (40 minutes)
• 3 x 1000m at threshold pace with 3-minute recovery
• 4 x 800m at threshold pace with 2-minute recovery
Cool-Down (15 minutes)
• Light jogging
• Static stretching

FRIDAY
Focus: Recovery and Technique
Warm-Up (15 minutes)
• Light jogging
• Dynamic stretching
Technique Work (30 minutes)
• Form running drills
• Stride length exercises
• Cadence work
Light Conditioning (20 minutes)
• Circuit training with bodyweight exercises
Cool-Down (15 minutes)
• Light stretching

SATURDAY
Focus: Race Simulation
Warm-Up (20 minutes)
• Dynamic stretching
• Mobility exercises
• Light jogging
Race Simulation (40 minutes)
• 2 x 800m at race pace with full recovery
• 1 x 1200m at race pace with full recovery
Cool-Down (20 minutes)
• Light jogging
• Static stretching

SUNDAY
Focus: Active Recovery
Light Activity (30-45 minutes)
• Swimming, cycling, or light jogging
Mobility Work (20 minutes)
• Foam rolling
• Dynamic stretching
Recovery Focus
• Hydration
• Proper nutrition
• Adequate sleep"""


LONG_DISTANCE_TEMPLATE = """WEEKLY TRAINING PROGRAM FOR LONG DISTANCE

MONDAY
Focus: Aerobic Base
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
• Light jogging
Aerobic Run (60-75 minutes)
• Steady-state running at 70-75% effort
• Focus on maintaining consistent pace
Cool-Down (15 minutes)
• Light jogging
• Static stretching

TUESDAY
Focus: Speed and Anaerobic Capacity
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Speed Work (40 minutes)
• 8 x 400m at 85% effort with 2-minute recovery
• 4 x 800m at 80% effort with 3-minute recovery
Cool-Down (15 minutes)
• Light jogging
• Static stretching

WEDNESDAY
Focus: Recovery and Technique
Warm-Up (15 minutes)
• Light jogging
• Dynamic stretching
Technique Work (30 minutes)
• Form running drills
• Stride length exercises
• Cadence work
Light Conditioning (20 minutes)
• Circuit training with bodyweight exercises
Cool-Down (15 minutes)
• Light stretching

THURSDAY
Focus: Threshold Training
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Threshold Work (50 minutes)
• 4 x 1200m at threshold pace with 3-minute recovery
• 2 x 1600m at threshold pace with 4-minute recovery
Cool-Down (15 minutes)
• Light jogging
• Static stretching

FRIDAY
Focus: Strength and Power
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Strength Training (45 minutes)
• Squats: 4 sets x 10 reps
• Deadlifts: 4 sets x 8 reps
• Lunges: 3 sets x 12 reps each leg
• Calf raises: 3 sets x 15 reps
Core Work (15 minutes)
• Planks: 3 x 60 seconds
• Russian twists: 3 x 20 reps
• Leg raises: 3 x 15 reps
Cool-Down (15 minutes)
• Light stretching

SATURDAY
Focus: Long Run
Warm-Up (15 minutes)
• Dynamic stretching
• Mobility exercises
Long Run (90-120 minutes)
• Steady-state running at 65-70% effort
• Focus on building endurance
Cool-Down (15 minutes)
• Light jogging
• Static stretching

SUNDAY
Focus: Active Recovery
Light Activity (30-45 minutes)
• Swimming, cycling, or light jogging
Mobility Work (20 minutes)
• Foam rolling
• Dynamic stretching
Recovery Focus
• Hydration
• Proper nutrition
• Adequate sleep"""


DEFAULT_TEMPLATES: Mapping[TemplateCategory, str] = MappingProxyType({
    TemplateCategory.SPRINTS: SPRINTS_TEMPLATE,
    TemplateCategory.MIDDLE_DISTANCE: MIDDLE_DISTANCE_TEMPLATE,
    TemplateCategory.LONG_DISTANCE: LONG_DISTANCE_TEMPLATE,
})
