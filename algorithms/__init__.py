from .superset_grouping import SupersetGrouping
from .exercise_history import ExerciseHistoryLookup
from .program_sequencer import ProgramSequencer
from .program_tracker import ProgramWorkoutTracker
from .duration_format import DurationFormatter
from .weight_converter import WeightConverter

__all__ = [
    "SupersetGrouping",
    "ExerciseHistoryLookup",
    "ProgramSequencer",
    "ProgramWorkoutTracker",
    "DurationFormatter",
    "WeightConverter",
]
