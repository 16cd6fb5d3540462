from typing import Optional

from models import Program, ProgramWorkout


class ProgramSequencer:
    """Pick the next workout of a program's rotation."""

    @staticmethod
    def ordered(program: Program) -> list[ProgramWorkout]:
        return sorted(program.workouts, key=lambda w: w.sequence_order)

    @staticmethod
    def is_done(entry: ProgramWorkout) -> bool:
        return entry.completed_count >= entry.target_count

    @classmethod
    def next_workout(cls, program: Program) -> Optional[ProgramWorkout]:
        """Return the next workout to perform, or ``None`` once all targets are met.

        The scan starts right after the last completed workout and wraps
        around, skipping entries whose target is already reached. A last
        completed id that is no longer part of the program restarts the
        scan at the beginning of the sequence.
        """
        entries = cls.ordered(program)
        if all(cls.is_done(e) for e in entries):
            return None
        count = len(entries)
        start = 0
        if program.last_completed_workout_id is not None:
            for idx, entry in enumerate(entries):
                if entry.workout_id == program.last_completed_workout_id:
                    start = (idx + 1) % count
                    break
        for step in range(count):
            entry = entries[(start + step) % count]
            if not cls.is_done(entry):
                return entry
        return None

    @classmethod
    def is_complete(cls, program: Program) -> bool:
        return cls.next_workout(program) is None

    @classmethod
    def progress(cls, program: Program) -> dict:
        completed = sum(w.completed_count for w in program.workouts)
        target = sum(w.target_count for w in program.workouts)
        percent = round(completed / target * 100) if target > 0 else 0
        return {
            "completed": completed,
            "target": target,
            "percent": percent,
            "complete": cls.is_complete(program),
        }
