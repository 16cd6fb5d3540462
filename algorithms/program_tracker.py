import datetime
from typing import Iterable, Optional

from models import Program, ProgramWorkout


class ProgramWorkoutTracker:
    """Pure updates of a program's workout list and completion counters.

    Every method returns a new :class:`Program`; the input is left as is.
    """

    DEFAULT_TARGET = 12

    @staticmethod
    def record_completion(program: Program, workout_id: str) -> Program:
        """Count one completion of ``workout_id`` and remember it as last completed.

        A workout that is not part of the program leaves it unchanged.
        """
        if not any(w.workout_id == workout_id for w in program.workouts):
            return program.model_copy(deep=True)
        workouts = [
            w.model_copy(update={"completed_count": w.completed_count + 1})
            if w.workout_id == workout_id
            else w.model_copy()
            for w in program.workouts
        ]
        return program.model_copy(
            update={"workouts": workouts, "last_completed_workout_id": workout_id},
            deep=True,
        )

    @staticmethod
    def deactivate(program: Program, now: Optional[str] = None) -> Program:
        stamp = now or datetime.datetime.now().isoformat(timespec="seconds")
        return program.model_copy(update={"active": False, "archived_at": stamp})

    @staticmethod
    def edit_workouts(program: Program, entries: Iterable[ProgramWorkout]) -> Program:
        """Replace the rotation with ``entries`` in the given order.

        Counters of workouts that stay in the program are kept, counters of
        removed workouts are dropped and ``sequence_order`` is renumbered
        0..N-1. Targets are clamped to at least 1.
        """
        existing = {w.workout_id: w.completed_count for w in program.workouts}
        workouts: list[ProgramWorkout] = []
        seen: set[str] = set()
        for entry in entries:
            if entry.workout_id in seen:
                continue
            seen.add(entry.workout_id)
            workouts.append(
                ProgramWorkout(
                    workout_id=entry.workout_id,
                    workout_name=entry.workout_name,
                    sequence_order=len(workouts),
                    target_count=max(1, entry.target_count),
                    completed_count=existing.get(entry.workout_id, 0),
                )
            )
        return program.model_copy(update={"workouts": workouts}, deep=True)

    @classmethod
    def _ordered(cls, program: Program) -> list[ProgramWorkout]:
        return sorted(program.workouts, key=lambda w: w.sequence_order)

    @classmethod
    def add_workout(
        cls,
        program: Program,
        workout_id: str,
        workout_name: str,
        target_count: int = DEFAULT_TARGET,
    ) -> Program:
        ordered = cls._ordered(program)
        if any(w.workout_id == workout_id for w in ordered):
            return program.model_copy(deep=True)
        ordered.append(
            ProgramWorkout(
                workout_id=workout_id,
                workout_name=workout_name,
                sequence_order=len(ordered),
                target_count=target_count,
            )
        )
        return cls.edit_workouts(program, ordered)

    @classmethod
    def remove_workout(cls, program: Program, workout_id: str) -> Program:
        return cls.edit_workouts(
            program, [w for w in cls._ordered(program) if w.workout_id != workout_id]
        )

    @classmethod
    def move_workout(cls, program: Program, index: int, direction: str) -> Program:
        if direction not in {"up", "down"}:
            raise ValueError("direction must be 'up' or 'down'")
        ordered = cls._ordered(program)
        new_index = index - 1 if direction == "up" else index + 1
        if not (0 <= index < len(ordered)) or not (0 <= new_index < len(ordered)):
            return program.model_copy(deep=True)
        ordered[index], ordered[new_index] = ordered[new_index], ordered[index]
        return cls.edit_workouts(program, ordered)

    @classmethod
    def update_target(cls, program: Program, workout_id: str, target: int) -> Program:
        return cls.edit_workouts(
            program,
            [
                w.model_copy(update={"target_count": max(1, target)})
                if w.workout_id == workout_id
                else w
                for w in cls._ordered(program)
            ],
        )
