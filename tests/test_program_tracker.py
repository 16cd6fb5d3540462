import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import ProgramWorkoutTracker
from models import Program, ProgramWorkout


class ProgramWorkoutTrackerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.program = Program(
            name="Split",
            workouts=[
                ProgramWorkout(workout_id="a", workout_name="A", sequence_order=0, target_count=4, completed_count=2),
                ProgramWorkout(workout_id="b", workout_name="B", sequence_order=1, target_count=4, completed_count=1),
                ProgramWorkout(workout_id="c", workout_name="C", sequence_order=2, target_count=4),
            ],
        )

    def counts(self, program: Program) -> dict:
        return {w.workout_id: w.completed_count for w in program.workouts}

    def test_record_completion(self) -> None:
        updated = ProgramWorkoutTracker.record_completion(self.program, "b")
        self.assertEqual(self.counts(updated), {"a": 2, "b": 2, "c": 0})
        self.assertEqual(updated.last_completed_workout_id, "b")
        self.assertEqual(self.counts(self.program)["b"], 1)
        self.assertIsNone(self.program.last_completed_workout_id)

    def test_record_completion_unknown_workout(self) -> None:
        updated = ProgramWorkoutTracker.record_completion(self.program, "zzz")
        self.assertEqual(updated, self.program)

    def test_deactivate(self) -> None:
        archived = ProgramWorkoutTracker.deactivate(self.program, "2024-01-01T10:00:00")
        self.assertFalse(archived.active)
        self.assertEqual(archived.archived_at, "2024-01-01T10:00:00")
        self.assertTrue(self.program.active)

    def test_edit_preserves_counters_and_renumbers(self) -> None:
        entries = [
            ProgramWorkout(workout_id="c", workout_name="C", sequence_order=7, target_count=0),
            ProgramWorkout(workout_id="d", workout_name="D", sequence_order=3, target_count=5, completed_count=9),
            ProgramWorkout(workout_id="a", workout_name="A", sequence_order=1, target_count=6),
            ProgramWorkout(workout_id="c", workout_name="C again", sequence_order=8),
        ]
        updated = ProgramWorkoutTracker.edit_workouts(self.program, entries)
        self.assertEqual([w.workout_id for w in updated.workouts], ["c", "d", "a"])
        self.assertEqual([w.sequence_order for w in updated.workouts], [0, 1, 2])
        self.assertEqual(self.counts(updated), {"c": 0, "d": 0, "a": 2})
        self.assertEqual([w.target_count for w in updated.workouts], [1, 5, 6])

    def test_add_workout(self) -> None:
        updated = ProgramWorkoutTracker.add_workout(self.program, "d", "D")
        self.assertEqual(updated.workouts[-1].workout_id, "d")
        self.assertEqual(updated.workouts[-1].sequence_order, 3)
        self.assertEqual(updated.workouts[-1].target_count, 12)
        same = ProgramWorkoutTracker.add_workout(self.program, "a", "A")
        self.assertEqual(same, self.program)

    def test_remove_workout(self) -> None:
        updated = ProgramWorkoutTracker.remove_workout(self.program, "a")
        self.assertEqual([w.workout_id for w in updated.workouts], ["b", "c"])
        self.assertEqual([w.sequence_order for w in updated.workouts], [0, 1])
        self.assertEqual(self.counts(updated), {"b": 1, "c": 0})

    def test_move_workout(self) -> None:
        updated = ProgramWorkoutTracker.move_workout(self.program, 2, "up")
        self.assertEqual([w.workout_id for w in updated.workouts], ["a", "c", "b"])
        self.assertEqual(self.counts(updated), {"a": 2, "c": 0, "b": 1})
        unchanged = ProgramWorkoutTracker.move_workout(self.program, 0, "up")
        self.assertEqual([w.workout_id for w in unchanged.workouts], ["a", "b", "c"])
        with self.assertRaises(ValueError):
            ProgramWorkoutTracker.move_workout(self.program, 0, "sideways")

    def test_update_target_clamps(self) -> None:
        updated = ProgramWorkoutTracker.update_target(self.program, "c", -3)
        self.assertEqual(updated.workouts[2].target_count, 1)


if __name__ == "__main__":
    unittest.main()
