import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import ProgramSequencer, ProgramWorkoutTracker
from models import Program, ProgramWorkout


def make_program(entries, last=None) -> Program:
    return Program(
        name="Rotation",
        workouts=[
            ProgramWorkout(
                workout_id=wid,
                workout_name=wid.upper(),
                sequence_order=idx,
                target_count=target,
                completed_count=done,
            )
            for idx, (wid, target, done) in enumerate(entries)
        ],
        last_completed_workout_id=last,
    )


class ProgramSequencerTest(unittest.TestCase):
    def test_all_targets_met_returns_none(self) -> None:
        program = make_program([("a", 2, 2), ("b", 1, 3)], last="a")
        self.assertIsNone(ProgramSequencer.next_workout(program))
        self.assertTrue(ProgramSequencer.is_complete(program))

    def test_empty_program_returns_none(self) -> None:
        self.assertIsNone(ProgramSequencer.next_workout(Program(name="Empty")))

    def test_round_robin(self) -> None:
        program = make_program([("a", 1, 0), ("b", 1, 0), ("c", 1, 0)])
        visited = []
        entry = ProgramSequencer.next_workout(program)
        while entry is not None:
            visited.append(entry.workout_id)
            program = ProgramWorkoutTracker.record_completion(program, entry.workout_id)
            entry = ProgramSequencer.next_workout(program)
        self.assertEqual(visited, ["a", "b", "c"])

    def test_skips_met_targets(self) -> None:
        program = make_program([("a", 1, 1), ("b", 2, 0), ("c", 1, 0)], last="a")
        self.assertEqual(ProgramSequencer.next_workout(program).workout_id, "b")

    def test_wraps_around_from_end(self) -> None:
        program = make_program([("a", 3, 1), ("b", 3, 1), ("c", 3, 1)], last="c")
        self.assertEqual(ProgramSequencer.next_workout(program).workout_id, "a")

    def test_wraps_past_finished_entries(self) -> None:
        program = make_program([("a", 2, 1), ("b", 1, 1), ("c", 1, 1)], last="b")
        self.assertEqual(ProgramSequencer.next_workout(program).workout_id, "a")

    def test_unknown_last_completed_starts_at_beginning(self) -> None:
        program = make_program([("a", 2, 0), ("b", 2, 0)], last="removed")
        self.assertEqual(ProgramSequencer.next_workout(program).workout_id, "a")

    def test_uses_sequence_order_not_list_order(self) -> None:
        program = Program(
            name="Shuffled",
            workouts=[
                ProgramWorkout(workout_id="b", workout_name="B", sequence_order=1),
                ProgramWorkout(workout_id="a", workout_name="A", sequence_order=0),
            ],
        )
        self.assertEqual(ProgramSequencer.next_workout(program).workout_id, "a")

    def test_progress(self) -> None:
        program = make_program([("a", 4, 1), ("b", 4, 2)])
        self.assertEqual(
            ProgramSequencer.progress(program),
            {"completed": 3, "target": 8, "percent": 38, "complete": False},
        )
        self.assertEqual(
            ProgramSequencer.progress(Program(name="Empty")),
            {"completed": 0, "target": 0, "percent": 0, "complete": True},
        )


if __name__ == "__main__":
    unittest.main()
