import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import Session, SessionExercise, SessionSet, Workout, WorkoutExercise
from session_service import SessionStateMachine


def exercise(eid, group=None, order=None, sets=2) -> SessionExercise:
    return SessionExercise(
        id=eid,
        exercise_id=eid,
        exercise_name=eid.title(),
        sets=[SessionSet(id=f"{eid}{i}", reps=8, weight=20.0) for i in range(sets)],
        superset_group_id=group,
        superset_order=order,
    )


class SessionStateMachineTest(unittest.TestCase):
    def setUp(self) -> None:
        self.session = Session(
            name="Upper",
            exercises=[
                exercise("a"),
                exercise("b", "group1", 0),
                exercise("c", "group1", 1),
                exercise("d", "solo", 0),
            ],
        )
        self.machine = SessionStateMachine(self.session)

    def all_done(self, eid) -> bool:
        ex = next(e for e in self.machine.session.exercises if e.id == eid)
        return all(s.completed for s in ex.sets)

    def test_initial_state(self) -> None:
        self.assertFalse(self.machine.is_exercise_complete("a"))
        self.assertTrue(self.machine.is_expanded("a"))
        self.assertFalse(self.machine.is_superset_complete("group1"))

    def test_mark_superset_complete(self) -> None:
        self.assertTrue(self.machine.mark_superset_complete("group1"))
        self.assertTrue(self.all_done("b"))
        self.assertTrue(self.all_done("c"))
        self.assertTrue(self.machine.is_superset_complete("group1"))
        self.assertFalse(self.machine.is_expanded("b"))
        self.assertFalse(self.machine.is_exercise_complete("a"))

    def test_superset_complete_is_derived(self) -> None:
        self.machine.mark_exercise_complete("b")
        self.assertFalse(self.machine.is_superset_complete("group1"))
        self.machine.mark_exercise_complete("c")
        self.assertTrue(self.machine.is_superset_complete("group1"))
        self.machine.undo_exercise_complete("c")
        self.assertFalse(self.machine.is_superset_complete("group1"))

    def test_undo_superset_keeps_set_flags(self) -> None:
        self.machine.mark_superset_complete("group1")
        self.assertTrue(self.machine.undo_superset_complete("group1"))
        self.assertFalse(self.machine.is_exercise_complete("b"))
        self.assertTrue(self.machine.is_expanded("c"))
        self.assertTrue(self.all_done("b"))
        self.assertTrue(self.all_done("c"))

    def test_single_member_superset_is_noop(self) -> None:
        self.assertFalse(self.machine.mark_superset_complete("solo"))
        self.assertFalse(self.machine.is_exercise_complete("d"))
        self.assertFalse(self.machine.mark_superset_complete("missing"))
        self.assertFalse(self.machine.is_superset_complete("missing"))

    def test_mark_exercise_complete_is_idempotent(self) -> None:
        self.machine.mark_exercise_complete("a")
        self.machine.toggle_expanded("a")
        self.machine.mark_exercise_complete("a")
        self.assertTrue(self.machine.is_exercise_complete("a"))
        self.assertTrue(self.machine.is_expanded("a"))

    def test_toggle_set(self) -> None:
        self.assertTrue(self.machine.toggle_set("a", "a0"))
        self.assertFalse(self.machine.toggle_set("a", "a0"))
        self.assertFalse(self.machine.is_exercise_complete("a"))

    def test_unknown_ids_raise_key_error(self) -> None:
        with self.assertRaises(KeyError):
            self.machine.mark_exercise_complete("zzz")
        with self.assertRaises(KeyError):
            self.machine.toggle_set("a", "nope")

    def test_input_session_untouched(self) -> None:
        self.machine.mark_exercise_complete("a")
        self.assertFalse(self.session.exercises[0].sets[0].completed)

    def test_editing_sets(self) -> None:
        self.machine.update_set("a", "a1", reps=5, weight=42.5)
        new_id = self.machine.add_set("a")
        ex = self.machine.session.exercises[0]
        self.assertEqual((ex.sets[-1].id, ex.sets[-1].reps, ex.sets[-1].weight), (new_id, 5, 42.5))
        self.assertFalse(ex.sets[-1].completed)
        self.assertTrue(self.machine.remove_set("a", "a0"))
        self.assertTrue(self.machine.remove_set("a", "a1"))
        self.assertFalse(self.machine.remove_set("a", new_id))
        self.assertEqual(len(ex.sets), 1)

    def test_add_and_remove_exercise(self) -> None:
        eid = self.machine.add_exercise("row", "Barbell Row")
        ex = self.machine.session.exercises[-1]
        self.assertEqual(ex.id, eid)
        self.assertEqual([(s.reps, s.weight) for s in ex.sets], [(10, 0.0)])
        self.machine.mark_exercise_complete(eid)
        self.machine.remove_exercise(eid)
        self.assertNotIn(eid, self.machine.completed)
        with self.assertRaises(KeyError):
            self.machine.is_exercise_complete(eid)

    def test_state_view(self) -> None:
        self.machine.mark_superset_complete("group1")
        state = self.machine.state()
        self.assertEqual(state["completed"], ["b", "c"])
        self.assertEqual(state["supersets"], {"group1": True, "solo": False})
        self.assertEqual(len(self.machine.grouped()), 3)

    def test_from_workout(self) -> None:
        workout = Workout(
            name="Legs",
            exercises=[
                WorkoutExercise(exercise_id="squat", exercise_name="Squat", default_sets=3, default_reps=5, default_weight=100.0),
                WorkoutExercise(exercise_id="plank", exercise_name="Plank", default_sets=1, default_duration=60),
            ],
        )
        machine = SessionStateMachine.from_workout(workout, date="2024-06-01", program_id="p1")
        s = machine.session
        self.assertEqual((s.name, s.date, s.workout_id, s.program_id), ("Legs", "2024-06-01", workout.id, "p1"))
        self.assertEqual([(x.reps, x.weight) for x in s.exercises[0].sets], [(5, 100.0)] * 3)
        self.assertEqual(s.exercises[1].sets[0].duration, 60)
        self.assertEqual(s.exercises[1].sets[0].weight, 0.0)


if __name__ == "__main__":
    unittest.main()
