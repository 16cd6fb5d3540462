import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import SupersetGrouping
from models import SessionExercise, SupersetCluster, WorkoutExercise


def ex(eid, group=None, order=None) -> SessionExercise:
    return SessionExercise(
        id=eid,
        exercise_id=eid,
        exercise_name=eid.title(),
        superset_group_id=group,
        superset_order=order,
    )


class SupersetGroupingTest(unittest.TestCase):
    def test_grouping_keeps_position_of_first_member(self) -> None:
        items = [ex("a"), ex("b", "g1", 0), ex("c", "g1", 1), ex("d")]
        grouped = SupersetGrouping.group(items)
        self.assertEqual(len(grouped), 3)
        self.assertEqual(grouped[0].id, "a")
        self.assertIsInstance(grouped[1], SupersetCluster)
        self.assertEqual(grouped[1].group_id, "g1")
        self.assertEqual([m.id for m in grouped[1].members], ["b", "c"])
        self.assertEqual(grouped[2].id, "d")

    def test_members_sorted_by_order(self) -> None:
        items = [ex("x", "g", 2), ex("a"), ex("y", "g", 0), ex("z", "g", 1)]
        grouped = SupersetGrouping.group(items)
        self.assertEqual(grouped[0].group_id, "g")
        self.assertEqual([m.id for m in grouped[0].members], ["y", "z", "x"])
        self.assertEqual(grouped[1].id, "a")

    def test_order_ties_keep_input_order(self) -> None:
        items = [ex("p", "g"), ex("q", "g", 0), ex("r", "g")]
        members = SupersetGrouping.members(items, "g")
        self.assertEqual([m.id for m in members], ["p", "q", "r"])

    def test_single_member_cluster(self) -> None:
        grouped = SupersetGrouping.group([ex("solo", "g", 0)])
        self.assertEqual(grouped[0].group_id, "g")
        self.assertEqual(len(grouped[0].members), 1)

    def test_create_links_selection(self) -> None:
        items = [
            WorkoutExercise(id="1", exercise_id="squat", exercise_name="Squat"),
            WorkoutExercise(id="2", exercise_id="lunge", exercise_name="Lunge"),
            WorkoutExercise(id="3", exercise_id="plank", exercise_name="Plank"),
        ]
        linked = SupersetGrouping.create(items, ["3", "1"], group_id="g9")
        self.assertEqual(
            [(i.id, i.superset_group_id, i.superset_order) for i in linked],
            [("1", "g9", 0), ("2", None, None), ("3", "g9", 1)],
        )
        self.assertIsNone(items[0].superset_group_id)

    def test_create_needs_two_items(self) -> None:
        items = [ex("a"), ex("b")]
        linked = SupersetGrouping.create(items, ["a"])
        self.assertEqual(linked, items)
        generated = SupersetGrouping.create(items, ["a", "b"])
        self.assertTrue(generated[0].superset_group_id.startswith("superset-"))

    def test_ungroup(self) -> None:
        items = [ex("a", "g", 0), ex("b", "g", 1), ex("c", "h", 0)]
        result = SupersetGrouping.ungroup(items, "g")
        self.assertEqual(
            [(i.superset_group_id, i.superset_order) for i in result],
            [(None, None), (None, None), ("h", 0)],
        )
        self.assertEqual(SupersetGrouping.group_ids(result), ["h"])


if __name__ == "__main__":
    unittest.main()
