from typing import Iterable, Optional, TypeVar

from models import SessionExercise, SupersetCluster, WorkoutExercise, new_id

Item = TypeVar("Item", SessionExercise, WorkoutExercise)


class SupersetGrouping:
    """Organise a flat exercise list into standalone items and superset clusters."""

    MIN_MEMBERS = 2

    @staticmethod
    def members(items: Iterable[Item], group_id: str) -> list[Item]:
        """Return the members of ``group_id`` ordered by ``superset_order``.

        Members without an order rank as 0; ties keep their list position.
        """
        indexed = [
            (pos, item)
            for pos, item in enumerate(items)
            if item.superset_group_id == group_id
        ]
        indexed.sort(key=lambda pair: (pair[1].superset_order or 0, pair[0]))
        return [item for _pos, item in indexed]

    @classmethod
    def group(cls, items: list[Item]) -> list[Item | SupersetCluster]:
        """Return display units in list order.

        A cluster is emitted where its first member appears; later members
        are already represented by it and are skipped.
        """
        result: list[Item | SupersetCluster] = []
        seen: set[str] = set()
        for item in items:
            gid = item.superset_group_id
            if not gid:
                result.append(item)
                continue
            if gid in seen:
                continue
            seen.add(gid)
            result.append(
                SupersetCluster(group_id=gid, members=cls.members(items, gid))
            )
        return result

    @classmethod
    def create(
        cls,
        items: list[Item],
        selected_ids: Iterable[str],
        group_id: Optional[str] = None,
    ) -> list[Item]:
        """Link the selected items into a new superset.

        Fewer than two selected items leaves the list untouched.
        """
        selected = set(selected_ids)
        if sum(1 for item in items if item.id in selected) < cls.MIN_MEMBERS:
            return [item.model_copy(deep=True) for item in items]
        gid = group_id or f"superset-{new_id()}"
        result: list[Item] = []
        order = 0
        for item in items:
            if item.id in selected:
                result.append(
                    item.model_copy(
                        update={"superset_group_id": gid, "superset_order": order},
                        deep=True,
                    )
                )
                order += 1
            else:
                result.append(item.model_copy(deep=True))
        return result

    @staticmethod
    def ungroup(items: list[Item], group_id: str) -> list[Item]:
        """Dissolve ``group_id``, clearing both superset fields on every member."""
        return [
            item.model_copy(
                update={"superset_group_id": None, "superset_order": None},
                deep=True,
            )
            if item.superset_group_id == group_id
            else item.model_copy(deep=True)
            for item in items
        ]

    @staticmethod
    def group_ids(items: Iterable[Item]) -> list[str]:
        ids: list[str] = []
        for item in items:
            if item.superset_group_id and item.superset_group_id not in ids:
                ids.append(item.superset_group_id)
        return ids
