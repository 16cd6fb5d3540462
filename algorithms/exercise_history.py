import datetime
from typing import Iterable, Optional

from models import ExercisePerformance, PerformedSet, Session, SessionExercise


class ExerciseHistoryLookup:
    """Look up how an exercise was performed in earlier sessions."""

    @staticmethod
    def _find(session: Session, exercise_id: str) -> Optional[SessionExercise]:
        for ex in session.exercises:
            if ex.exercise_id == exercise_id:
                return ex
        return None

    @classmethod
    def last_performance(
        cls,
        exercise_id: str,
        sessions: Iterable[Session],
        exclude_session_id: Optional[str] = None,
    ) -> Optional[ExercisePerformance]:
        """Return the most recent performance of ``exercise_id``.

        Sessions are ranked by calendar date, newest first. The sort is
        stable, so sessions sharing a date keep their input order.
        ``exclude_session_id`` skips the session currently being edited.
        """
        candidates = [s for s in sessions if s.id != exclude_session_id]
        candidates.sort(key=lambda s: s.date[:10], reverse=True)
        for session in candidates:
            ex = cls._find(session, exercise_id)
            if ex is None:
                continue
            return ExercisePerformance(
                session_id=session.id,
                session_name=session.name,
                date=session.date,
                sets=[
                    PerformedSet(
                        reps=s.reps,
                        weight=s.weight,
                        duration=s.duration,
                        completed=s.completed,
                    )
                    for s in ex.sets
                ],
                notes=ex.notes,
            )
        return None

    @classmethod
    def records(
        cls,
        exercise_id: str,
        sessions: Iterable[Session],
        time_based: bool = False,
    ) -> list[dict]:
        """Per-session best effort for ``exercise_id``, oldest first.

        Only completed sets with a positive weight (or duration when
        ``time_based``) count; sessions without such sets are skipped.
        """
        result: list[dict] = []
        for session in sessions:
            ex = cls._find(session, exercise_id)
            if ex is None:
                continue
            done = [s for s in ex.sets if s.completed]
            if time_based:
                qualifying = [s for s in done if (s.duration or 0) > 0]
            else:
                qualifying = [s for s in done if s.weight > 0]
            if not qualifying:
                continue
            result.append(
                {
                    "date": session.date,
                    "session_name": session.name,
                    "max_weight": 0.0
                    if time_based
                    else max(s.weight for s in qualifying),
                    "max_duration": max(s.duration or 0 for s in qualifying)
                    if time_based
                    else 0,
                    "sets": [
                        {"reps": s.reps, "weight": s.weight, "duration": s.duration}
                        for s in qualifying
                    ],
                }
            )
        result.sort(key=lambda r: r["date"])
        return result

    @staticmethod
    def session_stats(session: Session) -> dict:
        total = 0
        completed = 0
        volume = 0.0
        for ex in session.exercises:
            for s in ex.sets:
                total += 1
                if s.completed:
                    completed += 1
                    volume += s.reps * s.weight
        return {
            "total_sets": total,
            "completed_sets": completed,
            "total_volume": volume,
        }

    @staticmethod
    def filter_sessions(
        sessions: Iterable[Session],
        query: str = "",
        period: str = "all",
        today: Optional[datetime.date] = None,
    ) -> list[Session]:
        """Filter sessions by free text and by calendar week or month.

        Weeks run Sunday to Saturday. Sessions whose date cannot be parsed
        are dropped.
        """
        if period not in {"all", "week", "month"}:
            raise ValueError("period must be one of all, week, month")
        today = today or datetime.date.today()
        week_start = today - datetime.timedelta(days=(today.weekday() + 1) % 7)
        week_end = week_start + datetime.timedelta(days=6)
        needle = query.lower()
        result: list[Session] = []
        for session in sessions:
            try:
                day = datetime.date.fromisoformat(session.date[:10])
            except ValueError:
                continue
            if needle and not (
                needle in session.name.lower()
                or any(needle in ex.exercise_name.lower() for ex in session.exercises)
                or (session.workout_name and needle in session.workout_name.lower())
            ):
                continue
            if period == "week" and not week_start <= day <= week_end:
                continue
            if period == "month" and (day.year, day.month) != (today.year, today.month):
                continue
            result.append(session)
        return result
