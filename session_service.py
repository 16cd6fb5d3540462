from __future__ import annotations
import datetime
import logging
from typing import Optional

from algorithms import ExerciseHistoryLookup, SupersetGrouping
from db import SessionRepository
from program_service import ProgramService
from models import ExercisePerformance, Session, SessionExercise, SessionSet, Workout

logger = logging.getLogger(__name__)


class SessionStateMachine:
    """Tracks exercise completion while a session is being logged.

    Each exercise is either Incomplete or Completed. Completed exercises are
    collapsed; reopening one expands it again. Superset completion is never
    stored, it is derived from the state of the cluster's members.
    """

    DEFAULT_REPS = 10
    DEFAULT_WEIGHT = 0.0

    def __init__(self, session: Session) -> None:
        self.session = session.model_copy(deep=True)
        self.completed: set[str] = set()
        self.expanded: set[str] = {ex.id for ex in self.session.exercises}

    @classmethod
    def from_workout(
        cls,
        workout: Workout,
        date: Optional[str] = None,
        program_id: Optional[str] = None,
    ) -> "SessionStateMachine":
        """Start a fresh session from ``workout``'s exercise defaults."""
        exercises = [
            SessionExercise(
                exercise_id=wex.exercise_id,
                exercise_name=wex.exercise_name,
                sets=[
                    SessionSet(
                        reps=wex.default_reps,
                        weight=wex.default_weight or 0.0,
                        duration=wex.default_duration,
                    )
                    for _ in range(wex.default_sets)
                ],
                superset_group_id=wex.superset_group_id,
                superset_order=wex.superset_order,
            )
            for wex in workout.exercises
        ]
        session = Session(
            date=date or datetime.date.today().isoformat(),
            name=workout.name,
            exercises=exercises,
            workout_id=workout.id,
            workout_name=workout.name,
            program_id=program_id,
        )
        return cls(session)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def _exercise(self, exercise_id: str) -> SessionExercise:
        for ex in self.session.exercises:
            if ex.id == exercise_id:
                return ex
        raise KeyError(f"exercise {exercise_id} not in session")

    def _set(self, exercise_id: str, set_id: str) -> SessionSet:
        for s in self._exercise(exercise_id).sets:
            if s.id == set_id:
                return s
        raise KeyError(f"set {set_id} not in exercise {exercise_id}")

    def superset_members(self, group_id: str) -> list[SessionExercise]:
        return SupersetGrouping.members(self.session.exercises, group_id)

    # ------------------------------------------------------------------
    # Completion workflow
    # ------------------------------------------------------------------

    def toggle_set(self, exercise_id: str, set_id: str) -> bool:
        """Flip one set's completed flag and return the new value."""
        s = self._set(exercise_id, set_id)
        s.completed = not s.completed
        return s.completed

    def mark_exercise_complete(self, exercise_id: str) -> None:
        ex = self._exercise(exercise_id)
        if ex.id in self.completed:
            return
        for s in ex.sets:
            s.completed = True
        self.completed.add(ex.id)
        self.expanded.discard(ex.id)

    def undo_exercise_complete(self, exercise_id: str) -> None:
        """Reopen an exercise for review.

        Set flags forced on by :meth:`mark_exercise_complete` stay as they are.
        """
        ex = self._exercise(exercise_id)
        self.completed.discard(ex.id)
        self.expanded.add(ex.id)

    def mark_superset_complete(self, group_id: str) -> bool:
        """Complete every member of ``group_id``; returns False for a no-op."""
        members = self.superset_members(group_id)
        if len(members) < SupersetGrouping.MIN_MEMBERS:
            logger.debug(
                "ignoring superset %s with %d member(s)", group_id, len(members)
            )
            return False
        for ex in members:
            self.mark_exercise_complete(ex.id)
        return True

    def undo_superset_complete(self, group_id: str) -> bool:
        members = self.superset_members(group_id)
        if len(members) < SupersetGrouping.MIN_MEMBERS:
            logger.debug(
                "ignoring superset undo %s with %d member(s)", group_id, len(members)
            )
            return False
        for ex in members:
            self.undo_exercise_complete(ex.id)
        return True

    def is_exercise_complete(self, exercise_id: str) -> bool:
        return self._exercise(exercise_id).id in self.completed

    def is_superset_complete(self, group_id: str) -> bool:
        members = self.superset_members(group_id)
        return bool(members) and all(ex.id in self.completed for ex in members)

    def is_expanded(self, exercise_id: str) -> bool:
        return self._exercise(exercise_id).id in self.expanded

    def toggle_expanded(self, exercise_id: str) -> bool:
        ex = self._exercise(exercise_id)
        if ex.id in self.expanded:
            self.expanded.discard(ex.id)
            return False
        self.expanded.add(ex.id)
        return True

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_exercise(self, exercise_id: str, exercise_name: str) -> str:
        ex = SessionExercise(
            exercise_id=exercise_id,
            exercise_name=exercise_name,
            sets=[SessionSet(reps=self.DEFAULT_REPS, weight=self.DEFAULT_WEIGHT)],
            notes="",
        )
        self.session.exercises.append(ex)
        self.expanded.add(ex.id)
        return ex.id

    def remove_exercise(self, exercise_id: str) -> None:
        ex = self._exercise(exercise_id)
        self.session.exercises = [e for e in self.session.exercises if e.id != ex.id]
        self.completed.discard(ex.id)
        self.expanded.discard(ex.id)

    def add_set(self, exercise_id: str) -> str:
        """Append a set that repeats the values of the exercise's last set."""
        ex = self._exercise(exercise_id)
        last = ex.sets[-1] if ex.sets else None
        new_set = SessionSet(
            reps=last.reps if last and last.reps else self.DEFAULT_REPS,
            weight=last.weight if last else self.DEFAULT_WEIGHT,
            duration=last.duration if last else None,
        )
        ex.sets.append(new_set)
        return new_set.id

    def remove_set(self, exercise_id: str, set_id: str) -> bool:
        """Remove a set unless it is the exercise's only one."""
        ex = self._exercise(exercise_id)
        target = self._set(exercise_id, set_id)
        if len(ex.sets) <= 1:
            return False
        ex.sets = [s for s in ex.sets if s.id != target.id]
        return True

    def update_set(
        self,
        exercise_id: str,
        set_id: str,
        *,
        reps: Optional[int] = None,
        weight: Optional[float] = None,
        duration: Optional[int] = None,
    ) -> SessionSet:
        s = self._set(exercise_id, set_id)
        if reps is not None:
            s.reps = reps
        if weight is not None:
            s.weight = weight
        if duration is not None:
            s.duration = duration
        return s

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def grouped(self):
        return SupersetGrouping.group(self.session.exercises)

    def snapshot(self) -> Session:
        return self.session.model_copy(deep=True)

    def state(self) -> dict:
        """Serializable view of the session and its completion state."""
        return {
            "session": self.session.model_dump(),
            "completed": sorted(self.completed),
            "expanded": sorted(self.expanded),
            "supersets": {
                gid: self.is_superset_complete(gid)
                for gid in SupersetGrouping.group_ids(self.session.exercises)
            },
        }


class SessionService:
    """Stores finished sessions and answers history questions about them."""

    def __init__(
        self,
        session_repo: SessionRepository,
        program_service: ProgramService | None = None,
    ) -> None:
        self.sessions = session_repo
        self.programs = program_service

    def save(self, machine: SessionStateMachine) -> Session:
        """Persist the machine's session, overwriting any earlier save.

        The first save of a session started from a program workout counts
        as one completion of that workout, provided the program is still
        active.
        """
        session = machine.snapshot()
        try:
            self.sessions.fetch(session.id)
        except ValueError:
            self.sessions.create(session)
            logger.info("saved session %s (%s)", session.id, session.name)
            if self.programs and session.program_id and session.workout_id:
                self.programs.record_completion(
                    session.program_id, session.workout_id, only_active=True
                )
            return session
        self.sessions.update(session)
        logger.info("updated session %s", session.id)
        return session

    def last_performance(
        self, exercise_id: str, exclude_session_id: Optional[str] = None
    ) -> Optional[ExercisePerformance]:
        return ExerciseHistoryLookup.last_performance(
            exercise_id,
            self.sessions.fetch_for_exercise(exercise_id),
            exclude_session_id,
        )

    def records(self, exercise_id: str, time_based: bool = False) -> list[dict]:
        return ExerciseHistoryLookup.records(
            exercise_id, self.sessions.fetch_for_exercise(exercise_id), time_based
        )

    def search(self, query: str = "", period: str = "all") -> list[Session]:
        return ExerciseHistoryLookup.filter_sessions(
            self.sessions.fetch_all_sessions(), query, period
        )

    def stats(self, session_id: str) -> dict:
        return ExerciseHistoryLookup.session_stats(self.sessions.fetch(session_id))
