from __future__ import annotations
import datetime
import logging
from typing import Iterable, Optional

from algorithms import ProgramSequencer, ProgramWorkoutTracker
from db import ProgramRepository, WorkoutRepository
from models import Program, ProgramWorkout

logger = logging.getLogger(__name__)


class ProgramService:
    """Persists programs and applies rotation updates to them."""

    def __init__(
        self,
        program_repo: ProgramRepository,
        workout_repo: WorkoutRepository | None = None,
    ) -> None:
        self.programs = program_repo
        self.workouts = workout_repo

    def activate_program(self, program: Program) -> str:
        """Make ``program`` the owner's only active program.

        Every currently active program of the owner is archived first and
        the new program inserted afterwards. The two steps are separate
        writes; a failed insert leaves the owner without an active program.
        The rotation is normalized the same way as an edit: duplicates are
        collapsed, targets clamped to at least 1 and orders renumbered.
        """
        stamp = datetime.datetime.now().isoformat(timespec="seconds")
        previous = self.programs.fetch_active(program.owner_id)
        for old in previous:
            self.programs.deactivate(old.id, stamp)
            logger.info("archived program %s for owner %s", old.id, old.owner_id)
        normalized = ProgramWorkoutTracker.edit_workouts(
            program, ProgramSequencer.ordered(program)
        )
        new_program = normalized.model_copy(
            update={"active": True, "archived_at": None}, deep=True
        )
        try:
            self.programs.create(new_program)
        except Exception:
            if previous:
                logger.warning(
                    "program %s not stored after archiving %d program(s) of owner %s",
                    new_program.id,
                    len(previous),
                    new_program.owner_id,
                )
            raise
        logger.info("activated program %s (%s)", new_program.id, new_program.name)
        return new_program.id

    def archive_program(self, program_id: str) -> Program:
        program = self.programs.fetch(program_id)
        archived = ProgramWorkoutTracker.deactivate(program)
        self.programs.deactivate(archived.id, archived.archived_at)
        logger.info("archived program %s", program_id)
        return archived

    def record_completion(
        self, program_id: str, workout_id: str, only_active: bool = False
    ) -> Program:
        program = self.programs.fetch(program_id)
        if only_active and not program.active:
            logger.info(
                "program %s is archived, workout %s not recorded",
                program_id,
                workout_id,
            )
            return program
        updated = ProgramWorkoutTracker.record_completion(program, workout_id)
        if updated == program:
            logger.info(
                "workout %s is not part of program %s, nothing recorded",
                workout_id,
                program_id,
            )
            return updated
        self.programs.update(updated)
        logger.info("recorded workout %s for program %s", workout_id, program_id)
        return updated

    def update_workouts(
        self, program_id: str, entries: Iterable[ProgramWorkout]
    ) -> Program:
        program = self.programs.fetch(program_id)
        updated = ProgramWorkoutTracker.edit_workouts(program, entries)
        self.programs.update(updated)
        return updated

    def add_workout(
        self,
        program_id: str,
        workout_id: str,
        target_count: int = ProgramWorkoutTracker.DEFAULT_TARGET,
    ) -> Program:
        if self.workouts is None:
            raise ValueError("workout repository not configured")
        workout = self.workouts.fetch(workout_id)
        program = self.programs.fetch(program_id)
        updated = ProgramWorkoutTracker.add_workout(
            program, workout.id, workout.name, target_count
        )
        self.programs.update(updated)
        return updated

    def active_program(self, owner_id: str) -> Optional[Program]:
        active = self.programs.fetch_active(owner_id)
        if len(active) > 1:
            logger.warning(
                "owner %s has %d active programs, using the newest",
                owner_id,
                len(active),
            )
        return active[0] if active else None

    def archived_programs(self, owner_id: str) -> list[Program]:
        return self.programs.fetch_archived(owner_id)

    def next_workout(self, owner_id: str) -> Optional[ProgramWorkout]:
        program = self.active_program(owner_id)
        if program is None:
            return None
        return ProgramSequencer.next_workout(program)

    def progress(self, program_id: str) -> dict:
        return ProgramSequencer.progress(self.programs.fetch(program_id))
