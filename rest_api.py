import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, APIRouter, Body
from pydantic import BaseModel, Field

from algorithms import (
    DurationFormatter,
    ExerciseHistoryLookup,
    ProgramSequencer,
    SupersetGrouping,
    WeightConverter,
)
from config import APP_VERSION, setup_logging
from db import (
    ProgramRepository,
    SessionRepository,
    SettingsRepository,
    WorkoutRepository,
)
from models import Program, ProgramWorkout, Session, Workout, WorkoutExercise
from program_service import ProgramService
from session_service import SessionService, SessionStateMachine

logger = logging.getLogger(__name__)


class WorkoutIn(BaseModel):
    name: str
    description: Optional[str] = None
    category: str = "Strength"
    exercises: List[WorkoutExercise] = Field(default_factory=list)


class ProgramEntryIn(BaseModel):
    workout_id: str
    target_count: Optional[int] = None


class ProgramIn(BaseModel):
    name: str
    workouts: List[ProgramEntryIn] = Field(default_factory=list)


class LiveSessionIn(BaseModel):
    workout_id: str
    date: Optional[str] = None
    use_program: bool = True


class FitTrackerAPI:
    """Provides REST endpoints for programs, workouts and session logging."""

    def __init__(
        self,
        db_path: str = "fittracker.db",
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.workouts = WorkoutRepository(db_path)
        self.programs = ProgramRepository(db_path)
        self.sessions = SessionRepository(db_path)
        self.program_service = ProgramService(self.programs, self.workouts)
        self.session_service = SessionService(self.sessions, self.program_service)
        self.live_sessions: dict[str, SessionStateMachine] = {}
        setup_logging(self.settings.get_text("log_level", "INFO"))
        self.app = FastAPI(title="FitTracker API", version=APP_VERSION)
        self._setup_routes()

    def _owner(self) -> str:
        return self.settings.device_id()

    def _live(self, session_id: str) -> SessionStateMachine:
        machine = self.live_sessions.get(session_id)
        if machine is None:
            raise HTTPException(status_code=404, detail="live session not found")
        return machine

    def _program_entries(self, entries: List[ProgramEntryIn]) -> list[ProgramWorkout]:
        default_target = self.settings.get_int("default_target_count", 12)
        result = []
        for idx, entry in enumerate(entries):
            workout = self.workouts.fetch(entry.workout_id)
            result.append(
                ProgramWorkout(
                    workout_id=workout.id,
                    workout_name=workout.name,
                    sequence_order=idx,
                    target_count=entry.target_count
                    if entry.target_count is not None
                    else default_target,
                )
            )
        return result

    def _setup_routes(self) -> None:
        workouts_router = APIRouter(prefix="/workouts", tags=["Workouts"])
        programs_router = APIRouter(prefix="/programs", tags=["Programs"])
        sessions_router = APIRouter(prefix="/sessions", tags=["Sessions"])
        live_router = APIRouter(prefix="/live_sessions", tags=["Live Sessions"])
        exercises_router = APIRouter(prefix="/exercises", tags=["History"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.workouts.fetch_all_workouts()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @workouts_router.post("")
        def create_workout(data: WorkoutIn):
            workout = Workout(**data.model_dump())
            return {"id": self.workouts.create(workout)}

        @workouts_router.get("")
        def list_workouts(category: str = None):
            return [w.model_dump() for w in self.workouts.fetch_all_workouts(category)]

        @workouts_router.get("/{workout_id}")
        def get_workout(workout_id: str):
            try:
                return self.workouts.fetch(workout_id).model_dump()
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @workouts_router.put("/{workout_id}")
        def update_workout(workout_id: str, data: WorkoutIn):
            try:
                current = self.workouts.fetch(workout_id)
                updated = self.workouts.update(
                    Workout(**{**current.model_dump(), **data.model_dump()})
                )
                return updated.model_dump()
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @workouts_router.delete("/{workout_id}")
        def delete_workout(workout_id: str):
            try:
                self.workouts.delete(workout_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @workouts_router.post("/{workout_id}/supersets")
        def create_superset(workout_id: str, exercise_ids: List[str] = Body(...)):
            try:
                workout = self.workouts.fetch(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            before = set(SupersetGrouping.group_ids(workout.exercises))
            exercises = SupersetGrouping.create(workout.exercises, exercise_ids)
            created = [
                gid for gid in SupersetGrouping.group_ids(exercises) if gid not in before
            ]
            self.workouts.update(workout.model_copy(update={"exercises": exercises}))
            return {"group_id": created[0] if created else None}

        @workouts_router.delete("/{workout_id}/supersets/{group_id}")
        def remove_superset(workout_id: str, group_id: str):
            try:
                workout = self.workouts.fetch(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            exercises = SupersetGrouping.ungroup(workout.exercises, group_id)
            self.workouts.update(workout.model_copy(update={"exercises": exercises}))
            return {"status": "ungrouped"}

        @workouts_router.get("/{workout_id}/grouped")
        def grouped_workout(workout_id: str):
            try:
                workout = self.workouts.fetch(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return [unit.model_dump() for unit in SupersetGrouping.group(workout.exercises)]

        @programs_router.post("")
        def activate_program(data: ProgramIn):
            try:
                entries = self._program_entries(data.workouts)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            program = Program(name=data.name, owner_id=self._owner(), workouts=entries)
            return {"id": self.program_service.activate_program(program)}

        @programs_router.get("/active")
        def active_program():
            program = self.program_service.active_program(self._owner())
            return program.model_dump() if program else None

        @programs_router.get("/archived")
        def archived_programs():
            return [
                p.model_dump()
                for p in self.program_service.archived_programs(self._owner())
            ]

        @programs_router.get("/active/next")
        def next_workout():
            program = self.program_service.active_program(self._owner())
            if program is None:
                raise HTTPException(status_code=404, detail="no active program")
            entry = ProgramSequencer.next_workout(program)
            return {
                "program_id": program.id,
                "complete": entry is None,
                "workout": entry.model_dump() if entry else None,
            }

        @programs_router.get("/{program_id}/progress")
        def program_progress(program_id: str):
            try:
                return self.program_service.progress(program_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @programs_router.put("/{program_id}/workouts")
        def edit_program_workouts(program_id: str, entries: List[ProgramEntryIn]):
            try:
                program = self.program_service.update_workouts(
                    program_id, self._program_entries(entries)
                )
                return program.model_dump()
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @programs_router.post("/{program_id}/archive")
        def archive_program(program_id: str):
            try:
                return self.program_service.archive_program(program_id).model_dump()
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @programs_router.post("/{program_id}/complete")
        def complete_program_workout(program_id: str, workout_id: str):
            try:
                program = self.program_service.record_completion(program_id, workout_id)
                return program.model_dump()
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.get("")
        def list_sessions(query: str = "", period: str = "all"):
            try:
                return [
                    s.model_dump() for s in self.session_service.search(query, period)
                ]
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @sessions_router.get("/{session_id}")
        def get_session(session_id: str):
            try:
                return self.sessions.fetch(session_id).model_dump()
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.put("/{session_id}")
        def update_session(session_id: str, session: Session):
            if session.id != session_id:
                raise HTTPException(status_code=400, detail="session id mismatch")
            try:
                self.sessions.update(session)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.delete("/{session_id}")
        def delete_session(session_id: str):
            try:
                self.sessions.delete(session_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.get("/{session_id}/stats")
        def session_stats(session_id: str):
            try:
                session = self.sessions.fetch(session_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            stats = ExerciseHistoryLookup.session_stats(session)
            stats["duration"] = (
                DurationFormatter.format(session.duration)
                if session.duration is not None
                else None
            )
            return stats

        @live_router.post("")
        def start_live_session(data: LiveSessionIn):
            try:
                workout = self.workouts.fetch(data.workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            program_id = None
            if data.use_program:
                program = self.program_service.active_program(self._owner())
                if program and any(
                    w.workout_id == workout.id for w in program.workouts
                ):
                    program_id = program.id
            machine = SessionStateMachine.from_workout(
                workout, date=data.date, program_id=program_id
            )
            self.live_sessions[machine.session.id] = machine
            logger.info(
                "started live session %s from workout %s", machine.session.id, workout.id
            )
            return machine.state()

        @live_router.get("/{session_id}")
        def get_live_session(session_id: str):
            return self._live(session_id).state()

        @live_router.delete("/{session_id}")
        def discard_live_session(session_id: str):
            self._live(session_id)
            self.live_sessions.pop(session_id)
            return {"status": "discarded"}

        @live_router.post("/{session_id}/exercises")
        def add_live_exercise(session_id: str, exercise_id: str, exercise_name: str):
            machine = self._live(session_id)
            return {"id": machine.add_exercise(exercise_id, exercise_name)}

        @live_router.delete("/{session_id}/exercises/{exercise_id}")
        def remove_live_exercise(session_id: str, exercise_id: str):
            machine = self._live(session_id)
            try:
                machine.remove_exercise(exercise_id)
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @live_router.post("/{session_id}/exercises/{exercise_id}/complete")
        def complete_exercise(session_id: str, exercise_id: str):
            machine = self._live(session_id)
            try:
                machine.mark_exercise_complete(exercise_id)
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return machine.state()

        @live_router.post("/{session_id}/exercises/{exercise_id}/undo")
        def undo_exercise(session_id: str, exercise_id: str):
            machine = self._live(session_id)
            try:
                machine.undo_exercise_complete(exercise_id)
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return machine.state()

        @live_router.post("/{session_id}/exercises/{exercise_id}/expand")
        def toggle_expanded(session_id: str, exercise_id: str):
            machine = self._live(session_id)
            try:
                return {"expanded": machine.toggle_expanded(exercise_id)}
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @live_router.post("/{session_id}/exercises/{exercise_id}/sets")
        def add_live_set(session_id: str, exercise_id: str):
            machine = self._live(session_id)
            try:
                return {"id": machine.add_set(exercise_id)}
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @live_router.put("/{session_id}/exercises/{exercise_id}/sets/{set_id}")
        def update_live_set(
            session_id: str,
            exercise_id: str,
            set_id: str,
            reps: int = None,
            weight: float = None,
            duration: int = None,
        ):
            machine = self._live(session_id)
            unit = self.settings.get_text("weight_unit", "kg")
            if weight is not None and unit == "lb":
                weight = WeightConverter.lb_to_kg(weight)
            try:
                updated = machine.update_set(
                    exercise_id, set_id, reps=reps, weight=weight, duration=duration
                )
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return updated.model_dump()

        @live_router.delete("/{session_id}/exercises/{exercise_id}/sets/{set_id}")
        def remove_live_set(session_id: str, exercise_id: str, set_id: str):
            machine = self._live(session_id)
            try:
                return {"removed": machine.remove_set(exercise_id, set_id)}
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @live_router.post("/{session_id}/exercises/{exercise_id}/sets/{set_id}/toggle")
        def toggle_live_set(session_id: str, exercise_id: str, set_id: str):
            machine = self._live(session_id)
            try:
                return {"completed": machine.toggle_set(exercise_id, set_id)}
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @live_router.post("/{session_id}/supersets/{group_id}/complete")
        def complete_superset(session_id: str, group_id: str):
            machine = self._live(session_id)
            changed = machine.mark_superset_complete(group_id)
            return {"changed": changed, **machine.state()}

        @live_router.post("/{session_id}/supersets/{group_id}/undo")
        def undo_superset(session_id: str, group_id: str):
            machine = self._live(session_id)
            changed = machine.undo_superset_complete(group_id)
            return {"changed": changed, **machine.state()}

        @live_router.post("/{session_id}/save")
        def save_live_session(session_id: str, duration: int = None):
            """Persist a live session and end it; later edits go through /sessions."""
            machine = self._live(session_id)
            if duration is not None:
                machine.session.duration = duration
            try:
                session = self.session_service.save(machine)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            self.live_sessions.pop(session_id, None)
            return {"id": session.id, "program_id": session.program_id}

        @exercises_router.get("/{exercise_id}/last")
        def last_performance(exercise_id: str, exclude_session_id: str = None):
            perf = self.session_service.last_performance(exercise_id, exclude_session_id)
            if perf is None:
                return None
            unit = self.settings.get_text("weight_unit", "kg")
            data = perf.model_dump()
            for s in data["sets"]:
                s["weight"] = WeightConverter.to_unit(s["weight"], unit)
            data["unit"] = unit
            return data

        @exercises_router.get("/{exercise_id}/records")
        def exercise_records(exercise_id: str, time_based: bool = False):
            unit = self.settings.get_text("weight_unit", "kg")
            records = self.session_service.records(exercise_id, time_based)
            for rec in records:
                rec["max_weight"] = WeightConverter.to_unit(rec["max_weight"], unit)
                rec["unit"] = unit
            return records

        self.app.include_router(workouts_router)
        self.app.include_router(programs_router)
        self.app.include_router(sessions_router)
        self.app.include_router(live_router)
        self.app.include_router(exercises_router)


api = FitTrackerAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
