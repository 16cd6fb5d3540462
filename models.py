import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, Field


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


class SessionSet(BaseModel):
    id: str = Field(default_factory=new_id)
    reps: int = 10
    weight: float = 0.0
    duration: Optional[int] = None
    completed: bool = False


class SessionExercise(BaseModel):
    id: str = Field(default_factory=new_id)
    exercise_id: str
    exercise_name: str
    sets: list[SessionSet] = Field(default_factory=list)
    notes: Optional[str] = None
    superset_group_id: Optional[str] = None
    superset_order: Optional[int] = None


class Session(BaseModel):
    """A single performed workout on a given calendar day."""

    id: str = Field(default_factory=new_id)
    date: str = Field(default_factory=lambda: datetime.date.today().isoformat())
    name: str
    exercises: list[SessionExercise] = Field(default_factory=list)
    duration: Optional[int] = None
    notes: Optional[str] = None
    workout_id: Optional[str] = None
    workout_name: Optional[str] = None
    program_id: Optional[str] = None


class WorkoutExercise(BaseModel):
    id: str = Field(default_factory=new_id)
    exercise_id: str
    exercise_name: str
    default_sets: int = 3
    default_reps: int = 10
    default_weight: Optional[float] = None
    default_duration: Optional[int] = None
    notes: Optional[str] = None
    superset_group_id: Optional[str] = None
    superset_order: Optional[int] = None


class Workout(BaseModel):
    """A saved workout template such as "Leg Day"."""

    id: str = Field(default_factory=new_id)
    name: str
    description: Optional[str] = None
    category: str = "Strength"
    exercises: list[WorkoutExercise] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


class ProgramWorkout(BaseModel):
    workout_id: str
    workout_name: str
    sequence_order: int
    target_count: int = 12
    completed_count: int = 0


class Program(BaseModel):
    """An ordered rotation of workouts with per-workout completion targets."""

    id: str = Field(default_factory=new_id)
    name: str
    owner_id: str = "local"
    active: bool = True
    workouts: list[ProgramWorkout] = Field(default_factory=list)
    last_completed_workout_id: Optional[str] = None
    created_at: str = Field(default_factory=now_iso)
    archived_at: Optional[str] = None


class PerformedSet(BaseModel):
    reps: int
    weight: float
    duration: Optional[int] = None
    completed: bool


class ExercisePerformance(BaseModel):
    """Projection of one exercise as it was performed in a past session."""

    session_id: str
    session_name: str
    date: str
    sets: list[PerformedSet]
    notes: Optional[str] = None


class SupersetCluster(BaseModel):
    group_id: str
    members: list[SessionExercise | WorkoutExercise]
