import sqlite3
import json
import uuid
import datetime
from contextlib import contextmanager
from typing import List, Tuple, Optional

from config import YamlConfig
from settings_schema import validate_settings
from models import Program, ProgramWorkout, Workout, WorkoutExercise, Session, SessionExercise


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "programs": (
            """CREATE TABLE programs (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    active INTEGER NOT NULL DEFAULT 1,
                    workouts TEXT NOT NULL DEFAULT '[]',
                    last_completed_workout_id TEXT,
                    created_at TEXT NOT NULL,
                    archived_at TEXT
                );""",
            [
                "id",
                "owner_id",
                "name",
                "active",
                "workouts",
                "last_completed_workout_id",
                "created_at",
                "archived_at",
            ],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    category TEXT NOT NULL DEFAULT 'Strength',
                    exercises TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );""",
            [
                "id",
                "name",
                "description",
                "category",
                "exercises",
                "created_at",
                "updated_at",
            ],
        ),
        "sessions": (
            """CREATE TABLE sessions (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    name TEXT NOT NULL,
                    exercises TEXT NOT NULL DEFAULT '[]',
                    duration INTEGER,
                    notes TEXT,
                    workout_id TEXT,
                    workout_name TEXT,
                    program_id TEXT
                );""",
            [
                "id",
                "date",
                "name",
                "exercises",
                "duration",
                "notes",
                "workout_id",
                "workout_name",
                "program_id",
            ],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    def __init__(self, db_path: str = "fittracker.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._ensure_indexes()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            cursor.execute("PRAGMA foreign_keys=on;")

    def _ensure_indexes(self) -> None:
        with self._connection() as conn:
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_programs_owner ON programs(owner_id);"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_sessions_program ON sessions(program_id);"
            )

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "owner_id":
                        return "'local'"
                    if col == "active":
                        return "1"
                    if col in ("workouts", "exercises"):
                        return "'[]'"
                    if col == "category":
                        return "'Strength'"
                    if col in ("created_at", "updated_at"):
                        return "datetime('now')"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = {
            "weight_unit": "kg",
            "default_target_count": "12",
            "default_sets": "3",
            "default_reps": "10",
            "log_level": "INFO",
            "language": "en",
        }
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )

    def vacuum(self) -> None:
        """Run SQLite VACUUM to reduce database size."""
        with self._connection() as conn:
            conn.execute("VACUUM;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.rowcount

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class ProgramRepository(BaseRepository):
    """Repository for training programs.

    The workout rotation is stored as a JSON array on the program row.
    """

    _COLUMNS = (
        "id, owner_id, name, active, workouts, last_completed_workout_id, "
        "created_at, archived_at"
    )

    @staticmethod
    def _to_program(row: Tuple) -> Program:
        (
            pid,
            owner_id,
            name,
            active,
            workouts,
            last_completed,
            created_at,
            archived_at,
        ) = row
        return Program(
            id=pid,
            owner_id=owner_id,
            name=name,
            active=bool(active),
            workouts=[ProgramWorkout(**w) for w in json.loads(workouts or "[]")],
            last_completed_workout_id=last_completed,
            created_at=created_at,
            archived_at=archived_at,
        )

    @staticmethod
    def _dump_workouts(workouts: list[ProgramWorkout]) -> str:
        return json.dumps([w.model_dump() for w in workouts])

    def create(self, program: Program) -> str:
        self.execute(
            f"INSERT INTO programs ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
            (
                program.id,
                program.owner_id,
                program.name,
                int(program.active),
                self._dump_workouts(program.workouts),
                program.last_completed_workout_id,
                program.created_at,
                program.archived_at,
            ),
        )
        return program.id

    def update(self, program: Program) -> None:
        """Overwrite the stored program with ``program``."""
        changed = self.execute(
            "UPDATE programs SET owner_id = ?, name = ?, active = ?, workouts = ?, "
            "last_completed_workout_id = ?, archived_at = ? WHERE id = ?;",
            (
                program.owner_id,
                program.name,
                int(program.active),
                self._dump_workouts(program.workouts),
                program.last_completed_workout_id,
                program.archived_at,
                program.id,
            ),
        )
        if not changed:
            raise ValueError("program not found")

    def fetch(self, program_id: str) -> Program:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM programs WHERE id = ?;", (program_id,)
        )
        if not rows:
            raise ValueError("program not found")
        return self._to_program(rows[0])

    def fetch_active(self, owner_id: str) -> List[Program]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM programs WHERE owner_id = ? AND active = 1 "
            "ORDER BY created_at DESC;",
            (owner_id,),
        )
        return [self._to_program(r) for r in rows]

    def fetch_archived(self, owner_id: str) -> List[Program]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM programs WHERE owner_id = ? AND active = 0 "
            "ORDER BY archived_at DESC;",
            (owner_id,),
        )
        return [self._to_program(r) for r in rows]

    def deactivate(self, program_id: str, timestamp: str) -> None:
        changed = self.execute(
            "UPDATE programs SET active = 0, archived_at = ? WHERE id = ?;",
            (timestamp, program_id),
        )
        if not changed:
            raise ValueError("program not found")

    def delete_all(self) -> None:
        self._delete_all("programs")


class WorkoutRepository(BaseRepository):
    """Repository for saved workout templates."""

    _COLUMNS = "id, name, description, category, exercises, created_at, updated_at"

    @staticmethod
    def _to_workout(row: Tuple) -> Workout:
        wid, name, description, category, exercises, created_at, updated_at = row
        return Workout(
            id=wid,
            name=name,
            description=description,
            category=category,
            exercises=[WorkoutExercise(**e) for e in json.loads(exercises or "[]")],
            created_at=created_at,
            updated_at=updated_at,
        )

    def create(self, workout: Workout) -> str:
        self.execute(
            f"INSERT INTO workouts ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?);",
            (
                workout.id,
                workout.name,
                workout.description,
                workout.category,
                json.dumps([e.model_dump() for e in workout.exercises]),
                workout.created_at,
                workout.updated_at,
            ),
        )
        return workout.id

    def update(self, workout: Workout) -> Workout:
        stamped = workout.model_copy(
            update={
                "updated_at": datetime.datetime.now().isoformat(timespec="seconds")
            }
        )
        changed = self.execute(
            "UPDATE workouts SET name = ?, description = ?, category = ?, exercises = ?, "
            "updated_at = ? WHERE id = ?;",
            (
                stamped.name,
                stamped.description,
                stamped.category,
                json.dumps([e.model_dump() for e in stamped.exercises]),
                stamped.updated_at,
                stamped.id,
            ),
        )
        if not changed:
            raise ValueError("workout not found")
        return stamped

    def fetch(self, workout_id: str) -> Workout:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts WHERE id = ?;", (workout_id,)
        )
        if not rows:
            raise ValueError("workout not found")
        return self._to_workout(rows[0])

    def fetch_all_workouts(self, category: Optional[str] = None) -> List[Workout]:
        query = f"SELECT {self._COLUMNS} FROM workouts"
        params: list[str] = []
        if category:
            query += " WHERE category = ?"
            params.append(category)
        query += " ORDER BY created_at DESC, rowid DESC;"
        return [self._to_workout(r) for r in self.fetch_all(query, tuple(params))]

    def delete(self, workout_id: str) -> None:
        if not self.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,)):
            raise ValueError("workout not found")

    def delete_all(self) -> None:
        self._delete_all("workouts")


class SessionRepository(BaseRepository):
    """Repository for logged sessions. Saves overwrite the whole record."""

    _COLUMNS = (
        "id, date, name, exercises, duration, notes, workout_id, workout_name, program_id"
    )

    @staticmethod
    def _to_session(row: Tuple) -> Session:
        (
            sid,
            date,
            name,
            exercises,
            duration,
            notes,
            workout_id,
            workout_name,
            program_id,
        ) = row
        return Session(
            id=sid,
            date=date,
            name=name,
            exercises=[SessionExercise(**e) for e in json.loads(exercises or "[]")],
            duration=duration,
            notes=notes,
            workout_id=workout_id,
            workout_name=workout_name,
            program_id=program_id,
        )

    @staticmethod
    def _params(session: Session) -> Tuple:
        return (
            session.date,
            session.name,
            json.dumps([e.model_dump() for e in session.exercises]),
            session.duration,
            session.notes,
            session.workout_id,
            session.workout_name,
            session.program_id,
        )

    def create(self, session: Session) -> str:
        self.execute(
            f"INSERT INTO sessions ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (session.id, *self._params(session)),
        )
        return session.id

    def update(self, session: Session) -> None:
        changed = self.execute(
            "UPDATE sessions SET date = ?, name = ?, exercises = ?, duration = ?, "
            "notes = ?, workout_id = ?, workout_name = ?, program_id = ? WHERE id = ?;",
            (*self._params(session), session.id),
        )
        if not changed:
            raise ValueError("session not found")

    def fetch(self, session_id: str) -> Session:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM sessions WHERE id = ?;", (session_id,)
        )
        if not rows:
            raise ValueError("session not found")
        return self._to_session(rows[0])

    def fetch_all_sessions(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Session]:
        """Return sessions newest first; same-day sessions newest insert first."""
        query = f"SELECT {self._COLUMNS} FROM sessions WHERE 1=1"
        params: list[str] = []
        if start_date:
            query += " AND date >= ?"
            params.append(start_date)
        if end_date:
            query += " AND date <= ?"
            params.append(end_date)
        query += " ORDER BY date DESC, rowid DESC;"
        return [self._to_session(r) for r in self.fetch_all(query, tuple(params))]

    def fetch_for_exercise(self, exercise_id: str) -> List[Session]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM sessions WHERE EXISTS ("
            "SELECT 1 FROM json_each(sessions.exercises) "
            "WHERE json_extract(json_each.value, '$.exercise_id') = ?) "
            "ORDER BY date DESC, rowid DESC;",
            (exercise_id,),
        )
        return [self._to_session(r) for r in rows]

    def delete(self, session_id: str) -> None:
        if not self.execute("DELETE FROM sessions WHERE id = ?;", (session_id,)):
            raise ValueError("session not found")

    def delete_all(self) -> None:
        self._delete_all("sessions")


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    TEXT_KEYS = {"weight_unit", "device_id", "log_level", "language"}

    def __init__(
        self, db_path: str = "fittracker.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._ensure_device_id()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, int | float | str] = {}
        for k, v in rows:
            if k in self.TEXT_KEYS:
                result[k] = v
                continue
            try:
                num = float(v)
                result[k] = int(num) if num.is_integer() else num
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                if value is None:
                    continue
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def _ensure_device_id(self) -> None:
        rows = self.fetch_all("SELECT value FROM settings WHERE key = 'device_id';")
        if not rows or not rows[0][0]:
            self.execute(
                "INSERT INTO settings (key, value) VALUES ('device_id', ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                (uuid.uuid4().hex,),
            )

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(value))

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()

    def device_id(self) -> str:
        return self.get_text("device_id", "local")
