import argparse

from algorithms import DurationFormatter, WeightConverter
from models import Program, ProgramWorkout, Workout, WorkoutExercise
from rest_api import FitTrackerAPI


def demo_data(db_path: str, yaml_path: str) -> None:
    """Populate the database with demo workouts and a program if empty."""
    api = FitTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    if api.workouts.fetch_all_workouts():
        print("Database already contains workouts")
        return
    target = api.settings.get_int("default_target_count", 12)
    legs = Workout(
        name="Leg Day",
        exercises=[
            WorkoutExercise(exercise_id="squat", exercise_name="Back Squat", default_weight=60.0),
            WorkoutExercise(exercise_id="lunge", exercise_name="Walking Lunge"),
            WorkoutExercise(
                exercise_id="plank",
                exercise_name="Plank",
                default_sets=2,
                default_reps=1,
                default_duration=60,
            ),
        ],
    )
    push = Workout(
        name="Push Day",
        exercises=[
            WorkoutExercise(exercise_id="bench", exercise_name="Bench Press", default_weight=50.0),
            WorkoutExercise(exercise_id="ohp", exercise_name="Overhead Press", default_weight=30.0),
        ],
    )
    program = Program(name="Demo Program", owner_id=api.settings.device_id())
    for idx, workout in enumerate((legs, push)):
        api.workouts.create(workout)
        program.workouts.append(
            ProgramWorkout(
                workout_id=workout.id,
                workout_name=workout.name,
                sequence_order=idx,
                target_count=target,
            )
        )
    api.program_service.activate_program(program)
    print("Demo data inserted")


def show_next(db_path: str, yaml_path: str) -> None:
    api = FitTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    owner = api.settings.device_id()
    program = api.program_service.active_program(owner)
    if program is None:
        print("No active program")
        return
    entry = api.program_service.next_workout(owner)
    if entry is None:
        print(f"{program.name}: all workouts completed")
        return
    print(
        f"{program.name}: {entry.workout_name} "
        f"({entry.completed_count}/{entry.target_count})"
    )


def archive_active(db_path: str, yaml_path: str) -> None:
    api = FitTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    program = api.program_service.active_program(api.settings.device_id())
    if program is None:
        print("No active program")
        return
    api.program_service.archive_program(program.id)
    print(f"Archived {program.name}")


def show_last(db_path: str, yaml_path: str, exercise_id: str) -> None:
    api = FitTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    perf = api.session_service.last_performance(exercise_id)
    if perf is None:
        print("No previous performance")
        return
    unit = api.settings.get_text("weight_unit", "kg")
    print(f"{perf.date} {perf.session_name}")
    for idx, s in enumerate(perf.sets, start=1):
        if s.duration:
            print(f"  {idx}. {DurationFormatter.compact(s.duration)}")
        else:
            weight = WeightConverter.to_unit(s.weight, unit)
            print(f"  {idx}. {s.reps} x {weight} {unit}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Utility commands")
    sub = parser.add_subparsers(dest="cmd", required=True)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="fittracker.db")
    demo.add_argument("--yaml", default="settings.yaml")

    nxt = sub.add_parser("next")
    nxt.add_argument("--db", default="fittracker.db")
    nxt.add_argument("--yaml", default="settings.yaml")

    arc = sub.add_parser("archive")
    arc.add_argument("--db", default="fittracker.db")
    arc.add_argument("--yaml", default="settings.yaml")

    last = sub.add_parser("last")
    last.add_argument("exercise_id")
    last.add_argument("--db", default="fittracker.db")
    last.add_argument("--yaml", default="settings.yaml")

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    serve = sub.add_parser("serve")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()

    if args.cmd == "demo":
        demo_data(args.db, args.yaml)
    elif args.cmd == "next":
        show_next(args.db, args.yaml)
    elif args.cmd == "archive":
        archive_active(args.db, args.yaml)
    elif args.cmd == "last":
        show_last(args.db, args.yaml, args.exercise_id)
    elif args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lb")
        else:
            print(f"{args.weight} lb = {WeightConverter.lb_to_kg(args.weight)} kg")
    elif args.cmd == "serve":
        import uvicorn

        uvicorn.run("rest_api:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
