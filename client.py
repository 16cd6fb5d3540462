import requests
from typing import Optional

class FitTrackerClient:
    """Simple REST client for the FitTracker API."""

    def __init__(
        self, base_url: str = "http://localhost:8000", session=None
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = session or requests.Session()

    def next_workout(self) -> dict:
        resp = self.http.get(f"{self.base_url}/programs/active/next")
        resp.raise_for_status()
        return resp.json()

    def start_session(self, workout_id: str, date: Optional[str] = None) -> dict:
        resp = self.http.post(
            f"{self.base_url}/live_sessions",
            json={"workout_id": workout_id, "date": date},
        )
        resp.raise_for_status()
        return resp.json()

    def complete_exercise(self, session_id: str, exercise_id: str) -> dict:
        resp = self.http.post(
            f"{self.base_url}/live_sessions/{session_id}/exercises/{exercise_id}/complete"
        )
        resp.raise_for_status()
        return resp.json()

    def complete_superset(self, session_id: str, group_id: str) -> dict:
        resp = self.http.post(
            f"{self.base_url}/live_sessions/{session_id}/supersets/{group_id}/complete"
        )
        resp.raise_for_status()
        return resp.json()

    def save_session(self, session_id: str, duration: Optional[int] = None) -> dict:
        params = {"duration": duration} if duration is not None else {}
        resp = self.http.post(
            f"{self.base_url}/live_sessions/{session_id}/save", params=params
        )
        resp.raise_for_status()
        return resp.json()

    def last_performance(
        self, exercise_id: str, exclude_session_id: Optional[str] = None
    ) -> Optional[dict]:
        params = {}
        if exclude_session_id:
            params["exclude_session_id"] = exclude_session_id
        resp = self.http.get(
            f"{self.base_url}/exercises/{exercise_id}/last", params=params
        )
        resp.raise_for_status()
        return resp.json()
