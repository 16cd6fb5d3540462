import io
import os
import sys
import unittest
from contextlib import redirect_stdout
from unittest import mock

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import cli


class CLITest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        self.yaml_path = "test_cli.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def run_cli(self, *args: str) -> str:
        out = io.StringIO()
        with mock.patch.object(sys, "argv", ["cli.py", *args]), redirect_stdout(out):
            cli.main()
        return out.getvalue()

    def test_demo_next_and_archive(self) -> None:
        db = ["--db", self.db_path, "--yaml", self.yaml_path]
        self.assertIn("Demo data inserted", self.run_cli("demo", *db))
        self.assertIn("already contains", self.run_cli("demo", *db))
        self.assertIn("Demo Program: Leg Day (0/12)", self.run_cli("next", *db))
        self.assertIn("No previous performance", self.run_cli("last", "squat", *db))
        self.assertIn("Archived Demo Program", self.run_cli("archive", *db))
        self.assertIn("No active program", self.run_cli("next", *db))

    def test_convert(self) -> None:
        self.assertEqual(self.run_cli("convert", "--weight", "100", "--unit", "kg").strip(), "100.0 kg = 220.46 lb")


if __name__ == "__main__":
    unittest.main()
