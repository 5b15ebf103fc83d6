"""Engine construction tests for the ingestion database."""

import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bestsellers.models import database_url, get_engine, init_db


class TestDatabaseUrl(unittest.TestCase):
    def test_defaults_to_sqlite_file(self):
        self.assertEqual(database_url({}), "sqlite:///data/bestsellers.db")

    def test_sqlite_path_from_config(self):
        config = {"storage": {"url": "", "sqlite": {"database_path": "/tmp/x.db"}}}
        self.assertEqual(database_url(config), "sqlite:////tmp/x.db")

    def test_explicit_url_wins(self):
        config = {"storage": {"url": "postgresql://u:p@db/bestsellers", "sqlite": {"database_path": "/tmp/x.db"}}}
        self.assertEqual(database_url(config), "postgresql://u:p@db/bestsellers")


class TestGetEngine(unittest.TestCase):
    def test_sqlite_enforces_foreign_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            engine = get_engine({"storage": {"sqlite": {"database_path": str(Path(tmp) / "t.db")}}})
            try:
                init_db(engine)
                with engine.connect() as conn:
                    self.assertEqual(conn.exec_driver_sql("PRAGMA foreign_keys").scalar(), 1)
            finally:
                engine.dispose()


if __name__ == "__main__":
    unittest.main()
