import json
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from phonedraw.config import DEFAULT_EVENT_TITLE, ShowConfig
from phonedraw.models import Base, DrawSettings, ResultExport
from phonedraw.models.settings import SETTINGS_ROW_ID


def _document(seed: int = 7, winners: int = 1) -> dict:
    results = []
    for order in range(1, 4):
        winner = (
            {"name": f"W{order}", "phone": f"09{order:08d}", "tier": "T1"}
            if order <= winners
            else None
        )
        results.append(
            {
                "order": order,
                "prizeId": f"G-{order}",
                "prizeLabel": f"Grand Prize {order}",
                "group": "Grand",
                "eligible": ["T1"],
                "winner": winner,
            }
        )
    return {
        "eventTitle": "Gala",
        "seed": seed,
        "participantCount": 12,
        "timestamp": "2025-01-01T20:00:00+00:00",
        "results": results,
    }


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()


class DrawSettingsTests(DBTestCase):
    def test_load_creates_single_row_from_defaults(self):
        with self.Session.begin() as session:
            first = DrawSettings.load(session, ShowConfig(seed=42, mask_winner_phone=False))
            second = DrawSettings.load(session, ShowConfig(seed=99))
            self.assertIs(first, second)
            self.assertEqual(first.id, SETTINGS_ROW_ID)
            self.assertEqual(first.seed, 42)
            self.assertEqual(first.event_title, DEFAULT_EVENT_TITLE)
            self.assertFalse(first.mask_winner_phone)

        with self.Session() as session:
            rows = session.scalars(select(DrawSettings)).all()
            self.assertEqual(len(rows), 1)

    def test_load_reads_environment_when_no_defaults(self):
        env = {"DRAW_SEED": "17", "EVENT_TITLE": "Staff Party", "MASK_WINNER_PHONE": "off"}
        with patch.dict("os.environ", env):
            with self.Session.begin() as session:
                settings = DrawSettings.load(session)
                config = settings.to_config()
        self.assertEqual(config, ShowConfig(seed=17, event_title="Staff Party", mask_winner_phone=False))

    def test_seed_is_validated(self):
        with self.Session.begin() as session:
            settings = DrawSettings.load(session, ShowConfig(seed=3))
            settings.seed = " 12 "
            self.assertEqual(settings.seed, 12)
            for bad in ("twelve", True, "1.5"):
                with self.subTest(bad=bad):
                    with self.assertRaises(ValueError):
                        settings.seed = bad
            self.assertEqual(settings.seed, 12)

    def test_save_seed_persists(self):
        with self.Session.begin() as session:
            DrawSettings.load(session, ShowConfig(seed=3))

        with self.Session.begin() as session:
            updated = DrawSettings.save_seed(session, 8)
            self.assertEqual(updated.seed, 8)
            self.assertIsNotNone(updated.updated_at)

        with self.Session() as session:
            self.assertEqual(DrawSettings.get(session).seed, 8)


class ResultExportTests(DBTestCase):
    def test_from_document_counts_winners(self):
        export = ResultExport.from_document(_document(winners=2))
        self.assertEqual(export.event_title, "Gala")
        self.assertEqual(export.seed, 7)
        self.assertEqual(export.participant_count, 12)
        self.assertEqual(export.winner_count, 2)

    def test_latest_returns_newest_export(self):
        with self.Session.begin() as session:
            older = ResultExport.from_document(_document(seed=1))
            older.created_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
            newer = ResultExport.from_document(_document(seed=2))
            newer.created_at = datetime(2025, 1, 2, tzinfo=timezone.utc)
            session.add_all([older, newer])

        with self.Session() as session:
            latest = ResultExport.latest(session)
            self.assertEqual(latest.seed, 2)

    def test_latest_without_exports(self):
        with self.Session() as session:
            self.assertIsNone(ResultExport.latest(session))

    def test_json_serialization(self):
        doc = _document()
        with self.Session.begin() as session:
            export = ResultExport.from_document(doc)
            export.created_at = datetime(2025, 1, 1, 21, 30, tzinfo=timezone.utc)
            session.add(export)

        with self.Session() as session:
            stored = session.get(ResultExport, export.id)
            data = stored.to_json()
            self.assertEqual(data["created_at"], "2025-01-01T21:30:00+00:00")
            self.assertEqual(data["document"], doc)
            self.assertEqual(data["winner_count"], 1)
            self.assertEqual(json.loads(stored.to_json_str()), data)


if __name__ == "__main__":
    unittest.main()
