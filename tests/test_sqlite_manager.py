import tempfile
import unittest
from pathlib import Path

from fx_normalizer.db.sqlite_manager import PersistenceResult, SQLiteManager, latest_per_symbol
from fx_normalizer.ingestion.models import RateQuote


class SQLiteManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "test.db"
        self.manager = SQLiteManager(self.db_path)

    def tearDown(self) -> None:
        self.manager.close()
        self.temp_dir.cleanup()

    def test_insert_and_upsert(self) -> None:
        rows = [
            RateQuote(symbol="EUR/USD", ask=1.08, bid=1.07, as_of=100),
            RateQuote(symbol="USD/JPY", ask=150.0, bid=149.9, as_of=100),
        ]
        result = self.manager.insert_quotes(rows)
        self.assertIsInstance(result, PersistenceResult)
        self.assertEqual(result.inserted, len(rows))
        self.assertEqual(result.updated, 0)

        update_result = self.manager.insert_quotes(
            [RateQuote(symbol="EUR/USD", ask=1.09, bid=1.08, as_of=100)]
        )
        self.assertEqual(update_result.inserted, 0)
        self.assertEqual(update_result.updated, 1)

        all_rows = self.manager.fetch_range()
        self.assertEqual(len(all_rows), 2)
        self.assertTrue(all(isinstance(row, RateQuote) for row in all_rows))
        eur_row = [row for row in all_rows if row.symbol == "EUR/USD"][0]
        self.assertEqual(eur_row.ask, 1.09)
        self.assertEqual(eur_row.bid, 1.08)

    def test_fetch_range_filters_timestamps(self) -> None:
        self.manager.insert_quotes(
            [
                RateQuote(symbol="EUR/USD", ask=1.08, bid=1.08, as_of=100),
                RateQuote(symbol="EUR/USD", ask=1.09, bid=1.09, as_of=200),
            ]
        )

        early = self.manager.fetch_range(end=150)
        late = self.manager.fetch_range(start=150)

        self.assertEqual([row.as_of for row in early], [100])
        self.assertEqual([row.as_of for row in late], [200])

    def test_latest_quotes_respects_cutoff(self) -> None:
        self.manager.insert_quotes(
            [
                RateQuote(symbol="EUR/USD", ask=1.08, bid=1.08, as_of=100),
                RateQuote(symbol="EUR/USD", ask=1.09, bid=1.09, as_of=200),
                RateQuote(symbol="USD/JPY", ask=150.0, bid=150.0, as_of=150),
            ]
        )

        latest = self.manager.latest_quotes()
        self.assertEqual([(row.symbol, row.as_of) for row in latest], [("EUR/USD", 200), ("USD/JPY", 150)])

        at_cutoff = self.manager.latest_quotes(cutoff=150)
        self.assertEqual(
            [(row.symbol, row.ask) for row in at_cutoff], [("EUR/USD", 1.08), ("USD/JPY", 150.0)]
        )

        self.assertEqual(self.manager.latest_quotes(cutoff=50), [])


class LatestPerSymbolTests(unittest.TestCase):
    def test_keeps_newest_quote_per_symbol(self) -> None:
        rows = [
            RateQuote(symbol="USD/JPY", ask=150.0, bid=150.0, as_of=200),
            RateQuote(symbol="EUR/USD", ask=1.09, bid=1.09, as_of=300),
            RateQuote(symbol="EUR/USD", ask=1.08, bid=1.08, as_of=100),
        ]

        latest = latest_per_symbol(rows)

        self.assertEqual([(row.symbol, row.as_of) for row in latest], [("EUR/USD", 300), ("USD/JPY", 200)])


class PersistenceResultTests(unittest.TestCase):
    def test_total_property_adds_inserted_and_updated(self) -> None:
        result = PersistenceResult(inserted=3, updated=2)

        self.assertEqual(result.total, 5)


class DatabaseModuleTests(unittest.TestCase):
    def test_default_sqlite_path_sits_beside_the_package(self) -> None:
        from fx_normalizer.db import DEFAULT_SQLITE_DB_PATH

        self.assertTrue(DEFAULT_SQLITE_DB_PATH.is_absolute())
        self.assertEqual(DEFAULT_SQLITE_DB_PATH.name, "quotes.db")


if __name__ == "__main__":
    unittest.main()
