import io
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

import pandas as pd
import requests

from dataset_errors import EmptyDatasetError, FetchError, SchemaError
from dataset_loader import fetch_dataset_bytes, ingest, load_dataset, read_rows
from location_records import LocationRecord


def _workbook_bytes(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


STATIONS = pd.DataFrame(
    [
        {"Station": "Delhi", "Latitude": 28.6, "Longitude": 77.2, "AQI_Score": 35, "PM2.5": 120.5},
        {"Station": "Pune", "Latitude": 18.5, "Longitude": 73.8, "AQI_Score": 74, "PM2.5": None},
        {"Station": "Nowhere", "Latitude": None, "Longitude": 70.0, "AQI_Score": 50, "PM2.5": 3},
    ]
)


class ReadRowsTests(unittest.TestCase):
    def test_reads_first_sheet_and_blanks_become_none(self) -> None:
        rows = read_rows(_workbook_bytes(STATIONS), source="data.xlsx")

        self.assertEqual(len(rows), 3)
        self.assertEqual(list(rows[0].keys()), ["Station", "Latitude", "Longitude", "AQI_Score", "PM2.5"])
        self.assertIsNone(rows[1]["PM2.5"])
        self.assertIsNone(rows[2]["Latitude"])

    def test_unreadable_payload_is_empty_dataset(self) -> None:
        with self.assertRaises(EmptyDatasetError):
            read_rows(b"definitely not a workbook", source="data.xlsx")

    def test_zip_that_is_not_a_workbook_is_empty_dataset(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("readme.txt", "not a spreadsheet")

        with self.assertRaises(EmptyDatasetError) as ctx:
            read_rows(buffer.getvalue(), source="data.xlsx")
        self.assertEqual(str(ctx.exception), "Dataset is empty or could not be read.")

    def test_csv_source(self) -> None:
        rows = read_rows(b"lat,lon,score\n1.5,2.5,80\n", source="data.csv")
        self.assertEqual(rows, [{"lat": 1.5, "lon": 2.5, "score": 80}])


class IngestTests(unittest.TestCase):
    def test_ingest_resolves_and_normalizes(self) -> None:
        records = ingest(read_rows(_workbook_bytes(STATIONS), source="data.xlsx"))

        self.assertEqual([record.name for record in records], ["Delhi", "Pune"])
        self.assertEqual(records[0].pm25, 120.5)
        self.assertIsNone(records[1].pm25)

    def test_no_rows(self) -> None:
        with self.assertRaises(EmptyDatasetError) as ctx:
            ingest([])
        self.assertEqual(str(ctx.exception), "Dataset is empty or could not be read.")

    def test_unresolvable_schema(self) -> None:
        with self.assertRaises(SchemaError):
            ingest([{"Station": "Delhi", "Value": 3}])

    def test_only_invalid_rows(self) -> None:
        with self.assertRaises(EmptyDatasetError) as ctx:
            ingest([{"Station": "Delhi", "Latitude": "n/a", "Longitude": 77.2, "AQI_Score": 35}])
        self.assertEqual(str(ctx.exception), "No valid location records found in dataset.")


class FetchTests(unittest.TestCase):
    def test_local_missing_file(self) -> None:
        with self.assertRaises(FetchError):
            fetch_dataset_bytes(Path("/nonexistent/Dataset_AQI22-4.xlsx"))

    @mock.patch("dataset_loader.requests.get")
    def test_url_non_ok_response(self, mock_get: mock.Mock) -> None:
        mock_get.return_value = mock.Mock(ok=False, status_code=404)
        with self.assertRaises(FetchError):
            fetch_dataset_bytes("https://example.org/Dataset_AQI22-4.xlsx")

    @mock.patch("dataset_loader.requests.get")
    def test_url_connection_error(self, mock_get: mock.Mock) -> None:
        mock_get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(FetchError):
            fetch_dataset_bytes("https://example.org/Dataset_AQI22-4.xlsx")

    @mock.patch("dataset_loader.requests.get")
    def test_url_success(self, mock_get: mock.Mock) -> None:
        mock_get.return_value = mock.Mock(ok=True, status_code=200, content=b"payload")
        self.assertEqual(fetch_dataset_bytes("http://example.org/data.xlsx"), b"payload")


class LoadDatasetTests(unittest.TestCase):
    def test_successful_load(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "Dataset_AQI22-4.xlsx"
            path.write_bytes(_workbook_bytes(STATIONS.head(1)))

            result = load_dataset(path)

        self.assertTrue(result.ok)
        self.assertTrue(result.loaded)
        self.assertEqual(
            result.records,
            (LocationRecord(name="Delhi", lat=28.6, lon=77.2, score=35.0, pm25=120.5),),
        )

    def test_failures_become_user_messages(self) -> None:
        result = load_dataset(Path("/nonexistent/Dataset_AQI22-4.xlsx"))

        self.assertFalse(result.ok)
        self.assertEqual(result.records, ())
        self.assertTrue(result.loaded)
        self.assertEqual(
            result.error,
            "Dataset not found in the public folder. Place the file in Dataset/ to load it.",
        )

    def test_non_workbook_archive_becomes_user_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "Dataset_AQI22-4.xlsx"
            with zipfile.ZipFile(path, "w") as archive:
                archive.writestr("readme.txt", "not a spreadsheet")

            result = load_dataset(path)

        self.assertEqual(result.records, ())
        self.assertEqual(
            result.error,
            "Dataset is empty or could not be read. Place the file in Dataset/ to load it.",
        )

    def test_schema_failure_message(self) -> None:
        frame = pd.DataFrame([{"Station": "Delhi", "Value": 3}])
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.xlsx"
            path.write_bytes(_workbook_bytes(frame))
            result = load_dataset(path)

        self.assertEqual(
            result.error,
            "Required columns (lat, lon, score) not found in dataset. "
            "Place the file in Dataset/ to load it.",
        )


if __name__ == "__main__":
    unittest.main()
