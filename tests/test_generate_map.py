import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

import pandas as pd

from generate_map import build_map, main


def _write_workbook(path: Path) -> None:
    pd.DataFrame(
        [
            {"City": "Delhi", "lat": 28.6, "lng": 77.2, "Sustainability Score": 35},
            {"City": "Pune", "lat": 18.5, "lng": 73.8, "Sustainability Score": 74},
        ]
    ).to_excel(path, index=False, engine="openpyxl")


class GenerateMapTests(unittest.TestCase):
    def test_main_writes_html(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dataset = Path(tmp) / "Dataset_AQI22-4.xlsx"
            _write_workbook(dataset)

            with redirect_stdout(io.StringIO()) as output:
                code = main(["--dataset", str(dataset), "--output-dir", tmp, "--select", "pune"])

            self.assertEqual(code, 0)
            html = (Path(tmp) / "sustainability_map.html").read_text(encoding="utf-8")
            self.assertIn("flyTo([18.5, 73.8], 8", html)
            self.assertIn("Locations loaded: 2", output.getvalue())

    def test_search_limits_rendered_locations(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dataset = Path(tmp) / "data.xlsx"
            _write_workbook(dataset)

            result = build_map(str(dataset), zoom=5, search="DEL")

        self.assertEqual(result.rendered_count, 1)
        self.assertEqual(result.counts, {"Good": 1, "Moderate": 0, "Critical": 1})

    def test_failed_load_exits_with_message(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            build_map("/nonexistent/data.xlsx", zoom=5)
        self.assertIn("Place the file in Dataset/ to load it.", str(ctx.exception))

    def test_zoom_out_of_range(self) -> None:
        with self.assertRaises(SystemExit):
            main(["--zoom", "12"])


if __name__ == "__main__":
    unittest.main()
