"""Fetch, parse and normalize the air-quality workbook.

``load_dataset`` is the ingestion boundary: every DatasetError is converted
into user-facing text there and the record set is left empty.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pandas as pd
import requests
from loguru import logger
from openpyxl.utils.exceptions import InvalidFileException

from column_resolver import resolve_columns
from dataset_errors import DatasetError, EmptyDatasetError, FetchError, user_message
from location_records import LocationRecord, normalize_rows

DEFAULT_DATASET_PATH = Path("Dataset/Dataset_AQI22-4.xlsx")
REQUEST_TIMEOUT_SECONDS = 60

RawRow = Dict[str, object]
DatasetSource = Union[str, Path]


@dataclass(frozen=True)
class LoadResult:
    records: Tuple[LocationRecord, ...] = ()
    error: str = ""
    source: str = ""
    loaded: bool = False

    @property
    def ok(self) -> bool:
        return not self.error


def _is_url(source: DatasetSource) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def fetch_dataset_bytes(source: DatasetSource, timeout: int = REQUEST_TIMEOUT_SECONDS) -> bytes:
    if _is_url(source):
        try:
            response = requests.get(str(source), timeout=timeout)
        except requests.RequestException as exc:
            raise FetchError() from exc
        if not response.ok:
            logger.warning(f"Dataset request returned HTTP {response.status_code}: {source}")
            raise FetchError()
        return response.content

    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FetchError() from exc


def read_rows(payload: bytes, source: DatasetSource = "") -> List[RawRow]:
    """Parse the first sheet into untyped row mappings; blank cells become None."""
    try:
        if str(source).lower().endswith(".csv"):
            data = pd.read_csv(io.BytesIO(payload))
        else:
            data = pd.read_excel(io.BytesIO(payload), sheet_name=0, engine="openpyxl")
    except (
        ValueError,
        KeyError,
        zipfile.BadZipFile,
        InvalidFileException,
        pd.errors.ParserError,
    ) as exc:
        raise EmptyDatasetError("Dataset is empty or could not be read.") from exc

    data.columns = [str(column) for column in data.columns]
    data = data.astype(object).where(pd.notna(data), None)
    return data.to_dict(orient="records")


def ingest(rows: List[RawRow]) -> List[LocationRecord]:
    if not rows:
        raise EmptyDatasetError("Dataset is empty or could not be read.")

    roles = resolve_columns(list(rows[0].keys()))
    logger.debug(f"Resolved columns: {roles.as_dict()}")

    records = normalize_rows(rows, roles)
    dropped = len(rows) - len(records)
    if dropped:
        logger.debug(f"Dropped {dropped} of {len(rows)} rows without finite lat/lon/score")
    return records


def load_dataset(source: DatasetSource = DEFAULT_DATASET_PATH) -> LoadResult:
    logger.info(f"Loading dataset from {source}")
    try:
        payload = fetch_dataset_bytes(source)
        records = ingest(read_rows(payload, source=source))
    except DatasetError as exc:
        logger.warning(f"Dataset load failed ({type(exc).__name__}): {exc}")
        return LoadResult(error=user_message(exc), source=str(source), loaded=True)

    logger.info(f"Loaded {len(records)} locations")
    return LoadResult(records=tuple(records), source=str(source), loaded=True)
