import io
import logging
from typing import Iterable, List
import pandas as pd
from schemas.inventory import MAX_STOCK

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['name', 'unit', 'category', 'brand', 'stock', 'status', 'image']


class CsvFormatError(ValueError):
    pass


def _parse_stock(raw: str, line: int) -> int:
    if raw == '':
        return 0
    try:
        value = int(raw)
    except ValueError:
        try:
            number = float(raw)
        except ValueError:
            raise CsvFormatError(f"Invalid stock value '{raw}' on line {line}") from None
        if not number.is_integer():
            raise CsvFormatError(f"Invalid stock value '{raw}' on line {line}")
        value = int(number)
    if value < 0:
        raise CsvFormatError(f"Stock must not be negative on line {line}")
    if value > MAX_STOCK:
        raise CsvFormatError(f"Stock value '{raw}' is too large on line {line}")
    return value


def read_product_csv(content: bytes) -> List[dict]:
    """Parse an uploaded product CSV into header-keyed records.

    Every value comes back as a stripped string except ``stock``, which is
    parsed to a non-negative int (blank means 0). Columns missing from the
    header read as blank; unknown columns are dropped, but a row with more
    fields than the header is an error. The whole file is validated here so
    that a malformed file never half-imports.
    """
    try:
        text = content.decode('utf-8-sig')
    except UnicodeDecodeError as exc:
        raise CsvFormatError('CSV file must be UTF-8 encoded') from exc

    if not text.strip():
        return []

    # header=None: the tokenizer then takes its field count from the header
    # line and rejects longer rows instead of inferring an index column
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            index_col=False,
            on_bad_lines='error',
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise CsvFormatError(f'Invalid CSV: {exc}') from exc

    # blank lines come back as all-NaN rows; ",,," rows come back as ""
    df = df[~df.isna().all(axis=1)].fillna('')
    if df.empty:
        return []

    header = [str(column).strip() for column in df.iloc[0]]
    known = [column for column in header if column in CSV_COLUMNS]
    if len(known) != len(set(known)):
        raise CsvFormatError('CSV header repeats a column')

    records = []
    for index, values in zip(df.index[1:], df.iloc[1:].itertuples(index=False)):
        row = dict.fromkeys(CSV_COLUMNS, '')
        for column, value in zip(header, values):
            if column in row:
                row[column] = str(value).strip()
        # the index counts physical lines from 0
        row['stock'] = _parse_stock(row['stock'], index + 1)
        records.append(row)

    logger.debug("Parsed %d CSV records", len(records))
    return records


def write_product_csv(rows: Iterable[tuple]) -> str:
    df = pd.DataFrame([tuple(row) for row in rows], columns=CSV_COLUMNS)
    return df.to_csv(index=False, lineterminator='\n')
