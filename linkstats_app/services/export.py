"""
Report export to CSV and JSON.

Both formats carry exactly the rows handed in, in order; callers pass the
rows currently visible in the report.
"""

import csv
import json
from io import StringIO
from typing import Iterable, List, NamedTuple

from linkstats_app.schemas.stats import ExportFormat, LinkStat

CSV_HEADER = ["Name", "Today", "30 Day", "Total"]
MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


class ExportPayload(NamedTuple):
    content: str
    media_type: str
    filename: str


def to_csv(rows: Iterable[LinkStat], include_country: bool = False) -> str:
    """
    Header line plus one line per row, fields in header order.

    Names containing commas or quotes are quoted, so the line count always
    equals the row count plus one.
    """
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER + (["Country"] if include_country else []))

    for row in rows:
        fields = [row.name, row.today, row.thirty_day, row.total]
        if include_country:
            fields.append(row.country)
        writer.writerow(fields)

    return output.getvalue()


def to_json(rows: Iterable[LinkStat]) -> str:
    """Pretty-printed JSON array using the camelCase row aliases"""
    data: List[dict] = [row.model_dump(by_alias=True) for row in rows]
    return json.dumps(data, indent=2)


def export(rows: Iterable[LinkStat], fmt: ExportFormat, include_country: bool = False) -> ExportPayload:
    fmt = ExportFormat(fmt)
    if fmt == ExportFormat.CSV:
        content = to_csv(rows, include_country=include_country)
    else:
        content = to_json(rows)
    return ExportPayload(content=content, media_type=MEDIA_TYPES[fmt], filename=f"reports.{fmt.value}")
