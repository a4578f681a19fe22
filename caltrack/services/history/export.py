"""
Export Service - Export workout history to downloadable formats.

Currently supports:
- JSON (pretty-printed array of records)
- CSV (one row per record)
"""
import csv
import json
from datetime import date, datetime
from io import StringIO
from typing import Optional, Sequence

from caltrack.core.logging import get_logger
from caltrack.models.workout import WorkoutRecord

logger = get_logger(__name__)

CSV_HEADERS = ["Date", "Workout Type", "Duration (min)", "Calories", "Intensity"]


class ExportService:
    """
    Service for exporting workout history.
    """

    def __init__(self, date_format: str = "%x"):
        self.date_format = date_format

    def export_to_json(self, records: Sequence[WorkoutRecord]) -> str:
        """
        Export records as a pretty-printed JSON array.

        Args:
            records: Records in collection order

        Returns:
            JSON text using the persisted field names
        """
        result = json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)
        logger.info("Exported history to JSON", records=len(records))
        return result

    def export_to_csv(self, records: Sequence[WorkoutRecord]) -> str:
        """
        Export records as CSV.

        The header row comes first, then one row per record in collection
        order. Rows are joined with ``\\n`` and there is no trailing newline.

        Args:
            records: Records in collection order

        Returns:
            CSV text
        """
        output = StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(CSV_HEADERS)

        for record in records:
            writer.writerow([
                self._format_date(record.recorded_at),
                record.workout_type,
                record.duration_minutes,
                record.calories,
                record.intensity.value,
            ])

        result = output.getvalue().rstrip("\n")
        output.close()

        logger.info("Exported history to CSV", records=len(records))
        return result

    def _format_date(self, value: datetime) -> str:
        """Render a timestamp as a local calendar date."""
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.strftime(self.date_format)

    def get_content_type(self, extension: str) -> str:
        """Get the content type for an export format."""
        return {
            "json": "application/json; charset=utf-8",
            "csv": "text/csv; charset=utf-8",
        }[extension]

    def get_filename(self, extension: str, today: Optional[date] = None) -> str:
        """Generate filename for an export, e.g. ``workout-data-2025-01-31.csv``."""
        today = today or date.today()
        return f"workout-data-{today.isoformat()}.{extension}"
