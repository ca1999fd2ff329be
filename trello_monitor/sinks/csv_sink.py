"""CSV file movement sink."""

import csv
from pathlib import Path
from typing import List, Sequence, Union

from .base import MovementSink
from ..models.movement import MOVEMENT_HEADERS, MovementRecord
from ..utils.error_handling import SinkError


class CsvMovementSink(MovementSink):
    """Stores movements in a local CSV file with a header row."""

    def __init__(self, output_path: Union[str, Path], create_directory: bool = True):
        """Initialize CSV sink.

        Args:
            output_path: Path to the CSV file
            create_directory: Create the parent directory on write if missing
        """
        self.output_path = Path(output_path).expanduser()
        self.create_directory = create_directory

    @property
    def name(self) -> str:
        return f"CSV file {self.output_path}"

    def read_all(self) -> List[MovementRecord]:
        if not self.output_path.exists():
            return []

        try:
            with open(self.output_path, "r", newline="", encoding="utf-8") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames is None:
                    return []
                header = [name.strip() for name in reader.fieldnames]
                if header != MOVEMENT_HEADERS:
                    raise SinkError(
                        f"Unexpected header in CSV file {self.output_path}: {header!r}"
                    )
                movements = []
                for row in reader:
                    cells = [row.get(header) for header in MOVEMENT_HEADERS]
                    if not any(cell and cell.strip() for cell in cells):
                        continue
                    movements.append(MovementRecord.from_row(cells))
                return movements
        except (OSError, csv.Error) as e:
            raise SinkError(f"Failed to read CSV file {self.output_path}: {e}") from e

    def write_all(self, movements: Sequence[MovementRecord]) -> None:
        if self.create_directory:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.output_path, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(MOVEMENT_HEADERS)
                for movement in movements:
                    writer.writerow(movement.to_row())
        except (OSError, csv.Error) as e:
            raise SinkError(f"Failed to write CSV file {self.output_path}: {e}") from e
