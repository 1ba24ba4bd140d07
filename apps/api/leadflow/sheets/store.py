from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet


CellValue = Any


class Sheet(Protocol):
    """A named 2-D grid of cells addressed by 1-based row and column."""

    @property
    def name(self) -> str: ...

    def last_row(self) -> int: ...

    def last_column(self) -> int: ...

    def get_values(self) -> list[list[CellValue]]: ...

    def get_range(self, row: int, column: int, rows: int, columns: int) -> list[list[CellValue]]: ...

    def set_values(self, row: int, column: int, values: Sequence[Sequence[CellValue]]) -> None: ...

    def append_row(self, values: Sequence[CellValue]) -> None: ...

    def delete_row(self, row: int) -> None: ...

    def freeze_header(self) -> None: ...

    def is_header_frozen(self) -> bool: ...

    def auto_resize_columns(self) -> None: ...

    def clear(self) -> None: ...


class Spreadsheet(Protocol):
    def get_sheet(self, name: str) -> Sheet | None: ...

    def insert_sheet(self, name: str) -> Sheet: ...

    def sheet_names(self) -> list[str]: ...

    def save(self) -> None: ...


class WorksheetSheet:
    """Sheet backed by an openpyxl worksheet.

    openpyxl materialises empty cells whenever they are read, so ``max_row`` and
    ``max_column`` overestimate the used range. The last row/column are instead
    derived from the cells that actually hold a value.
    """

    def __init__(self, worksheet: Worksheet) -> None:
        self._ws = worksheet

    @property
    def name(self) -> str:
        return self._ws.title

    @property
    def worksheet(self) -> Worksheet:
        return self._ws

    def last_row(self) -> int:
        for row_index in range(self._ws.max_row, 0, -1):
            for cell in self._ws[row_index]:
                if cell.value is not None:
                    return row_index
        return 0

    def last_column(self) -> int:
        last = 0
        for row in self._ws.iter_rows(min_row=1, max_row=self.last_row()):
            for cell in row:
                if cell.value is not None and cell.column > last:
                    last = cell.column
        return last

    def get_values(self) -> list[list[CellValue]]:
        rows = self.last_row()
        columns = self.last_column()
        if rows == 0 or columns == 0:
            return []
        return self.get_range(1, 1, rows, columns)

    def get_range(self, row: int, column: int, rows: int, columns: int) -> list[list[CellValue]]:
        if rows <= 0 or columns <= 0:
            return []
        return [
            list(values)
            for values in self._ws.iter_rows(
                min_row=row,
                max_row=row + rows - 1,
                min_col=column,
                max_col=column + columns - 1,
                values_only=True,
            )
        ]

    def set_values(self, row: int, column: int, values: Sequence[Sequence[CellValue]]) -> None:
        for row_offset, row_values in enumerate(values):
            for column_offset, value in enumerate(row_values):
                # cell(value=None) leaves the old value in place
                self._ws.cell(row=row + row_offset, column=column + column_offset).value = value

    def append_row(self, values: Sequence[CellValue]) -> None:
        self.set_values(self.last_row() + 1, 1, [values])

    def delete_row(self, row: int) -> None:
        self._ws.delete_rows(row, 1)

    def freeze_header(self) -> None:
        self._ws.freeze_panes = "A2"

    def is_header_frozen(self) -> bool:
        return self._ws.freeze_panes == "A2"

    def auto_resize_columns(self, max_width: int = 60) -> None:
        for column in range(1, self.last_column() + 1):
            max_len = 0
            for (value,) in self._ws.iter_rows(
                min_row=1, max_row=self.last_row(), min_col=column, max_col=column, values_only=True
            ):
                if value is not None:
                    max_len = max(max_len, min(len(str(value)), max_width))
            self._ws.column_dimensions[get_column_letter(column)].width = max(max_len + 2, 10)

    def clear(self) -> None:
        if self._ws.max_row:
            self._ws.delete_rows(1, self._ws.max_row)
        self._ws.freeze_panes = None


class WorkbookSpreadsheet:
    """Spreadsheet backed by an openpyxl workbook, optionally bound to an ``.xlsx`` file."""

    def __init__(self, workbook: Workbook, path: str | Path | None = None) -> None:
        self._workbook = workbook
        self._path = Path(path) if path is not None else None

    @classmethod
    def new(cls, path: str | Path | None = None) -> WorkbookSpreadsheet:
        workbook = Workbook()
        workbook.remove(workbook.active)
        return cls(workbook, path)

    @classmethod
    def open(cls, path: str | Path) -> WorkbookSpreadsheet:
        resolved = Path(path)
        if resolved.exists():
            return cls(load_workbook(resolved), resolved)
        return cls.new(resolved)

    @property
    def workbook(self) -> Workbook:
        return self._workbook

    def get_sheet(self, name: str) -> WorksheetSheet | None:
        if name not in self._workbook.sheetnames:
            return None
        return WorksheetSheet(self._workbook[name])

    def insert_sheet(self, name: str) -> WorksheetSheet:
        return WorksheetSheet(self._workbook.create_sheet(title=name))

    def sheet_names(self) -> list[str]:
        return list(self._workbook.sheetnames)

    def save(self) -> None:
        if self._path is None or not self._workbook.worksheets:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._workbook.save(self._path)
