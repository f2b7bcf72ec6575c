"""In-memory stand-ins for gspread worksheets, used by the tests."""

from unittest.mock import MagicMock, patch

from gspread.utils import a1_to_rowcol

from sheets_manager import GoogleSheetsManager

HEADER = list(GoogleSheetsManager.HEADERS)


class FakeWorksheet:
    """Implements the subset of gspread.Worksheet the manager uses."""

    def __init__(self, rows, title="Tasks", sheet_id=0):
        self.rows = [[str(value) for value in row] for row in rows]
        self.title = title
        self.id = sheet_id
        self.row_count = 1000
        self.deleted_rows = []
        self.sort_calls = []
        self.updates = []

    def get_all_values(self):
        width = max((len(row) for row in self.rows), default=0)
        return [row + [""] * (width - len(row)) for row in self.rows]

    def row_values(self, row_number):
        if row_number > len(self.rows):
            return []
        return list(self.rows[row_number - 1])

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(value) for value in values])

    def append_rows(self, values, value_input_option=None):
        for row in values:
            self.append_row(row, value_input_option)

    def update(self, range_name=None, values=None, value_input_option=None):
        self.updates.append((range_name, values))
        start_row, start_col = a1_to_rowcol(range_name)
        for i, row_values in enumerate(values):
            row_index = start_row - 1 + i
            while len(self.rows) <= row_index:
                self.rows.append([])
            row = self.rows[row_index]
            for j, value in enumerate(row_values):
                col_index = start_col - 1 + j
                while len(row) <= col_index:
                    row.append("")
                row[col_index] = str(value)

    def delete_rows(self, start_index, end_index=None):
        self.deleted_rows.append(start_index)
        del self.rows[start_index - 1]

    def sort(self, *specs, range=None):
        self.sort_calls.append((specs, range))
        column, order = specs[0]
        header, data = self.rows[0], self.rows[1:]
        filled = [row for row in data if len(row) >= column and row[column - 1]]
        blank = [row for row in data if not (len(row) >= column and row[column - 1])]
        filled.sort(key=lambda row: row[column - 1], reverse=(order != "asc"))
        self.rows = [header] + filled + blank


def task_row(name, genre="", deadline="", recurrent="", progress=0, user_id="1", task_type="main", parent=""):
    return [name, genre, deadline, recurrent, str(progress), user_id, task_type, parent]


def make_manager(rows, done_rows=None):
    """Build a GoogleSheetsManager wired to fake worksheets instead of the API."""
    with patch.object(GoogleSheetsManager, "_initialize_client"):
        manager = GoogleSheetsManager("spreadsheet-id")
    manager.spreadsheet = MagicMock()
    manager.worksheet = FakeWorksheet(rows)
    manager.done_worksheet = FakeWorksheet(done_rows or [HEADER], title="Done_tasks", sheet_id=1)
    return manager
