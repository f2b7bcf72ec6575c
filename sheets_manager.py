"""
Google Sheets Manager for task and subtask tracking.

The spreadsheet is used as a small row-oriented database:
- "Tasks" holds every open main task and subtask, one per row
- "Done_tasks" is the archive that completed tasks are moved into

Columns are located by header name (row 1), so the sheet owner may reorder
them. Every operation reads the whole worksheet, scans it in memory and then
writes back a single cell or a set of rows.

Main task progress is rolled up from its subtasks (rounded average). When a
main task reaches 100% its rows are copied to the archive and then deleted
from "Tasks" in descending row order so earlier deletions do not shift the
rows still to be removed.
"""

import logging
import math
import os
import re
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1

logger = logging.getLogger(__name__)

MAIN = "main"
SUB = "sub"

DATE_FORMAT = "%Y-%m-%d"
RECURRENT_TYPES = ("weekly", "monthly")

# Light blue background for subtask rows
SUBTASK_ROW_COLOR = {"red": 0.85, "green": 0.92, "blue": 0.95}


class SheetsError(Exception):
    """Raised when a Google Sheets call fails."""


def parse_progress(value) -> int:
    """Parse a progress cell leniently: leading integer or 0."""
    match = re.match(r"\s*(-?\d+)", str(value or ""))
    return int(match.group(1)) if match else 0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def average_progress(values: List[int]) -> int:
    """Rounded mean of subtask progress values, 0 for an empty list."""
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def validate_deadline(deadline: Optional[str]) -> str:
    """
    Normalize an optional deadline.

    Returns:
        The stripped deadline, or "" when none was given

    Raises:
        ValueError: If the deadline is not a YYYY-MM-DD date
    """
    if not deadline or not deadline.strip():
        return ""
    deadline = deadline.strip()
    try:
        datetime.strptime(deadline, DATE_FORMAT)
    except ValueError:
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    return deadline


class GoogleSheetsManager:
    """Manages Google Sheets operations for task tracking."""

    SCOPE = [
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive"
    ]

    TASKS_SHEET = "Tasks"
    DONE_SHEET = "Done_tasks"

    HEADERS = [
        "name",
        "genre",
        "deadline",
        "recurrent",
        "progress",
        "userId",
        "type",
        "parentTask"
    ]

    def __init__(self, spreadsheet_id: str, credentials_path: str = "credentials.json"):
        """
        Initialize the Google Sheets Manager.

        Args:
            spreadsheet_id: The ID of the Google Spreadsheet
            credentials_path: Path to the service account credentials JSON file
        """
        self.spreadsheet_id = spreadsheet_id
        self.credentials_path = credentials_path
        self.client: Optional[gspread.Client] = None
        self.spreadsheet: Optional[gspread.Spreadsheet] = None
        self.worksheet: Optional[gspread.Worksheet] = None
        self.done_worksheet: Optional[gspread.Worksheet] = None

        self._initialize_client()

    def _initialize_client(self):
        """Authorize with the service account and open both worksheets."""
        try:
            if not os.path.exists(self.credentials_path):
                raise FileNotFoundError(
                    f"Credentials file not found: {self.credentials_path}\n"
                    "Please download your service account credentials and save as 'credentials.json'"
                )

            creds = Credentials.from_service_account_file(
                self.credentials_path,
                scopes=self.SCOPE
            )
            self.client = gspread.authorize(creds)
            self.spreadsheet = self.client.open_by_key(self.spreadsheet_id)

            self.worksheet = self._get_or_create_worksheet(self.TASKS_SHEET)
            self.done_worksheet = self._get_or_create_worksheet(self.DONE_SHEET)
            self._ensure_headers(self.worksheet)
            self._ensure_headers(self.done_worksheet)

            logger.info(f"Successfully connected to Google Sheet: {self.spreadsheet.title}")

        except FileNotFoundError as e:
            logger.error(f"Credentials file not found: {e}")
            raise
        except GoogleAuthError as e:
            logger.error(f"Google authentication error: {e}")
            raise
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error: {e}")
            raise

    def _get_or_create_worksheet(self, title: str) -> gspread.Worksheet:
        try:
            return self.spreadsheet.worksheet(title)
        except gspread.exceptions.WorksheetNotFound:
            logger.info(f"Worksheet '{title}' not found, creating it")
            return self.spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(self.HEADERS)
            )

    def _ensure_headers(self, worksheet: gspread.Worksheet):
        """Write the default header row into an empty worksheet."""
        existing_headers = worksheet.row_values(1)
        if not existing_headers:
            worksheet.update(range_name="A1", values=[self.HEADERS])
            logger.info(f"Headers initialized in worksheet '{worksheet.title}'")

    # ------------------------------------------------------------------
    # Row helpers
    # ------------------------------------------------------------------

    def _read_rows(self) -> List[List[str]]:
        """Read the whole task worksheet, header row included."""
        try:
            return self.worksheet.get_all_values()
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error reading tasks: {e}")
            raise SheetsError(f"Failed to read tasks from Google Sheets: {str(e)}") from e

    @staticmethod
    def _columns(header: List[str], *names: str) -> Optional[Dict[str, int]]:
        """
        Map header names to 0-based column indexes.

        Returns None (and logs) when any requested column is missing.
        """
        missing = [name for name in names if name not in header]
        if missing:
            logger.error(f"Required column(s) {', '.join(missing)} not found in spreadsheet header")
            return None
        return {name: header.index(name) for name in names}

    @staticmethod
    def _cell(row: List[str], index: Optional[int]) -> str:
        if index is None or index >= len(row):
            return ""
        return row[index]

    def _row_to_task(self, header: List[str], row: List[str]) -> Dict:
        def value(column: str) -> str:
            return self._cell(row, header.index(column)) if column in header else ""

        return {
            "name": value("name"),
            "genre": value("genre"),
            "deadline": value("deadline"),
            "recurrent": value("recurrent"),
            "progress": parse_progress(value("progress")),
            "user_id": value("userId"),
            "type": value("type"),
            "parent_task": value("parentTask"),
        }

    @staticmethod
    def _build_row(header: List[str], values: Dict[str, object]) -> List:
        """Lay values out in the order of the given header. Unknown columns stay blank."""
        row = [""] * len(header)
        for column, value in values.items():
            if column in header:
                row[header.index(column)] = value
        return row

    def _load(self, *required: str) -> Tuple[List[str], List[List[str]], Optional[Dict[str, int]]]:
        """Read the sheet and resolve the required columns."""
        rows = self._read_rows()
        if not rows:
            return [], [], None
        header = rows[0]
        return header, rows[1:], self._columns(header, *required)

    def _write_cell(self, row_number: int, column_index: int, value):
        cell = rowcol_to_a1(row_number, column_index + 1)
        self.worksheet.update(
            range_name=cell,
            values=[[value]],
            value_input_option="USER_ENTERED"
        )

    def _family_rows(self, task_name: str) -> Tuple[List[str], List[List[str]], List[int]]:
        """
        Collect a main task and all of its subtasks.

        Returns:
            Tuple of (header, row values, 1-based sheet row numbers)
        """
        header, data, cols = self._load("name", "type", "parentTask")
        if cols is None:
            return header, [], []

        values, row_numbers = [], []
        for offset, row in enumerate(data):
            row_type = self._cell(row, cols["type"])
            is_main = self._cell(row, cols["name"]) == task_name and row_type == MAIN
            is_child = self._cell(row, cols["parentTask"]) == task_name and row_type == SUB
            if is_main or is_child:
                values.append(row)
                # +1 for the header row, +1 for 1-based sheet rows
                row_numbers.append(offset + 2)
        return header, values, row_numbers

    def _delete_rows_descending(self, row_numbers: List[int]):
        for row_number in sorted(row_numbers, reverse=True):
            self.worksheet.delete_rows(row_number)
            logger.debug(f"Deleted row {row_number}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_task(
        self,
        name: str,
        genre: str,
        deadline: Optional[str] = None,
        recurrent: Optional[str] = None,
        user_id: str = ""
    ) -> bool:
        """
        Append a new main task with 0% progress.

        Args:
            name: Task name
            genre: Task genre (free text category)
            deadline: Optional deadline in YYYY-MM-DD format
            recurrent: Optional recurrence, "weekly" or "monthly"
            user_id: Discord user ID of the creator

        Returns:
            True if the row was appended, False if the sheet header is unusable

        Raises:
            ValueError: If the deadline or recurrence is invalid
            SheetsError: If the Google Sheets operation fails
        """
        deadline = validate_deadline(deadline)
        if recurrent and recurrent not in RECURRENT_TYPES:
            raise ValueError(f"Recurrent must be one of: {', '.join(RECURRENT_TYPES)}")

        header, _, cols = self._load(*self.HEADERS)
        if cols is None:
            return False

        row = self._build_row(header, {
            "name": name,
            "genre": genre,
            "deadline": deadline,
            "recurrent": recurrent or "",
            "progress": 0,
            "userId": str(user_id),
            "type": MAIN,
        })
        try:
            self.worksheet.append_row(row, value_input_option="USER_ENTERED")
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error adding task: {e}")
            raise SheetsError(f"Failed to add task to Google Sheets: {str(e)}") from e

        logger.info(f"Added task '{name}' (genre: {genre}, deadline: {deadline or 'none'})")
        return True

    def add_subtask(
        self,
        parent_task_name: str,
        subtask_name: str,
        deadline: Optional[str] = None,
        user_id: str = ""
    ) -> Optional[str]:
        """
        Append a subtask under an existing main task and refresh the parent's progress.

        The stored subtask name is prefixed with its parent: "<parent>-<subtask>".

        Returns:
            The full subtask name, or None if the parent task was not found
            or the sheet header is unusable

        Raises:
            ValueError: If the deadline is invalid
            SheetsError: If the Google Sheets operation fails
        """
        deadline = validate_deadline(deadline)
        header, data, cols = self._load(*self.HEADERS)
        if cols is None:
            return None

        parent_exists = any(
            self._cell(row, cols["name"]) == parent_task_name and self._cell(row, cols["type"]) == MAIN
            for row in data
        )
        if not parent_exists:
            logger.warning(f"Parent task '{parent_task_name}' not found")
            return None

        full_name = f"{parent_task_name}-{subtask_name}"
        row = self._build_row(header, {
            "name": full_name,
            "deadline": deadline,
            "progress": 0,
            "userId": str(user_id),
            "type": SUB,
            "parentTask": parent_task_name,
        })
        try:
            self.worksheet.append_row(row, value_input_option="USER_ENTERED")
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error adding subtask: {e}")
            raise SheetsError(f"Failed to add subtask to Google Sheets: {str(e)}") from e

        logger.info(f"Added subtask '{full_name}' to '{parent_task_name}'")
        self.update_main_task_progress(parent_task_name)
        return full_name

    def update_task_progress(self, task_name: str, progress: int) -> bool:
        """
        Set a main task's progress. A task that reaches 100% is archived.

        Returns:
            True if successful, False if the task was not found
        """
        _, data, cols = self._load("name", "progress", "type")
        if cols is None:
            return False

        for offset, row in enumerate(data):
            if self._cell(row, cols["name"]) == task_name and self._cell(row, cols["type"]) == MAIN:
                try:
                    self._write_cell(offset + 2, cols["progress"], progress)
                except gspread.exceptions.APIError as e:
                    logger.error(f"Google Sheets API error updating task: {e}")
                    raise SheetsError(f"Failed to update task in Google Sheets: {str(e)}") from e
                logger.info(f"Task '{task_name}' progress updated to {progress}%")
                if progress >= 100:
                    self.move_task_to_done(task_name)
                return True

        logger.warning(f"Task '{task_name}' not found")
        return False

    def update_subtask_progress(self, subtask_name: str, progress: int) -> bool:
        """
        Set a subtask's progress and roll the change up to its parent.

        Returns:
            True if successful, False if the subtask was not found
        """
        _, data, cols = self._load("name", "progress", "type", "parentTask")
        if cols is None:
            return False

        for offset, row in enumerate(data):
            if self._cell(row, cols["name"]) == subtask_name and self._cell(row, cols["type"]) == SUB:
                parent_task_name = self._cell(row, cols["parentTask"])
                try:
                    self._write_cell(offset + 2, cols["progress"], progress)
                except gspread.exceptions.APIError as e:
                    logger.error(f"Google Sheets API error updating subtask: {e}")
                    raise SheetsError(f"Failed to update subtask in Google Sheets: {str(e)}") from e
                logger.info(f"Subtask '{subtask_name}' progress updated to {progress}%")
                if parent_task_name:
                    self.update_main_task_progress(parent_task_name)
                return True

        logger.warning(f"Subtask '{subtask_name}' not found")
        return False

    def update_main_task_progress(self, main_task_name: str) -> Optional[int]:
        """
        Recompute a main task's progress as the rounded mean of its subtasks.

        The progress cell is only written when the value changes. Reaching 100%
        moves the task and its subtasks to the archive.

        Returns:
            The rolled-up progress, or None if the main task was not found
        """
        _, data, cols = self._load("name", "progress", "type", "parentTask")
        if cols is None:
            return None

        main_offset = None
        subtask_progress = []
        for offset, row in enumerate(data):
            row_type = self._cell(row, cols["type"])
            if main_offset is None and row_type == MAIN and self._cell(row, cols["name"]) == main_task_name:
                main_offset = offset
            elif row_type == SUB and self._cell(row, cols["parentTask"]) == main_task_name:
                subtask_progress.append(parse_progress(self._cell(row, cols["progress"])))

        if main_offset is None:
            logger.warning(f"Main task '{main_task_name}' not found")
            return None

        total_progress = average_progress(subtask_progress)
        current = self._cell(data[main_offset], cols["progress"]).strip()
        if not current.isdigit() or int(current) != total_progress:
            try:
                self._write_cell(main_offset + 2, cols["progress"], total_progress)
            except gspread.exceptions.APIError as e:
                logger.error(f"Google Sheets API error updating main task progress: {e}")
                raise SheetsError(f"Failed to update task in Google Sheets: {str(e)}") from e
            logger.info(f"Main task '{main_task_name}' progress updated to {total_progress}%")
        else:
            logger.debug(f"Main task '{main_task_name}' progress is already {total_progress}%")

        if total_progress >= 100:
            logger.info(f"Main task '{main_task_name}' reached 100%, moving to {self.DONE_SHEET}")
            self.move_task_to_done(main_task_name)

        return total_progress

    def calculate_main_task_progress(
        self,
        main_task_name: str,
        updated_subtask_name: str,
        new_subtask_progress: int
    ) -> Tuple[int, int]:
        """
        Preview a parent's progress before and after a subtask update, without writing.

        Returns:
            Tuple of (old_main_progress, new_main_progress)
        """
        _, data, cols = self._load("name", "progress", "type", "parentTask")
        if cols is None:
            return 0, 0

        main_row = next(
            (row for row in data
             if self._cell(row, cols["name"]) == main_task_name and self._cell(row, cols["type"]) == MAIN),
            None
        )
        if main_row is None:
            return 0, 0

        old_progress = parse_progress(self._cell(main_row, cols["progress"]))
        values = []
        for row in data:
            if self._cell(row, cols["parentTask"]) != main_task_name or self._cell(row, cols["type"]) != SUB:
                continue
            if self._cell(row, cols["name"]) == updated_subtask_name:
                values.append(new_subtask_progress)
            else:
                values.append(parse_progress(self._cell(row, cols["progress"])))

        if not values:
            return old_progress, old_progress
        return old_progress, average_progress(values)

    def move_task_to_done(self, task_name: str) -> bool:
        """
        Archive a main task and its subtasks.

        Rows are appended to the archive worksheet first, laid out by that
        worksheet's own header, then deleted from the task worksheet in
        descending row order.

        Returns:
            True if any rows were moved
        """
        header, rows, row_numbers = self._family_rows(task_name)
        if not rows:
            logger.warning(f"Task '{task_name}' or its subtasks not found for moving")
            return False

        try:
            done_header = self.done_worksheet.row_values(1) or header
            archived = [
                self._build_row(done_header, {column: self._cell(row, index) for index, column in enumerate(header)})
                for row in rows
            ]
            self.done_worksheet.append_rows(archived, value_input_option="USER_ENTERED")
            logger.info(f"Task '{task_name}' and {len(rows) - 1} subtask row(s) copied to {self.DONE_SHEET}")
            self._delete_rows_descending(row_numbers)
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error archiving task: {e}")
            raise SheetsError(f"Failed to archive task in Google Sheets: {str(e)}") from e

        logger.info(f"Task '{task_name}' and its subtasks deleted from {self.TASKS_SHEET}")
        return True

    def delete_task(self, task_name: str) -> bool:
        """Delete a main task and its subtasks without archiving them."""
        _, _, row_numbers = self._family_rows(task_name)
        if not row_numbers:
            logger.warning(f"Task '{task_name}' or its subtasks not found for deletion")
            return False

        try:
            self._delete_rows_descending(row_numbers)
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error deleting task: {e}")
            raise SheetsError(f"Failed to delete task from Google Sheets: {str(e)}") from e

        logger.info(f"Deleted task '{task_name}' ({len(row_numbers)} row(s))")
        return True

    def sort_tasks_by_deadline(self) -> bool:
        """Sort data rows (header excluded) by deadline, ascending."""
        header, data, cols = self._load("deadline")
        if cols is None or len(data) < 2:
            return False

        last_column = rowcol_to_a1(1, len(header)).rstrip("0123456789")
        data_range = f"A2:{last_column}{len(data) + 1}"
        try:
            self.worksheet.sort((cols["deadline"] + 1, "asc"), range=data_range)
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error sorting tasks: {e}")
            raise SheetsError(f"Failed to sort tasks in Google Sheets: {str(e)}") from e

        logger.info("Tasks sorted by deadline")
        return True

    def set_conditional_formatting(self) -> bool:
        """Shade subtask rows light blue. Skipped if the rule already exists."""
        try:
            header = self.worksheet.row_values(1)
            cols = self._columns(header, "type")
            if cols is None:
                return False

            type_column = rowcol_to_a1(1, cols["type"] + 1).rstrip("0123456789")
            formula = f'=${type_column}2="{SUB}"'

            metadata = self.spreadsheet.fetch_sheet_metadata(
                params={"fields": "sheets(properties.sheetId,conditionalFormats)"}
            )
            for sheet in metadata.get("sheets", []):
                if sheet.get("properties", {}).get("sheetId") != self.worksheet.id:
                    continue
                for rule in sheet.get("conditionalFormats", []):
                    values = rule.get("booleanRule", {}).get("condition", {}).get("values", [])
                    if any(v.get("userEnteredValue") == formula for v in values):
                        logger.info("Subtask conditional formatting already present")
                        return True

            # Google Sheets API batch_update, 0-indexed rows, header excluded
            request = {
                "addConditionalFormatRule": {
                    "rule": {
                        "ranges": [{
                            "sheetId": self.worksheet.id,
                            "startRowIndex": 1
                        }],
                        "booleanRule": {
                            "condition": {
                                "type": "CUSTOM_FORMULA",
                                "values": [{"userEnteredValue": formula}]
                            },
                            "format": {"backgroundColor": SUBTASK_ROW_COLOR}
                        }
                    },
                    "index": 0
                }
            }
            self.spreadsheet.batch_update({"requests": [request]})
        except gspread.exceptions.APIError as e:
            logger.error(f"Google Sheets API error applying conditional formatting: {e}")
            raise SheetsError(f"Failed to apply conditional formatting in Google Sheets: {str(e)}") from e

        logger.info("Conditional formatting rules applied")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_task_names(self) -> List[str]:
        _, data, cols = self._load("name")
        if cols is None:
            return []
        return [name for name in (self._cell(row, cols["name"]) for row in data) if name]

    def get_all_main_task_names(self) -> List[str]:
        _, data, cols = self._load("name", "type")
        if cols is None:
            return []
        return [
            self._cell(row, cols["name"]) for row in data
            if self._cell(row, cols["type"]) == MAIN and self._cell(row, cols["name"])
        ]

    def get_all_subtask_names(self, parent_task_name: Optional[str] = None) -> List[str]:
        """Subtask names, optionally limited to one parent task."""
        _, data, cols = self._load("name", "type", "parentTask")
        if cols is None:
            return []
        return [
            self._cell(row, cols["name"]) for row in data
            if self._cell(row, cols["type"]) == SUB
            and (parent_task_name is None or self._cell(row, cols["parentTask"]) == parent_task_name)
            and self._cell(row, cols["name"])
        ]

    def get_all_genres(self) -> List[str]:
        """Distinct non-empty genres, in first-seen order."""
        _, data, cols = self._load("genre")
        if cols is None:
            return []
        genres = [self._cell(row, cols["genre"]) for row in data]
        return list(dict.fromkeys(genre for genre in genres if genre))

    def get_recurrent_tasks(self, recurrent_type: str) -> List[Dict]:
        """Main tasks with the given recurrence ("weekly" or "monthly")."""
        header, data, cols = self._load("recurrent", "type", "name", "userId")
        if cols is None:
            return []
        return [
            self._row_to_task(header, row) for row in data
            if self._cell(row, cols["recurrent"]) == recurrent_type and self._cell(row, cols["type"]) == MAIN
        ]

    def get_all_tasks_with_deadlines(self) -> List[Dict]:
        """Main tasks and subtasks that have a deadline set."""
        header, data, cols = self._load("name", "deadline", "userId", "type")
        if cols is None:
            return []
        return [
            self._row_to_task(header, row) for row in data
            if self._cell(row, cols["deadline"]).strip()
        ]

    def get_tasks_by_genre(self, genre: str) -> List[Dict]:
        """Main tasks in a genre."""
        header, data, cols = self._load("genre", "type")
        if cols is None:
            return []
        return [
            self._row_to_task(header, row) for row in data
            if self._cell(row, cols["genre"]) == genre and self._cell(row, cols["type"]) == MAIN
        ]

    def get_tasks_by_genre_for_notifications(self, genre: str, filter_by_deadline: bool = False) -> List[Dict]:
        """Main tasks in a genre, optionally only those with a deadline."""
        header, data, cols = self._load("name", "genre", "deadline", "userId", "type")
        if cols is None:
            return []

        tasks = []
        for row in data:
            if self._cell(row, cols["genre"]) != genre or self._cell(row, cols["type"]) != MAIN:
                continue
            if filter_by_deadline and not self._cell(row, cols["deadline"]).strip():
                continue
            tasks.append(self._row_to_task(header, row))
        return tasks

    def get_task_by_name(self, task_name: str, task_type: str) -> Optional[Dict]:
        """Find the first task with this exact name and type ("main" or "sub")."""
        header, data, cols = self._load("name", "type")
        if cols is None:
            return None
        for row in data:
            if self._cell(row, cols["name"]) == task_name and self._cell(row, cols["type"]) == task_type:
                return self._row_to_task(header, row)
        return None

    def has_subtasks(self, main_task_name: str) -> bool:
        _, data, cols = self._load("type", "parentTask")
        if cols is None:
            return False
        return any(
            self._cell(row, cols["parentTask"]) == main_task_name and self._cell(row, cols["type"]) == SUB
            for row in data
        )

    def get_parent_task_names(self) -> Set[str]:
        """Names of the main tasks that have at least one subtask, from a single read."""
        _, data, cols = self._load("type", "parentTask")
        if cols is None:
            return set()
        return {
            self._cell(row, cols["parentTask"])
            for row in data
            if self._cell(row, cols["type"]) == SUB and self._cell(row, cols["parentTask"])
        }

    def get_task_details(self, task_name: str) -> Optional[Dict]:
        """
        Get a main task together with its subtasks.

        Returns:
            Task dictionary with a "subtasks" list, or None if not found
        """
        header, data, cols = self._load("name", "type", "parentTask")
        if cols is None:
            return None

        task = None
        subtasks = []
        for row in data:
            row_type = self._cell(row, cols["type"])
            if task is None and row_type == MAIN and self._cell(row, cols["name"]) == task_name:
                task = self._row_to_task(header, row)
            elif row_type == SUB and self._cell(row, cols["parentTask"]) == task_name:
                subtasks.append(self._row_to_task(header, row))

        if task is None:
            return None
        task["subtasks"] = subtasks
        return task
