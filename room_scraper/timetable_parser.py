from bs4 import BeautifulSoup, Tag
from enum import Enum
from typing import Optional
import logging

from room_scraper.models import WEEKDAYS, Timetable

DAY_LABEL_SELECTOR = "td[colspan='11'] > strong > font > i"

# 1-based cell positions in a grid row
TIME_COLUMN = 1
SUBJECT_COLUMN = 5


class GridState(Enum):
    """Where the row scanner is in the grid.

    AWAITING_DAY: no day marker seen yet, slot rows here are malformed
    IN_DAY: rows belong to the day at the current day index
    """

    AWAITING_DAY = "awaiting_day"
    IN_DAY = "in_day"


class RowKind(Enum):
    DAY_MARKER = "day_marker"
    SUBJECT = "subject"
    FREE = "free"


# ======================================================
# Helper Functions
# ======================================================


def safe_extract_text(element: Optional[Tag], selector: Optional[str] = None) -> str:
    """Extract stripped text from an element, or "" when there is nothing to extract.

    Args:
        element (Optional[Tag]): BeautifulSoup Tag element to extract text from
        selector (Optional[str]): Optional CSS selector to narrow to a descendant first

    Returns:
        str: Stripped text content, empty if the element or selector match is missing
    """
    if not element or not isinstance(element, Tag):
        return ""

    if selector:
        found = element.select_one(selector)
        if not found:
            return ""
        element = found

    return element.get_text(strip=True)


def nth_cell_text(row: Tag, position: int) -> str:
    """Text of the row's `position`-th (1-based) td, "" if the row is shorter."""
    cells = row.find_all("td", recursive=False)
    if len(cells) < position:
        return ""
    return safe_extract_text(cells[position - 1])


def aligned_bold_text(row: Optional[Tag], align: str) -> str:
    """Text of the bold content in the row's cell with the given `align` attribute."""
    if not isinstance(row, Tag):
        return ""
    for cell in row.find_all("td", recursive=False):
        if str(cell.get("align", "")).lower() == align.lower():
            return safe_extract_text(cell, "b")
    return ""


def split_token(text: str, index: int) -> Optional[str]:
    """Return the `index`-th space separated token of `text`, None if absent."""
    tokens = text.split(" ")
    if index >= len(tokens):
        return None
    return tokens[index]


def classify_row(row: Tag) -> RowKind:
    """Decide whether a grid row announces a day, holds a subject, or is free."""
    day_name = safe_extract_text(row, DAY_LABEL_SELECTOR)
    if day_name in WEEKDAYS:
        return RowKind.DAY_MARKER

    if nth_cell_text(row, SUBJECT_COLUMN) != "":
        return RowKind.SUBJECT

    return RowKind.FREE


# ====================================================================
# Header and Grid Parsing
# ====================================================================


def parse_header(header_table: Optional[Tag]) -> tuple[dict[str, str], bool]:
    """Read date, room and week from the header table.

    Date sits in row 1's right-aligned cell ("Date: 19/10/2024" style), room in
    row 3's centred cell and week in row 3's right-aligned cell, each taken as a
    fixed token of the space split text.

    Args:
        header_table (Optional[Tag]): The first table of the timetable container

    Returns:
        tuple[dict[str, str], bool]: The fields that parsed, and whether any failed
    """
    rows = header_table.find_all("tr") if isinstance(header_table, Tag) else []
    first_row = rows[0] if len(rows) > 0 else None
    third_row = rows[2] if len(rows) > 2 else None

    fields = {}
    has_error = False

    for field, row, align, index in (
        ("date", first_row, "Right", 1),
        ("room", third_row, "Center", 2),
        ("week", third_row, "Right", 2),
    ):
        text = aligned_bold_text(row, align)
        if text == "":
            logging.error(f"Header {field} is empty")
            has_error = True
            continue

        token = split_token(text, index)
        if token is None:
            logging.error(f"Header {field} '{text}' has no token at index {index}")
            has_error = True
            continue

        fields[field] = token

    return fields, has_error


def scan_grid_rows(rows: list[Tag]) -> tuple[dict[str, tuple[str, ...]], bool, bool]:
    """Walk the grid rows, tracking the current day, and collect the free times.

    Rows before the first day marker have no day to belong to; they flag an error
    and contribute nothing. Markers are not checked for order, so a repeated
    "Monday" simply advances to the next day.

    Args:
        rows (list[Tag]): Grid rows in document order, header row excluded

    Returns:
        tuple[dict[str, tuple[str, ...]], bool, bool]: free slots per day,
            is_empty, has_error
    """
    state = GridState.AWAITING_DAY
    day_index = -1
    free_slots: dict[str, list[str]] = {}
    is_empty = True
    has_error = False

    for i, row in enumerate(rows):
        kind = classify_row(row)

        if kind is RowKind.DAY_MARKER:
            day_index += 1
            state = GridState.IN_DAY
            logging.debug(f"Row {i}: day marker, moving to day index {day_index}")
            continue

        if kind is RowKind.SUBJECT:
            logging.debug(f"Row {i}: subject '{nth_cell_text(row, SUBJECT_COLUMN)}'")
            is_empty = False

        if state is GridState.AWAITING_DAY:
            logging.error(f"Row {i}: {kind.value} row found before any day marker")
            has_error = True
            continue

        if kind is RowKind.SUBJECT:
            continue

        if day_index >= len(WEEKDAYS):
            logging.error(f"Row {i}: day index {day_index} is past the last weekday")
            has_error = True
            continue

        day = WEEKDAYS[day_index]
        free_slots.setdefault(day, []).append(nth_cell_text(row, TIME_COLUMN))

    return (
        {day: tuple(times) for day, times in free_slots.items()},
        is_empty,
        has_error,
    )


# ===========================================================================
# High Level Parsing
# ===========================================================================


def find_timetable_tables(soup: BeautifulSoup) -> tuple[Optional[Tag], Optional[Tag]]:
    """Locate the header and grid tables inside div#divTT."""
    container = soup.find("div", id="divTT")
    if not isinstance(container, Tag):
        return None, None

    tables = container.find_all("table", recursive=False) or container.find_all("table")
    header_table = tables[0] if len(tables) > 0 else None
    grid_table = tables[1] if len(tables) > 1 else None
    return header_table, grid_table


def parse_timetable(html: str, room: str = "") -> Timetable:
    """Parse one rendered room timetable page into a Timetable.

    Never raises on malformed markup: structural problems are recorded in
    `has_error` and whatever could be read is still returned.

    Args:
        html (str): The page returned for one room request
        room (str): The requested room, used when the header does not name one

    Returns:
        Timetable: The parsed record
    """
    soup = BeautifulSoup(html or "", "html.parser")
    header_table, grid_table = find_timetable_tables(soup)

    if header_table is None:
        logging.error(f"Timetable container not found for room '{room}'")
        return Timetable(room=room, has_error=True)

    logging.debug("Found table container")
    header_fields, header_error = parse_header(header_table)

    if grid_table is None:
        logging.error(f"Timetable grid not found for room '{room}'")
        free_slots, is_empty, grid_error = {}, True, True
    else:
        logging.info("Found timetable, parsing...")
        rows = grid_table.find_all("tr")[1:]  # skip headers
        free_slots, is_empty, grid_error = scan_grid_rows(rows)

    return Timetable(
        room=header_fields.get("room", room),
        date=header_fields.get("date", ""),
        week=header_fields.get("week", ""),
        has_error=header_error or grid_error,
        is_empty=is_empty,
        free_slots=free_slots,
    )
