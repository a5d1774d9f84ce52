"""JSON and ASCII renderings of the free room table."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from room_scraper.models import TIME_SLOTS, WEEKDAYS, FreeRoomTable


def get_timestamp(now: Optional[datetime] = None) -> str:
    """UTC RFC 3339 timestamp that is safe to use in a file name."""
    now = now or datetime.now(timezone.utc)
    ts = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return ts.replace(":", "_").replace("-", "_")


def free_room_table_to_json(table: FreeRoomTable, indent: Optional[int] = None) -> str:
    """Serialize with days and times in sorted key order; room lists keep their order."""
    return json.dumps(table, indent=indent, sort_keys=True)


def build_ascii_rows(table: FreeRoomTable) -> list[list[str]]:
    """Lay the table out as one row per fixed time slot and one column per weekday.

    Times outside TIME_SLOTS have no row and are skipped.
    """
    rows = [[time] + [""] * len(WEEKDAYS) for time in TIME_SLOTS]

    for day_idx, day in enumerate(WEEKDAYS):
        for free_time, rooms in table.get(day, {}).items():
            if free_time not in TIME_SLOTS:
                logging.debug(f"Skipping time '{free_time}' on {day}, not a known slot")
                continue

            row = rows[TIME_SLOTS.index(free_time)]
            joined = ", ".join(rooms)
            row[1 + day_idx] = joined if row[1 + day_idx] == "" else f"{row[1 + day_idx]}, {joined}"

    return rows


def render_ascii_table(table: FreeRoomTable) -> str:
    """Render the table as a boxed grid with a rule between every row.

    Columns: time | Monday | Tuesday | Wednesday | Thursday | Friday
    """
    headers = [""] + WEEKDAYS
    rows = build_ascii_rows(table)

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def format_row(cells: list[str]) -> str:
        return "|" + "|".join(f" {cell.ljust(widths[i])} " for i, cell in enumerate(cells)) + "|"

    lines = [separator, format_row([h.upper() for h in headers]), separator]
    for row in rows:
        lines.append(format_row(row))
        lines.append(separator)

    return "\n".join(lines)


def write_outputs(table: FreeRoomTable, output_dir: str = ".", timestamp: Optional[str] = None) -> str:
    """Log, print and save the JSON and ASCII renderings of `table`.

    The ASCII file is best effort: if it cannot be written the grid still goes to stdout.

    Args:
        table (FreeRoomTable): The aggregated table
        output_dir (str): Directory for the timestamped output files
        timestamp (Optional[str]): File name prefix, defaults to the current time

    Returns:
        str: The rendered ASCII table
    """
    timestamp = timestamp or get_timestamp()

    logging.info(f"JSON freeRoomTable: {free_room_table_to_json(table)}")

    indented_json = free_room_table_to_json(table, indent=2)
    print(indented_json)

    json_path = os.path.join(output_dir, f"{timestamp}_freeRoomTable.json")
    try:
        with open(json_path, "w") as f:
            f.write(indented_json)
        logging.info(f"Wrote JSON freeRoomTable to {json_path}")
    except OSError as e:
        logging.error(f"Failed to write JSON freeRoomTable to {json_path}: {e}")

    logging.info("Rendering ASCII table to stdout")
    ascii_table = render_ascii_table(table)
    print(ascii_table)

    ascii_path = os.path.join(output_dir, f"{timestamp}_ascii.txt")
    try:
        with open(ascii_path, "a") as f:
            f.write(ascii_table + "\n")
    except OSError as e:
        logging.error(f"Failed to create ASCII table file {ascii_path}, just using stdout: {e}")

    return ascii_table
