import logging

from room_scraper.models import WEEKDAYS, AggregateSummary, FreeRoomTable, Timetable


def add_free_room(table: FreeRoomTable, day: str, time: str, room: str) -> None:
    """Append `room` to the day/time bucket, creating the bucket if needed."""
    table.setdefault(day, {}).setdefault(time, []).append(room)


def aggregate_timetables(
    timetables: list[Timetable],
) -> tuple[FreeRoomTable, AggregateSummary]:
    """Fold per-room timetables into one table of free rooms per day and time.

    Rooms keep the order of `timetables` inside every bucket. Records flagged with
    `has_error` are folded like any other; callers should check the error count
    before trusting the output.

    Args:
        timetables (list[Timetable]): Parsed timetables in dispatch order

    Returns:
        tuple[FreeRoomTable, AggregateSummary]: The folded table and run counters
    """
    free_room_table: FreeRoomTable = {}
    error_count = 0
    empty_count = 0
    free_slot_count = 0

    for timetable in timetables:
        if timetable.has_error:
            error_count += 1

        if timetable.is_empty:
            logging.debug(f"Found empty timetable for room: {timetable.room}")
            empty_count += 1

        for day in WEEKDAYS:
            for time in timetable.free_times(day):
                free_slot_count += 1
                add_free_room(free_room_table, day, time, timetable.room)

    summary = AggregateSummary(
        timetable_count=len(timetables),
        error_count=error_count,
        empty_count=empty_count,
        free_slot_count=free_slot_count,
    )
    return free_room_table, summary


def merge_free_room_tables(first: FreeRoomTable, second: FreeRoomTable) -> FreeRoomTable:
    """Combine two tables, `first`'s rooms ahead of `second`'s in each bucket.

    Aggregating two consecutive timetable lists separately and merging the results
    gives the same table as aggregating their concatenation.
    """
    merged: FreeRoomTable = {}
    for table in (first, second):
        for day, times in table.items():
            for time, rooms in times.items():
                for room in rooms:
                    add_free_room(merged, day, time, room)
    return merged


def merge_summaries(first: AggregateSummary, second: AggregateSummary) -> AggregateSummary:
    return AggregateSummary(
        timetable_count=first.timetable_count + second.timetable_count,
        error_count=first.error_count + second.error_count,
        empty_count=first.empty_count + second.empty_count,
        free_slot_count=first.free_slot_count + second.free_slot_count,
    )
