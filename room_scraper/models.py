from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

ROOM_TIMETABLE_URL = "http://studentssp.wit.ie/Timetables/RoomTT.aspx"

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

TIME_SLOTS = [
    "09:15",
    "10:15",
    "11:15",
    "12:15",
    "13:15",
    "14:15",
    "15:15",
    "16:15",
    "17:15",
]

HIDDEN_TOKEN_FIELDS = ["__VIEWSTATE", "__VIEWSTATEGENERATOR", "__EVENTVALIDATION"]

# Fixed part of the room form, in the order the site renders it.
# CboStartTime/CboEndTime are the site defaults and might change in the future.
FORM_DEFAULTS = {
    "__EVENTTARGET": "",
    "__EVENTARGUMENT": "",
    "__LASTFOCUS": "",
    "hProgram": "",
    "hStudentcount": "",
    "cboSchool": "%",
    "CboDept": "%",
    "CboStartTime": "1",
    "CboEndTime": "9",
    "BtnRetrieve": "Generate Timetable",
}

# day -> time -> rooms, e.g. {"Monday": {"09:15": ["IT101", "IT102"]}}
FreeRoomTable = dict[str, dict[str, list[str]]]


@dataclass(frozen=True)
class SessionState:
    """Form state captured from the landing page, replayed on every room request.

    Args:
        hidden_fields (dict[str, str]): View-state tokens found on the page. Tokens
                                        the page did not render are simply absent.
        week (str): Week code to submit in CboWeeks (offset already applied)
    """

    hidden_fields: dict[str, str] = field(default_factory=dict)
    week: str = ""

    def form_for_room(self, room: str) -> dict[str, str]:
        """Build the urlencoded form body for one room, leaving the state untouched.

        Args:
            room (str): Room identifier to place in CboLocation

        Returns:
            dict[str, str]: Complete form payload for the POST request
        """
        form = dict(FORM_DEFAULTS)
        for name in HIDDEN_TOKEN_FIELDS:
            if name in self.hidden_fields:
                form[name] = self.hidden_fields[name]
        form["CboWeeks"] = self.week
        form["CboLocation"] = room
        return form


@dataclass(frozen=True)
class Timetable:
    """One parsed room timetable.

    `is_empty` is a sanity signal (no subject anywhere in the grid), not an error.
    `has_error` records may still carry partial free slot data.
    `free_slots` is stored as a read-only mapping of tuples.
    """

    room: str = ""
    date: str = ""
    week: str = ""
    has_error: bool = False
    is_empty: bool = True
    free_slots: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        frozen_slots = {day: tuple(times) for day, times in self.free_slots.items()}
        object.__setattr__(self, "free_slots", MappingProxyType(frozen_slots))

    def free_times(self, day: str) -> tuple[str, ...]:
        return self.free_slots.get(day, ())

    def to_dict(self) -> dict:
        return {
            "room": self.room,
            "date": self.date,
            "week": self.week,
            "has_error": self.has_error,
            "is_empty": self.is_empty,
            "free_slots": {day: list(times) for day, times in self.free_slots.items()},
        }


@dataclass(frozen=True)
class AggregateSummary:
    timetable_count: int = 0
    error_count: int = 0
    empty_count: int = 0
    free_slot_count: int = 0


@dataclass(frozen=True)
class ScrapeResult:
    """Everything a finished run produced."""

    free_room_table: FreeRoomTable
    summary: AggregateSummary
    timetables: list[Timetable] = field(default_factory=list)
    week: Optional[str] = None
