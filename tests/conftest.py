import pytest


def day_row(day: str) -> str:
    return f'<tr><td colspan="11"><strong><font color="#0000FF"><i>{day}</i></font></strong></td></tr>'


def free_row(time: str) -> str:
    return f"<tr><td>{time}</td><td></td><td></td><td></td><td></td><td></td></tr>"


def subject_row(time: str, subject: str) -> str:
    return (
        f"<tr><td>{time}</td><td>1hr</td><td>Lecture</td><td>BSc1</td>"
        f"<td>{subject}</td><td>Dr. Smith</td></tr>"
    )


def render_rows(rows: list[tuple]) -> str:
    rendered = []
    for row in rows:
        kind = row[0]
        if kind == "day":
            rendered.append(day_row(row[1]))
        elif kind == "free":
            rendered.append(free_row(row[1]))
        elif kind == "subject":
            rendered.append(subject_row(row[1], row[2]))
    return "\n".join(rendered)


def build_room_page(
    rows: list[tuple],
    date: str = "Date: 19/10/2024",
    room: str = "Room Timetable: IT101",
    week: str = "Week No: 34",
    with_grid: bool = True,
) -> str:
    grid = ""
    if with_grid:
        grid = f"""
        <table border="1">
          <tr><td>Time</td><td>Length</td><td>Type</td><td>Group</td><td>Subject</td><td>Lecturer</td></tr>
          {render_rows(rows)}
        </table>"""

    return f"""
    <html><body>
      <form name="Form1" method="post" action="RoomTT.aspx">
        <div id="divTT">
          <table width="100%">
            <tr><td align="Left"><b>Waterford Institute of Technology</b></td><td align="Right"><b>{date}</b></td></tr>
            <tr><td colspan="2">&#160;</td></tr>
            <tr><td align="Left"><b>Semester 1</b></td><td align="Center"><b>{room}</b></td><td align="Right"><b>{week}</b></td></tr>
          </table>
          {grid}
        </div>
      </form>
    </body></html>
    """


def build_landing_page(
    week_options: str = '<option value="33">Week 33</option><option selected="selected" value="34">Week 34</option>',
    rooms: tuple = ("FTG01", "IT101", "IT102", "IT201", "ITG18"),
    tokens: tuple = ("__VIEWSTATE", "__VIEWSTATEGENERATOR", "__EVENTVALIDATION"),
    with_room_select: bool = True,
) -> str:
    token_values = {
        "__VIEWSTATE": "dDwtMTA4NzE2NjM4Ozs+",
        "__VIEWSTATEGENERATOR": "7C1D7E2F",
        "__EVENTVALIDATION": "/wEWBgKq4YLvCQ",
    }
    hidden_inputs = "\n".join(
        f'<input type="hidden" name="{name}" id="{name}" value="{token_values[name]}" />'
        for name in tokens
    )
    room_select = ""
    if with_room_select:
        options = "".join(f'<option value="{room}">{room}</option>' for room in rooms)
        room_select = f'<select name="CboLocation" id="CboLocation">{options}</select>'

    return f"""
    <html><body>
      <form name="Form1" method="post" action="RoomTT.aspx">
        {hidden_inputs}
        <input type="hidden" name="__EVENTTARGET" id="__EVENTTARGET" value="" />
        <select name="cboSchool"><option selected="selected" value="%">All</option></select>
        <select name="CboWeeks" id="CboWeeks">{week_options}</select>
        {room_select}
        <input type="submit" name="BtnRetrieve" value="Generate Timetable" />
      </form>
    </body></html>
    """


@pytest.fixture
def make_room_page():
    return build_room_page


@pytest.fixture
def make_landing_page():
    return build_landing_page


@pytest.fixture
def monday_page():
    return build_room_page(
        [
            ("day", "Monday"),
            ("free", "09:15"),
            ("subject", "10:15", "Maths"),
            ("free", "11:15"),
        ]
    )
