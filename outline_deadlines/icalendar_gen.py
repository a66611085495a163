"""
iCalendar generation module.

Generates standards-compliant .ics files from reconciled deadlines so they
can be imported into any calendar application.
"""

import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

from icalendar import Alarm, Calendar, Event
from pytz import timezone

from .models import ReconciledDeadline, deserialize_time

# Reminders before every deadline; timed deadlines also get one an hour before
REMINDERS = (timedelta(days=3), timedelta(days=1))
TIMED_REMINDER = timedelta(hours=1)


class ICalendarGenerator:
    """Generates iCalendar (.ics) files from deadlines."""

    def __init__(self, timezone_str: str = "Australia/Perth"):
        """Initialize calendar generator.

        Args:
            timezone_str: Timezone string (default: Australia/Perth)
        """
        self.tz = timezone(timezone_str)

    def generate_calendar(self, deadlines: Iterable[ReconciledDeadline]) -> Calendar:
        """Generate a calendar with one event per dated deadline.

        TBA deadlines have no date and are left out.

        Args:
            deadlines: Reconciled deadlines

        Returns:
            Calendar object ready for export
        """
        cal = Calendar()
        cal.add('prodid', '-//Unit Outline Deadlines//EN')
        cal.add('version', '2.0')
        cal.add('calscale', 'GREGORIAN')
        cal.add('method', 'PUBLISH')

        for deadline in deadlines:
            if deadline.is_tba or deadline.date is None:
                continue
            cal.add_component(self._create_deadline_event(deadline))

        return cal

    def _create_deadline_event(self, deadline: ReconciledDeadline) -> Event:
        """Create event for a deadline.

        Deadlines with an exact time become one-hour events starting at the
        due time; the rest become all-day events.
        """
        event = Event()
        event.add('uid', f"{uuid.uuid4()}@outline-deadlines")
        event.add('dtstamp', datetime.now(self.tz))
        event.add('summary', f"{deadline.unit} - {deadline.title}")

        timed = deadline.exact_time is not None
        if timed:
            dtstart = self.tz.localize(datetime.combine(deadline.date, deserialize_time(deadline.exact_time)))
            event.add('dtstart', dtstart)
            event.add('dtend', dtstart + timedelta(hours=1))
        else:
            event.add('dtstart', deadline.date)
            event.add('dtend', deadline.date + timedelta(days=1))

        event.add('description', self._describe(deadline))
        event.add('categories', ['Assessment'])

        reminders = REMINDERS + ((TIMED_REMINDER,) if timed else ())
        for before in reminders:
            event.add_component(self._create_alarm(deadline, before))

        return event

    def _describe(self, deadline: ReconciledDeadline) -> str:
        lines = []
        if deadline.unit_name:
            lines.append(f"{deadline.unit} {deadline.unit_name}")
        if deadline.weight is not None:
            lines.append(f"Weight: {deadline.weight}%")
        if deadline.week_label:
            lines.append(deadline.week_label)
        if deadline.outcomes:
            lines.append(f"Learning outcomes: {deadline.outcomes}")
        return "\n".join(lines)

    def _create_alarm(self, deadline: ReconciledDeadline, before: timedelta) -> Alarm:
        alarm = Alarm()
        alarm.add('action', 'DISPLAY')
        alarm.add('description', f"{deadline.unit} {deadline.title} due")
        alarm.add('trigger', -before)
        return alarm

    def export_to_file(self, calendar: Calendar, filepath: Path):
        """Export calendar to .ics file.

        Args:
            calendar: Calendar object
            filepath: Output file path
        """
        with open(filepath, 'wb') as f:
            f.write(calendar.to_ical())
