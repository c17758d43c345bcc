"""
iCal Service
Imports external calendar feeds (Airbnb, VRBO, ...) as blocked intervals and
exports a property's own calendar for those platforms to subscribe to.

Every VEVENT is read as an all-day range with an exclusive end.
"""

from collections import namedtuple
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

import requests
from flask import current_app
from icalendar import Calendar, Event
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from staybook.errors import PersistenceError, SyncError, ValidationError
from staybook.models.blocked_date import BlockedDate, BlockedDateSource
from staybook.models.reservation import Reservation, ReservationStatus


ICalEvent = namedtuple('ICalEvent', ['uid', 'summary', 'start', 'end'])


def to_start_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def to_end_date(value) -> date:
    """Exclusive end date; a partial last day is blocked entirely"""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date()
        return value.date() + timedelta(days=1)
    return value


def _check_structure(content):
    """Reject truncated or unbalanced feeds before handing them to the parser"""
    text = content.decode('utf-8', errors='replace') if isinstance(content, bytes) else (content or '')
    lines = [line.strip().upper() for line in text.lstrip('\ufeff').splitlines() if line.strip()]

    if not lines or lines[0] != 'BEGIN:VCALENDAR':
        raise SyncError('Malformed calendar feed: missing BEGIN:VCALENDAR')
    if lines[-1] != 'END:VCALENDAR':
        raise SyncError('Malformed calendar feed: missing END:VCALENDAR')
    if lines.count('BEGIN:VEVENT') != lines.count('END:VEVENT'):
        raise SyncError('Malformed calendar feed: unclosed VEVENT')


def parse_events(content) -> List[ICalEvent]:
    """
    Parse every VEVENT of a feed into an all-day [start, end) event.

    Raises:
        SyncError: the feed is truncated, unparseable, or has an event whose
            DTSTART/DTEND cannot be read
    """
    _check_structure(content)

    try:
        calendar = Calendar.from_ical(content)
    except ValueError as e:
        raise SyncError(f'Malformed calendar feed: {str(e)}')

    events = []
    for component in calendar.walk('VEVENT'):
        uid = str(component.get('UID', '')) or None

        bad_dates = [name for name, _ in component.errors if name in ('DTSTART', 'DTEND')]
        if bad_dates or component.get('DTSTART') is None:
            raise SyncError(f'Malformed calendar feed: unreadable dates in event {uid or "without UID"}')

        try:
            start = component.decoded('DTSTART')
            end = component.decoded('DTEND') if component.get('DTEND') is not None else None
        except (ValueError, TypeError):
            raise SyncError(f'Malformed calendar feed: unreadable dates in event {uid or "without UID"}')
        if not isinstance(start, date) or (end is not None and not isinstance(end, date)):
            raise SyncError(f'Malformed calendar feed: unreadable dates in event {uid or "without UID"}')

        event = _build_event(uid, str(component.get('SUMMARY', '')) or None, start, end)
        if event is not None:
            events.append(event)

    return events


def _build_event(uid, summary, start, end) -> Optional[ICalEvent]:
    if end is None:
        # All-day event without DTEND lasts one day
        if isinstance(start, datetime):
            return None
        end = start + timedelta(days=1)

    # Floating, UTC and TZID forms all keep their wall-clock date
    start_date, end_date = to_start_date(start), to_end_date(end)
    if end_date <= start_date:
        return None
    return ICalEvent(uid, summary, start_date, end_date)


class ICalService:
    """Calendar import/export"""

    @staticmethod
    def fetch_feed(url, timeout=None):
        """Download a feed; any network or HTTP failure becomes SyncError"""
        timeout = timeout or current_app.config['ICAL_FETCH_TIMEOUT']
        try:
            response = requests.get(url, timeout=timeout, headers={'Accept': 'text/calendar'})
            response.raise_for_status()
        except requests.Timeout:
            raise SyncError(f'Calendar feed did not respond within {timeout:g}s')
        except requests.RequestException as e:
            raise SyncError(f'Failed to fetch calendar feed: {str(e)}')
        return response.content

    @staticmethod
    def sync_property(property):
        """
        Replace the imported blocked intervals of a property with the
        current content of its external feed.

        Manual blocks are untouched. On failure the previously imported
        intervals stay in place.

        Returns:
            int number of imported intervals
        """
        if not property.ical_url:
            raise ValidationError('No iCal URL configured for this property', field='ical_url')

        try:
            events = parse_events(ICalService.fetch_feed(property.ical_url))
        except SyncError as e:
            current_app.logger.error(f'iCal sync failed for property {property.slug}: {e.message}')
            property.ical_last_sync_error = e.message
            db.session.commit()
            raise

        try:
            BlockedDate.query.filter_by(
                property_id=property.id,
                source=BlockedDateSource.ICAL_IMPORT
            ).delete(synchronize_session=False)

            for event in events:
                db.session.add(BlockedDate(
                    property_id=property.id,
                    start_date=event.start,
                    end_date=event.end,
                    source=BlockedDateSource.ICAL_IMPORT,
                    reason=(event.summary or 'External calendar')[:255],
                    external_uid=event.uid,
                ))

            property.ical_last_synced_at = datetime.utcnow()
            property.ical_last_sync_error = None
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'iCal sync could not be saved for property {property.slug}: {str(e)}')
            raise PersistenceError('Failed to save imported calendar')

        current_app.logger.info(f'iCal sync imported {len(events)} intervals for property {property.slug}')
        return len(events)

    @staticmethod
    def export_calendar(property):
        """
        Serialize every blocked interval and active reservation of a
        property as a VCALENDAR document (bytes).

        Output only depends on stored data, so repeated calls are identical.
        """
        config = current_app.config
        domain = config['ICAL_UID_DOMAIN']
        entries = []

        for blocked in property.blocked_dates.all():
            summary = 'Blocked'
            if blocked.reason:
                summary = f'Blocked - {blocked.reason}'
            description = ('Imported from external calendar'
                           if blocked.source == BlockedDateSource.ICAL_IMPORT else 'Manual block')
            entries.append((blocked.start_date, blocked.end_date, f'blocked-{blocked.id}@{domain}',
                            blocked.created_at, summary, description))

        reservations = property.reservations.filter(
            Reservation.status != ReservationStatus.CANCELLED
        ).all()
        for reservation in reservations:
            entries.append((reservation.check_in, reservation.check_out,
                            f'reservation-{reservation.id}@{domain}', reservation.created_at,
                            'Reserved', f'Reservation {reservation.confirmation_code}'))

        calendar = Calendar()
        calendar.add('prodid', config['ICAL_PRODID'])
        calendar.add('version', '2.0')
        calendar.add('calscale', 'GREGORIAN')
        calendar.add('method', 'PUBLISH')
        calendar.add('x-wr-calname', property.display_name())

        for start, end, uid, stamp, summary, description in sorted(entries, key=lambda e: (e[0], e[1], e[2])):
            event = Event()
            event.add('uid', uid)
            event.add('dtstamp', (stamp or datetime(1970, 1, 1)).replace(microsecond=0, tzinfo=timezone.utc))
            event.add('dtstart', start)
            event.add('dtend', end)
            event.add('summary', summary)
            event.add('description', description)
            event.add('status', 'CONFIRMED')
            event.add('transp', 'OPAQUE')
            calendar.add_component(event)

        return calendar.to_ical()
