"""
Status classifier for vendor and restaurant applications.

Turns a raw entity record into the normalized view the approval queue works
with. Records carry two overlapping status representations: the legacy
``approval_status`` field and the newer ``verification`` mapping. Both are
resolved here, once, into a single tagged value; nothing downstream looks at
the raw fields again.

Pure functions only: identical (record, now) input always yields the same
output and malformed timestamps degrade to "missing" instead of raising.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Any, Mapping, Optional, Union

from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date

from apps.verification.constants import (
    DisplayState,
    Urgency,
    VerificationStatus,
)

URGENT_AFTER_DAYS = 7
HIGH_AFTER_DAYS = 3

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class VerificationRecord:
    """Authoritative verification sub-object."""
    status: str
    is_verified: bool = False
    verified_at: Optional[datetime] = None
    status_updated_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None


@dataclass(frozen=True)
class LegacyRecord:
    """Historical tri-state status, used only when no verification exists."""
    status: str


ResolvedStatus = Union[VerificationRecord, LegacyRecord]


@dataclass(frozen=True)
class Classification:
    lifecycle_state: str
    display_state: str
    urgency: str
    days_waiting: int
    is_resolved: bool

    def to_dict(self):
        return {
            'lifecycle_state': self.lifecycle_state,
            'display_state': self.display_state,
            'urgency': self.urgency,
            'days_waiting': self.days_waiting,
            'is_resolved': self.is_resolved,
        }


@dataclass(frozen=True)
class BusinessApplication:
    """
    Classified view of one vendor or restaurant record.

    Built fresh on every fetch; it never outlives the page it came from.
    """
    id: str
    kind: str
    name: str
    created_at: Optional[datetime]
    status: ResolvedStatus
    classification: Classification
    record: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def key(self):
        return (self.kind, self.id)

    @property
    def is_resolved(self):
        return self.classification.is_resolved

    @property
    def display_state(self):
        return self.classification.display_state

    def to_dict(self):
        data = {
            'id': self.id,
            'kind': self.kind,
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'has_verification': isinstance(self.status, VerificationRecord),
        }
        data.update(self.classification.to_dict())
        if isinstance(self.status, VerificationRecord):
            data['verification'] = {
                'status': self.status.status,
                'is_verified': self.status.is_verified,
                'verified_at': _isoformat(self.status.verified_at),
                'status_updated_at': _isoformat(self.status.status_updated_at),
                'last_reviewed_at': _isoformat(self.status.last_reviewed_at),
                'admin_notes': self.status.admin_notes,
            }
        else:
            data['legacy_status'] = self.status.status
        for extra in ('email', 'phone', 'owner_name', 'owner_email'):
            if extra in self.record:
                data[extra] = self.record[extra]
        return data


def _isoformat(value):
    return value.isoformat() if value else None


def parse_timestamp(value) -> Optional[datetime]:
    """
    Coerce a timestamp-ish value to an aware datetime.

    Accepts datetimes, dates and ISO-8601 strings. Anything else, including
    strings that do not parse, is treated as missing.
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            parsed = parse_datetime(value.strip())
            if parsed is None:
                day = parse_date(value.strip())
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            return None
        if parsed is None:
            return None
    else:
        return None

    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed


def days_waiting(created_at, now: datetime) -> int:
    """Whole days elapsed since submission; 0 when missing or in the future."""
    created = parse_timestamp(created_at)
    current = parse_timestamp(now)
    if created is None or current is None:
        return 0
    elapsed = (current - created).total_seconds()
    if elapsed <= 0:
        return 0
    return int(elapsed // SECONDS_PER_DAY)


def urgency_for(days: int) -> str:
    if days > URGENT_AFTER_DAYS:
        return Urgency.URGENT
    if days > HIGH_AFTER_DAYS:
        return Urgency.HIGH
    return Urgency.NORMAL


def _normalize_status(value) -> str:
    value = str(value or '').strip().lower()
    if value in VerificationStatus.values:
        return value
    return VerificationStatus.PENDING


def resolve_status(record: Mapping[str, Any]) -> ResolvedStatus:
    """
    Pick the authoritative status representation for a record.

    The verification mapping wins whenever it is present; the legacy field is
    only consulted for records that predate it.
    """
    verification = record.get('verification')
    if isinstance(verification, Mapping):
        return VerificationRecord(
            status=_normalize_status(verification.get('status')),
            is_verified=bool(verification.get('is_verified')),
            verified_at=parse_timestamp(verification.get('verified_at')),
            status_updated_at=parse_timestamp(verification.get('status_updated_at')),
            last_reviewed_at=parse_timestamp(verification.get('last_reviewed_at')),
            admin_notes=verification.get('admin_notes'),
        )
    return LegacyRecord(status=_normalize_status(record.get('approval_status')))


def display_state_for(status: ResolvedStatus) -> str:
    if isinstance(status, VerificationRecord):
        if status.is_verified:
            return DisplayState.VERIFIED
        if status.status_updated_at is not None:
            return DisplayState.UNVERIFIED
        return DisplayState.PENDING_REVIEW

    # Legacy-only records: historical approvals still display as resolved
    if status.status == VerificationStatus.APPROVED:
        return DisplayState.VERIFIED
    if status.status == VerificationStatus.REJECTED:
        return DisplayState.UNVERIFIED
    return DisplayState.PENDING_REVIEW


def classify(record: Mapping[str, Any], now: Optional[datetime] = None) -> Classification:
    """Classify one raw vendor/restaurant record."""
    if now is None:
        now = timezone.now()

    status = resolve_status(record)
    display_state = display_state_for(status)
    waiting = days_waiting(record.get('created_at'), now)

    return Classification(
        lifecycle_state=status.status,
        display_state=display_state,
        urgency=urgency_for(waiting),
        days_waiting=waiting,
        is_resolved=display_state != DisplayState.PENDING_REVIEW,
    )


def build_application(record: Mapping[str, Any], kind: Optional[str] = None,
                      now: Optional[datetime] = None) -> BusinessApplication:
    """Wrap a raw record into a classified BusinessApplication."""
    kind = kind or record.get('kind')
    return BusinessApplication(
        id=str(record.get('id')),
        kind=str(kind),
        name=record.get('name') or '',
        created_at=parse_timestamp(record.get('created_at')),
        status=resolve_status(record),
        classification=classify(record, now=now),
        record=dict(record),
    )
