"""
Record extractor for analytics calculations.

Extracts typed AppointmentItem / PaymentItem / PatientItem dicts from the raw
records supplied by the record stores, handling edge cases and malformed data
gracefully.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional
from datetime import tzinfo
from decimal import Decimal, InvalidOperation
import logging

from practice_analytics.services.analytics_types import (
    AppointmentItem,
    PatientId,
    PatientItem,
    PaymentItem,
)
from practice_analytics.utils.datetime_utils import parse_timestamp

logger = logging.getLogger(__name__)

_MISSING = object()


def read_field(record: Any, *names: str) -> Any:
    """
    Read the first present field from a mapping or attribute-bearing object.

    Accepts several spellings so both snake_case rows and camelCase API payloads
    can be fed to the engine unchanged.
    """
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name, _MISSING)
        else:
            value = getattr(record, name, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return None


def normalize_patient_id(value: Any) -> Optional[PatientId]:
    """
    Canonical string form of a patient id.

    Payloads may carry the same patient as 1, 1.0 or "1"; all map to "1".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def person_name(record: Any) -> Optional[str]:
    """Display name from a full-name field or first/last name parts."""
    name = read_field(record, "name", "full_name", "fullName")
    if name is None:
        parts = [read_field(record, "first_name", "firstName"), read_field(record, "last_name", "lastName")]
        name = " ".join(str(part).strip() for part in parts if part is not None)
    name = str(name).strip()
    return name or None


def _patient_ref(record: Any) -> Optional[PatientId]:
    """Patient id from a flat patient_id field or a nested patient object."""
    patient_id = read_field(record, "patient_id", "patientId")
    if patient_id is not None:
        return normalize_patient_id(patient_id)
    patient = read_field(record, "patient")
    if patient is not None:
        return normalize_patient_id(read_field(patient, "id"))
    return None


def _patient_name_ref(record: Any) -> Optional[str]:
    """Patient name carried on a session, flat or through the nested patient object."""
    name = read_field(record, "patient_name", "patientName")
    if name is not None:
        return str(name).strip() or None
    patient = read_field(record, "patient")
    if patient is not None:
        return person_name(patient)
    return None


def _status(record: Any) -> str:
    status = read_field(record, "status")
    if status is None:
        return ""
    # Enum members expose the wire value through .value
    status = getattr(status, "value", status)
    return str(status).strip().lower()


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


class RecordExtractor:
    """
    Extracts analytics items from raw records.

    Handles:
    - Missing or unparseable relevant dates (record is dropped, never counted)
    - snake_case and camelCase field names, nested patient objects
    - Malformed or negative payment amounts (coerced to 0)
    - Input collections are read, never mutated
    """

    @staticmethod
    def extract_appointments(
        records: Optional[Iterable[Any]],
        tz: Optional[tzinfo] = None
    ) -> List[AppointmentItem]:
        """
        Extract appointments keyed on their scheduled start.

        Returns:
            List of AppointmentItem objects, in input order
        """
        items: List[AppointmentItem] = []
        dropped = 0

        for record in records or ():
            scheduled_from = parse_timestamp(read_field(record, "scheduled_from", "scheduledFrom"), tz)
            if scheduled_from is None:
                dropped += 1
                logger.debug(f"Dropping appointment {read_field(record, 'id')}: missing or invalid scheduled_from")
                continue

            scheduled_to = parse_timestamp(read_field(record, "scheduled_to", "scheduledTo"), tz)
            if scheduled_to is not None and scheduled_to <= scheduled_from:
                logger.debug(f"Appointment {read_field(record, 'id')} ends before it starts; ignoring scheduled_to")
                scheduled_to = None

            items.append(AppointmentItem(
                id=read_field(record, "id"),
                patient_id=_patient_ref(record),
                patient_name=_patient_name_ref(record),
                status=_status(record),
                scheduled_from=scheduled_from,
                scheduled_to=scheduled_to,
                cost=_decimal(read_field(record, "cost")),
            ))

        if dropped:
            logger.debug(f"Dropped {dropped} appointments with unusable dates")
        return items

    @staticmethod
    def extract_payments(
        records: Optional[Iterable[Any]],
        tz: Optional[tzinfo] = None
    ) -> List[PaymentItem]:
        """Extract payments keyed on their payment date."""
        items: List[PaymentItem] = []
        dropped = 0

        for record in records or ():
            payment_date = parse_timestamp(read_field(record, "payment_date", "paymentDate"), tz)
            if payment_date is None:
                dropped += 1
                logger.debug(f"Dropping payment {read_field(record, 'id')}: missing or invalid payment_date")
                continue

            raw_amount = read_field(record, "amount")
            amount = _decimal(raw_amount)
            if amount is None or amount < 0:
                logger.warning(f"Invalid amount in payment {read_field(record, 'id')}: {raw_amount!r}, counting as 0")
                amount = Decimal("0")

            items.append(PaymentItem(
                id=read_field(record, "id"),
                patient_id=_patient_ref(record),
                status=_status(record),
                amount=amount,
                payment_date=payment_date,
            ))

        if dropped:
            logger.debug(f"Dropped {dropped} payments with unusable dates")
        return items

    @staticmethod
    def extract_patients(
        records: Optional[Iterable[Any]],
        tz: Optional[tzinfo] = None
    ) -> List[PatientItem]:
        """Extract patients keyed on their creation date."""
        items: List[PatientItem] = []

        for record in records or ():
            created_at = parse_timestamp(read_field(record, "created_at", "createdAt"), tz)
            if created_at is None:
                logger.debug(f"Dropping patient {read_field(record, 'id')}: missing or invalid created_at")
                continue

            items.append(PatientItem(
                id=normalize_patient_id(read_field(record, "id")),
                name=person_name(record),
                status=_status(record),
                created_at=created_at,
            ))

        return items

    @staticmethod
    def patient_names(records: Optional[Iterable[Any]]) -> Dict[PatientId, str]:
        """
        Map patient id to display name over the whole roster.

        Unlike extract_patients, records without a usable created_at still
        contribute their name.
        """
        names: Dict[PatientId, str] = {}
        for record in records or ():
            patient_id = normalize_patient_id(read_field(record, "id"))
            name = person_name(record)
            if patient_id is not None and name is not None:
                names[patient_id] = name
        return names
