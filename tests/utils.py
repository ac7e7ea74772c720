"""
Test utilities for practice analytics tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

UTC = timezone.utc


def make_appointment(
    scheduled_from: Any,
    status: str = "completed",
    patient_id: Optional[Any] = 1,
    appointment_id: Optional[Any] = None,
    duration_minutes: int = 50,
    cost: Optional[Any] = None,
) -> Dict[str, Any]:
    """Create a raw appointment record as returned by the record store."""
    scheduled_to = None
    if isinstance(scheduled_from, datetime):
        scheduled_to = scheduled_from + timedelta(minutes=duration_minutes)
    return {
        "id": appointment_id,
        "scheduled_from": scheduled_from,
        "scheduled_to": scheduled_to,
        "status": status,
        "patient_id": patient_id,
        "cost": cost,
    }


def make_payment(
    payment_date: Any,
    amount: Any = 1000,
    status: str = "paid",
    patient_id: Optional[Any] = 1,
    payment_id: Optional[Any] = None,
) -> Dict[str, Any]:
    """Create a raw payment record."""
    return {
        "id": payment_id,
        "amount": amount,
        "status": status,
        "payment_date": payment_date,
        "patient_id": patient_id,
    }


def make_patient(
    created_at: Any,
    patient_id: Any = 1,
    status: str = "active",
    name: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a raw patient record."""
    return {
        "id": patient_id,
        "name": name,
        "created_at": created_at,
        "status": status,
    }
