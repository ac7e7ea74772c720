"""
Test configuration and shared fixtures for the practice analytics test suite.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from tests.utils import UTC, make_appointment, make_patient, make_payment


@pytest.fixture
def client():
    """HTTP client for the FastAPI application."""
    from practice_analytics.main import app
    return TestClient(app)


@pytest.fixture
def reference_date() -> datetime:
    """Mid-March 2024, a leap year, used as the dashboard "now"."""
    return datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def march_records():
    """
    A small practice history around March 2024.

    March: 5 appointments (3 completed, 1 confirmed, 1 cancelled), 2 paid and
    1 overdue payment, 2 new patients. February: 2 appointments, 1 paid payment.
    """
    return {
        "appointments": [
            make_appointment(datetime(2024, 3, 4, 9, 0, tzinfo=UTC), "completed", patient_id=1),
            make_appointment(datetime(2024, 3, 6, 10, 0, tzinfo=UTC), "completed", patient_id=2),
            make_appointment(datetime(2024, 3, 15, 10, 0, tzinfo=UTC), "completed", patient_id=1),
            make_appointment(datetime(2024, 3, 20, 16, 0, tzinfo=UTC), "confirmed", patient_id=3),
            make_appointment(datetime(2024, 3, 28, 18, 0, tzinfo=UTC), "cancelled", patient_id=2),
            make_appointment(datetime(2024, 2, 12, 9, 0, tzinfo=UTC), "completed", patient_id=1),
            make_appointment(datetime(2024, 2, 19, 9, 0, tzinfo=UTC), "cancelled", patient_id=1),
        ],
        "payments": [
            make_payment(datetime(2024, 3, 4, 10, 0, tzinfo=UTC), 8000, "paid", patient_id=1),
            make_payment(datetime(2024, 3, 15, 11, 0, tzinfo=UTC), 8000, "paid", patient_id=1),
            make_payment(datetime(2024, 3, 6, 11, 0, tzinfo=UTC), 4000, "overdue", patient_id=2),
            make_payment(datetime(2024, 2, 12, 10, 0, tzinfo=UTC), 8000, "paid", patient_id=1),
        ],
        "patients": [
            make_patient(datetime(2024, 1, 10, tzinfo=UTC), patient_id=1),
            make_patient(datetime(2024, 3, 1, tzinfo=UTC), patient_id=2),
            make_patient(datetime(2024, 3, 18, tzinfo=UTC), patient_id=3),
        ],
    }
