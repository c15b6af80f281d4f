"""External cron triggers for the lifecycle jobs."""

from datetime import timedelta

import pytest

from hallbook.models.booking import Booking
from hallbook.models.enums import BookingStatus


@pytest.fixture
def auth(settings):
    return {"Authorization": f"Bearer {settings.CRON_SECRET}"}


def test_missing_or_wrong_secret_is_unauthorized(client):
    assert client.post("/api/v1/cron/auto-reject").status_code == 401
    response = client.post("/api/v1/cron/auto-reject", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Unauthorized"
    assert client.post("/api/v1/cron/auto-complete", headers={"Authorization": "test-cron-secret"}).status_code == 401


def test_auto_reject_trigger(client, auth, db, make_booking, now):
    stale = make_booking(now - timedelta(hours=1))

    response = client.post("/api/v1/cron/auto-reject", headers=auth)

    assert response.status_code == 200
    assert response.json() == {"success": True, "rejected": 1}
    db.expire_all()
    assert db.get(Booking, stale.id).status == BookingStatus.AUTO_REJECTED

    assert client.post("/api/v1/cron/auto-reject", headers=auth).json() == {"success": True, "rejected": 0}


def test_auto_complete_trigger(client, auth, make_booking, now):
    make_booking(now - timedelta(hours=5), status=BookingStatus.APPROVED)

    response = client.post("/api/v1/cron/auto-complete", headers=auth)

    assert response.json() == {"success": True, "completed": 1}


def test_unconfigured_secret_refuses_everyone(client, app, auth):
    app.state.settings = app.state.settings.model_copy(update={"CRON_SECRET": None})
    assert client.post("/api/v1/cron/auto-reject", headers=auth).status_code == 401
