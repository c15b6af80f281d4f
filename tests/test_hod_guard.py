"""HOD check and single-HOD assignment."""

import pytest

from hallbook.core.exceptions import ConflictError, ErrorCode
from hallbook.models.department import Department
from hallbook.models.enums import UserRole
from hallbook.repositories.department_repository import ProfileRepository
from hallbook.services.department.hod_guard_service import (
    HOD_ALREADY_ASSIGNED_MESSAGE,
    HodGuardService,
)


@pytest.fixture
def physics(db):
    dept = Department(name="Physics")
    db.add(dept)
    db.commit()
    return dept


@pytest.fixture
def candidates(new_profile, physics):
    first = new_profile("Prof. A", "a@college.edu", [UserRole.TEACHER], physics)
    second = new_profile("Prof. B", "b@college.edu", [UserRole.TEACHER], physics)
    return first, second


def test_check_reports_existing_hod(db, hod, department):
    check = HodGuardService(db).check_department_hod("Computer Science")
    assert check.ok is False
    assert check.message == HOD_ALREADY_ASSIGNED_MESSAGE


def test_check_is_ok_for_vacant_or_unknown_department(db, physics):
    service = HodGuardService(db)
    assert service.check_department_hod("Physics").ok is True
    assert service.check_department_hod("No Such Department").to_dict() == {"ok": True, "message": None}


def test_assign_sets_hod_and_grants_role(db, sink, log_db, physics, candidates):
    first, _ = candidates
    result = HodGuardService(db, sink).assign_hod(physics.id, first.id)

    assert result.is_success
    assert result.data.ok is True
    db.expire_all()
    assert db.get(Department, physics.id).hod_id == first.id
    assert UserRole.HOD in ProfileRepository(db).roles_for(first.id)
    entry = log_db["logs_user_actions"].find_one({"action": "hod_assigned"})
    assert (entry["actorId"], entry["role"]) == ("system", "system")


def test_audit_records_the_actual_actor_role(db, sink, log_db, physics, candidates, teacher):
    first, _ = candidates
    assert HodGuardService(db, sink).assign_hod(physics.id, first.id, actor_id=teacher.id).is_success

    entry = log_db["logs_user_actions"].find_one({"action": "hod_assigned"})
    assert (entry["actorId"], entry["role"]) == (teacher.id, "teacher")
    assert entry["meta"] == {"profileId": first.id}


def test_second_assignment_is_refused(db, physics, candidates):
    first, second = candidates
    service = HodGuardService(db)
    assert service.assign_hod(physics.id, first.id).is_success

    result = service.assign_hod(physics.id, second.id)

    assert not result.is_success
    assert result.error.code == ErrorCode.HOD_ALREADY_ASSIGNED
    assert result.error.details["ok"] is False
    assert result.message == HOD_ALREADY_ASSIGNED_MESSAGE
    db.expire_all()
    assert db.get(Department, physics.id).hod_id == first.id
    assert UserRole.HOD not in ProfileRepository(db).roles_for(second.id)


def test_stale_reader_cannot_overwrite(session_factory, physics, candidates):
    """Both callers saw a vacant department; only the first write lands."""
    first, second = candidates
    session_a, session_b = session_factory(), session_factory()
    try:
        # session B has already observed the vacancy
        assert session_b.get(Department, physics.id).hod_id is None

        assert HodGuardService(session_a).assign_hod(physics.id, first.id).is_success
        result = HodGuardService(session_b).assign_hod(physics.id, second.id)

        assert not result.is_success
        session_b.expire_all()
        assert session_b.get(Department, physics.id).hod_id == first.id
    finally:
        session_a.close()
        session_b.close()


def test_profile_cannot_head_two_departments(db, hod, physics):
    result = HodGuardService(db).assign_hod(physics.id, hod.id)

    assert not result.is_success
    assert result.error.code == ErrorCode.HOD_ALREADY_ASSIGNED
    with pytest.raises(ConflictError):
        result.unwrap()


def test_unknown_department_or_profile(db, department, teacher):
    service = HodGuardService(db)
    assert service.assign_hod("missing", teacher.id).error.code == ErrorCode.RESOURCE_NOT_FOUND
    assert service.assign_hod(department.id, "missing").error.code == ErrorCode.RESOURCE_NOT_FOUND


def test_hod_endpoints(client, log_db, physics, candidates, hod):
    first, second = candidates

    response = client.get("/api/v1/departments/Physics/hod-check")
    assert response.json() == {"ok": True, "message": None}

    response = client.post(
        f"/api/v1/departments/{physics.id}/hod", json={"profile_id": first.id}, headers={"X-Profile-Id": hod.id}
    )
    assert response.status_code == 403

    response = client.post(f"/api/v1/departments/{physics.id}/hod", json={"profile_id": first.id}, headers={"X-Profile-Id": first.id})
    assert response.status_code == 200
    assert log_db["logs_user_actions"].find_one({"action": "hod_assigned"})["role"] == "hod"
    assert response.json()["ok"] is True

    response = client.post(f"/api/v1/departments/{physics.id}/hod", json={"profile_id": second.id}, headers={"X-Profile-Id": second.id})
    assert response.status_code == 409
    assert response.json()["error"]["details"]["ok"] is False

    response = client.get("/api/v1/departments/Physics/hod-check")
    assert response.json()["ok"] is False
