"""Maintenance request workflow."""

import pytest
from sqlalchemy import select

from hallbook.core.exceptions import ErrorCode
from hallbook.models.enums import (
    ComponentStatus,
    ComponentType,
    EquipmentCondition,
    EquipmentType,
    MaintenancePriority,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
)
from hallbook.models.hall import ComponentMaintenanceLog, Equipment, EquipmentLog, HallComponent
from hallbook.models.maintenance import MaintenanceRequest
from hallbook.schemas.maintenance import MaintenanceCreate
from hallbook.services.maintenance.maintenance_service import MaintenanceService


@pytest.fixture
def service(db, sink, notifier):
    return MaintenanceService(db, sink, notifier)


@pytest.fixture
def projector(db, hall):
    item = Equipment(hall_id=hall.id, name="Epson EB-X51", type=EquipmentType.PROJECTOR,
                     condition=EquipmentCondition.FAULTY)
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def screen(db, hall):
    item = HallComponent(hall_id=hall.id, name="Main screen", type=ComponentType.SCREEN,
                         status=ComponentStatus.FAULTY)
    db.add(item)
    db.commit()
    return item


def _create(hall, request_type, **extra):
    return MaintenanceCreate(
        hall_id=hall.id,
        request_type=request_type,
        priority=extra.pop("priority", MaintenancePriority.HIGH),
        title=extra.pop("title", "Projector flickers"),
        **extra,
    )


def _status(db, request_id):
    db.expire_all()
    return db.get(MaintenanceRequest, request_id).status


def test_repair_requires_an_asset(service, tech_staff, hall):
    result = service.create_request(tech_staff, _create(hall, MaintenanceRequestType.REPAIR))
    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.field == "equipment_id"


def test_new_installation_cannot_reference_an_asset(service, tech_staff, hall, projector):
    result = service.create_request(
        tech_staff, _create(hall, MaintenanceRequestType.NEW_INSTALLATION, equipment_id=projector.id)
    )
    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_asset_must_belong_to_the_hall(service, db, tech_staff, hall, second_hall):
    elsewhere = Equipment(hall_id=second_hall.id, name="Shure SM58", type=EquipmentType.MICROPHONE)
    db.add(elsewhere)
    db.commit()

    result = service.create_request(
        tech_staff, _create(hall, MaintenanceRequestType.REPAIR, equipment_id=elsewhere.id)
    )
    assert result.error.code == ErrorCode.RESOURCE_NOT_FOUND


def test_general_issue_needs_no_asset(service, db, tech_staff, hall, hod, log_db):
    result = service.create_request(tech_staff, _create(hall, MaintenanceRequestType.GENERAL_ISSUE))

    assert result.is_success
    assert result.message == "Maintenance request has been logged and sent for approval"
    assert _status(db, result.data.id) == MaintenanceRequestStatus.PENDING
    assert log_db["logs_user_actions"].find_one({"action": "maintenance_requested"})["meta"]["priority"] == "high"


def test_approve_then_complete_restores_equipment(service, db, email_sender, tech_staff, hod, hall, projector):
    request = service.create_request(
        tech_staff, _create(hall, MaintenanceRequestType.REPAIR, equipment_id=projector.id)
    ).unwrap()

    assert service.approve_request(request.id, hod).is_success
    assert email_sender.messages[-1].subject == "Maintenance request approved"
    assert "Epson EB-X51" in email_sender.messages[-1].body_html

    result = service.close_request(request.id, tech_staff, "completed", "Replaced lamp")

    assert result.is_success
    assert _status(db, request.id) == MaintenanceRequestStatus.COMPLETED
    assert db.get(Equipment, projector.id).condition == EquipmentCondition.ACTIVE
    log = db.execute(select(EquipmentLog).where(EquipmentLog.equipment_id == projector.id)).scalar_one()
    assert (log.condition_before, log.condition_after, log.notes) == (
        EquipmentCondition.FAULTY, EquipmentCondition.ACTIVE, "Replaced lamp",
    )


def test_complete_restores_component(service, db, tech_staff, hod, hall, screen):
    request = service.create_request(
        tech_staff, _create(hall, MaintenanceRequestType.INSPECTION, component_id=screen.id)
    ).unwrap()
    service.approve_request(request.id, hod).unwrap()

    service.close_request(request.id, tech_staff, "completed").unwrap()

    db.expire_all()
    component = db.get(HallComponent, screen.id)
    assert component.status == ComponentStatus.OPERATIONAL
    assert component.last_maintenance is not None
    assert db.execute(select(ComponentMaintenanceLog)).scalar_one().action == "completed"


def test_stopped_request_is_rejected_with_notes(service, db, tech_staff, hod, hall, projector):
    request = service.create_request(
        tech_staff, _create(hall, MaintenanceRequestType.REPAIR, equipment_id=projector.id)
    ).unwrap()
    service.approve_request(request.id, hod).unwrap()

    service.close_request(request.id, tech_staff, "stopped", "Vendor unavailable").unwrap()

    db.expire_all()
    stored = db.get(MaintenanceRequest, request.id)
    assert stored.status == MaintenanceRequestStatus.REJECTED
    assert stored.rejection_reason == "Vendor unavailable"
    assert db.get(Equipment, projector.id).condition == EquipmentCondition.FAULTY


def test_only_approved_requests_close(service, tech_staff, hall):
    request = service.create_request(tech_staff, _create(hall, MaintenanceRequestType.GENERAL_ISSUE)).unwrap()

    result = service.close_request(request.id, tech_staff, "completed")

    assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION


def test_reject_pending_request(service, db, email_sender, tech_staff, hod, hall):
    request = service.create_request(tech_staff, _create(hall, MaintenanceRequestType.GENERAL_ISSUE)).unwrap()

    assert service.reject_request(request.id, hod, "").error.code == ErrorCode.VALIDATION_ERROR
    assert service.reject_request(request.id, hod, "Out of budget").is_success
    assert _status(db, request.id) == MaintenanceRequestStatus.REJECTED
    assert service.approve_request(request.id, hod).error.code == ErrorCode.INVALID_STATE_TRANSITION
    assert "Out of budget" in email_sender.messages[-1].body_html


def test_maintenance_endpoints(client, tech_staff, hod, teacher, hall):
    payload = {"hall_id": hall.id, "request_type": "general_issue", "title": "Door lock jammed"}

    assert client.post("/api/v1/maintenance", json=payload, headers={"X-Profile-Id": teacher.id}).status_code == 403

    response = client.post("/api/v1/maintenance", json=payload, headers={"X-Profile-Id": tech_staff.id})
    assert response.status_code == 201
    request_id = response.json()["id"]
    assert response.json()["priority"] == "medium"

    response = client.post(f"/api/v1/maintenance/{request_id}/approve", headers={"X-Profile-Id": hod.id})
    assert response.json()["status"] == "approved"

    response = client.post(
        f"/api/v1/maintenance/{request_id}/close",
        json={"final_status": "done"},
        headers={"X-Profile-Id": tech_staff.id},
    )
    assert response.status_code == 422

    response = client.post(
        f"/api/v1/maintenance/{request_id}/close",
        json={"final_status": "completed"},
        headers={"X-Profile-Id": tech_staff.id},
    )
    assert response.json()["status"] == "completed"
