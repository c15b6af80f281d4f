"""
Maintenance request workflow.

Tech staff raise requests, the HOD of the hall's department approves or
rejects them, and the requester closes approved requests.
"""

from typing import List, Literal, Optional

from sqlalchemy.orm import Session

from hallbook.core.exceptions import ConflictError, ErrorCode
from hallbook.models.department import Profile
from hallbook.models.enums import (
    ComponentStatus,
    EquipmentCondition,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
    NotificationType,
    UserRole,
)
from hallbook.models.maintenance import MaintenanceRequest
from hallbook.repositories.asset_repository import ComponentRepository, EquipmentRepository
from hallbook.repositories.department_repository import ProfileRepository
from hallbook.repositories.hall_repository import HallRepository
from hallbook.repositories.maintenance_repository import MaintenanceRepository
from hallbook.schemas.maintenance import MaintenanceCreate
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import ServiceResult
from hallbook.services.notification.email_notifier import EmailNotifier
from hallbook.services.notification.notification_service import NotificationService
from hallbook.utils.datetime_utils import utcnow

ASSET_REQUIRED_TYPES = frozenset({
    MaintenanceRequestType.REPAIR,
    MaintenanceRequestType.REPLACEMENT,
    MaintenanceRequestType.INSPECTION,
})


class MaintenanceService(BaseService[MaintenanceRepository]):

    def __init__(
        self,
        db_session: Session,
        sink: AuditLogSink,
        notifier: Optional[EmailNotifier] = None,
    ):
        super().__init__(MaintenanceRepository(db_session), db_session)
        self.halls = HallRepository(db_session)
        self.equipment = EquipmentRepository(db_session)
        self.components = ComponentRepository(db_session)
        self.profiles = ProfileRepository(db_session)
        self.notifications = NotificationService(db_session)
        self.sink = sink
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_requests(
        self,
        profile: Profile,
        hall_id: Optional[str] = None,
        status: Optional[MaintenanceRequestStatus] = None,
    ) -> ServiceResult[List[MaintenanceRequest]]:
        """
        Requests visible to the caller.

        A hall filter lists every request of that hall; otherwise HODs see the
        pending requests of their department and tech staff their own.
        """
        try:
            if hall_id:
                items = self.repository.for_hall(hall_id)
            elif profile.has_role(UserRole.HOD) and profile.department_id:
                items = self.repository.pending_for_department(profile.department_id)
            else:
                items = self.repository.for_tech_staff(profile.id, status)
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, "list maintenance requests", profile.id)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_request(self, tech: Profile, data: MaintenanceCreate) -> ServiceResult[MaintenanceRequest]:
        hall = self.halls.find_by_id(data.hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", data.hall_id)

        references_asset = bool(data.equipment_id or data.component_id)
        if data.request_type == MaintenanceRequestType.NEW_INSTALLATION and references_asset:
            return ServiceResult.validation_failure(
                "A new installation cannot reference existing equipment or components",
                field="request_type",
            )
        if data.request_type in ASSET_REQUIRED_TYPES and not references_asset:
            return ServiceResult.validation_failure(
                "Select the equipment or component this request is about",
                field="equipment_id",
            )
        if data.equipment_id:
            equipment = self.equipment.find_by_id(data.equipment_id)
            if equipment is None or equipment.hall_id != hall.id:
                return ServiceResult.not_found("Equipment", data.equipment_id)
        if data.component_id:
            component = self.components.find_by_id(data.component_id)
            if component is None or component.hall_id != hall.id:
                return ServiceResult.not_found("HallComponent", data.component_id)

        try:
            with self.transaction():
                request = self.repository.create(
                    MaintenanceRequest(
                        hall_id=hall.id,
                        tech_staff_id=tech.id,
                        equipment_id=data.equipment_id,
                        component_id=data.component_id,
                        request_type=data.request_type,
                        priority=data.priority,
                        title=data.title,
                        description=data.description,
                        status=MaintenanceRequestStatus.PENDING,
                    )
                )
                hod = self.profiles.find_hod_for_department(hall.department_id)
                if hod is not None:
                    self.notifications.notify(
                        hod.id,
                        "New Maintenance Request",
                        f"{tech.name} reported: {data.title} ({hall.name})",
                        NotificationType.MAINTENANCE_REQUEST_CREATED,
                    )
        except Exception as e:
            return self._handle_exception(e, "create maintenance request", data.hall_id)

        self.sink.log_user_action(
            tech.id, UserRole.TECH_STAFF.value, "maintenance_requested", "maintenance_request", request.id,
            {"hallId": hall.id, "requestType": data.request_type.value, "priority": data.priority.value},
        )
        return ServiceResult.success(request, message="Maintenance request has been logged and sent for approval")

    def approve_request(self, request_id: str, hod: Profile) -> ServiceResult[MaintenanceRequest]:
        request = self.repository.find_by_id(request_id)
        if request is None:
            return ServiceResult.not_found("MaintenanceRequest", request_id)
        if request.hall.department.hod_id != hod.id:
            return ServiceResult.forbidden("Only the HOD of the hall's department can review this request")

        try:
            with self.transaction():
                self._transition(
                    request, MaintenanceRequestStatus.PENDING, MaintenanceRequestStatus.APPROVED,
                    hod_id=hod.id, approved_at=utcnow(),
                )
                self.notifications.notify(
                    request.tech_staff_id,
                    "Maintenance Request Approved",
                    f"Your maintenance request for {request.hall.name} has been approved.",
                    NotificationType.MAINTENANCE_REQUEST_APPROVED,
                )
        except Exception as e:
            return self._handle_exception(e, "approve maintenance request", request_id)

        self.sink.log_user_action(hod.id, UserRole.HOD.value, "maintenance_approved", "maintenance_request", request.id)
        if self.notifier is not None:
            self.notifier.send(
                "maintenance_request_approved",
                request.tech_staff.email,
                {
                    "tech_name": request.tech_staff.name,
                    "hall_name": request.hall.name,
                    "target": self._target_name(request),
                    "priority": request.priority.value,
                    "approved_by": hod.name,
                },
                maintenance_id=request.id,
            )
        return ServiceResult.success(request, message="Maintenance request approved")

    def reject_request(self, request_id: str, hod: Profile, reason: str) -> ServiceResult[MaintenanceRequest]:
        if not reason or not reason.strip():
            return ServiceResult.validation_failure("A rejection reason is required", field="reason")
        request = self.repository.find_by_id(request_id)
        if request is None:
            return ServiceResult.not_found("MaintenanceRequest", request_id)
        if request.hall.department.hod_id != hod.id:
            return ServiceResult.forbidden("Only the HOD of the hall's department can review this request")

        try:
            with self.transaction():
                self._transition(
                    request, MaintenanceRequestStatus.PENDING, MaintenanceRequestStatus.REJECTED,
                    hod_id=hod.id, rejection_reason=reason,
                )
                self.notifications.notify(
                    request.tech_staff_id,
                    "Maintenance Request Rejected",
                    f"Your request for {request.hall.name} was rejected. Reason: {reason}",
                    NotificationType.MAINTENANCE_REQUEST_REJECTED,
                )
        except Exception as e:
            return self._handle_exception(e, "reject maintenance request", request_id)

        self.sink.log_user_action(
            hod.id, UserRole.HOD.value, "maintenance_rejected", "maintenance_request", request.id, {"reason": reason}
        )
        if self.notifier is not None:
            self.notifier.send(
                "maintenance_request_rejected",
                request.tech_staff.email,
                {"tech_name": request.tech_staff.name, "hall_name": request.hall.name, "reason": reason},
                maintenance_id=request.id,
            )
        return ServiceResult.success(request, message="Maintenance request rejected")

    def close_request(
        self,
        request_id: str,
        tech: Profile,
        final_status: Literal["completed", "stopped"],
        notes: Optional[str] = None,
    ) -> ServiceResult[MaintenanceRequest]:
        """
        Close an approved request.

        `completed` returns the referenced asset to service and logs it;
        `stopped` rejects the request with the notes as reason.
        """
        request = self.repository.find_by_id(request_id)
        if request is None:
            return ServiceResult.not_found("MaintenanceRequest", request_id)
        if request.tech_staff_id != tech.id:
            return ServiceResult.forbidden("Only the assigned tech staff can close this request")
        if request.status != MaintenanceRequestStatus.APPROVED:
            return ServiceResult.conflict(
                "Only approved requests can be closed", code=ErrorCode.INVALID_STATE_TRANSITION
            )

        try:
            with self.transaction():
                if final_status == "completed":
                    if request.equipment is not None:
                        self.equipment.change_condition(
                            request.equipment, EquipmentCondition.ACTIVE, tech.id, "completed", notes
                        )
                    if request.component is not None:
                        self.components.change_status(
                            request.component, ComponentStatus.OPERATIONAL, tech.id, "completed", notes
                        )
                    self._transition(
                        request, MaintenanceRequestStatus.APPROVED, MaintenanceRequestStatus.COMPLETED
                    )
                else:
                    self._transition(
                        request, MaintenanceRequestStatus.APPROVED, MaintenanceRequestStatus.REJECTED,
                        rejection_reason=notes,
                    )
        except Exception as e:
            return self._handle_exception(e, "close maintenance request", request_id)

        self.sink.log_user_action(
            tech.id, UserRole.TECH_STAFF.value, f"maintenance_{final_status}", "maintenance_request", request.id,
            {"notes": notes} if notes else None,
        )
        return ServiceResult.success(request, message=f"Maintenance request {final_status}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(
        self,
        request: MaintenanceRequest,
        expected: MaintenanceRequestStatus,
        target: MaintenanceRequestStatus,
        **values,
    ) -> None:
        if not self.repository.transition_status(request.id, expected, target, **values):
            raise ConflictError(
                f"Maintenance request is no longer {expected.value}",
                ErrorCode.INVALID_STATE_TRANSITION,
                {"request_id": request.id, "expected_status": expected.value},
            )

    @staticmethod
    def _target_name(request: MaintenanceRequest) -> str:
        if request.equipment is not None:
            return request.equipment.name
        if request.component is not None:
            return request.component.name
        return "Hall"
