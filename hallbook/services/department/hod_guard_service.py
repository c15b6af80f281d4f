"""
Head-of-department assignment guard.

`check_department_hod` is an advisory pre-check for forms. The assignment
itself is a single compare-and-set write, so of several concurrent attempts
for one department at most one succeeds.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy.orm import Session

from hallbook.core.exceptions import ConflictError, ErrorCode
from hallbook.models.enums import UserRole
from hallbook.repositories.department_repository import DepartmentRepository, ProfileRepository
from hallbook.services.audit.audit_log_sink import SYSTEM_ACTOR, AuditLogSink
from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import ServiceResult

HOD_ALREADY_ASSIGNED_MESSAGE = "This department already has a HOD"


@dataclass
class HodCheck:
    ok: bool
    message: Optional[str] = None

    def to_dict(self):
        return asdict(self)


class HodGuardService(BaseService[DepartmentRepository]):

    def __init__(self, db_session: Session, sink: Optional[AuditLogSink] = None):
        super().__init__(DepartmentRepository(db_session), db_session)
        self.profiles = ProfileRepository(db_session)
        self.sink = sink

    def check_department_hod(self, department_name: str) -> HodCheck:
        """ok=False when the department already has a HOD; unknown departments are ok."""
        if self.repository.current_hod_id(department_name):
            return HodCheck(ok=False, message=HOD_ALREADY_ASSIGNED_MESSAGE)
        return HodCheck(ok=True)

    def assign_hod(self, department_id: str, profile_id: str, actor_id: Optional[str] = None) -> ServiceResult[HodCheck]:
        """
        Make `profile_id` the HOD of the department if it has none.

        A department that already has a HOD yields a conflict result carrying
        `HodCheck(ok=False, ...)` in its details.
        """
        if self.repository.find_by_id(department_id) is None:
            return ServiceResult.not_found("Department", department_id)
        if self.profiles.find_by_id(profile_id) is None:
            return ServiceResult.not_found("Profile", profile_id)

        try:
            with self.transaction():
                assigned = self.repository.assign_hod_if_vacant(department_id, profile_id)
                if assigned:
                    self.profiles.grant_role(profile_id, UserRole.HOD)
        except ConflictError:
            # hod_id is unique: the profile already heads another department
            return ServiceResult.conflict(
                "This profile is already HOD of another department",
                details={"ok": False, "department_id": department_id},
                code=ErrorCode.HOD_ALREADY_ASSIGNED,
            )
        except Exception as e:
            return self._handle_exception(e, "assign HOD", department_id)

        if not assigned:
            self._logger.info(f"HOD assignment refused for department {department_id}: already assigned")
            return ServiceResult.conflict(
                HOD_ALREADY_ASSIGNED_MESSAGE,
                details={"ok": False, "department_id": department_id},
                code=ErrorCode.HOD_ALREADY_ASSIGNED,
            )

        if self.sink is not None:
            self.sink.log_user_action(
                actor_id or SYSTEM_ACTOR, self._actor_role(actor_id, profile_id),
                "hod_assigned", "department", department_id, {"profileId": profile_id},
            )
        return ServiceResult.success(HodCheck(ok=True), message="HOD assigned")

    def _actor_role(self, actor_id: Optional[str], profile_id: str) -> str:
        if actor_id is None:
            return SYSTEM_ACTOR
        if actor_id == profile_id:
            return UserRole.HOD.value
        roles = sorted(role.value for role in self.profiles.roles_for(actor_id))
        return roles[0] if roles else "none"
