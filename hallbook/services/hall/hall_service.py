"""
Hall management: hall CRUD, status, tech staff assignment, and the hall's
equipment and components.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from hallbook.core.exceptions import ConflictError
from hallbook.models.department import Department, Profile
from hallbook.models.enums import UserRole
from hallbook.models.hall import Equipment, HallComponent, SeminarHall
from hallbook.repositories.asset_repository import ComponentRepository, EquipmentRepository
from hallbook.repositories.department_repository import DepartmentRepository, ProfileRepository
from hallbook.repositories.hall_repository import HallRepository
from hallbook.schemas.hall import (
    ComponentCreate,
    ComponentStatusUpdate,
    EquipmentConditionUpdate,
    EquipmentCreate,
    HallCreate,
    HallStatusUpdate,
    HallUpdate,
)
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import ServiceResult


class HallService(BaseService[HallRepository]):
    """
    Hall administration is reserved to the HOD of the owning department;
    asset condition updates are also open to the hall's tech staff.
    """

    def __init__(self, db_session: Session, sink: AuditLogSink):
        super().__init__(HallRepository(db_session), db_session)
        self.departments = DepartmentRepository(db_session)
        self.profiles = ProfileRepository(db_session)
        self.equipment = EquipmentRepository(db_session)
        self.components = ComponentRepository(db_session)
        self.sink = sink

    # ------------------------------------------------------------------
    # Halls
    # ------------------------------------------------------------------

    def list_halls(
        self,
        department_id: Optional[str] = None,
        tech_staff_id: Optional[str] = None,
    ) -> ServiceResult[List[SeminarHall]]:
        try:
            if tech_staff_id:
                halls = self.repository.list_for_tech_staff(tech_staff_id)
            elif department_id:
                halls = self.repository.list_for_department(department_id)
            else:
                halls = self.repository.list_ordered()
            return ServiceResult.success(halls, metadata={"count": len(halls)})
        except Exception as e:
            return self._handle_exception(e, "list halls")

    def get_hall(self, hall_id: str) -> ServiceResult[SeminarHall]:
        hall = self.repository.find_detail(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        return ServiceResult.success(hall)

    def create_hall(self, actor: Profile, data: HallCreate) -> ServiceResult[SeminarHall]:
        department = self.departments.find_by_id(data.department_id)
        if department is None:
            return ServiceResult.not_found("Department", data.department_id)
        if department.hod_id != actor.id:
            return ServiceResult.forbidden("Only the department's HOD can add halls")
        try:
            with self.transaction():
                hall = self.repository.create(SeminarHall(**data.model_dump()))
        except Exception as e:
            return self._handle_exception(e, "create hall", data.name)

        self._audit(actor, "hall_created", "seminar_hall", hall.id, {"name": hall.name})
        return ServiceResult.success(hall, message="Hall created")

    def update_hall(self, actor: Profile, hall_id: str, data: HallUpdate) -> ServiceResult[SeminarHall]:
        hall = self.repository.find_by_id(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        if not self._is_hod_of(actor, hall.department):
            return ServiceResult.forbidden("Only the department's HOD can edit this hall")
        changes = data.model_dump(exclude_unset=True)
        try:
            with self.transaction():
                hall = self.repository.update(hall_id, changes)
        except Exception as e:
            return self._handle_exception(e, "update hall", hall_id)

        self._audit(actor, "hall_updated", "seminar_hall", hall.id, {"fields": sorted(changes)})
        return ServiceResult.success(hall, message="Hall updated")

    def update_status(self, actor: Profile, hall_id: str, data: HallStatusUpdate) -> ServiceResult[SeminarHall]:
        hall = self.repository.find_by_id(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        if not (self._is_hod_of(actor, hall.department) or self.repository.is_tech_staff_of(hall_id, actor.id)):
            return ServiceResult.forbidden("Not allowed to change this hall's status")
        previous = hall.status
        try:
            with self.transaction():
                hall = self.repository.update_status(hall_id, data.status)
        except Exception as e:
            return self._handle_exception(e, "update hall status", hall_id)

        self._audit(
            actor, "hall_status_updated", "seminar_hall", hall.id,
            {"from": previous.value, "to": data.status.value},
        )
        return ServiceResult.success(hall, message="Hall status updated")

    def delete_hall(self, actor: Profile, hall_id: str) -> ServiceResult[bool]:
        hall = self.repository.find_by_id(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        if not self._is_hod_of(actor, hall.department):
            return ServiceResult.forbidden("Only the department's HOD can delete this hall")
        if hall.bookings:
            return ServiceResult.conflict("Halls with bookings cannot be deleted")
        try:
            with self.transaction():
                self.repository.delete(hall_id)
        except Exception as e:
            return self._handle_exception(e, "delete hall", hall_id)

        self._audit(actor, "hall_deleted", "seminar_hall", hall_id, {"name": hall.name})
        return ServiceResult.success(True, message="Hall deleted")

    def assign_tech_staff(self, actor: Profile, hall_id: str, tech_staff_id: str) -> ServiceResult[SeminarHall]:
        hall = self.repository.find_by_id(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        if not self._is_hod_of(actor, hall.department):
            return ServiceResult.forbidden("Only the department's HOD can assign tech staff")
        if UserRole.TECH_STAFF not in self.profiles.roles_for(tech_staff_id):
            return ServiceResult.validation_failure(
                "The selected profile is not tech staff", field="tech_staff_id"
            )
        try:
            with self.transaction():
                self.repository.assign_tech_staff(hall_id, tech_staff_id)
        except ConflictError as e:
            return ServiceResult.conflict(e.message)
        except Exception as e:
            return self._handle_exception(e, "assign tech staff", hall_id)

        self._audit(actor, "tech_staff_assigned", "seminar_hall", hall_id, {"techStaffId": tech_staff_id})
        return self.get_hall(hall_id)

    # ------------------------------------------------------------------
    # Equipment and components
    # ------------------------------------------------------------------

    def list_equipment(self, hall_id: str) -> ServiceResult[List[Equipment]]:
        if self.repository.find_by_id(hall_id) is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        return ServiceResult.success(self.equipment.list_for_hall(hall_id))

    def add_equipment(self, actor: Profile, hall_id: str, data: EquipmentCreate) -> ServiceResult[Equipment]:
        hall = self.repository.find_by_id(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        if not self._can_manage_assets(actor, hall):
            return ServiceResult.forbidden("Not allowed to manage this hall's equipment")
        try:
            with self.transaction():
                item = self.equipment.create(
                    Equipment(hall_id=hall_id, last_updated_by=actor.id, **data.model_dump())
                )
        except Exception as e:
            return self._handle_exception(e, "add equipment", hall_id)

        self._audit(actor, "equipment_added", "equipment", item.id, {"hallId": hall_id})
        return ServiceResult.success(item, message="Equipment added")

    def update_equipment_condition(
        self, actor: Profile, equipment_id: str, data: EquipmentConditionUpdate
    ) -> ServiceResult[Equipment]:
        item = self.equipment.find_by_id(equipment_id)
        if item is None:
            return ServiceResult.not_found("Equipment", equipment_id)
        if not self._can_manage_assets(actor, item.hall):
            return ServiceResult.forbidden("Not allowed to manage this hall's equipment")
        try:
            with self.transaction():
                self.equipment.change_condition(item, data.condition, actor.id, notes=data.notes)
        except Exception as e:
            return self._handle_exception(e, "update equipment condition", equipment_id)

        self._audit(actor, "equipment_condition_updated", "equipment", item.id, {"condition": data.condition.value})
        return ServiceResult.success(item, message="Equipment updated")

    def list_components(self, hall_id: str) -> ServiceResult[List[HallComponent]]:
        if self.repository.find_by_id(hall_id) is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        return ServiceResult.success(self.components.list_for_hall(hall_id))

    def add_component(self, actor: Profile, hall_id: str, data: ComponentCreate) -> ServiceResult[HallComponent]:
        hall = self.repository.find_by_id(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)
        if not self._can_manage_assets(actor, hall):
            return ServiceResult.forbidden("Not allowed to manage this hall's components")
        try:
            with self.transaction():
                component = self.components.create(HallComponent(hall_id=hall_id, **data.model_dump()))
        except Exception as e:
            return self._handle_exception(e, "add component", hall_id)

        self._audit(actor, "component_added", "hall_component", component.id, {"hallId": hall_id})
        return ServiceResult.success(component, message="Component added")

    def update_component_status(
        self, actor: Profile, component_id: str, data: ComponentStatusUpdate
    ) -> ServiceResult[HallComponent]:
        component = self.components.find_by_id(component_id)
        if component is None:
            return ServiceResult.not_found("HallComponent", component_id)
        if not self._can_manage_assets(actor, component.hall):
            return ServiceResult.forbidden("Not allowed to manage this hall's components")
        try:
            with self.transaction():
                self.components.change_status(component, data.status, actor.id, notes=data.notes)
        except Exception as e:
            return self._handle_exception(e, "update component status", component_id)

        self._audit(actor, "component_status_updated", "hall_component", component.id, {"status": data.status.value})
        return ServiceResult.success(component, message="Component updated")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_hod_of(actor: Profile, department: Optional[Department]) -> bool:
        return department is not None and department.hod_id == actor.id

    def _can_manage_assets(self, actor: Profile, hall: SeminarHall) -> bool:
        return self._is_hod_of(actor, hall.department) or self.repository.is_tech_staff_of(hall.id, actor.id)

    def _audit(self, actor: Profile, action: str, entity_type: str, entity_id: str, meta=None) -> None:
        role = UserRole.HOD if actor.has_role(UserRole.HOD) else UserRole.TECH_STAFF
        self.sink.log_user_action(actor.id, role.value, action, entity_type, entity_id, meta)
