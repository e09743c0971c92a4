"""
Assignment configuration provider.

Callers obtain one immutable snapshot per operation instead of re-reading
the singleton row at every decision point.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from hostel_complaints.config.settings import settings
from hostel_complaints.models.assignment.assignment_config import (
    AssignmentConfig,
    default_category_settings,
)
from hostel_complaints.models.base.enums import ComplaintCategory
from hostel_complaints.repositories.assignment.assignment_config_repository import (
    AssignmentConfigRepository,
)
from hostel_complaints.schemas.assignment import AssignmentConfigUpdate
from hostel_complaints.services.base.base_service import BaseService
from hostel_complaints.services.base.service_result import ServiceResult


@dataclass(frozen=True)
class CategorySettingSnapshot:
    enabled: bool = True
    auto_assign: bool = True


@dataclass(frozen=True)
class AssignmentConfigSnapshot:
    """Immutable view of the assignment configuration."""

    enabled_globally: bool
    max_workload: int
    efficiency_threshold: int
    auto_status_update: bool = True
    category_settings: Mapping[str, CategorySettingSnapshot] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def category(self, category: ComplaintCategory) -> CategorySettingSnapshot:
        key = category.value if isinstance(category, ComplaintCategory) else str(category)
        return self.category_settings.get(key, CategorySettingSnapshot(enabled=False, auto_assign=False))

    def is_enabled_for(self, category: ComplaintCategory) -> bool:
        """Automated assignment may run for the category (manual trigger)."""
        return self.enabled_globally and self.category(category).enabled

    def auto_assigns_on_create(self, category: ComplaintCategory) -> bool:
        """New complaints in the category are assigned automatically."""
        setting = self.category(category)
        return self.enabled_globally and setting.enabled and setting.auto_assign

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled_globally": self.enabled_globally,
            "category_settings": {
                key: {"enabled": value.enabled, "auto_assign": value.auto_assign}
                for key, value in self.category_settings.items()
            },
            "max_workload": self.max_workload,
            "efficiency_threshold": self.efficiency_threshold,
            "auto_status_update": self.auto_status_update,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_model(cls, config: AssignmentConfig) -> "AssignmentConfigSnapshot":
        merged = default_category_settings()
        for key, value in (config.category_settings or {}).items():
            merged.setdefault(key, {}).update(value or {})
        categories = {
            key: CategorySettingSnapshot(
                enabled=bool(value.get("enabled", True)),
                auto_assign=bool(value.get("auto_assign", True)),
            )
            for key, value in merged.items()
        }
        return cls(
            enabled_globally=bool(config.enabled_globally),
            max_workload=int(config.max_workload),
            efficiency_threshold=int(config.efficiency_threshold),
            auto_status_update=bool(config.auto_status_update),
            category_settings=MappingProxyType(categories),
            updated_at=config.updated_at,
        )


class AssignmentConfigProvider(BaseService[AssignmentConfigRepository]):
    """Reads and saves the assignment configuration singleton."""

    def __init__(self, repository: AssignmentConfigRepository, db_session: Session):
        super().__init__(repository, db_session)

    @classmethod
    def from_session(cls, db: Session) -> "AssignmentConfigProvider":
        return cls(AssignmentConfigRepository(db), db)

    @staticmethod
    def _defaults() -> Dict[str, Any]:
        return {
            "enabled_globally": False,
            "category_settings": default_category_settings(),
            "max_workload": settings.DEFAULT_MAX_WORKLOAD,
            "efficiency_threshold": settings.DEFAULT_EFFICIENCY_THRESHOLD,
            "auto_status_update": True,
        }

    # -------------------------------------------------------------------------
    # Collaborator API
    # -------------------------------------------------------------------------

    def get_config(self) -> AssignmentConfigSnapshot:
        """
        Snapshot of the configuration, creating the row with defaults if absent.

        A row created here is committed with the caller's transaction.
        """
        return AssignmentConfigSnapshot.from_model(self.repository.get_or_create(self._defaults()))

    def ensure_default(self) -> AssignmentConfigSnapshot:
        """Bootstrap the configuration row once at process start."""
        with self.transaction():
            snapshot = self.get_config()
        self._logger.info(
            "Assignment configuration ready",
            extra={"enabled_globally": snapshot.enabled_globally, "max_workload": snapshot.max_workload},
        )
        return snapshot

    # -------------------------------------------------------------------------
    # Administrative API
    # -------------------------------------------------------------------------

    def read_config(self) -> ServiceResult[AssignmentConfigSnapshot]:
        try:
            with self.transaction():
                snapshot = self.get_config()
            return ServiceResult.success(snapshot)
        except Exception as e:
            return self._handle_exception(e, "read assignment configuration")

    def save_config(self, update: AssignmentConfigUpdate) -> ServiceResult[AssignmentConfigSnapshot]:
        """
        Apply a partial configuration update.

        Category settings are merged key by key; omitted categories and
        omitted flags keep their stored values.
        """
        try:
            with self.transaction():
                config = self.repository.get_or_create(self._defaults())
                changes = update.model_dump(exclude_unset=True, exclude_none=True)

                category_changes = changes.pop("category_settings", None)
                if category_changes:
                    merged = {key: dict(value) for key, value in (config.category_settings or {}).items()}
                    for category, flags in category_changes.items():
                        key = category.value if isinstance(category, ComplaintCategory) else str(category)
                        merged.setdefault(key, {"enabled": True, "auto_assign": True}).update(flags)
                    # Reassign so the JSON column is flagged dirty
                    config.category_settings = merged

                for key, value in changes.items():
                    setattr(config, key, value)

                self.db.flush()
                snapshot = AssignmentConfigSnapshot.from_model(config)

            self._log_operation("save assignment configuration", extra={"changed": sorted(update.model_fields_set)})
            return ServiceResult.success(snapshot, message="Assignment configuration updated")
        except Exception as e:
            return self._handle_exception(e, "save assignment configuration")

    def quick_setup(self) -> ServiceResult[AssignmentConfigSnapshot]:
        """Enable automated assignment globally and for every category."""
        try:
            with self.transaction():
                config = self.repository.get_or_create(self._defaults())
                config.enabled_globally = True
                config.auto_status_update = True
                config.category_settings = default_category_settings()
                self.db.flush()
                snapshot = AssignmentConfigSnapshot.from_model(config)

            self._log_operation("quick setup of automated assignment")
            return ServiceResult.success(snapshot, message="Automated assignment enabled for all categories")
        except Exception as e:
            return self._handle_exception(e, "run quick setup")

    def toggle(self, enabled: bool) -> ServiceResult[AssignmentConfigSnapshot]:
        """Flip the global master switch."""
        try:
            with self.transaction():
                config = self.repository.get_or_create(self._defaults())
                config.enabled_globally = enabled
                self.db.flush()
                snapshot = AssignmentConfigSnapshot.from_model(config)

            state = "enabled" if enabled else "disabled"
            self._log_operation(f"automated assignment {state}")
            return ServiceResult.success(snapshot, message=f"Automated assignment {state}")
        except Exception as e:
            return self._handle_exception(e, "toggle automated assignment")
