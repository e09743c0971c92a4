import dataclasses

import pytest
from sqlalchemy import func, select

from hostel_complaints.models.assignment.assignment_config import AssignmentConfig
from hostel_complaints.models.base.enums import ComplaintCategory
from hostel_complaints.schemas.assignment import AssignmentConfigUpdate, CategorySettingUpdate


def test_defaults_are_created_once(db, config_provider):
    first = config_provider.get_config()
    config_provider.ensure_default()

    assert db.execute(select(func.count(AssignmentConfig.id))).scalar_one() == 1
    assert first.enabled_globally is False
    assert first.max_workload == 5
    assert first.efficiency_threshold == 70
    assert all(first.category(c).enabled for c in ComplaintCategory)


def test_snapshot_is_immutable(config_provider):
    snapshot = config_provider.get_config()

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.max_workload = 10
    with pytest.raises(TypeError):
        snapshot.category_settings["Canteen"] = None


def test_partial_save_merges_category_settings(config_provider):
    config_provider.save_config(
        AssignmentConfigUpdate(
            category_settings={ComplaintCategory.INTERNET: CategorySettingUpdate(auto_assign=False)}
        )
    )
    result = config_provider.save_config(AssignmentConfigUpdate(efficiency_threshold=60))

    snapshot = result.data
    assert snapshot.efficiency_threshold == 60
    assert snapshot.max_workload == 5
    assert snapshot.category(ComplaintCategory.INTERNET).enabled
    assert not snapshot.category(ComplaintCategory.INTERNET).auto_assign
    assert snapshot.category(ComplaintCategory.CANTEEN).auto_assign


def test_manual_trigger_only_needs_category_enabled(config_provider):
    config_provider.quick_setup()
    snapshot = config_provider.save_config(
        AssignmentConfigUpdate(
            category_settings={ComplaintCategory.OTHERS: CategorySettingUpdate(auto_assign=False)}
        )
    ).data

    assert snapshot.is_enabled_for(ComplaintCategory.OTHERS)
    assert not snapshot.auto_assigns_on_create(ComplaintCategory.OTHERS)


def test_master_switch_overrides_categories(config_provider):
    config_provider.quick_setup()

    snapshot = config_provider.toggle(False).data

    assert not snapshot.is_enabled_for(ComplaintCategory.CANTEEN)
    assert not snapshot.auto_assigns_on_create(ComplaintCategory.CANTEEN)
