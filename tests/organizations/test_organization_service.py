from datetime import time

import pytest

from src.workforce_hub.workforce_hub.core.enums import MemberRole
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_create_organization_makes_creator_owner(container, db):
    owner = db.add_user("founder@acme.test", "Fay Founder")

    org_id = container.organization_service.create_organization(user_id=owner, name="  Startup  ")

    org = container.organization_service.get_organization(org_id, user_id=owner)
    assert org.name == "Startup"
    assert org.work_start_time == time(9, 0)
    assert org.work_end_time == time(17, 0)
    assert org.checkin_token
    assert container.policy.role_of(org_id, owner) == MemberRole.OWNER


def test_create_organization_validates_hours(container, db):
    owner = db.add_user("founder@acme.test", "Fay Founder")

    with pytest.raises(ValidationError, match="after work start"):
        container.organization_service.create_organization(
            user_id=owner, name="Night shift", work_start_time="18:00", work_end_time="08:00"
        )
    with pytest.raises(ValidationError, match="HH:MM"):
        container.organization_service.create_organization(user_id=owner, name="Typo", work_start_time="9am")


def test_checkin_token_hidden_from_non_managers(container, org):
    org_view = container.organization_service.get_organization(org.org_id, user_id=org.employee)

    assert org_view.checkin_token is None


def test_outsider_cannot_view_organization(container, org):
    with pytest.raises(AuthorizationError):
        container.organization_service.get_organization(org.org_id, user_id=org.outsider)


def test_update_settings_is_partial_and_owner_only(container, org):
    svc = container.organization_service

    updated = svc.update_settings(org.org_id, user_id=org.owner, late_threshold_minutes=5, description="HQ")

    assert updated.late_threshold_minutes == 5
    assert updated.description == "HQ"
    assert updated.name == "Acme"
    assert updated.work_start_time == time(9, 0)

    with pytest.raises(AuthorizationError, match="Only the owner"):
        svc.update_settings(org.org_id, user_id=org.admin, name="Hijacked")


def test_update_settings_rejects_threshold_out_of_range(container, org):
    with pytest.raises(ValidationError, match="Early threshold"):
        container.organization_service.update_settings(org.org_id, user_id=org.owner, early_threshold_minutes=-1)


def test_list_my_organizations_marks_selected(container, org, db):
    other = container.organization_service.create_organization(user_id=org.employee, name="Side project")
    container.organization_service.select_organization(org.org_id, user_id=org.employee, now=db.now)

    summaries = container.organization_service.list_my_organizations(org.employee)

    assert [s.org_id for s in summaries] == [org.org_id, other]
    assert summaries[0].last_selected is True
    assert summaries[0].role == MemberRole.EMPLOYEE
    assert summaries[1].role == MemberRole.OWNER


def test_delete_organization_owner_only(container, org):
    svc = container.organization_service

    with pytest.raises(AuthorizationError):
        svc.delete_organization(org.org_id, user_id=org.admin)

    svc.delete_organization(org.org_id, user_id=org.owner)
    with pytest.raises(AuthorizationError):
        svc.get_organization(org.org_id, user_id=org.owner)


def test_employee_cannot_read_checkin_token(container, org):
    with pytest.raises(AuthorizationError):
        container.organization_service.get_checkin_token(org.org_id, user_id=org.employee)


def test_select_unknown_organization(container, org):
    with pytest.raises(AuthorizationError):
        container.organization_service.select_organization(9999, user_id=org.owner)


def test_rotate_token_for_missing_org(container, db, org):
    del db.orgs[org.org_id]

    with pytest.raises(NotFoundError):
        container.organization_service.rotate_checkin_token(org.org_id, user_id=org.owner)


def test_creating_an_organization_selects_it_and_clocks_in(container, db, org):
    founder = org.employee
    org_id = container.organization_service.create_organization(user_id=founder, name="Side project", now=db.now)

    summaries = container.organization_service.list_my_organizations(founder)
    assert [(s.org_id, s.last_selected) for s in summaries] == [(org_id, True), (org.org_id, False)]

    online = container.attendance_service.who_is_clocked_in(org_id, user_id=founder, now=db.now)
    assert [row.user_id for row in online] == [founder]
