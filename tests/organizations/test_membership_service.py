import pytest

from src.workforce_hub.workforce_hub.core.enums import MemberRole
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.workforce_hub.workforce_hub.organizations.policy import can_grant_role


def test_can_grant_role_never_grants_owner():
    assert can_grant_role(MemberRole.OWNER, MemberRole.OWNER) is False
    assert can_grant_role(MemberRole.OWNER, MemberRole.ADMIN) is True
    assert can_grant_role(MemberRole.ADMIN, MemberRole.ADMIN) is True
    assert can_grant_role(MemberRole.SUPERVISOR, MemberRole.ADMIN) is False
    assert can_grant_role(MemberRole.SUPERVISOR, MemberRole.EMPLOYEE) is True


def test_list_members_sorted_by_role(container, org):
    members = container.membership_service.list_members(org.org_id, user_id=org.employee)

    assert [m.role for m in members][:3] == [MemberRole.OWNER, MemberRole.ADMIN, MemberRole.SUPERVISOR]
    assert len(members) == 5


def test_owner_promotes_employee(container, org):
    container.membership_service.change_member_role(
        org.org_id, user_id=org.owner, member_id=org.employee, role="supervisor"
    )

    assert container.policy.role_of(org.org_id, org.employee) == MemberRole.SUPERVISOR


def test_nobody_can_grant_owner(container, org):
    with pytest.raises(AuthorizationError, match="above your own"):
        container.membership_service.change_member_role(
            org.org_id, user_id=org.owner, member_id=org.admin, role=MemberRole.OWNER
        )


def test_owner_membership_is_protected(container, org):
    with pytest.raises(AuthorizationError, match="owner's membership"):
        container.membership_service.change_member_role(
            org.org_id, user_id=org.admin, member_id=org.owner, role=MemberRole.EMPLOYEE
        )


def test_admin_cannot_manage_other_admins(container, db, org):
    second_admin = db.add_user("admin2@acme.test", "Ada Admin")
    container.members_repo.add_member(org.org_id, second_admin, role=MemberRole.ADMIN)

    with pytest.raises(AuthorizationError, match="other admins"):
        container.membership_service.remove_member(org.org_id, user_id=org.admin, member_id=second_admin)


def test_cannot_change_own_role(container, org):
    with pytest.raises(AuthorizationError, match="your own role"):
        container.membership_service.change_member_role(
            org.org_id, user_id=org.admin, member_id=org.admin, role=MemberRole.EMPLOYEE
        )


def test_supervisor_cannot_manage_members(container, org):
    with pytest.raises(AuthorizationError, match="Only owners and admins"):
        container.membership_service.change_member_role(
            org.org_id, user_id=org.supervisor, member_id=org.employee, role=MemberRole.EMPLOYEE
        )


def test_invalid_role_is_rejected(container, org):
    with pytest.raises(ValidationError, match="Role is not valid"):
        container.membership_service.change_member_role(
            org.org_id, user_id=org.owner, member_id=org.employee, role="boss"
        )


def test_admin_removes_employee(container, org):
    container.membership_service.remove_member(org.org_id, user_id=org.admin, member_id=org.employee)

    assert container.policy.role_of(org.org_id, org.employee) is None


def test_member_can_leave_but_owner_cannot(container, org):
    svc = container.membership_service
    svc.remove_member(org.org_id, user_id=org.employee2, member_id=org.employee2)

    assert container.policy.role_of(org.org_id, org.employee2) is None
    with pytest.raises(ValidationError, match="owner cannot leave"):
        svc.remove_member(org.org_id, user_id=org.owner, member_id=org.owner)


def test_remove_unknown_member(container, org):
    with pytest.raises(NotFoundError):
        container.membership_service.remove_member(org.org_id, user_id=org.owner, member_id=org.outsider)
