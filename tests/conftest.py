from dataclasses import dataclass
from datetime import time

import pytest

from src.workforce_hub.workforce_hub.core.enums import MemberRole

from tests.fakes import FakeDB, build_fake_container


@dataclass
class Org:
    org_id: int
    owner: int
    admin: int
    supervisor: int
    employee: int
    employee2: int
    outsider: int


@pytest.fixture
def db():
    return FakeDB()


@pytest.fixture
def container(db):
    return build_fake_container(db)


@pytest.fixture
def org(db, container):
    owner = db.add_user("owner@acme.test", "Olivia Owner")
    admin = db.add_user("admin@acme.test", "Adam Admin")
    supervisor = db.add_user("sup@acme.test", "Sam Supervisor")
    employee = db.add_user("emp@acme.test", "Erin Employee")
    employee2 = db.add_user("emp2@acme.test", "Eli Employee")
    outsider = db.add_user("out@other.test", "Oscar Outsider")

    # seeded through the repository so the owner has no check-in of their own
    org_id = container.orgs_repo.create_with_owner(
        name="Acme",
        description=None,
        owner_id=owner,
        work_start_time=time(9, 0),
        work_end_time=time(17, 0),
        early_threshold_minutes=15,
        late_threshold_minutes=15,
        logo_url=None,
        checkin_token="acme-checkin-token",
    )
    members = container.members_repo
    members.add_member(org_id, admin, role=MemberRole.ADMIN)
    members.add_member(org_id, supervisor, role=MemberRole.SUPERVISOR)
    members.add_member(org_id, employee, role=MemberRole.EMPLOYEE)
    members.add_member(org_id, employee2, role=MemberRole.EMPLOYEE)

    return Org(
        org_id=org_id,
        owner=owner,
        admin=admin,
        supervisor=supervisor,
        employee=employee,
        employee2=employee2,
        outsider=outsider,
    )
