"""In-memory repositories shared by the service and HTTP tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from werkzeug.security import generate_password_hash

from src.workforce_hub.workforce_hub.attendance.model import AttendanceCheckin
from src.workforce_hub.workforce_hub.container import wire_services
from src.workforce_hub.workforce_hub.core.enums import (
    MemberRole,
    PointsReason,
    RedemptionStatus,
    RequestStatus,
    TaskStatus,
)
from src.workforce_hub.workforce_hub.core.exceptions import ValidationError
from src.workforce_hub.workforce_hub.extensions.model import (
    PENDING_EXISTS_MESSAGE,
    ExtensionRequest,
    ExtensionRequestView,
)
from src.workforce_hub.workforce_hub.notifications.model import Notification
from src.workforce_hub.workforce_hub.organizations.model import (
    Invite,
    Membership,
    MemberView,
    Organization,
    OrganizationSummary,
)
from src.workforce_hub.workforce_hub.points.model import LeaderboardRow, LedgerEntry, Redemption, Reward
from src.workforce_hub.workforce_hub.projects.model import DUPLICATE_NAME_MESSAGE, Project
from src.workforce_hub.workforce_hub.tasks.model import Task, TimeLog
from src.workforce_hub.workforce_hub.teams.model import Team, TeamMember
from src.workforce_hub.workforce_hub.users.model import User

DEFAULT_PASSWORD = "secret123"


class FakeDB:
    """Tables as dicts; `now` stamps created_at columns."""

    def __init__(self, now: datetime = datetime(2026, 3, 2, 8, 0, 0)):
        self.now = now
        self._seq = 0
        self.users: dict[int, User] = {}
        self.orgs: dict[int, Organization] = {}
        self.members: dict[tuple[int, int], Membership] = {}
        self.invites: dict[int, Invite] = {}
        self.projects: dict[int, Project] = {}
        self.tasks: dict[int, Task] = {}
        self.time_logs: list[TimeLog] = []
        self.ledger: list[LedgerEntry] = []
        self.rewards: dict[int, Reward] = {}
        self.redemptions: dict[int, Redemption] = {}
        self.extensions: dict[int, ExtensionRequest] = {}
        self.notifications: dict[int, Notification] = {}
        self.checkins: dict[int, AttendanceCheckin] = {}
        self.teams: dict[int, Team] = {}
        self.team_members: dict[tuple[int, int], datetime] = {}

    def next_id(self) -> int:
        self._seq += 1
        return self._seq

    def add_user(self, email: str, full_name: str, *, password: str = DEFAULT_PASSWORD, is_active: bool = True) -> int:
        user_id = self.next_id()
        self.users[user_id] = User(
            user_id=user_id,
            email=email.lower(),
            full_name=full_name,
            password_hash=generate_password_hash(password),
            is_active=is_active,
            created_at=self.now,
        )
        return user_id

    def balance(self, org_id: int, user_id: int) -> int:
        return sum(e.delta for e in self.ledger if e.org_id == org_id and e.user_id == user_id)

    def append_ledger(self, *, org_id, user_id, delta, reason_code, task_id=None, at=None) -> int:
        entry_id = self.next_id()
        self.ledger.append(
            LedgerEntry(
                entry_id=entry_id,
                org_id=int(org_id),
                user_id=int(user_id),
                delta=int(delta),
                reason_code=reason_code,
                created_at=at or self.now,
                task_id=task_id,
            )
        )
        return entry_id


class FakeUserRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def get_by_id(self, user_id):
        return self.db.users.get(int(user_id))

    def get_by_email(self, email):
        email = (email or "").lower()
        return next((u for u in self.db.users.values() if u.email == email), None)

    def get_many(self, user_ids):
        return [self.db.users[int(i)] for i in user_ids if int(i) in self.db.users]

    def create_user(self, *, email, full_name, password_hash):
        user_id = self.db.next_id()
        self.db.users[user_id] = User(
            user_id=user_id, email=email, full_name=full_name, password_hash=password_hash, created_at=self.db.now
        )
        return user_id

    def update_full_name(self, user_id, *, full_name):
        user = self.db.users.get(int(user_id))
        if not user:
            return False
        self.db.users[user.user_id] = replace(user, full_name=full_name)
        return True


class FakeOrganizationRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create_with_owner(self, *, name, description, owner_id, work_start_time, work_end_time,
                          early_threshold_minutes, late_threshold_minutes, logo_url, checkin_token):
        org_id = self.db.next_id()
        self.db.orgs[org_id] = Organization(
            org_id=org_id,
            name=name,
            owner_id=int(owner_id),
            work_start_time=work_start_time,
            work_end_time=work_end_time,
            early_threshold_minutes=early_threshold_minutes,
            late_threshold_minutes=late_threshold_minutes,
            created_at=self.db.now,
            description=description,
            logo_url=logo_url,
            checkin_token=checkin_token,
        )
        self.db.members[(org_id, int(owner_id))] = Membership(
            org_id=org_id, user_id=int(owner_id), role=MemberRole.OWNER, joined_at=self.db.now
        )
        return org_id

    def get_by_id(self, org_id):
        return self.db.orgs.get(int(org_id))

    def update_settings(self, org_id, **fields):
        org = self.db.orgs.get(int(org_id))
        if not org:
            return False
        self.db.orgs[org.org_id] = replace(org, **fields)
        return True

    def update_checkin_token(self, org_id, *, checkin_token):
        return self.update_settings(org_id, checkin_token=checkin_token)

    def delete(self, org_id):
        if self.db.orgs.pop(int(org_id), None) is None:
            return False
        for key in [k for k in self.db.members if k[0] == int(org_id)]:
            del self.db.members[key]
        return True

    def list_for_user(self, user_id):
        rows = []
        for (org_id, uid), m in self.db.members.items():
            if uid != int(user_id):
                continue
            org = self.db.orgs[org_id]
            rows.append(
                OrganizationSummary(
                    org_id=org_id,
                    name=org.name,
                    description=org.description,
                    logo_url=org.logo_url,
                    role=m.role,
                    last_selected=m.last_selected,
                )
            )
        return sorted(rows, key=lambda r: (not r.last_selected, r.name))


class FakeMemberRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def get_membership(self, org_id, user_id):
        return self.db.members.get((int(org_id), int(user_id)))

    def list_members(self, org_id):
        views = []
        for (oid, uid), m in self.db.members.items():
            if oid != int(org_id):
                continue
            user = self.db.users[uid]
            views.append(
                MemberView(user_id=uid, full_name=user.full_name, email=user.email, role=m.role, joined_at=m.joined_at)
            )
        return sorted(views, key=lambda v: (-v.role.level, v.full_name))

    def list_user_ids_by_role(self, org_id, roles):
        roles = set(roles)
        return [uid for (oid, uid), m in self.db.members.items() if oid == int(org_id) and m.role in roles]

    def add_member(self, org_id, user_id, *, role):
        key = (int(org_id), int(user_id))
        if key in self.db.members:
            raise ValueError("duplicate membership")
        self.db.members[key] = Membership(org_id=key[0], user_id=key[1], role=role, joined_at=self.db.now)

    def update_role(self, org_id, user_id, *, role):
        key = (int(org_id), int(user_id))
        if key not in self.db.members:
            return False
        self.db.members[key] = replace(self.db.members[key], role=role)
        return True

    def remove_member(self, org_id, user_id):
        return self.db.members.pop((int(org_id), int(user_id)), None) is not None

    def mark_selected(self, org_id, user_id):
        for key, m in list(self.db.members.items()):
            if key[1] == int(user_id):
                self.db.members[key] = replace(m, last_selected=key[0] == int(org_id))


class FakeInviteRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create(self, *, org_id, code, role, email, created_by, expires_at):
        invite_id = self.db.next_id()
        self.db.invites[invite_id] = Invite(
            invite_id=invite_id,
            org_id=int(org_id),
            code=code,
            role=role,
            created_by=int(created_by),
            created_at=self.db.now,
            expires_at=expires_at,
            email=email,
        )
        return invite_id

    def get_by_id(self, invite_id):
        return self.db.invites.get(int(invite_id))

    def get_by_code(self, code):
        return next((i for i in self.db.invites.values() if i.code == code), None)

    def list_for_org(self, org_id):
        return [i for i in self.db.invites.values() if i.org_id == int(org_id)]

    def delete(self, invite_id):
        return self.db.invites.pop(int(invite_id), None) is not None

    def claim(self, invite, *, user_id, used_at):
        stored = self.db.invites.get(invite.invite_id)
        if not stored or stored.used_at is not None:
            return False
        self.db.invites[stored.invite_id] = replace(stored, used_at=used_at, used_by=int(user_id))
        FakeMemberRepo(self.db).add_member(stored.org_id, user_id, role=stored.role)
        return True


class FakeProjectRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def _check_name_free(self, org_id, name, project_id=None):
        # mirrors UNIQUE(org_id, name) under a case-insensitive collation
        for p in self.db.projects.values():
            if p.org_id == int(org_id) and p.name.lower() == name.lower() and p.project_id != project_id:
                raise ValidationError(DUPLICATE_NAME_MESSAGE)

    def create(self, *, org_id, name, description, due_date, current_phase, owner_id):
        self._check_name_free(org_id, name)
        project_id = self.db.next_id()
        self.db.projects[project_id] = Project(
            project_id=project_id,
            org_id=int(org_id),
            name=name,
            owner_id=int(owner_id),
            created_at=self.db.now,
            description=description,
            due_date=due_date,
            current_phase=current_phase,
        )
        return project_id

    def get_by_id(self, project_id):
        return self.db.projects.get(int(project_id))

    def find_by_name(self, org_id, name):
        return next(
            (p for p in self.db.projects.values() if p.org_id == int(org_id) and p.name.lower() == name.lower()),
            None,
        )

    def list_for_org(self, org_id):
        return [p for p in self.db.projects.values() if p.org_id == int(org_id)]

    def update(self, project_id, *, name, description, due_date):
        project = self.db.projects.get(int(project_id))
        if not project:
            return False
        self._check_name_free(project.org_id, name, project.project_id)
        self.db.projects[project.project_id] = replace(
            project, name=name, description=description, due_date=due_date, updated_at=self.db.now
        )
        return True

    def update_phase(self, project_id, *, phase):
        project = self.db.projects.get(int(project_id))
        if not project:
            return False
        self.db.projects[project.project_id] = replace(project, current_phase=phase)
        return True

    def delete(self, project_id):
        if self.db.projects.pop(int(project_id), None) is None:
            return False
        for task_id in [t.task_id for t in self.db.tasks.values() if t.project_id == int(project_id)]:
            del self.db.tasks[task_id]
        return True


class FakeTaskRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create(self, *, project_id, title, description, assignee_id, created_by, priority, due_date,
               completion_points, task_type):
        task_id = self.db.next_id()
        self.db.tasks[task_id] = Task(
            task_id=task_id,
            project_id=int(project_id),
            org_id=self.db.projects[int(project_id)].org_id,
            title=title,
            created_by=int(created_by),
            priority=priority,
            status=TaskStatus.TODO,
            task_type=task_type,
            completion_points=int(completion_points),
            created_at=self.db.now,
            description=description,
            assignee_id=assignee_id,
            due_date=due_date,
        )
        return task_id

    def get_by_id(self, task_id):
        return self.db.tasks.get(int(task_id))

    def update(self, task_id, **fields):
        task = self.db.tasks.get(int(task_id))
        if not task:
            return False
        self.db.tasks[task.task_id] = replace(task, updated_at=self.db.now, **fields)
        return True

    def apply_action(self, task_id, *, user_id, status, action, at, award=None):
        task = self.db.tasks.get(int(task_id))
        if not task or task.status == TaskStatus.DONE:
            return False
        # ledger first so a failed write leaves the task untouched, as the transaction would
        if award is not None:
            self.db.append_ledger(
                org_id=award.org_id,
                user_id=award.user_id,
                delta=award.delta,
                reason_code=award.reason_code,
                task_id=award.task_id,
                at=at,
            )
        self.db.tasks[task.task_id] = replace(task, status=status, updated_at=at)
        self.db.time_logs.append(
            TimeLog(log_id=self.db.next_id(), task_id=task.task_id, user_id=int(user_id), action=action, created_at=at)
        )
        return True

    def set_status(self, task_id, *, status, at):
        task = self.db.tasks.get(int(task_id))
        if not task or task.status == TaskStatus.DONE:
            return False
        self.db.tasks[task.task_id] = replace(task, status=status, updated_at=at)
        return True

    def update_due_date(self, task_id, *, due_date, at):
        task = self.db.tasks.get(int(task_id))
        if not task:
            return False
        self.db.tasks[task.task_id] = replace(task, due_date=due_date, updated_at=at)
        return True

    def delete(self, task_id):
        return self.db.tasks.pop(int(task_id), None) is not None

    def list_for_project(self, project_id, *, assignee_id=None, task_type=None):
        return [
            t
            for t in self.db.tasks.values()
            if t.project_id == int(project_id)
            and (assignee_id is None or t.assignee_id == int(assignee_id))
            and (task_type is None or t.task_type == task_type)
        ]

    def list_for_assignee(self, org_id, user_id):
        return [t for t in self.db.tasks.values() if t.org_id == int(org_id) and t.assignee_id == int(user_id)]

    def list_due_between(self, start, end):
        return [
            t
            for t in self.db.tasks.values()
            if t.assignee_id is not None
            and t.status != TaskStatus.DONE
            and t.due_date is not None
            and start <= t.due_date < end
        ]

    def list_time_logs(self, task_id):
        return [log for log in self.db.time_logs if log.task_id == int(task_id)]


class FakeLedgerRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def balance(self, org_id, user_id):
        return self.db.balance(int(org_id), int(user_id))

    def list_entries(self, org_id, user_id, *, limit=100):
        rows = [e for e in self.db.ledger if e.org_id == int(org_id) and e.user_id == int(user_id)]
        return list(reversed(rows))[:limit]

    def leaderboard(self, org_id, *, limit=20):
        rows = [
            LeaderboardRow(user_id=m.user_id, full_name=m.full_name, balance=self.db.balance(int(org_id), m.user_id))
            for m in FakeMemberRepo(self.db).list_members(org_id)
        ]
        return sorted(rows, key=lambda r: (-r.balance, r.full_name))[:limit]


class FakeRewardRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create(self, *, org_id, title, description, points_cost, stock):
        reward_id = self.db.next_id()
        self.db.rewards[reward_id] = Reward(
            reward_id=reward_id,
            org_id=int(org_id),
            title=title,
            points_cost=int(points_cost),
            active=True,
            created_at=self.db.now,
            description=description,
            stock=stock,
        )
        return reward_id

    def get_by_id(self, reward_id):
        return self.db.rewards.get(int(reward_id))

    def list_for_org(self, org_id, *, active_only=False):
        rows = [r for r in self.db.rewards.values() if r.org_id == int(org_id) and (r.active or not active_only)]
        return sorted(rows, key=lambda r: (r.points_cost, r.title))

    def update(self, reward_id, **fields):
        reward = self.db.rewards.get(int(reward_id))
        if not reward:
            return False
        self.db.rewards[reward.reward_id] = replace(reward, **fields)
        return True

    def set_active(self, reward_id, *, active):
        return self.update(reward_id, active=bool(active))

    def delete(self, reward_id):
        if any(r.reward_id == int(reward_id) for r in self.db.redemptions.values()):
            return False
        return self.db.rewards.pop(int(reward_id), None) is not None

    def redeem(self, reward, *, user_id, at):
        current = self.db.rewards.get(reward.reward_id)
        if not current or not current.active or not current.in_stock:
            return None
        if self.db.balance(current.org_id, int(user_id)) < current.points_cost:
            return None

        self.db.append_ledger(
            org_id=current.org_id,
            user_id=user_id,
            delta=-current.points_cost,
            reason_code=PointsReason.REWARD_REDEMPTION,
            at=at,
        )
        if current.stock is not None:
            self.db.rewards[current.reward_id] = replace(current, stock=current.stock - 1)

        redemption_id = self.db.next_id()
        self.db.redemptions[redemption_id] = Redemption(
            redemption_id=redemption_id,
            org_id=current.org_id,
            user_id=int(user_id),
            reward_id=current.reward_id,
            points_spent=current.points_cost,
            status=RedemptionStatus.PENDING,
            created_at=at,
            reward_title=current.title,
            user_name=self.db.users[int(user_id)].full_name,
        )
        return redemption_id

    def get_redemption(self, redemption_id):
        return self.db.redemptions.get(int(redemption_id))

    def list_redemptions(self, org_id, *, user_id=None, status=None, limit=200):
        rows = [
            r
            for r in self.db.redemptions.values()
            if r.org_id == int(org_id)
            and (user_id is None or r.user_id == int(user_id))
            and (status is None or r.status == status)
        ]
        return list(reversed(rows))[:limit]

    def decide_redemption(self, redemption, *, status, decided_by, at):
        stored = self.db.redemptions.get(redemption.redemption_id)
        if not stored or stored.status != RedemptionStatus.PENDING:
            return False
        self.db.redemptions[stored.redemption_id] = replace(stored, status=status, decided_by=decided_by, decided_at=at)
        if status == RedemptionStatus.REJECTED:
            self.db.append_ledger(
                org_id=stored.org_id,
                user_id=stored.user_id,
                delta=stored.points_spent,
                reason_code=PointsReason.REDEMPTION_REFUND,
                at=at,
            )
            reward = self.db.rewards.get(stored.reward_id)
            if reward and reward.stock is not None:
                self.db.rewards[reward.reward_id] = replace(reward, stock=reward.stock + 1)
        return True


class FakeExtensionRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create(self, *, task_id, requester_id, requested_due_at, reason):
        if any(r.task_id == int(task_id) and r.status == RequestStatus.PENDING for r in self.db.extensions.values()):
            raise ValidationError(PENDING_EXISTS_MESSAGE)
        request_id = self.db.next_id()
        self.db.extensions[request_id] = ExtensionRequest(
            request_id=request_id,
            task_id=int(task_id),
            requester_id=int(requester_id),
            requested_due_at=requested_due_at,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=self.db.now,
        )
        return request_id

    def get_by_id(self, request_id):
        return self.db.extensions.get(int(request_id))

    def has_pending_for_task(self, task_id):
        return any(r.task_id == int(task_id) and r.status == RequestStatus.PENDING for r in self.db.extensions.values())

    def update_pending(self, request_id, *, requested_due_at, reason):
        req = self.db.extensions.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.db.extensions[req.request_id] = replace(req, requested_due_at=requested_due_at, reason=reason)
        return True

    def _view(self, req):
        task = self.db.tasks[req.task_id]
        return ExtensionRequestView(
            request=req,
            task_title=task.title,
            current_due_date=task.due_date,
            requester_name=self.db.users[req.requester_id].full_name,
        )

    def list_for_requester(self, requester_id, *, status=None):
        return [
            self._view(r)
            for r in self.db.extensions.values()
            if r.requester_id == int(requester_id) and (status is None or r.status == status)
        ]

    def list_for_org(self, org_id, *, status=None):
        return [
            self._view(r)
            for r in self.db.extensions.values()
            if self.db.tasks[r.task_id].org_id == int(org_id) and (status is None or r.status == status)
        ]

    def decide(self, request_id, *, status, decided_by, decision_note, at, new_due_date=None):
        req = self.db.extensions.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.db.extensions[req.request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=at, decision_note=decision_note
        )
        if new_due_date is not None:
            FakeTaskRepo(self.db).update_due_date(req.task_id, due_date=new_due_date, at=at)
        return True


class FakeNotificationRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create(self, *, user_id, type, payload):
        notification_id = self.db.next_id()
        self.db.notifications[notification_id] = Notification(
            notification_id=notification_id, user_id=int(user_id), type=type, created_at=self.db.now, payload=payload
        )
        return notification_id

    def get_by_id(self, notification_id):
        return self.db.notifications.get(int(notification_id))

    def list_for_user(self, user_id, *, unread_only=False, limit=50):
        rows = [
            n
            for n in self.db.notifications.values()
            if n.user_id == int(user_id) and (not unread_only or not n.is_read)
        ]
        return list(reversed(rows))[:limit]

    def count_unread(self, user_id):
        return len(self.list_for_user(user_id, unread_only=True, limit=10_000))

    def mark_read(self, notification_id, *, read_at):
        n = self.db.notifications.get(int(notification_id))
        if not n:
            return False
        if n.read_at is None:
            self.db.notifications[n.notification_id] = replace(n, read_at=read_at)
        return True

    def mark_all_read(self, user_id, *, read_at):
        unread = self.list_for_user(user_id, unread_only=True, limit=10_000)
        for n in unread:
            self.db.notifications[n.notification_id] = replace(n, read_at=read_at)
        return len(unread)

    def exists_for_task_on(self, *, user_id, type, task_id, day):
        return any(
            n.user_id == int(user_id)
            and n.type == type
            and n.payload.get("task_id") == int(task_id)
            and n.created_at.date() == day
            for n in self.db.notifications.values()
        )


class FakeAttendanceRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def get_for_day(self, org_id, user_id, local_date):
        return next(
            (
                c
                for c in self.db.checkins.values()
                if c.org_id == int(org_id) and c.user_id == int(user_id) and c.local_date == local_date
            ),
            None,
        )

    def create_if_absent(self, *, org_id, user_id, local_date, clock_in_at, source):
        existing = self.get_for_day(org_id, user_id, local_date)
        if existing:
            return existing, False
        checkin_id = self.db.next_id()
        checkin = AttendanceCheckin(
            checkin_id=checkin_id,
            org_id=int(org_id),
            user_id=int(user_id),
            local_date=local_date,
            clock_in_at=clock_in_at,
            source=source,
        )
        self.db.checkins[checkin_id] = checkin
        return checkin, True

    def set_clock_out(self, checkin_id, *, clock_out_at):
        c = self.db.checkins.get(int(checkin_id))
        if not c or c.clock_out_at is not None:
            return False
        self.db.checkins[c.checkin_id] = replace(c, clock_out_at=clock_out_at)
        return True

    def list_for_org_between(self, org_id, start, end, *, user_id=None):
        rows = [
            c
            for c in self.db.checkins.values()
            if c.org_id == int(org_id)
            and start <= c.local_date <= end
            and (user_id is None or c.user_id == int(user_id))
        ]
        return sorted(rows, key=lambda c: (c.local_date, c.clock_in_at), reverse=True)

    def list_open(self, org_id, local_date):
        return [
            c
            for c in self.db.checkins.values()
            if c.org_id == int(org_id) and c.local_date == local_date and c.clock_out_at is None
        ]


class FakeTeamRepo:
    def __init__(self, db: FakeDB):
        self.db = db

    def create_with_supervisor(self, *, org_id, name, description, supervisor_id):
        team_id = self.db.next_id()
        self.db.teams[team_id] = Team(
            team_id=team_id,
            org_id=int(org_id),
            name=name,
            supervisor_id=int(supervisor_id),
            created_at=self.db.now,
            description=description,
        )
        self.db.team_members[(team_id, int(supervisor_id))] = self.db.now
        return team_id

    def get_by_id(self, team_id):
        return self.db.teams.get(int(team_id))

    def update(self, team_id, *, name, description, supervisor_id):
        team = self.db.teams.get(int(team_id))
        if not team:
            return False
        self.db.teams[team.team_id] = replace(team, name=name, description=description, supervisor_id=int(supervisor_id))
        self.db.team_members.setdefault((team.team_id, int(supervisor_id)), self.db.now)
        return True

    def delete(self, team_id):
        if self.db.teams.pop(int(team_id), None) is None:
            return False
        for key in [k for k in self.db.team_members if k[0] == int(team_id)]:
            del self.db.team_members[key]
        return True

    def list_for_org(self, org_id):
        return sorted((t for t in self.db.teams.values() if t.org_id == int(org_id)), key=lambda t: t.name)

    def list_members(self, team_id):
        return [
            TeamMember(
                team_id=tid,
                user_id=uid,
                full_name=self.db.users[uid].full_name,
                email=self.db.users[uid].email,
                added_at=added,
            )
            for (tid, uid), added in self.db.team_members.items()
            if tid == int(team_id)
        ]

    def is_member(self, team_id, user_id):
        return (int(team_id), int(user_id)) in self.db.team_members

    def add_member(self, team_id, user_id):
        key = (int(team_id), int(user_id))
        if key in self.db.team_members:
            raise ValueError("duplicate team member")
        self.db.team_members[key] = self.db.now

    def remove_member(self, team_id, user_id):
        return self.db.team_members.pop((int(team_id), int(user_id)), None) is not None


def build_fake_container(db: FakeDB, **options):
    return wire_services(
        conn=None,
        users_repo=FakeUserRepo(db),
        orgs_repo=FakeOrganizationRepo(db),
        members_repo=FakeMemberRepo(db),
        invites_repo=FakeInviteRepo(db),
        projects_repo=FakeProjectRepo(db),
        tasks_repo=FakeTaskRepo(db),
        ledger_repo=FakeLedgerRepo(db),
        rewards_repo=FakeRewardRepo(db),
        extensions_repo=FakeExtensionRepo(db),
        notifications_repo=FakeNotificationRepo(db),
        attendance_repo=FakeAttendanceRepo(db),
        teams_repo=FakeTeamRepo(db),
        **options,
    )


def one_week_later(now: datetime) -> datetime:
    return now + timedelta(days=7)
