from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.factory import ArrivalStrategyFactory
from .attendance.history_service import AttendanceHistoryService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_DUE_REMINDER_HOURS,
    DEFAULT_HISTORY_DAYS,
    DEFAULT_HISTORY_PAGE_SIZE,
    DEFAULT_INVITE_EXPIRY_DAYS,
)
from .database.connection import DBConfig, DatabaseConnection
from .extensions.mysql_extension_repository import MySQLExtensionRepository
from .extensions.service import ExtensionService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.reminders import DueReminderJob
from .notifications.service import NotificationService
from .organizations.invite_service import InviteService
from .organizations.mysql_invite_repository import MySQLInviteRepository
from .organizations.mysql_organization_repository import MySQLMemberRepository, MySQLOrganizationRepository
from .organizations.policy import AccessPolicy
from .organizations.service import MembershipService, OrganizationService
from .points.mysql_ledger_repository import MySQLLedgerRepository
from .points.mysql_reward_repository import MySQLRewardRepository
from .points.service import PointsService
from .points.shop_service import ShopService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.service import TeamService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: Any
    orgs_repo: Any
    members_repo: Any
    invites_repo: Any
    projects_repo: Any
    tasks_repo: Any
    ledger_repo: Any
    rewards_repo: Any
    extensions_repo: Any
    notifications_repo: Any
    attendance_repo: Any
    teams_repo: Any

    policy: AccessPolicy
    auth_service: AuthService
    user_service: UserService
    organization_service: OrganizationService
    membership_service: MembershipService
    invite_service: InviteService
    project_service: ProjectService
    task_service: TaskService
    points_service: PointsService
    shop_service: ShopService
    extension_service: ExtensionService
    notification_service: NotificationService
    due_reminder_job: DueReminderJob
    attendance_service: AttendanceService
    attendance_history_service: AttendanceHistoryService
    team_service: TeamService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    users_repo,
    orgs_repo,
    members_repo,
    invites_repo,
    projects_repo,
    tasks_repo,
    ledger_repo,
    rewards_repo,
    extensions_repo,
    notifications_repo,
    attendance_repo,
    teams_repo,
    history_days: int = DEFAULT_HISTORY_DAYS,
    history_page_size: int = DEFAULT_HISTORY_PAGE_SIZE,
    invite_expiry_days: int = DEFAULT_INVITE_EXPIRY_DAYS,
    due_reminder_hours: int = DEFAULT_DUE_REMINDER_HOURS,
) -> Container:
    """Build every service on top of the given repositories.

    Tests pass in-memory repositories here; production goes through build_container().
    """

    policy = AccessPolicy(members_repo)
    strategy_factory = ArrivalStrategyFactory()

    notification_service = NotificationService(notifications_repo)
    points_service = PointsService(ledger_repo, policy)
    attendance_service = AttendanceService(
        attendance_repo, orgs_repo, members_repo, policy, strategy_factory=strategy_factory
    )
    organization_service = OrganizationService(orgs_repo, policy, members_repo, attendance=attendance_service)

    return Container(
        conn=conn,
        users_repo=users_repo,
        orgs_repo=orgs_repo,
        members_repo=members_repo,
        invites_repo=invites_repo,
        projects_repo=projects_repo,
        tasks_repo=tasks_repo,
        ledger_repo=ledger_repo,
        rewards_repo=rewards_repo,
        extensions_repo=extensions_repo,
        notifications_repo=notifications_repo,
        attendance_repo=attendance_repo,
        teams_repo=teams_repo,
        policy=policy,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        organization_service=organization_service,
        membership_service=MembershipService(members_repo, policy),
        invite_service=InviteService(
            invites_repo, policy, users_repo, expiry_days=invite_expiry_days, organizations=organization_service
        ),
        project_service=ProjectService(projects_repo, tasks_repo, policy),
        task_service=TaskService(
            tasks_repo,
            projects_repo,
            policy,
            users_repo,
            points=points_service,
            notifications=notification_service,
        ),
        points_service=points_service,
        shop_service=ShopService(rewards_repo, ledger_repo, policy),
        extension_service=ExtensionService(
            extensions_repo,
            tasks_repo,
            policy,
            members_repo,
            users_repo,
            notifications=notification_service,
        ),
        notification_service=notification_service,
        due_reminder_job=DueReminderJob(
            tasks_repo, notifications_repo, notification_service, within_hours=due_reminder_hours
        ),
        attendance_service=attendance_service,
        attendance_history_service=AttendanceHistoryService(
            attendance_repo,
            orgs_repo,
            members_repo,
            policy,
            strategy_factory=strategy_factory,
            history_days=history_days,
            page_size=history_page_size,
        ),
        team_service=TeamService(teams_repo, policy),
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        orgs_repo=MySQLOrganizationRepository(conn),
        members_repo=MySQLMemberRepository(conn),
        invites_repo=MySQLInviteRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        ledger_repo=MySQLLedgerRepository(conn),
        rewards_repo=MySQLRewardRepository(conn),
        extensions_repo=MySQLExtensionRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        history_days=int(getattr(settings, "HISTORY_DAYS", DEFAULT_HISTORY_DAYS)),
        history_page_size=int(getattr(settings, "HISTORY_PAGE_SIZE", DEFAULT_HISTORY_PAGE_SIZE)),
        invite_expiry_days=int(getattr(settings, "INVITE_EXPIRY_DAYS", DEFAULT_INVITE_EXPIRY_DAYS)),
        due_reminder_hours=int(getattr(settings, "DUE_REMINDER_HOURS", DEFAULT_DUE_REMINDER_HOURS)),
    )
