"""Schema/seed helpers used by startup flags and scripts/init_db.py, scripts/seed_db.py."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo1234"

# (email, full_name, role in the demo organization)
DEMO_USERS = (
    ("owner@demo.local", "Olivia Owner", "owner"),
    ("admin@demo.local", "Adam Admin", "admin"),
    ("supervisor@demo.local", "Sara Supervisor", "supervisor"),
    ("employee@demo.local", "Evan Employee", "employee"),
)
DEMO_ORG_NAME = "Demo Company"


@contextmanager
def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
    finally:
        conn.close()


def _strip_create_db_and_use(sql: str) -> str:
    # Keep the SQL files independent of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script on ';' outside of quoted strings."""

    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\":
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue
        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    target = DBConfig.from_dict(db_config)
    sql = _strip_line_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))

    count = 0
    with _connect(target) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with _connect(target, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("Applied %s schema statement(s) from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Applied %s seed statement(s) from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset) the demo accounts and put them in one demo organization."""

    target = DBConfig.from_dict(db_config)
    with _connect(target) as conn:
        cur = conn.cursor(dictionary=True)
        password_hash = generate_password_hash(DEMO_PASSWORD)

        user_ids: dict[str, int] = {}
        for email, full_name, _ in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users(email, full_name, password_hash, is_active)
                VALUES(%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), password_hash=VALUES(password_hash), is_active=1
                """,
                (email, full_name, password_hash),
            )
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            user_ids[email] = int(cur.fetchone()["user_id"])

        owner_id = user_ids[DEMO_USERS[0][0]]
        cur.execute("SELECT org_id FROM organizations WHERE name=%s AND owner_id=%s", (DEMO_ORG_NAME, owner_id))
        row = cur.fetchone()
        if row:
            org_id = int(row["org_id"])
        else:
            cur.execute(
                "INSERT INTO organizations(name, description, owner_id) VALUES(%s,%s,%s)",
                (DEMO_ORG_NAME, "Seeded demo organization", owner_id),
            )
            org_id = int(cur.lastrowid)

        for email, _, role in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO organization_members(org_id, user_id, role)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE role=VALUES(role)
                """,
                (org_id, user_ids[email], role),
            )

        conn.commit()
    logger.info("Demo users ready (password %r)", DEMO_PASSWORD)


def list_tables(db_config: dict) -> list[str]:
    with _connect(DBConfig.from_dict(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
