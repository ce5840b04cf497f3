from __future__ import annotations

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import DEFAULT_CLASS_DAYS, SETTING_ACCESS_CODE, SETTING_CLASS_DAYS
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_SUBJECTS = (
    ("matematica", {"it": "Matematica", "en": "Mathematics", "es": "Matemáticas", "fr": "Mathématiques", "de": "Mathematik"}, "➗", "bg-blue-100 text-blue-800"),
    ("italiano", {"it": "Italiano", "en": "Italian", "es": "Italiano", "fr": "Italien", "de": "Italienisch"}, "📝", "bg-green-100 text-green-800"),
    ("inglese", {"it": "Inglese", "en": "English", "es": "Inglés", "fr": "Anglais", "de": "Englisch"}, "🇬🇧", "bg-red-100 text-red-800"),
    ("scienze", {"it": "Scienze", "en": "Science", "es": "Ciencias", "fr": "Sciences", "de": "Naturwissenschaften"}, "🧪", "bg-yellow-100 text-yellow-800"),
    ("storia", {"it": "Storia", "en": "History", "es": "Historia", "fr": "Histoire", "de": "Geschichte"}, "🏛️", "bg-orange-100 text-orange-800"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
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

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "use_pure": True,
    }
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_default_settings(db_config: dict) -> None:
    """Insert class days / access code rows if missing; never overwrites."""

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        defaults = {
            SETTING_CLASS_DAYS: ",".join(str(d) for d in DEFAULT_CLASS_DAYS),
            SETTING_ACCESS_CODE: "",
        }
        for key, value in defaults.items():
            cur.execute("INSERT IGNORE INTO system_settings(`key`, value) VALUES(%s,%s)", (key, value))
        conn.commit()
    finally:
        conn.close()


def ensure_demo_data(db_config: dict) -> None:
    """Demo admin, leader-teacher and student (all approved) plus a subject catalogue."""

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_account(
            *, name: str, email: str, password: str, role: str, is_admin: bool = False, is_leader: bool = False
        ) -> None:
            cur.execute("SELECT id FROM auth_identities WHERE email=%s", (email,))
            existing = cur.fetchone()
            identity_id = existing["id"] if existing else str(uuid.uuid4())
            if existing:
                cur.execute(
                    "UPDATE auth_identities SET password_hash=%s WHERE id=%s",
                    (generate_password_hash(password), identity_id),
                )
            else:
                cur.execute(
                    "INSERT INTO auth_identities(id, email, password_hash) VALUES(%s,%s,%s)",
                    (identity_id, email, generate_password_hash(password)),
                )

            cur.execute(
                """
                INSERT INTO users(id, email, name, phone, role, age, status, is_admin, is_leader)
                VALUES(%s,%s,%s,'',%s,30,'APPROVED',%s,%s)
                ON DUPLICATE KEY UPDATE name=VALUES(name), role=VALUES(role), status='APPROVED',
                    is_admin=VALUES(is_admin), is_leader=VALUES(is_leader)
                """,
                (identity_id, email, name, role, int(is_admin), int(is_leader)),
            )

        upsert_account(name="Admin Demo", email="admin@doposcuola.test", password="admin123", role="TEACHER", is_admin=True)
        upsert_account(name="Leader Demo", email="leader@doposcuola.test", password="leader123", role="TEACHER", is_leader=True)
        upsert_account(name="Studente Demo", email="student@doposcuola.test", password="student123", role="STUDENT")

        for subject_id, translations, icon, color in DEMO_SUBJECTS:
            cur.execute(
                "INSERT IGNORE INTO subjects(id, translations, icon, color, active) VALUES(%s,%s,%s,%s,1)",
                (subject_id, json.dumps(translations, ensure_ascii=False), icon, color),
            )

        conn.commit()
    finally:
        conn.close()
    logger.info("Demo data ready")


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
