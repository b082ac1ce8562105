"""Markup rule storage in SQLite.

The search engine only reads active rules (``list_active_rules``); the other
functions back the ``skyfare markup`` admin commands.
"""

import logging
import sqlite3
from typing import Iterable, Optional

from . import config
from .models import MARKUP_TYPES, RULE_STATUSES, MarkupRule

logger = logging.getLogger(__name__)

RULES_DIR = config.DATA_DIR
RULES_DB = config.RULES_DB


def _get_conn() -> sqlite3.Connection:
    """Return an open SQLite connection, creating the schema if needed."""
    RULES_DIR.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(RULES_DB)
    conn.row_factory = sqlite3.Row
    conn.execute("""
        CREATE TABLE IF NOT EXISTS markup_rules (
            id            INTEGER PRIMARY KEY AUTOINCREMENT,
            markup_type   TEXT    NOT NULL,
            markup_value  REAL    NOT NULL,
            priority      INTEGER NOT NULL DEFAULT 0,
            airlines      TEXT    NOT NULL DEFAULT '',   -- comma-separated codes
            origin        TEXT,
            status        TEXT    NOT NULL DEFAULT 'active',
            created_at    TEXT    NOT NULL DEFAULT (datetime('now'))
        )
    """)
    conn.commit()
    return conn


def _row_to_rule(row: sqlite3.Row) -> MarkupRule:
    return MarkupRule.from_dict(dict(row))


def add_rule(
    markup_type: str,
    markup_value: float,
    priority: int = 0,
    airlines: Optional[Iterable[str]] = None,
    origin: Optional[str] = None,
    status: str = "active",
) -> int:
    """Persist a new rule. Returns the new rule id."""
    markup_type = markup_type.lower()
    if markup_type not in MARKUP_TYPES:
        raise ValueError(f"Invalid markup type: {markup_type}. Choose from: {', '.join(MARKUP_TYPES)}")
    if markup_value < 0:
        raise ValueError("Markup value must be non-negative")
    if status not in RULE_STATUSES:
        raise ValueError(f"Invalid status: {status}. Choose from: {', '.join(RULE_STATUSES)}")

    codes = ",".join(sorted({a.strip().upper() for a in (airlines or []) if a.strip()}))
    conn = _get_conn()
    cur = conn.execute(
        """
        INSERT INTO markup_rules (markup_type, markup_value, priority, airlines, origin, status)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (markup_type, markup_value, priority, codes, origin.upper() if origin else None, status),
    )
    conn.commit()
    rule_id = cur.lastrowid
    conn.close()
    logger.info(f"Markup rule #{rule_id} created: {markup_value} {markup_type}")
    return rule_id


def list_rules(include_inactive: bool = True) -> list[MarkupRule]:
    """Return stored rules in store (insertion) order."""
    conn = _get_conn()
    where = "" if include_inactive else "WHERE status = 'active'"
    rows = conn.execute(f"SELECT * FROM markup_rules {where} ORDER BY id").fetchall()
    conn.close()
    return [_row_to_rule(r) for r in rows]


def list_active_rules() -> list[MarkupRule]:
    return list_rules(include_inactive=False)


def get_rule(rule_id: int) -> Optional[MarkupRule]:
    conn = _get_conn()
    row = conn.execute("SELECT * FROM markup_rules WHERE id = ?", (rule_id,)).fetchone()
    conn.close()
    return _row_to_rule(row) if row else None


def set_status(rule_id: int, status: str) -> bool:
    """Activate or deactivate a rule. Returns True if the rule exists."""
    if status not in RULE_STATUSES:
        raise ValueError(f"Invalid status: {status}")
    conn = _get_conn()
    cur = conn.execute("UPDATE markup_rules SET status = ? WHERE id = ?", (status, rule_id))
    conn.commit()
    conn.close()
    return cur.rowcount > 0


def remove_rule(rule_id: int) -> bool:
    """Hard-delete a rule. Returns True if a row was deleted."""
    conn = _get_conn()
    cur = conn.execute("DELETE FROM markup_rules WHERE id = ?", (rule_id,))
    conn.commit()
    conn.close()
    return cur.rowcount > 0
