# Overview: Activity audit trail; fire-and-forget writer and read-side queries.

from __future__ import annotations

from flask import current_app
from sqlalchemy import case, func

from ..extensions import db
from ..models import ActivityLog, ACTIVITY_ACTIONS, ACTIVITY_MODULES, ACTIVITY_STATUSES
from .query_utils import Page, apply_date_range, paginate


def log_activity(
    user_id: int | None,
    action: str,
    module: str,
    description: str,
    *,
    entity_type: str | None = None,
    entity_id: int | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    metadata: dict | None = None,
    status: str = "success",
) -> ActivityLog | None:
    """
    Append an activity entry in its own commit.

    Fire-and-forget: the caller's request has already succeeded, so a
    failure here is logged and never surfaces to the client.
    """
    if action not in ACTIVITY_ACTIONS or module not in ACTIVITY_MODULES or status not in ACTIVITY_STATUSES:
        current_app.logger.error("Rejected activity entry action=%s module=%s status=%s", action, module, status)
        return None

    entry = ActivityLog(
        user_id=user_id,
        action=action,
        module=module,
        description=description,
        entity_type=entity_type,
        entity_id=entity_id,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
        metadata_json=metadata,
        status=status,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error logging activity %s for user_id=%s", action, user_id)
        return None
    return entry


def list_activity_logs(
    *,
    user_id: int | None = None,
    action: str | None = None,
    module: str | None = None,
    start=None,
    end=None,
    page: int = 1,
    limit: int = 50,
) -> Page:
    query = db.session.query(ActivityLog)
    if user_id:
        query = query.filter(ActivityLog.user_id == user_id)
    if action:
        query = query.filter(ActivityLog.action == action)
    if module:
        query = query.filter(ActivityLog.module == module)
    query = apply_date_range(query, ActivityLog.created_at, start, end)
    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    return paginate(query, page, limit)


def get_user_activity_summary(user_id: int, start=None, end=None) -> list[dict]:
    """Count of actions performed by one user, most frequent first."""
    count = func.count(ActivityLog.id).label("count")
    query = db.session.query(ActivityLog.action, count).filter(ActivityLog.user_id == user_id)
    query = apply_date_range(query, ActivityLog.created_at, start, end)
    rows = query.group_by(ActivityLog.action).order_by(count.desc()).all()
    return [{"action": action, "count": n} for action, n in rows]


def get_activity_stats(start=None, end=None) -> dict:
    """Per-module counts with success/failed breakdown and the top 10 actions."""
    count = func.count(ActivityLog.id).label("count")
    success = func.sum(case((ActivityLog.status == "success", 1), else_=0)).label("success_count")
    failed = func.sum(case((ActivityLog.status == "failed", 1), else_=0)).label("failed_count")

    by_module_q = db.session.query(ActivityLog.module, count, success, failed)
    by_module_q = apply_date_range(by_module_q, ActivityLog.created_at, start, end)
    by_module = by_module_q.group_by(ActivityLog.module).order_by(count.desc()).all()

    top_q = db.session.query(ActivityLog.action, count)
    top_q = apply_date_range(top_q, ActivityLog.created_at, start, end)
    top_actions = top_q.group_by(ActivityLog.action).order_by(count.desc()).limit(10).all()

    return {
        "byModule": [
            {
                "module": module,
                "count": n,
                "successCount": int(ok or 0),
                "failedCount": int(bad or 0),
            }
            for module, n, ok, bad in by_module
        ],
        "topActions": [{"action": action, "count": n} for action, n in top_actions],
    }
