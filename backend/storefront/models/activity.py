from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z

ACTIVITY_ACTIONS = (
    "login", "logout",
    "create_product", "update_product", "delete_product",
    "create_sale", "update_sale", "cancel_sale", "refund_sale",
    "create_user", "update_user", "delete_user", "deactivate_user",
    "inventory_adjustment",
    "generate_report",
    "backup_data",
    "system_setting_change",
)
ACTIVITY_MODULES = ("auth", "products", "sales", "inventory", "users", "reports", "settings", "system")
ACTIVITY_STATUSES = ("success", "failed", "warning")


class ActivityLog(db.Model):
    """
    Append-only audit trail of user actions.

    Written after the domain transaction commits; entries reference users
    and entities by id only and survive their deletion.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    action = db.Column(db.String(32), nullable=False, index=True)
    module = db.Column(db.String(16), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)

    entity_type = db.Column(db.String(32), nullable=True)
    entity_id = db.Column(db.Integer, nullable=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)
    metadata_json = db.Column("metadata", db.JSON, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="success")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.user.to_dict() if self.user else None,
            "action": self.action,
            "module": self.module,
            "description": self.description,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "metadata": self.metadata_json,
            "status": self.status,
            "createdAt": to_utc_z(self.created_at),
        }
