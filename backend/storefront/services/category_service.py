# Overview: Product category maintenance.

from __future__ import annotations

from ..extensions import db
from ..errors import ConflictError, NotFoundError
from ..models import Category
from ..validation import ModelValidationPolicy, validate_payload

CATEGORY_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "display_name", "description"},
    required_on_create={"name", "display_name"},
    aliases={"displayName": "display_name"},
    ignored_fields={"id", "_id", "createdAt", "updatedAt", "createdBy"},
)

# name is the lookup key stored on products; it is fixed after creation
CATEGORY_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"display_name", "description", "is_active"},
    aliases={"displayName": "display_name", "isActive": "is_active"},
    ignored_fields={"id", "_id", "name", "createdAt", "updatedAt", "createdBy"},
)


def list_categories(*, include_inactive: bool = False) -> list[Category]:
    query = db.session.query(Category)
    if not include_inactive:
        query = query.filter(Category.is_active.is_(True))
    return query.order_by(Category.display_name.asc()).all()


def get_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


def create_category(payload: dict, actor_user_id: int | None) -> Category:
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_CREATE_POLICY, partial=False)
    patch["name"] = patch["name"].lower()

    if db.session.query(Category.id).filter(Category.name == patch["name"]).first():
        raise ConflictError("Category already exists", details={"name": patch["name"]})

    category = Category(created_by_user_id=actor_user_id, **patch)
    db.session.add(category)
    db.session.commit()
    return category


def update_category(category_id: int, payload: dict) -> Category:
    category = get_category(category_id)
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_UPDATE_POLICY, partial=True)
    for key, value in patch.items():
        setattr(category, key, value)
    db.session.commit()
    return category


def delete_category(category_id: int) -> None:
    """Permanent delete. Products keep their category string."""
    category = get_category(category_id)
    db.session.delete(category)
    db.session.commit()
