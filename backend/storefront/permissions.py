"""
Permission codes and role mappings.

WHY: Centralized permission definitions ensure consistency across the
application. Roles are fixed (admin, manager, cashier); each role maps to a
static set of permission codes checked by @require_permission.
"""

# =============================================================================
# PERMISSION CATEGORIES
# =============================================================================

class PermissionCategory:
    """Permission categories for organization."""
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    SALES = "SALES"
    USERS = "USERS"
    SYSTEM = "SYSTEM"


# =============================================================================
# PERMISSION DEFINITIONS
# =============================================================================

# Each permission is defined as: (code, name, description, category)
PERMISSION_DEFINITIONS = [
    # CATALOG
    ("VIEW_PRODUCTS", "View Products", "Browse products and categories", PermissionCategory.CATALOG),
    ("MANAGE_PRODUCTS", "Manage Products", "Create and edit products", PermissionCategory.CATALOG),
    ("DELETE_PRODUCT", "Delete Product", "Deactivate products", PermissionCategory.CATALOG),
    ("MANAGE_CATEGORIES", "Manage Categories", "Create, edit and list inactive categories", PermissionCategory.CATALOG),
    ("DELETE_CATEGORY", "Delete Category", "Permanently delete categories", PermissionCategory.CATALOG),

    # INVENTORY
    ("VIEW_INVENTORY", "View Inventory", "View stock levels, ledger entries and movements", PermissionCategory.INVENTORY),
    ("ADJUST_INVENTORY", "Adjust Inventory", "Manual stock corrections (purchase, damage, adjustment)", PermissionCategory.INVENTORY),

    # SALES
    ("CREATE_SALE", "Create Sale", "Post new sales (POS access)", PermissionCategory.SALES),
    ("VIEW_ALL_SALES", "View All Sales", "View sales made by any employee", PermissionCategory.SALES),
    ("EDIT_SALE", "Edit Sale", "Edit customer, notes and payment of a sale", PermissionCategory.SALES),
    ("CANCEL_SALE", "Cancel Sale", "Cancel completed sales and restore stock", PermissionCategory.SALES),
    ("VIEW_SALES_REPORTS", "View Sales Reports", "Access sales statistics and dashboard", PermissionCategory.SALES),

    # USERS
    ("MANAGE_USERS", "Manage Users", "Create, edit, deactivate and delete employees", PermissionCategory.USERS),

    # SYSTEM
    ("VIEW_AUDIT_LOG", "View Audit Log", "Access activity logs", PermissionCategory.SYSTEM),
    ("VIEW_AUDIT_STATS", "View Audit Statistics", "Access system-wide activity statistics", PermissionCategory.SYSTEM),
]


# =============================================================================
# DEFAULT ROLE PERMISSION MAPPINGS
# =============================================================================

# - ADMIN: Full access to everything
# - MANAGER: Catalog, inventory, sale corrections, reports, audit log
# - CASHIER: POS only (sell, browse catalog, view stock); sees own sales

DEFAULT_ROLE_PERMISSIONS = {
    "admin": [perm[0] for perm in PERMISSION_DEFINITIONS],

    "manager": [
        "VIEW_PRODUCTS",
        "MANAGE_PRODUCTS",
        "MANAGE_CATEGORIES",
        "VIEW_INVENTORY",
        "ADJUST_INVENTORY",
        "CREATE_SALE",
        "VIEW_ALL_SALES",
        "EDIT_SALE",
        "CANCEL_SALE",
        "VIEW_SALES_REPORTS",
        "VIEW_AUDIT_LOG",
    ],

    "cashier": [
        "VIEW_PRODUCTS",
        "VIEW_INVENTORY",
        "CREATE_SALE",
        "VIEW_SALES_REPORTS",
    ],
}


# =============================================================================
# PERMISSION HELPERS
# =============================================================================

def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()
