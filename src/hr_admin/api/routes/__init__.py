"""API routes."""

from hr_admin.api.routes.audit import router as audit_router
from hr_admin.api.routes.departments import router as departments_router
from hr_admin.api.routes.employees import router as employees_router
from hr_admin.api.routes.health import router as health_router
from hr_admin.api.routes.payrolls import router as payrolls_router
from hr_admin.api.routes.stats import router as stats_router
from hr_admin.api.routes.users import router as users_router

__all__ = [
    "audit_router",
    "departments_router",
    "employees_router",
    "health_router",
    "payrolls_router",
    "stats_router",
    "users_router",
]
