"""HR admin engine: audited resource management for users, employees, departments and payroll."""

__version__ = "0.1.0"
