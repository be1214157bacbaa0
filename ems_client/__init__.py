"""EMS client — API client and workflow controllers for the employee-management backend."""

__version__ = "1.0.0"
