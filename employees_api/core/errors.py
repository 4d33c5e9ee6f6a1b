"""
Domain errors raised by the employee services.

Every error carries the HTTP status it maps to and the message returned to the
caller. Server-side detail goes to the log, never into ``message``.
"""


class EmployeesAPIError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(EmployeesAPIError):
    """Missing, empty or invalid caller input."""
    status_code = 400
    message = "Invalid request"


class EmployeeNotFoundError(EmployeesAPIError):
    status_code = 404
    message = "Employee not found"


class EmployeeConflictError(EmployeesAPIError):
    """emp_no allocation kept colliding with concurrent creates."""
    status_code = 409
    message = "Employee number conflict, please retry"
