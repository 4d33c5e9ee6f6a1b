"""
Write side of the employee aggregate.

An employee is one ``employees`` row plus three effective-dated histories
(``titles``, ``salaries``, ``dept_emp``). Each command runs in a single
transaction opened with ``session.begin()`` so that any exception rolls every
statement back before the session's connection goes back to the pool.
"""
import logging
from datetime import date

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from employees_api.core.config import settings
from employees_api.core.errors import (
    EmployeeConflictError,
    EmployeeNotFoundError,
    ValidationError,
)
from employees_api.models.models import (
    OPEN_ENDED,
    Department,
    DepartmentAssignment,
    DepartmentManager,
    Employee,
    SalaryAssignment,
    TitleAssignment,
    TitleCatalog,
)
from employees_api.models import schemas
from employees_api.services import employee_queries

logger = logging.getLogger(__name__)


def _next_emp_no(db: Session) -> int:
    # Not a sequence: two concurrent creates may read the same value, the
    # primary key rejects the second insert.
    return (db.scalar(select(func.max(Employee.emp_no))) or 0) + 1


def _emp_no_taken(db: Session, emp_no: int) -> bool:
    return db.scalar(select(Employee.emp_no).where(Employee.emp_no == emp_no)) is not None


def _check_catalogs(db: Session, title: str | None, dept_no: str | None) -> None:
    if title is not None and db.get(TitleCatalog, title) is None:
        raise ValidationError(f"Unknown title: {title}")
    if dept_no is not None and db.get(Department, dept_no) is None:
        raise ValidationError(f"Unknown department: {dept_no}")


def _lock_employee(db: Session, emp_no: int) -> None:
    exists = db.scalar(
        select(Employee.emp_no).where(Employee.emp_no == emp_no).with_for_update()
    )
    if exists is None:
        raise EmployeeNotFoundError()


def create_employee(db: Session, data: schemas.EmployeeCreate, today: date) -> schemas.Employee:
    """
    Insert an employee and open its title, salary and department histories.

    ``hire_date`` and every ``from_date`` are ``today``. An emp_no collision
    with a concurrent create is retried with a fresh number up to
    ``settings.emp_no_retries`` times.
    """
    attempts = max(settings.emp_no_retries, 1)
    for attempt in range(1, attempts + 1):
        emp_no = None
        try:
            with db.begin():
                _check_catalogs(db, data.title, data.dept_no)
                emp_no = _next_emp_no(db)
                db.execute(
                    insert(Employee).values(
                        emp_no=emp_no,
                        birth_date=data.birth_date,
                        first_name=data.first_name,
                        last_name=data.last_name,
                        gender=data.gender,
                        hire_date=today,
                    )
                )
                db.execute(
                    insert(TitleAssignment).values(
                        emp_no=emp_no, title=data.title, from_date=today, to_date=OPEN_ENDED
                    )
                )
                db.execute(
                    insert(SalaryAssignment).values(
                        emp_no=emp_no, salary=data.salary, from_date=today, to_date=OPEN_ENDED
                    )
                )
                db.execute(
                    insert(DepartmentAssignment).values(
                        emp_no=emp_no, dept_no=data.dept_no, from_date=today, to_date=OPEN_ENDED
                    )
                )
        except IntegrityError:
            if emp_no is None or not _emp_no_taken(db, emp_no):
                raise
            db.rollback()
            logger.warning(
                "emp_no %s taken by a concurrent create (attempt %d/%d)",
                emp_no, attempt, attempts,
            )
            continue

        logger.info("Created employee %s", emp_no)
        return schemas.Employee(
            emp_no=emp_no,
            birth_date=data.birth_date,
            first_name=data.first_name,
            last_name=data.last_name,
            gender=data.gender,
            hire_date=today,
        )

    raise EmployeeConflictError()


def _reopen_or_insert(db: Session, history, emp_no: int, today: date, **key) -> None:
    # A row with the same key may already exist from an earlier change today;
    # it is reopened instead of inserted twice.
    reopened = db.execute(
        update(history)
        .where(
            history.emp_no == emp_no,
            history.from_date == today,
            *(getattr(history, name) == value for name, value in key.items()),
        )
        .values(to_date=OPEN_ENDED)
    )
    if reopened.rowcount == 0:
        db.execute(
            insert(history).values(emp_no=emp_no, from_date=today, to_date=OPEN_ENDED, **key)
        )


def _change_title(db: Session, emp_no: int, title: str, today: date) -> None:
    db.execute(
        update(TitleAssignment)
        .where(TitleAssignment.emp_no == emp_no, TitleAssignment.to_date == OPEN_ENDED)
        .values(to_date=today)
    )
    _reopen_or_insert(db, TitleAssignment, emp_no, today, title=title)


def _change_salary(db: Session, emp_no: int, salary: int, today: date) -> None:
    same_day = db.scalar(
        select(SalaryAssignment.salary).where(
            SalaryAssignment.emp_no == emp_no, SalaryAssignment.from_date == today
        )
    )
    if same_day is not None:
        db.execute(
            update(SalaryAssignment)
            .where(SalaryAssignment.emp_no == emp_no, SalaryAssignment.from_date == today)
            .values(salary=salary)
        )
        return
    db.execute(
        update(SalaryAssignment)
        .where(SalaryAssignment.emp_no == emp_no, SalaryAssignment.to_date == OPEN_ENDED)
        .values(to_date=today)
    )
    db.execute(
        insert(SalaryAssignment).values(
            emp_no=emp_no, salary=salary, from_date=today, to_date=OPEN_ENDED
        )
    )


def _change_department(db: Session, emp_no: int, dept_no: str, today: date) -> None:
    # Hard cutover: every assignment still open after today is closed,
    # not only the current one.
    db.execute(
        update(DepartmentAssignment)
        .where(DepartmentAssignment.emp_no == emp_no, DepartmentAssignment.to_date > today)
        .values(to_date=today)
    )
    _reopen_or_insert(db, DepartmentAssignment, emp_no, today, dept_no=dept_no)


def update_employee(
    db: Session, emp_no: int, patch: schemas.EmployeeUpdate, today: date
) -> schemas.EmployeeRow:
    """Apply a partial update and return the refreshed projection row"""
    with db.begin():
        _lock_employee(db, emp_no)
        if patch.is_empty():
            raise ValidationError("Nothing to update")
        _check_catalogs(db, patch.title, patch.dept_no)

        changes = patch.identity_changes()
        if changes:
            db.execute(
                update(Employee).where(Employee.emp_no == emp_no).values(**changes)
            )
        if patch.title is not None:
            _change_title(db, emp_no, patch.title, today)
        if patch.salary is not None:
            _change_salary(db, emp_no, patch.salary, today)
        if patch.dept_no is not None:
            _change_department(db, emp_no, patch.dept_no, today)

    logger.info("Updated employee %s (%s)", emp_no, ", ".join(
        sorted(patch.model_dump(exclude_none=True))
    ))
    return employee_queries.get_employee(db, emp_no)


def delete_employee(db: Session, emp_no: int) -> None:
    """Remove the employee and every history row it owns"""
    with db.begin():
        _lock_employee(db, emp_no)
        for owned in (DepartmentManager, DepartmentAssignment, TitleAssignment, SalaryAssignment):
            db.execute(delete(owned).where(owned.emp_no == emp_no))
        result = db.execute(delete(Employee).where(Employee.emp_no == emp_no))
        if result.rowcount == 0:
            raise EmployeeNotFoundError()

    logger.info("Deleted employee %s", emp_no)
