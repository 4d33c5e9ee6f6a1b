"""
Read side: the employee projection and the reference catalogs
"""
import math
from typing import Optional

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from employees_api.core.errors import EmployeeNotFoundError
from employees_api.models.models import (
    OPEN_ENDED,
    Department,
    DepartmentAssignment,
    Employee,
    SalaryAssignment,
    TitleAssignment,
    TitleCatalog,
)
from employees_api.models import schemas

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _current(column, history):
    """Value of ``column`` on the employee's open-ended row, latest from_date first"""
    return (
        select(column)
        .where(history.emp_no == Employee.emp_no, history.to_date == OPEN_ENDED)
        .order_by(history.from_date.desc(), column.desc())
        .limit(1)
        .correlate(Employee)
        .scalar_subquery()
    )


def projection() -> Select:
    """Employee identity joined with current title, salary and department"""
    current_dept_no = _current(DepartmentAssignment.dept_no, DepartmentAssignment)
    dept_name = (
        select(Department.dept_name)
        .where(Department.dept_no == current_dept_no)
        .scalar_subquery()
    )
    return select(
        Employee.emp_no,
        Employee.birth_date,
        Employee.first_name,
        Employee.last_name,
        Employee.gender,
        Employee.hire_date,
        _current(TitleAssignment.title, TitleAssignment).label("title"),
        _current(SalaryAssignment.salary, SalaryAssignment).label("salary"),
        current_dept_no.label("dept_no"),
        dept_name.label("dept_name"),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def name_filter(query: Optional[str]):
    """Case-insensitive substring match on first or last name, or None"""
    term = (query or "").strip()
    if not term:
        return None
    pattern = f"%{_escape_like(term)}%"
    return or_(
        Employee.first_name.ilike(pattern, escape="\\"),
        Employee.last_name.ilike(pattern, escape="\\"),
    )


def clamp_paging(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    if page is None:
        page = 1
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    return max(page, 1), min(max(page_size, 1), MAX_PAGE_SIZE)


def list_employees(
    db: Session,
    page: Optional[int] = 1,
    page_size: Optional[int] = DEFAULT_PAGE_SIZE,
    query: Optional[str] = None,
) -> schemas.EmployeePage:
    """
    Page through the projection ordered by emp_no descending.

    The count and the page are computed with the same predicate so that
    ``total`` always describes the rows being paged.
    """
    page, page_size = clamp_paging(page, page_size)
    predicate = name_filter(query)

    count_stmt = select(func.count()).select_from(Employee)
    rows_stmt = projection()
    if predicate is not None:
        count_stmt = count_stmt.where(predicate)
        rows_stmt = rows_stmt.where(predicate)

    total = db.scalar(count_stmt) or 0
    rows = db.execute(
        rows_stmt
        .order_by(Employee.emp_no.desc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    ).mappings().all()

    return schemas.EmployeePage(
        data=[schemas.EmployeeRow(**row) for row in rows],
        pagination=schemas.Pagination(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size),
        ),
    )


def get_employee(db: Session, emp_no: int) -> schemas.EmployeeRow:
    row = db.execute(
        projection().where(Employee.emp_no == emp_no)
    ).mappings().first()
    if row is None:
        raise EmployeeNotFoundError()
    return schemas.EmployeeRow(**row)


def list_departments(db: Session) -> list[schemas.Department]:
    departments = db.scalars(select(Department).order_by(Department.dept_name)).all()
    return [schemas.Department.model_validate(d) for d in departments]


def list_titles(db: Session) -> list[schemas.Title]:
    titles = db.scalars(select(TitleCatalog).order_by(TitleCatalog.title)).all()
    return [schemas.Title.model_validate(t) for t in titles]
