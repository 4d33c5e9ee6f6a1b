"""
API endpoints for the employees service
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from employees_api.db.database import get_db
from employees_api.models import schemas
from employees_api.services import employee_queries, employee_writer

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": schemas.ErrorResponse},
    404: {"model": schemas.ErrorResponse},
}


def get_today() -> date:
    """Effective date for new history rows (UTC calendar day)"""
    return datetime.now(timezone.utc).date()


# Health check endpoint
@health_router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        ok = db.execute(text("SELECT 1")).scalar() == 1
    except Exception:
        logger.exception("Health check failed")
        return JSONResponse(status_code=500, content={"status": "error"})
    return {"status": "ok", "db": "up" if ok else "down"}


# Employees
@router.get("/employees", response_model=schemas.EmployeePage, tags=["Employees"])
def list_employees(
    page: int = Query(default=1),
    page_size: int = Query(default=employee_queries.DEFAULT_PAGE_SIZE, alias="pageSize"),
    q: Optional[str] = Query(default=None, description="Search by first or last name"),
    db: Session = Depends(get_db),
):
    """List employees, newest emp_no first, with pagination and name search"""
    return employee_queries.list_employees(db, page=page, page_size=page_size, query=q)


@router.get(
    "/employees/{emp_no}",
    response_model=schemas.EmployeeRow,
    responses=ERROR_RESPONSES,
    tags=["Employees"],
)
def get_employee(emp_no: int, db: Session = Depends(get_db)):
    """Get one employee by emp_no"""
    return employee_queries.get_employee(db, emp_no)


@router.post(
    "/employees",
    response_model=schemas.Employee,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": schemas.ErrorResponse}, 409: {"model": schemas.ErrorResponse}},
    tags=["Employees"],
)
def create_employee(
    payload: schemas.EmployeeCreate,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Create an employee hired today, with its first title, salary and
    department assignment
    """
    return employee_writer.create_employee(db, payload, today)


@router.put(
    "/employees/{emp_no}",
    response_model=schemas.EmployeeRow,
    responses=ERROR_RESPONSES,
    tags=["Employees"],
)
def update_employee(
    emp_no: int,
    payload: schemas.EmployeeUpdate,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Update any subset of an employee's fields"""
    return employee_writer.update_employee(db, emp_no, payload, today)


@router.delete(
    "/employees/{emp_no}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": schemas.ErrorResponse}},
    tags=["Employees"],
)
def delete_employee(emp_no: int, db: Session = Depends(get_db)):
    """Delete an employee together with its title, salary and department history"""
    employee_writer.delete_employee(db, emp_no)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Catalogs
@router.get("/departments", response_model=List[schemas.Department], tags=["Departments"])
def list_departments(db: Session = Depends(get_db)):
    """All departments ordered by name"""
    return employee_queries.list_departments(db)


@router.get("/titles", response_model=List[schemas.Title], tags=["Titles"])
def list_titles(db: Session = Depends(get_db)):
    """All catalog titles in alphabetical order"""
    return employee_queries.list_titles(db)
