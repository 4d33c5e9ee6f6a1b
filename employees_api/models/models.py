"""
SQLAlchemy models for the employees schema
"""
from datetime import date
from sqlalchemy import Column, Integer, String, Date, Enum, ForeignKey, Index
from sqlalchemy.orm import relationship
from employees_api.db.database import Base

# to_date of the open-ended ("current") row in every history table
OPEN_ENDED = date(9999, 1, 1)


class Department(Base):
    __tablename__ = "departments"

    dept_no = Column(String(4), primary_key=True)
    dept_name = Column(String(40), nullable=False, unique=True)

    def __repr__(self):
        return f"<Department(dept_no={self.dept_no}, name={self.dept_name})>"


class TitleCatalog(Base):
    __tablename__ = "title_catalog"

    title = Column(String(50), primary_key=True)

    def __repr__(self):
        return f"<TitleCatalog(title={self.title})>"


class Employee(Base):
    __tablename__ = "employees"

    # Assigned by the writer as max(emp_no) + 1, not by the database
    emp_no = Column(Integer, primary_key=True, autoincrement=False)
    birth_date = Column(Date, nullable=False)
    first_name = Column(String(14), nullable=False)
    last_name = Column(String(16), nullable=False)
    gender = Column(Enum("M", "F", name="employee_gender"), nullable=False)
    hire_date = Column(Date, nullable=False)

    # Owned histories
    titles = relationship("TitleAssignment", back_populates="employee")
    salaries = relationship("SalaryAssignment", back_populates="employee")
    departments = relationship("DepartmentAssignment", back_populates="employee")

    __table_args__ = (
        Index("idx_employees_names", "last_name", "first_name"),
    )

    def __repr__(self):
        return f"<Employee(emp_no={self.emp_no}, name={self.first_name} {self.last_name})>"


class TitleAssignment(Base):
    __tablename__ = "titles"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    title = Column(String(50), primary_key=True)
    from_date = Column(Date, primary_key=True)
    to_date = Column(Date, nullable=False)

    employee = relationship("Employee", back_populates="titles")

    __table_args__ = (
        Index("idx_titles_emp_to_date", "emp_no", "to_date"),
    )

    def __repr__(self):
        return f"<TitleAssignment(emp_no={self.emp_no}, title={self.title}, from={self.from_date}, to={self.to_date})>"


class SalaryAssignment(Base):
    __tablename__ = "salaries"

    # One row per employee per from_date; same-day changes update in place
    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    from_date = Column(Date, primary_key=True)
    salary = Column(Integer, nullable=False)
    to_date = Column(Date, nullable=False)

    employee = relationship("Employee", back_populates="salaries")

    __table_args__ = (
        Index("idx_salaries_emp_to_date", "emp_no", "to_date"),
    )

    def __repr__(self):
        return f"<SalaryAssignment(emp_no={self.emp_no}, salary={self.salary}, from={self.from_date}, to={self.to_date})>"


class DepartmentAssignment(Base):
    __tablename__ = "dept_emp"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    dept_no = Column(String(4), ForeignKey("departments.dept_no"), primary_key=True)
    from_date = Column(Date, primary_key=True)
    to_date = Column(Date, nullable=False)

    employee = relationship("Employee", back_populates="departments")
    department = relationship("Department")

    __table_args__ = (
        Index("idx_dept_emp_emp_to_date", "emp_no", "to_date"),
    )

    def __repr__(self):
        return f"<DepartmentAssignment(emp_no={self.emp_no}, dept_no={self.dept_no}, from={self.from_date}, to={self.to_date})>"


class DepartmentManager(Base):
    __tablename__ = "dept_manager"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    dept_no = Column(String(4), ForeignKey("departments.dept_no"), primary_key=True)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)

    def __repr__(self):
        return f"<DepartmentManager(emp_no={self.emp_no}, dept_no={self.dept_no})>"
