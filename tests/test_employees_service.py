from __future__ import annotations

import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from timeclock.db import Base
from timeclock.errors import ApiError, NotFoundError
from timeclock.schemas import EmployeeCreate, EmployeeUpdate
from timeclock.services.employees import (
    create_employee,
    deactivate_employee,
    get_employee,
    list_active_ids,
    list_employees,
    reactivate_employee,
    update_employee,
)


def _build_session() -> Session:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()


class EmployeeDirectoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _build_session()
        self.ana = create_employee(self.db, EmployeeCreate(full_name="Ana Torres", username="atorres"))
        self.bruno = create_employee(
            self.db,
            EmployeeCreate(full_name="Bruno Diaz", username="bdiaz", position="Driver"),
        )

    def tearDown(self) -> None:
        self.db.close()

    def test_duplicate_username_is_rejected(self) -> None:
        with self.assertRaises(ApiError) as exc:
            create_employee(self.db, EmployeeCreate(full_name="Other Ana", username="atorres"))
        self.assertEqual(exc.exception.status_code, 409)
        self.assertEqual(exc.exception.code, "USERNAME_TAKEN")

    def test_get_employee(self) -> None:
        self.assertEqual(get_employee(self.db, self.ana.id).username, "atorres")
        with self.assertRaises(NotFoundError) as exc:
            get_employee(self.db, 999)
        self.assertEqual(exc.exception.code, "EMPLOYEE_NOT_FOUND")

    def test_update_changes_only_sent_fields(self) -> None:
        updated = update_employee(self.db, self.bruno.id, EmployeeUpdate(full_name="Bruno Diaz Rojas"))
        self.assertEqual(updated.full_name, "Bruno Diaz Rojas")
        self.assertEqual(updated.username, "bdiaz")
        self.assertEqual(updated.position, "Driver")

        cleared = update_employee(self.db, self.bruno.id, EmployeeUpdate(position=None))
        self.assertIsNone(cleared.position)

    def test_update_ignores_null_required_fields(self) -> None:
        updated = update_employee(self.db, self.ana.id, EmployeeUpdate(full_name=None, username=None))
        self.assertEqual(updated.full_name, "Ana Torres")
        self.assertEqual(updated.username, "atorres")

    def test_update_to_taken_username_is_conflict(self) -> None:
        with self.assertRaises(ApiError) as exc:
            update_employee(self.db, self.bruno.id, EmployeeUpdate(username="atorres"))
        self.assertEqual(exc.exception.code, "USERNAME_TAKEN")

        self.db.expire_all()
        self.assertEqual(get_employee(self.db, self.bruno.id).username, "bdiaz")

    def test_update_unknown_employee_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            update_employee(self.db, 999, EmployeeUpdate(full_name="Nobody Here"))

    def test_deactivate_and_reactivate_round_trip_active_set(self) -> None:
        deactivate_employee(self.db, self.ana.id)
        self.assertEqual(list_active_ids(self.db), [self.bruno.id])
        self.assertEqual([item.username for item in list_employees(self.db)], ["bdiaz"])
        self.assertEqual(len(list_employees(self.db, include_inactive=True)), 2)

        reactivated = reactivate_employee(self.db, self.ana.id)

        self.assertTrue(reactivated.is_active)
        self.assertEqual(list_active_ids(self.db), [self.ana.id, self.bruno.id])

    def test_reactivate_rejects_active_and_unknown_employees(self) -> None:
        with self.assertRaises(ApiError) as exc:
            reactivate_employee(self.db, self.ana.id)
        self.assertEqual(exc.exception.status_code, 400)
        self.assertEqual(exc.exception.code, "EMPLOYEE_ALREADY_ACTIVE")

        with self.assertRaises(NotFoundError) as missing:
            reactivate_employee(self.db, 999)
        self.assertEqual(missing.exception.code, "EMPLOYEE_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()
