import unittest
from unittest import mock

from pvz import create_app
from pvz.errors import CommitFailure, ReceptionAlreadyOpenError, RollbackFailure
from pvz.extensions import db
from pvz.models import PickupPoint
from pvz.services.unit_of_work import UnitOfWork
from pvz.time_utils import utcnow


class UnitOfWorkCoordinationTests(unittest.TestCase):
    """Commit/rollback paths against a mocked session."""

    def setUp(self):
        self.session = mock.MagicMock(name="session")
        self.uow = UnitOfWork(self.session)

    def test_success_commits_and_returns_result(self):
        result = self.uow.run(lambda session: "done")

        self.assertEqual(result, "done")
        self.session.commit.assert_called_once_with()
        self.session.rollback.assert_not_called()

    def test_operation_receives_the_session(self):
        seen = []
        self.uow.run(seen.append)
        self.assertEqual(seen, [self.session])

    def test_operation_error_rolls_back_and_propagates_unchanged(self):
        error = ReceptionAlreadyOpenError("already open")

        def _op(session):
            raise error

        with self.assertRaises(ReceptionAlreadyOpenError) as ctx:
            self.uow.run(_op)

        self.assertIs(ctx.exception, error)
        self.session.rollback.assert_called_once_with()
        self.session.commit.assert_not_called()

    def test_commit_failure_is_reported_as_commit_failure(self):
        commit_error = RuntimeError("connection reset")
        self.session.commit.side_effect = commit_error

        with self.assertLogs("pvz.services.unit_of_work", level="ERROR"):
            with self.assertRaises(CommitFailure) as ctx:
                self.uow.run(lambda session: "done")

        self.assertIs(ctx.exception.__cause__, commit_error)
        self.session.rollback.assert_called_once_with()

    def test_rollback_failure_takes_priority_over_operation_error(self):
        op_error = ValueError("bad input")
        rollback_error = RuntimeError("rollback lost connection")
        self.session.rollback.side_effect = rollback_error

        def _op(session):
            raise op_error

        with self.assertLogs("pvz.services.unit_of_work", level="CRITICAL") as logs:
            with self.assertRaises(RollbackFailure) as ctx:
                self.uow.run(_op)

        self.assertIs(ctx.exception.original_error, op_error)
        self.assertIs(ctx.exception.__cause__, rollback_error)
        self.assertTrue(any(r.levelname == "CRITICAL" for r in logs.records))

    def test_rollback_failure_after_commit_failure(self):
        commit_error = RuntimeError("commit failed")
        self.session.commit.side_effect = commit_error
        self.session.rollback.side_effect = RuntimeError("rollback failed")

        with self.assertLogs("pvz.services.unit_of_work", level="ERROR"):
            with self.assertRaises(RollbackFailure) as ctx:
                self.uow.run(lambda session: None)

        self.assertIs(ctx.exception.original_error, commit_error)


class UnitOfWorkDatabaseTests(unittest.TestCase):
    """No partial visibility: a failed operation leaves nothing behind."""

    @classmethod
    def setUpClass(cls):
        cls.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        })
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        db.create_all()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        db.session.query(PickupPoint).delete()
        db.session.commit()

    def test_writes_are_discarded_when_operation_fails(self):
        def _op(session):
            session.add(PickupPoint(registration_date=utcnow(), city="Москва"))
            session.flush()
            raise ValueError("abort after write")

        with self.assertRaises(ValueError):
            UnitOfWork().run(_op)

        self.assertEqual(db.session.query(PickupPoint).count(), 0)

    def test_writes_are_committed_on_success(self):
        def _op(session):
            pickup_point = PickupPoint(registration_date=utcnow(), city="Казань")
            session.add(pickup_point)
            session.flush()
            return pickup_point.id

        pickup_point_id = UnitOfWork().run(_op)

        db.session.expire_all()
        self.assertIsNotNone(db.session.get(PickupPoint, pickup_point_id))
