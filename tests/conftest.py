"""
Shared fixtures.

Every test gets a fresh in-memory store. Coroutines are driven with
asyncio.run through the `run` fixture, and bcrypt uses the minimum cost
factor so hashing stays fast.
"""

import asyncio
from datetime import date, datetime, timezone

import pytest

from homeledger.audit import AuditLogger
from homeledger.config import Settings
from homeledger.models import AuditEventType, NewUser, Session, UserRole
from homeledger.orchestrator import AppComponents
from homeledger.queries import ReportService
from homeledger.services.auth import AuthService, PasswordHasher, SessionManager
from homeledger.services.setup import InitializationSequencer
from homeledger.services.storage import (
    CategoryRepository,
    ExpenseRepository,
    InMemoryKeyValueBackend,
    JSONStore,
    UserRepository,
)
from homeledger.validation import InputValidator


FIXED_TODAY = date(2024, 3, 15)
FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class RecordingAuditLogger(AuditLogger):
    """Keeps events in memory instead of writing log lines."""

    def __init__(self):
        super().__init__("homeledger.tests")
        self.events = []

    def log(self, event):
        self.events.append(event)

    def types(self) -> list[AuditEventType]:
        return [event.event_type for event in self.events]


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def audit():
    return RecordingAuditLogger()


@pytest.fixture
def backend():
    return InMemoryKeyValueBackend()


@pytest.fixture
def store(backend, audit):
    return JSONStore(backend, audit)


@pytest.fixture
def users(store, audit):
    return UserRepository(store, audit)


@pytest.fixture
def categories(store, audit):
    return CategoryRepository(store, audit)


@pytest.fixture
def expenses(store, audit):
    return ExpenseRepository(store, audit)


@pytest.fixture
def sessions(store, audit):
    return SessionManager(store, audit)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def validator():
    return InputValidator(min_password_length=6, today=lambda: FIXED_TODAY)


@pytest.fixture
def auth(users, sessions, hasher, validator, audit):
    return AuthService(
        users=users,
        sessions=sessions,
        hasher=hasher,
        validator=validator,
        audit_logger=audit,
    )


@pytest.fixture
def sequencer(store, users, categories, auth, validator, audit):
    return InitializationSequencer(
        store=store,
        users=users,
        categories=categories,
        auth=auth,
        validator=validator,
        audit_logger=audit,
    )


@pytest.fixture
def reports(expenses, categories):
    return ReportService(expenses, categories, recent_limit=5)


@pytest.fixture
def components(store, audit, monkeypatch):
    monkeypatch.setenv("HOMELEDGER_AUTH_BCRYPT_ROUNDS", "4")
    return AppComponents(store, Settings(), audit)


@pytest.fixture
def admin(run, auth):
    """An admin account with password 'secret1'."""
    return run(auth.create_user(NewUser(
        name="Administrator",
        username="admin",
        password="secret1",
        role=UserRole.ADMIN,
    )))


@pytest.fixture
def member(run, auth):
    """A regular account with password 'hunter22'."""
    return run(auth.create_user(NewUser(
        name="Budi",
        username="budi",
        password="hunter22",
        role=UserRole.USER,
    )))


@pytest.fixture
def admin_session(admin):
    return Session(user_id=admin.id, username=admin.username, name=admin.name, role=UserRole.ADMIN)


@pytest.fixture
def member_session(member):
    return Session(user_id=member.id, username=member.username, name=member.name, role=UserRole.USER)
