"""
Общие фикстуры: сервис диалога поверх репозиториев в памяти.
"""

import asyncio

import pytest
from aiogram.fsm.storage.memory import MemoryStorage

from application.usecases.group_dialogue import GroupDialogueService
from application.usecases.group_registry import GroupRegistryService
from application.usecases.group_requests import GroupRequestLedger
from application.usecases.user_groups import UserGroupsService
from domain.models.dialogue import IncomingEvent
from infrastructure.fsm.session_store import FSMSessionStore
from infrastructure.memory.repositories import (
    InMemoryGroupRepository,
    InMemoryGroupRequestRepository,
    InMemoryUserRepository,
)

ADMIN_ID = "900"
STUDENT_ID = "100"
BOT_ID = 42


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def group_repo():
    return InMemoryGroupRepository()


@pytest.fixture
def request_repo():
    return InMemoryGroupRequestRepository()


@pytest.fixture
def user_repo():
    return InMemoryUserRepository(admin_ids=[ADMIN_ID])


@pytest.fixture
def sessions():
    return FSMSessionStore(MemoryStorage(), bot_id=BOT_ID)


@pytest.fixture
def registry(group_repo):
    return GroupRegistryService(group_repo=group_repo)


@pytest.fixture
def ledger(request_repo, group_repo):
    return GroupRequestLedger(request_repo=request_repo, group_repo=group_repo)


@pytest.fixture
def users(user_repo, group_repo):
    return UserGroupsService(user_repo=user_repo, group_repo=group_repo)


@pytest.fixture
def dialogue(registry, ledger, users, sessions):
    return GroupDialogueService(
        registry=registry,
        ledger=ledger,
        users=users,
        sessions=sessions,
        page_size=8,
    )


def message_event(user_id: str = STUDENT_ID) -> IncomingEvent:
    return IncomingEvent(user_id=user_id, chat_id=int(user_id), user_name="Test User")


def button_event(user_id: str = STUDENT_ID, message_id: int = 55) -> IncomingEvent:
    return IncomingEvent(
        user_id=user_id,
        chat_id=int(user_id),
        user_name="Test User",
        message_id=message_id,
        event_id=f"cb-{user_id}",
    )
