# infrastructure/memory/repositories.py

"""
Репозитории в памяти процесса.

Используются для локального запуска (STORAGE_BACKEND=memory) и в тестах.
В отличие от Google-таблицы, здесь названия групп и pending-заявок
уникальны «по-настоящему»: повтор поднимает DuplicateGroupError /
DuplicateRequestError.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from domain.errors import DuplicateGroupError, DuplicateRequestError
from domain.models.groups import Group, GroupRequest, RequestStatus
from domain.models.users import UserInfo, UserRole
from domain.repositories import IGroupRepository, IGroupRequestRepository, IUserRepository


def _norm(name: str) -> str:
    return name.strip().casefold()


class InMemoryUserRepository(IUserRepository):
    def __init__(self, admin_ids: Iterable[str] = ()) -> None:
        self._users: Dict[str, UserInfo] = {}
        self._admin_ids = {str(uid) for uid in admin_ids}
        self._lock = threading.Lock()
        # Администраторы известны заранее, даже если ещё не писали боту
        for uid in self._admin_ids:
            self._users[uid] = UserInfo(user_id=uid, role=UserRole.ADMIN)

    def get_by_id(self, user_id: str) -> Optional[UserInfo]:
        user = self._users.get(str(user_id))
        return replace(user) if user is not None else None

    def create_if_not_exists(self, user_id: str, name: str) -> UserInfo:
        with self._lock:
            user = self._get_or_create(str(user_id), name)
            return replace(user)

    def set_group(self, user_id: str, group_id: int) -> UserInfo:
        with self._lock:
            user = self._get_or_create(str(user_id), "")
            user.group_id = group_id
            return replace(user)

    def set_role(self, user_id: str, role: UserRole) -> None:
        """Выставить роль (в таблице это делают руками, здесь — для тестов и bootstrap)."""
        with self._lock:
            self._get_or_create(str(user_id), "").role = role

    def _get_or_create(self, user_id: str, name: str) -> UserInfo:
        user = self._users.get(user_id)
        if user is None:
            role = UserRole.ADMIN if user_id in self._admin_ids else UserRole.STUDENT
            user = UserInfo(user_id=user_id, name=name, role=role)
            self._users[user_id] = user
        return user


class InMemoryGroupRepository(IGroupRepository):
    def __init__(self, names: Iterable[str] = ()) -> None:
        self._groups: Dict[int, Group] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        for name in names:
            if not self._name_taken(name):
                self.create(name)

    def _sorted_active(self) -> List[Group]:
        active = [g for g in self._groups.values() if g.active]
        return sorted(active, key=lambda g: (g.name.casefold(), g.id))

    def list_active(self, offset: int, limit: int) -> Tuple[List[Group], int]:
        active = self._sorted_active()
        return [replace(g) for g in active[offset:offset + limit]], len(active)

    def find_active_by_name(self, name: str, limit: int) -> List[Group]:
        wanted = _norm(name)
        found = [g for g in self._sorted_active() if _norm(g.name) == wanted]
        return [replace(g) for g in found[:limit]]

    def search_active(self, fragment: str, limit: int) -> List[Group]:
        wanted = _norm(fragment)
        found = [g for g in self._sorted_active() if wanted in g.name.casefold()]
        return [replace(g) for g in found[:limit]]

    def exists(self, name: str) -> bool:
        return self._name_taken(name)

    def _name_taken(self, name: str) -> bool:
        wanted = _norm(name)
        return any(_norm(g.name) == wanted for g in self._groups.values())

    def get_by_id(self, group_id: int) -> Optional[Group]:
        group = self._groups.get(group_id)
        return replace(group) if group is not None else None

    def create(self, name: str) -> Group:
        with self._lock:
            if self._name_taken(name):
                raise DuplicateGroupError(name.strip())
            group = Group(id=self._next_id, name=name.strip())
            self._groups[group.id] = group
            self._next_id += 1
            return replace(group)

    def deactivate(self, group_id: int) -> None:
        """Скрыть группу из списка; название остаётся занятым."""
        with self._lock:
            self._groups[group_id].active = False

    def count(self) -> int:
        return len(self._groups)


class InMemoryGroupRequestRepository(IGroupRequestRepository):
    def __init__(self) -> None:
        self._requests: Dict[int, GroupRequest] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, requester_id: str, name: str, created_at: datetime) -> GroupRequest:
        with self._lock:
            if self._pending_taken(name):
                raise DuplicateRequestError(name.strip())
            request = GroupRequest(
                id=self._next_id,
                name=name.strip(),
                requester_id=str(requester_id),
                created_at=created_at,
            )
            self._requests[request.id] = request
            self._next_id += 1
            return replace(request)

    def pending_exists(self, name: str) -> bool:
        return self._pending_taken(name)

    def _pending_taken(self, name: str) -> bool:
        wanted = _norm(name)
        return any(
            r.status == RequestStatus.PENDING and _norm(r.name) == wanted
            for r in self._requests.values()
        )

    def list_pending(self, offset: int, limit: int) -> Tuple[List[GroupRequest], int]:
        pending = sorted(
            (r for r in self._requests.values() if r.status == RequestStatus.PENDING),
            key=lambda r: (r.created_at, r.id),
        )
        return [replace(r) for r in pending[offset:offset + limit]], len(pending)

    def get_pending(self, request_id: int) -> Optional[GroupRequest]:
        request = self._requests.get(request_id)
        if request is None or request.status != RequestStatus.PENDING:
            return None
        return replace(request)

    def get_by_id(self, request_id: int) -> Optional[GroupRequest]:
        request = self._requests.get(request_id)
        return replace(request) if request is not None else None

    def mark_decided(
        self,
        request_id: int,
        status: RequestStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> Optional[GroupRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            if request is None or request.status != RequestStatus.PENDING:
                return None
            request.status = status
            request.decided_by = str(decided_by)
            request.decided_at = decided_at
            return replace(request)
