# domain/repositories.py

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple

from aiogram.fsm.state import State

from domain.models.dialogue import Session
from domain.models.groups import Group, GroupRequest, RequestStatus
from domain.models.users import UserInfo


class IUserRepository(Protocol):
    """
    Контракт для работы с пользователями.

    Все методы хранилищ при сбое поднимают StorageError.
    """

    def get_by_id(self, user_id: str) -> Optional[UserInfo]:
        ...

    def create_if_not_exists(self, user_id: str, name: str) -> UserInfo:
        ...

    def set_group(self, user_id: str, group_id: int) -> UserInfo:
        """
        Записать пользователю текущую группу.
        Если пользователя ещё нет, он создаётся с ролью student.
        """
        ...


class IGroupRepository(Protocol):
    """
    Интерфейс (контракт) для работы со справочником групп.

    Сравнение названий везде без учёта регистра.
    """

    def list_active(self, offset: int, limit: int) -> Tuple[List[Group], int]:
        """
        Активные группы, отсортированные по названию.

        Возвращает:
        - группы в диапазоне [offset, offset + limit);
        - общее количество активных групп.
        """
        ...

    def find_active_by_name(self, name: str, limit: int) -> List[Group]:
        """Активные группы с точно таким названием (без учёта регистра)."""
        ...

    def search_active(self, fragment: str, limit: int) -> List[Group]:
        """Активные группы, в названии которых есть fragment, по названию."""
        ...

    def exists(self, name: str) -> bool:
        """
        Проверить, занято ли название.
        Учитываются и неактивные группы.
        """
        ...

    def get_by_id(self, group_id: int) -> Optional[Group]:
        ...

    def create(self, name: str) -> Group:
        """
        Добавить активную группу.

        Если хранилище умеет проверять уникальность названия,
        при повторе поднимается DuplicateGroupError.
        """
        ...


class IGroupRequestRepository(Protocol):
    """
    Контракт для работы с заявками на добавление групп.
    """

    def create(self, requester_id: str, name: str, created_at: datetime) -> GroupRequest:
        """
        Добавить заявку в статусе pending.

        Если хранилище умеет проверять уникальность,
        при второй pending-заявке на то же название поднимается DuplicateRequestError.
        """
        ...

    def pending_exists(self, name: str) -> bool:
        ...

    def list_pending(self, offset: int, limit: int) -> Tuple[List[GroupRequest], int]:
        """Pending-заявки от старых к новым и их общее количество."""
        ...

    def get_pending(self, request_id: int) -> Optional[GroupRequest]:
        """Заявка, если она существует и всё ещё pending, иначе None."""
        ...

    def mark_decided(
        self,
        request_id: int,
        status: RequestStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> Optional[GroupRequest]:
        """
        Перевести заявку из pending в итоговый статус.

        Обновление выполняется только если заявка всё ещё pending:
        кто первый, тот и решил. Иначе возвращается None и ничего не меняется.
        """
        ...


class ISessionStore(Protocol):
    """
    Хранилище состояний диалога по user_id.

    Методы асинхронные: реализация живёт поверх хранилища FSM aiogram.
    """

    async def get(self, user_id: str) -> Session:
        """Состояние пользователя; если его нет — пустое (IDLE)."""
        ...

    async def set(
        self,
        user_id: str,
        step: State,
        params: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Перейти на шаг step, заменив данные шага на params."""
        ...

    async def clear(self, user_id: str) -> None:
        ...
