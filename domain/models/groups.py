import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Group:
    """
    Модель группы.

    Поля:
    - id: числовой идентификатор группы (он же уходит в кнопки grp:pick:<id>).
    - name: название, уникальное без учёта регистра.
    - active: неактивные группы не показываются в списке и не находятся поиском,
      но их название по-прежнему считается занятым.
    """

    id: int
    name: str
    active: bool = True


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class GroupRequest:
    """
    Заявка на добавление группы в справочник.

    Пока status == PENDING, decided_by и decided_at пустые.
    После решения администратора заявка больше не меняется.
    """

    id: int
    name: str
    requester_id: str
    created_at: datetime
    status: RequestStatus = RequestStatus.PENDING
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None


class MatchKind(str, Enum):
    EXACT = "exact"
    SINGLE = "single"
    MANY = "many"
    NONE = "none"


@dataclass
class GroupMatch:
    """Результат поиска группы по тексту, который ввёл пользователь."""

    kind: MatchKind
    groups: List[Group] = field(default_factory=list)


@dataclass
class Page(Generic[T]):
    """
    Одна страница списка.

    page — номер страницы с нуля, уже приведённый в диапазон [0, max_page].
    """

    items: List[T]
    page: int
    page_size: int
    total: int

    @property
    def max_page(self) -> int:
        return max_page_for(self.total, self.page_size)

    @property
    def has_prev(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.max_page


def max_page_for(total: int, page_size: int) -> int:
    """Номер последней страницы: max(0, ceil(total / page_size) - 1)."""
    return max(0, math.ceil(total / page_size) - 1)
