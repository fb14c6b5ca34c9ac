from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


@dataclass
class UserInfo:
    """
    Пользователь бота.

    Поля:
    - user_id: telegram user id (строкой).
    - name: имя для отображения, как его прислал Telegram.
    - role: роль; выставляется снаружи (в таблице), бот её только читает.
    - group_id: текущая группа пользователя, если он её уже выбрал.
    """

    user_id: str
    name: str = ""
    role: UserRole = UserRole.STUDENT
    group_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
