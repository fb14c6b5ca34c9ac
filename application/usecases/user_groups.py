# application/usecases/user_groups.py

from dataclasses import dataclass
from typing import Optional

from domain.models.groups import Group
from domain.models.users import UserInfo, UserRole
from domain.repositories import IGroupRepository, IUserRepository


@dataclass
class UserGroupsService:
    """
    Сервис (use-case слой) для работы с пользователем и его группой.

    Здесь нет ничего про конкретное хранилище — только вызовы репозиториев.
    """

    user_repo: IUserRepository
    group_repo: IGroupRepository

    def ensure_user_exists(self, user_id: str, name: str) -> UserInfo:
        """
        Если пользователя ещё нет в хранилище, добавить его с ролью student.
        """
        return self.user_repo.create_if_not_exists(user_id, name)

    def get_role(self, user_id: str) -> UserRole:
        """
        Роль пользователя. Незнакомый пользователь считается студентом.

        Роль не кэшируется: каждое действие администратора
        перечитывает её из хранилища.
        """
        user = self.user_repo.get_by_id(user_id)
        if user is None:
            return UserRole.STUDENT
        return user.role

    def is_admin(self, user_id: str) -> bool:
        return self.get_role(user_id) == UserRole.ADMIN

    def get_current_user_group(self, user_id: str) -> Optional[Group]:
        """
        Получить текущую группу пользователя.

        Если пользователь ещё не выбрал группу, вернёт None.
        """
        user = self.user_repo.get_by_id(user_id)
        if user is None or user.group_id is None:
            return None

        # Связка есть, а группы нет — считаем, что группы у пользователя нет
        return self.group_repo.get_by_id(user.group_id)

    def assign_group(self, user_id: str, group: Group) -> UserInfo:
        """
        Привязать пользователя к группе (старая привязка заменяется).
        """
        return self.user_repo.set_group(user_id, group.id)
