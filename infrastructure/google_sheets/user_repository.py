# infrastructure/google_sheets/user_repository.py

from typing import List, Optional, Tuple

from config.settings import SHEET_USERS_RANGE
from domain.models.users import UserInfo, UserRole
from domain.repositories import IUserRepository
from infrastructure.google_sheets.client import SheetRepositoryBase, cell, sheet_name


class UserSheetRepository(SheetRepositoryBase, IUserRepository):
    """
    Репозиторий для листа users.

    Лист users, начиная со строки 2:
    - колонка A: userId
    - колонка B: userName
    - колонка C: role ("student" / "admin", заполняется вручную)
    - колонка D: groupId (id из листа Groups)
    """

    range_str = SHEET_USERS_RANGE

    @staticmethod
    def _row_to_user(row: List[str]) -> UserInfo:
        role_str = cell(row, 2).lower()
        role = UserRole.ADMIN if role_str == UserRole.ADMIN.value else UserRole.STUDENT
        raw_group_id = cell(row, 3)
        return UserInfo(
            user_id=cell(row, 0),
            name=cell(row, 1),
            role=role,
            group_id=int(raw_group_id) if raw_group_id.isdecimal() else None,
        )

    def _find_row(self, user_id: str) -> Tuple[Optional[List[str]], Optional[int]]:
        """
        Ищет строку пользователя.

        Возвращает саму строку и её абсолютный номер в листе
        (или (None, None), если пользователя нет).
        """
        values, start_row_index = self._read_all_rows()

        for offset, row in enumerate(values):
            if cell(row, 0) == str(user_id):
                return row, start_row_index + offset
        return None, None

    def get_by_id(self, user_id: str) -> Optional[UserInfo]:
        row, _ = self._find_row(user_id)
        if row is None:
            return None
        return self._row_to_user(row)

    def create_if_not_exists(self, user_id: str, name: str) -> UserInfo:
        existing = self.get_by_id(user_id)
        if existing is not None:
            return existing

        self._append_row([str(user_id), name, UserRole.STUDENT.value, ""])
        return UserInfo(user_id=str(user_id), name=name)

    def set_group(self, user_id: str, group_id: int) -> UserInfo:
        """
        Обновляет колонку groupId, если пользователь есть,
        иначе добавляет новую строку.
        """
        row, row_index = self._find_row(user_id)

        if row is None:
            self._append_row([str(user_id), "", UserRole.STUDENT.value, group_id])
            return UserInfo(user_id=str(user_id), group_id=group_id)

        update_range = f"{sheet_name(self.range_str)}!D{row_index}:D{row_index}"
        self._update_cells(update_range, [group_id])

        user = self._row_to_user(row)
        user.group_id = group_id
        return user
