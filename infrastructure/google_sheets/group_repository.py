# infrastructure/google_sheets/group_repository.py

from typing import List, Optional, Tuple

from common.id_generator import next_numeric_id
from config.settings import SHEET_GROUPS_RANGE
from domain.models.groups import Group
from domain.repositories import IGroupRepository
from infrastructure.google_sheets.client import SheetRepositoryBase, cell


class GroupSheetRepository(SheetRepositoryBase, IGroupRepository):
    """
    Реализация репозитория групп поверх листа Groups.

    Лист Groups, начиная со строки 2:
    - колонка A: id (число);
    - колонка B: name;
    - колонка C: active ("TRUE" / "FALSE", пустое значение считается TRUE).

    Уникальность названия таблица не гарантирует: перед вставкой
    проверяем exists, но две параллельные вставки могут пройти обе.
    """

    range_str = SHEET_GROUPS_RANGE

    def _read_all_groups(self) -> List[Group]:
        values, _ = self._read_all_rows()

        groups: List[Group] = []
        for row in values:
            raw_id = cell(row, 0)
            name = cell(row, 1)
            # Строки без числового id или без названия пропускаем
            if not raw_id.isdecimal() or not name:
                continue
            active = cell(row, 2).upper() != "FALSE"
            groups.append(Group(id=int(raw_id), name=name, active=active))
        return groups

    def _read_active_sorted(self) -> List[Group]:
        active = [g for g in self._read_all_groups() if g.active]
        return sorted(active, key=lambda g: (g.name.casefold(), g.id))

    def list_active(self, offset: int, limit: int) -> Tuple[List[Group], int]:
        active = self._read_active_sorted()
        return active[offset:offset + limit], len(active)

    def find_active_by_name(self, name: str, limit: int) -> List[Group]:
        wanted = name.strip().casefold()
        found = [g for g in self._read_active_sorted() if g.name.casefold() == wanted]
        return found[:limit]

    def search_active(self, fragment: str, limit: int) -> List[Group]:
        wanted = fragment.strip().casefold()
        found = [g for g in self._read_active_sorted() if wanted in g.name.casefold()]
        return found[:limit]

    def exists(self, name: str) -> bool:
        """
        Проверяет, есть ли в листе Groups группа с таким названием
        (включая неактивные).
        """
        wanted = name.strip().casefold()
        return any(g.name.casefold() == wanted for g in self._read_all_groups())

    def get_by_id(self, group_id: int) -> Optional[Group]:
        for group in self._read_all_groups():
            if group.id == group_id:
                return group
        return None

    def create(self, name: str) -> Group:
        """
        Добавляет новую строку в лист Groups. id — следующий свободный номер.
        """
        values, _ = self._read_all_rows()
        group_id = next_numeric_id(cell(row, 0) for row in values)

        group = Group(id=group_id, name=name.strip())
        self._append_row([group.id, group.name, "TRUE"])
        return group
