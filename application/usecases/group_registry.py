# application/usecases/group_registry.py

from dataclasses import dataclass
from typing import Optional

from domain.models.groups import Group, GroupMatch, MatchKind, Page, max_page_for
from domain.repositories import IGroupRepository

# Сколько точных совпадений берём (на случай дублей названий в данных)
EXACT_MATCH_LIMIT = 5
# Сколько вариантов максимум предлагаем на выбор
SEARCH_MATCH_LIMIT = 10


@dataclass
class GroupRegistryService:
    """
    Справочник групп: постраничный список и поиск группы по тексту.

    Проверку длины введённого текста делает сервис диалога,
    здесь считаем, что текст уже проверен.
    """

    group_repo: IGroupRepository

    def list_active_page(self, page: int, page_size: int) -> Page[Group]:
        """
        Страница активных групп (по названию).

        Номер страницы приводится в диапазон [0, max_page]: кнопка
        со старым номером после удаления групп покажет последнюю страницу.
        """
        page = max(0, page)
        groups, total = self.group_repo.list_active(page * page_size, page_size)

        last_page = max_page_for(total, page_size)
        if page > last_page:
            page = last_page
            groups, total = self.group_repo.list_active(page * page_size, page_size)

        return Page(items=groups, page=page, page_size=page_size, total=total)

    def resolve_by_text(self, text: str) -> GroupMatch:
        """
        Найти группу по тексту пользователя.

        Порядок:
        1. точное совпадение без учёта регистра (exact) — всегда важнее частичного;
        2. ровно одно частичное совпадение (single);
        3. несколько частичных совпадений (many) — пусть пользователь выберет кнопкой;
        4. ничего не нашли (none).
        """
        query = text.strip()

        exact = self.group_repo.find_active_by_name(query, EXACT_MATCH_LIMIT)
        if exact:
            return GroupMatch(kind=MatchKind.EXACT, groups=exact)

        similar = self.group_repo.search_active(query, SEARCH_MATCH_LIMIT)
        if len(similar) == 1:
            return GroupMatch(kind=MatchKind.SINGLE, groups=similar)
        if len(similar) > 1:
            return GroupMatch(kind=MatchKind.MANY, groups=similar)
        return GroupMatch(kind=MatchKind.NONE)

    def exists(self, name: str) -> bool:
        return self.group_repo.exists(name.strip())

    def get_active(self, group_id: int) -> Optional[Group]:
        group = self.group_repo.get_by_id(group_id)
        if group is None or not group.active:
            return None
        return group
