# application/usecases/keyboards.py

"""
Описание inline-клавиатур без привязки к Telegram.

Транспорт потом превращает их в InlineKeyboardMarkup.
"""

from typing import List

from domain.models.callbacks import (
    GroupPage,
    GroupPick,
    GroupRequestNew,
    Noop,
    RequestApprove,
    RequestReject,
    RequestsPage,
)
from domain.models.dialogue import Button, Keyboard
from domain.models.groups import Group, GroupRequest, Page

# ----- ТЕКСТЫ КНОПОК -----

PREV_PAGE_BTN = "◀️"
NEXT_PAGE_BTN = "▶️"
ADD_GROUP_BTN = "➕ Добавить группу"
APPROVE_BTN = "✅ Принять"
REJECT_BTN = "❌ Отклонить"
EMPTY_BTN = "Пусто"


def _page_label(page: Page) -> Button:
    return Button(f"Стр. {page.page + 1}/{page.max_page + 1}", Noop().pack())


def _add_group_row() -> List[Button]:
    return [Button(ADD_GROUP_BTN, GroupRequestNew().pack())]


def groups_keyboard(page: Page[Group]) -> Keyboard:
    """
    Список групп: по кнопке на группу, строка навигации
    и кнопка «Добавить группу» в самом низу.

    Стрелки показываем, только если соседняя страница существует.
    """
    rows: Keyboard = [[Button(g.name, GroupPick(g.id).pack())] for g in page.items]

    nav: List[Button] = []
    if page.has_prev:
        nav.append(Button(PREV_PAGE_BTN, GroupPage(page.page - 1).pack()))
    nav.append(_page_label(page))
    if page.has_next:
        nav.append(Button(NEXT_PAGE_BTN, GroupPage(page.page + 1).pack()))

    rows.append(nav)
    rows.append(_add_group_row())
    return rows


def candidates_keyboard(groups: List[Group]) -> Keyboard:
    """Несколько найденных групп на выбор и «Добавить группу»."""
    rows: Keyboard = [[Button(g.name, GroupPick(g.id).pack())] for g in groups]
    rows.append(_add_group_row())
    return rows


def requests_keyboard(page: Page[GroupRequest]) -> Keyboard:
    """
    Очередь заявок для администратора.

    На каждую заявку две строки: название (некликабельное)
    и кнопки «Принять» / «Отклонить».
    """
    if not page.items:
        return [[Button(EMPTY_BTN, Noop().pack())]]

    rows: Keyboard = []
    for r in page.items:
        rows.append([Button(f"📌 {r.name}", Noop().pack())])
        rows.append(
            [
                Button(APPROVE_BTN, RequestApprove(r.id).pack()),
                Button(REJECT_BTN, RequestReject(r.id).pack()),
            ]
        )

    nav: List[Button] = []
    if page.has_prev:
        nav.append(Button(PREV_PAGE_BTN, RequestsPage(page.page - 1).pack()))
    nav.append(_page_label(page))
    if page.has_next:
        nav.append(Button(NEXT_PAGE_BTN, RequestsPage(page.page + 1).pack()))
    rows.append(nav)
    return rows
