# application/usecases/group_dialogue.py

import html
import logging
from dataclasses import dataclass
from typing import List

from application.usecases.group_registry import GroupRegistryService
from application.usecases.group_requests import GroupRequestLedger
from application.usecases.keyboards import (
    candidates_keyboard,
    groups_keyboard,
    requests_keyboard,
)
from application.usecases.user_groups import UserGroupsService
from domain.errors import (
    AuthorizationError,
    DuplicateRequestError,
    RequestAlreadyDecidedError,
    ValidationError,
)
from domain.models.callbacks import (
    GroupPage,
    GroupPick,
    GroupRequestNew,
    RequestApprove,
    RequestReject,
    RequestsPage,
    parse_callback,
)
from domain.models.dialogue import (
    Acknowledge,
    DialogueStep,
    EditMessage,
    IncomingEvent,
    ReplyDirective,
    SendMessage,
)
from domain.models.groups import Group, MatchKind
from domain.repositories import ISessionStore

logger = logging.getLogger(__name__)

MIN_GROUP_NAME_LENGTH = 2
MAX_GROUP_NAME_LENGTH = 64

# ----- ТЕКСТЫ СООБЩЕНИЙ -----

PICKER_TEXT = "Выбери группу (кнопкой) или напиши её название:"
CURRENT_GROUP_TEXT = "Текущая группа: <b>{name}</b>\n"
NAME_TOO_SHORT_TEXT = "Название слишком короткое. Введи ещё раз."
NAME_TOO_LONG_TEXT = "Название слишком длинное. Введи ещё раз."
GROUP_EXISTS_TEXT = "Такая группа уже существует. Напиши /start и выбери её."
REQUEST_PENDING_TEXT = "Заявка на такую группу уже ожидает решения администратора."
REQUEST_SENT_TEXT = "Заявка отправлена администратору ✅"
GROUP_CHOSEN_TEXT = "Группа выбрана: {name} ✅"
MANY_MATCHES_TEXT = "Нашёл несколько вариантов. Выбери нужный:"
NO_MATCH_TEXT = "Такой группы нет. Можешь нажать «➕ Добавить группу» в списке."
GROUP_SAVED_TEXT = "Группа сохранена: {name} ✅"
GROUP_NOT_FOUND_TEXT = "Группа не найдена"
ASK_GROUP_NAME_TEXT = "Введи название группы, которую нужно добавить:"
REQUESTS_TEXT = "Заявки на добавление групп:"
NO_RIGHTS_TEXT = "Недостаточно прав"
ALREADY_HANDLED_TEXT = "Уже обработано"
APPROVED_ACK_TEXT = "Принято ✅"
REJECTED_ACK_TEXT = "Отклонено ❌"
APPROVED_NOTICE_TEXT = 'Заявка на группу "{name}" принята ✅'
REJECTED_NOTICE_TEXT = 'Заявка на группу "{name}" отклонена ❌'
GROUP_CHOSEN_ACK_TEXT = "Группа выбрана ✅"


def validate_group_name(text: str) -> str:
    """
    Проверить введённое название и вернуть его без пробелов по краям.

    Поднимает ValidationError с текстом для пользователя.
    """
    name = text.strip()
    if len(name) < MIN_GROUP_NAME_LENGTH:
        raise ValidationError(NAME_TOO_SHORT_TEXT)
    if len(name) > MAX_GROUP_NAME_LENGTH:
        raise ValidationError(NAME_TOO_LONG_TEXT)
    return name


@dataclass
class GroupDialogueService:
    """
    Диалог выбора группы и модерации заявок.

    Получает событие (команда, текст или нажатие кнопки), смотрит на
    состояние пользователя в session_store, обращается к справочнику групп
    и к заявкам и возвращает список «указаний» транспорту: что отправить,
    что отредактировать, на какой callback ответить.

    Шаги:
    - IDLE: свободный текст игнорируется;
    - AWAIT_GROUP_PICK: текст ищется в справочнике групп;
    - AWAIT_GROUP_NAME_FOR_REQUEST: текст — название для заявки.

    Выбор группы или отправка заявки всегда возвращают пользователя в IDLE.
    StorageError отсюда не ловится и уходит в транспорт.
    """

    registry: GroupRegistryService
    ledger: GroupRequestLedger
    users: UserGroupsService
    sessions: ISessionStore
    page_size: int = 8

    # ----- ТОЧКИ ВХОДА -----

    async def start(self, event: IncomingEvent) -> List[ReplyDirective]:
        """/start: регистрируем пользователя и показываем первую страницу групп."""
        self.users.ensure_user_exists(event.user_id, event.user_name)
        current = self.users.get_current_user_group(event.user_id)
        return [await self._show_group_picker(event, page=0, current=current)]

    async def open_requests(self, event: IncomingEvent) -> List[ReplyDirective]:
        """/requests: администратор открывает очередь заявок новым сообщением."""
        if not self.users.is_admin(event.user_id):
            logger.warning("User %s tried to open group requests", event.user_id)
            return [SendMessage(event.chat_id, NO_RIGHTS_TEXT)]

        page = self.ledger.list_pending_page(0, self.page_size)
        return [SendMessage(event.chat_id, REQUESTS_TEXT, requests_keyboard(page))]

    async def handle_text(self, event: IncomingEvent, text: str) -> List[ReplyDirective]:
        """
        Свободный текст. Команды (/...) и текст вне диалога игнорируются.
        """
        if not text or text.startswith("/"):
            return []

        session = await self.sessions.get(event.user_id)

        if session.step == DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST.state:
            return await self._submit_group_request(event, text)

        if session.step == DialogueStep.AWAIT_GROUP_PICK.state:
            return await self._pick_group_by_text(event, text)

        return []

    async def handle_button(self, event: IncomingEvent, data: str) -> List[ReplyDirective]:
        """
        Нажатие inline-кнопки.

        Кнопка несёт своё действие сама по себе, поэтому шаг диалога
        здесь не проверяется: выбрать группу можно из любого состояния.
        """
        action = parse_callback(data)

        if isinstance(action, GroupPage):
            return [
                Acknowledge(event.event_id),
                await self._show_group_picker(event, page=action.page, edit=True),
            ]

        if isinstance(action, GroupPick):
            return await self._pick_group_by_button(event, action.group_id)

        if isinstance(action, GroupRequestNew):
            await self.sessions.set(
                event.user_id, DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST
            )
            return [
                Acknowledge(event.event_id),
                SendMessage(event.chat_id, ASK_GROUP_NAME_TEXT),
            ]

        if isinstance(action, (RequestsPage, RequestApprove, RequestReject)):
            try:
                self._require_admin(event.user_id)
            except AuthorizationError:
                logger.warning(
                    "User %s tried admin action %s", event.user_id, action.pack()
                )
                return [Acknowledge(event.event_id, NO_RIGHTS_TEXT, alert=True)]

            if isinstance(action, RequestsPage):
                return self._show_requests(event, action.page)
            if isinstance(action, RequestApprove):
                return self._approve(event, action.request_id)
            return self._reject(event, action.request_id)

        # noop и неизвестные токены: просто снимаем «часики» с кнопки
        return [Acknowledge(event.event_id)]

    # ----- ВЫБОР ГРУППЫ -----

    async def _show_group_picker(
        self,
        event: IncomingEvent,
        page: int,
        edit: bool = False,
        current: Group | None = None,
    ) -> ReplyDirective:
        result = self.registry.list_active_page(page, self.page_size)
        keyboard = groups_keyboard(result)

        text = PICKER_TEXT
        if current is not None:
            text = CURRENT_GROUP_TEXT.format(name=html.escape(current.name)) + PICKER_TEXT

        await self.sessions.set(
            event.user_id, DialogueStep.AWAIT_GROUP_PICK, {"page": result.page}
        )

        if edit and event.message_id is not None:
            return EditMessage(event.chat_id, event.message_id, text, keyboard)
        return SendMessage(event.chat_id, text, keyboard)

    async def _pick_group_by_text(
        self, event: IncomingEvent, text: str
    ) -> List[ReplyDirective]:
        # Верхний предел длины здесь не проверяем
        query = text.strip()
        if len(query) < MIN_GROUP_NAME_LENGTH:
            return [SendMessage(event.chat_id, NAME_TOO_SHORT_TEXT)]

        match = self.registry.resolve_by_text(query)

        if match.kind in (MatchKind.EXACT, MatchKind.SINGLE):
            group = match.groups[0]
            self.users.assign_group(event.user_id, group)
            await self.sessions.clear(event.user_id)
            text = GROUP_CHOSEN_TEXT.format(name=html.escape(group.name))
            return [SendMessage(event.chat_id, text)]

        if match.kind == MatchKind.MANY:
            # Шаг не меняем: следующий текст снова пойдёт в поиск
            return [
                SendMessage(
                    event.chat_id, MANY_MATCHES_TEXT, candidates_keyboard(match.groups)
                )
            ]

        return [SendMessage(event.chat_id, NO_MATCH_TEXT)]

    async def _pick_group_by_button(
        self, event: IncomingEvent, group_id: int
    ) -> List[ReplyDirective]:
        group = self.registry.get_active(group_id)
        if group is None:
            return [Acknowledge(event.event_id, GROUP_NOT_FOUND_TEXT, alert=True)]

        self.users.assign_group(event.user_id, group)
        await self.sessions.clear(event.user_id)
        return [
            Acknowledge(event.event_id, GROUP_CHOSEN_ACK_TEXT),
            SendMessage(event.chat_id, GROUP_SAVED_TEXT.format(name=html.escape(group.name))),
        ]

    # ----- ЗАЯВКИ -----

    async def _submit_group_request(
        self, event: IncomingEvent, text: str
    ) -> List[ReplyDirective]:
        try:
            name = validate_group_name(text)
        except ValidationError as e:
            return [SendMessage(event.chat_id, str(e))]

        if self.registry.exists(name):
            return [SendMessage(event.chat_id, GROUP_EXISTS_TEXT)]
        if self.ledger.pending_exists(name):
            return [SendMessage(event.chat_id, REQUEST_PENDING_TEXT)]

        try:
            self.ledger.create(event.user_id, name)
        except DuplicateRequestError:
            logger.warning("Duplicate group request %r from %s", name, event.user_id)
            return [SendMessage(event.chat_id, REQUEST_PENDING_TEXT)]

        await self.sessions.clear(event.user_id)
        return [SendMessage(event.chat_id, REQUEST_SENT_TEXT)]

    def _require_admin(self, user_id: str) -> None:
        if not self.users.is_admin(user_id):
            raise AuthorizationError(user_id)

    def _show_requests(self, event: IncomingEvent, page: int) -> List[ReplyDirective]:
        result = self.ledger.list_pending_page(page, self.page_size)
        keyboard = requests_keyboard(result)

        directives: List[ReplyDirective] = [Acknowledge(event.event_id)]
        if event.message_id is not None:
            directives.append(
                EditMessage(event.chat_id, event.message_id, REQUESTS_TEXT, keyboard)
            )
        else:
            directives.append(SendMessage(event.chat_id, REQUESTS_TEXT, keyboard))
        return directives

    def _approve(self, event: IncomingEvent, request_id: int) -> List[ReplyDirective]:
        try:
            request = self.ledger.approve(event.user_id, request_id)
        except RequestAlreadyDecidedError:
            return [Acknowledge(event.event_id, ALREADY_HANDLED_TEXT)]

        return [
            Acknowledge(event.event_id, APPROVED_ACK_TEXT),
            SendMessage(
                request.requester_id,
                APPROVED_NOTICE_TEXT.format(name=html.escape(request.name)),
            ),
        ]

    def _reject(self, event: IncomingEvent, request_id: int) -> List[ReplyDirective]:
        try:
            request = self.ledger.reject(event.user_id, request_id)
        except RequestAlreadyDecidedError:
            return [Acknowledge(event.event_id, ALREADY_HANDLED_TEXT)]

        return [
            Acknowledge(event.event_id, REJECTED_ACK_TEXT),
            SendMessage(
                request.requester_id,
                REJECTED_NOTICE_TEXT.format(name=html.escape(request.name)),
            ),
        ]
