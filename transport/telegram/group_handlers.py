# transport/telegram/group_handlers.py

import logging

from aiogram import Dispatcher, F
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from application.usecases.group_dialogue import GroupDialogueService
from domain.errors import StorageError
from domain.models.dialogue import IncomingEvent
from transport.telegram.directives import execute_directives

logger = logging.getLogger(__name__)

STORAGE_FAILED_TEXT = "Не получилось обработать запрос. Попробуй ещё раз чуть позже."

HELP_TEXT = (
    "<b>Доступные команды:</b>\n"
    "/start - выбрать группу из списка или найти её по названию.\n"
    "/requests - заявки на добавление групп (только для администраторов).\n"
    "/help - показать это справочное сообщение.\n"
)


def _message_event(message: Message) -> IncomingEvent:
    return IncomingEvent(
        user_id=str(message.from_user.id),
        chat_id=message.chat.id,
        user_name=message.from_user.full_name,
    )


def _callback_event(callback: CallbackQuery) -> IncomingEvent:
    # Сообщение может быть недоступно (слишком старое) — тогда редактировать нечего
    message = callback.message
    chat_id = message.chat.id if message is not None else callback.from_user.id
    message_id = message.message_id if message is not None else None
    return IncomingEvent(
        user_id=str(callback.from_user.id),
        chat_id=chat_id,
        user_name=callback.from_user.full_name,
        message_id=message_id,
        event_id=callback.id,
    )


def register_group_handlers(dp: Dispatcher, dialogue: GroupDialogueService) -> None:
    """
    Регистрация хэндлеров выбора группы и модерации заявок.

    Параметры:
    - dp: Dispatcher aiogram.
    - dialogue: сервис диалога; хэндлеры только переводят события
      Telegram в IncomingEvent и выполняют возвращённые указания.

    Ошибку хранилища пользователь видит как общее сообщение,
    подробности уходят в лог.
    """

    # /help
    @dp.message(Command("help"))
    async def cmd_help(message: Message):
        await message.answer(HELP_TEXT)

    # /start
    @dp.message(CommandStart())
    async def cmd_start(message: Message):
        event = _message_event(message)
        try:
            directives = await dialogue.start(event)
        except StorageError:
            logger.exception("Storage failed on /start for user %s", event.user_id)
            await message.answer(STORAGE_FAILED_TEXT)
            return
        await execute_directives(message.bot, directives)

    # /requests (администратор)
    @dp.message(Command("requests"))
    async def cmd_requests(message: Message):
        event = _message_event(message)
        try:
            directives = await dialogue.open_requests(event)
        except StorageError:
            logger.exception("Storage failed on /requests for user %s", event.user_id)
            await message.answer(STORAGE_FAILED_TEXT)
            return
        await execute_directives(message.bot, directives)

    # Свободный текст (название группы)
    @dp.message(F.text)
    async def process_text(message: Message):
        event = _message_event(message)
        try:
            directives = await dialogue.handle_text(event, message.text)
        except StorageError:
            logger.exception("Storage failed on text from user %s", event.user_id)
            await message.answer(STORAGE_FAILED_TEXT)
            return
        await execute_directives(message.bot, directives)

    # Нажатия inline-кнопок
    @dp.callback_query()
    async def process_callback(callback: CallbackQuery):
        event = _callback_event(callback)
        try:
            directives = await dialogue.handle_button(event, callback.data or "")
        except StorageError:
            logger.exception(
                "Storage failed on callback %r from user %s", callback.data, event.user_id
            )
            await callback.answer(STORAGE_FAILED_TEXT, show_alert=True)
            return
        await execute_directives(callback.bot, directives)
