# transport/telegram/directives.py

import logging
from typing import Iterable, Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from domain.models.dialogue import (
    Acknowledge,
    EditMessage,
    Keyboard,
    ReplyDirective,
    SendMessage,
)

logger = logging.getLogger(__name__)


def to_inline_markup(keyboard: Optional[Keyboard]) -> Optional[InlineKeyboardMarkup]:
    """
    Превращает описание клавиатуры в InlineKeyboardMarkup.

    Токен кнопки уходит в callback_data как есть.
    """
    if keyboard is None:
        return None
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=button.label, callback_data=button.token)
                for button in row
            ]
            for row in keyboard
        ]
    )


async def execute_directives(bot: Bot, directives: Iterable[ReplyDirective]) -> None:
    """
    Выполнить указания сервиса диалога по порядку:
    отправить / отредактировать сообщение или ответить на callback.
    """
    for directive in directives:
        if isinstance(directive, SendMessage):
            await bot.send_message(
                chat_id=directive.chat_id,
                text=directive.text,
                reply_markup=to_inline_markup(directive.keyboard),
            )
        elif isinstance(directive, EditMessage):
            try:
                await bot.edit_message_text(
                    text=directive.text,
                    chat_id=directive.chat_id,
                    message_id=directive.message_id,
                    reply_markup=to_inline_markup(directive.keyboard),
                )
            except TelegramBadRequest as e:
                # Повторное нажатие той же страницы: текст и кнопки не изменились
                if "message is not modified" not in str(e):
                    raise
                logger.debug("Message %s not modified", directive.message_id)
        elif isinstance(directive, Acknowledge):
            if directive.event_id is None:
                continue
            await bot.answer_callback_query(
                callback_query_id=directive.event_id,
                text=directive.text,
                show_alert=directive.alert,
            )
