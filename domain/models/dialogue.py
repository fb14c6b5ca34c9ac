from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from aiogram.fsm.state import State, StatesGroup


class DialogueStep(StatesGroup):
    """
    Шаги диалога выбора группы (состояния FSM aiogram).

    Отдельного состояния IDLE нет: IDLE — это сброшенное состояние (None),
    свободный текст от такого пользователя игнорируется.
    """

    AWAIT_GROUP_PICK = State()              # выбирает группу из списка или пишет название
    AWAIT_GROUP_NAME_FOR_REQUEST = State()  # вводит название для заявки


@dataclass
class Session:
    """
    Состояние диалога одного пользователя.

    - step: строка состояния FSM (DialogueStep.X.state) или None, если IDLE;
    - params: данные FSM, например номер страницы списка групп.
    """

    step: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_idle(self) -> bool:
        return self.step is None


@dataclass
class IncomingEvent:
    """
    Входящее событие от транспорта (сообщение или нажатие кнопки).

    - message_id: сообщение, под которым нажата кнопка (его можно отредактировать);
    - event_id: id callback-запроса, на который надо ответить acknowledge.
    """

    user_id: str
    chat_id: Union[int, str]
    user_name: str = ""
    message_id: Optional[int] = None
    event_id: Optional[str] = None


@dataclass(frozen=True)
class Button:
    label: str
    token: str


# Клавиатура — строки кнопок сверху вниз
Keyboard = List[List[Button]]


@dataclass
class SendMessage:
    chat_id: Union[int, str]
    text: str
    keyboard: Optional[Keyboard] = None


@dataclass
class EditMessage:
    chat_id: Union[int, str]
    message_id: int
    text: str
    keyboard: Optional[Keyboard] = None


@dataclass
class Acknowledge:
    event_id: Optional[str]
    text: Optional[str] = None
    alert: bool = False


ReplyDirective = Union[SendMessage, EditMessage, Acknowledge]
