"""
Формат callback_data у inline-кнопок.

Токен состоит из трёх частей: <domain>:<action>:<argument>, например
'grp:page:2' или 'req:approve:7'. Кнопки, которые ничего не делают
(подпись страницы, заголовок заявки), получают токен 'noop'.

Сырая строка разбирается один раз в parse_callback, дальше по коду
ходят только dataclass'ы ниже.
"""

from dataclasses import dataclass
from typing import Optional, Union

NOOP_TOKEN = "noop"

GROUP_DOMAIN = "grp"
REQUEST_DOMAIN = "req"

NEW_REQUEST_ARG = "new"


@dataclass(frozen=True)
class Noop:
    def pack(self) -> str:
        return NOOP_TOKEN


@dataclass(frozen=True)
class GroupPage:
    page: int

    def pack(self) -> str:
        return f"{GROUP_DOMAIN}:page:{self.page}"


@dataclass(frozen=True)
class GroupPick:
    group_id: int

    def pack(self) -> str:
        return f"{GROUP_DOMAIN}:pick:{self.group_id}"


@dataclass(frozen=True)
class GroupRequestNew:
    def pack(self) -> str:
        return f"{GROUP_DOMAIN}:req:{NEW_REQUEST_ARG}"


@dataclass(frozen=True)
class RequestsPage:
    page: int

    def pack(self) -> str:
        return f"{REQUEST_DOMAIN}:page:{self.page}"


@dataclass(frozen=True)
class RequestApprove:
    request_id: int

    def pack(self) -> str:
        return f"{REQUEST_DOMAIN}:approve:{self.request_id}"


@dataclass(frozen=True)
class RequestReject:
    request_id: int

    def pack(self) -> str:
        return f"{REQUEST_DOMAIN}:reject:{self.request_id}"


CallbackAction = Union[
    Noop,
    GroupPage,
    GroupPick,
    GroupRequestNew,
    RequestsPage,
    RequestApprove,
    RequestReject,
]

# (domain, action) -> класс, аргумент которого — число
_NUMERIC_ACTIONS = {
    (GROUP_DOMAIN, "page"): GroupPage,
    (GROUP_DOMAIN, "pick"): GroupPick,
    (REQUEST_DOMAIN, "page"): RequestsPage,
    (REQUEST_DOMAIN, "approve"): RequestApprove,
    (REQUEST_DOMAIN, "reject"): RequestReject,
}


def parse_callback(data: Optional[str]) -> Optional[CallbackAction]:
    """
    Разобрать callback_data кнопки.

    Возвращает:
    - объект действия, если токен известен;
    - None, если строка пустая, битая или не из нашего набора.
    """
    if not data:
        return None
    if data == NOOP_TOKEN:
        return Noop()

    parts = data.split(":")
    if len(parts) != 3:
        return None
    domain, action, argument = parts

    if (domain, action) == (GROUP_DOMAIN, "req"):
        return GroupRequestNew() if argument == NEW_REQUEST_ARG else None

    action_cls = _NUMERIC_ACTIONS.get((domain, action))
    if action_cls is None or not argument.isdecimal():
        return None
    return action_cls(int(argument))
