"""
Ошибки бота выбора группы.

ValidationError, AuthorizationError, NotFoundError и Duplicate*Error
обрабатываются внутри сервиса диалога и превращаются в ответ пользователю.
StorageError сервис не ловит: её обрабатывает транспорт (лог + общее сообщение).
"""


class GroupBotError(Exception):
    """Базовая ошибка бота."""


class ValidationError(GroupBotError):
    """Введённые данные не прошли проверку (например, слишком короткое название)."""


class AuthorizationError(GroupBotError):
    """У пользователя нет прав на действие администратора."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' is not an admin")


class NotFoundError(GroupBotError):
    """Запрошенная запись не найдена."""


class RequestAlreadyDecidedError(NotFoundError):
    """Заявки нет или она уже не в статусе pending."""

    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__(f"Group request {request_id} is not pending")


class DuplicateGroupError(GroupBotError):
    """Хранилище отказалось создавать группу: такое название уже есть."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Group '{name}' already exists")


class DuplicateRequestError(GroupBotError):
    """Хранилище отказалось создавать заявку: такая заявка уже ожидает решения."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Pending request for '{name}' already exists")


class StorageError(GroupBotError):
    """Хранилище недоступно или запрос к нему завершился ошибкой."""
