# main.py

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.base import BaseStorage
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from application.usecases.group_dialogue import GroupDialogueService
from application.usecases.group_registry import GroupRegistryService
from application.usecases.group_requests import GroupRequestLedger
from application.usecases.user_groups import UserGroupsService
from config.settings import (
    ADMIN_USER_IDS,
    BOOTSTRAP_GROUPS,
    LOG_LEVEL,
    PAGE_SIZE,
    STORAGE_BACKEND,
    TELEGRAM_BOT_TOKEN,
)
from infrastructure.fsm.session_store import FSMSessionStore
from transport.telegram.group_handlers import register_group_handlers

logger = logging.getLogger(__name__)


def build_repositories():
    """
    Репозитории пользователей, групп и заявок для выбранного STORAGE_BACKEND.
    """
    if STORAGE_BACKEND == "memory":
        from infrastructure.memory.repositories import (
            InMemoryGroupRepository,
            InMemoryGroupRequestRepository,
            InMemoryUserRepository,
        )

        return (
            InMemoryUserRepository(admin_ids=ADMIN_USER_IDS),
            InMemoryGroupRepository(names=BOOTSTRAP_GROUPS),
            InMemoryGroupRequestRepository(),
        )

    if STORAGE_BACKEND == "google_sheets":
        from infrastructure.google_sheets.client import get_sheets_service
        from infrastructure.google_sheets.group_repository import GroupSheetRepository
        from infrastructure.google_sheets.group_request_repository import (
            GroupRequestSheetRepository,
        )
        from infrastructure.google_sheets.user_repository import UserSheetRepository

        # Один клиент API на все листы
        service = get_sheets_service()
        return (
            UserSheetRepository(service),
            GroupSheetRepository(service),
            GroupRequestSheetRepository(service),
        )

    raise ValueError(f"Unknown STORAGE_BACKEND: {STORAGE_BACKEND!r}")


def build_dialogue(storage: BaseStorage, bot_id: int) -> GroupDialogueService:
    """
    Сервис диалога. storage — то же хранилище FSM, что отдано Dispatcher.
    """
    user_repo, group_repo, request_repo = build_repositories()

    return GroupDialogueService(
        registry=GroupRegistryService(group_repo=group_repo),
        ledger=GroupRequestLedger(request_repo=request_repo, group_repo=group_repo),
        users=UserGroupsService(user_repo=user_repo, group_repo=group_repo),
        sessions=FSMSessionStore(storage, bot_id=bot_id),
        page_size=PAGE_SIZE,
    )


async def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not TELEGRAM_BOT_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN is empty, check the environment")
        return

    # 1. Создаём Bot и Dispatcher
    bot = Bot(
        token=TELEGRAM_BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    # Регистрируем команды, которые будут видны по кнопке справа от поля ввода
    await bot.set_my_commands(
        commands=[
            BotCommand(command="start", description="Выбрать группу"),
            BotCommand(command="requests", description="Заявки на группы (админ)"),
            BotCommand(command="help", description="Справка"),
        ]
    )

    storage = MemoryStorage()
    dp = Dispatcher(storage=storage)

    # 2. Собираем сервис диалога поверх выбранного хранилища
    dialogue = build_dialogue(storage, bot_id=bot.id)

    # 3. Регистрируем хэндлеры, передавая внутрь сервис
    register_group_handlers(dp, dialogue)

    # 4. Запускаем бота в режиме long polling
    logger.info("Bot started, storage backend: %s", STORAGE_BACKEND)
    await dp.start_polling(bot)


if __name__ == "__main__":
    asyncio.run(main())
