# infrastructure/fsm/session_store.py

from typing import Any, Dict, Optional

from aiogram.fsm.state import State
from aiogram.fsm.storage.base import BaseStorage, StorageKey

from domain.models.dialogue import Session
from domain.repositories import ISessionStore


class FSMSessionStore(ISessionStore):
    """
    Состояния диалога в хранилище FSM aiogram.

    Сюда передаётся то же хранилище, что и в Dispatcher(storage=...):
    MemoryStorage (ничего не переживает перезапуск бота) или, например,
    RedisStorage, если состояния нужно сохранять.

    Ключ строится так же, как у Dispatcher для личного чата
    (chat_id == user_id), поэтому FSMContext в хэндлерах видит
    те же состояния. Если по одному пользователю одновременно пришло
    два события, побеждает то, которое записало состояние последним.
    """

    def __init__(self, storage: BaseStorage, bot_id: int) -> None:
        self.storage = storage
        self.bot_id = bot_id

    def _key(self, user_id: str) -> StorageKey:
        uid = int(user_id)
        return StorageKey(bot_id=self.bot_id, chat_id=uid, user_id=uid)

    async def get(self, user_id: str) -> Session:
        key = self._key(user_id)
        step = await self.storage.get_state(key)
        data = await self.storage.get_data(key)
        # Копия, чтобы правка params снаружи не меняла хранилище
        return Session(step=step, params=dict(data))

    async def set(
        self,
        user_id: str,
        step: State,
        params: Optional[Dict[str, Any]] = None,
    ) -> None:
        key = self._key(user_id)
        await self.storage.set_state(key, step)
        await self.storage.set_data(key, dict(params or {}))

    async def clear(self, user_id: str) -> None:
        key = self._key(user_id)
        await self.storage.set_state(key, None)
        await self.storage.set_data(key, {})
