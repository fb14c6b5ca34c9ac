# application/usecases/group_requests.py

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from domain.errors import DuplicateGroupError, RequestAlreadyDecidedError
from domain.models.groups import GroupRequest, Page, RequestStatus, max_page_for
from domain.repositories import IGroupRepository, IGroupRequestRepository

logger = logging.getLogger(__name__)


@dataclass
class GroupRequestLedger:
    """
    Заявки на добавление групп: создание и решение администратора.

    Проверки «группа уже есть» / «заявка уже есть» перед созданием
    делает вызывающий код. Между проверкой и вставкой есть окно для гонки,
    поэтому approve сам ещё раз проверяет, не появилась ли группа.
    """

    request_repo: IGroupRequestRepository
    group_repo: IGroupRepository

    def pending_exists(self, name: str) -> bool:
        return self.request_repo.pending_exists(name.strip())

    def create(self, requester_id: str, name: str) -> GroupRequest:
        request = self.request_repo.create(
            requester_id=requester_id,
            name=name.strip(),
            created_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Group request %s created: name=%r requester=%s",
            request.id,
            request.name,
            requester_id,
        )
        return request

    def list_pending_page(self, page: int, page_size: int) -> Page[GroupRequest]:
        """Очередь на модерацию: первыми идут самые старые заявки."""
        page = max(0, page)
        requests, total = self.request_repo.list_pending(page * page_size, page_size)

        last_page = max_page_for(total, page_size)
        if page > last_page:
            page = last_page
            requests, total = self.request_repo.list_pending(page * page_size, page_size)

        return Page(items=requests, page=page, page_size=page_size, total=total)

    def approve(self, decider_id: str, request_id: int) -> GroupRequest:
        """
        Принять заявку и добавить группу в справочник.

        Если группу с таким названием уже добавили другим путём,
        вторую не создаём — просто отмечаем заявку как принятую.

        Поднимает RequestAlreadyDecidedError, если заявки нет
        или её уже кто-то принял / отклонил (например, двойное нажатие кнопки).
        """
        request = self.request_repo.get_pending(request_id)
        if request is None:
            raise RequestAlreadyDecidedError(request_id)

        if not self.group_repo.exists(request.name):
            try:
                self.group_repo.create(request.name)
            except DuplicateGroupError:
                logger.warning(
                    "Group %r was created concurrently, request %s reuses it",
                    request.name,
                    request_id,
                )

        return self._decide(request_id, RequestStatus.APPROVED, decider_id)

    def reject(self, decider_id: str, request_id: int) -> GroupRequest:
        """Отклонить заявку. Группа не создаётся."""
        if self.request_repo.get_pending(request_id) is None:
            raise RequestAlreadyDecidedError(request_id)
        return self._decide(request_id, RequestStatus.REJECTED, decider_id)

    def _decide(
        self,
        request_id: int,
        status: RequestStatus,
        decider_id: str,
    ) -> GroupRequest:
        decided = self.request_repo.mark_decided(
            request_id=request_id,
            status=status,
            decided_by=decider_id,
            decided_at=datetime.now(timezone.utc),
        )
        if decided is None:
            # Кто-то успел решить заявку между чтением и обновлением
            raise RequestAlreadyDecidedError(request_id)

        logger.info(
            "Group request %s %s by %s", request_id, status.value, decider_id
        )
        return decided
