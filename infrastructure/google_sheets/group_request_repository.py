# infrastructure/google_sheets/group_request_repository.py

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from common.id_generator import next_numeric_id
from config.settings import SHEET_GROUP_REQUESTS_RANGE
from domain.models.groups import GroupRequest, RequestStatus
from domain.repositories import IGroupRequestRepository
from infrastructure.google_sheets.client import SheetRepositoryBase, cell, sheet_name


def _parse_datetime(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    # Даты, введённые в таблицу руками, считаем UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GroupRequestSheetRepository(SheetRepositoryBase, IGroupRequestRepository):
    """
    Заявки на добавление групп поверх листа groupRequests.

    Лист groupRequests, начиная со строки 2:
    - A: id
    - B: requestedName
    - C: requestedBy (userId)
    - D: status (pending / approved / rejected)
    - E: decidedBy
    - F: decidedAt (ISO)
    - G: createdAt (ISO)

    Google Sheets не умеет «обновить, если статус ещё pending» одной операцией,
    поэтому mark_decided перечитывает строку прямо перед записью.
    """

    range_str = SHEET_GROUP_REQUESTS_RANGE

    @staticmethod
    def _row_to_request(row: List[str]) -> Optional[GroupRequest]:
        raw_id = cell(row, 0)
        created_at = _parse_datetime(cell(row, 6))
        if not raw_id.isdecimal() or created_at is None:
            return None
        try:
            status = RequestStatus(cell(row, 3).lower())
        except ValueError:
            return None

        return GroupRequest(
            id=int(raw_id),
            name=cell(row, 1),
            requester_id=cell(row, 2),
            status=status,
            decided_by=cell(row, 4) or None,
            decided_at=_parse_datetime(cell(row, 5)),
            created_at=created_at,
        )

    def _read_all_requests(self) -> List[Tuple[GroupRequest, int]]:
        """Все корректные заявки вместе с номером строки в листе."""
        values, start_row_index = self._read_all_rows()

        requests: List[Tuple[GroupRequest, int]] = []
        for offset, row in enumerate(values):
            request = self._row_to_request(row)
            if request is not None:
                requests.append((request, start_row_index + offset))
        return requests

    def create(self, requester_id: str, name: str, created_at: datetime) -> GroupRequest:
        values, _ = self._read_all_rows()
        request = GroupRequest(
            id=next_numeric_id(cell(row, 0) for row in values),
            name=name.strip(),
            requester_id=str(requester_id),
            created_at=created_at,
        )

        self._append_row([
            request.id,                     # id
            request.name,                   # requestedName
            request.requester_id,           # requestedBy
            request.status.value,           # status
            "",                             # decidedBy
            "",                             # decidedAt
            request.created_at.isoformat(), # createdAt
        ])
        return request

    def pending_exists(self, name: str) -> bool:
        wanted = name.strip().casefold()
        return any(
            r.status == RequestStatus.PENDING and r.name.casefold() == wanted
            for r, _ in self._read_all_requests()
        )

    def list_pending(self, offset: int, limit: int) -> Tuple[List[GroupRequest], int]:
        pending = sorted(
            (r for r, _ in self._read_all_requests() if r.status == RequestStatus.PENDING),
            key=lambda r: (r.created_at, r.id),
        )
        return pending[offset:offset + limit], len(pending)

    def get_pending(self, request_id: int) -> Optional[GroupRequest]:
        for request, _ in self._read_all_requests():
            if request.id == request_id and request.status == RequestStatus.PENDING:
                return request
        return None

    def mark_decided(
        self,
        request_id: int,
        status: RequestStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> Optional[GroupRequest]:
        for request, row_index in self._read_all_requests():
            if request.id != request_id:
                continue
            if request.status != RequestStatus.PENDING:
                return None

            update_range = f"{sheet_name(self.range_str)}!D{row_index}:F{row_index}"
            self._update_cells(
                update_range,
                [status.value, str(decided_by), decided_at.isoformat()],
            )

            request.status = status
            request.decided_by = str(decided_by)
            request.decided_at = decided_at
            return request
        return None
