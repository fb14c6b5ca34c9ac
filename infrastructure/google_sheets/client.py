# infrastructure/google_sheets/client.py

from typing import Any, List, Optional, Tuple

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from config.settings import GOOGLE_CREDENTIALS_FILE, GOOGLE_SPREADSHEET_ID
from domain.errors import StorageError

# Область доступа: чтение и запись в Google Sheets
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def get_sheets_service() -> Resource:
    """
    Создаёт и возвращает клиент Google Sheets API.

    Требуется:
    - файл с ключом сервисного аккаунта (GOOGLE_CREDENTIALS_FILE);
    - таблица, доступ к которой выдан сервисному аккаунту.
    """
    creds = Credentials.from_service_account_file(GOOGLE_CREDENTIALS_FILE, scopes=SCOPES)
    return build("sheets", "v4", credentials=creds)


def range_start_row(range_str: str) -> int:
    """
    Номер первой строки диапазона: "users!A2:D" -> 2.

    Нужен, чтобы по позиции в прочитанных values вычислить
    абсолютный номер строки для обновления.
    """
    _, cells_part = range_str.split("!")
    digits = "".join(ch for ch in cells_part.split(":")[0] if ch.isdigit())
    return int(digits) if digits else 1


def sheet_name(range_str: str) -> str:
    return range_str.split("!")[0]


def cell(row: List[str], index: int) -> str:
    """Значение колонки или пустая строка (Sheets обрезает пустой хвост строки)."""
    return row[index].strip() if len(row) > index else ""


class SheetRepositoryBase:
    """
    Общие операции с одним листом: прочитать всё, дописать строку, обновить строку.

    Любая ошибка API (HttpError, проблемы с ключом, сеть) превращается в StorageError.
    """

    range_str: str = ""

    def __init__(
        self,
        service: Optional[Resource] = None,
        spreadsheet_id: str = GOOGLE_SPREADSHEET_ID,
    ) -> None:
        self.service: Resource = service if service is not None else get_sheets_service()
        self.spreadsheet_id = spreadsheet_id

    def _execute(self, request: Any) -> dict:
        try:
            return request.execute()
        except (HttpError, httplib2.HttpLib2Error, GoogleAuthError, OSError) as e:
            raise StorageError(f"Google Sheets request failed: {e}") from e

    def _read_all_rows(self) -> Tuple[List[List[str]], int]:
        """
        Считывает все строки листа.

        Возвращает:
        - values: список строк (каждая строка — список значений ячеек);
        - start_row_index: номер первой строки диапазона.
        """
        result = self._execute(
            self.service.spreadsheets()
            .values()
            .get(spreadsheetId=self.spreadsheet_id, range=self.range_str)
        )
        return result.get("values", []), range_start_row(self.range_str)

    def _append_row(self, row: List[Any]) -> None:
        self._execute(
            self.service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self.spreadsheet_id,
                range=self.range_str,
                valueInputOption="RAW",
                body={"values": [row]},
            )
        )

    def _update_cells(self, a1_range: str, row: List[Any]) -> None:
        """Перезаписать ячейки, например a1_range="users!C5:D5"."""
        self._execute(
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range,
                valueInputOption="RAW",
                body={"values": [row]},
            )
        )
