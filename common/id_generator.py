# common/id_generator.py

from typing import Iterable


def next_numeric_id(existing_ids: Iterable[str]) -> int:
    """
    Следующий числовой идентификатор для строки в листе:
    максимум из уже занятых + 1. Пустые и нечисловые значения пропускаются.

    Например: ['1', '2', '', 'abc', '7'] -> 8; [] -> 1.
    """
    numbers = [int(value) for value in existing_ids if str(value).strip().isdecimal()]
    return max(numbers, default=0) + 1
