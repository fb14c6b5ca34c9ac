# config/settings.py

import os

from dotenv import load_dotenv

# Подхватываем .env из корня проекта, если он есть
load_dotenv()

TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")

# Где храним группы, пользователей и заявки:
# - "google_sheets" — в Google-таблице (боевой режим);
# - "memory" — в памяти процесса (локальный запуск, всё теряется при рестарте).
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "google_sheets")

# ID основной Google-таблицы (из URL таблицы)
GOOGLE_SPREADSHEET_ID = os.getenv("GOOGLE_SPREADSHEET_ID", "")

# Файл с ключом сервисного аккаунта
GOOGLE_CREDENTIALS_FILE = os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json")

# Названия листов и диапазоны
SHEET_GROUPS_RANGE = "Groups!A2:C"  # A: id, B: name, C: active
SHEET_USERS_RANGE = "users!A2:D"  # A: userId, B: userName, C: role, D: groupId
SHEET_GROUP_REQUESTS_RANGE = "groupRequests!A2:G"  # id, name, requestedBy, status, decidedBy, decidedAt, createdAt

# Сколько элементов показываем на одной странице списка
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "8"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Только для STORAGE_BACKEND=memory: администраторы и стартовый список групп,
# через запятую. Для Google-таблицы роль хранится в колонке role листа users.
ADMIN_USER_IDS = [
    uid.strip() for uid in os.getenv("ADMIN_USER_IDS", "").split(",") if uid.strip()
]
BOOTSTRAP_GROUPS = [
    name.strip() for name in os.getenv("BOOTSTRAP_GROUPS", "").split(",") if name.strip()
]
