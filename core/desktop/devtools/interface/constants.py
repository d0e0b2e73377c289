"""Interface-level constants for the beadtree CLI/TUI."""

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
APP_NAME = "beadtree"

LANG_PACK = {
    "en": {
        "APP_TITLE": "beadtree",
        "STATS": "{total} issues · {in_progress} active · {ready} ready · {blocked} blocked · {closed} closed",
        "VIEW_MODE_ALL": "All",
        "VIEW_MODE_ACTIVE": "Active",
        "VIEW_MODE_READY": "Ready",
        "FILTER_LABEL": "filter",
        "REFRESH_LABEL": "refresh",
        "REFRESHING": "refreshing…",
        "REFRESH_NEVER": "not refreshed yet",
        "AUTO_REFRESH_OFF": "auto-refresh off",
        "ERROR_LABEL": "error",
        "WARNING_LABEL": "warning",
        "EMPTY_TREE": "No issues to show.",
        "EMPTY_FILTERED": "No issues match the current filter.",
        "DETAIL_EMPTY": "Nothing selected.",
        "DETAIL_STATUS": "Status",
        "DETAIL_PRIORITY": "Priority",
        "DETAIL_TYPE": "Type",
        "DETAIL_ASSIGNEE": "Assignee",
        "DETAIL_LABELS": "Labels",
        "DETAIL_PARENTS": "Parents",
        "DETAIL_BLOCKED_BY": "Blocked by",
        "DETAIL_BLOCKS": "Blocks",
        "DETAIL_RELATED": "Related",
        "DETAIL_DESCRIPTION": "Description",
        "DETAIL_DESIGN": "Design",
        "DETAIL_ACCEPTANCE": "Acceptance criteria",
        "DETAIL_NOTES": "Notes",
        "DETAIL_COMMENTS": "Comments",
        "DETAIL_COMMENTS_LOADING": "loading comments…",
        "DETAIL_COMMENTS_ERROR": "comments unavailable: {error}",
        "DETAIL_NO_COMMENTS": "no comments",
        "PROMPT_FILTER": "Filter: ",
        "PROMPT_CREATE": "New issue under {parent}: ",
        "PROMPT_CREATE_ROOT": "New root issue: ",
        "STATUS_CREATED": "created {id}",
        "STATUS_CREATE_FAILED": "create failed: {error}",
        "STATUS_NO_WRITER": "creating issues needs the bd command",
        "STATUS_READ_ONLY": "changing issues needs the bd command",
        "STATUS_NOTHING_SELECTED": "no issue selected",
        "STATUS_LINK_FAILED": "created {id}, but linking it under {parent} failed",
        "STATUS_STATUS_CHANGED": "{id} → {status}",
        "STATUS_DELETED": "deleted {id}",
        "STATUS_COMMENTED": "commented on {id}",
        "STATUS_LABELS_UPDATED": "labels updated on {id}",
        "STATUS_ACTION_FAILED": "{action} failed: {error}",
        "PROMPT_COMMENT": "Comment on {id}: ",
        "PROMPT_LABELS": "Labels for {id}: ",
        "PROMPT_DELETE": "Delete {id}? y to confirm: ",
        "PROMPT_DELETE_CASCADE": "Delete {id} and {count} descendants? y to confirm: ",
        "PROMPT_DELETE_CASCADE_ONE": "Delete {id} and {count} descendant? y to confirm: ",
        "HINTS": "j/k move · l/h expand/collapse · space toggle · / filter · v view · r refresh · d details · n new · s status · C comment · L labels · D delete · q quit",
        "HINTS_PROMPT": "enter accept · esc cancel",
        "ERR_NO_DATABASE": "no beads database found (looked for .beads/beads.db and ~/.beads/default.db)",
        "ERR_STARTUP": "startup failed: {error}",
    },
    "ru": {
        "STATS": "{total} задач · {in_progress} в работе · {ready} готово · {blocked} заблокировано · {closed} закрыто",
        "VIEW_MODE_ALL": "Все",
        "VIEW_MODE_ACTIVE": "Активные",
        "VIEW_MODE_READY": "Готовые",
        "FILTER_LABEL": "фильтр",
        "REFRESH_LABEL": "обновление",
        "REFRESHING": "обновление…",
        "REFRESH_NEVER": "ещё не обновлялось",
        "AUTO_REFRESH_OFF": "автообновление выключено",
        "ERROR_LABEL": "ошибка",
        "WARNING_LABEL": "предупреждение",
        "EMPTY_TREE": "Нет задач.",
        "EMPTY_FILTERED": "Нет задач под текущий фильтр.",
        "DETAIL_EMPTY": "Ничего не выбрано.",
        "DETAIL_STATUS": "Статус",
        "DETAIL_PRIORITY": "Приоритет",
        "DETAIL_TYPE": "Тип",
        "DETAIL_ASSIGNEE": "Исполнитель",
        "DETAIL_LABELS": "Метки",
        "DETAIL_PARENTS": "Родители",
        "DETAIL_BLOCKED_BY": "Блокируется",
        "DETAIL_BLOCKS": "Блокирует",
        "DETAIL_RELATED": "Связано",
        "DETAIL_DESCRIPTION": "Описание",
        "DETAIL_DESIGN": "Дизайн",
        "DETAIL_ACCEPTANCE": "Критерии приёмки",
        "DETAIL_NOTES": "Заметки",
        "DETAIL_COMMENTS": "Комментарии",
        "DETAIL_COMMENTS_LOADING": "загрузка комментариев…",
        "DETAIL_COMMENTS_ERROR": "комментарии недоступны: {error}",
        "DETAIL_NO_COMMENTS": "нет комментариев",
        "PROMPT_FILTER": "Фильтр: ",
        "PROMPT_CREATE": "Новая задача в {parent}: ",
        "PROMPT_CREATE_ROOT": "Новая корневая задача: ",
        "STATUS_CREATED": "создано {id}",
        "STATUS_CREATE_FAILED": "не удалось создать: {error}",
        "STATUS_NO_WRITER": "для создания задач нужна команда bd",
        "STATUS_READ_ONLY": "для изменения задач нужна команда bd",
        "STATUS_NOTHING_SELECTED": "задача не выбрана",
        "STATUS_LINK_FAILED": "создано {id}, но привязать к {parent} не удалось",
        "STATUS_DELETED": "удалено {id}",
        "STATUS_COMMENTED": "комментарий к {id} добавлен",
        "STATUS_LABELS_UPDATED": "метки {id} обновлены",
        "STATUS_ACTION_FAILED": "{action}: ошибка: {error}",
        "PROMPT_COMMENT": "Комментарий к {id}: ",
        "PROMPT_LABELS": "Метки {id}: ",
        "PROMPT_DELETE": "Удалить {id}? y для подтверждения: ",
        "PROMPT_DELETE_CASCADE": "Удалить {id} и {count} дочерних задач? y для подтверждения: ",
        "PROMPT_DELETE_CASCADE_ONE": "Удалить {id} и {count} дочернюю задачу? y для подтверждения: ",
        "PROMPT_DELETE_CASCADE_FEW": "Удалить {id} и {count} дочерние задачи? y для подтверждения: ",
        "HINTS": "j/k ход · l/h раскрыть/свернуть · пробел переключить · / фильтр · v вид · r обновить · d детали · n новая · s статус · C комментарий · L метки · D удалить · q выход",
        "HINTS_PROMPT": "enter принять · esc отмена",
        "ERR_NO_DATABASE": "база beads не найдена (.beads/beads.db или ~/.beads/default.db)",
        "ERR_STARTUP": "ошибка запуска: {error}",
    },
}
