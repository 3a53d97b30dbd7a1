"""
Тексты сообщений бота
"""

TOPIC_EXAMPLES = (
    "Примеры тем:\n"
    "• Качество звука\n"
    "• Wellbeing\n"
    "• Умный дом"
)

WELCOME = (
    "👋 Привет! Я помогу получить агрегированные выводы и детальное саммари "
    "по результатам тестов фичей.\n\n"
    "По какой теме агрегировать?\n\n" + TOPIC_EXAMPLES
)

ASK_TOPIC = "По какой теме агрегировать?\n\n" + TOPIC_EXAMPLES

HELP = (
    "📖 Справка по использованию бота:\n\n"
    "1. Отправьте /start для начала работы\n"
    "2. Введите тему для агрегации (например: 'Качество звука')\n"
    "3. Выберите категории из предложенного списка\n"
    "4. Нажмите 'Сгенерировать'\n"
    "5. Получите агрегированные выводы и детальное саммари\n\n"
    "Команды:\n"
    "/start - начать работу\n"
    "/help - показать эту справку\n"
    "/cancel - отменить текущий диалог"
)

CANCELLED = "❌ Диалог отменен. Используйте /start для начала нового диалога."
EMPTY_TOPIC = "Пожалуйста, введите тему для агрегации."
NO_CATEGORIES = (
    "❌ Не удалось найти категории в Excel файле. "
    "Убедитесь, что файл содержит колонку 'Категория' или 'Продукт'."
)
DATA_LOAD_FAILED = (
    "❌ Ошибка при загрузке данных из Excel файла. "
    "Проверьте путь к файлу и его структуру."
)


def topic_confirmed(topic: str) -> str:
    return f'✅ Тема установлена: "{topic}"\n\nВыберите категории (можно выбрать несколько):'


START_FIRST = "Пожалуйста, начните с команды /start"
SELECT_AT_LEAST_ONE = "Пожалуйста, выберите хотя бы одну категорию."
ALREADY_GENERATING = "⏳ Отчет уже генерируется, подождите."
GENERATING = "⏳ Генерирую отчет... Это может занять некоторое время."
REPORT_DONE = "✅ Отчет сгенерирован!\n\nИспользуйте /start для создания нового отчета."
NO_DATA = (
    "🔍 По выбранным категориям нет данных. "
    "Выберите другие категории или начните заново с /start."
)
GENERATION_FAILED = (
    "❌ Ошибка при генерации отчета. Попробуйте еще раз или используйте /cancel для отмены."
)
UNKNOWN_INPUT = "🤔 Я не понял это сообщение. Используйте /start для нового отчета или /help для справки."
ADMIN_ONLY = "⛔ Команда доступна только администраторам."
DATA_RELOADED = "🔄 Кеш данных и шаблонов сброшен. Файл будет перечитан при следующем запросе."

BUTTON_GENERATE = "🚀 Сгенерировать"
BUTTON_CANCEL = "❌ Отмена"
BUTTON_START_NEW = "🔄 Начать заново"
SELECTED_MARK = "✅ "
