# flowchart/exceptions.py


class FlowchartError(Exception):
    """Базовая ошибка приложения flowchart."""


class ValidationError(FlowchartError):
    """Пустой ввод или текст, не похожий на алгоритм. Показываем пользователю до запроса к модели."""


class ProviderError(FlowchartError, RuntimeError):
    """Сбой генеративного сервиса: сеть, таймаут, квота, битый ответ."""


class EmptyResponseError(ProviderError):
    """Сервис ответил, но текста в ответе нет."""


class RenderError(FlowchartError):
    """Рендерер на стороне клиента не смог разобрать диаграмму."""
