from typing import Optional


class EssayError(Exception):
    """Базовая ошибка жизненного цикла эссе"""

    def __init__(self, message: str, essay_id: Optional[str] = None):
        super().__init__(message)
        self.essay_id = essay_id


class RepositoryError(EssayError):
    """Сбой хранилища (сеть, ограничения БД, права)"""
    pass



class LoadFailure(EssayError):
    """Не удалось загрузить коллекцию раздела"""
    pass


class ProvisionFailure(EssayError):
    """Автоматическое создание эссе не удалось"""
    pass


class SaveFailure(EssayError):
    """Сохранение правок не удалось"""
    pass


class PublicationFailure(EssayError):
    """Публикация или снятие с публикации не удались"""
    pass
