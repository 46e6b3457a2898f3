import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

RTL_LANGUAGES = frozenset({"ar"})


class LanguageService:
    """Current UI language, persisted under ``lang``.

    Subscribers are called with the new language on every change, and once
    immediately on subscription.
    """

    STORAGE_KEY = "lang"

    def __init__(self, storage, default: str = "en"):
        self._storage = storage
        self._subscribers: List[Callable[[str], None]] = []
        self._current = default
        self.change_language(storage.get_item(self.STORAGE_KEY) or default)

    @property
    def current_language(self) -> str:
        return self._current

    @property
    def direction(self) -> str:
        return "rtl" if self._current in RTL_LANGUAGES else "ltr"

    def change_language(self, lang: str) -> None:
        self._current = lang
        self._storage.set_item(self.STORAGE_KEY, lang)
        logger.debug("Language set to %s (%s)", lang, self.direction)
        for callback in list(self._subscribers):
            callback(lang)

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._subscribers.append(callback)
        callback(self._current)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
