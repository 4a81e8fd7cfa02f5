import logging


class LoggingService:
    """
    Fire-and-forget sink for client activity messages.

    Messages are kept in order for display (e.g. a status panel) and
    forwarded to stdlib logging.  ``add`` never raises into the caller;
    handler failures are dealt with by the logging module itself.
    """

    def __init__(self, logger_name: str = "quillcms.client") -> None:
        self.messages: list[str] = []
        self._logger = logging.getLogger(logger_name)

    def add(self, message: str) -> None:
        self.messages.append(message)
        self._logger.info(message)

    def clear(self) -> None:
        self.messages.clear()
