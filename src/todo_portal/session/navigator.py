import logging
import webbrowser
from typing import Protocol

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    def navigate(self, url: str) -> None:
        ...


class BrowserNavigator:
    """
    Hands a full-page navigation to the system browser.
    The client instance that navigated is finished; a new run starts over.
    """

    def __init__(self, open_browser: bool = True):
        self.open_browser = open_browser

    def navigate(self, url: str) -> None:
        logger.info("Navigating to %s", url)
        if self.open_browser and not webbrowser.open(url):
            logger.warning("No browser available; open %s manually", url)
