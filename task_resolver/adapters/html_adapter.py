from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from task_resolver.resolution.exceptions import ParameterError


class HtmlDocument:
    """A parsed HTML page that can be queried with CSS selectors."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    def count(self, selector: str) -> int:
        try:
            return len(self._soup.select(selector))
        except SelectorSyntaxError as exc:
            raise ParameterError(f"invalid CSS selector '{selector}': {exc}") from exc


class HtmlAdapter:
    """Parses HTML with BeautifulSoup's built-in parser."""

    def parse(self, html: str) -> HtmlDocument:
        return HtmlDocument(BeautifulSoup(html, "html.parser"))
