# sqliradar/extractor.py - Candidate parameter extraction from static HTML

from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urljoin, urlparse

from bs4 import BeautifulSoup

from .models import FormFields, ParameterContext, ParameterInfo


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def extract_title(html: str) -> Optional[str]:
    """Return the stripped <title> text of a page, or None if it has none."""
    soup = parse_html(html)
    if soup.title is None:
        return None
    return soup.title.get_text().strip()


class ParameterExtractor:
    """Turns one fetched page into a list of candidate injection points."""

    def extract(self, page_url: str, html: str) -> List[ParameterInfo]:
        """
        Extract parameters from a page.

        Args:
            page_url: URL the page was fetched from
            html: Page body

        Returns:
            List[ParameterInfo]: Query parameters of the URL first, then form fields
        """
        return self.extract_from_soup(page_url, parse_html(html))

    def extract_from_soup(self, page_url: str, soup: Optional[BeautifulSoup]) -> List[ParameterInfo]:
        parameters = self.extract_url_parameters(page_url)
        if soup is not None:
            for form in soup.find_all("form"):
                parameters.extend(self._form_parameters(page_url, form))
        return parameters

    def extract_url_parameters(self, page_url: str) -> List[ParameterInfo]:
        query = urlparse(page_url).query
        return [
            ParameterInfo(
                name=name,
                source=page_url,
                method="GET",
                action_url=page_url,
                context=ParameterContext.URL_PARAMETER,
                sample_value=value,
            )
            for name, value in parse_qsl(query, keep_blank_values=True)
        ]

    def _form_parameters(self, page_url: str, form) -> List[ParameterInfo]:
        method = (form.get("method") or "GET").strip().upper()
        # browsers submit unknown methods as GET
        if method != "POST":
            method = "GET"

        action = (form.get("action") or "").strip()
        action_url = page_url
        if action:
            try:
                action_url = urljoin(page_url, action)
            except ValueError:
                # malformed action, submit to the page itself
                action_url = page_url

        fields = self._form_fields(form)
        context = ParameterContext.for_form(method)

        return [
            ParameterInfo(
                name=name,
                source=page_url,
                method=method,
                action_url=action_url,
                context=context,
                sample_value=value,
                form_fields=fields,
            )
            for name, value in fields
        ]

    def _form_fields(self, form) -> FormFields:
        fields: List[Tuple[str, str]] = []
        for element in form.find_all(["input", "select", "textarea"]):
            name = element.get("name")
            if not name:
                continue
            fields.append((name, self._field_value(element)))
        return tuple(fields)

    @staticmethod
    def _field_value(element) -> str:
        if element.name == "textarea":
            return element.get_text()

        if element.name == "select":
            option = element.find("option", selected=True) or element.find("option")
            if option is None:
                return ""
            value = option.get("value")
            return value if value is not None else option.get_text().strip()

        return element.get("value", "")
