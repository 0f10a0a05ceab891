"""HTML to Markdown content extraction."""

from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter

from crawlbase_mcp.models.batch import MarkdownResult

EXCERPT_LENGTH = 200

# Page chrome removed before conversion (aggressive for e-commerce pages)
UNWANTED_SELECTORS = [
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
    "aside",
    ".navigation",
    ".sidebar",
    ".menu",
    ".ad",
    ".advertisement",
    ".reviews",
    ".review",
    ".comments",
    ".comment",
    ".related",
    ".recommendations",
    ".suggestions",
    ".carousel",
    ".slider",
    ".breadcrumb",
    ".pagination",
    ".social",
    ".share",
    ".newsletter",
    ".promo",
    ".banner",
    "#reviews",
    "#comments",
    '[class*="review"]',
    '[class*="comment"]',
    '[class*="related"]',
    '[class*="recommend"]',
    '[class*="suggestion"]',
    '[class*="carousel"]',
    '[class*="slider"]',
    '[class*="ad"]',
    '[class*="banner"]',
    '[class*="promo"]',
]

# Main content containers, in order of preference
CONTENT_SELECTORS = [
    "#main-content",
    "#content",
    ".main-content",
    ".content",
    ".product-info",
    ".product-details",
    ".product-description",
    "main",
    "article",
    ".post",
    ".entry",
    "#main",
]


class ContentConverter(MarkdownConverter):
    """Markdown converter that drops in-page anchors."""

    def convert_a(self, el: Tag, text: str, *args: Any, **kwargs: Any) -> str:
        href = el.get("href")
        if not href or href.startswith("#"):
            return text
        return f"[{text}]({href})"


class MarkdownExtractor:
    """Extract readable Markdown from a crawled HTML page."""

    def __init__(self) -> None:
        self.converter = ContentConverter(
            heading_style="ATX",
            strong_em_symbol="*",
            bullets="-",
            code_language="",
            strip=["script", "style", "noscript"],
        )

    def extract_markdown(self, html: str, url: str) -> MarkdownResult:
        """Convert a page to Markdown.

        Args:
            html: Page HTML
            url: Source URL, echoed in the result

        Returns:
            MarkdownResult with title, content, excerpt and length

        Raises:
            ValueError: If the page cannot be parsed or converted
        """
        try:
            soup = BeautifulSoup(html, "lxml")
            title = self.extract_title(soup)
            cleaned_html = self.clean_content(soup)
            markdown = self._normalize(self.converter.convert(cleaned_html))
            excerpt = self.generate_excerpt(markdown)
        except Exception as e:
            raise ValueError(f"Failed to extract markdown: {e}") from e

        return MarkdownResult(
            title=title or "Untitled",
            content=markdown,
            excerpt=excerpt,
            url=url,
            length=len(markdown),
        )

    def extract_title(self, soup: BeautifulSoup) -> str | None:
        """Find a page title from <title>, the first <h1>, or og:title."""
        if soup.title:
            title = soup.title.get_text().strip()
            if title:
                return title

        h1 = soup.find("h1")
        if h1:
            title = h1.get_text().strip()
            if title:
                return title

        meta_title = soup.select_one('meta[property="og:title"]')
        if meta_title:
            title = (meta_title.get("content") or "").strip()
            if title:
                return title

        return None

    def clean_content(self, soup: BeautifulSoup) -> str:
        """Strip page chrome and return the HTML of the main content area.

        The soup is modified in place.
        """
        for selector in UNWANTED_SELECTORS:
            for element in soup.select(selector):
                if not element.decomposed:
                    element.decompose()

        main_content: Tag | None = None
        for selector in CONTENT_SELECTORS:
            main_content = soup.select_one(selector)
            if main_content:
                break

        if main_content is None:
            # Fallback to body or entire document
            main_content = soup.body or soup

        return main_content.decode_contents()

    def generate_excerpt(self, markdown: str) -> str:
        """Build a plain-text excerpt of about 200 characters.

        Cuts at the last sentence end when one falls in the second half of the
        excerpt, otherwise truncates and appends an ellipsis.
        """
        plain_text = re.sub(r"#+\s+", "", markdown)
        plain_text = re.sub(r"\*\*([^*]+)\*\*", r"\1", plain_text)
        plain_text = re.sub(r"\*([^*]+)\*", r"\1", plain_text)
        plain_text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", plain_text)
        plain_text = re.sub(r"```[\s\S]*?```", "", plain_text)
        plain_text = re.sub(r"`([^`]+)`", r"\1", plain_text)
        plain_text = plain_text.strip()

        if len(plain_text) <= EXCERPT_LENGTH:
            return plain_text

        truncated = plain_text[:EXCERPT_LENGTH]
        last_sentence = truncated.rfind(".")
        if last_sentence > 100:
            return truncated[: last_sentence + 1]

        return truncated + "..."

    @staticmethod
    def _normalize(markdown: str) -> str:
        # Collapse the blank-line runs left behind by removed elements
        return re.sub(r"\n{3,}", "\n\n", markdown).strip()


def filter_html_by_selector(html: str, css_selector: str) -> tuple[str, int]:
    """Keep only the elements matching a CSS selector.

    Args:
        html: The HTML content to filter
        css_selector: CSS selector to match elements
                     (e.g., "article", ".product-details", "img, video")

    Returns:
        Tuple of (matched elements joined by newlines, number of matches).
        Returns ("", 0) if nothing matches.

    Raises:
        ValueError: If the CSS selector syntax is invalid
    """
    try:
        elements = BeautifulSoup(html, "lxml").select(css_selector)
    except Exception as e:
        raise ValueError(f"Invalid CSS selector '{css_selector}': {e}") from e

    if not elements:
        return "", 0

    return "\n".join(str(element) for element in elements), len(elements)
