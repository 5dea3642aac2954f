"""
Menu provider.

Fetches today's menu page and scrapes the entrants and seconds lists.
Each returned list carries the oversized marker as its last entry.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import httpx
from bs4 import BeautifulSoup

from shared.logging.logger import get_logger

log = get_logger("menu.provider")

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
ITEM_TAGS = ["p", "li"]
MAX_HEADING_LENGTH = 40


class MenuUnavailable(RuntimeError):
    """Raised when the menu cannot be fetched or parsed."""


class MenuProvider(ABC):
    @abstractmethod
    async def fetch_today_menu(self) -> Tuple[List[str], List[str]]:
        """
        Return (entrants, seconds), each terminated with the oversized marker.
        Raise MenuUnavailable on any failure.
        """
        raise NotImplementedError


def _normalize(text: str) -> str:
    return " ".join(text.split()).strip(" :-").lower()


def _is_heading(text: str, heading: str) -> bool:
    normalized = _normalize(text)
    return len(normalized) <= MAX_HEADING_LENGTH and normalized.startswith(heading.lower())


def parse_menu(
    html: str,
    *,
    entrants_heading: str,
    seconds_heading: str,
) -> Tuple[List[str], List[str]]:
    """
    Extract dish names listed after the entrants and seconds headings.

    A section ends at the next heading tag. Duplicates are dropped while
    keeping page order.
    """
    soup = BeautifulSoup(html, "html.parser")
    sections = {entrants_heading: [], seconds_heading: []}
    current: Optional[str] = None

    for element in soup.find_all(HEADING_TAGS + ITEM_TAGS):
        # Nested items are visited on their own
        if element.name == "p" and element.find(ITEM_TAGS):
            continue

        text = " ".join(element.get_text(" ", strip=True).split())
        if not text:
            continue

        if _is_heading(text, entrants_heading):
            current = entrants_heading
            continue
        if _is_heading(text, seconds_heading):
            current = seconds_heading
            continue
        if element.name in HEADING_TAGS:
            current = None
            continue

        if current is not None and text not in sections[current]:
            sections[current].append(text)

    return sections[entrants_heading], sections[seconds_heading]


class HttpMenuProvider(MenuProvider):
    def __init__(
        self,
        *,
        url: str,
        entrants_heading: str = "Entrantes",
        seconds_heading: str = "Segundos",
        oversized_label: str = "XL",
        timeout_seconds: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.entrants_heading = entrants_heading
        self.seconds_heading = seconds_heading
        self.oversized_label = oversized_label
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def _fetch_html(self) -> str:
        headers = {
            "User-Agent": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                "AppleWebKit/537.36 (KHTML, like Gecko) "
                "Chrome/120.0.0.0 Safari/537.36"
            ),
            "Accept": "text/html,application/xhtml+xml",
        }

        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            headers=headers,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.get(self.url)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                log.error(f"Failed to fetch menu page {self.url}: {e}")
                raise MenuUnavailable(str(e)) from e
            return resp.text

    async def fetch_today_menu(self) -> Tuple[List[str], List[str]]:
        if not self.url:
            raise MenuUnavailable("No menu url configured")

        html = await self._fetch_html()
        entrants, seconds = parse_menu(
            html,
            entrants_heading=self.entrants_heading,
            seconds_heading=self.seconds_heading,
        )

        if not entrants or not seconds:
            log.error(
                f"Menu page parsed without dishes "
                f"(entrants={len(entrants)}, seconds={len(seconds)})"
            )
            raise MenuUnavailable("Menu page has no dishes")

        log.info(f"Menu fetched: {len(entrants)} entrants, {len(seconds)} seconds")
        return entrants + [self.oversized_label], seconds + [self.oversized_label]
