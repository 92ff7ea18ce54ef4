"""Browser-driven scraper for the public Riftbound event locator page.

This is an alternate, schema-less way of gathering event listings when the
API is not used. It produces loose fragments for manual inspection and is not
connected to calendar generation.
"""
import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from processor.exceptions import ScrapeError
from processor.models import ScrapedEventFragment

logger = logging.getLogger(__name__)

CARD_SELECTOR = 'a[href^="/events/"]'


class LocatorBrowserScraper:
    """Scraper walking the locator event list in a headless browser."""

    BASE_URL = "https://locator.riftbound.uvsgames.com/events"
    SETTLE_MS = 2000
    MAX_PAGES = 100

    def __init__(
        self,
        location: str = 'Paris, France',
        distance: str = '5 mi',
        headless: bool = True,
        timeout: int = 30
    ):
        """
        Initialize the browser scraper.

        Args:
            location: Text typed into the address search field
            distance: Label of the distance filter option to select
            headless: Run the browser without a window (default: True)
            timeout: Per-action timeout in seconds (default: 30)
        """
        self.location = location
        self.distance = distance
        self.headless = headless
        self.timeout_ms = timeout * 1000

    def scrape(self) -> List[ScrapedEventFragment]:
        """
        Scrape every page of the event list.

        Returns:
            List of ScrapedEventFragment objects in page order

        Raises:
            ScrapeError: If the browser cannot load or drive the page
        """
        logger.info(f"Scraping {self.BASE_URL} around '{self.location}'")
        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch(headless=self.headless)
                try:
                    page = browser.new_page()
                    page.set_default_timeout(self.timeout_ms)
                    return self._scrape_page(page)
                finally:
                    browser.close()
        except PlaywrightError as e:
            logger.error(f"Browser scrape failed: {e}", exc_info=True)
            raise ScrapeError(f"Browser scrape failed: {e}") from e

    def _scrape_page(self, page) -> List[ScrapedEventFragment]:
        page.goto(self.BASE_URL)
        self._accept_cookies(page)
        self._apply_filters(page)

        fragments = []
        for page_number in range(1, self.MAX_PAGES + 1):
            found = parse_event_cards(page.content())
            logger.info(f"Page {page_number}: {len(found)} event cards")
            fragments.extend(found)

            if not self._go_to_next_page(page):
                break
        else:
            logger.warning(f"Stopped after {self.MAX_PAGES} pages")

        logger.info(f"Scraped {len(fragments)} event fragments")
        return fragments

    def _accept_cookies(self, page) -> None:
        """Dismiss the cookie consent dialog when it is shown."""
        try:
            button = page.get_by_role('button', name='Accept All')
            if button.is_visible():
                button.click()
                logger.debug("Accepted cookie banner")
        except PlaywrightError as e:
            logger.debug(f"No cookie banner handled: {e}")

    def _apply_filters(self, page) -> None:
        """Search around the configured location and narrow the distance."""
        page.fill('#address-autocomplete-input', self.location)
        page.wait_for_selector('.pac-item')
        page.locator('.pac-item', has_text=self.location).first.click()

        page.click('text=Distance')
        page.click(f'text={self.distance}')
        page.wait_for_timeout(self.SETTLE_MS)

    def _go_to_next_page(self, page) -> bool:
        """Click the Next control; return False once it is exhausted."""
        next_button = page.locator('button', has_text='Next')
        if next_button.count() == 0:
            return False
        next_button = next_button.first
        if not (next_button.is_visible() and next_button.is_enabled()):
            return False
        next_button.click()
        page.wait_for_timeout(self.SETTLE_MS)
        return True


def _span_text(card, position: int) -> str:
    span = card.select_one(f':scope div > div > span:nth-of-type({position})')
    return span.get_text(strip=True) if span else ''


def parse_event_cards(html_content: str) -> List[ScrapedEventFragment]:
    """
    Parse event cards out of a rendered locator page.

    Args:
        html_content: HTML of the rendered event list

    Returns:
        List of ScrapedEventFragment objects, one per card
    """
    soup = BeautifulSoup(html_content, 'html.parser')
    fragments = []

    for card in soup.select(CARD_SELECTOR):
        title_elem = card.find('h3')
        link: Optional[str] = card.get('href')
        fragments.append(
            ScrapedEventFragment(
                title=title_elem.get_text(strip=True) if title_elem else 'Unknown Title',
                date=_span_text(card, 1),
                time=_span_text(card, 2),
                link=link,
                full_text=card.get_text('\n', strip=True)
            )
        )

    return fragments
