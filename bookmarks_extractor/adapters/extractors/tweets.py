"""
Bookmarked tweets extractor

Reads the tweets currently rendered on the bookmarks timeline, scrolls, and
yields each batch. The timeline is considered exhausted once several scrolls
in a row surface no tweet that hasn't been seen yet.
"""

import logging
import re
from typing import AsyncIterator, List, Optional, Set

from playwright.async_api import (
    ElementHandle, Error as PlaywrightError, Page,
    TimeoutError as PlaywrightTimeoutError
)

from ...core.domain import Tweet, TweetSet
from ...core.exceptions import ExtractionFailure

logger = logging.getLogger(__name__)

_STATUS_ID = re.compile(r"/status/(\d+)")
_LEADING_COUNT = re.compile(r"^\s*([\d,]+)")


class Selectors:
    """DOM selectors of a rendered tweet"""

    TWEET = 'article[data-testid="tweet"]'
    PERMALINK = 'a[href*="/status/"]:has(time)'
    TEXT = '[data-testid="tweetText"]'
    USER_NAME = '[data-testid="User-Name"]'
    TIME = 'time'
    REPLY = '[data-testid="reply"]'
    RETWEET = '[data-testid="retweet"]'
    LIKE = '[data-testid="like"]'
    PHOTO = '[data-testid="tweetPhoto"]'
    VIDEO = '[data-testid="videoPlayer"]'


def tweet_id_from_href(href: Optional[str]) -> Optional[str]:
    """Extract the status id from a tweet permalink"""
    if not href:
        return None
    match = _STATUS_ID.search(href)
    return match.group(1) if match else None


def parse_count(label: Optional[str]) -> int:
    """Parse the leading number of an engagement aria-label such as '1,204 Likes. Like'"""
    if not label:
        return 0
    match = _LEADING_COUNT.match(label)
    if not match:
        return 0
    return int(match.group(1).replace(',', ''))


def split_user_name(text: Optional[str]):
    """Split the User-Name block into (display name, @handle)"""
    if not text:
        return None, None
    lines = [line.strip() for line in text.split('\n') if line.strip()]
    name = lines[0] if lines else None
    handle = next((line for line in lines if line.startswith('@')), None)
    return name, handle


class TweetExtractor:
    """Scroll-paginated reader of the bookmarks timeline"""

    def __init__(
        self,
        base_url: str = "https://x.com",
        scroll_pause_ms: int = 1500,
        max_idle_scrolls: int = 5,
        first_tweet_timeout_ms: int = 15000
    ):
        self.base_url = base_url.rstrip('/')
        self.scroll_pause_ms = scroll_pause_ms
        self.max_idle_scrolls = max_idle_scrolls
        self.first_tweet_timeout_ms = first_tweet_timeout_ms

    async def extract(self, page: Page) -> AsyncIterator[TweetSet]:
        """Yield batches of newly rendered tweets until the timeline is exhausted"""
        try:
            await page.wait_for_selector(Selectors.TWEET, timeout=self.first_tweet_timeout_ms)
        except PlaywrightTimeoutError:
            logger.info("No bookmarked tweets found")
            return

        seen: Set[str] = set()
        idle_scrolls = 0
        batch_index = 0

        while idle_scrolls < self.max_idle_scrolls:
            try:
                batch = TweetSet(await self.read_visible_tweets(page))
            except PlaywrightError as e:
                raise ExtractionFailure(f"Failed to read tweets: {e}", batch_index=batch_index)

            new_ids = [tweet_id for tweet_id in batch.ids() if tweet_id not in seen]
            if new_ids:
                idle_scrolls = 0
                seen.update(new_ids)
                batch_index += 1
                yield batch
            else:
                idle_scrolls += 1

            try:
                await page.evaluate("window.scrollBy(0, window.innerHeight)")
                await page.wait_for_timeout(self.scroll_pause_ms)
            except PlaywrightError as e:
                raise ExtractionFailure(f"Failed to scroll bookmarks: {e}", batch_index=batch_index)

    async def read_visible_tweets(self, page: Page) -> List[Tweet]:
        tweets = []
        for article in await page.query_selector_all(Selectors.TWEET):
            tweet = await self.parse_article(article)
            if tweet is not None:
                tweets.append(tweet)
        return tweets

    async def parse_article(self, article: ElementHandle) -> Optional[Tweet]:
        """Parse one tweet article; promoted or half-rendered tweets without a permalink yield None"""
        link = await article.query_selector(Selectors.PERMALINK)
        href = await link.get_attribute('href') if link else None
        tweet_id = tweet_id_from_href(href)
        if tweet_id is None:
            return None

        author_name, author_handle = split_user_name(
            await self._inner_text(article, Selectors.USER_NAME)
        )

        time_element = await article.query_selector(Selectors.TIME)
        timestamp = await time_element.get_attribute('datetime') if time_element else None

        if await article.query_selector(Selectors.PHOTO):
            media_type = 'photo'
        elif await article.query_selector(Selectors.VIDEO):
            media_type = 'video'
        else:
            media_type = 'none'

        return Tweet(
            id=tweet_id,
            text=await self._inner_text(article, Selectors.TEXT) or "",
            author_name=author_name,
            author_handle=author_handle,
            timestamp=timestamp,
            url=href if href.startswith('http') else f"{self.base_url}{href}",
            reply_count=parse_count(await self._aria_label(article, Selectors.REPLY)),
            retweet_count=parse_count(await self._aria_label(article, Selectors.RETWEET)),
            like_count=parse_count(await self._aria_label(article, Selectors.LIKE)),
            media_type=media_type
        )

    @staticmethod
    async def _inner_text(article: ElementHandle, selector: str) -> Optional[str]:
        element = await article.query_selector(selector)
        return await element.inner_text() if element else None

    @staticmethod
    async def _aria_label(article: ElementHandle, selector: str) -> Optional[str]:
        element = await article.query_selector(selector)
        return await element.get_attribute('aria-label') if element else None
