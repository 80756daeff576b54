"""Shared fixtures for adapter tests."""

from datetime import datetime

import pytest

from trend_monitor.keywords.schemas import Keyword
from trend_monitor.sources.schemas import Source


@pytest.fixture
def clock(fixed_now: datetime):
    return lambda: fixed_now


@pytest.fixture
def keyword() -> Keyword:
    return Keyword(id="kw_galaxy", name="galaxy", category="product")


@pytest.fixture
def google_news_source() -> Source:
    return Source(name="Google News", type="news", url="https://news.google.com")


@pytest.fixture
def naver_news_source() -> Source:
    return Source(name="Naver News", type="news", url="https://search.naver.com")


@pytest.fixture
def clien_source() -> Source:
    return Source(name="Clien", type="community", url="https://www.clien.net")


@pytest.fixture
def blind_source() -> Source:
    return Source(name="Blind", type="community", url="https://www.teamblind.com")


@pytest.fixture
def channel_source() -> Source:
    return Source(
        name="IT Channel",
        type="video",
        url="https://www.youtube.com/channel/UCabcdefghijklmnopqrstuv",
    )


GOOGLE_NEWS_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>"galaxy" - Google News</title>
    <item>
      <title>Galaxy launch draws crowds</title>
      <link>https://news.example.com/a1</link>
      <pubDate>Sun, 01 Mar 2026 11:30:00 GMT</pubDate>
      <description>&lt;a href="https://news.example.com/a1"&gt;Galaxy launch&lt;/a&gt; draws crowds</description>
    </item>
    <item>
      <title>Galaxy preorders open</title>
      <link>https://news.example.com/a2</link>
      <pubDate>Sun, 01 Mar 2026 10:15:00 GMT</pubDate>
      <description>Preorders open today</description>
    </item>
    <item>
      <title>Old galaxy rumor</title>
      <link>https://news.example.com/old</link>
      <pubDate>Sun, 01 Mar 2026 07:00:00 GMT</pubDate>
      <description>Too old for the window</description>
    </item>
    <item>
      <title>Undated galaxy post</title>
      <link>https://news.example.com/undated</link>
      <description>No publication date</description>
    </item>
  </channel>
</rss>
"""


NAVER_NEWS_HTML = """
<html><body>
<ul class="list_news">
  <li><div class="news_area">
    <a class="news_tit" href="https://n.news.example.com/1">Galaxy sales climb</a>
    <div class="news_dsc">Sales rose in the first week</div>
  </div></li>
  <li><div class="news_area">
    <a class="news_tit" href="/relative/2">Galaxy camera test</a>
  </div></li>
  <li><div class="news_area">
    <div class="news_dsc">Row without a title link</div>
  </div></li>
</ul>
</body></html>
"""


CLIEN_HTML = """
<html><body>
<div class="list_item">
  <a class="list_subject" href="/service/board/park/1001"><span>Galaxy battery life</span></a>
</div>
<div class="list_item">
  <a class="list_subject" href="https://www.clien.net/service/board/cm_andro/1002"><span>  Galaxy   update  </span></a>
</div>
<div class="list_item">
  <a class="list_subject"><span>No link here</span></a>
</div>
</body></html>
"""


@pytest.fixture
def google_news_rss() -> str:
    return GOOGLE_NEWS_RSS


@pytest.fixture
def naver_news_html() -> str:
    return NAVER_NEWS_HTML


@pytest.fixture
def clien_html() -> str:
    return CLIEN_HTML
