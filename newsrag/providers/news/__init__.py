from newsrag.providers.news.faker_news_source import FakerNewsSource
from newsrag.providers.news.rss_news_source import RssNewsSource

__all__ = ["FakerNewsSource", "RssNewsSource"]
