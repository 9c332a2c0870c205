"""
Wikipedia (MediaWiki parse API) fetcher shared by the medal feed and the
NOC mapping builder.
"""

from urllib.parse import quote

import requests

WIKI_API = 'https://en.wikipedia.org/w/api.php'
WIKI_PAGE_BASE = 'https://en.wikipedia.org/wiki/'
USER_AGENT = 'olympics-medals-widget/1.0 (GitHub Actions)'


def page_url(page):
    """Public article URL for a page title."""
    return WIKI_PAGE_BASE + quote(page, safe='')


def fetch_parsed_html(page, timeout=30):
    """Fetch the rendered HTML of a Wikipedia page.

    Raises requests.HTTPError on a non-2xx response and ValueError when the
    response has no parse.text payload.
    """
    params = {
        'action': 'parse',
        'page': page,
        'format': 'json',
        'prop': 'text',
        'formatversion': 2,
        'redirects': 1,
    }
    resp = requests.get(WIKI_API, params=params, timeout=timeout,
                        headers={'User-Agent': USER_AGENT})
    resp.raise_for_status()

    text = resp.json().get('parse', {}).get('text')
    # formatversion=1 wraps the HTML as {'*': html}
    if isinstance(text, dict):
        text = text.get('*')
    if not text:
        raise ValueError(f'MediaWiki parse response missing HTML for {page!r}')
    return text
