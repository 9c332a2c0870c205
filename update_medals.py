"""
Olympics Medals Widget Updater
==============================
Called by GitHub Actions on a schedule. Fetches the Games' medal table from
the Wikipedia API, keeps the top N countries in the table's own display
order with tied ranks, and writes public/medals.json for the widget.

Data flow:
  1. Code tables — built-in overrides + data/*.json from build_noc_mappings.py
  2. Medal table — Wikipedia '<GAME_PAGE>' via action=parse
  3. Top N rows  — falls back to zero-medal placeholders when the table is
                   missing or short
"""

import argparse
import json
import os
import sys
import traceback
from dataclasses import dataclass, replace
from datetime import datetime
from zoneinfo import ZoneInfo

from medal_table import build_payload, parse_top_rows, validate_rows
from noc_codes import CodeMapping
from wiki_api import fetch_parsed_html, page_url

DEFAULT_MAPPINGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')


@dataclass
class Config:
    """Run settings, normally from the environment."""
    game_page: str = '2026_Winter_Olympics_medal_table'
    games_name: str = 'Milano Cortina 2026'
    placeholder_count: int = 10
    top_n: int = 5
    out_file: str = os.path.join('public', 'medals.json')
    mappings_dir: str = DEFAULT_MAPPINGS_DIR
    timezone: str = 'America/New_York'

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            game_page=env.get('GAME_PAGE', defaults.game_page),
            games_name=env.get('GAMES_NAME', defaults.games_name),
            placeholder_count=int(env.get('PLACEHOLDER_COUNT', defaults.placeholder_count)),
            top_n=int(env.get('TOP_N', defaults.top_n)),
            out_file=env.get('OUT_FILE', defaults.out_file),
            mappings_dir=env.get('MAPPINGS_DIR', defaults.mappings_dir),
            timezone=env.get('FEED_TIMEZONE', defaults.timezone),
        )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Scrape a Wikipedia medal table into the widget medals.json.'
    )
    parser.add_argument('--page', help='Wikipedia page title (env GAME_PAGE).')
    parser.add_argument('--games', help='Display name of the Games (env GAMES_NAME).')
    parser.add_argument('--top-n', type=int, help='Rows to publish (env TOP_N).')
    parser.add_argument('--placeholder-count', type=int,
                        help='Size of the placeholder roster (env PLACEHOLDER_COUNT).')
    parser.add_argument('--out', help='Output JSON path (env OUT_FILE).')
    parser.add_argument('--html-file',
                        help='Parse a saved page HTML fragment instead of fetching.')
    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
    except ValueError as e:
        parser.error(f'invalid numeric setting in environment: {e}')

    overrides = {
        'game_page': args.page,
        'games_name': args.games,
        'top_n': args.top_n,
        'placeholder_count': args.placeholder_count,
        'out_file': args.out,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    if config.top_n < 1 or config.placeholder_count < 0:
        parser.error('top-n must be positive and placeholder-count non-negative')
    return config, args.html_file


def load_html(config, html_file=None):
    if html_file:
        with open(html_file, 'r', encoding='utf-8') as f:
            return f.read()
    return fetch_parsed_html(config.game_page)


def write_payload(payload, out_file):
    out_dir = os.path.dirname(out_file)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_file, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def run(config, html_file=None):
    """Fetch, parse and write the feed. Returns the payload."""
    tz = ZoneInfo(config.timezone)
    print(f'Starting medals update at {datetime.now(tz).strftime("%Y-%m-%d %H:%M %Z")}')

    mapping = CodeMapping.load(config.mappings_dir)

    html = load_html(config, html_file)
    print(f'  ✓ Fetched {config.game_page} ({len(html)} chars)')

    rows = parse_top_rows(html, config.top_n, mapping)
    if len(rows) == config.top_n:
        print(f'  ✓ Medal table: {len(rows)} rows')
    else:
        print(f'  ↳ Medal table gave {len(rows)} of {config.top_n} rows, using placeholders')

    for w in validate_rows(rows):
        print(f'  ⚠ {w}')

    payload = build_payload(
        rows,
        top_n=config.top_n,
        placeholder_count=config.placeholder_count,
        mapping=mapping,
        source_url=page_url(config.game_page),
        games=config.games_name,
        game_page=config.game_page,
        tz=tz,
    )
    write_payload(payload, config.out_file)

    print(f'Wrote {config.out_file} top={config.top_n} rows={len(payload["rows"])} live={payload["isLiveData"]}')
    return payload


def main(argv=None):
    config, html_file = parse_args(argv)
    try:
        run(config, html_file)
    except Exception as e:
        print(f'FATAL: medals update failed: {e}', file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
