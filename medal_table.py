"""
Medal table scraping: locate the medal wikitable, pull rows in display order,
stamp competition-style tied ranks and assemble the widget payload.
"""

import re
from dataclasses import asdict, dataclass
from datetime import datetime

from bs4 import BeautifulSoup

from noc_codes import normalize_name

MEDAL_TABLE_KEYWORDS = ('gold', 'silver', 'bronze', 'total')
MIN_ROW_CELLS = 5
AGGREGATE_ROW_PREFIXES = ('totals',)

PLACEHOLDER_ROSTER = [
    ('Italy', 'ITA'),
    ('Switzerland', 'SUI'),
    ('Norway', 'NOR'),
    ('Germany', 'GER'),
    ('Canada', 'CAN'),
]

TIMESTAMP_FORMAT = '%d-%b-%Y %I:%M %p'  # 15-Feb-2026 07:14 PM


@dataclass
class MedalRow:
    """One committee's standing as shown in the widget."""
    rank: int
    noc: str
    name: str
    gold: int = 0
    silver: int = 0
    bronze: int = 0
    total: int = 0
    flag: str = None
    placeholder: bool = False

    @property
    def medals(self):
        return self.gold, self.silver, self.bronze

    def to_dict(self):
        return asdict(self)


# ── Text helpers ──────────────────────────────────────────────────────────

def clean_text(s):
    return normalize_name(s)


def parse_count(text):
    """'12[a]' -> 12, '—' / '' -> 0. Footnote brackets are dropped first."""
    digits = re.sub(r'\D', '', re.sub(r'\[.*?\]', '', str(text or '')))
    return int(digits) if digits else 0


def parse_html(html):
    return BeautifulSoup(html, 'lxml')


# ── Table locator ─────────────────────────────────────────────────────────

def find_table(soup, keywords, table_class='wikitable'):
    """First table whose header row contains every keyword, else None."""
    keywords = [k.lower() for k in keywords]
    tables = soup.find_all('table', class_=table_class) if table_class else soup.find_all('table')
    for table in tables:
        first_row = table.find('tr')
        if first_row is None:
            continue
        header = first_row.get_text(' ').lower()
        if all(k in header for k in keywords):
            return table
    return None


# ── Field matchers ────────────────────────────────────────────────────────
# Each matcher returns a value or None; the first non-None wins.

def _noc_from_parenthetical(raw_text, name, mapping):
    m = re.search(r'\(([A-Z]{3})\)\s*$', raw_text)
    return m.group(1) if m else None


def _noc_from_last_token(raw_text, name, mapping):
    tokens = raw_text.split(' ')
    if tokens and re.match(r'^[A-Z]{3}$', tokens[-1]):
        return tokens[-1]
    return None


def _noc_from_name(raw_text, name, mapping):
    return mapping.noc_for_name(name)


NOC_MATCHERS = (
    _noc_from_parenthetical,
    _noc_from_last_token,
    _noc_from_name,
)


def _rank_from_cell(text):
    return int(text) if re.match(r'^[0-9]+$', text) else None


RANK_MATCHERS = (_rank_from_cell,)


def first_match(matchers, *args):
    for matcher in matchers:
        value = matcher(*args)
        if value is not None:
            return value
    return None


def infer_noc(name, raw_text, mapping):
    """NOC for a country cell, or None when nothing matches."""
    return first_match(NOC_MATCHERS, clean_text(raw_text), name, mapping)


# ── Row extractor ─────────────────────────────────────────────────────────

def _country_name(cell):
    # Flag icons are text-less /wiki/File: links
    links = (clean_text(a.get_text()) for a in cell.find_all('a', href=re.compile(r'^/wiki/')))
    name = next((t for t in links if t), '')
    if not name:
        name = clean_text(cell.get_text(' '))
    return re.sub(r'\*+$', '', name).strip()


def extract_row(tr, mapping):
    """Build a MedalRow (rank unassigned) from a table row, or None to skip it."""
    cells = tr.find_all(['th', 'td'], recursive=False)
    if len(cells) < MIN_ROW_CELLS:
        return None

    has_rank = first_match(RANK_MATCHERS, clean_text(cells[0].get_text(' '))) is not None
    start = 1 if has_rank else 0

    country_cell = cells[start]
    name = _country_name(country_cell)
    if not name or name.lower().startswith(AGGREGATE_ROW_PREFIXES):
        return None

    # A ranked row with only five cells has no total column; it counts as 0
    gold, silver, bronze, total = (
        parse_count(cells[i].get_text()) if i < len(cells) else 0
        for i in range(start + 1, start + 5)
    )

    # No separator, so '(<abbr>FRD</abbr>)' reads as '(FRD)'
    noc = infer_noc(name, country_cell.get_text(), mapping)
    flag = mapping.flag_for(noc, name)

    return MedalRow(
        rank=None,
        noc=noc or name,
        name=name,
        gold=gold,
        silver=silver,
        bronze=bronze,
        total=total,
        flag=flag,
        placeholder=False,
    )


def extract_rows(table, top_n, mapping):
    """Up to top_n valid rows in display order, ranks unassigned."""
    rows = []
    for tr in table.find_all('tr')[1:]:
        if len(rows) >= top_n:
            break
        row = extract_row(tr, mapping)
        if row is not None:
            rows.append(row)
    return rows


# ── Tied ranks ────────────────────────────────────────────────────────────

def assign_ranks(rows):
    """Competition ranking in display order: 1, 2, 2, 4, 5.

    A row ties its predecessor when gold, silver and bronze all match; total
    is not compared. Rows are never reordered.
    """
    for i, row in enumerate(rows):
        if i > 0 and row.medals == rows[i - 1].medals:
            row.rank = rows[i - 1].rank
        else:
            row.rank = i + 1
    return rows


def parse_top_rows(html, top_n, mapping):
    """Locate the medal table in a page and return its ranked top rows."""
    soup = parse_html(html)
    table = find_table(soup, MEDAL_TABLE_KEYWORDS)
    if table is None:
        return []
    return assign_ranks(extract_rows(table, top_n, mapping))


# ── Payload ───────────────────────────────────────────────────────────────

def build_placeholders(count, mapping):
    rows = []
    for i in range(count):
        name, noc = PLACEHOLDER_ROSTER[i % len(PLACEHOLDER_ROSTER)]
        rows.append(MedalRow(
            rank=i + 1,
            noc=noc,
            name=name,
            flag=mapping.flag_for(noc, name),
            placeholder=True,
        ))
    return rows


def has_medals(rows):
    return any(r.gold + r.silver + r.bronze > 0 for r in rows)


def format_timestamp(now):
    return now.strftime(TIMESTAMP_FORMAT)


def build_payload(rows, top_n, placeholder_count, mapping, source_url,
                  games, game_page, now=None, tz=None):
    """Final widget payload. Anything other than exactly top_n extracted rows
    is replaced by top_n placeholder rows and reported as not live."""
    if len(rows) == top_n:
        final_rows = rows
        is_live = has_medals(rows)
    else:
        final_rows = build_placeholders(max(placeholder_count, top_n), mapping)[:top_n]
        is_live = False

    now = now or datetime.now(tz)
    return {
        'updatedAt': format_timestamp(now),
        'source': 'Wikipedia',
        'sourceUrl': source_url,
        'games': games,
        'gamePage': game_page,
        'isLiveData': is_live,
        'rows': [r.to_dict() for r in final_rows],
    }


# ── Validation ────────────────────────────────────────────────────────────

def validate_rows(rows):
    """Consistency warnings for extracted rows. Returns list of strings."""
    warnings = []
    prev_rank = 0
    for r in rows:
        expected = r.gold + r.silver + r.bronze
        if expected != r.total:
            warnings.append(f'Medal math: {r.name} {r.gold}+{r.silver}+{r.bronze}={expected} != total={r.total}')
        if min(r.gold, r.silver, r.bronze, r.total) < 0:
            warnings.append(f'Negative medal count for {r.name}')
        if r.rank is not None:
            if r.rank < prev_rank:
                warnings.append(f'Rank order: {r.name} rank {r.rank} after {prev_rank}')
            prev_rank = r.rank
    return warnings
