"""
NOC Mapping Builder
===================
Regenerates the code tables used by update_medals.py:
  - data/name_to_noc.json  (name -> NOC)
  - data/noc_to_iso2.json  (NOC -> ISO2, for flag PNGs)

Source: Wikipedia 'List of IOC country codes' (current NOCs table). ISO2
codes are best effort from the override tables in noc_codes; NOCs that
resolve to nothing are left out so the widget shows its fallback flag.
"""

import argparse
import re
import sys
import traceback

from medal_table import find_table, parse_html
from noc_codes import CodeMapping, add_name_alias, guess_iso2, normalize_name
from update_medals import DEFAULT_MAPPINGS_DIR
from wiki_api import fetch_parsed_html

IOC_CODES_PAGE = 'List_of_IOC_country_codes'
NOC_TABLE_KEYWORDS = ('code', 'national olympic committee')


def parse_noc_table(html):
    """Build a CodeMapping from the current-NOCs table of the IOC codes page."""
    soup = parse_html(html)
    table = find_table(soup, NOC_TABLE_KEYWORDS)
    if table is None:
        raise ValueError('Could not find the current NOCs table on the IOC codes page')

    name_to_noc = {}
    noc_to_iso2 = {}

    for tr in table.find_all('tr')[1:]:
        cells = tr.find_all(['td', 'th'])
        if len(cells) < 2:
            continue

        code = normalize_name(cells[0].get_text()).upper()
        committee = normalize_name(cells[1].get_text())
        if not re.match(r'^[A-Z]{3}$', code) or not committee:
            continue

        # Committee text may carry extra words ("Hong Kong, China"); the first
        # link is usually the clean country name
        link = cells[1].find('a', href=re.compile(r'^/wiki/'))
        display_name = normalize_name(link.get_text()) if link else ''
        display_name = display_name or committee

        add_name_alias(name_to_noc, display_name, code)
        add_name_alias(name_to_noc, committee, code)

        iso2 = guess_iso2(code, display_name)
        if iso2:
            noc_to_iso2[code] = iso2

    return CodeMapping(name_to_noc, noc_to_iso2)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Rebuild the NOC name/flag mapping files.')
    parser.add_argument('--page', default=IOC_CODES_PAGE, help='Wikipedia page with the NOC table.')
    parser.add_argument('--out-dir', default=DEFAULT_MAPPINGS_DIR, help='Directory for the JSON files.')
    args = parser.parse_args(argv)

    try:
        mapping = parse_noc_table(fetch_parsed_html(args.page))
        paths = mapping.save(args.out_dir)
    except Exception as e:
        print(f'FATAL: mapping build failed: {e}', file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    print(f'  ✓ Wrote {paths[0]} ({len(mapping.name_to_noc)} keys)')
    print(f'  ✓ Wrote {paths[1]} ({len(mapping.noc_to_iso2)} keys)')


if __name__ == '__main__':
    main()
