"""
NOC / ISO2 code inference
=========================
Maps free-text country or committee names to 3-letter IOC committee codes
(NOC) and NOC codes to 2-letter ISO codes used to pick a flag image.

Resolution uses layered override tables followed by light heuristics. The
tables here are the built-in defaults; `build_noc_mappings.py` scrapes the
full IOC code list into JSON files that `CodeMapping.load` merges on top.

Some NOCs are not sovereign states (Puerto Rico, Hong Kong, Aruba, ...) and
some teams (AIN, EOR, ...) have no ISO2 flag at all.
"""

import json
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType

FLAG_BASE_URL = 'https://raw.githubusercontent.com/Son-Vegitto/olympic-medals/main/flags/'

NAME_TO_NOC_FILE = 'name_to_noc.json'
NOC_TO_ISO2_FILE = 'noc_to_iso2.json'

# Neutral / temporary teams. None means "known to have no flag", which is
# final: no later heuristic may replace it.
NEUTRAL_NOC_ISO2 = {
    'AIN': None,
    'EOR': None,
    'IOA': None,
    'OLY': None,
    'ROT': None,
}

# NOC codes that diverge from their ISO2 code or are ambiguous by name
NOC_TO_ISO2_OVERRIDES = {
    'GER': 'de', 'SUI': 'ch', 'GRE': 'gr', 'DEN': 'dk', 'UAE': 'ae',
    'KSA': 'sa', 'RSA': 'za', 'POR': 'pt', 'ESP': 'es', 'NED': 'nl',
    'AUT': 'at', 'SLO': 'si', 'SVK': 'sk', 'CZE': 'cz', 'ROU': 'ro',
    'BUL': 'bg', 'CRO': 'hr', 'HUN': 'hu', 'LAT': 'lv', 'LTU': 'lt',
    'EST': 'ee', 'UKR': 'ua', 'BLR': 'by',
    'ROC': 'ru',  # historical
    'TPE': 'tw',  # Chinese Taipei
    'HKG': 'hk', 'MAC': 'mo', 'PUR': 'pr',
    'ISV': 'vi',  # US Virgin Islands
    'IVB': 'vg',  # British Virgin Islands
    'ASA': 'as', 'GUM': 'gu', 'MHL': 'mh', 'FSM': 'fm', 'PLW': 'pw',
    'NMI': 'mp',
    'AHO': None,  # Netherlands Antilles, dissolved
}

# Common winter-games NOCs whose ISO2 is a plain lowercase of the country
BASE_NOC_TO_ISO2 = {
    'ITA': 'it', 'FRA': 'fr', 'USA': 'us', 'CAN': 'ca', 'NOR': 'no',
    'SWE': 'se', 'FIN': 'fi', 'POL': 'pl', 'GBR': 'gb', 'JPN': 'jp',
    'KOR': 'kr', 'CHN': 'cn', 'AUS': 'au', 'NZL': 'nz', 'BEL': 'be',
    'KAZ': 'kz', 'BRA': 'br',
}

BASE_NAME_TO_NOC = {
    'Italy': 'ITA', 'Switzerland': 'SUI', 'France': 'FRA', 'Germany': 'GER',
    'United States': 'USA', 'Canada': 'CAN', 'Austria': 'AUT',
    'Netherlands': 'NED', 'Norway': 'NOR', 'Sweden': 'SWE', 'Finland': 'FIN',
    'Czechia': 'CZE', 'Czech Republic': 'CZE', 'Slovakia': 'SVK',
    'Slovenia': 'SLO', 'Poland': 'POL', 'Hungary': 'HUN', 'Latvia': 'LAT',
    'Lithuania': 'LTU', 'Estonia': 'EST', 'Great Britain': 'GBR',
    'United Kingdom': 'GBR', 'Japan': 'JPN', 'South Korea': 'KOR',
    'Korea': 'KOR', 'China': 'CHN', 'Australia': 'AUS', 'New Zealand': 'NZL',
    'Belgium': 'BEL', 'Kazakhstan': 'KAZ', 'Brazil': 'BRA', 'Spain': 'ESP',
    'Croatia': 'CRO', 'Bulgaria': 'BUL', 'Ukraine': 'UKR',
    'Individual Neutral Athletes': 'AIN',
}

# Last resort, keyed by lowercased name. Deliberately small.
NAME_TO_ISO2_LIGHT = {
    'united states': 'us',
    'united kingdom': 'gb',
    'great britain': 'gb',
    'russia': 'ru',
    'china': 'cn',
    'hong kong': 'hk',
    'macao': 'mo',
    'chinese taipei': 'tw',
    'south korea': 'kr',
    'north korea': 'kp',
    'czechia': 'cz',
    'czech republic': 'cz',
    'ivory coast': 'ci',
    "côte d'ivoire": 'ci',
    'cape verde': 'cv',
    'republic of ireland': 'ie',
    'iran': 'ir',
    'syria': 'sy',
    'türkiye': 'tr',
    'turkey': 'tr',
    'vietnam': 'vn',
    'laos': 'la',
    'bolivia': 'bo',
    'venezuela': 've',
    'tanzania': 'tz',
    'dominican republic': 'do',
    'trinidad and tobago': 'tt',
    'saint kitts and nevis': 'kn',
    'saint vincent and the grenadines': 'vc',
    'antigua and barbuda': 'ag',
    'saint lucia': 'lc',
    'united arab emirates': 'ae',
    'saudi arabia': 'sa',
    'south africa': 'za',
    'netherlands': 'nl',
    'switzerland': 'ch',
    'germany': 'de',
    'austria': 'at',
    'spain': 'es',
    'portugal': 'pt',
    'greece': 'gr',
    'denmark': 'dk',
}

_TWO_LETTER_RE = re.compile(r'^[A-Z]{2}$')
_LEADING_THE_RE = re.compile(r'^The\s+', re.I)


def normalize_name(s):
    """Collapse whitespace (including NBSP) and trim."""
    return re.sub(r'\s+', ' ', str(s or '').replace('\xa0', ' ')).strip()


def name_aliases(name):
    """Lookup variants of a name, most specific first.

    The variants are chained: the leading "The" is dropped from the
    star-stripped name, so 'The Bahamas*' gives ('The Bahamas*',
    'The Bahamas', 'Bahamas') and never 'Bahamas*'.
    """
    n = normalize_name(name)
    no_star = n.rstrip('*').strip()
    no_the = _LEADING_THE_RE.sub('', no_star)
    return tuple(a for a in dict.fromkeys((n, no_star, no_the)) if a)


def canonical_name(name):
    aliases = name_aliases(name)
    return aliases[-1] if aliases else ''


def guess_iso2(noc, name=None, noc_to_iso2=None):
    """Resolve the ISO2 code for a NOC, or None.

    Order: neutral teams, explicit overrides (built-in, then noc_to_iso2),
    two-letter codes, light name table. A None from the neutral table is
    final.
    """
    if noc in NEUTRAL_NOC_ISO2:
        return NEUTRAL_NOC_ISO2[noc]
    if noc in NOC_TO_ISO2_OVERRIDES:
        return NOC_TO_ISO2_OVERRIDES[noc]
    if noc_to_iso2 and noc in noc_to_iso2:
        return noc_to_iso2[noc]

    if noc and _TWO_LETTER_RE.match(noc):
        return noc.lower()

    key = canonical_name(name).lower()
    return NAME_TO_ISO2_LIGHT.get(key)


def flag_url(iso2):
    if not iso2:
        return None
    return f'{FLAG_BASE_URL}{iso2.lower()}.png'


def add_name_alias(name_to_noc, name, noc):
    """Record name and its aliases (no trailing '*', no leading 'The')."""
    for alias in name_aliases(name):
        name_to_noc[alias] = noc


@dataclass(frozen=True)
class CodeMapping:
    """Read-only name->NOC and NOC->ISO2 lookup tables for one run."""
    name_to_noc: dict = field(default_factory=dict)
    noc_to_iso2: dict = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'name_to_noc', MappingProxyType(dict(self.name_to_noc)))
        object.__setattr__(self, 'noc_to_iso2', MappingProxyType(dict(self.noc_to_iso2)))

    @classmethod
    def builtin(cls):
        name_to_noc = {}
        for name, noc in BASE_NAME_TO_NOC.items():
            add_name_alias(name_to_noc, name, noc)
        return cls(name_to_noc, BASE_NOC_TO_ISO2)

    @classmethod
    def load(cls, directory):
        """Built-in tables overlaid with the JSON files in `directory`.

        A missing or unreadable file (I/O error, bad encoding, invalid JSON)
        falls back to the built-in table; valid JSON that is not an object
        raises ValueError.
        """
        base = cls.builtin()
        name_to_noc = dict(base.name_to_noc)
        noc_to_iso2 = dict(base.noc_to_iso2)

        for filename, target in ((NAME_TO_NOC_FILE, name_to_noc),
                                 (NOC_TO_ISO2_FILE, noc_to_iso2)):
            path = os.path.join(directory, filename)
            if not os.path.exists(path):
                print(f'  ↳ {path} not found, using built-in table')
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                print(f'  ↳ {path} unreadable ({e}), using built-in table')
                continue
            if not isinstance(data, dict):
                raise ValueError(f'{path}: expected a JSON object')
            target.update(data)
            print(f'  ✓ Loaded {path} ({len(data)} keys)')

        return cls(name_to_noc, noc_to_iso2)

    def save(self, directory):
        """Write both tables as JSON; returns the written paths."""
        os.makedirs(directory, exist_ok=True)
        paths = []
        for filename, data in ((NAME_TO_NOC_FILE, self.name_to_noc),
                               (NOC_TO_ISO2_FILE, self.noc_to_iso2)):
            path = os.path.join(directory, filename)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(dict(data), f, indent=2, ensure_ascii=False)
            paths.append(path)
        return paths

    def noc_for_name(self, name):
        for alias in name_aliases(name):
            if alias in self.name_to_noc:
                return self.name_to_noc[alias]
        return None

    def iso2_for(self, noc, name=None):
        return guess_iso2(noc, name, self.noc_to_iso2)

    def flag_for(self, noc, name=None):
        return flag_url(self.iso2_for(noc, name))
