"""Show label parsing: date, venue, city, state, source from a folder name.

Labels look like
    "1987-07-02 Red Rocks Amphitheatre, Morrison, CO SBD (12345) [24-96]"
but every part is optional.
"""

import re
from dataclasses import dataclass

# 50 US states + DC: abbreviation → full name
US_STATE_ABBREV = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming", "DC": "District of Columbia",
}

RECORDING_TYPES = ("SBD", "AUD", "MTX", "MATRIX", "PCM", "FM")

_LEADING_DATE = re.compile(r'^(\d{4}-\d{2}-\d{2})\s*')
_SHNID = re.compile(r'\((\d+)\)')
_BITRATE = re.compile(r'\[([^\]]+)\]')
_RECORDING_TYPE = re.compile(r'\b(' + "|".join(RECORDING_TYPES) + r')\b', re.IGNORECASE)
_TRAILING_STATE = re.compile(r',\s*([A-Z]{2})$')
_TRAILING_PART = re.compile(r',\s*([^,]+)$')


@dataclass
class ShowInfo:
    date: str = None
    venue: str = None
    city: str = None
    state: str = None
    recording_type: str = None
    shnid: str = None
    bitrate: str = None


def state_name(abbrev):
    """Full state name for a US abbreviation, else the input unchanged."""
    return US_STATE_ABBREV.get(abbrev.upper(), abbrev)


def parse_show_label(label, date=None):
    """Split a show label into its parts. `date` is used when the label has none."""
    info = ShowInfo()

    m = _LEADING_DATE.match(label)
    if m:
        info.date = m.group(1)
        remaining = label[m.end():]
    else:
        info.date = date
        remaining = label

    m = _SHNID.search(remaining)
    if m:
        info.shnid = m.group(1)
        remaining = _SHNID.sub("", remaining, count=1).strip()

    m = _BITRATE.search(remaining)
    if m:
        info.bitrate = m.group(1)
        remaining = _BITRATE.sub("", remaining, count=1).strip()

    m = _RECORDING_TYPE.search(remaining)
    if m:
        info.recording_type = m.group(1).upper()
        remaining = _RECORDING_TYPE.sub("", remaining, count=1).strip()

    remaining = re.sub(r'\s+', " ", remaining).strip()

    m = _TRAILING_STATE.search(remaining)
    if m:
        info.state = state_name(m.group(1))
        remaining = remaining[:m.start()].strip()

    m = _TRAILING_PART.search(remaining)
    if m:
        info.city = m.group(1).strip()
        remaining = remaining[:m.start()].strip()
    elif remaining:
        # No comma left: what remains is the city, not a venue
        info.city = remaining
        remaining = ""

    if remaining:
        info.venue = remaining
    return info


def parse_folder_name(folder_name):
    """Label parse for a bare folder name; the whole name is the venue fallback."""
    info = parse_show_label(folder_name)
    if not info.venue:
        info.venue = folder_name
    return info
