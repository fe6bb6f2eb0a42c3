"""CSV import and export in the formats browsers use for saved passwords.

Imported rows become :class:`EntryDraft` objects; the store validates and
breach-screens them like any other create request.
"""

import csv
import io
from typing import Dict, Iterable, List
from urllib.parse import urlparse

from .errors import DeserializationError
from .models import CredentialEntry, EntryDraft

CHROMIUM = "chromium"
FIREFOX = "firefox"
SAFARI = "safari"

SUPPORTED_BROWSERS = (CHROMIUM, FIREFOX, SAFARI)

# Draft field -> CSV column, per browser
HEADER_MAPPINGS: Dict[str, Dict[str, str]] = {
    CHROMIUM: {
        "platform": "name",
        "url": "url",
        "identity": "username",
        "passphrase": "password",
        "notes": "note",
    },
    FIREFOX: {
        "url": "url",
        "identity": "username",
        "passphrase": "password",
    },
    SAFARI: {
        "platform": "Title",
        "url": "URL",
        "identity": "Username",
        "passphrase": "Password",
        "notes": "Notes",
    },
}

# Optional columns may be absent from an export
OPTIONAL_COLUMNS = {"notes"}

EXPORT_HEADER = ("name", "url", "username", "password", "note")


def platform_from_url(url: str) -> str:
    """Derive a platform name from the registrable part of a URL host.

    ``https://mail.google.com`` gives ``Google`` and ``https://bbc.co.uk``
    gives ``Bbc``.
    """
    host = (urlparse(url).hostname or "").lower()
    parts = host.split(".")
    if len(parts) > 2 and len(parts[-1]) == 2:
        host = parts[-3]
    elif len(parts) >= 2:
        host = parts[-2]
    return host[:1].upper() + host[1:]


def platform_from_safari_title(title: str) -> str:
    """Safari titles look like ``example.com (user@example.com)``."""
    if " (" in title:
        title = title.rsplit(" (", 1)[0]
    if "." in title and " " not in title:
        return platform_from_url(f"https://{title}")
    return title


def import_csv(browser: str, content: str) -> List[EntryDraft]:
    """Parse a browser password export into entry drafts."""
    browser = browser.lower()
    if browser not in HEADER_MAPPINGS:
        raise ValueError(f"Unsupported browser: {browser}")
    mapping = HEADER_MAPPINGS[browser]

    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    headers = reader.fieldnames or []
    missing = [
        column
        for field, column in mapping.items()
        if column not in headers and field not in OPTIONAL_COLUMNS
    ]
    if missing:
        raise DeserializationError(
            f"{browser} export is missing columns: {', '.join(missing)}"
        )

    drafts = []
    for row in reader:
        values = {field: (row.get(column) or "").strip() for field, column in mapping.items()}
        if browser == FIREFOX:
            values["platform"] = platform_from_url(values["url"])
        elif browser == SAFARI:
            values["platform"] = platform_from_safari_title(values["platform"])
        values["notes"] = values.get("notes") or None
        drafts.append(EntryDraft(**values))
    return drafts


def export_csv(entries: Iterable[CredentialEntry]) -> str:
    """Write stored entries in the chromium export layout."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for entry in entries:
        writer.writerow(
            (entry.platform, entry.url, entry.identity, entry.passphrase, entry.notes or "")
        )
    return buffer.getvalue()
