"""
SharePoint URL parsing.

Two URL shapes are understood:

- Site URLs, as stored in Dataverse gallery links:
  ``https://tenant.sharepoint.com/sites/events/photos/teambuilding-sept2024``
  -> site ``events``, folder ``photos/teambuilding-sept2024``

- Sharing links copied from the SharePoint UI:
  ``https://tenant.sharepoint.com/:f:/r/sites/Team/Shared%20Documents/2025/Foto!?csf=1``
  -> site ``Team``, folder ``Shared Documents/2025/Foto``

Both raise SharePointUrlError on input they cannot use. An empty folder path
means "the root of the document library" and is a valid result.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlparse, unquote

DEFAULT_LIBRARY = "Shared Documents"

_TRAILING_FRAGMENT = re.compile(r"[!?].*$")


class SharePointUrlError(ValueError):
    """Raised when a SharePoint URL cannot be parsed."""
    pass


@dataclass(frozen=True)
class SharePointLocation:
    host: str
    site: str
    folder_path: str = ""

    @property
    def drive_path(self) -> str:
        """
        Folder path relative to the site's default document library.

        The default library is exposed by Graph as ``/drive``, so a leading
        ``Shared Documents`` segment is dropped.
        """
        path = self.folder_path.strip("/")
        if path == DEFAULT_LIBRARY:
            return ""
        if path.startswith(DEFAULT_LIBRARY + "/"):
            return path[len(DEFAULT_LIBRARY) + 1:]
        return path


def _split(url: str):
    if not url or not isinstance(url, str):
        raise SharePointUrlError("SharePoint URL is empty")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise SharePointUrlError(f"Not an absolute URL: {url}")

    segments = [s for s in parsed.path.split("/") if s]
    try:
        site_index = segments.index("sites")
    except ValueError:
        raise SharePointUrlError("URL does not contain /sites/")

    if site_index + 1 >= len(segments):
        raise SharePointUrlError("URL does not name a site after /sites/")

    return parsed, segments, site_index


def parse_site_url(url: str) -> SharePointLocation:
    """Parse a canonical site URL: everything after the site name is the folder."""
    parsed, segments, site_index = _split(url)

    folder_segments = [unquote(s) for s in segments[site_index + 2:]]
    return SharePointLocation(
        host=parsed.hostname,
        site=unquote(segments[site_index + 1]),
        folder_path="/".join(folder_segments),
    )


def parse_share_link(url: str) -> SharePointLocation:
    """
    Parse a sharing link.

    The folder is the decoded path from ``Shared Documents`` onward, with a
    trailing ``!``/``?`` fragment removed; without it the library root is used.
    """
    parsed, segments, site_index = _split(url)

    decoded_path = unquote(parsed.path)
    folder_path = ""
    library_index = decoded_path.find(DEFAULT_LIBRARY)
    if library_index != -1:
        folder_path = _TRAILING_FRAGMENT.sub("", decoded_path[library_index:]).rstrip("/")

    return SharePointLocation(
        host=parsed.hostname,
        site=unquote(segments[site_index + 1]),
        folder_path=folder_path or DEFAULT_LIBRARY,
    )
