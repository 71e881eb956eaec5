"""
AUR RPC client.

Thin wrapper around the aurweb RPC interface (version 5): batched info
lookups by package name and free-text search. Every failure is raised as
an AurError subclass; nothing is retried or cached.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from . import __version__
from .common import QmaurError
from .logging_config import TRACE

logger = logging.getLogger(__name__)

DEFAULT_AUR_URL = "https://aur.archlinux.org"
RPC_VERSION = 5
DEFAULT_MAX_ARGS = 150

SEARCH_FIELDS = (
    "name",
    "name-desc",
    "maintainer",
    "depends",
    "makedepends",
    "optdepends",
    "checkdepends",
)


class AurError(QmaurError):
    """Raised when an AUR lookup fails."""
    pass


class NetworkError(AurError):
    """Raised when the RPC endpoint cannot be reached or returns an HTTP error."""
    pass


class ParseError(AurError):
    """Raised when the RPC response is not the expected JSON document."""
    pass


class RpcError(AurError):
    """Raised when aurweb answers with an error response."""
    pass


@dataclass(frozen=True)
class AurPackage:
    """
    Package metadata as returned by the AUR RPC.

    Timestamps are Unix epoch seconds; out_of_date is None unless the
    package has been flagged.
    """
    name: str
    version: str
    package_base: str = ""
    description: str = ""
    url: str = ""
    url_path: str = ""
    num_votes: int = 0
    popularity: float = 0.0
    out_of_date: int | None = None
    maintainer: str | None = None
    submitter: str | None = None
    first_submitted: int | None = None
    last_modified: int | None = None
    licenses: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    depends: tuple[str, ...] = ()
    make_depends: tuple[str, ...] = ()
    check_depends: tuple[str, ...] = ()
    opt_depends: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()
    replaces: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AurPackage":
        """Create from one entry of the RPC ``results`` array."""
        def _list(key: str) -> tuple[str, ...]:
            return tuple(data.get(key) or ())

        return cls(
            name=data["Name"],
            version=data["Version"],
            package_base=data.get("PackageBase") or data["Name"],
            description=data.get("Description") or "",
            url=data.get("URL") or "",
            url_path=data.get("URLPath") or "",
            num_votes=int(data.get("NumVotes") or 0),
            popularity=float(data.get("Popularity") or 0.0),
            out_of_date=data.get("OutOfDate"),
            maintainer=data.get("Maintainer"),
            submitter=data.get("Submitter"),
            first_submitted=data.get("FirstSubmitted"),
            last_modified=data.get("LastModified"),
            licenses=_list("License"),
            groups=_list("Groups"),
            keywords=_list("Keywords"),
            depends=_list("Depends"),
            make_depends=_list("MakeDepends"),
            check_depends=_list("CheckDepends"),
            opt_depends=_list("OptDepends"),
            provides=_list("Provides"),
            conflicts=_list("Conflicts"),
            replaces=_list("Replaces"),
        )


def package_url(name: str, base_url: str = DEFAULT_AUR_URL) -> str:
    """Web page of a package on the AUR."""
    return f"{base_url.rstrip('/')}/packages/{urllib.parse.quote(name, safe='')}"


def _chunks(items: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class AurClient:
    """
    Client for the aurweb RPC interface.

    Args:
        base_url: AUR site root, e.g. https://aur.archlinux.org
        timeout: Socket timeout in seconds for each request
        max_args: Maximum package names per info request
    """

    def __init__(
        self,
        base_url: str = DEFAULT_AUR_URL,
        timeout: int = 10,
        max_args: int = DEFAULT_MAX_ARGS,
    ):
        if max_args < 1:
            raise ValueError(f"max_args must be positive, got {max_args}")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_args = max_args

    @property
    def rpc_url(self) -> str:
        return f"{self.base_url}/rpc/v{RPC_VERSION}"

    def info(self, names: Iterable[str]) -> list[AurPackage]:
        """Look up packages by exact name.

        Names are sent in sequential batches of at most ``max_args``.
        Names unknown to the AUR are simply absent from the result.

        Args:
            names: Package names to look up

        Returns:
            Metadata for every name the AUR knows

        Raises:
            AurError: On any network, HTTP, decoding or RPC failure
        """
        names = list(names)
        packages: list[AurPackage] = []
        for batch in _chunks(names, self.max_args):
            query = urllib.parse.urlencode([("arg[]", name) for name in batch])
            packages.extend(self._request(f"{self.rpc_url}/info?{query}"))
        logger.debug(f"info: {len(packages)} of {len(names)} names found")
        return packages

    def search(self, query: str, by: str = "name-desc") -> list[AurPackage]:
        """Search the AUR.

        Args:
            query: Search term
            by: Field to search (one of SEARCH_FIELDS)

        Returns:
            Matching packages in the order aurweb returns them

        Raises:
            ValueError: If ``by`` is not a supported search field
            AurError: On any network, HTTP, decoding or RPC failure
        """
        if by not in SEARCH_FIELDS:
            raise ValueError(f"unsupported search field: {by}")
        term = urllib.parse.quote(query, safe="")
        packages = self._request(f"{self.rpc_url}/search/{term}?by={by}")
        logger.debug(f"search {query!r} by {by}: {len(packages)} results")
        return packages

    def _request(self, url: str) -> list[AurPackage]:
        data = self._get_json(url)
        if data.get("type") == "error":
            raise RpcError(f"aurweb returned an error: {data.get('error') or 'unknown error'}")
        results = data.get("results")
        if not isinstance(results, list):
            raise ParseError(f"response from {url} has no results list")
        try:
            return [AurPackage.from_dict(entry) for entry in results]
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"malformed package entry in response from {url}: {e}") from e

    def _get_json(self, url: str) -> dict[str, Any]:
        logger.log(TRACE, f"GET {url}")
        req = urllib.request.Request(url, headers={
            "User-Agent": f"qmaur/{__version__}",
            "Accept": "application/json",
        })
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as e:
            # aurweb reports some RPC errors with a JSON body and a 4xx status
            try:
                data = json.loads(e.read())
            except (AttributeError, OSError, ValueError):
                data = None
            if isinstance(data, dict) and data.get("type") == "error":
                raise RpcError(f"aurweb returned an error: {data.get('error')}") from e
            raise NetworkError(f"HTTP {e.code} from {url}: {e.reason}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise NetworkError(f"failed to fetch {url}: {e}") from e

        logger.log(TRACE, f"response: {body[:2000]!r}")
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ParseError(f"invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(f"unexpected JSON document from {url}")
        return data
