"""Name-keyed catalog of the listings in a document."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from .config import CheckConfig
from .exceptions import DuplicateListingError, ListingNotFoundError
from .models import Listing, ListingKind
from .parser import locate_listings


class ListingIndex:
    """Read-only index of file listings and fragments, in document order.

    File listing names are unique. Fragments sharing a tag are kept together
    and expand to the concatenation of their bodies.

    Examples:
        index = ListingIndex.build(text)
        listing = index.lookup("is_five.zig")
        names = index.list_names(lambda name: not name.endswith(".prf"))
    """

    def __init__(self, listings: Iterable[Listing] = ()):
        self._files: dict[str, Listing] = {}
        self._fragments: dict[str, list[Listing]] = {}

        for listing in listings:
            if listing.kind is ListingKind.FRAGMENT:
                self._fragments.setdefault(listing.name, []).append(listing)
                continue

            existing = self._files.get(listing.name)
            if existing is not None:
                raise DuplicateListingError(
                    listing.name, existing.source_span.line, listing.source_span.line
                )
            self._files[listing.name] = listing

    @classmethod
    def build(
        cls,
        content: str,
        config: CheckConfig | None = None,
        max_line_length: int | None = None,
    ) -> "ListingIndex":
        """Scan `content` and index every listing it holds.

        Args:
            content: Markdown text of the document.
            config: Configuration forwarded to `locate_listings`.
            max_line_length: Optional override for the maximum line length.

        Returns:
            ListingIndex: The populated index.

        Raises:
            ParseError: If a header is malformed, limits are exceeded, or two
                file listings share a name.
        """
        return cls(locate_listings(content, config, max_line_length))

    def lookup(self, name: str) -> Listing:
        """Return the file listing called `name`.

        Raises:
            ListingNotFoundError: If no file listing has that name.
        """
        try:
            return self._files[name]
        except KeyError:
            raise ListingNotFoundError(name) from None

    def list_names(self, predicate: Callable[[str], bool] | None = None) -> list[str]:
        """Return file listing names in document order.

        Args:
            predicate: Optional filter; only names for which it returns True
                are kept.
        """
        if predicate is None:
            return list(self._files)
        return [name for name in self._files if predicate(name)]

    def fragments(self, tag: str) -> tuple[Listing, ...]:
        """Return every fragment with `tag`, in document order.

        Raises:
            ListingNotFoundError: If no fragment has that tag.
        """
        try:
            return tuple(self._fragments[tag])
        except KeyError:
            raise ListingNotFoundError(tag, kind="fragment") from None

    def fragment_names(self) -> list[str]:
        return list(self._fragments)

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)
