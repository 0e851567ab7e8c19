"""
Junction resolvers: external keys <-> stored junction ids.

Locale tables are keyed on the wire by locale code ("fr-FR") and in
storage by numeric language id; shop tables are keyed on the wire by the
shop id as a string ("1") and in storage by the integer id.

Invariants:
    - to_id() returns a positive id or None, never raises
    - to_key() returns None for non-positive or unknown ids
    - to_key(to_id(k)) == k for every key the resolver knows
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from ..schema.types import Scope, TableSpec


@runtime_checkable
class JunctionResolver(Protocol):
    """Maps raw wire junction values to stored ids and back."""

    def to_id(self, raw: Any) -> int | None:
        """Resolve a wire key to a stored junction id."""
        ...

    def to_key(self, junction_id: int) -> str | None:
        """Resolve a stored junction id to its wire key."""
        ...


class LocaleResolver:
    """Resolves locale codes against a known set of languages.

    Example:
        >>> locales = LocaleResolver({"fr-FR": 1, "en-GB": 2})
        >>> locales.to_id("en-GB")
        2
        >>> locales.to_key(1)
        'fr-FR'
    """

    def __init__(self, locales: Mapping[str, int]) -> None:
        self._ids = {code: int(lang_id) for code, lang_id in locales.items() if int(lang_id) > 0}
        self._codes = {lang_id: code for code, lang_id in self._ids.items()}

    def to_id(self, raw: Any) -> int | None:
        if not isinstance(raw, str):
            return None
        return self._ids.get(raw)

    def to_key(self, junction_id: int) -> str | None:
        return self._codes.get(junction_id)

    def locales(self) -> dict[str, int]:
        """Known locale codes and their ids."""
        return dict(self._ids)


class ShopResolver:
    """Resolves shop ids given as ints or digit strings.

    Args:
        shop_ids: Known shop ids; None accepts any positive id
    """

    def __init__(self, shop_ids: Iterable[int] | None = None) -> None:
        self._known = frozenset(shop_ids) if shop_ids is not None else None

    def to_id(self, raw: Any) -> int | None:
        if isinstance(raw, bool):
            return None
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw.isdigit():
                return None
            raw = int(raw)
        if not isinstance(raw, int) or raw <= 0:
            return None
        if self._known is not None and raw not in self._known:
            return None
        return raw

    def to_key(self, junction_id: int) -> str | None:
        if self.to_id(junction_id) is None:
            return None
        return str(junction_id)


@dataclass(frozen=True)
class JunctionResolvers:
    """Resolver pair used by the converter and the persistence service.

    Attributes:
        locale: Resolver for locale tables
        shop: Resolver for shop tables
    """

    locale: JunctionResolver
    shop: JunctionResolver

    def for_table(self, table: TableSpec) -> JunctionResolver:
        """Get the resolver matching a locale or shop table.

        Raises:
            ValueError: If table is an entity-scope table
        """
        if table.scope == Scope.LOCALE:
            return self.locale
        if table.scope == Scope.SHOP:
            return self.shop
        raise ValueError(f"Entity table '{table.storage_table}' has no junction")
