from __future__ import annotations

import logging
import threading
from typing import Any

from diweave._internal.metadata import InjectionMetadata
from diweave._internal.metadata_builder import InjectionMetadataBuilder
from diweave.exceptions import DIWeaveInvalidArgumentError

logger = logging.getLogger(__name__)


class InjectionMetadataCache:
    """Cache ``InjectionMetadata`` per type, building each entry at most once.

    Reads of published entries take no lock. A first request for a type takes a
    per-type build lock, so concurrent callers for the same type wait for one
    build and share its result while builds for other types proceed in
    parallel. The shared lock only guards bookkeeping dictionaries.

    The cache is owned by whoever constructs it (usually a ``Container``) and is
    cleared at that owner's teardown.
    """

    def __init__(self, builder: InjectionMetadataBuilder | None = None) -> None:
        self._builder = builder if builder is not None else InjectionMetadataBuilder()
        self._entries: dict[type[Any], InjectionMetadata] = {}
        self._build_locks: dict[type[Any], threading.Lock] = {}
        self._lock = threading.Lock()
        self._build_count = 0

    def get_or_create(self, target_type: type[Any]) -> InjectionMetadata:
        """Return cached metadata for target_type, building it on first use.

        Args:
            target_type: Class whose injection points are requested.

        """
        if target_type is None:
            msg = "target_type must not be None."
            raise DIWeaveInvalidArgumentError(msg)

        entry = self._entries.get(target_type)
        if entry is not None:
            return entry

        with self._lock:
            entry = self._entries.get(target_type)
            if entry is not None:
                return entry
            build_lock = self._build_locks.setdefault(target_type, threading.Lock())

        with build_lock:
            entry = self._entries.get(target_type)
            if entry is not None:
                return entry
            try:
                entry = self._builder.build(target_type)
            except BaseException:
                with self._lock:
                    self._build_locks.pop(target_type, None)
                raise
            with self._lock:
                self._entries[target_type] = entry
                self._build_locks.pop(target_type, None)
                self._build_count += 1

        logger.debug(
            "Built injection metadata for %s: constructor=%s fields=%d properties=%d methods=%d",
            target_type.__qualname__,
            entry.constructor.name if entry.constructor is not None else None,
            len(entry.fields),
            len(entry.properties),
            len(entry.methods),
        )
        return entry

    def try_get(self, target_type: type[Any]) -> InjectionMetadata | None:
        """Return cached metadata for target_type without building it."""
        return self._entries.get(target_type)

    def remove(self, target_type: type[Any]) -> bool:
        """Evict target_type and report whether an entry was present."""
        with self._lock:
            removed = self._entries.pop(target_type, None) is not None
        if removed:
            logger.debug("Evicted injection metadata for %s", target_type.__qualname__)
        return removed

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("Cleared injection metadata cache (%d entries)", count)

    @property
    def count(self) -> int:
        """Number of cached types."""
        return len(self._entries)

    @property
    def build_count(self) -> int:
        """Number of metadata builds executed since the cache was created."""
        return self._build_count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, target_type: object) -> bool:
        return target_type in self._entries
