"""Key folding: collapses chains of single-key objects into dotted keys."""

from __future__ import annotations

import logging
import math

from .string_utils import is_valid_identifier_segment
from .types import JsonObject, JsonValue

logger = logging.getLogger(__name__)


def fold_keys(value: JsonValue, flatten_depth: int | None = None) -> JsonValue:
    """
    Fold single-key object chains into dotted keys.

    ``{"a": {"b": {"c": 1}}}`` becomes ``{"a.b.c": 1}``. Folding applies to
    objects at any depth, including objects inside arrays. Only identifier
    segments (``[A-Za-z_][A-Za-z0-9_]*``) take part in a chain.

    A fold is suppressed when the dotted key would collide with a literal
    dotted key, either a sibling or a key at the document root addressing
    the same path, unless both values are objects, in which case the two
    are merged under the one key.

    Args:
        value: The (normalized) value to transform.
        flatten_depth: Maximum number of segments in one folded key.
            None means unlimited; 0 or 1 disables folding.

    Returns:
        A new value with folded keys. The input is not modified.
    """
    limit = math.inf if flatten_depth is None else flatten_depth
    if isinstance(value, dict):
        root_literals = frozenset(k for k in value if "." in k)
        return _Folder(limit, root_literals).fold_object(value, limit, ())
    return _Folder(limit, frozenset()).fold_value(value, limit, None)


class _Folder:
    def __init__(self, limit: float, root_literals: frozenset[str]):
        self.limit = limit
        self.root_literals = root_literals

    def fold_value(self, value: JsonValue, budget: float, path: tuple[str, ...] | None) -> JsonValue:
        if isinstance(value, dict):
            return self.fold_object(value, budget, path)
        if isinstance(value, list):
            # Paths through arrays can't collide with root keys
            return [self.fold_value(item, self.limit, None) for item in value]
        return value

    def fold_object(
        self, obj: JsonObject, budget: float, path: tuple[str, ...] | None
    ) -> JsonObject:
        """
        Fold the keys of one object.

        Args:
            obj: The object to fold.
            budget: Segments still allowed for folded keys on this branch.
            path: Absolute key path from the document root, or None when
                the object is reachable only through an array.
        """
        result: JsonObject = {}
        for key, value in obj.items():
            segments, leaf = _collect_chain(key, value, budget)
            folded_key = ".".join(segments)

            if len(segments) > 1 and self._can_fold(obj, key, folded_key, leaf, path):
                child_path = None if path is None else path + tuple(segments)
                folded = self.fold_value(leaf, budget - len(segments), child_path)
                _place(result, folded_key, folded)
                continue

            child_path = None if path is None else path + (key,)
            _place(result, key, self.fold_value(value, budget, child_path))
        return result

    def _can_fold(
        self,
        obj: JsonObject,
        key: str,
        folded_key: str,
        leaf: JsonValue,
        path: tuple[str, ...] | None,
    ) -> bool:
        for sibling in obj:
            if sibling == key or "." not in sibling:
                continue
            if sibling == folded_key:
                if isinstance(obj[sibling], dict) and isinstance(leaf, dict):
                    continue
                logger.debug("Not folding %r: collides with sibling key", folded_key)
                return False
            if _paths_overlap(sibling, folded_key):
                logger.debug("Not folding %r: overlaps sibling key %r", folded_key, sibling)
                return False

        if path:
            absolute = ".".join(path) + "." + folded_key
            for literal in self.root_literals:
                if literal == absolute or _paths_overlap(literal, absolute):
                    logger.debug("Not folding %r: collides with root key %r", folded_key, literal)
                    return False

        return True


def _collect_chain(key: str, value: JsonValue, budget: float) -> tuple[list[str], JsonValue]:
    """Walk down single-key objects, returning the path segments and the leaf."""
    segments = [key]
    if not is_valid_identifier_segment(key):
        return segments, value

    current = value
    while isinstance(current, dict) and len(current) == 1 and len(segments) < budget:
        next_key, next_value = next(iter(current.items()))
        if not is_valid_identifier_segment(next_key):
            break
        segments.append(next_key)
        current = next_value

    return segments, current


def _paths_overlap(a: str, b: str) -> bool:
    """Whether one dotted path is a strict prefix of the other."""
    return a.startswith(b + ".") or b.startswith(a + ".")


def _place(result: JsonObject, key: str, value: JsonValue) -> None:
    """Insert a value, deep-merging objects that land on the same key."""
    existing = result.get(key)
    if key in result and isinstance(existing, dict) and isinstance(value, dict):
        merged = dict(existing)
        for child_key, child_value in value.items():
            _place(merged, child_key, child_value)
        result[key] = merged
    else:
        result[key] = value
