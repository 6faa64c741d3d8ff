"""Key grouping: raw key tags -> ordered composite keys."""
import logging
from typing import Dict, Hashable, Iterable, List, Tuple, TypeVar

from repogen.core.workflow import GenerationStage
from repogen.generators.entity_gen.types import Key, KeyTag

log = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def index(items: Iterable[Tuple[K, V]]) -> List[Tuple[K, List[V]]]:
    """
    Group (key, value) pairs by key, keeping order.

    Groups come out in the order their key was first seen; values within a
    group keep their input order.
    """
    order: List[K] = []
    groups: Dict[K, List[V]] = {}
    for k, v in items:
        if k not in groups:
            order.append(k)
            groups[k] = []
        groups[k].append(v)
    return [(k, groups[k]) for k in order]


def group_keys(key_tags: List[KeyTag], entity: str = "-") -> Tuple[Key, ...]:
    """Build one Key per distinct key name; uniqueness is the OR of the members."""
    keys = []
    for name, tags in index((tag.key_name, tag) for tag in key_tags):
        declared = {tag.unique for tag in tags if tag.unique is not None}
        if declared == {True, False}:
            log.warning(
                "Key '%s' mixes unique and non-unique components; treating it as unique",
                name,
                extra={"entity": entity, "stage": str(GenerationStage.GROUP)},
            )
        keys.append(Key(
            name=name,
            unique=any(tag.unique for tag in tags),
            components=tuple(tag.column for tag in tags),
        ))
    return tuple(keys)
