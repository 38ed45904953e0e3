#!/usr/bin/env python3
"""
Named objects grouped into priority levels
Level 0 is the highest priority and is iterated first
"""

from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar('T')


class PriorityTaskList(Generic[T]):
    """
    Mapping name -> (object, level), organised as an ordered list of levels

    Objects within a level are kept in insertion order but carry no
    relative priority. Levels may be empty (e.g. objects at 0 and 2 only).
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[T, int]] = {}
        self._levels: List[List[str]] = []

    def create(self, name: str, obj: T, level: int) -> bool:
        """Insert an object; fails if the name already exists"""
        if name in self._entries:
            return False
        while len(self._levels) <= level:
            self._levels.append([])
        self._entries[name] = (obj, level)
        self._levels[level].append(name)
        return True

    def erase(self, name: str) -> bool:
        if name not in self._entries:
            return False
        _, level = self._entries.pop(name)
        self._levels[level].remove(name)
        # Drop trailing empty levels
        while self._levels and not self._levels[-1]:
            self._levels.pop()
        return True

    def at(self, name: str) -> Optional[T]:
        entry = self._entries.get(name)
        return None if entry is None else entry[0]

    def level_of(self, name: str) -> Optional[int]:
        entry = self._entries.get(name)
        return None if entry is None else entry[1]

    def get_level(self, level: int) -> List[T]:
        if level < 0 or level >= len(self._levels):
            return []
        return [self._entries[name][0] for name in self._levels[level]]

    @property
    def num_levels(self) -> int:
        return len(self._levels)

    def names(self) -> List[str]:
        return [name for lvl in self._levels for name in lvl]

    def items(self) -> Iterator[Tuple[str, T]]:
        for name in self.names():
            yield name, self._entries[name][0]

    def first(self) -> Optional[T]:
        for _, obj in self.items():
            return obj
        return None

    def clear(self):
        self._entries.clear()
        self._levels.clear()

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        for _, obj in self.items():
            yield obj
