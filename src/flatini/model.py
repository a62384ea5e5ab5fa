# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/10/10 00:57:10
# @Author : Kariko Lin

"""
Basically a flat INI structure: sections of string pairs.

Both containers iterate in *sorted* order (by key, or by section name),
no matter in which order things were inserted.
"""

from collections.abc import Mapping, MutableMapping
from typing import Iterator

DEFAULT_SECTION = ''


class RangeError(KeyError):
    """Read-only access to a key (or section) which does not exist."""

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise.
        return str(self.args[0]) if self.args else ''


class Section(MutableMapping[str, str]):
    """INI 小节字典。

    维护一个小节的所有键值对。键唯一，重复赋值则覆盖旧值；
    遍历顺序总是按键排序，而不是插入顺序。

    所有键值对均*应该*是`str: str`类型（哪怕值为空串），
    但由于 Python 的动态类型性质，运行时并不会对此作出限制。
    """

    def __init__(
        self, name: str = DEFAULT_SECTION,
        pairs: Mapping[str, str] | None = None
    ) -> None:
        self._name = name
        self._data: dict[str, str] = {}
        if pairs:
            self.update(pairs)

    @property
    def name(self) -> str:
        """Section name, `''` for the default section."""
        return self._name

    def __getitem__(self, key: str) -> str:
        if key not in self._data:
            raise RangeError('Value does not exist')
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        if key not in self._data:
            raise RangeError('Value does not exist')
        del self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._data))

    def __str__(self) -> str:
        return f"[{self._name}]"

    def __repr__(self) -> str:
        return '[%s] { .cnt = %d }' % (self._name, len(self._data))

    def has_value(self, key: str) -> bool:
        return key in self._data

    def get_or_create(self, key: str) -> str:
        """Get the value of `key`, inserting an empty one if it's missing."""
        return self._data.setdefault(key, '')

    def setdefault(self, key: str, default: str = '') -> str:
        return self._data.setdefault(key, default)

    def get_value(self, key: str, default: str = '') -> str:
        return self._data.get(key, default)

    def set_value(self, key: str, value: str) -> None:
        # overwrite, as repeated `key=value` lines do.
        self._data[key] = value

    def delete_value(self, key: str) -> None:
        self._data.pop(key, None)

    def to_dict(self) -> dict[str, str]:
        """获取该小节所有键值对的（已排序）副本。"""
        return {k: self._data[k] for k in self}


class Document(MutableMapping[str, Section]):
    """INI 文件表示。支持以下形式的小节和键值对：

        ```ini
        key = val  ; 位于任何小节之前，归入名为 '' 的默认小节。

        [section]
        key233 = val666  ; 注释会被丢弃
        ```

    A document exclusively owns its sections:
    assigning one stores a copy rather than the given object.
    """

    def __init__(self) -> None:
        self.__sections: dict[str, Section] = {}

    def __getitem__(self, name: str) -> Section:
        if name not in self.__sections:
            raise RangeError('Section does not exist')
        return self.__sections[name]

    def __setitem__(
        self, name: str, value: Section | Mapping[str, str]
    ) -> None:
        # shouldn't keep ptr to external dict in section setting operation.
        self.__sections[name] = Section(name, value)

    def __delitem__(self, name: str) -> None:
        if name not in self.__sections:
            raise RangeError('Section does not exist')
        del self.__sections[name]

    def __contains__(self, name: object) -> bool:
        return name in self.__sections

    def __len__(self) -> int:
        return len(self.__sections)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.__sections))

    def __repr__(self) -> str:
        return 'Document { %s }' % ', '.join(
            repr(self.__sections[i]) for i in self)

    def has_section(self, name: str) -> bool:
        return name in self.__sections

    def get_or_create(self, name: str) -> Section:
        """Get section `name`, creating an empty one if it's missing."""
        if name not in self.__sections:
            self.__sections[name] = Section(name)
        return self.__sections[name]

    def setdefault(
        self, name: str, default: Section | Mapping[str, str] | None = None
    ) -> Section:
        """If `name` not in self, then add it (as a copy of `default`)."""
        if name not in self.__sections:
            self[name] = default or {}
        return self.__sections[name]

    def erase_section(self, name: str) -> None:
        self.__sections.pop(name, None)

    def rename(self, old: str, new: str) -> bool:
        """Rename a section.

        Returns:
            `True` if succeed, otherwise `False`.
            May not success if `old` is not found or `new` already exists.
        """
        if old not in self.__sections or new in self.__sections:
            return False
        # stored as a fresh copy named `new`, see `__setitem__`.
        self[new] = self.__sections.pop(old)
        return True

    def merge(self, another: 'Document') -> None:
        """To merge `another` into self. Pairs of `another` win."""
        for name, section in another.items():
            self.get_or_create(name).update(section)
