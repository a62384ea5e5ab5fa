# -*- encoding: utf-8 -*-
# @File   : abstract.py
# @Time   : 2024/09/08 20:22:30
# @Author : Kariko Lin

from abc import ABCMeta, abstractmethod
from os import PathLike, fspath
from typing import Generic, TypeVar

T = TypeVar('T')


class SerializedComponents(Generic[T], metaclass=ABCMeta):
    """A forward-only view over serialized units (chars, records, ...).

    Typical use:

        ```python
        while not view.exhausted:
            handle(view.current)
            view.next()
        ```
    """

    @abstractmethod
    def reset_seek(self) -> None:
        """Go back to the very first unit."""
        raise NotImplementedError

    @property
    @abstractmethod
    def exhausted(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def next(self) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def current(self) -> T:
        """The unit under the cursor. Undefined once `exhausted`."""
        raise NotImplementedError

    # where we are, for error messages.
    @abstractmethod
    def __str__(self) -> str:
        raise NotImplementedError


class FileHandler(Generic[T], metaclass=ABCMeta):
    """Loads a whole file into memory as `T`, and saves it back."""

    def __init__(self, filename: str | PathLike[str]) -> None:
        self._fn = fspath(filename)

    @property
    def filename(self) -> str:
        return self._fn

    @abstractmethod
    def read(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def write(self, instance: T) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return self._fn
