# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2024/10/10 01:04:45
# @Author : Kariko Lin

"""Flat INI reading & writing.

The grammar is deliberately tiny:

    ```ini
    key = value        ; goes to the default section ''
    [section]          ; a trailing comment is fine here
    key = value
    ```

No nesting, no escaping, no multi-line values. Everything is a string.
`parse()` accepts either decoded text or raw 8-bit units (`bytes`, ...)
and scans them once, char by char, with a small state machine.
"""

import codecs
import logging
from collections.abc import Callable, Iterable
from enum import Enum, auto
from os import PathLike, fspath
from os.path import dirname, join
from warnings import warn

import chardet

from .abstract import FileHandler, SerializedComponents
from .model import DEFAULT_SECTION, Document

logger = logging.getLogger(__name__)

UTF8_BOM = b'\xef\xbb\xbf'

_BLANKS = ' \t'
_NEWLINES = '\r\n'


class ParseError(ValueError):
    """To record errors when parsing INI text."""

    def __init__(self, reason: str, line: int, column: int, offset: int):
        super().__init__(f'{reason} (line {line}, column {column})')
        self.reason = reason
        self.line = line
        self.column = column
        self.offset = offset


class IniCursor(SerializedComponents[str]):
    """Forward-only cursor over INI text, one code unit at a time.

    Raw bytes are viewed as latin-1, i.e. each byte becomes exactly one
    char, so the scanner never has to care about multi-byte sequences.
    """

    def __init__(self, text: str, start: int = 0) -> None:
        self._text = text
        self._start = start
        self.reset_seek()

    def reset_seek(self) -> None:
        self._pos = self._start
        self.line = 1
        self.column = 1

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._text)

    @property
    def offset(self) -> int:
        """Units consumed so far, not counting the BOM."""
        return self._pos - self._start

    def next(self) -> None:
        if self._text[self._pos] == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self._pos += 1

    @property
    def current(self) -> str:
        return self._text[self._pos]

    def error(self, reason: str) -> ParseError:
        return ParseError(reason, self.line, self.column, self.offset)

    def __str__(self) -> str:
        return f'line {self.line}, column {self.column}'


class _State(Enum):
    STATEMENT = auto()
    SECTION = auto()
    AFTER_SECTION = auto()
    COMMENT = auto()
    KEY = auto()
    VALUE = auto()


def _units_to_text(
    data: str | bytes | bytearray | memoryview | Iterable[int | str]
) -> tuple[str, bool]:
    """Normalize input to a str of code units. Returns `(text, is_raw)`."""
    if isinstance(data, str):
        return data, False
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data).decode('latin-1'), True
    if not isinstance(data, Iterable):
        raise TypeError(
            f'cannot parse INI from {type(data).__name__!r} object')

    units = list(data)
    if all(isinstance(i, int) for i in units):
        # bytes() refuses anything outside 0..255 by itself.
        return bytes(units).decode('latin-1'), True
    if all(isinstance(i, str) and len(i) == 1 for i in units):
        return ''.join(units), False
    raise TypeError('INI units should be all 8-bit ints or all chars')


def _trim(buf: list[str]) -> str:
    return ''.join(buf).strip(_BLANKS)


def _scan(cursor: IniCursor, decode: Callable[[str], str]) -> Document:
    ret = Document()
    state = _State.STATEMENT
    section = DEFAULT_SECTION
    name: list[str] = []
    key: list[str] = []
    value: list[str] = []

    def end_section() -> None:
        nonlocal section
        trimmed = _trim(name)
        if not trimmed:
            raise cursor.error('Invalid section name')
        section = decode(trimmed)
        ret.get_or_create(section)

    def end_statement() -> None:
        trimmed = _trim(key)
        if not trimmed:
            raise cursor.error('Invalid key name')
        ret.get_or_create(section)[decode(trimmed)] = decode(_trim(value))

    while not cursor.exhausted:
        ch = cursor.current
        match state:
            case _State.STATEMENT:
                if ch == '[':
                    name.clear()
                    state = _State.SECTION
                elif ch == ';':
                    state = _State.COMMENT
                elif ch not in _BLANKS and ch not in _NEWLINES:
                    key.clear()
                    value.clear()
                    state = _State.KEY
                    continue  # re-dispatch this very char as part of key
            case _State.SECTION:
                if ch in _NEWLINES:
                    raise cursor.error('Unexpected end of section')
                elif ch == ';':
                    raise cursor.error('Unexpected comment')
                elif ch == ']':
                    state = _State.AFTER_SECTION
                else:
                    name.append(ch)
            case _State.AFTER_SECTION:
                if ch in _NEWLINES:
                    end_section()
                    state = _State.STATEMENT
                elif ch == ';':
                    end_section()
                    state = _State.COMMENT
                elif ch not in _BLANKS:
                    raise cursor.error('Unexpected character after section')
            case _State.COMMENT:
                if ch in _NEWLINES:
                    state = _State.STATEMENT
            case _State.KEY:
                if ch == '=':
                    state = _State.VALUE
                elif ch in _NEWLINES:
                    end_statement()
                    state = _State.STATEMENT
                elif ch == ';':
                    end_statement()
                    state = _State.COMMENT
                else:
                    key.append(ch)
            case _State.VALUE:
                if ch == '=':
                    raise cursor.error('Unexpected character')
                elif ch in _NEWLINES:
                    end_statement()
                    state = _State.STATEMENT
                elif ch == ';':
                    end_statement()
                    state = _State.COMMENT
                else:
                    value.append(ch)
        cursor.next()

    # EOF closes whatever statement is still open.
    match state:
        case _State.SECTION:
            raise cursor.error('Unexpected end of section')
        case _State.AFTER_SECTION:
            end_section()
        case _State.KEY | _State.VALUE:
            end_statement()
    return ret


# codecs in which every byte < 0x80 stands for itself,
# never being a trail byte of some multi-byte char (unlike gbk, sjis ...).
_RAW_SCANNABLE = frozenset({'utf-8', 'iso8859-1'})


def _normalize_codec(codec: str) -> str:
    name = codecs.lookup(codec).name
    # utf-8-sig would eat the BOM, and ascii can't take new values later.
    if name in ('utf-8-sig', 'ascii'):
        return 'utf-8'
    return name


def parse(
    data: str | bytes | bytearray | memoryview | Iterable[int | str],
    encoding: str = 'utf-8'
) -> Document:
    """Parse INI text into a `Document`.

    Args:
        data: decoded `str`, raw `bytes`-like object,
            or any iterable of 8-bit ints / single chars.
        encoding: how to decode keys, values and section names
            when `data` is raw. Undecodable bytes are kept as
            surrogates (`surrogateescape`), so nothing gets lost.
            Raw input in codecs other than utf-8 / latin-1
            (gbk, utf-16, ...) is decoded as a whole before scanning.

    Raises:
        ParseError: on the first malformed construct.
            Nothing half-parsed is returned.
        TypeError: if `data` is neither text nor 8-bit units.
        LookupError: if `encoding` is unknown.
    """
    text, is_raw = _units_to_text(data)
    if is_raw and _normalize_codec(encoding) not in _RAW_SCANNABLE:
        text = text.encode('latin-1').decode(encoding, 'surrogateescape')
        is_raw = False
    if is_raw:
        bom = UTF8_BOM.decode('latin-1')

        def decode(s: str) -> str:
            return s.encode('latin-1').decode(encoding, 'surrogateescape')
    else:
        bom = codecs.BOM_UTF8.decode('utf-8')

        def decode(s: str) -> str:
            return s

    start = len(bom) if text.startswith(bom) else 0
    return _scan(IniCursor(text, start), decode)


def parse_cstring(
    data: str | bytes | bytearray | memoryview,
    encoding: str = 'utf-8'
) -> Document:
    """Parse a NUL-terminated buffer, ignoring anything after the first NUL."""
    nul = '\0' if isinstance(data, str) else 0
    if isinstance(data, memoryview):
        data = data.tobytes()
    if (end := data.find(nul)) >= 0:
        data = data[:end]
    return parse(data, encoding)


def encode(doc: Document, bom: bool = False) -> str:
    """Serialize `doc`, sections and keys both in sorted order.

    The default section goes without header. Keys and values are
    written verbatim, so make sure they contain no `=;[]` or newlines
    if you'd like to read them back.
    """
    ret: list[str] = []
    if bom:
        ret.append(codecs.BOM_UTF8.decode('utf-8'))
    for name, section in doc.items():
        if name:
            ret.append(f'[{name}]\n')
        for k, v in section.items():
            ret.append(f'{k}={v}\n')
    return ''.join(ret)


class IniFileParser(FileHandler[Document]):
    """Read & write a single INI file.

    When `encoding` is not given, it is guessed with `chardet` on read,
    and the guess is reused on write.
    `bom=None` keeps whatever BOM state the last `read()` saw.
    """

    def __init__(
        self, filename: str | PathLike[str],
        encoding: str | None = None, *,
        bom: bool | None = None
    ) -> None:
        super().__init__(filename)
        self._given = encoding
        self._codec = None if encoding is None else _normalize_codec(encoding)
        self._bom = bom
        self._had_bom = False

    @property
    def encoding(self) -> str | None:
        return self._codec

    @property
    def had_bom(self) -> bool:
        """Whether the last `read()` found a UTF-8 BOM."""
        return self._had_bom

    @staticmethod
    def _guess_codec(raw: bytes) -> str:
        if raw.startswith(UTF8_BOM):
            return 'utf-8'
        codec = chardet.detect(raw)
        if codec['encoding'] is None or codec['confidence'] < 0.8:
            if codec['encoding'] is not None:
                warn(
                    f'Unsure about the encoding ({codec["encoding"]}, '
                    f'confidence {codec["confidence"]:.2f}), '
                    'fallback to utf-8.')
            return 'utf-8'
        logger.debug(
            'guessed %s (confidence %.2f)',
            codec['encoding'], codec['confidence'])
        return _normalize_codec(codec['encoding'])

    def read(self) -> Document:
        """读取本实例指定的文件。`OSError`等 IO 异常不做处理。"""
        with open(self._fn, 'rb') as fp:
            raw = fp.read()
        self._had_bom = raw.startswith(UTF8_BOM)
        if self._codec is None:
            self._codec = self._guess_codec(raw)
        logger.info('reading %s (%s)', self._fn, self._codec)
        if self._codec in _RAW_SCANNABLE:
            return parse(raw, self._codec)
        # decode first and scan chars instead.
        return parse(raw.decode(self._codec))

    def readfiles(self, *others: str | PathLike[str]) -> Document:
        """读取本实例指定的文件，再依次读取`others`，后者覆盖前者。

        注：`others`中的相对路径以本实例所指文件所在的文件夹为基准。
        显式指定的`encoding`同样用于`others`，否则逐个猜测。
        """
        ret = self.read()
        root = dirname(self._fn)
        for i in others:
            sub = IniFileParser(join(root, fspath(i)), self._given)
            ret.merge(sub.read())
        return ret

    def write(self, instance: Document) -> None:
        codec = self._codec or 'utf-8'
        bom = self._had_bom if self._bom is None else self._bom
        text = encode(instance, bom and codec == 'utf-8')
        with open(self._fn, 'wb') as fp:
            fp.write(text.encode(codec, 'surrogateescape'))
        logger.info('wrote %d sections to %s', len(instance), self._fn)

    def __str__(self) -> str:
        return "INI file: " + super().__str__() + f"({self._codec})"
