# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/10/10 01:16:53
# @Author : Kariko Lin

from .model import DEFAULT_SECTION, Document, RangeError, Section
from .parser import (
    IniFileParser,
    ParseError,
    encode,
    parse,
    parse_cstring
)

__all__ = [
    'DEFAULT_SECTION', 'Document', 'Section', 'RangeError',
    'ParseError', 'parse', 'parse_cstring', 'encode', 'IniFileParser'
]

__version__ = '0.1.0'
