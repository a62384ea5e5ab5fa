# -*- encoding: utf-8 -*-
# @File   : __main__.py
# @Time   : 2024/10/12 22:41:07
# @Author : Kariko Lin

from .cli import app

app(prog_name='flatini')
