# -*- coding: utf-8 -*-
"""
路由模組
"""

from . import home
from . import patients
from . import admin
