# -*- coding: utf-8 -*-
"""
服務層模組
"""
from . import auth
from . import audit

# 就診核心
from . import quota
from . import visits
from . import retention

# 病人
from . import patients
from . import import_service
