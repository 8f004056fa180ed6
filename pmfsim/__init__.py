# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""PMFSim: 植株器官之间的资源仲裁与分层、多区域的根系吸收模型。

主要组成：

* `pmfsim.crop`: 器官（根、叶、茎）、器官仲裁器和植株
* `pmfsim.soil`: 土壤剖面、区域、残体库和土壤仲裁器
* `pmfsim.engine`: 按天驱动模拟的引擎
* `pmfsim.input`: 读取参数、农事管理和气象数据
"""
import logging.config

from .settings import settings

__version__ = "0.3.0"

logging.config.dictConfig(settings.LOG_CONFIG)

from . import exceptions
from . import base
from . import soil
from . import crop
from . import input
from .engine import Engine
from .tests import test_all
