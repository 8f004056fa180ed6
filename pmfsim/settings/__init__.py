# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
import os
import sys
import importlib
import warnings

from . import default_settings


class Settings(object):
    """PMFSim 的全局设置，以属性方式访问。

    先读取 pmfsim.settings.default_settings，再读取可选的
    $PMFSIM_USER_HOME/user_settings.py 覆盖其中的值。只有全大写的名称被视为设置项，
    目录类设置（PMFSIM_USER_HOME、LOG_DIR）在赋值时自动创建。
    """

    _directories = ("PMFSIM_USER_HOME", "LOG_DIR")

    def __init__(self):
        self._load(default_settings)
        if os.path.exists(os.path.join(self.PMFSIM_USER_HOME, "user_settings.py")):
            if self.PMFSIM_USER_HOME not in sys.path:
                sys.path.append(self.PMFSIM_USER_HOME)
            self._load(importlib.import_module("user_settings"))

    def __setattr__(self, name, value):
        if name in self._directories:
            os.makedirs(value, exist_ok=True)
        object.__setattr__(self, name, value)

    def _load(self, mod):
        for name in dir(mod):
            if name.startswith("_"):
                continue
            if not name.isupper():
                msg = "Settings should be ALL_CAPS, '%s' in %s is ignored." % (name, mod.__name__)
                warnings.warn(msg)
                continue
            setattr(self, name, getattr(mod, name))


# 从 default_settings 和 user_settings 初始化设置
settings = Settings()
