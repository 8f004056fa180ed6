# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import logging
from collections import namedtuple, defaultdict

ResidueInput = namedtuple("ResidueInput", ["mass", "N", "P", "crop_type", "organ_name"])


class SurfaceOrganicMatter(object):
    """地表有机质（残体）库。

    植株脱落、衰老和终结时的生物量通过 `add()` 进入本库，单位为 kg/ha。
    残体的分解不在本包的范围内，这里只记录输入，按器官汇总。
    """

    def __init__(self):
        self.inputs = []
        self._totals = defaultdict(lambda: [0., 0.])

    @property
    def logger(self):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        return logging.getLogger(loggername)

    def add(self, mass, n, p, crop_type, organ_name):
        """加入残体

        :param mass: 干物质（kg/ha）
        :param n: 氮（kg/ha）
        :param p: 磷（kg/ha），目前不参与计算
        :param crop_type: 作物类型
        :param organ_name: 来源器官名称
        """
        if mass <= 0. and n <= 0.:
            return
        self.inputs.append(ResidueInput(mass, n, p, crop_type, organ_name))
        totals = self._totals[organ_name]
        totals[0] += mass
        totals[1] += n
        self.logger.debug("Added %.3f kg/ha residue (%.4f kg N/ha) from %s (%s)" %
                          (mass, n, organ_name, crop_type))

    @property
    def Wt(self):
        """累计残体干物质（kg/ha）"""
        return sum(t[0] for t in self._totals.values())

    @property
    def N(self):
        """累计残体氮（kg/ha）"""
        return sum(t[1] for t in self._totals.values())

    def totals_for(self, organ_name):
        """返回来自 organ_name 的累计 (干物质, 氮)，单位 kg/ha。"""
        if organ_name not in self._totals:
            return 0., 0.
        return tuple(self._totals[organ_name])
