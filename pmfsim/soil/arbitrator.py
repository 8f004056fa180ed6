# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import logging

import numpy as np

from .soil_profile import ZoneWaterAndN


class SoilArbitrator(object):
    """在植株的吸水/吸氮能力与需求之间进行仲裁。

    对每个区域，先由吸收器官（根系）根据当前土壤状态计算各层的可供量，
    然后按 ``min(1, 需求/总可供量)`` 等比例缩减，最后把实际吸收量交给器官执行。
    根系不存在的区域（可供量为 None）被跳过。

    :param zones: 区域字典 {name: `Zone`}
    """

    def __init__(self, zones):
        self.zones = zones

    @property
    def logger(self):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        return logging.getLogger(loggername)

    def _snapshots(self):
        return [ZoneWaterAndN(zone, Water=zone.soil.Water.copy(),
                              NO3N=zone.soil.NO3N.copy(), NH4N=zone.soil.NH4N.copy())
                for zone in self.zones.values()]

    def do_water_arbitration(self, organ, demand):
        """按需求 demand（mm）执行吸水，返回实际吸水量（mm）。"""
        supplies = []
        for snapshot in self._snapshots():
            supply = organ.calculate_water_supply(snapshot)
            if supply is not None:
                supplies.append((snapshot.name, np.asarray(supply, dtype=float)))

        total_supply = sum(s.sum() for _, s in supplies)
        if total_supply > 0.:
            fraction = min(1., max(0., demand) / total_supply)
        else:
            fraction = 0.
        for zone_name, supply in supplies:
            organ.do_water_uptake(supply * fraction, zone_name)

        uptake = total_supply * fraction
        self.logger.debug("Water supply %.3f mm, demand %.3f mm, uptake %.3f mm" %
                          (total_supply, demand, uptake))
        return uptake

    def do_nitrogen_arbitration(self, organ, demand):
        """按需求 demand（kg N/ha）执行吸氮，返回实际吸氮量（kg N/ha）。"""
        supplies = []
        for snapshot in self._snapshots():
            supply = organ.calculate_nitrogen_supply(snapshot)
            if supply is not None:
                no3, nh4 = supply
                supplies.append((snapshot.zone, np.asarray(no3, dtype=float),
                                 np.asarray(nh4, dtype=float)))

        total_supply = sum(no3.sum() + nh4.sum() for _, no3, nh4 in supplies)
        if total_supply > 0.:
            fraction = min(1., max(0., demand) / total_supply)
        else:
            fraction = 0.
        uptakes = [ZoneWaterAndN(zone, NO3N=no3 * fraction, NH4N=nh4 * fraction)
                   for zone, no3, nh4 in supplies]
        organ.do_nitrogen_uptake(uptakes)

        uptake = total_supply * fraction
        self.logger.debug("N supply %.4f kg/ha, demand %.4f kg/ha, uptake %.4f kg/ha" %
                          (total_supply, demand, uptake))
        return uptake
