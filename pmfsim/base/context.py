# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""模拟上下文：当天日期、气象数据、植株状态和土壤区域。

器官不访问任何全局对象，所有外部信息都通过绑定的 `SimulationContext` 获取。
"""
import logging
from datetime import date

from ..traitlets import HasTraits, Unicode, Float, Int, Bool, Instance
from .. import exceptions as exc


class PlantState(HasTraits):
    """整株植物的状态，由 `Plant` 维护，器官只读。"""
    name = Unicode("plant")
    crop_type = Unicode("crop")
    zone_name = Unicode()
    population = Float(0.)
    sowing_depth = Float(0.)
    sowing_date = Instance(date)
    is_alive = Bool(False)
    is_emerged = Bool(False)
    DAS = Int(0)
    water_stress = Float(1.0)


class SimulationContext(object):
    """一个模拟实例的上下文

    :param kiosk: 本次模拟的 VariableKiosk
    :param zones: 区域字典 {name: `Zone`}，第一个区域为植株所在的区域
    :param residues: 残体库 `SurfaceOrganicMatter`
    :param plant: `PlantState`
    """

    def __init__(self, kiosk, zones, residues, plant=None):
        self.kiosk = kiosk
        self.zones = zones
        self.residues = residues
        self.plant = plant if plant is not None else PlantState()
        self.day = None
        self.drv = None

    @property
    def logger(self):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        return logging.getLogger(loggername)

    def update(self, day, drv):
        """设置当天日期和气象数据"""
        self.day = day
        self.drv = drv

    def find_zone(self, name):
        """返回名为 name 的区域，找不到时抛出 ConfigurationError。"""
        try:
            return self.zones[name]
        except KeyError:
            msg = "Cannot find a zone called %s" % name
            raise exc.ConfigurationError(msg)

    def get_zone(self, name):
        """返回名为 name 的区域，找不到时返回 None。"""
        return self.zones.get(name)

    def get_driver(self, name):
        """按气象数据、kiosk、植株状态的顺序查找驱动变量 name。"""
        if self.drv is not None and hasattr(self.drv, name):
            return getattr(self.drv, name)
        if name in self.kiosk:
            return self.kiosk[name]
        if name in self.plant.trait_names():
            return getattr(self.plant, name)
        msg = "Driving variable '%s' not available on %s." % (name, self.day)
        raise exc.ParameterError(msg)
