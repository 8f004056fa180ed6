# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""PMFSim 引擎提供植株、土壤区域和农事管理运行的环境。

引擎负责根据参数构造土壤区域、模拟上下文和植株，跟踪时间并提供气象数据，
处理农事管理发出的信号，并按天驱动植株的仲裁与生长计算。
"""
import datetime
import types
import logging

import pandas as pd

from .traitlets import HasTraits, Instance, Bool, List
from .base import (VariableKiosk, WeatherDataProvider, ParameterProvider, DispatcherObject,
                   SimulationContext)
from .soil import SoilLayerProfile, Zone, SurfaceOrganicMatter, SoilArbitrator
from .crop.plant import Plant
from .agromanager import AgroManager
from .timer import Timer
from . import signals
from . import exceptions as exc
from .settings import settings


class Engine(HasTraits, DispatcherObject):
    """模拟一株植物在一个或多个土壤区域中生长的引擎。

    :param parameterprovider: `ParameterProvider`，plantdata 中包含 Plant、Leaf、Stem
        和 Root 的参数，soildata 中 ``Zones`` 给出每个区域的名称和土壤剖面描述
    :param weatherdataprovider: `WeatherDataProvider` 实例
    :param agromanagement: 农事管理定义，见 `AgroManager`
    :param output_vars: 每天保存的变量名列表，缺省为 settings.OUTPUT_VARS

    **引擎处理的信号：**

        * PLANT_SOWING: 播种植株，见 `_on_PLANT_SOWING`
        * BIOMASS_REMOVAL: 移除生物量，见 `_on_BIOMASS_REMOVAL`
        * PLANT_ENDING: 在当天计算速率之前结束植株，见 `_on_PLANT_ENDING`
        * OUTPUT: 保存选定的状态和速率变量
        * TERMINATE: 终止模拟

    每个模拟日的顺序为：计时器推进、状态积分（植株的实际生长）、读取气象数据、
    执行农事管理、计算速率（植株的仲裁），最后按需保存输出。
    """
    parameterprovider = Instance(ParameterProvider)
    weatherdataprovider = Instance(WeatherDataProvider)
    agromanager = Instance(AgroManager)
    timer = Instance(Timer)
    kiosk = Instance(VariableKiosk)
    context = Instance(SimulationContext)
    soil_arbitrator = Instance(SoilArbitrator)
    plant = Instance(Plant)
    day = Instance(datetime.date)
    drv = None
    output_vars = List()

    # 由信号设置的标志位
    flag_terminate = Bool(False)
    flag_output = Bool(False)
    flag_plant_ending = Bool(False)

    _saved_output = List()

    def __init__(self, parameterprovider, weatherdataprovider, agromanagement, output_vars=None):
        HasTraits.__init__(self)
        DispatcherObject.__init__(self)

        self.parameterprovider = parameterprovider
        self.kiosk = VariableKiosk()
        self._saved_output = list()
        self.output_vars = list(output_vars) if output_vars is not None \
            else list(settings.OUTPUT_VARS)

        self._connect_signal(self._on_PLANT_SOWING, signal=signals.plant_sowing)
        self._connect_signal(self._on_BIOMASS_REMOVAL, signal=signals.biomass_removal)
        self._connect_signal(self._on_PLANT_ENDING, signal=signals.plant_ending)
        self._connect_signal(self._on_OUTPUT, signal=signals.output)
        self._connect_signal(self._on_TERMINATE, signal=signals.terminate)

        self.agromanager = AgroManager(self.kiosk, agromanagement)
        start_date = self.agromanager.start_date
        end_date = self.agromanager.end_date

        self.timer = Timer(self.kiosk, start_date, end_date, self.output_vars,
                           settings.OUTPUT_INTERVAL_DAYS)
        self.day, delt = self.timer()

        self.weatherdataprovider = weatherdataprovider
        self.drv = self._get_driving_variables(self.day)

        zones = self._build_zones(parameterprovider.soildata)
        self.context = SimulationContext(self.kiosk, zones, SurfaceOrganicMatter())
        self.context.update(self.day, self.drv)
        self.soil_arbitrator = SoilArbitrator(zones)
        self.plant = Plant(self.day, self.kiosk, parameterprovider, self.context,
                           self.soil_arbitrator)
        self.plant.on_simulation_start(self.day)
        # 播种之前 kiosk 中不出现器官和植株的变量
        self.kiosk.flush_states()
        self.kiosk.flush_rates()

        self.agromanager(self.day, self.drv)
        self.calc_rates(self.day, self.drv)

    @property
    def logger(self):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        return logging.getLogger(loggername)

    def __setattr__(self, attr, value):
        if attr.startswith("_") or type(value) is types.FunctionType:
            HasTraits.__setattr__(self, attr, value)
        elif hasattr(self, attr):
            HasTraits.__setattr__(self, attr, value)
        else:
            msg = "Assignment to non-existing attribute '%s' prevented." % attr
            raise AttributeError(msg)

    @staticmethod
    def _build_zones(soildata):
        """由土壤参数构造区域字典 {name: `Zone`}，保持定义的顺序。"""
        try:
            zone_defs = soildata["Zones"]
        except KeyError:
            msg = "Soil data should define 'Zones'."
            raise exc.ConfigurationError(msg)

        zones = {}
        for zone_def in zone_defs:
            name = zone_def.get("Name")
            if name is None:
                raise exc.ConfigurationError("Zone definition without 'Name'.")
            if name in zones:
                raise exc.ConfigurationError("Duplicate zone name: %s" % name)
            zones[name] = Zone(name, SoilLayerProfile.from_description(zone_def))
        if not zones:
            raise exc.ConfigurationError("Soil data should define at least one zone.")
        return zones

    def calc_rates(self, day, drv):
        self.context.update(day, drv)

        if self.flag_plant_ending:
            self._finish_plant(day)

        self.plant.calc_rates(day, drv)

        if self.flag_output:
            self._save_output(day)

    def integrate(self, day, delt):
        # 在状态更新之前从 kiosk 清空状态变量
        self.kiosk.flush_states()
        self.plant.integrate(day, delt)
        # 在状态更新之后从 kiosk 清空速率变量
        self.kiosk.flush_rates()

    def _run(self):
        """执行一个模拟日。"""
        self.day, delt = self.timer()
        self.integrate(self.day, delt)
        self.drv = self._get_driving_variables(self.day)
        self.context.update(self.day, self.drv)
        self.agromanager(self.day, self.drv)
        self.calc_rates(self.day, self.drv)

    def run(self, days=1):
        """把系统向前推进 days 天"""
        days_done = 0
        while (days_done < days) and (self.flag_terminate is False):
            days_done += 1
            self._run()

    def run_till_terminate(self):
        """一直运行到收到 TERMINATE 信号为止"""
        while self.flag_terminate is False:
            self._run()

    def _on_PLANT_SOWING(self, day, population, depth):
        self.logger.debug("Received signal 'PLANT_SOWING' on day %s" % day)
        self.plant.sow(day, population, depth)

    def _on_BIOMASS_REMOVAL(self, day, event_name, fractions=None):
        self.logger.debug("Received signal 'BIOMASS_REMOVAL' (%s) on day %s" % (event_name, day))
        self.plant.remove_biomass(day, event_name, fractions)

    def _on_PLANT_ENDING(self, day):
        """结束植株会延后到 calc_rates() 中，在当天的速率计算之前执行。"""
        self.flag_plant_ending = True

    def _on_OUTPUT(self):
        self.flag_output = True

    def _on_TERMINATE(self):
        self.flag_terminate = True

    def _finish_plant(self, day):
        self.flag_plant_ending = False
        self.plant.end(day)

    def _get_driving_variables(self, day):
        """获取当天的气象数据，缺少平均气温时按 (TMIN+TMAX)/2 计算。"""
        drv = self.weatherdataprovider(day)
        if not hasattr(drv, "TEMP"):
            drv.add_variable("TEMP", (drv.TMIN + drv.TMAX) / 2., "Celsius")
        return drv

    def get_variable(self, varname):
        """返回 kiosk 中已发布的变量 varname 的值，也尝试全大写的名称，找不到时返回 None。"""
        if self.kiosk.variable_exists(varname):
            v = varname
        elif self.kiosk.variable_exists(varname.upper()):
            v = varname.upper()
        else:
            return None
        return self.kiosk.get(v, None)

    def _save_output(self, day):
        self.flag_output = False
        states = {"day": day}
        for var in self.output_vars:
            states[var] = self.get_variable(var)
        self._saved_output.append(states)

    def get_output(self):
        """按时间顺序返回保存的输出（字典列表），没有输出时返回空列表。"""
        return self._saved_output

    def get_output_frame(self):
        """以 pandas DataFrame 返回保存的输出，索引为日期。"""
        df = pd.DataFrame(self._saved_output)
        if not df.empty:
            df = df.set_index("day")
        return df
