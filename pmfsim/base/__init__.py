# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""用于创建PMFSim模拟单元的基类。

通常这些类不是直接使用的，而是在创建器官、植株和农事管理时进行子类化。
"""
from .variablekiosk import VariableKiosk
from .parameter_providers import ParameterProvider
from .simulationobject import SimulationObject, AncillaryObject
from .states_rates import StatesTemplate, RatesTemplate, ParamTemplate
from .weather import WeatherDataContainer, WeatherDataProvider
from .dispatcher import DispatcherObject
from .context import SimulationContext, PlantState
from .organ import Organ
