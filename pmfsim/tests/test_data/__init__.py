# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""测试使用的器官参数、土壤剖面以及构造模拟上下文的辅助函数。"""
import os
import copy
import datetime

import pandas as pd

from ...base import VariableKiosk, SimulationContext, WeatherDataContainer
from ...soil import SoilLayerProfile, Zone, SurfaceOrganicMatter

test_data_dir = os.path.dirname(os.path.abspath(__file__))

ROOT_PARAMETERS = {
    "DMDemandFunction": 1.0,
    "KNO3": 0.02,
    "KNH4": 0.01,
    "NUptakeSWFactor": 1.0,
    "InitialDM": 0.01,
    "SpecificRootLength": 60.,
    "SenescenceRate": 0.,
    "RootFrontVelocity": 10.,
    "MaximumNConc": 0.02,
    "MinimumNConc": 0.005,
    "MaxDailyNUptake": 3.0,
    "KLModifier": 1.0,
    "MaximumRootDepth": 1500.,
    "DMConversionEfficiency": 1.0,
    "CarbonConcentration": 0.4,
    "MaintenanceRespiration": 0.,
}

LEAF_PARAMETERS = {
    "RUE": 1.5,
    "ExtinctionCoefficient": 0.6,
    "SpecificLeafArea": 0.02,
    "CohortLifespan": 3,
    "ExpansionDuration": 2,
    "CohortInterval": 100,
    "InitialDM": 0.1,
    "DMDemandFunction": 2.0,
    "MaximumNConc": 0.05,
    "MinimumNConc": 0.01,
    "DMConversionEfficiency": 1.0,
    "CarbonConcentration": 0.4,
    "MaintenanceRespiration": 0.,
}

STEM_PARAMETERS = {
    "DMDemandFunction": 1.0,
    "InitialDM": 0.1,
    "SenescenceRate": 0.1,
    "MaximumNConc": 0.02,
    "MinimumNConc": 0.005,
    "DMConversionEfficiency": 1.0,
    "CarbonConcentration": 0.4,
    "MaintenanceRespiration": 0.,
}


def parameters(template, **overrides):
    """复制参数模板并用 overrides 覆盖其中的值"""
    p = copy.deepcopy(template)
    p.update(overrides)
    return p


def soil_description(nlayers=5, thickness=150., **layer_values):
    """构造 nlayers 个相同土层的剖面描述，layer_values 覆盖默认的土层取值。"""
    layer = {"Thickness": thickness, "SW": 0.3, "LL15": 0.1, "DUL": 0.35, "BD": 1.3,
             "NO3N": 10., "NH4N": 1., "LL": 0.1, "KL": 0.06, "XF": 1.0}
    layer.update(layer_values)
    return {"SoilLayers": [dict(layer) for _ in range(nlayers)]}


def make_zone(name="Field", nlayers=5, thickness=150., **layer_values):
    soil = SoilLayerProfile.from_description(soil_description(nlayers, thickness,
                                                              **layer_values))
    return Zone(name, soil)


def make_drv(day, **overrides):
    values = {"IRRAD": 20.e6, "TMIN": 10., "TMAX": 20., "RAIN": 0., "ET0": 3.}
    values.update(overrides)
    return WeatherDataContainer(LAT=52., LON=5., ELEV=10., DAY=day, **values)


def make_context(zones, zone_name=None, day=datetime.date(2000, 4, 1), kiosk=None):
    """构造带有给定区域的 `SimulationContext`，植株位于 zone_name（缺省为第一个区域）。"""
    kiosk = kiosk if kiosk is not None else VariableKiosk()
    zones = {zone.name: zone for zone in zones}
    context = SimulationContext(kiosk, zones, SurfaceOrganicMatter())
    context.plant.zone_name = zone_name if zone_name is not None else list(zones)[0]
    context.update(day, make_drv(day))
    return context


def make_weather_frame(start, end, **overrides):
    """在 start 到 end 之间每天取值相同的气象数据 DataFrame"""
    values = {"IRRAD": 15.e6, "TMIN": 8., "TMAX": 18., "RAIN": 0., "ET0": 3.}
    values.update(overrides)
    df = pd.DataFrame({"DAY": pd.date_range(start, end, freq="D")})
    for name, value in values.items():
        df[name] = value
    return df
