# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import numpy as np

from ..traitlets import HasTraits, Instance, Unicode, LayerArray
from ..util import DotMap
from .. import exceptions as exc


class SoilLayerProfile(HasTraits):
    """分层土壤的水分与矿质氮状态。

    土壤水分模型和土壤氮模型不属于本包，这里只保存它们的状态，供根系读取，
    并接收根系的吸水和吸氮请求。第 0 层为表层，土层数量在整个模拟中不变。

    =========== =========================================== ==========
    名称         描述                                         单位
    =========== =========================================== ==========
    Thickness   土层厚度                                     mm
    Water       土层含水量                                   mm
    LL15mm      -1.5 MPa 下限含水量                          mm
    DULmm       排水上限含水量                               mm
    BD          土壤容重                                     g/cc
    NO3N        硝态氮                                       kg N/ha
    NH4N        铵态氮                                       kg N/ha
    LL          作物吸水下限                                 mm/mm
    KL          作物吸水速率常数                             /d
    XF          根系可进入比例，0 表示根系无法进入该层       0-1
    dlt_sw_dep  最近一次的吸水变化量（负值表示提取）         mm
    =========== =========================================== ==========

    可以直接用数组构造，也可以用 `from_description()` 从土壤剖面描述构造::

        SoilLayers:
        -   Thickness: 150
            SW: 0.30
            LL15: 0.12
            DUL: 0.32
            BD: 1.35
            NO3N: 10.
            NH4N: 1.
            LL: 0.12
            KL: 0.08
            XF: 1.0
    """
    Thickness = LayerArray()
    Water = LayerArray()
    LL15mm = LayerArray()
    DULmm = LayerArray()
    BD = LayerArray()
    NO3N = LayerArray()
    NH4N = LayerArray()
    LL = LayerArray()
    KL = LayerArray()
    XF = LayerArray()
    dlt_sw_dep = LayerArray()

    _layer_vars = ["Thickness", "Water", "LL15mm", "DULmm", "BD", "NO3N", "NH4N",
                   "LL", "KL", "XF"]

    def __init__(self, **layers):
        HasTraits.__init__(self)

        missing = [name for name in self._layer_vars if name not in layers]
        if missing:
            msg = "Soil layer variable(s) missing: %s" % missing
            raise exc.ConfigurationError(msg)
        for name in self._layer_vars:
            setattr(self, name, layers.pop(name))
        if layers:
            msg = "Unknown soil layer variable(s): %s" % list(layers.keys())
            raise exc.ConfigurationError(msg)

        nlayers = len(self.Thickness)
        for name in self._layer_vars:
            if len(getattr(self, name)) != nlayers:
                msg = "Soil layer variable '%s' has %i values, expected %i." % \
                      (name, len(getattr(self, name)), nlayers)
                raise exc.ConfigurationError(msg)
        if nlayers == 0:
            raise exc.ConfigurationError("Soil profile should have at least one layer.")
        if np.any(self.Thickness <= 0.):
            raise exc.ConfigurationError("Soil layer thickness should be positive.")
        self.dlt_sw_dep = np.zeros(nlayers)

    @classmethod
    def from_description(cls, description):
        """由土壤剖面描述构造，SW/LL15/DUL 为体积含水率，会换算为 mm。"""
        sp = DotMap(description)
        layers = {name: [] for name in cls._layer_vars}
        try:
            for layer in sp.SoilLayers:
                thk = float(layer.Thickness)
                layers["Thickness"].append(thk)
                layers["Water"].append(layer.SW * thk)
                layers["LL15mm"].append(layer.LL15 * thk)
                layers["DULmm"].append(layer.DUL * thk)
                for name in ("BD", "NO3N", "NH4N", "LL", "KL", "XF"):
                    layers[name].append(layer[name])
        except (KeyError, AttributeError) as e:
            msg = "Incomplete soil profile description, missing: %s" % e
            raise exc.ConfigurationError(msg)
        return cls(**layers)

    @property
    def nlayers(self):
        return len(self.Thickness)

    @property
    def depth(self):
        """剖面总深度（mm）"""
        return float(np.sum(self.Thickness))

    def cumulative_depth(self):
        """每层底部的累计深度（mm）"""
        return np.cumsum(self.Thickness)

    def layer_index_of_depth(self, depth):
        """返回包含 depth 的土层索引，超出剖面时返回最后一层。"""
        cum = 0.
        for i, thk in enumerate(self.Thickness):
            cum += thk
            if cum >= depth:
                return i
        return self.nlayers - 1

    def proportion_through_layer(self, layer, depth):
        """返回土层 layer 位于 depth 以上部分的比例（0-1）。"""
        bottom = float(np.sum(self.Thickness[:layer + 1]))
        top = bottom - self.Thickness[layer]
        depth_within = max(0., min(bottom, depth) - top)
        return depth_within / self.Thickness[layer]

    def max_rootable_depth(self):
        """从表层向下直到第一个 XF 为零的土层之前的总厚度（mm）"""
        total = 0.
        for thk, xf in zip(self.Thickness, self.XF):
            if xf <= 0.:
                break
            total += thk
        return total

    def relative_water_content(self, layer, water=None):
        """(Water - LL15) / (DUL - LL15)，限定在 0-1 之间。

        water 为该层的含水量（mm），缺省时使用剖面当前的 Water，土壤仲裁器传入的快照可以与之不同。
        """
        if water is None:
            water = self.Water[layer]
        avail_range = self.DULmm[layer] - self.LL15mm[layer]
        if avail_range <= 0.:
            return 0.
        rwc = (water - self.LL15mm[layer]) / avail_range
        return min(1., max(0., rwc))

    @property
    def PAW(self):
        """每层相对作物吸水下限的有效水（mm）"""
        return np.maximum(0., self.Water - self.LL * self.Thickness)

    @property
    def PAWC(self):
        """每层相对作物吸水下限的有效持水量（mm）"""
        return np.maximum(0., self.DULmm - self.LL * self.Thickness)

    def set_water_uptake(self, dlt):
        """记录吸水变化量 dlt（mm，负值为提取）并更新含水量。"""
        dlt = np.asarray(dlt, dtype=float)
        if dlt.shape != self.Water.shape:
            msg = "Water uptake has %i values for a %i layer profile." % (len(dlt), self.nlayers)
            raise exc.ConfigurationError(msg)
        self.dlt_sw_dep = dlt
        self.Water = self.Water + dlt

    def subtract_solute(self, name, amounts):
        """从溶质 name（"NO3N" 或 "NH4N"）中减去每层的吸收量（kg N/ha）。"""
        if name not in ("NO3N", "NH4N"):
            msg = "Unknown solute '%s'." % name
            raise exc.ConfigurationError(msg)
        amounts = np.asarray(amounts, dtype=float)
        setattr(self, name, getattr(self, name) - amounts)


class Zone(HasTraits):
    """一个有名称的空间区域及其土壤"""
    name = Unicode()
    soil = Instance(SoilLayerProfile)

    def __init__(self, name, soil):
        HasTraits.__init__(self)
        self.name = name
        self.soil = soil

    def __repr__(self):
        return "Zone(%s, %i layers)" % (self.name, self.soil.nlayers)


class ZoneWaterAndN(object):
    """土壤仲裁器在某个区域中给出的水分/矿质氮数组（吸收量或可供量）"""

    def __init__(self, zone, Water=None, NO3N=None, NH4N=None):
        self.zone = zone
        nlayers = zone.soil.nlayers
        self.Water = np.zeros(nlayers) if Water is None else np.asarray(Water, dtype=float)
        self.NO3N = np.zeros(nlayers) if NO3N is None else np.asarray(NO3N, dtype=float)
        self.NH4N = np.zeros(nlayers) if NH4N is None else np.asarray(NH4N, dtype=float)

    @property
    def name(self):
        return self.zone.name

    def __repr__(self):
        return "ZoneWaterAndN(%s, Water=%.3f, NO3N=%.3f, NH4N=%.3f)" % \
               (self.name, self.Water.sum(), self.NO3N.sum(), self.NH4N.sum())
