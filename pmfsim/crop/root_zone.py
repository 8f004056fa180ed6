# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import numpy as np

from ..traitlets import HasTraits, Float, Instance, Unicode, List, LayerArray
from ..biomass import Biomass
from ..soil.soil_profile import SoilLayerProfile
from ..settings import settings
from ..util import limit, safe_divide
from .. import exceptions as exc


class RootZoneState(HasTraits):
    """一个区域中的根系状态。

    一株植物的根系可以生长在多个区域中（例如条带耕作的行间），每个区域对应一个
    `RootZoneState`，第一个区域是植株所在的区域。

    :param name: 区域名称
    :param soil: 区域的 `SoilLayerProfile`，只读引用
    :param params: 根系参数，使用其中的 RootFrontVelocity、MaximumRootDepth 和
        SpecificRootLength

    ====================== ============================================ ==========
    名称                    描述                                          单位
    ====================== ============================================ ==========
    Depth                  当前根深，生长期间单调不减                    mm
    LayerLive              每层的活根生物量                              g/m2
    LayerDead              每层的死根生物量                              g/m2
    StructuralNDemand      每层的结构性氮需求                            g/m2
    StorageNDemand         每层的储藏性氮需求                            g/m2
    PotentialDMAllocation  每层的暂定结构性 DM 分配                      g/m2
    Uptake                 每层的吸水量，负值表示提取                    mm
    NitUptake              每层的吸氮量，负值表示提取                    kg N/ha
    RWC                    每层的相对含水量                              0-1
    ====================== ============================================ ==========
    """
    name = Unicode()
    soil = Instance(SoilLayerProfile)
    params = Instance(HasTraits)
    Depth = Float(0.)
    LayerLive = List()
    LayerDead = List()
    StructuralNDemand = LayerArray()
    StorageNDemand = LayerArray()
    PotentialDMAllocation = LayerArray()
    Uptake = LayerArray()
    NitUptake = LayerArray()
    RWC = LayerArray()

    def __init__(self, name, soil, params):
        HasTraits.__init__(self)
        self.name = name
        self.soil = soil
        self.params = params
        nlayers = soil.nlayers
        self.LayerLive = [Biomass() for _ in range(nlayers)]
        self.LayerDead = [Biomass() for _ in range(nlayers)]
        self._reset_arrays()

    def _reset_arrays(self):
        nlayers = self.soil.nlayers
        self.StructuralNDemand = np.zeros(nlayers)
        self.StorageNDemand = np.zeros(nlayers)
        self.PotentialDMAllocation = np.zeros(nlayers)
        self.RWC = np.zeros(nlayers)
        self.Uptake = None
        self.NitUptake = None

    def initialise(self, depth, initial_dm, population, max_n_conc):
        """设置初始根深，并把种子生物量 initial_dm * population 平均分配到
        从表层到 depth 所在层的各层中。

        :param depth: 初始根深（mm）
        :param initial_dm: 每株的初始干物质（g/plant）
        :param population: 种植密度（plants/m2）
        :param max_n_conc: 初始氮浓度（g N/g DM）

        depth 大于 MaximumRootDepth 时按 MaximumRootDepth 处理。
        """
        depth = min(depth, self.params.MaximumRootDepth())
        self.Depth = depth
        initial_layers = 0
        accumulated_depth = 0.
        for thk in self.soil.Thickness:
            if accumulated_depth < depth:
                initial_layers += 1
            accumulated_depth += thk

        for layer in range(initial_layers):
            dm = initial_dm / initial_layers * population
            live = self.LayerLive[layer]
            live.StructuralWt = dm
            live.StructuralN = dm * max_n_conc

    def clear(self):
        """清除全部生物量和吸收量，根深归零。"""
        self.Depth = 0.
        for b in self.LayerLive:
            b.clear()
        for b in self.LayerDead:
            b.clear()
        self._reset_arrays()

    @property
    def live(self):
        total = Biomass()
        for b in self.LayerLive:
            total.add(b)
        return total

    @property
    def dead(self):
        total = Biomass()
        for b in self.LayerDead:
            total.add(b)
        return total

    @property
    def live_wt(self):
        return np.array([b.Wt for b in self.LayerLive])

    @property
    def live_n(self):
        return np.array([b.N for b in self.LayerLive])

    @property
    def depth_layer(self):
        """根锋所在的土层索引"""
        return self.soil.layer_index_of_depth(self.Depth)

    def grow_root_depth(self):
        """按根锋速度和 XF 推进根深，不超过最大根深和可扎根深度，且不回退。"""
        soil = self.soil
        root_layer = self.depth_layer
        velocity = self.params.RootFrontVelocity(layer=root_layer)
        new_depth = self.Depth + velocity * soil.XF[root_layer]

        max_depth = min(self.params.MaximumRootDepth(), soil.max_rootable_depth())
        self.Depth = max(self.Depth, min(new_depth, max_depth))

    def factor_root_depth(self, layer):
        """土层 layer 中位于根深以上部分的比例，用于吸氮计算。"""
        bottom = self.soil.cumulative_depth()[layer]
        thk = self.soil.Thickness[layer]
        return limit(0., 1., 1. - (bottom - self.Depth) / thk)

    def calculate_root_activity_values(self):
        """每层的根系活性权重（RAw），新生根生物量按该权重分配到各层。

        有活根的层按单位根长的吸水份额与吸氮份额之和计算，并乘以该层在根深以上的
        厚度；没有活根但位于根深以内的层沿用上一层的值，以便根系进入新的土层；
        表层没有活根时为零，根深以下的层为零。
        """
        soil = self.soil
        nlayers = soil.nlayers
        water = np.zeros(nlayers) if self.Uptake is None else -self.Uptake
        nitrogen = np.zeros(nlayers) if self.NitUptake is None else -self.NitUptake
        total_water = float(np.sum(water))
        total_nitrogen = float(np.sum(nitrogen))
        specific_root_length = self.params.SpecificRootLength()

        raw = np.zeros(nlayers)
        depth_layer = self.depth_layer
        for layer in range(depth_layer + 1):
            live_wt = self.LayerLive[layer].Wt
            if live_wt > 0.:
                share = safe_divide(water[layer], total_water) + \
                        safe_divide(nitrogen[layer], total_nitrogen)
                root_length = live_wt * specific_root_length
                raw[layer] = safe_divide(share, root_length) * soil.Thickness[layer] * \
                    soil.proportion_through_layer(layer, self.Depth)
                raw[layer] = max(raw[layer], 1e-20)
            elif layer > 0:
                raw[layer] = raw[layer - 1]
        return raw

    def set_potential_allocation(self, structural, total_raw):
        """按 RAw 把暂定的结构性 DM 分配 structural 分到各层。"""
        raw = self.calculate_root_activity_values()
        self.PotentialDMAllocation = structural * raw / total_raw

    def partition_root_mass(self, total_raw, allocated, raw=None):
        """按 RAw 把分配到的生物量 allocated（`Biomass`）加到各层的活根中。

        total_raw 是所有区域 RAw 的总和，raw 为本区域事先算好的 RAw（省略时重新计算）。
        返回每层新增的干物质（g/m2）。
        """
        nlayers = self.soil.nlayers
        if total_raw == 0.:
            if allocated.Wt > settings.BIOMASS_TOLERANCE:
                msg = "Error trying to partition root biomass in zone %s" % self.name
                raise exc.PartitionError(msg)
            return np.zeros(nlayers)

        if raw is None:
            raw = self.calculate_root_activity_values()
        added = np.zeros(nlayers)
        for layer in range(nlayers):
            fraction = raw[layer] / total_raw
            if fraction <= 0.:
                continue
            portion = allocated * fraction
            self.LayerLive[layer].add(portion)
            added[layer] = portion.Wt
        return added

    def calculate_nitrogen_demand(self, min_n_conc, max_n_conc, switch):
        """计算每层的结构性与储藏性氮需求，返回 (结构性, 储藏性) 总量（g/m2）。"""
        nlayers = self.soil.nlayers
        structural = np.zeros(nlayers)
        storage = np.zeros(nlayers)
        for layer, live in enumerate(self.LayerLive):
            potential = self.PotentialDMAllocation[layer]
            structural[layer] = potential * min_n_conc * switch
            deficit = max(0., max_n_conc * (live.Wt + potential) - (live.N + structural[layer]))
            storage[layer] = max(0., deficit - structural[layer]) * switch
        self.StructuralNDemand = structural
        self.StorageNDemand = storage
        return float(np.sum(structural)), float(np.sum(storage))

    def length_density(self):
        """每层的根长密度（mm/mm3）"""
        specific_root_length = self.params.SpecificRootLength()
        return self.live_wt * specific_root_length * 1000. / 1000000. / self.soil.Thickness

    def water_tension_factor(self, total_live_wt):
        """按根生物量加权的根区水分张力因子（0-1）"""
        if total_live_wt <= 0.:
            return 0.
        paw = self.soil.PAW
        pawc = self.soil.PAWC
        factor = 0.
        for layer, live in enumerate(self.LayerLive):
            ratio = limit(0., 1., safe_divide(2. * paw[layer], pawc[layer]))
            factor += live.Wt / total_live_wt * ratio
        return factor

    def __repr__(self):
        return "RootZoneState(%s, depth=%.1f mm, live=%.4g g/m2)" % \
               (self.name, self.Depth, self.live.Wt)
