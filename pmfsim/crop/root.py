# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import numpy as np

from ..traitlets import Float, Instance, List
from ..decorators import prepare_rates, prepare_states
from ..base import StatesTemplate, RatesTemplate, ParamTemplate, Organ
from ..functions import FunctionTrait
from ..biomass import Biomass, BiomassPoolType, BiomassSupplyType, OrganBiomassRemovalType
from ..settings import settings
from .. import exceptions as exc
from .biomass_removal import BiomassRemoval
from .root_zone import RootZoneState


class Root(Organ):
    """分层、多区域的根系器官。

    根系在植株所在的区域（`PlantZone`）以及 `ZoneNamesToGrowRootsIn` 中列出的其他
    区域中生长。每个区域中的根生物量按土层保存，新生根生物量按根系活性权重（RAw）
    分配到各层。根系从土壤中吸收水分和矿质氮，吸收能力由土壤仲裁器根据
    `calculate_water_supply()` 和 `calculate_nitrogen_supply(zone)` 的结果决定。

    **模拟参数**

    ======================= =============================================== ==========
    名称                     描述                                             单位
    ======================= =============================================== ==========
    DMDemandFunction        结构性 DM 需求                                   g/m2/d
    KNO3                    NO3 吸收速率常数，可按土层给出                   /ppm/d
    KNH4                    NH4 吸收速率常数，可按土层给出                   /ppm/d
    NUptakeSWFactor         土壤水分对吸氮的影响，驱动变量 RWC               0-1
    InitialDM               每株的种子根生物量                               g/plant
    SpecificRootLength      比根长                                           m/g
    NitrogenDemandSwitch    可选，氮需求开关                                 0-1
    DMReallocationFactor    可选，衰老储藏物质中可再分配的比例               0-1
    DMRetranslocationFactor 可选，储藏物质中可转运的比例                     /d
    NReallocationFactor     可选，衰老储藏氮中可再分配的比例                 0-1
    NRetranslocationFactor  可选，可动用氮中可转运的比例                     /d
    SenescenceRate          活根每天的衰老比例                               /d
    RootFrontVelocity       根锋推进速度，可按土层给出                       mm/d
    StructuralFraction      可选，结构性组织占新生物量的目标比例             0-1
    MaximumNConc            最高氮浓度                                       g/g
    MinimumNConc            最低氮浓度                                       g/g
    MaxDailyNUptake         每天每个区域的最大吸氮量（NO3+NH4）              kg N/ha
    KLModifier              KL 修正系数，可按土层给出                        0-1
    MaximumRootDepth        最大根深                                         mm
    DMConversionEfficiency  同化物转化为生物量的效率                         g/g
    CarbonConcentration     生物量的含碳量                                   g/g
    MaintenanceRespiration  代谢性和储藏性生物量每天的维持呼吸比例           /d
    ======================= =============================================== ==========

    此外，参数字典中可以给出 ``ZoneNamesToGrowRootsIn``、``ZoneRootDepths`` 和
    ``ZoneInitialDM`` 三个等长列表，以及 ``BiomassRemovalDefaults``。

    **状态变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    RD       植株所在区域的根深                   Y     mm
    WRT      活根干重（所有区域）                 Y     g/m2
    DWRT     死根干重（所有区域）                 Y     g/m2
    NRT      活根氮量（所有区域）                 Y     g/m2
    =======  ================================== ==== ============

    **速率变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    WUPT     当天吸水量                           Y     mm
    NUPT     当天吸氮量                           Y     kg N/ha
    GRRT     生长呼吸                             Y     g CO2/m2
    MRRT     维持呼吸                             Y     g/m2
    =======  ================================== ==== ============
    """
    name = "Root"

    PlantZone = Instance(RootZoneState)
    Zones = List()

    _live = Instance(Biomass)
    _dead = Instance(Biomass)
    _needs_recalculation = True

    _dm_reallocation = 0.
    _dm_retranslocation = 0.
    _n_reallocation = 0.
    _n_retranslocation = 0.
    _n_uptake = 0.

    class Parameters(ParamTemplate):
        DMDemandFunction = FunctionTrait()
        KNO3 = FunctionTrait()
        KNH4 = FunctionTrait()
        NUptakeSWFactor = FunctionTrait()
        InitialDM = FunctionTrait()
        SpecificRootLength = FunctionTrait()
        NitrogenDemandSwitch = FunctionTrait(optional=True)
        NRetranslocationFactor = FunctionTrait(optional=True)
        NReallocationFactor = FunctionTrait(optional=True)
        DMRetranslocationFactor = FunctionTrait(optional=True)
        DMReallocationFactor = FunctionTrait(optional=True)
        SenescenceRate = FunctionTrait()
        RootFrontVelocity = FunctionTrait()
        StructuralFraction = FunctionTrait(optional=True)
        MaximumNConc = FunctionTrait()
        MinimumNConc = FunctionTrait()
        MaxDailyNUptake = FunctionTrait()
        KLModifier = FunctionTrait()
        MaximumRootDepth = FunctionTrait()
        DMConversionEfficiency = FunctionTrait()
        CarbonConcentration = FunctionTrait()
        MaintenanceRespiration = FunctionTrait()

    class StateVariables(StatesTemplate):
        RD = Float()
        WRT = Float()
        DWRT = Float()
        NRT = Float()

    class RateVariables(RatesTemplate):
        WUPT = Float()
        NUPT = Float()
        GRRT = Float()
        MRRT = Float()

    def initialize(self, day, kiosk, parvalues, context):
        """
        :param day: 模拟开始日期
        :param kiosk: 本次模拟的 VariableKiosk
        :param parvalues: 根系参数字典
        :param context: `SimulationContext`
        """
        self._initialize_common(parvalues, context)
        self.biomass_removal = BiomassRemoval(kiosk, context, self.name,
                                              parvalues.get("BiomassRemovalDefaults"))

        self._zone_names = list(parvalues.get("ZoneNamesToGrowRootsIn", []))
        self._zone_depths = list(parvalues.get("ZoneRootDepths", []))
        self._zone_initial_dm = list(parvalues.get("ZoneInitialDM", []))
        if not len(self._zone_names) == len(self._zone_depths) == len(self._zone_initial_dm):
            msg = ("The root zone variables (ZoneRootDepths, ZoneNamesToGrowRootsIn, " +
                   "ZoneInitialDM) need to have the same number of values")
            raise exc.ConfigurationError(msg)

        self.Zones = []
        self._live = Biomass()
        self._dead = Biomass()

        self.states = self.StateVariables(kiosk, publish=["RD", "WRT", "DWRT", "NRT"],
                                          RD=0., WRT=0., DWRT=0., NRT=0.)
        self.rates = self.RateVariables(kiosk, publish=["WUPT", "NUPT", "GRRT", "MRRT"])

    # 生命周期
    def on_simulation_start(self, day):
        plant_zone = self.context.find_zone(self.plant.zone_name)
        for name in self._zone_names:
            self.context.find_zone(name)
        self.PlantZone = RootZoneState(plant_zone.name, plant_zone.soil, self.params)
        self.Zones = []
        self._needs_recalculation = True

    def on_sow(self, day, population, depth):
        p = self.params
        self.PlantZone.initialise(depth, p.InitialDM(), population, p.MaximumNConc())
        self._initialise_zones(population)
        self._needs_recalculation = True
        self._publish()

    def _initialise_zones(self, population):
        names = [self.PlantZone.name] + self._zone_names
        if len(set(names)) != len(names):
            msg = "Duplicate zone names for root growth: %s" % names
            raise exc.ConfigurationError(msg)

        self.Zones = [self.PlantZone]
        max_n_conc = self.params.MaximumNConc()
        for name, depth, initial_dm in zip(self._zone_names, self._zone_depths,
                                           self._zone_initial_dm):
            zone = self.context.find_zone(name)
            zone_state = RootZoneState(name, zone.soil, self.params)
            zone_state.initialise(depth, initial_dm, population, max_n_conc)
            self.Zones.append(zone_state)
            self.logger.debug("Roots initialised in zone %s at depth %.1f mm" % (name, depth))

    def on_day_start(self, day):
        Organ.on_day_start(self, day)
        if self.plant.is_alive:
            self._n_uptake = 0.

    def on_actual_growth(self, day):
        if self.plant.is_alive:
            for zone_state in self.Zones:
                zone_state.grow_root_depth()

            senescence = OrganBiomassRemovalType(FractionLiveToResidue=self.params.SenescenceRate())
            detaching, _ = self.biomass_removal.remove_biomass_to_soil(
                None, senescence, self._layers("LayerLive"), self._layers("LayerDead"),
                self.Removed, self.Detached)
            self.Senesced.add(detaching)

            mr = self.params.MaintenanceRespiration()
            self.MaintenanceRespiration = 0.
            for live in self._layers("LayerLive"):
                self.MaintenanceRespiration += (live.MetabolicWt + live.StorageWt) * mr
                live.MetabolicWt *= (1. - mr)
                live.StorageWt *= (1. - mr)
                live.check_non_negative("live roots of %s after respiration" % self.name)
            self._needs_recalculation = True
        self._publish()

    def on_plant_end(self, day):
        total = self.live + self.dead
        if total.Wt > 0.:
            self.Detached.add(self.live)
            self.Detached.add(self.dead)
            self.context.residues.add(total.Wt * 10., total.N * 10., 0., self.plant.crop_type,
                                      self.name)
            self.logger.info("Sending %.2f g/m2 root biomass to surface organic matter on %s" %
                             (total.Wt, day))
        self._clear()
        self._publish()

    def _clear(self):
        if self.PlantZone is not None:
            self.PlantZone.clear()
        self.Zones = []
        self._live.clear()
        self._dead.clear()
        self._needs_recalculation = True

    # 汇总
    def _layers(self, attr):
        pools = []
        for zone_state in self.Zones:
            pools.extend(getattr(zone_state, attr))
        return pools

    def _recalculate_live_dead(self):
        if self._needs_recalculation:
            self._needs_recalculation = False
            self._live.clear()
            self._dead.clear()
            for b in self._layers("LayerLive"):
                self._live.add(b)
            for b in self._layers("LayerDead"):
                self._dead.add(b)

    @property
    def live(self):
        """所有区域的活根生物量，只读"""
        self._recalculate_live_dead()
        return self._live

    @property
    def dead(self):
        """所有区域的死根生物量，只读"""
        self._recalculate_live_dead()
        return self._dead

    @property
    def Depth(self):
        return 0. if self.PlantZone is None else self.PlantZone.Depth

    @property
    def LengthDensity(self):
        if self.PlantZone is None:
            return np.zeros(0)
        return self.PlantZone.length_density()

    @property
    def WaterUptake(self):
        """所有区域当天的吸水量（mm）"""
        uptake = 0.
        for zone_state in self.Zones:
            if zone_state.Uptake is not None:
                uptake += float(np.sum(zone_state.Uptake))
        return -uptake

    @property
    def NUptake(self):
        """所有区域当天的吸氮量（kg N/ha）"""
        uptake = 0.
        for zone_state in self.Zones:
            if zone_state.NitUptake is not None:
                uptake += float(np.sum(zone_state.NitUptake))
        return -uptake

    @property
    def WaterTensionFactor(self):
        live_wt = self.live.Wt
        return sum(z.water_tension_factor(live_wt) for z in self.Zones)

    def _find_zone_state(self, name):
        for zone_state in self.Zones:
            if zone_state.name == name:
                return zone_state
        return None

    def _total_raw(self):
        return sum(float(np.sum(z.calculate_root_activity_values())) for z in self.Zones)

    # 供给
    def _available_supplies(self):
        live_layers = self._layers("LayerLive")
        min_n_conc = self.params.MinimumNConc()
        storage_wt = sum(b.StorageWt for b in live_layers)
        storage_n = sum(b.StorageN for b in live_layers)
        labile_n = sum(max(0., b.StorageN - b.StorageWt * min_n_conc) for b in live_layers)
        return self._remobilisation_supplies(storage_wt, storage_n, labile_n)

    def _do_supply_calculations(self):
        supplies = self._available_supplies()
        self._dm_reallocation, self._dm_retranslocation = supplies[0:2]
        self._n_reallocation, self._n_retranslocation = supplies[2:4]

    def available_dm_reallocation(self):
        """当天衰老的储藏物质中可再分配的 DM（g/m2），未给出 DMReallocationFactor 时为 0。"""
        return self._available_supplies()[0]

    def available_dm_retranslocation(self):
        """剩余储藏物质中可转运的 DM（g/m2），未给出 DMRetranslocationFactor 时为 0。"""
        return self._available_supplies()[1]

    def available_n_reallocation(self):
        return self._available_supplies()[2]

    def available_n_retranslocation(self):
        """高于最低氮浓度的储藏氮中可转运的部分（g/m2）。"""
        return self._available_supplies()[3]

    def calculate_dry_matter_supply(self):
        self.DMSupply = BiomassSupplyType(Fixation=0., Retranslocation=self._dm_retranslocation,
                                          Reallocation=self._dm_reallocation)
        return self.DMSupply

    def calculate_nitrogen_supply(self, zone=None):
        """不带参数时返回根系的氮供给 `BiomassSupplyType`（g/m2），其中 Uptake 为当天
        已经从土壤中吸收的氮。

        给出 zone（`ZoneWaterAndN`）时，返回该区域每层可吸收的 (NO3, NH4)（kg N/ha），
        根系不在该区域中时返回 None。
        """
        if zone is None:
            self.NSupply = BiomassSupplyType(Fixation=0.,
                                             Retranslocation=self._n_retranslocation,
                                             Reallocation=self._n_reallocation,
                                             Uptake=self._n_uptake)
            return self.NSupply
        return self._calculate_soil_nitrogen_supply(zone)

    def _calculate_soil_nitrogen_supply(self, zone):
        zone_state = self._find_zone_state(zone.name)
        if zone_state is None:
            return None

        p = self.params
        soil = zone_state.soil
        nlayers = soil.nlayers
        no3_supply = np.zeros(nlayers)
        nh4_supply = np.zeros(nlayers)
        max_uptake = p.MaxDailyNUptake()
        uptake = 0.
        for layer in range(nlayers):
            if zone_state.LayerLive[layer].Wt <= 0.:
                continue
            factor_root_depth = zone_state.factor_root_depth(layer)
            rwc = soil.relative_water_content(layer, zone.Water[layer])
            zone_state.RWC[layer] = rwc
            sw_factor = p.NUptakeSWFactor(layer=layer, RWC=rwc)
            soil_mass = soil.BD[layer] * soil.Thickness[layer]

            kno3 = p.KNO3(layer=layer)
            no3_ppm = zone.NO3N[layer] * (100. / soil_mass)
            no3_supply[layer] = min(zone.NO3N[layer] * kno3 * no3_ppm * sw_factor * factor_root_depth,
                                    max(0., max_uptake - uptake))
            uptake += no3_supply[layer]

            knh4 = p.KNH4(layer=layer)
            nh4_ppm = zone.NH4N[layer] * (100. / soil_mass)
            nh4_supply[layer] = min(zone.NH4N[layer] * knh4 * nh4_ppm * sw_factor * factor_root_depth,
                                    max(0., max_uptake - uptake))
            uptake += nh4_supply[layer]
        return no3_supply, nh4_supply

    def calculate_water_supply(self, zone):
        """返回区域 zone（`ZoneWaterAndN`）中每层的可吸水量（mm），根系不在该区域中时返回 None。"""
        zone_state = self._find_zone_state(zone.name)
        if zone_state is None:
            return None

        soil = zone_state.soil
        supply = np.zeros(soil.nlayers)
        for layer in range(zone_state.depth_layer + 1):
            available = zone.Water[layer] - soil.LL[layer] * soil.Thickness[layer]
            supply[layer] = max(0., soil.KL[layer] * self.params.KLModifier(layer=layer) * available *
                                soil.proportion_through_layer(layer, zone_state.Depth))
        return supply

    def do_water_uptake(self, amounts, zone_name):
        """在区域 zone_name 中吸收每层 amounts（mm）的水分。"""
        zone_state = self._find_zone_state(zone_name)
        if zone_state is None:
            msg = "Cannot find a zone called %s" % zone_name
            raise exc.ConfigurationError(msg)
        zone_state.Uptake = -np.asarray(amounts, dtype=float)
        zone_state.soil.set_water_uptake(zone_state.Uptake)

    def do_nitrogen_uptake(self, zones):
        """执行土壤仲裁器给出的每个区域的吸氮量（`ZoneWaterAndN` 列表，kg N/ha）。"""
        taken = 0.
        for zone in zones:
            zone_state = self._find_zone_state(zone.name)
            if zone_state is None:
                continue
            zone_state.soil.subtract_solute("NO3N", zone.NO3N)
            zone_state.soil.subtract_solute("NH4N", zone.NH4N)
            zone_state.NitUptake = -(zone.NO3N + zone.NH4N)
            taken += float(np.sum(zone.NO3N) + np.sum(zone.NH4N))
        self._n_uptake = taken / 10.

    # 需求
    def calculate_dry_matter_demand(self):
        structural = storage = 0.
        if self.PlantZone is not None and self.plant.sowing_depth < self.PlantZone.Depth:
            structural = self._demanded_dm_structural()
            live = self.live
            storage = self._demanded_dm_storage(live.StructuralWt, live.StorageWt, structural)
        self.DMDemand = BiomassPoolType(Structural=structural, Storage=storage)
        return self.DMDemand

    def calculate_nitrogen_demand(self):
        p = self.params
        switch = 1.0 if p.NitrogenDemandSwitch is None else p.NitrogenDemandSwitch()
        min_n_conc = p.MinimumNConc()
        max_n_conc = p.MaximumNConc()
        structural = storage = 0.
        for zone_state in self.Zones:
            zs, zst = zone_state.calculate_nitrogen_demand(min_n_conc, max_n_conc, switch)
            structural += zs
            storage += zst
        self.NDemand = BiomassPoolType(Structural=structural, Storage=storage)
        return self.NDemand

    # 分配
    def set_dry_matter_potential_allocation(self, dry_matter):
        if self.PlantZone.Uptake is None:
            msg = ("No water and N uptakes supplied to root. Is the soil arbitrator " +
                   "included in the simulation?")
            raise exc.ConfigurationError(msg)

        if self.PlantZone.Depth <= 0.:
            return

        for pool in ("Structural", "Metabolic", "Storage"):
            self._check_potential_allocation(getattr(self.DMDemand, pool),
                                             getattr(dry_matter, pool), pool)

        total_raw = self._total_raw()
        if total_raw == 0. and dry_matter.Structural > 0.:
            msg = "Error trying to partition potential root biomass in %s" % self.name
            raise exc.PartitionError(msg)

        if total_raw > 0.:
            for zone_state in self.Zones:
                zone_state.set_potential_allocation(dry_matter.Structural, total_raw)
            self._needs_recalculation = True

    def set_dry_matter_allocation(self, dry_matter):
        for pool, value in zip(dry_matter._fields, dry_matter):
            self._check_negative(value, "DM %s allocation" % pool)
        self._check_supply_use(dry_matter.Retranslocation, self.DMSupply.Retranslocation,
                               "DM retranslocation")
        self._check_supply_use(dry_matter.Reallocation, self.DMSupply.Reallocation,
                               "DM reallocation")

        efficiency = self.params.DMConversionEfficiency()
        allocated = Biomass(StructuralWt=dry_matter.Structural * efficiency,
                            MetabolicWt=dry_matter.Metabolic * efficiency,
                            StorageWt=dry_matter.Storage * efficiency)
        raws = [z.calculate_root_activity_values() for z in self.Zones]
        total_raw = sum(float(np.sum(raw)) for raw in raws)
        if total_raw == 0. and allocated.Wt > settings.BIOMASS_TOLERANCE:
            msg = "Error trying to partition root biomass in %s" % self.name
            raise exc.PartitionError(msg)

        live_layers = self._layers("LayerLive")
        self._remove_from_storage(live_layers, dry_matter.Reallocation, "StorageWt", "DM reallocation")
        self._remove_from_storage(live_layers, dry_matter.Retranslocation, "StorageWt",
                                  "DM retranslocation")
        self.Allocated.add(allocated)
        self.GrowthRespiration += allocated.Wt * self._growth_respiration_factor()

        distributed = 0.
        for zone_state, raw in zip(self.Zones, raws):
            distributed += float(np.sum(zone_state.partition_root_mass(total_raw, allocated, raw)))
        self._check_distributed(distributed, allocated.Wt, "DM")
        self._needs_recalculation = True

    def set_nitrogen_allocation(self, nitrogen):
        for pool, value in zip(nitrogen._fields, nitrogen):
            self._check_negative(value, "N %s allocation" % pool)
        self._check_supply_use(nitrogen.Retranslocation, self.NSupply.Retranslocation,
                               "N retranslocation")
        self._check_supply_use(nitrogen.Reallocation, self.NSupply.Reallocation, "N reallocation")
        self._check_supply_use(nitrogen.Uptake, self.NSupply.Uptake, "N uptake")

        total_structural_demand = sum(float(np.sum(z.StructuralNDemand)) for z in self.Zones)
        total_storage_demand = sum(float(np.sum(z.StorageNDemand)) for z in self.Zones)
        allocated_n = nitrogen.Structural + nitrogen.Metabolic + nitrogen.Storage
        self._check_supply_use(allocated_n, total_structural_demand + total_storage_demand,
                               "N allocation to roots (demand)")

        live_layers = self._layers("LayerLive")
        self._remove_from_storage(live_layers, nitrogen.Reallocation, "StorageN", "N reallocation")
        self._remove_from_storage(live_layers, nitrogen.Retranslocation, "StorageN",
                                  "N retranslocation")

        self.Allocated.StructuralN += nitrogen.Structural
        self.Allocated.MetabolicN += nitrogen.Metabolic
        self.Allocated.StorageN += nitrogen.Storage

        distributed = 0.
        for zone_state in self.Zones:
            for layer, live in enumerate(zone_state.LayerLive):
                if total_structural_demand > 0.:
                    amount = nitrogen.Structural * zone_state.StructuralNDemand[layer] / \
                             total_structural_demand
                    live.StructuralN += amount
                    distributed += amount
                if total_storage_demand > 0.:
                    amount = nitrogen.Storage * zone_state.StorageNDemand[layer] / total_storage_demand
                    live.StorageN += amount
                    distributed += amount
        self._needs_recalculation = True
        self._check_distributed(distributed, allocated_n, "N", error=exc.NAllocationMismatchError)

    # 移除
    def _remove_biomass(self, event_name, removal):
        self.biomass_removal.remove_biomass_to_soil(event_name, removal, self._layers("LayerLive"),
                                                    self._layers("LayerDead"), self.Removed,
                                                    self.Detached)
        self._needs_recalculation = True

    @prepare_states
    def _update_states(self):
        s = self.states
        live = self.live
        s.RD = self.Depth
        s.WRT = live.Wt
        s.DWRT = self.dead.Wt
        s.NRT = live.N

    @prepare_rates
    def _update_rates(self):
        r = self.rates
        r.WUPT = self.WaterUptake
        r.NUPT = self.NUptake
        r.GRRT = self.GrowthRespiration
        r.MRRT = self.MaintenanceRespiration
