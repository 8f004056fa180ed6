# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
from ..traitlets import Float, Instance
from ..decorators import prepare_rates, prepare_states
from ..base import StatesTemplate, RatesTemplate, ParamTemplate, Organ
from ..functions import FunctionTrait
from ..biomass import Biomass, BiomassPoolType, BiomassSupplyType, OrganBiomassRemovalType
from .biomass_removal import BiomassRemoval


class GenericOrgan(Organ):
    """只有一个活库和一个死库的器官，例如茎。

    **模拟参数**

    ======================= =============================================== ==========
    名称                     描述                                             单位
    ======================= =============================================== ==========
    DMDemandFunction        结构性 DM 需求                                   g/m2/d
    InitialDM               每株的初始生物量                                 g/plant
    SenescenceRate          活生物量每天转为死生物量的比例                   /d
    DetachmentRate          可选，死生物量每天脱落进入残体库的比例           /d
    StructuralFraction      可选，结构性组织占新生物量的目标比例             0-1
    MaximumNConc            最高氮浓度                                       g/g
    MinimumNConc            最低氮浓度                                       g/g
    NitrogenDemandSwitch    可选，氮需求开关                                 0-1
    DMReallocationFactor    可选，衰老储藏物质中可再分配的比例               0-1
    DMRetranslocationFactor 可选，储藏物质中可转运的比例                     /d
    NReallocationFactor     可选，衰老储藏氮中可再分配的比例                 0-1
    NRetranslocationFactor  可选，可动用氮中可转运的比例                     /d
    DMConversionEfficiency  同化物转化为生物量的效率                         g/g
    CarbonConcentration     生物量的含碳量                                   g/g
    MaintenanceRespiration  代谢性和储藏性生物量每天的维持呼吸比例           /d
    ======================= =============================================== ==========

    子类需要定义状态和速率变量，并实现 `_update_states()` 和 `_update_rates()`。
    """
    name = "GenericOrgan"

    Live = Instance(Biomass)
    Dead = Instance(Biomass)
    _potential = Instance(BiomassPoolType)

    _dm_reallocation = 0.
    _dm_retranslocation = 0.
    _n_reallocation = 0.
    _n_retranslocation = 0.

    class Parameters(ParamTemplate):
        DMDemandFunction = FunctionTrait()
        InitialDM = FunctionTrait()
        SenescenceRate = FunctionTrait()
        DetachmentRate = FunctionTrait(optional=True)
        StructuralFraction = FunctionTrait(optional=True)
        MaximumNConc = FunctionTrait()
        MinimumNConc = FunctionTrait()
        NitrogenDemandSwitch = FunctionTrait(optional=True)
        DMReallocationFactor = FunctionTrait(optional=True)
        DMRetranslocationFactor = FunctionTrait(optional=True)
        NReallocationFactor = FunctionTrait(optional=True)
        NRetranslocationFactor = FunctionTrait(optional=True)
        DMConversionEfficiency = FunctionTrait()
        CarbonConcentration = FunctionTrait()
        MaintenanceRespiration = FunctionTrait()

    def initialize(self, day, kiosk, parvalues, context):
        self._initialize_common(parvalues, context)
        self.biomass_removal = BiomassRemoval(kiosk, context, self.name,
                                              parvalues.get("BiomassRemovalDefaults"))
        self.Live = Biomass()
        self.Dead = Biomass()
        self._potential = BiomassPoolType()
        self._initialize_variables(kiosk)

    def _initialize_variables(self, kiosk):
        raise NotImplementedError

    @property
    def live(self):
        return self.Live

    @property
    def dead(self):
        return self.Dead

    # 生命周期
    def on_sow(self, day, population, depth):
        dm = self.params.InitialDM() * population
        self.Live.StructuralWt = dm
        self.Live.StructuralN = dm * self.params.MaximumNConc()
        self._publish()

    def on_day_start(self, day):
        Organ.on_day_start(self, day)
        self._potential = BiomassPoolType()

    def on_actual_growth(self, day):
        if self.plant.is_alive:
            p = self.params
            senescing = self.Live * p.SenescenceRate()
            self.Live.subtract(senescing)
            self.Dead.add(senescing)
            self.Senesced.add(senescing)

            if p.DetachmentRate is not None:
                detachment = OrganBiomassRemovalType(FractionDeadToResidue=p.DetachmentRate())
                self.biomass_removal.remove_biomass(None, detachment, self.Live, self.Dead,
                                                    self.Removed, self.Detached)

            mr = p.MaintenanceRespiration()
            self.MaintenanceRespiration = (self.Live.MetabolicWt + self.Live.StorageWt) * mr
            self.Live.MetabolicWt *= (1. - mr)
            self.Live.StorageWt *= (1. - mr)
        self._publish()

    def on_plant_end(self, day):
        total = self.Live + self.Dead
        if total.Wt > 0.:
            self.Detached.add(total)
            self.context.residues.add(total.Wt * 10., total.N * 10., 0., self.plant.crop_type,
                                      self.name)
        self.Live.clear()
        self.Dead.clear()
        self._publish()

    # 供给与需求
    def _do_supply_calculations(self):
        live = self.Live
        labile_n = max(0., live.StorageN - live.StorageWt * self.params.MinimumNConc())
        supplies = self._remobilisation_supplies(live.StorageWt, live.StorageN, labile_n)
        self._dm_reallocation, self._dm_retranslocation = supplies[0:2]
        self._n_reallocation, self._n_retranslocation = supplies[2:4]

    def calculate_dry_matter_supply(self):
        self.DMSupply = BiomassSupplyType(Retranslocation=self._dm_retranslocation,
                                          Reallocation=self._dm_reallocation)
        return self.DMSupply

    def calculate_nitrogen_supply(self):
        self.NSupply = BiomassSupplyType(Retranslocation=self._n_retranslocation,
                                         Reallocation=self._n_reallocation)
        return self.NSupply

    def calculate_dry_matter_demand(self):
        structural = storage = 0.
        if self.plant.is_emerged:
            structural = self._demanded_dm_structural()
            storage = self._demanded_dm_storage(self.Live.StructuralWt, self.Live.StorageWt,
                                                structural)
        self.DMDemand = BiomassPoolType(Structural=structural, Storage=storage)
        return self.DMDemand

    def calculate_nitrogen_demand(self):
        p = self.params
        switch = 1.0 if p.NitrogenDemandSwitch is None else p.NitrogenDemandSwitch()
        potential = self._potential
        structural = potential.Structural * p.MinimumNConc() * switch
        deficit = max(0., p.MaximumNConc() * (self.Live.Wt + potential.Total) -
                      (self.Live.N + structural))
        storage = max(0., deficit - structural) * switch
        self.NDemand = BiomassPoolType(Structural=structural, Storage=storage)
        return self.NDemand

    # 分配
    def set_dry_matter_potential_allocation(self, dry_matter):
        for pool in ("Structural", "Metabolic", "Storage"):
            self._check_potential_allocation(getattr(self.DMDemand, pool),
                                             getattr(dry_matter, pool), pool)
        self._potential = BiomassPoolType(*dry_matter)

    def set_dry_matter_allocation(self, dry_matter):
        for pool, value in zip(dry_matter._fields, dry_matter):
            self._check_negative(value, "DM %s allocation" % pool)
        self._check_supply_use(dry_matter.Retranslocation, self.DMSupply.Retranslocation,
                               "DM retranslocation")
        self._check_supply_use(dry_matter.Reallocation, self.DMSupply.Reallocation,
                               "DM reallocation")

        self._remove_from_storage([self.Live], dry_matter.Reallocation + dry_matter.Retranslocation,
                                  "StorageWt", "DM remobilisation")

        efficiency = self.params.DMConversionEfficiency()
        allocated = Biomass(StructuralWt=dry_matter.Structural * efficiency,
                            MetabolicWt=dry_matter.Metabolic * efficiency,
                            StorageWt=dry_matter.Storage * efficiency)
        self.Allocated.add(allocated)
        self.Live.add(allocated)
        self.GrowthRespiration += allocated.Wt * self._growth_respiration_factor()

    def set_nitrogen_allocation(self, nitrogen):
        for pool, value in zip(nitrogen._fields, nitrogen):
            self._check_negative(value, "N %s allocation" % pool)
        self._check_supply_use(nitrogen.Retranslocation, self.NSupply.Retranslocation,
                               "N retranslocation")
        self._check_supply_use(nitrogen.Reallocation, self.NSupply.Reallocation, "N reallocation")
        allocated_n = nitrogen.Structural + nitrogen.Metabolic + nitrogen.Storage
        self._check_supply_use(allocated_n, self.NDemand.Total, "N allocation (demand)")

        self._remove_from_storage([self.Live], nitrogen.Reallocation + nitrogen.Retranslocation,
                                  "StorageN", "N remobilisation")

        allocated = Biomass(StructuralN=nitrogen.Structural, MetabolicN=nitrogen.Metabolic,
                            StorageN=nitrogen.Storage)
        self.Allocated.add(allocated)
        self.Live.add(allocated)

    def _remove_biomass(self, event_name, removal):
        self.biomass_removal.remove_biomass(event_name, removal, self.Live, self.Dead,
                                            self.Removed, self.Detached)


class Stem(GenericOrgan):
    """茎

    **状态变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    WST      活茎干重                             Y     g/m2
    DWST     死茎干重                             Y     g/m2
    NST      活茎氮量                             Y     g/m2
    =======  ================================== ==== ============

    **速率变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    GRST     生长呼吸                             N     g CO2/m2
    MRST     维持呼吸                             N     g/m2
    =======  ================================== ==== ============
    """
    name = "Stem"

    class StateVariables(StatesTemplate):
        WST = Float()
        DWST = Float()
        NST = Float()

    class RateVariables(RatesTemplate):
        GRST = Float()
        MRST = Float()

    def _initialize_variables(self, kiosk):
        self.states = self.StateVariables(kiosk, publish=["WST", "DWST", "NST"],
                                          WST=0., DWST=0., NST=0.)
        self.rates = self.RateVariables(kiosk)

    @prepare_states
    def _update_states(self):
        self.states.WST = self.Live.Wt
        self.states.DWST = self.Dead.Wt
        self.states.NST = self.Live.N

    @prepare_rates
    def _update_rates(self):
        self.rates.GRST = self.GrowthRespiration
        self.rates.MRST = self.MaintenanceRespiration
