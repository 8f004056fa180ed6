# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
from math import exp

from ..traitlets import HasTraits, Float, Int, Instance, List
from ..decorators import prepare_rates, prepare_states
from ..base import StatesTemplate, RatesTemplate, ParamTemplate, Organ
from ..functions import FunctionTrait
from ..biomass import Biomass, BiomassPoolType, BiomassSupplyType, OrganBiomassRemovalType
from ..settings import settings
from .. import exceptions as exc
from .biomass_removal import BiomassRemoval


class LeafCohort(HasTraits):
    """同一天出现的一组叶片"""
    Age = Int(0)
    Live = Instance(Biomass)
    Dead = Instance(Biomass)

    def __init__(self, live=None):
        HasTraits.__init__(self)
        self.Live = live if live is not None else Biomass()
        self.Dead = Biomass()

    def is_expanding(self, expansion_duration):
        return self.Age < expansion_duration

    def is_senescing(self, lifespan):
        """当天结束时达到寿命的叶龄组"""
        return self.Live.Wt > 0. and self.Age + 1 >= lifespan

    def __repr__(self):
        return "LeafCohort(age=%i, live=%.4g, dead=%.4g)" % (self.Age, self.Live.Wt, self.Dead.Wt)


class Leaf(Organ):
    """按叶龄组（cohort）管理的叶片。

    叶片通过光能利用效率固定干物质::

        Fixation = RUE * IRRAD * (1 - exp(-k * LAI)) * water_stress

    新生物量平均分配给仍在扩展的叶龄组；叶龄组达到寿命时全部衰老，衰老当天其储藏
    物质可以再分配，转运按叶龄组从老到新的顺序进行。

    **模拟参数**

    ======================= =============================================== ==========
    名称                     描述                                             单位
    ======================= =============================================== ==========
    RUE                     光能利用效率                                     g/MJ
    ExtinctionCoefficient   消光系数                                         -
    SpecificLeafArea        比叶面积                                         m2/g
    CohortLifespan          叶龄组寿命                                       d
    ExpansionDuration       叶龄组的扩展期                                   d
    CohortInterval          相邻叶龄组出现的间隔                             d
    InitialDM               每株的初始叶生物量                               g/plant
    DMDemandFunction        结构性 DM 需求                                   g/m2/d
    StructuralFraction      可选，结构性组织占新生物量的目标比例             0-1
    MaximumNConc            最高氮浓度                                       g/g
    MinimumNConc            最低氮浓度                                       g/g
    NitrogenDemandSwitch    可选，氮需求开关                                 0-1
    DMReallocationFactor    可选，衰老叶龄组储藏物质中可再分配的比例         0-1
    DMRetranslocationFactor 可选，储藏物质中可转运的比例                     /d
    NReallocationFactor     可选，衰老叶龄组储藏氮中可再分配的比例           0-1
    NRetranslocationFactor  可选，可动用氮中可转运的比例                     /d
    DetachmentRate          可选，死叶每天脱落的比例                         /d
    DMConversionEfficiency  同化物转化为生物量的效率                         g/g
    CarbonConcentration     生物量的含碳量                                   g/g
    MaintenanceRespiration  代谢性和储藏性生物量每天的维持呼吸比例           /d
    ======================= =============================================== ==========

    **状态变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    WLV      活叶干重                             Y     g/m2
    DWLV     死叶干重                             Y     g/m2
    NLV      活叶氮量                             Y     g/m2
    LAI      叶面积指数                           Y     -
    =======  ================================== ==== ============

    **速率变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    FIX      当天固定的干物质                     Y     g/m2
    GRLV     生长呼吸                             N     g CO2/m2
    MRLV     维持呼吸                             N     g/m2
    =======  ================================== ==== ============
    """
    name = "Leaf"

    Cohorts = List()
    _potential = Instance(BiomassPoolType)
    _days_since_cohort = 0
    _fixation = 0.
    _dm_reallocation = 0.
    _dm_retranslocation = 0.
    _n_reallocation = 0.
    _n_retranslocation = 0.

    class Parameters(ParamTemplate):
        RUE = FunctionTrait()
        ExtinctionCoefficient = FunctionTrait()
        SpecificLeafArea = FunctionTrait()
        CohortLifespan = FunctionTrait()
        ExpansionDuration = FunctionTrait()
        CohortInterval = FunctionTrait()
        InitialDM = FunctionTrait()
        DMDemandFunction = FunctionTrait()
        StructuralFraction = FunctionTrait(optional=True)
        MaximumNConc = FunctionTrait()
        MinimumNConc = FunctionTrait()
        NitrogenDemandSwitch = FunctionTrait(optional=True)
        DMReallocationFactor = FunctionTrait(optional=True)
        DMRetranslocationFactor = FunctionTrait(optional=True)
        NReallocationFactor = FunctionTrait(optional=True)
        NRetranslocationFactor = FunctionTrait(optional=True)
        DetachmentRate = FunctionTrait(optional=True)
        DMConversionEfficiency = FunctionTrait()
        CarbonConcentration = FunctionTrait()
        MaintenanceRespiration = FunctionTrait()

    class StateVariables(StatesTemplate):
        WLV = Float()
        DWLV = Float()
        NLV = Float()
        LAI = Float()

    class RateVariables(RatesTemplate):
        FIX = Float()
        GRLV = Float()
        MRLV = Float()

    def initialize(self, day, kiosk, parvalues, context):
        self._initialize_common(parvalues, context)
        self.biomass_removal = BiomassRemoval(kiosk, context, self.name,
                                              parvalues.get("BiomassRemovalDefaults"))
        self.Cohorts = []
        self._potential = BiomassPoolType()

        self.states = self.StateVariables(kiosk, publish=["WLV", "DWLV", "NLV", "LAI"],
                                          WLV=0., DWLV=0., NLV=0., LAI=0.)
        self.rates = self.RateVariables(kiosk, publish=["FIX"])

    # 汇总
    def _pools(self, attr):
        return [getattr(c, attr) for c in self.Cohorts]

    @property
    def live(self):
        total = Biomass()
        for b in self._pools("Live"):
            total.add(b)
        return total

    @property
    def dead(self):
        total = Biomass()
        for b in self._pools("Dead"):
            total.add(b)
        return total

    @property
    def LAI(self):
        return self.live.Wt * self.params.SpecificLeafArea()

    @property
    def cover(self):
        """绿叶截获的辐射比例"""
        return 1. - exp(-self.params.ExtinctionCoefficient() * self.LAI)

    def _expanding(self):
        duration = self.params.ExpansionDuration()
        return [c for c in self.Cohorts if c.is_expanding(duration)]

    def _senescing(self):
        lifespan = self.params.CohortLifespan()
        return [c for c in self.Cohorts if c.is_senescing(lifespan)]

    # 生命周期
    def on_sow(self, day, population, depth):
        dm = self.params.InitialDM() * population
        live = Biomass(StructuralWt=dm, StructuralN=dm * self.params.MaximumNConc())
        self.Cohorts = [LeafCohort(live)]
        self._days_since_cohort = 0
        self._publish()

    def on_day_start(self, day):
        Organ.on_day_start(self, day)
        self._potential = BiomassPoolType()
        self._fixation = 0.
        if self.plant.is_alive and self.plant.is_emerged:
            self._days_since_cohort += 1
            if self._days_since_cohort >= self.params.CohortInterval():
                self.Cohorts.append(LeafCohort())
                self._days_since_cohort = 0

    def on_actual_growth(self, day):
        if self.plant.is_alive:
            p = self.params
            lifespan = p.CohortLifespan()
            for cohort in self.Cohorts:
                cohort.Age += 1
                if cohort.Age >= lifespan and cohort.Live.Wt > 0.:
                    senescing = cohort.Live.copy()
                    cohort.Dead.add(senescing)
                    cohort.Live.clear()
                    self.Senesced.add(senescing)

            if p.DetachmentRate is not None:
                detachment = OrganBiomassRemovalType(FractionDeadToResidue=p.DetachmentRate())
                self.biomass_removal.remove_biomass(None, detachment, self._pools("Live"),
                                                    self._pools("Dead"), self.Removed,
                                                    self.Detached)

            mr = p.MaintenanceRespiration()
            self.MaintenanceRespiration = 0.
            for live in self._pools("Live"):
                self.MaintenanceRespiration += (live.MetabolicWt + live.StorageWt) * mr
                live.MetabolicWt *= (1. - mr)
                live.StorageWt *= (1. - mr)
        self._publish()

    def on_plant_end(self, day):
        total = self.live + self.dead
        if total.Wt > 0.:
            self.Detached.add(total)
            self.context.residues.add(total.Wt * 10., total.N * 10., 0., self.plant.crop_type,
                                      self.name)
        self.Cohorts = []
        self._publish()

    # 供给与需求
    def _do_supply_calculations(self):
        p = self.params
        drv = self.context.drv
        self._fixation = p.RUE() * drv.IRRAD / 1.e6 * self.cover * self.plant.water_stress

        senescing = self._senescing()
        senescing_storage_wt = sum(c.Live.StorageWt for c in senescing)
        senescing_storage_n = sum(c.Live.StorageN for c in senescing)
        live = self.live
        min_n_conc = p.MinimumNConc()
        labile_n = sum(max(0., b.StorageN - b.StorageWt * min_n_conc) for b in self._pools("Live"))

        self._dm_reallocation = 0.
        if p.DMReallocationFactor is not None:
            self._dm_reallocation = senescing_storage_wt * p.DMReallocationFactor()
        self._dm_retranslocation = 0.
        if p.DMRetranslocationFactor is not None:
            self._dm_retranslocation = max(0., live.StorageWt - self._dm_reallocation) * \
                p.DMRetranslocationFactor()
        self._n_reallocation = 0.
        if p.NReallocationFactor is not None:
            self._n_reallocation = senescing_storage_n * p.NReallocationFactor()
        self._n_retranslocation = 0.
        if p.NRetranslocationFactor is not None:
            self._n_retranslocation = max(0., labile_n - self._n_reallocation) * \
                p.NRetranslocationFactor()

        for label, value in (("DM fixation", self._fixation),
                             ("DM reallocation", self._dm_reallocation),
                             ("DM retranslocation", self._dm_retranslocation),
                             ("N reallocation", self._n_reallocation),
                             ("N retranslocation", self._n_retranslocation)):
            self._check_negative(value, label)

    def calculate_dry_matter_supply(self):
        self.DMSupply = BiomassSupplyType(Fixation=self._fixation,
                                          Retranslocation=self._dm_retranslocation,
                                          Reallocation=self._dm_reallocation)
        return self.DMSupply

    def calculate_nitrogen_supply(self):
        self.NSupply = BiomassSupplyType(Retranslocation=self._n_retranslocation,
                                         Reallocation=self._n_reallocation)
        return self.NSupply

    def calculate_dry_matter_demand(self):
        structural = storage = 0.
        if self.plant.is_emerged and self._expanding():
            structural = self._demanded_dm_structural()
            live = self.live
            storage = self._demanded_dm_storage(live.StructuralWt, live.StorageWt, structural)
        self.DMDemand = BiomassPoolType(Structural=structural, Storage=storage)
        return self.DMDemand

    def _cohort_n_deficits(self):
        """每个叶龄组在潜在分配之后距离最高氮浓度的差额"""
        p = self.params
        expanding = self._expanding()
        share = self._potential.Total / len(expanding) if expanding else 0.
        max_n_conc = p.MaximumNConc()
        deficits = []
        for cohort in self.Cohorts:
            potential = share if cohort in expanding else 0.
            deficits.append(max(0., max_n_conc * (cohort.Live.Wt + potential) - cohort.Live.N))
        return deficits

    def calculate_nitrogen_demand(self):
        p = self.params
        switch = 1.0 if p.NitrogenDemandSwitch is None else p.NitrogenDemandSwitch()
        structural = self._potential.Structural * p.MinimumNConc() * switch
        deficit = sum(self._cohort_n_deficits())
        storage = max(0., deficit - structural) * switch
        self.NDemand = BiomassPoolType(Structural=structural, Storage=storage)
        return self.NDemand

    # 分配
    def set_dry_matter_potential_allocation(self, dry_matter):
        for pool in ("Structural", "Metabolic", "Storage"):
            self._check_potential_allocation(getattr(self.DMDemand, pool),
                                             getattr(dry_matter, pool), pool)
        self._potential = BiomassPoolType(*dry_matter)

    def _take_in_order(self, cohorts, amount, attr, label):
        """按顺序从叶龄组的活库组分 attr 中扣除 amount。"""
        remaining = amount
        for cohort in cohorts:
            if remaining <= 0.:
                break
            available = getattr(cohort.Live, attr)
            taken = min(available, remaining)
            setattr(cohort.Live, attr, available - taken)
            remaining -= taken
        if remaining > 1e-10:
            msg = "%s of %g could not be taken from leaf cohorts, %g left" % (label, amount, remaining)
            raise exc.AllocationMismatchError(msg)

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
        expanding = self._expanding()
        if allocated.Wt > settings.BIOMASS_TOLERANCE and not expanding:
            msg = "No expanding leaf cohorts to receive %g g/m2 of DM" % allocated.Wt
            raise exc.AllocationMismatchError(msg)

        self._take_in_order(self._senescing(), dry_matter.Reallocation, "StorageWt",
                            "DM reallocation")
        self._take_in_order(self.Cohorts, dry_matter.Retranslocation, "StorageWt",
                            "DM retranslocation")

        distributed = 0.
        if expanding:
            share = allocated * (1. / len(expanding))
            for cohort in expanding:
                cohort.Live.add(share)
                distributed += share.Wt
        self._check_distributed(distributed, allocated.Wt, "DM")

        self.Allocated.add(allocated)
        self.GrowthRespiration += allocated.Wt * self._growth_respiration_factor()

    def set_nitrogen_allocation(self, nitrogen):
        for pool, value in zip(nitrogen._fields, nitrogen):
            self._check_negative(value, "N %s allocation" % pool)
        self._check_supply_use(nitrogen.Retranslocation, self.NSupply.Retranslocation,
                               "N retranslocation")
        self._check_supply_use(nitrogen.Reallocation, self.NSupply.Reallocation, "N reallocation")
        allocated_n = nitrogen.Structural + nitrogen.Metabolic + nitrogen.Storage
        self._check_supply_use(allocated_n, self.NDemand.Total, "N allocation (demand)")

        # 差额在扣除再分配和转运之前计算，与需求计算时一致
        deficits = self._cohort_n_deficits()
        total_deficit = sum(deficits)
        self._take_in_order(self._senescing(), nitrogen.Reallocation, "StorageN", "N reallocation")
        self._take_in_order(self.Cohorts, nitrogen.Retranslocation, "StorageN", "N retranslocation")

        distributed = 0.
        expanding = self._expanding()
        if expanding:
            structural_share = (nitrogen.Structural + nitrogen.Metabolic) / len(expanding)
            for cohort in expanding:
                cohort.Live.StructuralN += structural_share
                distributed += structural_share
        if total_deficit > 0.:
            for cohort, deficit in zip(self.Cohorts, deficits):
                amount = nitrogen.Storage * deficit / total_deficit
                cohort.Live.StorageN += amount
                distributed += amount
        self._check_distributed(distributed, allocated_n, "N", error=exc.NAllocationMismatchError)

        self.Allocated.StructuralN += nitrogen.Structural
        self.Allocated.MetabolicN += nitrogen.Metabolic
        self.Allocated.StorageN += nitrogen.Storage

    def _remove_biomass(self, event_name, removal):
        self.biomass_removal.remove_biomass(event_name, removal, self._pools("Live"),
                                            self._pools("Dead"), self.Removed, self.Detached)

    @prepare_states
    def _update_states(self):
        s = self.states
        s.WLV = self.live.Wt
        s.DWLV = self.dead.Wt
        s.NLV = self.live.N
        s.LAI = self.LAI

    @prepare_rates
    def _update_rates(self):
        r = self.rates
        r.FIX = self._fixation
        r.GRLV = self.GrowthRespiration
        r.MRLV = self.MaintenanceRespiration
