# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""器官资源仲裁协议

每个器官（根、叶、茎）都是干物质（DM）和氮（N）的消费者及生产者。整株仲裁器每天按
固定顺序调用器官的协议方法，对 DM 和 N 分别执行：

1. `calculate_dry_matter_supply()` / `calculate_nitrogen_supply()`：返回
   `BiomassSupplyType`，只读取当前的活生物量，不修改它；
2. `calculate_dry_matter_demand()` / `calculate_nitrogen_demand()`：返回
   `BiomassPoolType`；
3. `set_dry_matter_potential_allocation(pool)`：记录暂定的分配，需求为零却收到
   非零分配时抛出 `InvalidAllocationError`；
4. `set_dry_matter_allocation(alloc)` / `set_nitrogen_allocation(alloc)`：执行实际的
   物质转移，超出供给时抛出 `AllocationOverflowError`，分配到子单元的总量与请求
   不一致时抛出 `AllocationMismatchError`。

器官之间互不了解，整株仲裁器只持有一个同质的器官列表。生命周期方法
（`on_simulation_start`、`on_sow`、`on_day_start`、`on_potential_growth`、
`on_actual_growth`、`on_plant_end`）由引擎直接调用。
"""
from ..traitlets import Float, Instance
from ..biomass import Biomass, BiomassPoolType, BiomassSupplyType
from ..settings import settings
from .. import exceptions as exc
from .simulationobject import SimulationObject, AncillaryObject
from .context import SimulationContext


class Organ(SimulationObject):
    """所有器官的基类。

    子类需要定义 `name`、嵌套的 `Parameters`、`StateVariables`、`RateVariables`
    类，以及协议方法。公共的供给/需求公式要求参数类中使用统一的名称：
    ``DMConversionEfficiency``、``CarbonConcentration``、``DMDemandFunction``、
    ``StructuralFraction``、``SenescenceRate``、``MinimumNConc``，以及可选的
    ``DMReallocationFactor``、``DMRetranslocationFactor``、``NReallocationFactor``、
    ``NRetranslocationFactor``。
    """
    name = "Organ"

    context = Instance(SimulationContext)
    biomass_removal = Instance(AncillaryObject)

    # 当天的临时库，在 on_day_start 中清零
    Allocated = Instance(Biomass)
    Senesced = Instance(Biomass)
    Detached = Instance(Biomass)
    Removed = Instance(Biomass)
    GrowthRespiration = Float(0.)
    MaintenanceRespiration = Float(0.)

    # 仲裁协议的取值
    DMSupply = Instance(BiomassSupplyType)
    DMDemand = Instance(BiomassPoolType)
    NSupply = Instance(BiomassSupplyType)
    NDemand = Instance(BiomassPoolType)

    def _initialize_common(self, parvalues, context):
        self.context = context
        self.params = self.Parameters(parvalues)
        self.params.bind(context)
        self.Allocated = Biomass()
        self.Senesced = Biomass()
        self.Detached = Biomass()
        self.Removed = Biomass()
        self.DMSupply = BiomassSupplyType()
        self.DMDemand = BiomassPoolType()
        self.NSupply = BiomassSupplyType()
        self.NDemand = BiomassPoolType()

    @property
    def plant(self):
        return self.context.plant

    # 需要子类实现的部分
    @property
    def live(self):
        raise NotImplementedError("`live` not implemented on %s" % self.__class__.__name__)

    @property
    def dead(self):
        raise NotImplementedError("`dead` not implemented on %s" % self.__class__.__name__)

    def calculate_dry_matter_supply(self):
        raise NotImplementedError

    def calculate_dry_matter_demand(self):
        raise NotImplementedError

    def calculate_nitrogen_supply(self):
        raise NotImplementedError

    def calculate_nitrogen_demand(self):
        raise NotImplementedError

    def set_dry_matter_potential_allocation(self, dry_matter):
        raise NotImplementedError

    def set_dry_matter_allocation(self, dry_matter):
        raise NotImplementedError

    def set_nitrogen_allocation(self, nitrogen):
        raise NotImplementedError

    @property
    def Wt(self):
        """活与死生物量的总干重（g/m2）"""
        return self.live.Wt + self.dead.Wt

    @property
    def N(self):
        """活与死生物量的总氮（g/m2）"""
        return self.live.N + self.dead.N

    # 生命周期
    def on_simulation_start(self, day):
        pass

    def on_sow(self, day, population, depth):
        pass

    def on_day_start(self, day):
        if self.plant.is_alive:
            self.Allocated.clear()
            self.Senesced.clear()
            self.Detached.clear()
            self.Removed.clear()
            self.GrowthRespiration = 0.

    def on_potential_growth(self, day):
        if self.plant.is_emerged:
            self._do_supply_calculations()

    def on_actual_growth(self, day):
        pass

    def on_plant_end(self, day):
        pass

    def _do_supply_calculations(self):
        raise NotImplementedError

    # 移除
    def remove_biomass(self, event_name, removal=None):
        """按 removal 移除生物量。removal 为 None 时使用 event_name 的默认比例。"""
        if removal is None:
            removal = self.biomass_removal.find_default(event_name)
            if removal is None:
                msg = "No default biomass removal fractions for event '%s' on %s" % \
                      (event_name, self.name)
                raise exc.ConfigurationError(msg)
        else:
            removal = self.biomass_removal.make_removal(removal, name=event_name)
        self._remove_biomass(event_name, removal)
        self._publish()

    def _remove_biomass(self, event_name, removal):
        raise NotImplementedError

    # 公共的供给与需求公式
    def _remobilisation_supplies(self, storage_wt, storage_n, labile_n):
        """返回 (DM 再分配, DM 转运, N 再分配, N 转运)，对应系数为 None 时为零。

        再分配来自当天衰老的储藏物质；转运来自剩余的储藏物质，
        N 转运只能动用高于最低浓度的那部分（labile_n）。
        """
        p = self.params
        senescence_rate = p.SenescenceRate()

        dm_realloc = 0.
        if p.DMReallocationFactor is not None:
            dm_realloc = storage_wt * senescence_rate * p.DMReallocationFactor()
            self._check_negative(dm_realloc, "DM reallocation")

        dm_retrans = 0.
        if p.DMRetranslocationFactor is not None:
            dm_retrans = max(0., storage_wt - dm_realloc) * p.DMRetranslocationFactor()
            self._check_negative(dm_retrans, "DM retranslocation")

        n_realloc = 0.
        if p.NReallocationFactor is not None:
            n_realloc = storage_n * senescence_rate * p.NReallocationFactor()
            self._check_negative(n_realloc, "N reallocation")

        n_retrans = 0.
        if p.NRetranslocationFactor is not None:
            n_retrans = max(0., labile_n - n_realloc) * p.NRetranslocationFactor()
            self._check_negative(n_retrans, "N retranslocation")

        return dm_realloc, dm_retrans, n_realloc, n_retrans

    def _demanded_dm_structural(self):
        p = self.params
        efficiency = p.DMConversionEfficiency()
        if efficiency <= 0.:
            return 0.
        demand = p.DMDemandFunction()
        if p.StructuralFraction is not None:
            return demand * p.StructuralFraction() / efficiency
        return demand / efficiency

    def _demanded_dm_storage(self, live_structural_wt, live_storage_wt, structural_demand):
        """按结构性:储藏性的目标比例计算储藏性 DM 需求。"""
        p = self.params
        efficiency = p.DMConversionEfficiency()
        if efficiency <= 0. or p.StructuralFraction is None:
            return 0.
        theoretical_max = (live_structural_wt + structural_demand) / p.StructuralFraction()
        base_allocated = live_structural_wt + live_storage_wt + structural_demand
        return max(0., theoretical_max - base_allocated) / efficiency

    def _growth_respiration_factor(self):
        """每 g 分配的干物质释放的 CO2（g）：CH2O 中的碳减去生物量中的碳，再换算为 CO2。"""
        p = self.params
        efficiency = p.DMConversionEfficiency()
        if efficiency <= 0.:
            return 0.
        return (1.0 / efficiency * 12. / 30. - p.CarbonConcentration()) * 44. / 12.

    # 一致性检查
    def _check_negative(self, value, label):
        if value < -settings.BIOMASS_TOLERANCE:
            msg = "Negative %s value computed for %s: %g" % (label, self.name, value)
            raise exc.NegativeFlowError(msg)

    def _check_potential_allocation(self, demand, allocation, label):
        if demand == 0. and allocation > settings.POTENTIAL_ALLOCATION_TOLERANCE:
            msg = "Invalid allocation of potential DM in %s (%s)" % (self.name, label)
            raise exc.InvalidAllocationError(msg)

    def _check_supply_use(self, used, available, label):
        if used - available > settings.BIOMASS_TOLERANCE:
            msg = "%s in %s exceeds supply: %g > %g" % (label, self.name, used, available)
            raise exc.AllocationOverflowError(msg)

    def _check_distributed(self, distributed, requested, label, error=exc.AllocationMismatchError):
        if abs(distributed - requested) > settings.BIOMASS_TOLERANCE:
            msg = "Error in %s allocation to %s: distributed %g, requested %g" % \
                  (label, self.name, distributed, requested)
            raise error(msg)

    def _remove_from_storage(self, pools, amount, attr, label):
        """从 pools 的储藏组分 attr 中按比例扣除 amount（g/m2）。"""
        if amount <= 0.:
            return
        available = sum(getattr(b, attr) for b in pools)
        self._check_supply_use(amount, available, label)
        # 储藏组分已经为空，amount 只是容差以内的舍入误差
        if available <= 0.:
            return
        fraction = min(1., amount / available)
        for b in pools:
            setattr(b, attr, getattr(b, attr) * (1. - fraction))

    def _publish(self):
        """把当前的生物量写入状态和速率变量。"""
        self._update_states()
        self._update_rates()

    def publish_rates(self):
        """在当天的仲裁结束后发布速率变量（吸收量、呼吸）。"""
        self._update_rates()

    def _update_states(self):
        raise NotImplementedError

    def _update_rates(self):
        raise NotImplementedError
