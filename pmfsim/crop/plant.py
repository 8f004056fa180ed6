# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
from ..traitlets import Float, Int, Instance, Unicode, List
from ..decorators import prepare_rates, prepare_states
from ..base import StatesTemplate, RatesTemplate, ParamTemplate, SimulationObject
from ..base.context import SimulationContext
from ..functions import FunctionTrait
from ..soil.arbitrator import SoilArbitrator
from ..settings import settings
from .. import exceptions as exc
from .leaf import Leaf
from .generic_organ import Stem
from .root import Root
from .arbitrator import OrganArbitrator


class Plant(SimulationObject):
    """由叶、茎和根组成的植株。

    植株把器官组合在一起，维护植株状态（播种、出苗、DAS、水分胁迫），并按固定顺序
    驱动每天的计算：

    1. 器官的日初始化；
    2. 通过土壤仲裁器吸水，计算水分胁迫；
    3. 器官的潜在生长（供给计算）；
    4. DM 的供给、需求和潜在分配；
    5. N 需求，以及通过土壤仲裁器吸氮；
    6. DM 的实际分配；
    7. N 的实际分配。

    实际生长（根深推进、衰老、维持呼吸）在 `integrate()` 中进行。

    **模拟参数**

    ================ ============================================= ==========
    名称              描述                                            单位
    ================ ============================================= ==========
    Name             植株名称                                        -
    CropType         作物类型，残体库使用                            -
    ZoneName         植株所在的区域                                  -
    EmergenceDelay   播种到出苗的天数                                d
    CropCoefficient  作物系数，蒸散需求 = ET0 * Kc * 冠层覆盖度       -
    ================ ============================================= ==========

    **状态变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    DAS      播种后天数                           Y     d
    TAGP     地上部总干重（活+死）                Y     g/m2
    =======  ================================== ==== ============

    **速率变量**

    =======  ================================== ==== ============
     名称     描述                               Pbl      单位
    =======  ================================== ==== ============
    TWD      蒸腾需水量                           Y     mm
    WSTRESS  水分胁迫因子（实际/需求）            Y     0-1
    GASST    当天分配的干物质                     N     g/m2
    =======  ================================== ==== ============
    """
    context = Instance(SimulationContext)
    soil_arbitrator = Instance(SoilArbitrator)
    arbitrator = Instance(OrganArbitrator)
    leaf = Instance(Leaf)
    stem = Instance(Stem)
    root = Instance(Root)
    organs = List()

    class Parameters(ParamTemplate):
        Name = Unicode()
        CropType = Unicode()
        ZoneName = Unicode()
        EmergenceDelay = Float()
        CropCoefficient = FunctionTrait()

    class StateVariables(StatesTemplate):
        DAS = Int()
        TAGP = Float()

    class RateVariables(RatesTemplate):
        TWD = Float()
        WSTRESS = Float()
        GASST = Float()

    def initialize(self, day, kiosk, parameterprovider, context, soil_arbitrator):
        """
        :param day: 模拟开始日期
        :param kiosk: 本次模拟的 VariableKiosk
        :param parameterprovider: `ParameterProvider`，提供 Plant、Leaf、Stem 和 Root 参数
        :param context: `SimulationContext`
        :param soil_arbitrator: `SoilArbitrator`
        """
        self.context = context
        self.params = self.Parameters(parameterprovider.for_organ("Plant"))
        self.params.bind(context)
        plant = context.plant
        plant.name = self.params.Name
        plant.crop_type = self.params.CropType
        plant.zone_name = self.params.ZoneName

        self.leaf = Leaf(day, kiosk, parameterprovider.for_organ("Leaf"), context)
        self.stem = Stem(day, kiosk, parameterprovider.for_organ("Stem"), context)
        self.root = Root(day, kiosk, parameterprovider.for_organ("Root"), context)
        self.organs = [self.leaf, self.stem, self.root]
        self.arbitrator = OrganArbitrator(self.organs)
        self.soil_arbitrator = soil_arbitrator

        self.states = self.StateVariables(kiosk, publish=["DAS", "TAGP"], DAS=0, TAGP=0.)
        self.rates = self.RateVariables(kiosk, publish=["TWD", "WSTRESS"])

    @property
    def is_alive(self):
        return self.context.plant.is_alive

    def on_simulation_start(self, day):
        for organ in self.organs:
            organ.on_simulation_start(day)

    def sow(self, day, population, depth):
        """在 day 以密度 population（plants/m2）和深度 depth（mm）播种。"""
        plant = self.context.plant
        if plant.is_alive:
            msg = "Plant %s already sown on %s, sowing on %s ignored." % \
                  (plant.name, plant.sowing_date, day)
            self.logger.warning(msg)
            return

        plant.population = population
        plant.sowing_depth = depth
        plant.sowing_date = day
        plant.is_alive = True
        plant.is_emerged = False
        plant.DAS = 0
        plant.water_stress = 1.0
        for organ in self.organs:
            organ.on_sow(day, population, depth)
        self.touch()
        self.logger.info("Plant %s sown on %s with population %.1f/m2 at %.1f mm depth" %
                         (plant.name, day, population, depth))

    def calc_rates(self, day, drv):
        if not self.is_alive:
            return

        plant = self.context.plant
        if settings.ZEROFY:
            self.zerofy()
        plant.DAS = (day - plant.sowing_date).days
        if not plant.is_emerged and plant.DAS >= self.params.EmergenceDelay:
            plant.is_emerged = True
            self.logger.info("Plant %s emerged on %s" % (plant.name, day))

        for organ in self.organs:
            organ.on_day_start(day)

        demand = drv.ET0 * self.params.CropCoefficient() * self.leaf.cover
        uptake = self.soil_arbitrator.do_water_arbitration(self.root, demand)
        plant.water_stress = min(1., uptake / demand) if demand > 0. else 1.

        for organ in self.organs:
            organ.on_potential_growth(day)

        self.arbitrator.do_dm_potential_allocation()
        n_demand = self.arbitrator.n_uptake_demand()
        # 器官以 g/m2 计，土壤以 kg/ha 计
        self.soil_arbitrator.do_nitrogen_arbitration(self.root, n_demand * 10.)
        allocated = self.arbitrator.do_dm_allocation()
        self.arbitrator.do_n_allocation()

        for organ in self.organs:
            organ.publish_rates()
        self._set_rates(demand, plant.water_stress, allocated)

    @prepare_rates
    def _set_rates(self, demand, water_stress, allocated):
        self.rates.TWD = demand
        self.rates.WSTRESS = water_stress
        self.rates.GASST = allocated

    def integrate(self, day, delt=1.0):
        if not self.is_alive:
            return
        for organ in self.organs:
            organ.on_actual_growth(day)
        self._update_states()
        # 引擎每天清空 kiosk，取值不变的状态也要重新写入
        self.touch()

    @prepare_states
    def _update_states(self):
        self.states.DAS = self.context.plant.DAS
        self.states.TAGP = self.leaf.Wt + self.stem.Wt

    def remove_biomass(self, day, event_name, fractions=None):
        """生物量移除事件。

        :param event_name: 事件名称，例如 'cut'
        :param fractions: 可选，按器官名给出的移除比例；未给出时使用各器官
            对该事件定义的默认比例
        """
        plant = self.context.plant
        if not plant.is_alive:
            msg = "Biomass removal '%s' on %s ignored, no living plant." % (event_name, day)
            self.logger.warning(msg)
            return

        organs = {organ.name: organ for organ in self.organs}
        if fractions is not None:
            unknown = set(fractions.keys()) - set(organs.keys())
            if unknown:
                msg = "Biomass removal for unknown organ(s): %s" % sorted(unknown)
                raise exc.ConfigurationError(msg)
            for name, removal in fractions.items():
                organs[name].remove_biomass(event_name, removal)
        else:
            targets = [organ for organ in self.organs
                       if organ.biomass_removal.find_default(event_name) is not None]
            if not targets:
                msg = "No organ defines default biomass removal fractions for '%s'" % event_name
                raise exc.ConfigurationError(msg)
            for organ in targets:
                organ.remove_biomass(event_name)
        self._update_states()

    def end(self, day):
        """结束植株的生命周期，所有剩余生物量进入残体库。"""
        plant = self.context.plant
        if not plant.is_alive:
            return
        for organ in self.organs:
            organ.on_plant_end(day)
        plant.is_alive = False
        plant.is_emerged = False
        self._update_states()
        self.touch()
        self.logger.info("Plant %s ended on %s" % (plant.name, day))
