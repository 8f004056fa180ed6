# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""整株仲裁器：在器官之间按需求比例分配干物质和氮。

仲裁器在一天中是有状态的：潜在分配时查询的供给与需求会保留到实际分配。
分配的优先顺序为先结构性和代谢性、后储藏性；同一优先级内按各器官的需求比例分配。
实际使用的供给按来源依次扣除（DM：再分配、固定、转运；N：再分配、吸收、转运），
每个器官按其在该来源中的份额提供。
"""
import logging

from ..biomass import BiomassPoolType, BiomassAllocationType
from ..util import safe_divide


class OrganArbitrator(object):
    """对一个同质的器官列表执行相对分配。

    :param organs: 实现器官仲裁协议的器官列表
    """
    dm_sources = ("Reallocation", "Fixation", "Retranslocation")
    n_sources = ("Reallocation", "Uptake", "Retranslocation")

    def __init__(self, organs):
        self.organs = list(organs)
        self.dm_supplies = None
        self.dm_demands = None
        self.dm_allocations = None
        self.n_supplies = None
        self.n_demands = None

    @property
    def logger(self):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        return logging.getLogger(loggername)

    @staticmethod
    def _distribute(available, demands):
        """按优先级和需求比例把 available 分给各器官，返回 `BiomassPoolType` 列表。"""
        priority_demand = sum(d.Structural + d.Metabolic for d in demands)
        storage_demand = sum(d.Storage for d in demands)
        to_priority = min(max(0., available), priority_demand)
        to_storage = min(max(0., available) - to_priority, storage_demand)

        fraction_priority = safe_divide(to_priority, priority_demand)
        fraction_storage = safe_divide(to_storage, storage_demand)
        return [BiomassPoolType(Structural=d.Structural * fraction_priority,
                                Metabolic=d.Metabolic * fraction_priority,
                                Storage=d.Storage * fraction_storage)
                for d in demands]

    @staticmethod
    def _take_from_supplies(amount, supplies, sources):
        """按来源顺序扣除 amount，返回每个器官从各来源提供的量（字典列表）。"""
        used = [dict.fromkeys(sources, 0.) for _ in supplies]
        remaining = amount
        for source in sources:
            total = sum(getattr(s, source) for s in supplies)
            taken = min(remaining, total)
            if taken <= 0.:
                continue
            for organ_use, supply in zip(used, supplies):
                organ_use[source] = taken * safe_divide(getattr(supply, source), total)
            remaining -= taken
        return used

    def do_dm_potential_allocation(self):
        """查询 DM 供给与需求，并把暂定分配告知各器官。"""
        self.dm_supplies = [organ.calculate_dry_matter_supply() for organ in self.organs]
        self.dm_demands = [organ.calculate_dry_matter_demand() for organ in self.organs]
        available = sum(s.Fixation + s.Reallocation + s.Retranslocation for s in self.dm_supplies)
        self.dm_allocations = self._distribute(available, self.dm_demands)
        for organ, allocation in zip(self.organs, self.dm_allocations):
            organ.set_dry_matter_potential_allocation(allocation)

        total_demand = sum(d.Total for d in self.dm_demands)
        self.logger.debug("DM supply %.4f g/m2, demand %.4f g/m2" % (available, total_demand))

    def do_dm_allocation(self):
        """执行 DM 的实际分配，返回分配的总量（g/m2）。"""
        total = sum(a.Total for a in self.dm_allocations)
        used = self._take_from_supplies(total, self.dm_supplies, self.dm_sources)
        for organ, allocation, organ_use in zip(self.organs, self.dm_allocations, used):
            organ.set_dry_matter_allocation(
                BiomassAllocationType(Structural=allocation.Structural,
                                      Metabolic=allocation.Metabolic,
                                      Storage=allocation.Storage,
                                      Retranslocation=organ_use["Retranslocation"],
                                      Reallocation=organ_use["Reallocation"]))
        return total

    def n_uptake_demand(self):
        """查询 N 需求与器官内部的 N 供给，返回需要从土壤吸收的 N（g/m2）。"""
        self.n_supplies = [organ.calculate_nitrogen_supply() for organ in self.organs]
        self.n_demands = [organ.calculate_nitrogen_demand() for organ in self.organs]
        total_demand = sum(d.Total for d in self.n_demands)
        internal = sum(s.Reallocation + s.Retranslocation + s.Fixation for s in self.n_supplies)
        return max(0., total_demand - internal)

    def do_n_allocation(self):
        """在土壤吸氮之后执行 N 的实际分配，返回分配的总量（g/m2）。"""
        # 吸收器官在吸氮之后才知道当天的吸收量
        self.n_supplies = [organ.calculate_nitrogen_supply() for organ in self.organs]
        available = sum(s.Total for s in self.n_supplies)
        allocations = self._distribute(available, self.n_demands)
        total = sum(a.Total for a in allocations)
        used = self._take_from_supplies(total, self.n_supplies, self.n_sources)
        for organ, allocation, organ_use in zip(self.organs, allocations, used):
            organ.set_nitrogen_allocation(
                BiomassAllocationType(Structural=allocation.Structural,
                                      Metabolic=allocation.Metabolic,
                                      Storage=allocation.Storage,
                                      Retranslocation=organ_use["Retranslocation"],
                                      Reallocation=organ_use["Reallocation"],
                                      Uptake=organ_use["Uptake"]))
        self.logger.debug("N supply %.4f g/m2, allocated %.4f g/m2" % (available, total))
        return total
