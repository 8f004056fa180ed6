# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
from ..base import AncillaryObject
from ..base.context import SimulationContext
from ..traitlets import Instance, Unicode, Dict
from ..biomass import Biomass, OrganBiomassRemovalType
from .. import exceptions as exc


class BiomassRemoval(AncillaryObject):
    """按比例从器官的活/死生物量中移除生物量。

    收获、刈割、放牧以及衰老都使用同一个移除过程。移除比例由
    `OrganBiomassRemovalType` 给出::

        detaching = Live * FractionLiveToResidue + Dead * FractionDeadToResidue
        removed   = Live * FractionLiveToRemove  + Dead * FractionDeadToRemove

    detaching 进入地表残体库（g/m2 换算为 kg/ha），removed 离开系统，活/死库按剩余
    比例缩小。四个比例都为零时不产生任何副作用。

    :param kiosk: VariableKiosk
    :param context: `SimulationContext`，提供残体库和植株名称
    :param organ_name: 所属器官的名称
    :param defaults: 按事件名给出的默认移除比例，例如
        ``{"harvest": {"FractionLiveToRemove": 0.8}}``
    """
    context = Instance(SimulationContext)
    organ_name = Unicode()
    defaults = Dict()

    def initialize(self, kiosk, context, organ_name, defaults=None):
        self.context = context
        self.organ_name = organ_name
        self.defaults = {}
        for event_name, fractions in (defaults or {}).items():
            self.defaults[event_name] = self.make_removal(fractions, name=event_name)

    @staticmethod
    def make_removal(fractions, name=None):
        """把比例字典转换为 `OrganBiomassRemovalType`，未知键抛出 ConfigurationError。"""
        if isinstance(fractions, OrganBiomassRemovalType):
            return fractions
        fractions = dict(fractions)
        fractions.setdefault("name", name)
        try:
            return OrganBiomassRemovalType(**fractions)
        except TypeError as e:
            msg = "Invalid biomass removal fractions %s: %s" % (fractions, e)
            raise exc.ConfigurationError(msg)

    def find_default(self, name):
        """返回事件 name 的默认移除比例，没有定义时返回 None。"""
        return self.defaults.get(name)

    def remove_biomass(self, event_name, removal, live, dead, removed, detached):
        """对活/死库执行移除，返回 (detaching, removing) 两个 `Biomass`。

        :param event_name: 事件名称，None 表示衰老等内部事件
        :param removal: `OrganBiomassRemovalType`
        :param live: 活生物量库或库的列表（例如叶片的各个叶龄组），原地修改
        :param dead: 死生物量库或库的列表，原地修改
        :param removed: 累计移除量的库，原地增加
        :param detached: 累计脱落量的库，原地增加
        """
        if isinstance(live, Biomass):
            live, dead = [live], [dead]
        detaching, removing = self._remove_from_pools(removal, live, dead)
        self._book(event_name, removal, detaching, removing, removed, detached)
        return detaching, removing

    def remove_biomass_to_soil(self, event_name, removal, layer_live, layer_dead,
                               removed, detached):
        """与 `remove_biomass` 相同，但作用于按土层划分的活/死库列表（根系）。"""
        detaching, removing = self._remove_from_pools(removal, layer_live, layer_dead)
        self._book(event_name, removal, detaching, removing, removed, detached)
        return detaching, removing

    def _remove_from_pools(self, removal, live_pools, dead_pools):
        detaching = Biomass()
        removing = Biomass()
        if removal.Total <= 0.:
            return detaching, removing

        remaining_live = 1.0 - (removal.FractionLiveToResidue + removal.FractionLiveToRemove)
        remaining_dead = 1.0 - (removal.FractionDeadToResidue + removal.FractionDeadToRemove)
        for live, dead in zip(live_pools, dead_pools):
            detaching.add(live * removal.FractionLiveToResidue + dead * removal.FractionDeadToResidue)
            removing.add(live * removal.FractionLiveToRemove + dead * removal.FractionDeadToRemove)
            live.multiply(remaining_live)
            dead.multiply(remaining_dead)
        return detaching, removing

    def _book(self, event_name, removal, detaching, removing, removed, detached):
        total_fraction = removal.Total
        if total_fraction <= 0.:
            return

        removed.add(removing)
        detached.add(detaching)
        plant = self.context.plant
        self.context.residues.add(detaching.Wt * 10., detaching.N * 10., 0., plant.crop_type,
                                  self.organ_name)

        to_residue = (removal.FractionLiveToResidue + removal.FractionDeadToResidue) / total_fraction * 100.
        removed_off = (removal.FractionLiveToRemove + removal.FractionDeadToRemove) / total_fraction * 100.
        msg = ("Removing %.1f%% of %s biomass from %s. Of this %.1f%% is removed from the system "
               "and %.1f%% is returned to the surface organic matter") % \
              (total_fraction * 100., self.organ_name, plant.name, removed_off, to_residue)
        if event_name is None:
            self.logger.debug(msg)
        else:
            self.logger.info("%s (%s)" % (msg, event_name))
