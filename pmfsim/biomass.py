# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""生物量库及器官仲裁中使用的值类型。

`Biomass` 保存一个器官隔室中结构性、代谢性和储藏性的干物质及氮素（g/m2）。
器官的持久库（Live、Dead）跨天累积，直到植株终结或收获；临时库（Allocated、
Senesced、Detached、Removed）在每个模拟日开始时清零。

仲裁协议中需求、供给与分配的取值用不可变的 namedtuple 表示，所有字段默认为零。
"""
from collections import namedtuple

from .traitlets import HasTraits, Float
from .settings import settings
from . import exceptions as exc


class Biomass(HasTraits):
    """一个隔室的干物质和氮素库（g/m2）

    >>> b = Biomass(StructuralWt=10., StructuralN=0.2)
    >>> (b + b).Wt
    20.0
    >>> (b * 0.5).NConc
    0.02
    """
    pools = ("StructuralWt", "MetabolicWt", "StorageWt",
             "StructuralN", "MetabolicN", "StorageN")

    StructuralWt = Float(0.)
    MetabolicWt = Float(0.)
    StorageWt = Float(0.)
    StructuralN = Float(0.)
    MetabolicN = Float(0.)
    StorageN = Float(0.)

    def __init__(self, **kwargs):
        HasTraits.__init__(self)
        for name, value in kwargs.items():
            if name not in self.pools:
                msg = "Unknown biomass pool '%s'." % name
                raise exc.PMFError(msg)
            setattr(self, name, value)

    @property
    def Wt(self):
        return self.StructuralWt + self.MetabolicWt + self.StorageWt

    @property
    def N(self):
        return self.StructuralN + self.MetabolicN + self.StorageN

    @property
    def NConc(self):
        wt = self.Wt
        return self.N / wt if wt > 0. else 0.

    def add(self, other):
        """把 other 加到本库中，返回 self。"""
        for name in self.pools:
            setattr(self, name, getattr(self, name) + getattr(other, name))
        return self

    def subtract(self, other):
        """从本库中减去 other，返回 self。"""
        for name in self.pools:
            setattr(self, name, getattr(self, name) - getattr(other, name))
        return self

    def multiply(self, fraction):
        """把所有组分乘以 fraction，返回 self。"""
        for name in self.pools:
            setattr(self, name, getattr(self, name) * fraction)
        return self

    def clear(self):
        for name in self.pools:
            setattr(self, name, 0.)
        return self

    def copy(self):
        return Biomass(**{name: getattr(self, name) for name in self.pools})

    def __add__(self, other):
        return self.copy().add(other)

    def __mul__(self, fraction):
        return self.copy().multiply(fraction)

    __rmul__ = __mul__

    def check_non_negative(self, label):
        """任一组分小于 -BIOMASS_TOLERANCE 时抛出 NegativeFlowError。"""
        for name in self.pools:
            value = getattr(self, name)
            if value < -settings.BIOMASS_TOLERANCE:
                msg = "Negative %s in %s: %g" % (name, label, value)
                raise exc.NegativeFlowError(msg)

    def __repr__(self):
        return "Biomass(Wt=%.6g, N=%.6g)" % (self.Wt, self.N)


class BiomassPoolType(namedtuple("BiomassPoolType",
                                 ["Structural", "Metabolic", "Storage"],
                                 defaults=(0., 0., 0.))):
    """器官按结构性、代谢性和储藏性给出的需求或潜在分配"""
    __slots__ = ()

    @property
    def Total(self):
        return self.Structural + self.Metabolic + self.Storage


class BiomassSupplyType(namedtuple("BiomassSupplyType",
                                   ["Fixation", "Retranslocation", "Reallocation", "Uptake"],
                                   defaults=(0., 0., 0., 0.))):
    """器官按来源给出的供给"""
    __slots__ = ()

    @property
    def Total(self):
        return self.Fixation + self.Retranslocation + self.Reallocation + self.Uptake


class BiomassAllocationType(namedtuple("BiomassAllocationType",
                                       ["Structural", "Metabolic", "Storage",
                                        "Retranslocation", "Reallocation", "Uptake"],
                                       defaults=(0., 0., 0., 0., 0., 0.))):
    """仲裁器最终决定的分配。

    Structural/Metabolic/Storage 是分配给器官的量，Retranslocation/Reallocation/Uptake
    是从器官自身供给中取走的量。
    """
    __slots__ = ()

    @property
    def Total(self):
        return self.Structural + self.Metabolic + self.Storage


class OrganBiomassRemovalType(namedtuple("OrganBiomassRemovalType",
                                         ["FractionLiveToRemove", "FractionDeadToRemove",
                                          "FractionLiveToResidue", "FractionDeadToResidue",
                                          "name"],
                                         defaults=(0., 0., 0., 0., None))):
    """一次生物量移除事件中某个器官的移除比例。

    四个比例均在 [0, 1] 之间且总和不超过 1，调用方负责保证。
    """
    __slots__ = ()

    @property
    def Total(self):
        return (self.FractionLiveToRemove + self.FractionDeadToRemove +
                self.FractionLiveToResidue + self.FractionDeadToResidue)
