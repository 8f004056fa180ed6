# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""植株器官和辅助组件（计时器、农事管理）共用的基类。"""
import types
import logging
from datetime import date

from .dispatcher import DispatcherObject
from ..traitlets import HasTraits, Instance
from .. import exceptions as exc
from .variablekiosk import VariableKiosk
from .states_rates import StatesTemplate, RatesTemplate, ParamTemplate


def _qualified_name(obj):
    return "%s.%s" % (obj.__class__.__module__, obj.__class__.__name__)


class _Component(HasTraits, DispatcherObject):
    """拥有 kiosk、logger 和锁定属性赋值的组件。

    类中未定义的公开属性不能赋值，这样拼错的变量名会立即报错，而不是悄悄地生成新属性。
    """

    kiosk = Instance(VariableKiosk)

    def _attach_kiosk(self, kiosk, position):
        if not isinstance(kiosk, VariableKiosk):
            msg = "%s should be instantiated with the VariableKiosk as %s argument!"
            raise exc.PMFError(msg % (_qualified_name(self), position))
        self.kiosk = kiosk

    def initialize(self, *args, **kwargs):
        msg = "`initialize` method not yet implemented on %s" % self.__class__.__name__
        raise NotImplementedError(msg)

    @property
    def logger(self):
        return logging.getLogger(_qualified_name(self))

    def _may_assign(self, attr, value):
        return attr.startswith("_") or hasattr(self, attr)

    def __setattr__(self, attr, value):
        if not self._may_assign(attr, value):
            msg = "Assignment to non-existing attribute '%s' prevented." % attr
            raise AttributeError(msg)
        HasTraits.__setattr__(self, attr, value)


class SimulationObject(_Component):
    """器官和植株的基类。

    :param day: 模拟的起始日期
    :param kiosk: 本次模拟的 VariableKiosk

    其余参数原样传给 `initialize()`。子对象以 Instance trait 的形式嵌入，
    `get_variable`、`touch`、`zerofy` 和 `_delete` 都会递归到子对象。
    """

    states = Instance(StatesTemplate)
    rates = Instance(RatesTemplate)
    params = Instance(ParamTemplate)

    def __init__(self, day, kiosk, *args, **kwargs):
        HasTraits.__init__(self)
        if not isinstance(day, date):
            msg = "%s should be instantiated with the simulation start day as first argument!"
            raise exc.PMFError(msg % _qualified_name(self))
        self._attach_kiosk(kiosk, "second")
        self.initialize(day, kiosk, *args, **kwargs)
        self.logger.debug("Component successfully initialized on %s!" % day)

    def _may_assign(self, attr, value):
        # prepare_states/prepare_rates 会把包装后的函数赋给实例
        if type(value) is types.FunctionType:
            return True
        return _Component._may_assign(self, attr, value)

    @property
    def subSimObjects(self):
        """作为 trait 嵌入在本对象中的 SimulationObject 列表。"""
        values = self.__dict__["_trait_values"].values()
        return [v for v in values if isinstance(v, SimulationObject)]

    def _own_containers(self):
        return [c for c in (self.states, self.rates) if c is not None]

    def get_variable(self, varname):
        """在本对象及子对象的 states/rates 中查找 varname，找不到时返回 None。"""
        for container in self._own_containers():
            if varname in container.trait_names():
                return getattr(container, varname)
        for simobj in self.subSimObjects:
            value = simobj.get_variable(varname)
            if value is not None:
                return value
        return None

    def _delete(self):
        """从 kiosk 注销本对象及所有子对象的变量。"""
        for container in self._own_containers():
            container._delete()
        self.states = None
        self.rates = None
        for simobj in self.subSimObjects:
            simobj._delete()

    def touch(self):
        """把本对象及所有子对象的状态变量重新写入 kiosk。"""
        if self.states is not None:
            self.states.touch()
        for simobj in self.subSimObjects:
            simobj.touch()

    def zerofy(self):
        """将本对象及所有子对象的速率变量置零。"""
        if self.rates is not None:
            self.rates.zerofy()
        for simobj in self.subSimObjects:
            simobj.zerofy()


class AncillaryObject(_Component):
    """计时器和农事管理等辅助对象的基类。

    辅助对象不参与生物量计算，但可以读取 kiosk，也可以发送和接收信号。
    kiosk 是第一个位置参数，其余参数原样传给 `initialize()`。
    """

    def __init__(self, kiosk, *args, **kwargs):
        HasTraits.__init__(self)
        self._attach_kiosk(kiosk, "first")
        self.initialize(kiosk, *args, **kwargs)
        self.logger.debug("Component successfully initialized!")
