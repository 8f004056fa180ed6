# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""器官参数使用的速率/系数函数。

器官的大多数参数不是固定数值，而是每天求值一次的函数，部分函数还可以按土层索引求值
（例如 KL 修正系数、NO3 吸收速率常数）。本模块把参数文件中的取值转换为统一的函数对象：

============================== =====================================================
参数取值                        转换结果
============================== =====================================================
数值，例如 ``0.05``             `Constant`，与土层无关
列表，例如 ``[1.0, 0.8, 0.5]``  `LayerValues`，按土层索引取值
``{xy: [...], driver: TEMP}``   `AfgenFunction`，按驱动变量在 XY 表中插值
任意可调用对象                  `CallableFunction`
============================== =====================================================

驱动变量按以下顺序查找：调用时给出的局部驱动变量（例如根系计算的土层相对含水量
``RWC``）、当天的气象数据、kiosk 中发布的变量，最后是植株状态（例如 ``DAS``）。
"""
from collections.abc import Iterable, Mapping

from .traitlets import TraitType
from .util import Afgen
from . import exceptions as exc


class ModelFunction(object):
    """所有模型函数的基类"""

    _context = None

    def bind(self, context):
        """把函数绑定到模拟上下文，用于查找驱动变量。"""
        self._context = context

    def value(self, layer=None, **drivers):
        msg = "`value` method not yet implemented on %s" % self.__class__.__name__
        raise NotImplementedError(msg)

    def __call__(self, layer=None, **drivers):
        return self.value(layer, **drivers)


class Constant(ModelFunction):

    def __init__(self, value):
        self.fixed_value = float(value)

    def value(self, layer=None, **drivers):
        return self.fixed_value

    def __repr__(self):
        return "Constant(%s)" % self.fixed_value


class LayerValues(ModelFunction):
    """每个土层一个取值的函数。"""

    def __init__(self, values):
        self.values = [float(v) for v in values]
        if not self.values:
            raise ValueError("LayerValues needs at least one value.")

    def value(self, layer=None, **drivers):
        if layer is None:
            msg = "Layered function %s evaluated without a layer index." % self
            raise exc.ParameterError(msg)
        if not 0 <= layer < len(self.values):
            msg = "Layer index %i out of range for %s." % (layer, self)
            raise exc.ParameterError(msg)
        return self.values[layer]

    def __repr__(self):
        return "LayerValues(%s)" % self.values


class AfgenFunction(ModelFunction):
    """以驱动变量为自变量的 AFGEN 插值函数。"""

    def __init__(self, xy, driver):
        self.table = Afgen(xy)
        self.driver = driver

    def value(self, layer=None, **drivers):
        if self.driver in drivers:
            x = drivers[self.driver]
        elif self._context is not None:
            x = self._context.get_driver(self.driver)
        else:
            msg = "Function driven by '%s' is not bound to a simulation context." % self.driver
            raise exc.ParameterError(msg)
        return self.table(x)

    def __repr__(self):
        return "AfgenFunction(driver=%s)" % self.driver


class CallableFunction(ModelFunction):
    """包装任意可调用对象。对分层求值，可调用对象会以 ``layer`` 关键字参数调用。"""

    def __init__(self, func):
        self.func = func

    def value(self, layer=None, **drivers):
        if layer is None:
            return float(self.func())
        return float(self.func(layer=layer))


def make_function(value):
    """把参数取值转换为 `ModelFunction`，无法识别时抛出 TypeError。"""
    if isinstance(value, ModelFunction):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a valid model function: %s" % value)
    if isinstance(value, (int, float)):
        return Constant(value)
    if isinstance(value, Mapping):
        if "xy" not in value or "driver" not in value:
            msg = "Table function needs 'xy' and 'driver' keys, got: %s" % list(value.keys())
            raise TypeError(msg)
        return AfgenFunction(value["xy"], value["driver"])
    if isinstance(value, str):
        raise TypeError("String is not a valid model function: %s" % value)
    if isinstance(value, Iterable):
        return LayerValues(value)
    if callable(value):
        return CallableFunction(value)
    raise TypeError("Cannot convert %r into a model function." % value)


class FunctionTrait(TraitType):
    """模型函数参数 trait

    :param optional: 为 True 时参数可以在参数文件中省略，此时取值为 None，
        表示对应的功能被关闭（例如未给出 DMReallocationFactor 时不发生再分配）。
    """
    default_value = None
    info_text = "a number, a list of layer values, an XY table or a callable"

    def __init__(self, optional=False, **kwargs):
        kwargs.setdefault("allow_none", True)
        self.optional = optional
        TraitType.__init__(self, **kwargs)

    def validate(self, obj, value):
        try:
            return make_function(value)
        except (TypeError, ValueError):
            self.error(obj, value)
