# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""
PMFSim 的所有模块都从 .traitlets 导入 traits，实际实现来自 'traitlets_pcse'。

与原始实现的区别：

* Instance、Unicode、Bool、Float 和 Int 默认允许 `None`，表示尚未设置的值；
* Float 在赋值时执行 float() 转换，因此 numpy 标量和整数都可以直接赋值；
* LayerArray 保存按土层排列的 numpy 数组。
"""
from traitlets_pcse import *
import traitlets_pcse as tr
import numpy as np


def _none_allowed(kwargs):
    kwargs.setdefault('allow_none', True)
    return kwargs


class Instance(tr.Instance):

    def __init__(self, *args, **kwargs):
        tr.Instance.__init__(self, *args, **_none_allowed(kwargs))


class Unicode(tr.Unicode):

    def __init__(self, *args, **kwargs):
        tr.Unicode.__init__(self, *args, **_none_allowed(kwargs))


class Bool(tr.Bool):

    def __init__(self, *args, **kwargs):
        tr.Bool.__init__(self, *args, **_none_allowed(kwargs))


class Int(tr.Int):

    def __init__(self, *args, **kwargs):
        tr.Int.__init__(self, *args, **_none_allowed(kwargs))


class Float(tr.Float):
    """浮点数，赋值时转换为 float，例如 numpy.float64 或土层数组中的元素。"""

    def __init__(self, *args, **kwargs):
        tr.Float.__init__(self, *args, **_none_allowed(kwargs))

    def validate(self, obj, value):
        if value is None:
            return value
        try:
            return float(value)
        except (TypeError, ValueError):
            self.error(obj, value)


class LayerArray(tr.TraitType):
    """按土层排列的数值数组。

    赋值可以是任意数值序列，会被转换为 float 类型的一维 numpy 数组（复制一份）。
    默认值为 None，表示该数组尚未设置。
    """
    default_value = None
    info_text = "a sequence of per-layer float values"

    def __init__(self, *args, **kwargs):
        tr.TraitType.__init__(self, *args, **_none_allowed(kwargs))

    def validate(self, obj, value):
        try:
            arr = np.array(value, dtype=float)
        except (TypeError, ValueError):
            self.error(obj, value)
        if arr.ndim != 1:
            self.error(obj, value)
        return arr
