# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""参数、状态变量和速率变量的容器。

状态和速率容器在创建时把自己的全部变量登记到 VariableKiosk，其中 `publish`
列出的变量对其他器官可见，赋值时通过 traitlets 的 observer 自动写入 kiosk。
容器在 `initialize` 之外是锁定的，只能在 `prepare_states`/`prepare_rates`
装饰的方法中赋值。
"""
import logging

from ..traitlets import (HasTraits, Float, Int, Instance, Bool, TraitError)
from ..functions import ModelFunction
from .. import exceptions as exc
from .variablekiosk import VariableKiosk


def _is_internal(name):
    # traitlets 自身的属性以 "trait" 开头
    return name.startswith("_") or name.startswith("trait")


class ParamTemplate(HasTraits):
    """器官参数的模板，由实际定义参数的类继承。

    参数可以是普通 trait（Float、Unicode 等），也可以是 `FunctionTrait`，
    后者把数值、分层列表或 XY 表转换为模型函数。声明为
    ``FunctionTrait(optional=True)`` 的参数可以省略或取 None，此时值为 None。

    示例::

        >>> from pmfsim.base import ParamTemplate
        >>> from pmfsim.functions import FunctionTrait
        >>>
        >>> class Parameters(ParamTemplate):
        ...     KLModifier = FunctionTrait()
        ...     DMReallocationFactor = FunctionTrait(optional=True)
        ...
        >>> p = Parameters({"KLModifier": [1.0, 0.9, 0.5]})
        >>> p.KLModifier(layer=1)
        0.9
        >>> p.DMReallocationFactor is None
        True
        >>> Parameters({})
        Traceback (most recent call last):
        ...
        pmfsim.exceptions.ParameterError: Value for parameter KLModifier missing.
    """

    def __init__(self, parvalues):
        HasTraits.__init__(self)
        for parname, trait in self.traits().items():
            if _is_internal(parname):
                continue
            optional = getattr(trait, "optional", False)
            value = parvalues.get(parname)
            if value is None:
                if optional:
                    continue
                if parname not in parvalues:
                    raise exc.ParameterError("Value for parameter %s missing." % parname)
            try:
                setattr(self, parname, value)
            except TraitError as e:
                msg = "Invalid value for parameter %s: %s" % (parname, e)
                raise exc.ParameterError(msg)

    def bind(self, context):
        """把所有函数参数绑定到模拟上下文"""
        for parname in self.trait_names():
            value = getattr(self, parname)
            if isinstance(value, ModelFunction):
                value.bind(context)

    def __setattr__(self, attr, value):
        if attr.startswith("_") or hasattr(self, attr):
            HasTraits.__setattr__(self, attr, value)
        else:
            msg = "Assignment to non-existing attribute '%s' prevented." % attr
            raise AttributeError(msg)


def check_publish(publish):
    """把 publish 关键字（None、字符串或字符串列表）转换为集合。"""
    if publish is None:
        return set()
    if isinstance(publish, str):
        return {publish}
    if isinstance(publish, (list, tuple, set)):
        return set(publish)
    raise RuntimeError("The publish keyword should specify a string or a list of strings")


class _VariableContainer(HasTraits):
    """StatesTemplate 和 RatesTemplate 共用的部分：登记、发布、锁定和注销。"""

    _kiosk = Instance(VariableKiosk)
    _valid_vars = Instance(set)
    _locked = Bool(False)
    _vartype = None

    def __init__(self, kiosk=None, publish=None):
        HasTraits.__init__(self)
        if not isinstance(kiosk, VariableKiosk):
            msg = "Variable Kiosk must be provided when instantiating rate or state variables."
            raise RuntimeError(msg)
        self._kiosk = kiosk
        self._valid_vars = {name for name in self.trait_names() if not _is_internal(name)}

        publish = check_publish(publish)
        unknown = publish - self._valid_vars
        if unknown:
            msg = "Unknown variable(s) specified with the publish keyword: %s" % sorted(unknown)
            raise exc.PMFError(msg)

        for name in self._valid_vars:
            kiosk.register_variable(id(self), name, type=self._vartype,
                                    publish=name in publish)
        if publish:
            self.observe(self._update_kiosk, names=sorted(publish))

    def __setattr__(self, attr, value):
        # '_' 开头的属性必须放行，traitlets 内部也通过 __setattr__ 赋值
        if attr.startswith("_"):
            HasTraits.__setattr__(self, attr, value)
        elif self._valid_vars is not None and attr in self._valid_vars:
            if self._locked:
                msg = "Assignment to locked attribute '%s' prevented." % attr
                raise AttributeError(msg)
            HasTraits.__setattr__(self, attr, value)
        elif hasattr(self, attr):
            # traitlets 在 HasTraits.__init__ 中会临时替换 notify_change，
            # 此时 _valid_vars 尚未设置
            HasTraits.__setattr__(self, attr, value)
        else:
            msg = "Assignment to non-existing attribute '%s' prevented." % attr
            raise AttributeError(msg)

    def _update_kiosk(self, change):
        self._kiosk.set_variable(id(self), change["name"], change["new"])

    def _published_here(self):
        if self._vartype == "S":
            owners = self._kiosk.published_states
        else:
            owners = self._kiosk.published_rates
        return [name for name in self._valid_vars if owners.get(name) == id(self)]

    def _sync_kiosk(self):
        # observer 只在取值变化时触发，因此 flush 之后需要显式写回
        for name in self._published_here():
            self._kiosk.set_variable(id(self), name, getattr(self, name))

    def unlock(self):
        "解锁此类的属性。"
        self._locked = False

    def lock(self):
        "锁定此类的属性。"
        self._locked = True

    def _delete(self):
        """从 kiosk 注销所有变量。需要显式调用。"""
        for name in self._valid_vars:
            self._kiosk.deregister_variable(id(self), name)

    @property
    def logger(self):
        return logging.getLogger("%s.%s" % (self.__class__.__module__, self.__class__.__name__))


class StatesTemplate(_VariableContainer):
    """状态变量容器。

    :param kiosk: VariableKiosk 实例
    :param publish: 需要在 kiosk 中发布的变量名列表

    每个状态变量都必须以关键字参数给出初始值，例如::

        class StateVariables(StatesTemplate):
            RD = Float()
            WRT = Float()

        s = StateVariables(kiosk, publish=["RD"], RD=0., WRT=0.)
    """

    _vartype = "S"

    def __init__(self, kiosk=None, publish=None, **initial):
        _VariableContainer.__init__(self, kiosk, publish)

        missing = sorted(self._valid_vars - set(initial))
        if missing:
            raise exc.PMFError("Initial value for state %s missing." % missing[0])
        for name in self._valid_vars:
            setattr(self, name, initial.pop(name))
        if initial:
            msg = "Initial value given for unknown state variable(s): %s" % sorted(initial)
            self.logger.warning(msg)

        self._sync_kiosk()
        self.lock()

    def touch(self):
        """把已发布状态变量的当前值重新写入 kiosk（kiosk 在每日积分前会被清空）。"""
        self._sync_kiosk()


class RatesTemplate(_VariableContainer):
    """速率变量容器。

    无需给出初始值：Float 和 Int 变量初始为零，Bool 变量初始为 False，
    `zerofy()` 每天把它们重置到这些值。其他类型的变量不被重置。
    """

    _zero_values = Instance(dict)
    _vartype = "R"

    def __init__(self, kiosk=None, publish=None):
        _VariableContainer.__init__(self, kiosk, publish)

        zeros = {Float: 0., Int: 0, Bool: False}
        self._zero_values = {}
        for name, trait in self.traits().items():
            if name not in self._valid_vars:
                continue
            if trait.__class__ in zeros:
                self._zero_values[name] = zeros[trait.__class__]
            else:
                msg = ("Rate variable '%s' not of type Float, Bool or Int and will "
                       "not be treated by zerofy().") % name
                self.logger.info(msg)

        self.zerofy()
        self.lock()

    def zerofy(self):
        """把所有 Float/Int 速率置零，Bool 速率置 False，并同步到 kiosk。"""
        self._trait_values.update(self._zero_values)
        self._sync_kiosk()
