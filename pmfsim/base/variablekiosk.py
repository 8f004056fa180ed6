# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
from .. import exceptions as exc


class VariableKiosk(dict):
    """
    VariableKiosk 用于在一次模拟中注册和发布状态变量与速率变量。

    每个器官的状态/速率变量都会在 kiosk 中注册，从而保证变量名在整个模型中唯一
    （例如根系的 ``WRT`` 与叶片的 ``WLV``）。只有声明为 publish 的变量会把取值
    写入 kiosk，随后可以像字典一样读取，引擎也是从这里收集每日输出的。

    通常不需要直接调用 `register_variable()`、`deregister_variable()` 和
    `set_variable()`，`StatesTemplate` 和 `RatesTemplate` 会处理这些操作。

    示例::

        >>> from pmfsim.base import VariableKiosk
        >>> k = VariableKiosk()
        >>> k.register_variable(1, "RD", type="S", publish=True)
        >>> k.register_variable(2, "WUPT", type="R", publish=True)
        >>> k.set_variable(1, "RD", 310.)
        >>> k["RD"]
        310.0
        >>> k.set_variable(2, "RD", 0.)
        Traceback (most recent call last):
        ...
        pmfsim.exceptions.VariableKioskError: Unregistered object tried to set the value of variable 'RD': access denied.
    """

    def __init__(self):
        dict.__init__(self)
        self.registered_states = {}
        self.registered_rates = {}
        self.published_states = {}
        self.published_rates = {}

    def _tables(self, vartype):
        vartype = vartype.upper()
        if vartype == "S":
            return self.registered_states, self.published_states
        if vartype == "R":
            return self.registered_rates, self.published_rates
        raise exc.VariableKioskError("Variable type should be 'S'|'R'")

    def __setitem__(self, item, value):
        raise RuntimeError("See set_variable() for setting a variable.")

    def __getattr__(self, item):
        """已发布的变量也可以用属性方式读取，例如 'kiosk.RD'。"""
        try:
            return dict.__getitem__(self, item)
        except KeyError:
            raise AttributeError(item)

    def __str__(self):
        lines = ["Contents of VariableKiosk:"]
        for label, vartype in (("state", "S"), ("rate", "R")):
            registered, published = self._tables(vartype)
            lines.append(" * Registered %s variables: %i" % (label, len(registered)))
            lines.append(" * Published %s variables: %i with values:" % (label, len(published)))
            for varname in sorted(published):
                lines.append("  - variable %s, value: %s" % (varname, self.get(varname, "undefined")))
        return "\n".join(lines) + "\n"

    def register_variable(self, oid, varname, type, publish=False):
        """登记对象 oid 拥有的变量 varname。

        :param oid: states/rates 对象的 id()
        :param varname: 变量名，在整个模型中必须唯一
        :param type: "R"（速率）或 "S"（状态）
        :param publish: 是否在 kiosk 中发布该变量的值
        """
        if self.variable_exists(varname):
            raise exc.VariableKioskError("Duplicate state/rate variable '%s' encountered!" % varname)
        registered, published = self._tables(type)
        registered[varname] = oid
        if publish is True:
            published[varname] = oid

    def deregister_variable(self, oid, varname):
        """注销由 oid 拥有的变量 varname，同时移除其取值。"""
        vartype = "S" if varname in self.registered_states else "R"
        registered, published = self._tables(vartype)
        if varname not in registered:
            raise exc.VariableKioskError("Failed to deregister variable '%s'!" % varname)
        if registered[varname] != oid:
            raise exc.VariableKioskError("Wrong object tried to deregister variable '%s'." % varname)
        del registered[varname]
        published.pop(varname, None)
        self.pop(varname, None)

    def set_variable(self, oid, varname, value):
        """由拥有者 oid 设置已发布变量 varname 的值"""
        owner = self.published_rates.get(varname, self.published_states.get(varname))
        if owner is None:
            raise exc.VariableKioskError("Variable '%s' not published in VariableKiosk." % varname)
        if owner != oid:
            msg = "Unregistered object tried to set the value of variable '%s': access denied."
            raise exc.VariableKioskError(msg % varname)
        dict.__setitem__(self, varname, value)

    def variable_exists(self, varname):
        """变量已作为状态或速率登记时返回 True。"""
        return varname in self.registered_rates or varname in self.registered_states

    def flush_rates(self):
        """清空所有已发布速率变量的值。"""
        for key in self.published_rates:
            self.pop(key, None)

    def flush_states(self):
        """清空所有已发布状态变量的值。"""
        for key in self.published_states:
            self.pop(key, None)
