# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""把植株参数和土壤参数组合为一个类字典对象。"""
import logging
from collections import Counter
from collections.abc import MutableMapping

from .. import exceptions as exc


class ParameterProvider(MutableMapping):
    """为植株参数和土壤参数提供统一的类字典接口，作用类似 ChainMap。

    :param plantdata: 植株参数。按器官分节，例如 ``{"Plant": {...}, "Root": {...},
        "Leaf": {...}, "Stem": {...}}``
    :param soildata: 土壤参数，其中 ``Zones`` 给出每个区域的土壤剖面描述

    器官参数通过带点的名称访问，例如 ``provider["Root.KNO3"]``，`for_organ()`
    返回某个器官的全部参数。`set_override()` 可以覆盖任意已存在的参数，这在做
    参数敏感性分析或校准时很有用::

        >>> pp = ParameterProvider(plantdata={"Root": {"KNO3": 0.02}}, soildata={"Zones": []})
        >>> pp.set_override("Root.KNO3", 0.04)
        >>> pp.for_organ("Root")["KNO3"]
        0.04
    """

    def __init__(self, plantdata=None, soildata=None):
        self._plantdata = plantdata if plantdata is not None else {}
        self._soildata = soildata if soildata is not None else {}
        self._override = {}
        self._test_uniqueness()

    @property
    def logger(self):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        return logging.getLogger(loggername)

    @property
    def plantdata(self):
        return self._plantdata

    @property
    def soildata(self):
        return self._soildata

    def for_organ(self, name):
        """返回器官 <name> 的参数字典，已覆盖的参数优先。"""
        try:
            values = dict(self._plantdata[name])
        except KeyError:
            msg = "No parameters found for organ '%s'." % name
            raise exc.ParameterError(msg)
        prefix = name + "."
        for key, value in self._override.items():
            if key.startswith(prefix):
                values[key[len(prefix):]] = value
        return values

    def set_override(self, varname, value, check=True):
        """覆盖参数 varname 的取值。

        check=True 时，varname 必须已经存在于植株或土壤参数中。
        """

        if check and varname not in self:
            msg = "Cannot override '%s', parameter does not already exist." % varname
            raise exc.ParameterError(msg)
        self._override[varname] = value

    def clear_override(self, varname=None):
        """移除参数 varname 的覆盖值，不带参数时移除所有覆盖值。"""

        if varname is None:
            self._override.clear()
        elif varname in self._override:
            self._override.pop(varname)
        else:
            msg = "Cannot clear varname '%s' from override" % varname
            raise exc.ParameterError(msg)

    def _test_uniqueness(self):
        """土壤参数与植株参数的名称不允许重复。"""
        parnames = list(self._plantdata.keys()) + list(self._soildata.keys())
        for parname, count in Counter(parnames).items():
            if count > 1:
                msg = "Duplicate parameter found: %s" % parname
                raise exc.ParameterError(msg)

    @property
    def _unique_parameters(self):
        names = set(self._override.keys())
        names.update(self._soildata.keys())
        for section, values in self._plantdata.items():
            names.add(section)
            if isinstance(values, dict):
                names.update("%s.%s" % (section, k) for k in values)
        return sorted(names)

    def __getitem__(self, key):
        if key in self._override:
            return self._override[key]
        section, sep, parname = key.partition(".")
        if sep:
            values = self._plantdata.get(section)
            if isinstance(values, dict) and parname in values:
                return values[parname]
            raise KeyError(key)
        for mapping in (self._soildata, self._plantdata):
            if key in mapping:
                return mapping[key]
        raise KeyError(key)

    def __contains__(self, key):
        try:
            self[key]
        except KeyError:
            return False
        return True

    def __str__(self):
        msg = "ParameterProvider providing %i parameters, %i parameters overridden: %s."
        return msg % (len(self), len(self._override), list(self._override.keys()))

    def __setitem__(self, key, value):
        """覆盖已存在的参数 key，等同于 set_override(key, value)。"""
        self.set_override(key, value)

    def __delitem__(self, key):
        """删除参数 key 的覆盖值，原始参数不能删除。"""
        if key in self._override:
            self._override.pop(key)
        elif key in self:
            msg = "Cannot delete default parameter: %s" % key
            raise exc.ParameterError(msg)
        else:
            raise KeyError(key)

    def __len__(self):
        return len(self._unique_parameters)

    def __iter__(self):
        return iter(self._unique_parameters)
