# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""PMFSim 的杂项工具
"""
import os
import tempfile
import logging

import numpy as np
import dotmap


def limit(vmin, vmax, v):
    """将v限定在最小值和最大值之间"""
    if vmin > vmax:
        raise RuntimeError("Min value (%f) larger than max (%f)" % (vmin, vmax))
    return min(max(v, vmin), vmax)


def safe_divide(numerator, denominator, default=0.0):
    """分母为零时返回 default，否则返回 numerator/denominator"""
    if denominator == 0.:
        return default
    return numerator / denominator


class Afgen(object):
    """按 XY 值对线性插值的表函数，超出表范围时取首尾的 Y 值。

    :param tbl_xy: [x1, y1, x2, y2, ...]，X 值必须严格递增

    例子::

        >>> f = Afgen([0, 0, 1, 1, 5, 10])
        >>> f(0.5)
        0.5
        >>> f(1.5)
        2.125
        >>> f(6)
        10.0
    """

    def __init__(self, tbl_xy):
        if len(tbl_xy) < 2 or len(tbl_xy) % 2 != 0:
            msg = "AFGEN table should contain an even number of values: %s" % tbl_xy
            raise ValueError(msg)
        xy = np.asarray(tbl_xy, dtype=float).reshape(-1, 2)
        self.x_list = xy[:, 0]
        self.y_list = xy[:, 1]
        if np.any(np.diff(self.x_list) <= 0):
            msg = "X values for AFGEN input list not strictly ascending: %s" % list(self.x_list)
            raise ValueError(msg)

    def __call__(self, x):
        return float(np.interp(x, self.x_list, self.y_list))


def get_user_home():
    """返回用户主目录；没有可用的主目录时（例如系统服务账户）返回临时目录。"""
    user_home = os.path.expanduser("~")
    if user_home == "~" or not os.access(user_home, os.W_OK):
        logging.getLogger("pmfsim").warning(
            "No writable home directory, using system temp directory for PMFSim settings.")
        user_home = tempfile.gettempdir()
    return user_home


class DotMap(dotmap.DotMap):
    """关闭 _dynamic 的 DotMap：访问不存在的键会引发 KeyError，而不是生成空的子 DotMap。"""

    def __init__(self, *args, **kwargs):
        kwargs["_dynamic"] = False
        dotmap.DotMap.__init__(self, *args, **kwargs)
