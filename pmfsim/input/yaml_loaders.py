# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import os

import yaml

from .. import exceptions as exc


def _read_yaml(fname, label):
    """读取 YAML 文件 fname，文件不存在或无法解析时抛出 PMFError。"""
    fname_fp = os.path.normpath(os.path.abspath(fname))
    if not os.path.exists(fname_fp):
        msg = "Cannot find %s file: %s" % (label, fname_fp)
        raise exc.PMFError(msg)

    with open(fname_fp, 'r', encoding='utf-8') as fp:
        try:
            r = yaml.safe_load(fp)
        except yaml.YAMLError as e:
            msg = "Failed parsing %s file %s: %s" % (label, fname_fp, e)
            raise exc.PMFError(msg)
    if not isinstance(r, dict):
        msg = "%s file %s should contain a mapping at the top level." % (label, fname_fp)
        raise exc.PMFError(msg)
    return r


class YAMLPlantDataProvider(dict):
    """读取按器官分节的植株参数（YAML 格式）。

    :param fname: 参数文件名

    文件的结构如下，函数型参数可以是常数、列表（按土层取值）或插值表::

        PlantParameters:
            Plant:
                Name: wheat
                CropType: wheat
                ZoneName: Field
                EmergenceDelay: 5
                CropCoefficient: 1.0
            Root:
                KNO3: 0.02
                RootFrontVelocity: 20.
                ...
            Leaf:
                ...
            Stem:
                ...
    """
    required_sections = ("Plant", "Leaf", "Stem", "Root")

    def __init__(self, fname):
        r = _read_yaml(fname, "plant parameter")
        if "PlantParameters" in r:
            r = r["PlantParameters"]

        missing = [s for s in self.required_sections if s not in r]
        if missing:
            msg = "Plant parameter file %s misses section(s): %s" % (fname, missing)
            raise exc.ParameterError(msg)
        dict.__init__(self, r)

    def __str__(self):
        return yaml.dump(dict(self), default_flow_style=False)


class YAMLSoilDataProvider(dict):
    """读取区域和土壤剖面（YAML 格式）。

    :param fname: 土壤文件名

    每个区域包含名称和逐层的土壤描述，SW、LL15 和 DUL 为体积含水率::

        Zones:
        -   Name: Field
            SoilLayers:
            -   {Thickness: 150., SW: 0.3, LL15: 0.1, DUL: 0.35, BD: 1.3,
                 NO3N: 10., NH4N: 1., LL: 0.1, KL: 0.06, XF: 1.0}
            -   ...
    """

    def __init__(self, fname):
        r = _read_yaml(fname, "soil")
        if not r.get("Zones"):
            msg = "Soil file %s should define at least one zone under 'Zones'." % fname
            raise exc.ConfigurationError(msg)
        dict.__init__(self, r)


class YAMLAgroManagementReader(dict):
    """读取农事管理文件（YAML 格式），格式见 `pmfsim.agromanager.AgroManager`。

    :param fname: 农事管理文件名
    """

    def __init__(self, fname):
        r = _read_yaml(fname, "agromanagement")
        try:
            dict.__init__(self, r['AgroManagement'])
        except KeyError:
            msg = "Agromanagement file %s has no 'AgroManagement' section." % fname
            raise exc.PMFError(msg)

    def __str__(self):
        return yaml.dump(dict(self), default_flow_style=False)
