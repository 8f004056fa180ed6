# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""用于读取气象数据、植株/土壤参数和农事管理的工具。

包含以下数据提供者:
- YAMLPlantDataProvider 读取 YAML 格式的植株参数（按器官分节）
- YAMLSoilDataProvider 读取 YAML 格式的区域和土壤剖面
- YAMLAgroManagementReader 读取 YAML 格式的农事管理
- DataFrameWeatherDataProvider 从 pandas DataFrame 读取气象数据
- CSVWeatherDataProvider 读取 CSV 格式的气象数据
"""
from .yaml_loaders import YAMLPlantDataProvider, YAMLSoilDataProvider, YAMLAgroManagementReader
from .dataframe_weather import DataFrameWeatherDataProvider, CSVWeatherDataProvider
