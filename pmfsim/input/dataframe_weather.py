# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import os

import pandas as pd

from ..base import WeatherDataContainer, WeatherDataProvider
from .. import exceptions as exc


class DataFrameWeatherDataProvider(WeatherDataProvider):
    """从 pandas DataFrame 读取逐日气象数据。

    :param df: DataFrame，包含 DAY 列（或以日期为索引）以及 IRRAD、TMIN、TMAX、RAIN、ET0 列，
        可选 TEMP、VAP、WIND 列
    :param latitude: 纬度（十进制度）
    :param longitude: 经度（十进制度）
    :param elevation: 海拔（m）
    :param description: 可选的描述

    单位见 `WeatherDataContainer`：IRRAD 为 J/m2/day，RAIN 和 ET0 为 mm/day。
    缺少必需要素的行会被跳过并记录警告::

        >>> df = pd.DataFrame({"DAY": pd.date_range("2000-01-01", periods=3),
        ...                    "IRRAD": 15e6, "TMIN": 5., "TMAX": 15., "RAIN": 0., "ET0": 3.})
        >>> wdp = DataFrameWeatherDataProvider(df, latitude=52., longitude=5., elevation=10.)
        >>> wdp(datetime.date(2000, 1, 2)).TMAX
        15.0
    """

    def __init__(self, df, latitude, longitude, elevation, description=None):
        WeatherDataProvider.__init__(self)
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.elevation = float(elevation)
        self.description = description if description is not None else \
            ["Weather data from DataFrame"]

        if "DAY" not in df.columns:
            df = df.rename_axis("DAY").reset_index()
        missing = [v for v in WeatherDataContainer.required if v not in df.columns]
        if missing:
            msg = "Weather data misses column(s): %s" % missing
            raise exc.WeatherDataProviderError(msg)
        self._read_observations(df)

    def _read_observations(self, df):
        columns = WeatherDataContainer.required + \
            [v for v in WeatherDataContainer.optional if v in df.columns]
        days = pd.to_datetime(df["DAY"]).dt.date
        for i, (day, (_, row)) in enumerate(zip(days, df[columns].iterrows())):
            if row[WeatherDataContainer.required].isnull().any():
                msg = "Missing weather element(s) for day '%s' at row %i. Skipping ..." % (day, i)
                self.logger.warning(msg)
                continue
            rec = {k: float(v) for k, v in row.items() if pd.notnull(v)}
            wdc = WeatherDataContainer(LAT=self.latitude, LON=self.longitude,
                                       ELEV=self.elevation, DAY=day, **rec)
            self._store_WeatherDataContainer(wdc, day)


class CSVWeatherDataProvider(DataFrameWeatherDataProvider):
    """从 CSV 文件读取逐日气象数据，列名与 `DataFrameWeatherDataProvider` 相同。

    :param csv_fname: CSV 文件名
    :param latitude: 纬度（十进制度）
    :param longitude: 经度（十进制度）
    :param elevation: 海拔（m）
    :param delimiter: 分隔符，默认为 ','
    :param dateformat: DAY 列的日期格式，默认为 '%Y%m%d'
    """

    def __init__(self, csv_fname, latitude, longitude, elevation, delimiter=',',
                 dateformat='%Y%m%d'):
        fp_csv_fname = os.path.abspath(csv_fname)
        if not os.path.exists(fp_csv_fname):
            msg = "Cannot find weather file at: %s" % fp_csv_fname
            raise exc.WeatherDataProviderError(msg)

        df = pd.read_csv(fp_csv_fname, delimiter=delimiter, dtype={"DAY": str})
        df["DAY"] = pd.to_datetime(df["DAY"], format=dateformat)
        DataFrameWeatherDataProvider.__init__(self, df, latitude, longitude, elevation,
                                              description=["Weather data from: %s" % fp_csv_fname])
