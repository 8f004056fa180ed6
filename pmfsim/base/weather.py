# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""逐日气象数据：单日的容器和按日期检索的提供者基类。"""
import logging
import datetime as dt

from .. import exceptions as exc
from ..settings import settings


class WeatherDataContainer(object):
    """一天的气象要素，关键字即属性名，例如 ``TMAX=15`` 设置属性 ``TMAX``。

    必需的关键字：

    :keyword LAT: 纬度（十进制度）
    :keyword LON: 经度（十进制度）
    :keyword ELEV: 海拔（m）
    :keyword DAY: 观测日期（datetime.date）
    :keyword IRRAD: 入射全球辐射（J/m2/day）
    :keyword TMIN: 日最低气温（摄氏度）
    :keyword TMAX: 日最高气温（摄氏度）
    :keyword RAIN: 日降水量（mm/day）
    :keyword ET0: 参考作物蒸散量（mm/day），植株的需水量由它乘以作物系数和叶片覆盖度得到

    可选关键字：

    :keyword TEMP: 日平均气温（摄氏度），缺省时由引擎按 (TMAX+TMIN)/2 计算
    :keyword VAP: 日平均水汽压（hPa）
    :keyword WIND: 2m 高度日平均风速（m/sec）

    必需要素缺失或不是数值时只记录警告；当 settings.METEO_RANGE_CHECKS 为真时，
    超出 `ranges` 的数值会引发 WeatherDataProviderError。
    """
    sitevar = ["LAT", "LON", "ELEV"]
    required = ["IRRAD", "TMIN", "TMAX", "RAIN", "ET0"]
    optional = ["TEMP", "VAP", "WIND"]
    __slots__ = sitevar + required + optional + ["DAY"]

    # 单位和允许范围
    units = {"LAT": "Degrees", "LON": "Degrees", "ELEV": "m",
             "IRRAD": "J/m2/day", "TMIN": "Celsius", "TMAX": "Celsius", "RAIN": "mm/day",
             "ET0": "mm/day", "TEMP": "Celsius", "VAP": "hPa", "WIND": "m/sec"}
    ranges = {"LAT": (-90., 90.), "LON": (-180., 180.), "ELEV": (-300, 6000),
              "IRRAD": (0., 40e6), "TMIN": (-50., 60.), "TMAX": (-50., 60.), "RAIN": (0, 250),
              "ET0": (0., 25.), "TEMP": (-50., 60.), "VAP": (0.06, 199.3), "WIND": (0., 100.)}

    def __init__(self, *args, **kwargs):
        if args:
            msg = "WeatherDataContainer accepts weather variables as keywords only, got '%s'."
            raise exc.WeatherDataProviderError(msg % (args,))

        for varname in self.sitevar:
            try:
                setattr(self, varname, float(kwargs.pop(varname)))
            except (KeyError, ValueError, TypeError) as e:
                msg = "Site parameter '%s' missing or invalid when building WeatherDataContainer: %s"
                raise exc.WeatherDataProviderError(msg % (varname, e))

        try:
            self.DAY = kwargs.pop("DAY")
        except KeyError:
            msg = "Date of observations 'DAY' not provided when building WeatherDataContainer."
            raise exc.WeatherDataProviderError(msg)

        for varname in self.required + self.optional:
            value = kwargs.pop(varname, None)
            if value is None and varname in self.optional:
                continue
            self._set_numeric(varname, value)

        if kwargs:
            logging.warning("WeatherDataContainer: unknown keywords '%s' are ignored!",
                            sorted(kwargs))

    def _set_numeric(self, varname, value):
        try:
            value = float(value)
        except (ValueError, TypeError):
            logging.warning("%s: Weather attribute '%s' missing or invalid numerical value: %s",
                            self.DAY, varname, value)
            return
        setattr(self, varname, value)

    def __setattr__(self, key, value):
        if settings.METEO_RANGE_CHECKS and key in self.ranges:
            vmin, vmax = self.ranges[key]
            if not vmin <= value <= vmax:
                msg = "Value (%s) for meteo variable '%s' outside allowed range (%s, %s)."
                raise exc.WeatherDataProviderError(msg % (value, key, vmin, vmax))
        object.__setattr__(self, key, value)

    def __str__(self):
        lines = ["Weather data for %s (DAY)" % self.DAY]
        for varname in self.required + self.optional:
            value = getattr(self, varname, None)
            if value is not None:
                lines.append("%5s: %12.2f %9s" % (varname, value, self.units[varname]))
            elif varname in self.required:
                lines.append("%5s: element missing!" % varname)
        lines.append("Site (LAT/LON/ELEV): %.2f, %.2f, %.1f m" % (self.LAT, self.LON, self.ELEV))
        return "\n".join(lines) + "\n"

    def add_variable(self, varname, value, unit):
        """添加属性 <varname>，<unit> 只用于打印。"""
        self.units.setdefault(varname, unit)
        setattr(self, varname, value)


class WeatherDataProvider(object):
    """气象数据提供者的基类。

    子类通过 `_store_WeatherDataContainer` 按日期存放 `WeatherDataContainer`，
    ``provider(day)`` 取回当天的数据，没有数据时引发 WeatherDataProviderError。
    """

    longitude = None
    latitude = None
    elevation = None
    description = []

    def __init__(self):
        self.store = {}

    @property
    def logger(self):
        return logging.getLogger("%s.%s" % (self.__class__.__module__, self.__class__.__name__))

    @property
    def first_date(self):
        return min(self.store) if self.store else None

    @property
    def last_date(self):
        return max(self.store) if self.store else None

    @property
    def missing(self):
        """首末日期之间缺少数据的天数。"""
        if not self.store:
            return 0
        return (self.last_date - self.first_date).days + 1 - len(self.store)

    _date_formats = {7: "%Y%j", 8: "%Y%m%d", 10: "%Y-%m-%d"}

    def check_keydate(self, key):
        """把 date、datetime 或 'YYYYMMDD'/'YYYYDDD'/'YYYY-MM-DD' 转换为 date 对象。"""
        if isinstance(key, dt.datetime):
            return key.date()
        if isinstance(key, dt.date):
            return key
        if isinstance(key, (str, int)):
            skey = str(key).strip()
            if len(skey) in self._date_formats:
                return dt.datetime.strptime(skey, self._date_formats[len(skey)]).date()
        raise KeyError("Key for WeatherDataProvider not recognized as date: %s" % key)

    def _store_WeatherDataContainer(self, wdc, keydate):
        self.store[self.check_keydate(keydate)] = wdc

    def export(self):
        """以字典列表导出全部气象数据，可直接转换为 pandas DataFrame。"""
        rows = []
        for day in sorted(self.store):
            wdc = self.store[day]
            rows.append({key: getattr(wdc, key) for key in wdc.__slots__ if hasattr(wdc, key)})
        return rows

    def __call__(self, day):
        keydate = self.check_keydate(day)
        self.logger.debug("Retrieving weather data for day %s" % keydate)
        if keydate not in self.store:
            raise exc.WeatherDataProviderError("No weather data for %s." % keydate)
        return self.store[keydate]

    def __str__(self):
        description = self.description
        if isinstance(description, str):
            description = [description]
        lines = ["Weather data provided by: %s" % self.__class__.__name__,
                 "--------Description---------"]
        lines.extend(str(line) for line in description)
        lines.append("Data available for %s - %s" % (self.first_date, self.last_date))
        return "\n".join(lines) + "\n"
