# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""农事管理：播种、植株终结和按日期发生的生物量移除事件。

可用的类：

  * PlantCalendar: 在播种日发送 PLANT_SOWING，在终结日发送 PLANT_ENDING
  * TimedEventsDispatcher: 在给定日期发送事件信号（例如 BIOMASS_REMOVAL）
  * AgroManager: 组合以上两者，并给出模拟的起止日期
"""
from datetime import date
import logging
from collections import Counter

from .base import DispatcherObject, VariableKiosk, AncillaryObject
from .traitlets import HasTraits, Float, Instance, List, Unicode, Bool
from . import signals
from . import exceptions as exc


def check_date_range(day, start, end):
    """如果 start <= day <= end 则返回 True"""
    return start <= day <= end


class PlantCalendar(HasTraits, DispatcherObject):
    """植株的播种与终结日期。

    :param kiosk: VariableKiosk 实例
    :param sowing_date: 播种日期
    :param population: 种植密度（plants/m2）
    :param depth: 播种深度（mm）
    :param end_date: 植株终结日期，可以为 None（植株一直生长到模拟结束）
    """
    sowing_date = Instance(date)
    end_date = Instance(date, allow_none=True)
    population = Float()
    depth = Float()
    in_plant_cycle = Bool(False)

    kiosk = Instance(VariableKiosk)
    logger = Instance(logging.Logger)

    def __init__(self, kiosk, sowing_date, population, depth, end_date=None):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        self.logger = logging.getLogger(loggername)
        self.kiosk = kiosk
        self.sowing_date = sowing_date
        self.population = population
        self.depth = depth
        self.end_date = end_date

    def validate(self, start_date, end_date):
        """检查播种和终结日期是否位于模拟期内且顺序正确。"""
        if not check_date_range(self.sowing_date, start_date, end_date):
            msg = "Sowing date (%s) not within simulation period (%s - %s)." % \
                  (self.sowing_date, start_date, end_date)
            raise exc.ConfigurationError(msg)
        if self.end_date is not None:
            if self.end_date <= self.sowing_date:
                msg = "Plant end date (%s) before or equal to sowing date (%s)." % \
                      (self.end_date, self.sowing_date)
                raise exc.ConfigurationError(msg)
            if self.end_date > end_date:
                msg = "Plant end date (%s) after end of simulation period (%s)." % \
                      (self.end_date, end_date)
                raise exc.ConfigurationError(msg)

    def __call__(self, day):
        if day == self.sowing_date:
            self.in_plant_cycle = True
            msg = "Sowing on %s with population %.1f at depth %.1f mm" % \
                  (day, self.population, self.depth)
            self.logger.info(msg)
            self._send_signal(signal=signals.plant_sowing, day=day,
                              population=self.population, depth=self.depth)

        if self.in_plant_cycle and day == self.end_date:
            self.in_plant_cycle = False
            self._send_signal(signal=signals.plant_ending, day=day)


class TimedEventsDispatcher(HasTraits, DispatcherObject):
    """在给定日期分发事件信号。

    以 YAML 形式定义的例子::

        TimedEvents:
        -   event_signal: biomass_removal
            name: 刈割
            comment: 刈割叶片和茎
            events_table:
            - 2000-05-01: {event_name: cut}
            - 2000-06-15: {event_name: cut, fractions: {Leaf: {FractionLiveToRemove: 0.8}}}

    events_table 中每一项只包含一个日期，值为随信号分发的关键字参数。
    """
    event_signal = None
    events_table = List()
    days_with_events = Instance(Counter)
    kiosk = Instance(VariableKiosk)
    logger = Instance(logging.Logger)
    name = Unicode()
    comment = Unicode()

    def __init__(self, kiosk, event_signal, name, comment, events_table):
        loggername = "%s.%s" % (self.__class__.__module__,
                                self.__class__.__name__)
        self.logger = logging.getLogger(loggername)

        self.kiosk = kiosk
        self.events_table = events_table
        self.name = name
        self.comment = comment if comment is not None else ""

        if not hasattr(signals, event_signal):
            msg = "Signal '%s' not defined in pmfsim.signals module."
            raise exc.ConfigurationError(msg % event_signal)
        self.event_signal = getattr(signals, event_signal)

        self.days_with_events = Counter()
        for ev in self.events_table:
            self.days_with_events.update(ev.keys())

        multi_days = [day for day, count in self.days_with_events.items() if count > 1]
        if multi_days:
            msg = "Found days with more than 1 event for events table '%s' on days: %s"
            raise exc.ConfigurationError(msg % (self.name, multi_days))

    def validate(self, start_date, end_date):
        for event in self.events_table:
            day = list(event.keys())[0]
            if not check_date_range(day, start_date, end_date):
                msg = "Timed event at day %s not in simulation period (%s - %s)" % \
                      (day, start_date, end_date)
                raise exc.ConfigurationError(msg)

    def __call__(self, day):
        if day not in self.days_with_events:
            return

        for event in self.events_table:
            if day in event:
                msg = "Time event dispatched from '%s' at day %s" % (self.name, day)
                self.logger.info(msg)
                kwargs = event[day] if event[day] is not None else {}
                self._send_signal(signal=self.event_signal, day=day, **kwargs)


class AgroManager(AncillaryObject):
    """植株的农事管理。

    农事管理定义由模拟起止日期、一个可选的植株日历以及零个或多个定时事件组成::

        AgroManagement:
            StartDate: 2000-01-01
            EndDate: 2000-08-31
            PlantCalendar:
                sowing_date: 2000-04-01
                population: 30.
                depth: 30.
                end_date: 2000-08-15
            TimedEvents:
            -   event_signal: biomass_removal
                name: 刈割
                comment:
                events_table:
                - 2000-06-15: {event_name: cut}

    到达 EndDate 时由计时器发送 TERMINATE 信号。
    """
    _start_date = Instance(date)
    _end_date = Instance(date)
    plant_calendar = Instance(PlantCalendar, allow_none=True)
    timed_event_dispatchers = List()

    def initialize(self, kiosk, agromanagement):
        """
        :param kiosk: VariableKiosk 实例
        :param agromanagement: 农事管理定义，见上面的 YAML 示例
        """
        self.kiosk = kiosk
        self.timed_event_dispatchers = []

        if "AgroManagement" in agromanagement:
            agromanagement = agromanagement["AgroManagement"]

        try:
            start_date = agromanagement["StartDate"]
            end_date = agromanagement["EndDate"]
        except KeyError as e:
            msg = "Agromanagement definition without %s." % e
            raise exc.ConfigurationError(msg)
        if not isinstance(start_date, date) or not isinstance(end_date, date):
            msg = "StartDate and EndDate must be given as dates."
            raise exc.ConfigurationError(msg)
        if end_date <= start_date:
            msg = "EndDate (%s) before or equal to StartDate (%s)." % (end_date, start_date)
            raise exc.ConfigurationError(msg)
        self._start_date = start_date
        self._end_date = end_date

        pc_def = agromanagement.get("PlantCalendar")
        if pc_def is not None:
            self.plant_calendar = PlantCalendar(kiosk, **pc_def)
            self.plant_calendar.validate(self._start_date, self._end_date)

        te_def = agromanagement.get("TimedEvents")
        if te_def is not None:
            for ev_def in te_def:
                te = TimedEventsDispatcher(kiosk, **ev_def)
                te.validate(self._start_date, self._end_date)
                self.timed_event_dispatchers.append(te)

    @property
    def start_date(self):
        return self._start_date

    @property
    def end_date(self):
        return self._end_date

    def __call__(self, day, drv):
        """执行当天的植株日历和定时事件。"""
        if self.plant_calendar is not None:
            self.plant_calendar(day)

        for ev_dsp in self.timed_event_dispatchers:
            ev_dsp(day)
