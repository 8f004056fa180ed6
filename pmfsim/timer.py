# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
import datetime

from .base import AncillaryObject
from .traitlets import Instance, Bool, Int
from . import signals

ONE_DAY = datetime.timedelta(days=1)


class Timer(AncillaryObject):
    """模型时钟，固定步长为一天。

    :param kiosk: 本次模拟的 VariableKiosk
    :param start_date: 模拟起始日期，首次调用返回该日期
    :param end_date: 模拟结束日期，到达时发送 TERMINATE 信号
    :param output_vars: 输出变量列表，为空时不发送 OUTPUT 信号
    :param interval_days: 发送 OUTPUT 信号的间隔（天）

    每次调用返回 (当前日期, 步长)::

        timer = Timer(kiosk, start_date, end_date)
        day, delt = timer()
    """

    start_date = Instance(datetime.date)
    end_date = Instance(datetime.date)
    current_date = Instance(datetime.date)
    interval_days = Int(1)
    generate_output = Bool(False)
    day_counter = Int(0)

    def initialize(self, kiosk, start_date, end_date, output_vars=None, interval_days=1):
        self.start_date = start_date
        self.end_date = end_date
        self.generate_output = bool(output_vars)
        self.interval_days = interval_days

    def __call__(self):
        if self.current_date is None:
            self.current_date = self.start_date
        else:
            self.current_date += ONE_DAY
            self.day_counter += 1
        self.logger.debug("Model time: %s" % self.current_date)

        if self.generate_output and self.day_counter % self.interval_days == 0:
            self._send_signal(signal=signals.output)

        if self.current_date >= self.end_date:
            self.logger.info("Reached end of simulation period as specified by EndDate.")
            self._send_signal(signal=signals.terminate)

        return self.current_date, float(ONE_DAY.days)
