# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
"""本模块定义 PMFSim 中使用的信号

农事管理（AgroManager）和计时器（Timer）通过信号通知引擎发生的事件，例如播种、
生物量移除、植株终结和模拟终止。信号通过 `_send_signal()` 发送，通过
`_connect_signal()` 注册处理器，底层使用 PyDispatcher_。发送信号时请只使用关键字参数。

注意：器官本身不订阅信号。引擎收到信号后按固定顺序直接调用器官的生命周期方法
（`on_sow`、`on_day_start`、`on_plant_end` 等）。

目前使用如下信号及其关键字参数：

**PLANT_SOWING**

 表示播种::

     self._send_signal(signal=signals.plant_sowing, day=<date>,
                       population=<float>, depth=<float>)

 * day: 当前日期
 * population: 种植密度（株/m2）
 * depth: 播种深度（mm）

**BIOMASS_REMOVAL**

 表示收割、刈割、放牧等生物量移除事件::

     self._send_signal(signal=signals.biomass_removal, day=<date>,
                       event_name=<string>, fractions=<dict>)

 * event_name: 事件名称，例如 'cut'、'graze'、'harvest'
 * fractions: 可选，按器官名给出的移除比例，例如
   ``{"Leaf": {"FractionLiveToRemove": 0.5}}``。未给出时使用器官的默认移除比例。

**PLANT_ENDING**

 表示植株生命周期结束，所有剩余生物量进入残体库::

     self._send_signal(signal=signals.plant_ending, day=<date>)

**TERMINATE**

 表示整个模拟应终止::

     self._send_signal(signal=signals.terminate)

**OUTPUT**

 表示需要保存当天的模型状态::

     self._send_signal(signal=signals.output)

.. _PyDispatcher: http://pydispatcher.sourceforge.net/
"""

plant_sowing = "PLANT_SOWING"
biomass_removal = "BIOMASS_REMOVAL"
plant_ending = "PLANT_ENDING"
terminate = "TERMINATE"
output = "OUTPUT"
