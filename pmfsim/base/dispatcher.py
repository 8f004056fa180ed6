# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl)，2024年3月
from pydispatch import dispatcher


class DispatcherObject(object):
    """提供 _send_signal() 和 _connect_signal() 的混入类，仅用于继承。

    信号的发送者固定为对象所属的 VariableKiosk，因此同一进程中的多个模拟实例
    （各自拥有独立的 kiosk）不会收到彼此的信号。
    """

    def _send_signal(self, signal, *args, **kwargs):
        """以本对象的 kiosk 为发送者发送 <signal>，附加参数原样传给 dispatcher.send()。"""

        self.logger.debug("Sent signal: %s" % signal)
        dispatcher.send(signal=signal, sender=self.kiosk, *args, **kwargs)

    def _connect_signal(self, handler, signal):
        """把 handler 连接到 signal，只响应由本对象的 kiosk 发出的信号。"""

        dispatcher.connect(handler, signal, sender=self.kiosk)
        self.logger.debug("Connected handler '%s' to signal '%s'." % (handler, signal))
