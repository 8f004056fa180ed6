# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import unittest
from datetime import date

from pydispatch import dispatcher

from ..base import VariableKiosk
from ..agromanager import AgroManager, PlantCalendar, TimedEventsDispatcher
from ..timer import Timer
from .. import signals
from .. import exceptions as exc


def agromanagement(**overrides):
    definition = {
        "StartDate": date(2000, 3, 1),
        "EndDate": date(2000, 7, 31),
        "PlantCalendar": {"sowing_date": date(2000, 3, 10), "population": 30., "depth": 30.,
                          "end_date": date(2000, 7, 20)},
        "TimedEvents": [{"event_signal": "biomass_removal", "name": "Cutting", "comment": None,
                         "events_table": [{date(2000, 6, 1): {"event_name": "cut"}}]}],
    }
    definition.update(overrides)
    return {"AgroManagement": definition}


class SignalRecorder(unittest.TestCase):
    """连接到 kiosk 发出的信号并记录收到的关键字参数"""
    recorded_signals = (signals.plant_sowing, signals.plant_ending, signals.biomass_removal,
                        signals.output, signals.terminate)

    def setUp(self):
        self.kiosk = VariableKiosk()
        self.received = []
        for signal in self.recorded_signals:
            dispatcher.connect(self._handler, signal, sender=self.kiosk)

    def tearDown(self):
        for signal in self.recorded_signals:
            dispatcher.disconnect(self._handler, signal, sender=self.kiosk)

    def _handler(self, signal, **kwargs):
        self.received.append((signal, kwargs))

    def signals_received(self):
        return [s for s, _ in self.received]


class TestAgroManager(SignalRecorder):

    def test_dates(self):
        agmt = AgroManager(self.kiosk, agromanagement())
        self.assertEqual(agmt.start_date, date(2000, 3, 1))
        self.assertEqual(agmt.end_date, date(2000, 7, 31))
        self.assertEqual(len(agmt.timed_event_dispatchers), 1)

    def test_plant_calendar_signals(self):
        agmt = AgroManager(self.kiosk, agromanagement())
        agmt(date(2000, 3, 9), None)
        self.assertEqual(self.received, [])
        agmt(date(2000, 3, 10), None)
        signal, kwargs = self.received[0]
        self.assertEqual(signal, signals.plant_sowing)
        self.assertEqual(kwargs["day"], date(2000, 3, 10))
        self.assertEqual(kwargs["population"], 30.)
        self.assertEqual(kwargs["depth"], 30.)
        self.assertTrue(agmt.plant_calendar.in_plant_cycle)

        agmt(date(2000, 7, 20), None)
        self.assertEqual(self.signals_received()[-1], signals.plant_ending)
        self.assertFalse(agmt.plant_calendar.in_plant_cycle)

    def test_timed_events(self):
        agmt = AgroManager(self.kiosk, agromanagement())
        agmt(date(2000, 6, 1), None)
        signal, kwargs = self.received[0]
        self.assertEqual(signal, signals.biomass_removal)
        self.assertEqual(kwargs["event_name"], "cut")
        self.assertEqual(kwargs["day"], date(2000, 6, 1))

    def test_without_plant_calendar(self):
        agmt = AgroManager(self.kiosk, agromanagement(PlantCalendar=None, TimedEvents=None))
        agmt(date(2000, 3, 10), None)
        self.assertIsNone(agmt.plant_calendar)
        self.assertEqual(self.received, [])

    def test_invalid_definitions(self):
        with self.assertRaises(exc.ConfigurationError):
            definition = agromanagement()
            del definition["AgroManagement"]["EndDate"]
            AgroManager(self.kiosk, definition)
        with self.assertRaises(exc.ConfigurationError):
            AgroManager(self.kiosk, agromanagement(EndDate=date(2000, 2, 1)))
        with self.assertRaises(exc.ConfigurationError):
            AgroManager(self.kiosk, agromanagement(StartDate="2000-03-01"))


class TestPlantCalendar(unittest.TestCase):

    def test_validate(self):
        kiosk = VariableKiosk()
        start, end = date(2000, 3, 1), date(2000, 7, 31)
        pc = PlantCalendar(kiosk, date(2000, 2, 1), 30., 30.)
        self.assertRaises(exc.ConfigurationError, pc.validate, start, end)
        pc = PlantCalendar(kiosk, date(2000, 4, 1), 30., 30., end_date=date(2000, 4, 1))
        self.assertRaises(exc.ConfigurationError, pc.validate, start, end)
        pc = PlantCalendar(kiosk, date(2000, 4, 1), 30., 30., end_date=date(2000, 8, 1))
        self.assertRaises(exc.ConfigurationError, pc.validate, start, end)
        pc = PlantCalendar(kiosk, date(2000, 4, 1), 30., 30.)
        pc.validate(start, end)


class TestTimedEventsDispatcher(unittest.TestCase):

    def test_unknown_signal(self):
        with self.assertRaises(exc.ConfigurationError):
            TimedEventsDispatcher(VariableKiosk(), "harvest_moon", "test", None, [])

    def test_duplicate_days(self):
        table = [{date(2000, 6, 1): {"event_name": "cut"}},
                 {date(2000, 6, 1): {"event_name": "graze"}}]
        with self.assertRaises(exc.ConfigurationError):
            TimedEventsDispatcher(VariableKiosk(), "biomass_removal", "test", None, table)

    def test_event_outside_period(self):
        table = [{date(2001, 6, 1): {"event_name": "cut"}}]
        te = TimedEventsDispatcher(VariableKiosk(), "biomass_removal", "test", None, table)
        self.assertRaises(exc.ConfigurationError, te.validate, date(2000, 1, 1), date(2000, 12, 31))


class TestTimer(SignalRecorder):

    def test_steps_and_termination(self):
        start, end = date(2000, 3, 1), date(2000, 3, 3)
        timer = Timer(self.kiosk, start, end, output_vars=["WLV"])
        day, delt = timer()
        self.assertEqual(day, start)
        self.assertEqual(delt, 1.)
        self.assertEqual(self.signals_received(), [signals.output])

        day, _ = timer()
        self.assertEqual(day, date(2000, 3, 2))
        self.assertNotIn(signals.terminate, self.signals_received())
        day, _ = timer()
        self.assertEqual(day, end)
        self.assertEqual(self.signals_received()[-1], signals.terminate)
        self.assertEqual(self.signals_received().count(signals.output), 3)

    def test_without_output(self):
        timer = Timer(self.kiosk, date(2000, 3, 1), date(2000, 3, 2))
        timer()
        self.assertEqual(self.received, [])


def suite():
    """ 该函数定义了本模块中所有测试 """
    suite = unittest.TestSuite()
    for test_class in (TestAgroManager, TestPlantCalendar, TestTimedEventsDispatcher, TestTimer):
        suite.addTests(unittest.TestLoader().loadTestsFromTestCase(test_class))
    return suite


if __name__ == '__main__':
    unittest.TextTestRunner(verbosity=2).run(suite())
