# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import os
import copy
import unittest
import datetime

from ..engine import Engine
from ..base import ParameterProvider
from ..input import YAMLPlantDataProvider, YAMLSoilDataProvider, YAMLAgroManagementReader, \
    DataFrameWeatherDataProvider
from .. import exceptions as exc
from .test_data import test_data_dir, make_weather_frame, soil_description


def load_inputs():
    plantdata = YAMLPlantDataProvider(os.path.join(test_data_dir, "plant.yaml"))
    soildata = YAMLSoilDataProvider(os.path.join(test_data_dir, "soil.yaml"))
    agro = YAMLAgroManagementReader(os.path.join(test_data_dir, "agromanagement.yaml"))
    # 低蒸散需求，保证整个生长期内水分充足
    weather = DataFrameWeatherDataProvider(make_weather_frame("2000-01-01", "2000-12-31", ET0=1.),
                                           52., 5., 10.)
    return dict(plantdata), dict(soildata), dict(agro), weather


class TestEngine(unittest.TestCase):
    sowing_date = datetime.date(2000, 3, 10)
    cutting_date = datetime.date(2000, 6, 1)
    end_date = datetime.date(2000, 7, 20)

    @classmethod
    def setUpClass(cls):
        plantdata, soildata, agro, weather = load_inputs()
        params = ParameterProvider(plantdata=plantdata, soildata=soildata)
        cls.engine = Engine(params, weather, agro)
        cls.engine.run_till_terminate()
        cls.output = cls.engine.get_output()

    def _values(self, varname, start, end):
        return [r[varname] for r in self.output if start <= r["day"] < end]

    def test_output_length(self):
        self.assertEqual(len(self.output), 153)
        self.assertEqual(self.output[0]["day"], datetime.date(2000, 3, 1))
        self.assertEqual(self.output[-1]["day"], datetime.date(2000, 7, 31))
        self.assertTrue(self.engine.flag_terminate)

    def test_before_sowing(self):
        self.assertIsNone(self.output[0]["WRT"])
        self.assertIsNone(self.output[0]["WSTRESS"])

    def test_sowing(self):
        row = self.output[9]
        self.assertEqual(row["day"], self.sowing_date)
        self.assertTrue(row["WRT"] > 0.)
        self.assertAlmostEqual(row["WLV"], 0.1 * 30.)
        self.assertAlmostEqual(row["RD"], 30.)

    def test_root_depth_never_decreases(self):
        depths = self._values("RD", self.sowing_date, self.end_date)
        self.assertTrue(all(d2 >= d1 for d1, d2 in zip(depths, depths[1:])))
        self.assertTrue(depths[-1] > depths[0])
        self.assertTrue(depths[-1] <= 700.)

    def test_states_reported_every_day_while_alive(self):
        # 根深达到最大值后不再变化，仍然每天出现在输出中
        for varname in ("RD", "WRT", "DWRT", "WLV", "DAS", "TAGP"):
            values = self._values(varname, self.sowing_date,
                                  self.end_date + datetime.timedelta(days=1))
            self.assertEqual(len(values), 133)
            self.assertTrue(all(v is not None for v in values), varname)
        depths = self._values("RD", self.sowing_date, self.end_date)
        self.assertTrue(depths.count(max(depths)) > 1)
        before = [r["RD"] for r in self.output if r["day"] < self.sowing_date]
        self.assertTrue(all(v is None for v in before))

    def test_water_stress_bounds(self):
        stress = [s for s in self._values("WSTRESS", self.sowing_date, self.end_date)
                  if s is not None]
        self.assertTrue(len(stress) > 0)
        self.assertTrue(all(0. <= s <= 1. for s in stress))

    def test_uptake(self):
        water = [w for w in self._values("WUPT", self.sowing_date, self.end_date) if w is not None]
        nitrogen = [n for n in self._values("NUPT", self.sowing_date, self.end_date)
                    if n is not None]
        self.assertTrue(all(w >= 0. for w in water))
        self.assertTrue(all(0. <= n <= 3.0 + 1e-9 for n in nitrogen))
        self.assertTrue(sum(water) > 0.)

    def test_cutting(self):
        df = self.engine.get_output_frame()
        before = df.loc[self.cutting_date - datetime.timedelta(days=1), "WLV"]
        after = df.loc[self.cutting_date, "WLV"]
        self.assertTrue(before > 0.)
        self.assertTrue(after < before)

    def test_plant_end(self):
        df = self.engine.get_output_frame()
        self.assertEqual(df.loc[self.end_date, "WRT"], 0.)
        self.assertEqual(df.loc[self.end_date, "WLV"], 0.)
        # 植株终结之后 kiosk 中不再有根系的状态变量
        self.assertIsNone(self.output[142]["WRT"])
        residues = self.engine.context.residues
        self.assertTrue(residues.totals_for("Root")[0] > 0.)
        self.assertTrue(residues.totals_for("Leaf")[0] > 0.)
        self.assertFalse(self.engine.context.plant.is_alive)

    def test_output_frame(self):
        df = self.engine.get_output_frame()
        self.assertEqual(df.index.name, "day")
        self.assertEqual(len(df), 153)
        self.assertIn("NUPT", df.columns)


class TestEngineConfiguration(unittest.TestCase):

    def setUp(self):
        self.plantdata, self.soildata, self.agro, self.weather = load_inputs()

    def test_multiple_zones(self):
        plantdata = copy.deepcopy(self.plantdata)
        plantdata["Plant"]["ZoneName"] = "Row"
        plantdata["Root"].update({"ZoneNamesToGrowRootsIn": ["Inter"], "ZoneRootDepths": [100.],
                                  "ZoneInitialDM": [0.005]})
        row = soil_description(nlayers=5, thickness=150.)
        row["Name"] = "Row"
        inter = soil_description(nlayers=4, thickness=200., NO3N=5.)
        inter["Name"] = "Inter"
        soildata = {"Zones": [row, inter]}

        params = ParameterProvider(plantdata=plantdata, soildata=soildata)
        engine = Engine(params, self.weather, self.agro, output_vars=["RD", "WRT", "WUPT"])
        inter_water = engine.context.zones["Inter"].soil.Water.sum()
        engine.run(days=30)
        self.assertEqual(len(engine.get_output()), 31)
        self.assertEqual(len(engine.plant.root.Zones), 2)
        self.assertTrue(engine.context.zones["Inter"].soil.Water.sum() < inter_water)
        self.assertTrue(engine.get_variable("wrt") > 0.)

    def test_unknown_zone(self):
        plantdata = copy.deepcopy(self.plantdata)
        plantdata["Plant"]["ZoneName"] = "Garden"
        params = ParameterProvider(plantdata=plantdata, soildata=self.soildata)
        with self.assertRaises(exc.ConfigurationError):
            Engine(params, self.weather, self.agro)

    def test_invalid_zones(self):
        params = ParameterProvider(plantdata=self.plantdata, soildata={"Zones": []})
        with self.assertRaises(exc.ConfigurationError):
            Engine(params, self.weather, self.agro)
        zones = copy.deepcopy(self.soildata["Zones"]) * 2
        params = ParameterProvider(plantdata=self.plantdata, soildata={"Zones": zones})
        with self.assertRaises(exc.ConfigurationError):
            Engine(params, self.weather, self.agro)

    def test_missing_weather(self):
        weather = DataFrameWeatherDataProvider(make_weather_frame("2000-03-01", "2000-03-05"),
                                               52., 5., 10.)
        params = ParameterProvider(plantdata=self.plantdata, soildata=self.soildata)
        engine = Engine(params, weather, self.agro)
        with self.assertRaises(exc.WeatherDataProviderError):
            engine.run(days=10)


def suite():
    """ 该函数定义了本模块中所有测试 """
    suite = unittest.TestSuite()
    for test_class in (TestEngine, TestEngineConfiguration):
        suite.addTests(unittest.TestLoader().loadTestsFromTestCase(test_class))
    return suite


if __name__ == '__main__':
    unittest.TextTestRunner(verbosity=2).run(suite())
