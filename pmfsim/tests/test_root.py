# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import unittest
import datetime

import numpy as np

from ..crop import Root
from ..soil import SoilArbitrator, ZoneWaterAndN
from ..biomass import BiomassPoolType, BiomassAllocationType
from .. import exceptions as exc
from .test_data import ROOT_PARAMETERS, parameters, make_zone, make_context


class RootTestCase(unittest.TestCase):
    """根系测试的公共部分：在给定区域中构造、播种根系。"""
    day = datetime.date(2000, 4, 1)

    def make_root(self, zones, population=10., depth=300., sow=True, **overrides):
        self.zones = zones
        self.context = make_context(zones, day=self.day)
        self.root = Root(self.day, self.context.kiosk, parameters(ROOT_PARAMETERS, **overrides),
                         self.context)
        self.root.on_simulation_start(self.day)
        self.soil_arbitrator = SoilArbitrator(self.context.zones)
        if sow:
            plant = self.context.plant
            plant.is_alive = True
            plant.sowing_depth = depth
            self.root.on_sow(self.day, population, depth)
        return self.root


class TestRootWaterUptake(RootTestCase):

    def test_water_supply_follows_root_depth(self):
        root = self.make_root([make_zone()])
        supply = root.calculate_water_supply(ZoneWaterAndN(self.zones[0],
                                                           Water=self.zones[0].soil.Water))
        # KL * (SW - LL) = 0.06 * (45 - 15)
        self.assertTrue(np.allclose(supply, [1.8, 1.8, 0., 0., 0.]))

        root.on_actual_growth(self.day)
        supply = root.calculate_water_supply(ZoneWaterAndN(self.zones[0],
                                                           Water=self.zones[0].soil.Water))
        self.assertAlmostEqual(supply[2], 1.8 * 10. / 150.)

    def test_kl_modifier_per_layer(self):
        root = self.make_root([make_zone()], KLModifier=[1.0, 0.5, 0.5, 0.5, 0.5])
        supply = root.calculate_water_supply(ZoneWaterAndN(self.zones[0],
                                                           Water=self.zones[0].soil.Water))
        self.assertAlmostEqual(supply[1], 0.9)

    def test_dry_soil_gives_no_supply(self):
        root = self.make_root([make_zone(SW=0.05)])
        supply = root.calculate_water_supply(ZoneWaterAndN(self.zones[0],
                                                           Water=self.zones[0].soil.Water))
        self.assertTrue(np.all(supply == 0.))

    def test_arbitration_scales_to_demand(self):
        root = self.make_root([make_zone()])
        uptake = self.soil_arbitrator.do_water_arbitration(root, 1.8)
        self.assertAlmostEqual(uptake, 1.8)
        self.assertAlmostEqual(root.WaterUptake, 1.8)
        soil = self.zones[0].soil
        self.assertTrue(np.allclose(soil.Water, [44.1, 44.1, 45., 45., 45.]))
        self.assertTrue(np.allclose(root.PlantZone.Uptake, [-0.9, -0.9, 0., 0., 0.]))

    def test_arbitration_limited_by_supply(self):
        root = self.make_root([make_zone()])
        uptake = self.soil_arbitrator.do_water_arbitration(root, 100.)
        self.assertAlmostEqual(uptake, 3.6)

    def test_unknown_zone(self):
        root = self.make_root([make_zone()])
        with self.assertRaises(exc.ConfigurationError):
            root.do_water_uptake([0.] * 5, "Elsewhere")
        outside = make_zone("Elsewhere")
        self.assertIsNone(root.calculate_water_supply(ZoneWaterAndN(outside)))
        self.assertIsNone(root.calculate_nitrogen_supply(ZoneWaterAndN(outside)))


class TestRootNitrogenUptake(RootTestCase):

    def _make_three_layer_root(self, **overrides):
        # 容重 1.0 且层厚 100 mm 时 ppm 与 kg/ha 数值相同
        zone = make_zone(nlayers=3, thickness=100., BD=1.0, NO3N=1.0, NH4N=0.)
        return self.make_root([zone], depth=300., **overrides)

    def _snapshot(self):
        soil = self.zones[0].soil
        return ZoneWaterAndN(self.zones[0], Water=soil.Water, NO3N=soil.NO3N, NH4N=soil.NH4N)

    def test_daily_uptake_cap(self):
        root = self._make_three_layer_root(KNO3=0.3, MaxDailyNUptake=0.5)
        no3, nh4 = root.calculate_nitrogen_supply(self._snapshot())
        self.assertAlmostEqual(float(np.sum(no3)), 0.5)
        # 按土层顺序优先
        self.assertAlmostEqual(no3[0], 0.3)
        self.assertAlmostEqual(no3[1], 0.2)
        self.assertAlmostEqual(no3[2], 0.)
        self.assertTrue(np.all(nh4 == 0.))

    def test_cap_includes_ammonium(self):
        root = self._make_three_layer_root(KNO3=0.3, KNH4=0.3, MaxDailyNUptake=0.5)
        self.zones[0].soil.NH4N = [1., 1., 1.]
        no3, nh4 = root.calculate_nitrogen_supply(self._snapshot())
        self.assertAlmostEqual(no3[0], 0.3)
        self.assertAlmostEqual(nh4[0], 0.2)
        self.assertAlmostEqual(float(np.sum(no3) + np.sum(nh4)), 0.5)

    def test_supply_only_where_roots_live(self):
        root = self.make_root([make_zone(nlayers=3, thickness=100., BD=1.0, NO3N=1.0, NH4N=0.)],
                              depth=100., KNO3=0.3)
        no3, _ = root.calculate_nitrogen_supply(self._snapshot())
        self.assertAlmostEqual(no3[0], 0.3)
        self.assertTrue(np.all(no3[1:] == 0.))

    def test_soil_water_factor(self):
        table = {"xy": [0., 0., 1., 1.], "driver": "RWC"}
        root = self._make_three_layer_root(KNO3=0.3, NUptakeSWFactor=table)
        no3, _ = root.calculate_nitrogen_supply(self._snapshot())
        rwc = (30. - 10.) / (35. - 10.)
        self.assertAlmostEqual(no3[0], 0.3 * rwc)
        self.assertAlmostEqual(root.PlantZone.RWC[0], rwc)

    def test_arbitration_takes_nitrogen_from_soil(self):
        root = self._make_three_layer_root(KNO3=0.3, MaxDailyNUptake=0.5)
        uptake = self.soil_arbitrator.do_nitrogen_arbitration(root, 10.)
        self.assertAlmostEqual(uptake, 0.5)
        self.assertAlmostEqual(root.NUptake, 0.5)
        self.assertTrue(np.allclose(self.zones[0].soil.NO3N, [0.7, 0.8, 1.0]))
        # 土壤中的 kg/ha 换算为器官的 g/m2
        self.assertAlmostEqual(root.calculate_nitrogen_supply().Uptake, 0.05)

    def test_arbitration_scales_to_demand(self):
        root = self._make_three_layer_root(KNO3=0.3, MaxDailyNUptake=0.5)
        uptake = self.soil_arbitrator.do_nitrogen_arbitration(root, 0.25)
        self.assertAlmostEqual(uptake, 0.25)
        self.assertTrue(np.allclose(self.zones[0].soil.NO3N, [0.85, 0.9, 1.0]))


class TestRootGrowth(RootTestCase):

    def test_demand_starts_below_sowing_depth(self):
        root = self.make_root([make_zone()], depth=30.)
        self.assertEqual(root.calculate_dry_matter_demand().Structural, 0.)
        root.on_actual_growth(self.day)
        demand = root.calculate_dry_matter_demand()
        self.assertAlmostEqual(demand.Structural, 1.0)
        self.assertEqual(demand.Storage, 0.)

    def test_storage_demand(self):
        root = self.make_root([make_zone()], depth=30., StructuralFraction=0.8,
                              DMConversionEfficiency=0.5)
        root.on_actual_growth(self.day)
        demand = root.calculate_dry_matter_demand()
        self.assertAlmostEqual(demand.Structural, 0.8 / 0.5)
        live = root.live.StructuralWt
        expected = ((live + 1.6) / 0.8 - (live + 1.6)) / 0.5
        self.assertAlmostEqual(demand.Storage, expected)

    def test_reallocation_disabled_by_default(self):
        root = self.make_root([make_zone()], SenescenceRate=0.1)
        for layer in root.PlantZone.LayerLive:
            layer.StorageWt = 10.
        self.context.plant.is_emerged = True
        root.on_potential_growth(self.day)
        supply = root.calculate_dry_matter_supply()
        self.assertEqual(supply.Reallocation, 0.0)
        self.assertEqual(supply.Retranslocation, 0.0)
        self.assertEqual(root.available_dm_reallocation(), 0.0)
        self.assertEqual(root.available_n_retranslocation(), 0.0)

    def test_reallocation_of_senescing_storage(self):
        root = self.make_root([make_zone()], SenescenceRate=0.1, DMReallocationFactor=0.5,
                              DMRetranslocationFactor=0.2)
        for layer in root.PlantZone.LayerLive:
            layer.StorageWt = 10.
        self.context.plant.is_emerged = True
        root.on_potential_growth(self.day)
        supply = root.calculate_dry_matter_supply()
        self.assertAlmostEqual(supply.Reallocation, 50. * 0.1 * 0.5)
        self.assertAlmostEqual(supply.Retranslocation, (50. - 2.5) * 0.2)
        self.assertAlmostEqual(root.available_dm_reallocation(), 2.5)
        self.assertAlmostEqual(root.available_dm_retranslocation(), 9.5)

    def test_potential_allocation_requires_uptake(self):
        root = self.make_root([make_zone()])
        with self.assertRaises(exc.ConfigurationError):
            root.set_dry_matter_potential_allocation(BiomassPoolType())

    def test_potential_allocation_without_demand(self):
        root = self.make_root([make_zone()])
        self.soil_arbitrator.do_water_arbitration(root, 1.)
        root.calculate_dry_matter_demand()
        root.set_dry_matter_potential_allocation(BiomassPoolType())
        with self.assertRaises(exc.InvalidAllocationError):
            root.set_dry_matter_potential_allocation(BiomassPoolType(Structural=1.))

    def test_allocation_conserves_mass(self):
        root = self.make_root([make_zone()])
        self.soil_arbitrator.do_water_arbitration(root, 2.)
        before = root.live.Wt
        root.set_dry_matter_allocation(BiomassAllocationType(Structural=2., Storage=0.5))
        self.assertAlmostEqual(root.live.Wt - before, 2.5, delta=1e-9)
        self.assertAlmostEqual(root.Allocated.Wt, 2.5, delta=1e-9)

    def test_zero_allocation_is_idempotent(self):
        root = self.make_root([make_zone()])
        self.soil_arbitrator.do_water_arbitration(root, 2.)
        live = [b.copy() for b in root.PlantZone.LayerLive]
        dead_wt = root.dead.Wt
        root.set_dry_matter_allocation(BiomassAllocationType())
        root.set_nitrogen_allocation(BiomassAllocationType())
        for before, after in zip(live, root.PlantZone.LayerLive):
            self.assertEqual(before.Wt, after.Wt)
            self.assertEqual(before.N, after.N)
        self.assertEqual(root.dead.Wt, dead_wt)
        self.assertEqual(root.GrowthRespiration, 0.)
        self.assertEqual(root.MaintenanceRespiration, 0.)

    def test_allocation_without_root_activity(self):
        root = self.make_root([make_zone()], sow=False)
        with self.assertRaises(exc.PartitionError):
            root.set_dry_matter_allocation(BiomassAllocationType(Structural=5.))
        root.set_dry_matter_allocation(BiomassAllocationType())
        self.assertEqual(root.live.Wt, 0.)

    def test_retranslocation_exceeding_supply(self):
        root = self.make_root([make_zone()])
        self.soil_arbitrator.do_water_arbitration(root, 2.)
        root.calculate_dry_matter_supply()
        with self.assertRaises(exc.AllocationOverflowError):
            root.set_dry_matter_allocation(BiomassAllocationType(Retranslocation=1.))

    def test_rounding_error_on_empty_storage(self):
        root = self.make_root([make_zone()])
        self.soil_arbitrator.do_water_arbitration(root, 2.)
        root.calculate_dry_matter_supply()
        self.assertEqual(root.live.StorageWt, 0.)
        # 容差以内的转运量不能引起除零错误
        root.set_dry_matter_allocation(BiomassAllocationType(Retranslocation=5e-10))
        self.assertEqual(root.live.StorageWt, 0.)

        root.calculate_nitrogen_supply()
        root.calculate_nitrogen_demand()
        root.set_nitrogen_allocation(BiomassAllocationType(Reallocation=5e-10))
        self.assertEqual(root.live.StorageN, 0.)

    def test_negative_reallocation_factor(self):
        root = self.make_root([make_zone()], SenescenceRate=0.1, DMReallocationFactor=-0.5)
        for layer in root.PlantZone.LayerLive:
            layer.StorageWt = 10.
        self.context.plant.is_emerged = True
        with self.assertRaises(exc.NegativeFlowError):
            root.on_potential_growth(self.day)

    def test_respiration_larger_than_pool(self):
        root = self.make_root([make_zone()], MaintenanceRespiration=1.5)
        for layer in root.PlantZone.LayerLive:
            layer.StorageWt = 1.
        with self.assertRaises(exc.NegativeFlowError):
            root.on_actual_growth(self.day)

    def test_structural_nitrogen_without_structural_demand(self):
        root = self.make_root([make_zone()])
        root.calculate_nitrogen_supply()
        root.PlantZone.StructuralNDemand = [0.] * 5
        root.PlantZone.StorageNDemand = [0.5, 0., 0., 0., 0.]
        # 结构性氮没有可分配的土层
        with self.assertRaises(exc.NAllocationMismatchError):
            root.set_nitrogen_allocation(BiomassAllocationType(Structural=0.2))

    def test_nitrogen_allocation_beyond_demand(self):
        root = self.make_root([make_zone()])
        root.calculate_nitrogen_supply()
        root.calculate_nitrogen_demand()
        with self.assertRaises(exc.AllocationOverflowError):
            root.set_nitrogen_allocation(BiomassAllocationType(Storage=1.))

    def test_nitrogen_allocation_follows_layer_demand(self):
        root = self.make_root([make_zone()])
        root.PlantZone.PotentialDMAllocation = [3., 1., 0., 0., 0.]
        demand = root.calculate_nitrogen_demand()
        self.soil_arbitrator.do_nitrogen_arbitration(root, demand.Total * 10.)
        supply = root.calculate_nitrogen_supply()
        self.assertAlmostEqual(supply.Uptake, demand.Total)

        n_before = root.live.N
        root.set_nitrogen_allocation(BiomassAllocationType(Structural=demand.Structural,
                                                           Uptake=demand.Structural))
        layers = root.PlantZone.LayerLive
        self.assertAlmostEqual(root.live.N - n_before, demand.Structural, delta=1e-9)
        gain0 = layers[0].StructuralN - 0.05 * 0.02
        gain1 = layers[1].StructuralN - 0.05 * 0.02
        self.assertAlmostEqual(gain0, 3. * gain1)

    def test_actual_growth(self):
        root = self.make_root([make_zone()], SenescenceRate=0.1, MaintenanceRespiration=0.05)
        for layer in root.PlantZone.LayerLive:
            layer.StorageWt = 1.
        live_before = sum(b.Wt for b in root.PlantZone.LayerLive)
        root.on_actual_growth(self.day)
        self.assertAlmostEqual(root.Depth, 310.)
        # 衰老的根直接进入残体库
        self.assertAlmostEqual(root.Detached.Wt, 0.1 * live_before)
        self.assertAlmostEqual(self.context.residues.totals_for("Root")[0],
                               0.1 * live_before * 10.)
        storage = 5. * 0.9
        self.assertAlmostEqual(root.MaintenanceRespiration, storage * 0.05)
        self.assertAlmostEqual(root.live.Wt, 0.9 * live_before - storage * 0.05)
        self.assertAlmostEqual(self.context.kiosk["RD"], 310.)

    def test_biomass_removal(self):
        root = self.make_root([make_zone()])
        live_before = root.live.Wt
        root.remove_biomass("harvest", {"FractionLiveToRemove": 0.5})
        self.assertAlmostEqual(root.live.Wt, 0.5 * live_before)
        self.assertAlmostEqual(root.Removed.Wt, 0.5 * live_before)
        with self.assertRaises(exc.ConfigurationError):
            root.remove_biomass("graze")

    def test_plant_end(self):
        root = self.make_root([make_zone()])
        total = root.Wt
        root.on_plant_end(self.day)
        self.assertAlmostEqual(self.context.residues.Wt, total * 10.)
        self.assertEqual(root.live.Wt, 0.)
        self.assertEqual(root.Depth, 0.)
        self.assertEqual(self.context.kiosk["WRT"], 0.)


class TestMultiZoneRoot(RootTestCase):

    def _make(self, **overrides):
        zones = [make_zone("Row"), make_zone("Inter")]
        extras = {"ZoneNamesToGrowRootsIn": ["Inter"], "ZoneRootDepths": [150.],
                  "ZoneInitialDM": [0.005]}
        extras.update(overrides)
        return self.make_root(zones, **extras)

    def test_initialisation(self):
        root = self._make()
        self.assertEqual([z.name for z in root.Zones], ["Row", "Inter"])
        inter = root.Zones[1]
        self.assertAlmostEqual(inter.Depth, 150.)
        self.assertTrue(np.allclose(inter.live_wt, [0.05, 0., 0., 0., 0.]))
        self.assertAlmostEqual(root.live.Wt, 0.1 + 0.05)
        self.assertAlmostEqual(root.Depth, 300.)

    def test_water_uptake_from_all_zones(self):
        root = self._make()
        uptake = self.soil_arbitrator.do_water_arbitration(root, 100.)
        self.assertAlmostEqual(uptake, 3.6 + 1.8)
        self.assertAlmostEqual(root.WaterUptake, 5.4)
        self.assertAlmostEqual(self.zones[1].soil.Water[0], 45. - 1.8)

    def test_allocation_over_zones(self):
        root = self._make()
        self.soil_arbitrator.do_water_arbitration(root, 100.)
        before = [z.live.Wt for z in root.Zones]
        root.set_dry_matter_allocation(BiomassAllocationType(Structural=3.))
        gains = [z.live.Wt - b for z, b in zip(root.Zones, before)]
        self.assertAlmostEqual(sum(gains), 3., delta=1e-9)
        self.assertTrue(all(g > 0. for g in gains))

    def test_removal_applies_to_all_zones(self):
        root = self._make()
        root.remove_biomass("cut", {"FractionLiveToResidue": 1.0})
        self.assertEqual(root.live.Wt, 0.)
        self.assertAlmostEqual(self.context.residues.totals_for("Root")[0], 1.5)

    def test_zone_list_mismatch(self):
        with self.assertRaises(exc.ConfigurationError):
            self._make(ZoneRootDepths=[150., 300.])

    def test_unknown_zone(self):
        with self.assertRaises(exc.ConfigurationError):
            self._make(ZoneNamesToGrowRootsIn=["Nowhere"])

    def test_duplicate_zone(self):
        with self.assertRaises(exc.ConfigurationError):
            self._make(ZoneNamesToGrowRootsIn=["Row"])


def suite():
    """ 该函数定义了本模块中所有测试 """
    suite = unittest.TestSuite()
    for test_class in (TestRootWaterUptake, TestRootNitrogenUptake, TestRootGrowth,
                       TestMultiZoneRoot):
        suite.addTests(unittest.TestLoader().loadTestsFromTestCase(test_class))
    return suite


if __name__ == '__main__':
    unittest.TextTestRunner(verbosity=2).run(suite())
