# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
import unittest

import numpy as np

from ..crop import Root, RootZoneState
from ..biomass import Biomass
from .. import exceptions as exc
from .test_data import ROOT_PARAMETERS, parameters, make_zone, make_context


class TestRootZoneState(unittest.TestCase):
    """单区域、5 层（每层 150 mm）土壤中的根系状态"""

    def _make_zone_state(self, nlayers=5, **overrides):
        zone = make_zone("Field", nlayers=nlayers, thickness=150.)
        self.context = make_context([zone])
        p = Root.Parameters(parameters(ROOT_PARAMETERS, **overrides))
        p.bind(self.context)
        return RootZoneState("Field", zone.soil, p)

    def test_initialise_splits_seed_over_layers(self):
        zs = self._make_zone_state()
        zs.initialise(300., initial_dm=0.03, population=10., max_n_conc=0.02)
        # 层顶位于 300 mm 以上的只有第 0 和第 1 层
        self.assertTrue(np.allclose(zs.live_wt, [0.15, 0.15, 0., 0., 0.]))
        self.assertAlmostEqual(zs.live.N, 0.3 * 0.02)
        self.assertAlmostEqual(zs.Depth, 300.)

    def test_root_front_advances(self):
        zs = self._make_zone_state(RootFrontVelocity=10.)
        zs.initialise(300., 0.01, 10., 0.02)
        zs.grow_root_depth()
        self.assertAlmostEqual(zs.Depth, 310.)
        factor = zs.factor_root_depth(2)
        self.assertTrue(0. < factor < 1.)
        self.assertAlmostEqual(factor, 10. / 150.)
        self.assertAlmostEqual(zs.factor_root_depth(1), 1.)
        self.assertAlmostEqual(zs.factor_root_depth(3), 0.)

    def test_velocity_per_layer_and_xf(self):
        zs = self._make_zone_state(RootFrontVelocity=[20., 10., 5., 5., 5.])
        zs.soil.XF = [1., 0.5, 1., 1., 1.]
        zs.initialise(100., 0.01, 10., 0.02)
        zs.grow_root_depth()
        self.assertAlmostEqual(zs.Depth, 120.)
        zs.grow_root_depth()
        self.assertAlmostEqual(zs.Depth, 140.)
        zs.grow_root_depth()
        zs.grow_root_depth()
        # 进入第 1 层后速度为 10 mm/d，XF 为 0.5
        self.assertAlmostEqual(zs.Depth, 165.)

    def test_depth_is_capped(self):
        zs = self._make_zone_state(MaximumRootDepth=305.)
        zs.initialise(300., 0.01, 10., 0.02)
        for _ in range(5):
            zs.grow_root_depth()
        self.assertAlmostEqual(zs.Depth, 305.)

        zs = self._make_zone_state()
        zs.soil.XF = [1., 1., 0., 1., 1.]
        zs.initialise(290., 0.01, 10., 0.02)
        for _ in range(5):
            zs.grow_root_depth()
        self.assertAlmostEqual(zs.Depth, 300.)

    def test_depth_never_regresses(self):
        zs = self._make_zone_state(MaximumRootDepth=200., RootFrontVelocity=10.)
        zs.initialise(150., 0.01, 10., 0.02)
        depths = [zs.Depth]
        for _ in range(10):
            zs.grow_root_depth()
            depths.append(zs.Depth)
        self.assertTrue(all(d2 >= d1 for d1, d2 in zip(depths, depths[1:])))
        self.assertAlmostEqual(zs.Depth, 200.)

    def test_sowing_below_maximum_depth(self):
        zs = self._make_zone_state(MaximumRootDepth=200.)
        zs.initialise(400., 0.02, 10., 0.02)
        self.assertAlmostEqual(zs.Depth, 200.)
        # 种子生物量只分配到 200 mm 以上的第 0 和第 1 层
        self.assertTrue(np.allclose(zs.live_wt, [0.1, 0.1, 0., 0., 0.]))
        zs.grow_root_depth()
        self.assertAlmostEqual(zs.Depth, 200.)

    def test_root_activity_values(self):
        zs = self._make_zone_state()
        zs.initialise(300., 0.01, 10., 0.02)
        zs.Uptake = [-1., -1., 0., 0., 0.]
        zs.NitUptake = [-0.2, -0.2, 0., 0., 0.]
        raw = zs.calculate_root_activity_values()
        self.assertAlmostEqual(raw[0], raw[1])
        self.assertTrue(raw[0] > 0.)
        self.assertTrue(np.all(raw[2:] == 0.))

        # 根锋进入没有活根的第 2 层时沿用上一层的值
        zs.grow_root_depth()
        raw = zs.calculate_root_activity_values()
        self.assertAlmostEqual(raw[2], raw[1])
        self.assertEqual(raw[3], 0.)

    def test_partition_without_activity(self):
        zs = self._make_zone_state()
        self.assertAlmostEqual(float(np.sum(zs.calculate_root_activity_values())), 0.)
        with self.assertRaises(exc.PartitionError):
            zs.partition_root_mass(0., Biomass(StructuralWt=5.))
        added = zs.partition_root_mass(0., Biomass())
        self.assertTrue(np.all(added == 0.))
        self.assertEqual(zs.live.Wt, 0.)

    def test_partition_conserves_mass(self):
        zs = self._make_zone_state()
        zs.initialise(300., 0.01, 10., 0.02)
        zs.Uptake = [-2., -1., 0., 0., 0.]
        raw = zs.calculate_root_activity_values()
        before = zs.live.Wt
        added = zs.partition_root_mass(float(np.sum(raw)), Biomass(StructuralWt=3., StorageWt=1.))
        self.assertAlmostEqual(float(np.sum(added)), 4., delta=1e-9)
        self.assertAlmostEqual(zs.live.Wt - before, 4., delta=1e-9)
        self.assertTrue(added[0] > added[1])

    def test_nitrogen_demand(self):
        zs = self._make_zone_state()
        zs.initialise(300., 0.01, 10., 0.02)
        zs.PotentialDMAllocation = [1., 1., 0., 0., 0.]
        structural, storage = zs.calculate_nitrogen_demand(0.005, 0.02, 1.0)
        self.assertAlmostEqual(structural, 2. * 0.005)
        # 每层：0.02 * (0.05 + 1) - (0.001 + 0.005)
        self.assertAlmostEqual(storage, 2. * (0.02 * 1.05 - 0.006 - 0.005))
        structural, storage = zs.calculate_nitrogen_demand(0.005, 0.02, 0.)
        self.assertEqual(structural, 0.)
        self.assertEqual(storage, 0.)

    def test_clear(self):
        zs = self._make_zone_state()
        zs.initialise(300., 0.01, 10., 0.02)
        zs.LayerDead[0].StructuralWt = 1.
        zs.clear()
        self.assertEqual(zs.Depth, 0.)
        self.assertEqual(zs.live.Wt, 0.)
        self.assertEqual(zs.dead.Wt, 0.)
        self.assertIsNone(zs.Uptake)


def suite():
    """ 该函数定义了本模块中所有测试 """
    suite = unittest.TestSuite()
    suite.addTests(unittest.TestLoader().loadTestsFromTestCase(TestRootZoneState))
    return suite


if __name__ == '__main__':
    unittest.TextTestRunner(verbosity=2).run(suite())
