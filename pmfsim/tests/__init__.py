# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
""" PMFSim的测试集合。
"""
import unittest
import warnings


def make_test_suite():
    """组装测试套件并返回
    """
    from . import test_biomass
    from . import test_functions
    from . import test_states_rates
    from . import test_soil_profile
    from . import test_biomass_removal
    from . import test_root_zone
    from . import test_root
    from . import test_organs
    from . import test_arbitrator
    from . import test_agromanager
    from . import test_input
    from . import test_engine

    allsuites = unittest.TestSuite([test_biomass.suite(),
                                    test_functions.suite(),
                                    test_states_rates.suite(),
                                    test_soil_profile.suite(),
                                    test_biomass_removal.suite(),
                                    test_root_zone.suite(),
                                    test_root.suite(),
                                    test_organs.suite(),
                                    test_arbitrator.suite(),
                                    test_agromanager.suite(),
                                    test_input.suite(),
                                    test_engine.suite(),
                                    ])
    return allsuites


def test_all():
    """组装测试套件并通过TextTestRunner运行测试
    """
    allsuites = make_test_suite()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        unittest.TextTestRunner(verbosity=2).run(allsuites)
