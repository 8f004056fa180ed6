# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
from .biomass_removal import BiomassRemoval
from .root_zone import RootZoneState
from .root import Root
from .generic_organ import GenericOrgan, Stem
from .leaf import Leaf, LeafCohort
from .arbitrator import OrganArbitrator
from .plant import Plant
