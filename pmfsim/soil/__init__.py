# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
from .soil_profile import SoilLayerProfile, Zone, ZoneWaterAndN
from .residue import SurfaceOrganicMatter
from .arbitrator import SoilArbitrator
