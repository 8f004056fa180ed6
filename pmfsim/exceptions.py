# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年4月
"""PMFSim 的异常层次结构

所有异常都是致命的：它们表示模型配置不一致或者调用方违反了器官仲裁协议，
当前模拟日的计算会立即中止，不做任何重试。
"""

class PMFError(Exception):
    """PMFSim 的顶级异常"""

class ParameterError(PMFError):
    "Raised when problems with parameters are found."

class VariableKioskError(PMFError):
    "Raised when problems with kiosk registrations are found."

class ConfigurationError(PMFError):
    "Raised when a zone, soil or multi-zone configuration is inconsistent."

class WeatherDataProviderError(PMFError):
    "Raised when problems occur with the WeatherDataProviders"

class InvalidAllocationError(PMFError):
    "Raised when biomass is allocated to a pool that has no demand."

class AllocationOverflowError(PMFError):
    "Raised when an allocation exceeds the supply or demand declared by an organ."

class AllocationMismatchError(PMFError):
    "Raised when the amount distributed over sub-units differs from the requested total."

class NAllocationMismatchError(AllocationMismatchError):
    "Raised when the nitrogen distributed over soil layers differs from the allocated nitrogen."

class PartitionError(PMFError):
    "Raised when positive mass must be distributed over a zero total weight."

class NegativeFlowError(PMFError):
    "Raised when a computed reallocation, retranslocation or respiration flow is negative."
