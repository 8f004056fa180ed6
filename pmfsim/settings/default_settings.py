# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月

"""PMFSim 设置

默认值从 'pmfsim/settings/default_settings.py' 读取。用户特定设置从
'$HOME/.pmfsim/user_settings.py' 读取（如果该文件存在），并覆盖默认设置。

设置必须全部使用大写字母，可通过 pmfsim.settings.settings 以属性方式访问，例如::

    from ..settings import settings
    print(settings.BIOMASS_TOLERANCE)

非全大写的名称会产生警告。导入的模块等非设置项需以下划线开头。
"""

import os as _os
import pmfsim.util as _util

PMFSIM_USER_HOME = _os.path.join(_util.get_user_home(), ".pmfsim")

# 生物量和氮素质量平衡检查使用的容差（g/m2）。与零比较时一律使用该容差，
# 以免累计舍入误差导致误报。
BIOMASS_TOLERANCE = 1e-9

# 在需求为零的库上仍允许的最大潜在分配量
POTENTIAL_ALLOCATION_TOLERANCE = 1e-12

# 每个模拟日开始时将器官的所有速率变量归零
ZEROFY = True

# 对气象数据做取值范围检查
METEO_RANGE_CHECKS = True

# 引擎每天从 kiosk 收集的变量
OUTPUT_VARS = ["DAS", "TAGP", "TWD", "WSTRESS", "RD", "WRT", "DWRT", "NRT", "WUPT", "NUPT",
               "GRRT", "MRRT", "WLV", "DWLV", "NLV", "LAI", "WST", "DWST", "NST"]

# 保存输出的间隔（天）
OUTPUT_INTERVAL_DAYS = 1

# 日志配置
# 日志系统包含两个处理器：'console' 把消息输出到屏幕，'file' 把消息写入
# LOG_DIR/LOG_FILE_NAME。两者的日志级别分别由 LOG_LEVEL_CONSOLE 和 LOG_LEVEL_FILE 定义。
# 日志文件最大 1MB，超过后轮转，最多保留 7 个历史文件。

# 日志目录
LOG_DIR = _os.path.join(PMFSIM_USER_HOME, "logs")
# 日志文件名
LOG_FILE_NAME = _os.path.join(LOG_DIR, "pmfsim.log")
# 写入日志文件的日志级别
LOG_LEVEL_FILE = "INFO"
# 控制台输出的日志级别
LOG_LEVEL_CONSOLE = "ERROR"
# 日志配置
LOG_CONFIG = \
            {
                'version': 1,
                'disable_existing_loggers': True,
                'formatters': {
                    'standard': {
                        'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
                    },
                    'brief': {
                        'format': '[%(levelname)s] - %(message)s'
                    },
                },
                'handlers': {
                    'console': {
                        'level': LOG_LEVEL_CONSOLE,
                        'class': 'logging.StreamHandler',
                        'formatter': 'brief'
                    },
                    'file': {
                        'level': LOG_LEVEL_FILE,
                        'class': 'logging.handlers.RotatingFileHandler',
                        'formatter': 'standard',
                        'filename': LOG_FILE_NAME,
                        'maxBytes': 1024**2,
                        'backupCount': 7,
                        'mode': 'a',
                        'encoding': 'utf8'
                    },
                },
                'root': {
                         'handlers': ['console', 'file'],
                         'propagate': True,
                         'level': 'NOTSET'
                }
            }
