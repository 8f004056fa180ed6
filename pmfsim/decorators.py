# -*- coding: utf-8 -*-
# 版权所有 (c) 2004-2024 Wageningen Environmental Research, Wageningen-UR
# Allard de Wit (allard.dewit@wur.nl), 2024年3月
from functools import wraps


def _unlocking(lockattr):
    def decorator(f):
        @wraps(f)
        def wrapper(self, *args, **kwargs):
            obj = getattr(self, lockattr)
            if obj is not None:
                obj.unlock()
            try:
                return f(self, *args, **kwargs)
            finally:
                obj = getattr(self, lockattr)
                if obj is not None:
                    obj.lock()
        return wrapper
    return decorator


def prepare_states(f):
    '''
    类方法装饰器，在方法执行期间解锁 states 对象，执行完毕（包括抛出异常时）重新锁定。
    '''
    return _unlocking("states")(f)


def prepare_rates(f):
    '''
    类方法装饰器，在方法执行期间解锁 rates 对象，执行完毕（包括抛出异常时）重新锁定。
    '''
    return _unlocking("rates")(f)
