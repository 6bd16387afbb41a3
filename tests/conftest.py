"""
Shared hypothesis settings.

Key and signature generation run pure python elliptic curve arithmetic, so
examples are slow and large; the profile trades example count for runtime.
Pick another profile with CF_HYPOTHESIS_PROFILE=thorough.
"""
import os
import pathlib
import sys

from hypothesis import HealthCheck, settings

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_SLOW = [HealthCheck.too_slow, HealthCheck.data_too_large]

settings.register_profile('default', max_examples=20, deadline=None, suppress_health_check=_SLOW)
settings.register_profile('thorough', max_examples=200, deadline=None, suppress_health_check=_SLOW)
settings.load_profile(os.environ.get('CF_HYPOTHESIS_PROFILE', 'default'))
