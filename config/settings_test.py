"""
Settings for the test suite: production settings with a throwaway key.
"""
import os

os.environ.setdefault('SECRET_KEY', 'test-suite-key-7c41e0b9d2a84f16a35e9b07c6d1f2e8')

from config.settings import *  # noqa: E402,F401,F403
