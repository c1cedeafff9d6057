"""
설정 패키지
"""

from .settings import Config, DevelopmentConfig, ProductionConfig, TestConfig, config

__all__ = [
    'Config',
    'DevelopmentConfig',
    'ProductionConfig',
    'TestConfig',
    'config',
]
