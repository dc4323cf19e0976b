"""
Configuration package
"""
from .settings import BoxitoConfig, TestingConfig

__all__ = ['BoxitoConfig', 'TestingConfig']
