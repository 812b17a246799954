"""
Configuration Package
"""
from .config_manager import (
    ConfigManager,
    PipelineConfig,
    get_config_manager,
    get_pipeline_config,
    reset_config_singletons,
)

__all__ = [
    'ConfigManager',
    'PipelineConfig',
    'get_config_manager',
    'get_pipeline_config',
    'reset_config_singletons'
]
