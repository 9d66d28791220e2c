"""Core enums package.

Usage:
    from routespec.core.enums import ErrorCode, Environment, PipelineStage
"""

from routespec.core.enums.environment import Environment
from routespec.core.enums.error_code import ErrorCode
from routespec.core.enums.pipeline_stage import InputSource, PipelineStage

__all__ = ["ErrorCode", "Environment", "InputSource", "PipelineStage"]
