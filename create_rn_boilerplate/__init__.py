"""create-rn-boilerplate -- scaffold a React Native app from the boilerplate template.

Quick usage::

    import asyncio
    from create_rn_boilerplate import Config, Pipeline

    state = asyncio.run(Pipeline(Config(), project_name="MyApp").run())
"""

from .config import Config
from .pipeline import Pipeline, PipelineError, main

__version__ = "1.0.0"

__all__ = [
    "Config",
    "Pipeline",
    "PipelineError",
    "main",
]
