"""
CLI Support Modules

Mode flags, console output and option-to-object wiring shared by the
commands in typeshape.main.
"""

from typeshape.cli import common, config, output

__all__ = ['common', 'config', 'output']
