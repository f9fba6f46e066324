"""Evaluation framework."""

from .generator import TaskGenerator
from .simulator import PolicySimulator, SimulationResult

__all__ = ['TaskGenerator', 'PolicySimulator', 'SimulationResult']
