"""Command queue, render executor and the producer-facing renderer."""

from .command_queue import CommandQueue
from .dispatch import DispatchEngine
from .renderer import DrawMode, Renderer

__all__ = ["CommandQueue", "DispatchEngine", "DrawMode", "Renderer"]
