"""Compile OpenAPI documents into typed interface stubs."""

from .config import GeneratorConfig
from .context_builder import build_interface
from .codegen import generate, render
from .loader import load_spec

__all__ = ["GeneratorConfig", "build_interface", "generate", "load_spec", "render"]
