"""Core SADL functionality: scanner, IR, parser, model, validator, decompiler."""

from . import ir
from .errors import (
    ErrorContext,
    ExtensionError,
    ModelError,
    ParseError,
    SadlError,
    ValidationError,
)
from .extensions import Extension, ExtensionRegistry, get_registry
from .lexer import Lexer, Token, TokenType, tokenize
from .manifest import ProjectManifest, discover_sources, load_manifest
from .model import Model
from .parser import parse_file, parse_string
from .refactor import convert_inline_enums
from .unparser import decompile
from .validator import validate_model

__all__ = [
    "ir",
    "SadlError",
    "ParseError",
    "ModelError",
    "ValidationError",
    "ExtensionError",
    "ErrorContext",
    "Extension",
    "ExtensionRegistry",
    "get_registry",
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    "ProjectManifest",
    "load_manifest",
    "discover_sources",
    "Model",
    "parse_file",
    "parse_string",
    "convert_inline_enums",
    "decompile",
    "validate_model",
]
