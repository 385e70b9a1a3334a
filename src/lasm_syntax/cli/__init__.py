"""
LASM Syntax Command-Line Interface
==================================

This package provides the command-line tool for the LASM syntax toolkit:

- **lasmtok**: token dump, diagnostics check and label listing

The tool is a Click-based CLI application with comprehensive help and
error reporting.
"""

__all__ = ["lasmtok"]
