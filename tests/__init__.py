"""
Test suite for docx_assembler project.

This module contains all unit tests for the docx_assembler package.
"""
