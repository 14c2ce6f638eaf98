"""
Simple Schema Reporter Analysis Module
======================================

Derives per-class attribute flags from schema data.

Components:
- property_extractor.py: Mandatory/constructed flags for a class's attributes
"""

from .property_extractor import extract_properties
