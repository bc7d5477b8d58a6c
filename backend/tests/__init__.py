"""
Tests Package

This module contains all tests for the RequestDesk backend.
"""
