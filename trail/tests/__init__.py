"""Tests for the trail package."""
