"""Objective functions for HVAC setpoint schedule optimization."""
