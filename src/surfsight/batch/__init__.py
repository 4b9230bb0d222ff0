"""Batch Device Operations Module.

This module provides batch operations on SurfSight devices keyed by IMEI:
- Validate: look up each device's billing status
- Billing: set one billing status on a list of devices in one call
- Quality: set each device's data-quality profile

Architecture: Clean Architecture with Hexagonal (Ports & Adapters)
"""
