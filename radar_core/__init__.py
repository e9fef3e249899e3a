"""
Radar Core Package.

Observer-relative positioning of nearby BLE peripherals and Wi-Fi access
points from signal strength and the observer's own movement.

Package structure:
- proto: Scan reports, readings, position and bearing schemas
- localization: Normalizer, path-loss model, accumulator, local frame,
  multilateration solver, bearing projector, engine facade
- domain: Presentation placement helpers (camera overlay, distance labels)
- metrics: Diagnostics, counters, histograms
"""

__version__ = "0.1.0"
__author__ = "MobilRadar Team"
