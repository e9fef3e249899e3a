"""
Radar engine runtime configuration.
"""

# Engine configuration
ENGINE_CONFIG = {
    "ble_alpha": 0.8,                 # BLE smoothing weight of previous value
    "wifi_alpha": 0.6,                # Wi-Fi smoothing weight of previous value
    "ble_ref_strength_dbm": -59.0,    # BLE strength at 1 m
    "wifi_5ghz_scale": 1.3,           # Distance multiplier on 5 GHz channels
    "jump_ratio": 3.0,                # Max ratio between consecutive distances
    "max_consecutive_jumps": None,    # Rejected jumps before accepting movement (None: never)
    "min_movement_m": 0.3,            # Movement gate between stored readings
    "max_history": 50,                # Readings kept per emitter
    "stale_after_s": 15.0,            # Staleness window
    "heading_beta": 0.25,             # Heading smoothing weight of new delta
}

# Output configuration
OUTPUT_CONFIG = {
    "enable_console_print": True,     # Print projections to the console
    "print_interval": 5,              # Print every 5 simulation steps
    "enable_metrics_summary": True,   # Print metrics summary at the end
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# Simulated walk (for demo runs without radios)
SIMULATION_CONFIG = {
    "base_lat": 59.9139,
    "base_lon": 10.7522,
    "step_m": 0.5,                    # Observer displacement per step
    "step_s": 1.0,                    # Time per step
    "num_steps": 40,
    "rssi_noise_db": 2.0,             # Gaussian noise on simulated strength
    "seed": 7,
    # Emitters placed in the local frame (east, north) in meters
    "emitters": {
        "demo-1": {"name": "iPhone", "medium": "ble", "e": 3.0, "n": 2.0},
        "demo-2": {"name": "AirPods", "medium": "ble", "e": -4.0, "n": 3.0},
        "demo-3": {"name": "Watch", "medium": "ble", "e": 6.0, "n": -5.0},
        "demo-4": {"name": "Speaker", "medium": "ble", "e": 1.0, "n": 1.0},
        "wifi:aa:bb:cc:dd:ee:ff": {"name": "Office", "medium": "wifi", "e": -8.0, "n": -6.0,
                                   "frequency_mhz": 5180},
    },
}
