"""
Scrims - identity and team services.
"""
