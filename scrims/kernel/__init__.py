"""
Kernel - domain services, models and ports shared by the Scrims services.
"""
