"""
repocfg: lector y validador de atlantis.yaml por repositorio.
"""

__version__ = "1.0.0"
