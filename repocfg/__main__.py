"""
Punto de entrada: python -m repocfg
"""

from repocfg.cli.app import main

if __name__ == "__main__":
    main()
