#!/usr/bin/env python3

"""
Run IntelForge with ``python -m intelforge``.
"""

from intelforge.main import main

if __name__ == "__main__":
    main()
