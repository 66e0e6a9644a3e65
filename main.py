#!/usr/bin/env python3
"""Pomodo — entry point.

Run with:
    python main.py
    python -m pomodo
"""

from pomodo.__main__ import main


if __name__ == "__main__":
    main()
