#!/usr/bin/env python3
"""Respira — entry point.

Run with:
    python main.py
    python -m respira
"""

from respira.__main__ import main


if __name__ == "__main__":
    main()
