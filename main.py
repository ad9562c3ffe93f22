#!/usr/bin/env python3
"""
Multilingual Tutor - Translation & Grammar Help with Text-to-Speech

Run directly from a source checkout:  python main.py
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from multilingual_tutor.app import main

if __name__ == "__main__":
    main()
