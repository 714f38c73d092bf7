#!/usr/bin/env python3
"""
MtgProxyBuilder - turn a card list into print-ready 3x3 proxy sheets.
"""

from main_logic import main

if __name__ == "__main__":
    main()
