"""General Utils entry point.

Supports: python -m general_utils
"""

from .app import main

if __name__ == "__main__":
    main()
