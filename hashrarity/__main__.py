"""
Allow `python -m hashrarity scan <repo>` without installing the script.
"""

from .cli import main

if __name__ == "__main__":
    main()
