#!/usr/bin/env python3
"""
Outliner CLI - Turn paginated documents into verified section outlines

Commands:
    outliner build <pages>          Build, verify and repair an outline
    outliner show <outline.json>    Render a saved outline
    outliner config show|init       Inspect or create settings
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from dotenv import load_dotenv

from cli import main


if __name__ == '__main__':
    load_dotenv()
    main()
