"""Package entry point for ``python -m caption_editor``.

WHY: Users run the editor as ``python -m caption_editor input.srt --to vtt``
without installing the console script.

HOW: Delegates to the CLI's main() function and exits with its return code.
"""

import sys

from caption_editor.cli import main

if __name__ == "__main__":
    sys.exit(main())
