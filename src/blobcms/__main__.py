"""Entry point for 'python -m blobcms' command.

This module allows the BlobCMS CLI to be invoked using
'python -m blobcms'.
"""

from blobcms.cli import main

if __name__ == "__main__":
    main()
