"""Package entry point for ``python -m qencode_client``.

Delegates to the CLI's main() function.
"""

from qencode_client.cli import main

if __name__ == "__main__":
    main()
