# SPDX-License-Identifier: MIT

from recon.cleanup import register_cleanup
from recon.initialize import initialize
from recon.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
