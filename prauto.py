#!/usr/bin/env python
"""
Thin wrapper script to invoke the pr_automation CLI.

Running ``python prauto.py`` is equivalent to running the ``prauto``
console script installed via ``pyproject.toml``.
"""

from pr_automation.cli import main


if __name__ == "__main__":
    main(prog_name="prauto")
