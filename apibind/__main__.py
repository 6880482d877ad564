"""
CLI entry point, when used as a module: `python -m apibind`.

Useful for debugging in the IDEs (use the start-mode "Module", module "apibind").
"""
from apibind import cli

if __name__ == '__main__':
    cli.main()
